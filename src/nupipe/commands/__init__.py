"""CLI command implementations for nupipe.

Each command lives in its own module; cli.py registers them on the app.
"""

from .build import build
from .init import init
from .release import release
from .runs import runs
from .watch import watch

__all__ = ["build", "init", "release", "runs", "watch"]
