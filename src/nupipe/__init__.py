"""nupipe: build and release pipeline for NuGet-packaged installer scripts."""

__version__ = "0.1.0"
