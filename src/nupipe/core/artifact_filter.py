"""Include/exclude artifact rules.

Rules are globs matched against artifact paths relative to their run's
artifact folder. A rule may carry a TeamCity-style prefix: ``+:`` includes
and ``-:`` excludes. Exclusions always win over inclusions. A leading
``**/`` also matches files at the top level, and a pattern without a slash
matches the file name at any depth.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import PurePosixPath


def matches(path: str, pattern: str) -> bool:
    """Return True if the relative path matches the glob pattern."""
    path = path.replace("\\", "/")
    name = PurePosixPath(path).name
    if fnmatchcase(path, pattern):
        return True
    if pattern.startswith("**/"):
        return matches(path, pattern[3:]) or fnmatchcase(name, pattern[3:])
    return "/" not in pattern and fnmatchcase(name, pattern)


@dataclass(frozen=True)
class ArtifactRules:
    """Include and exclude globs for selecting artifacts."""

    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()

    @classmethod
    def parse(cls, rules: Iterable[str]) -> "ArtifactRules":
        """Build rules from ``+:glob`` / ``-:glob`` lines (no prefix means include).

        A ``=> target`` suffix on a rule is dropped.
        """
        include: list[str] = []
        exclude: list[str] = []
        for raw in rules:
            for line in raw.splitlines():
                rule = line.split("=>")[0].strip()
                if not rule:
                    continue
                if rule.startswith("-:"):
                    exclude.append(rule[2:].strip())
                elif rule.startswith("+:"):
                    include.append(rule[2:].strip())
                else:
                    include.append(rule)
        return cls(include=tuple(include), exclude=tuple(exclude))

    def accepts(self, path: str) -> bool:
        if any(matches(path, pattern) for pattern in self.exclude):
            return False
        return any(matches(path, pattern) for pattern in self.include)

    def select(self, paths: Iterable[str]) -> list[str]:
        """Filter paths, keeping their order."""
        return [p for p in paths if self.accepts(p)]


def filter_names(names: Iterable[str], include: Iterable[str], exclude: Iterable[str]) -> list[str]:
    """Apply include/exclude globs to names; exclude wins when both match."""
    return ArtifactRules(include=tuple(include), exclude=tuple(exclude)).select(names)
