"""Resolved package version model."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Version(BaseModel):
    """A package version built from a base version, build counter and label.

    Attributes:
        base: Three-component numeric base version (e.g. "2.0.0").
        build_counter: Externally supplied, monotonically increasing counter.
        pre_release_label: Optional pre-release label (e.g. "pre").
    """

    model_config = ConfigDict(frozen=True)

    base: str = Field(pattern=r"^\d+\.\d+\.\d+$", description="major.minor.patch")
    build_counter: int = Field(ge=0, description="Build counter")
    pre_release_label: str | None = Field(default=None, description="Pre-release label")

    @field_validator("pre_release_label")
    @classmethod
    def _blank_label_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @property
    def parts(self) -> tuple[int, int, int]:
        major, minor, patch = (int(p) for p in self.base.split("."))
        return major, minor, patch

    @property
    def is_pre_release(self) -> bool:
        return self.pre_release_label is not None

    def render(self) -> str:
        """Render as base-label.counter, or base.counter without a label."""
        if self.pre_release_label:
            return f"{self.base}-{self.pre_release_label}.{self.build_counter}"
        return f"{self.base}.{self.build_counter}"

    def sort_key(self) -> tuple[tuple[int, int, int], str, int]:
        """Ordering key; increases with build_counter for a fixed base and label."""
        return self.parts, self.pre_release_label or "", self.build_counter

    def __lt__(self, other: "Version") -> bool:
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        return self.render()
