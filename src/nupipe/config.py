"""Configuration management for nupipe.

Pipeline definitions are frozen models validated when they are built, so a
loaded config can be handed to any number of pipeline runs unchanged.
"""

import re
import tomllib
from pathlib import Path

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    CONFIG_FILE,
    DEFAULT_QUIET_PERIOD,
    PACK_TIMEOUT,
    PUSH_TIMEOUT,
)

_BASE_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+$")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ProjectConfig(_Frozen):
    """Package identity and version policy inputs."""

    name: str = "EdFi.Installer.AppCommon"
    description: str = "Commonly used PowerShell scripts for supporting application installations"
    authors: str = "Ed-Fi Alliance"
    base_version: str = "2.0.0"
    pre_release_label: str | None = "pre"

    @field_validator("base_version")
    @classmethod
    def _check_base_version(cls, value: str) -> str:
        if not _BASE_VERSION_RE.match(value):
            raise ValueError(f"base_version must be major.minor.patch, got {value!r}")
        return value

    @field_validator("pre_release_label")
    @classmethod
    def _blank_label_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value


class VcsConfig(_Frozen):
    """Source location and branch selection."""

    url: str | None = Field(default=None, description="Git URL; None copies the project tree")
    default_branch: str = "main"
    branch_filter: list[str] = Field(default_factory=lambda: ["+:main"])


class BuildConfig(_Frozen):
    """Build pipeline definition."""

    id: str = "build"
    name: str = "Build installer package"
    quiet_period: int = Field(default=DEFAULT_QUIET_PERIOD, ge=0)
    artifact_rules: list[str] | None = Field(
        default=None, description="Retained artifacts; defaults to **/<project name>*.nupkg"
    )
    should_publish_pre_release: bool = True
    clean_checkout: bool = True
    required_files: list[str] = Field(default_factory=list)
    include: list[str] = Field(default_factory=lambda: ["**/*.ps1", "**/*.psm1", "**/*.psd1"])
    nuspec: str | None = Field(default=None, description="nuspec template with $version$")
    pack_command: str | None = Field(default=None, description="External packaging command")
    timeout: int = Field(default=PACK_TIMEOUT, gt=0)


class ReleaseConfig(_Frozen):
    """Release pipeline definition."""

    id: str = "release"
    name: str = "Release installer package"
    include: list[str] = Field(default_factory=lambda: ["**/*.nupkg"])
    exclude: list[str] = Field(default_factory=lambda: ["**/*-pre*.nupkg"])
    timeout: int = Field(default=PUSH_TIMEOUT, gt=0)


class FeedConfig(_Frozen):
    """Package feed the pipelines push to."""

    endpoint: str = "https://pkgs.dev.azure.com/org/_packaging/feed/nuget/v3/index.json"
    username: str = "build-agent"
    token_env: str = "NUPIPE_FEED_TOKEN"
    push_command: str = "nuget push {artifact} -Source {endpoint} -ApiKey {api_key}"


class NupipeConfig(_Frozen):
    """Root configuration for nupipe."""

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    vcs: VcsConfig = Field(default_factory=VcsConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    release: ReleaseConfig = Field(default_factory=ReleaseConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)

    @property
    def build_artifact_rules(self) -> list[str]:
        """Artifact rules of the build, derived from the package name if unset."""
        if self.build.artifact_rules is not None:
            return list(self.build.artifact_rules)
        return [f"**/{self.project.name}*.nupkg"]


def load_config(state_dir: Path) -> NupipeConfig:
    """Load config from .nupipe/config.toml.

    Args:
        state_dir: Path to .nupipe directory

    Returns:
        Loaded configuration, or defaults if config.toml doesn't exist
    """
    config_path = state_dir / CONFIG_FILE
    if not config_path.exists():
        return NupipeConfig()
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return NupipeConfig.model_validate(data)


def write_config_template(state_dir: Path, package_name: str | None = None) -> Path:
    """Write default config.toml template.

    Args:
        state_dir: Path to .nupipe directory
        package_name: Package name to put in the template

    Returns:
        Path to the written config file
    """
    state_dir.mkdir(parents=True, exist_ok=True)
    config_path = state_dir / CONFIG_FILE
    defaults = NupipeConfig()
    name = package_name or defaults.project.name
    template = {
        "project": {
            "name": name,
            "description": defaults.project.description,
            "authors": defaults.project.authors,
            "base_version": defaults.project.base_version,
            "pre_release_label": defaults.project.pre_release_label,
        },
        "vcs": {
            "default_branch": defaults.vcs.default_branch,
            "branch_filter": list(defaults.vcs.branch_filter),
        },
        "build": {
            "quiet_period": defaults.build.quiet_period,
            "artifact_rules": [f"**/{name}*.nupkg"],
            "should_publish_pre_release": defaults.build.should_publish_pre_release,
            "clean_checkout": True,
            "include": list(defaults.build.include),
        },
        "release": {
            "include": list(defaults.release.include),
            "exclude": list(defaults.release.exclude),
        },
        # The token itself is read from the environment variable named here
        "feed": {
            "endpoint": defaults.feed.endpoint,
            "username": defaults.feed.username,
            "token_env": defaults.feed.token_env,
            "push_command": defaults.feed.push_command,
        },
    }
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path
