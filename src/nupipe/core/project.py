"""Project factory: turns a validated config into wired pipelines."""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from ..config import NupipeConfig, load_config
from ..constants import STATE_DIR
from ..models import FeedCredential, InvocationInput
from ..services.credentials import resolve_credential
from ..services.feed import FeedPusher
from .artifact_filter import ArtifactRules
from .build_pipeline import BuildPipeline
from .packager import ArtifactPackager
from .release_pipeline import ReleasePipeline
from .run_history import FileRunHistory, RunHistory
from .trigger import BranchFilter, QuietPeriodTrigger


@dataclass(frozen=True)
class Project:
    """The pipelines of one project and the services they share."""

    root: Path
    config: NupipeConfig
    history: RunHistory
    build: BuildPipeline
    release: ReleasePipeline

    @property
    def state_dir(self) -> Path:
        return self.root / STATE_DIR

    def make_trigger(self) -> QuietPeriodTrigger:
        return QuietPeriodTrigger(
            quiet_period=self.config.build.quiet_period,
            branch_filter=BranchFilter.from_rules(self.config.vcs.branch_filter),
        )

    def make_invocation(
        self,
        build_counter: int | None = None,
        pre_release_label: str | None = None,
        should_publish: bool | None = None,
        credential_ref: str | None = None,
    ) -> InvocationInput:
        """Invocation input from config defaults and explicit overrides."""
        project = self.config.project
        return InvocationInput(
            base_version=project.base_version,
            build_counter=build_counter,
            pre_release_label=(
                pre_release_label if pre_release_label is not None else project.pre_release_label
            ),
            should_publish=(
                should_publish
                if should_publish is not None
                else self.config.build.should_publish_pre_release
            ),
            feed_endpoint=self.config.feed.endpoint,
            feed_credential_ref=credential_ref or self.config.feed.token_env,
        )

    def credential_for(
        self, invocation: InvocationInput, environ: Mapping[str, str] | None = None
    ) -> FeedCredential | None:
        assert invocation.feed_credential_ref is not None
        return resolve_credential(
            endpoint=invocation.feed_endpoint or self.config.feed.endpoint,
            username=self.config.feed.username,
            credential_ref=invocation.feed_credential_ref,
            environ=environ,
        )


def create_project(
    config: NupipeConfig,
    root: Path,
    history: RunHistory | None = None,
    pusher: FeedPusher | None = None,
) -> Project:
    """Build the project's pipelines.

    Args:
        config: Validated configuration
        root: Project root containing .nupipe
        history: Run history service (defaults to the on-disk history)
        pusher: Feed pusher (defaults to the configured push command)
    """
    state_dir = root / STATE_DIR
    history = history or FileRunHistory(state_dir)
    build_cfg = config.build
    workspace = state_dir / "work" / build_cfg.id

    packager = ArtifactPackager(
        package_name=config.project.name,
        output_dir=workspace / "out",
        include=tuple(build_cfg.include),
        required_files=tuple(build_cfg.required_files),
        nuspec=build_cfg.nuspec,
        command=build_cfg.pack_command,
        description=config.project.description,
        authors=config.project.authors,
        timeout=build_cfg.timeout,
    )
    build_pusher = pusher or FeedPusher(config.feed.push_command, timeout=config.release.timeout)
    build = BuildPipeline(
        pipeline_id=build_cfg.id,
        project_root=root,
        state_dir=state_dir,
        workspace=workspace,
        history=history,
        packager=packager,
        pusher=build_pusher,
        artifact_rules=ArtifactRules.parse(config.build_artifact_rules),
        vcs_url=config.vcs.url,
        default_branch=config.vcs.default_branch,
        clean_checkout=build_cfg.clean_checkout,
    )
    release = ReleasePipeline(
        pipeline_id=config.release.id,
        source_pipeline_id=build_cfg.id,
        state_dir=state_dir,
        history=history,
        pusher=build_pusher,
        rules=ArtifactRules(
            include=tuple(config.release.include), exclude=tuple(config.release.exclude)
        ),
    )
    return Project(root=root, config=config, history=history, build=build, release=release)


def find_project_root(start: Path | None = None) -> Path | None:
    """Nearest directory at or above start that contains .nupipe/."""
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / STATE_DIR).is_dir():
            return candidate
    return None


def load_project(root: Path) -> Project:
    """Load .nupipe/config.toml under root and build the project."""
    return create_project(load_config(root / STATE_DIR), root)
