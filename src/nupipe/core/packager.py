"""Artifact packager: sources + version -> one versioned .nupkg."""

import hashlib
import logging
from pathlib import Path

from ..constants import PACK_TIMEOUT
from ..errors import PackagingError, PipelineError
from ..models import Artifact, Version, artifact_file_name
from ..services.nupkg import (
    collect_sources,
    fill_nuspec_template,
    render_nuspec,
    write_nupkg,
)
from ..services.process import render_command, run_command
from .artifact_filter import ArtifactRules

logger = logging.getLogger(__name__)


class ArtifactPackager:
    """Packs a source tree into <PackageName>.<version>.nupkg.

    With no command configured the package is written by the built-in
    deterministic writer; otherwise the command is run as an opaque packaging
    step and must leave the expected file in the output directory.
    """

    def __init__(
        self,
        package_name: str,
        output_dir: Path,
        include: tuple[str, ...] = ("**/*.ps1",),
        required_files: tuple[str, ...] = (),
        nuspec: str | None = None,
        command: str | None = None,
        description: str = "",
        authors: str = "",
        timeout: int = PACK_TIMEOUT,
    ) -> None:
        self.package_name = package_name
        self.output_dir = output_dir
        self.include = ArtifactRules(include=tuple(include))
        self.required_files = tuple(required_files)
        self.nuspec = nuspec
        self.command = command
        self.description = description or package_name
        self.authors = authors or package_name
        self.timeout = timeout

    def pack(self, source_root: Path, version: Version) -> Artifact:
        """Produce the artifact for one version.

        Raises:
            PackagingError: If sources are missing or the packaging step fails
        """
        missing = [f for f in self.required_files if not (source_root / f).is_file()]
        if missing:
            raise PackagingError(f"Missing required source files: {', '.join(missing)}")

        file_name = artifact_file_name(self.package_name, version)
        output_path = self.output_dir / file_name
        self.output_dir.mkdir(parents=True, exist_ok=True)

        if self.command:
            self._run_command(source_root, version)
            if not output_path.is_file():
                raise PackagingError(f"Packaging command did not produce {file_name}")
        else:
            self._write_builtin(source_root, version, output_path)

        payload = output_path.read_bytes()
        logger.info("Packed %s (%d bytes)", file_name, len(payload))
        return Artifact(
            name=self.package_name,
            version=version,
            file_name=file_name,
            payload=payload,
            sha256=hashlib.sha256(payload).hexdigest(),
            is_pre_release=version.is_pre_release,
        )

    def _write_builtin(self, source_root: Path, version: Version, output_path: Path) -> None:
        files = collect_sources(source_root, self.include.accepts, skip=(self.output_dir,))
        if not files:
            raise PackagingError(f"No files under {source_root} match {list(self.include.include)}")

        rendered = version.render()
        if self.nuspec:
            template_path = source_root / self.nuspec
            if not template_path.is_file():
                raise PackagingError(f"nuspec template not found: {self.nuspec}")
            nuspec = fill_nuspec_template(template_path.read_text(encoding="utf-8"), rendered)
            files = [f for f in files if f != Path(self.nuspec).as_posix()]
        else:
            nuspec = render_nuspec(self.package_name, rendered, self.description, self.authors)

        try:
            write_nupkg(output_path, f"{self.package_name}.nuspec", nuspec, source_root, files)
        except OSError as e:
            raise PackagingError(f"Cannot write {output_path.name}: {e}") from e

    def _run_command(self, source_root: Path, version: Version) -> None:
        assert self.command is not None
        values = {
            "source_root": str(source_root),
            "output_dir": str(self.output_dir),
            "package_name": self.package_name,
            "base_version": version.base,
            "build_counter": version.build_counter,
            "pre_release_label": version.pre_release_label or "",
            "version": version.render(),
        }
        try:
            args = render_command(self.command, values)
        except PipelineError as e:
            raise PackagingError(str(e)) from e
        run_command(args, cwd=source_root, timeout=self.timeout, error_class=PackagingError)
