"""Deterministic NuGet package writer.

A .nupkg is a zip holding a .nuspec manifest and the package content. Entries
are written in sorted order with a fixed timestamp and fixed permissions, so
packing unchanged sources at an unchanged version yields identical bytes.
"""

import os
import xml.etree.ElementTree as ET
import zipfile
from collections.abc import Callable, Iterable
from pathlib import Path

NUSPEC_NAMESPACE = "http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd"
FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)
VERSION_TOKEN = "$version$"

CONTENT_TYPES = b"""<?xml version="1.0" encoding="utf-8"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
  <Default Extension="nuspec" ContentType="application/octet" />
  <Default Extension="ps1" ContentType="application/octet" />
  <Default Extension="psm1" ContentType="application/octet" />
  <Default Extension="psd1" ContentType="application/octet" />
</Types>
"""

SKIP_DIRS = frozenset({".git", ".nupipe"})


def collect_sources(
    source_root: Path,
    accept: Callable[[str], bool],
    skip: Iterable[Path] = (),
) -> list[str]:
    """List files under source_root accepted by a path predicate.

    Args:
        source_root: Directory to scan
        accept: Predicate on POSIX paths relative to source_root
        skip: Directories (absolute) whose contents are never packed

    Returns:
        Sorted relative POSIX paths
    """
    skipped = {p.resolve() for p in skip}
    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(source_root):
        current = Path(dirpath)
        dirnames[:] = [
            d for d in dirnames if d not in SKIP_DIRS and (current / d).resolve() not in skipped
        ]
        for filename in filenames:
            rel = (current / filename).relative_to(source_root).as_posix()
            if accept(rel):
                found.append(rel)
    return sorted(found)


def render_nuspec(package_id: str, version: str, description: str, authors: str) -> bytes:
    """Generate a minimal nuspec manifest."""
    package = ET.Element("package", xmlns=NUSPEC_NAMESPACE)
    metadata = ET.SubElement(package, "metadata")
    for tag, text in (
        ("id", package_id),
        ("version", version),
        ("authors", authors),
        ("description", description),
    ):
        ET.SubElement(metadata, tag).text = text
    ET.indent(package)
    return ET.tostring(package, encoding="utf-8", xml_declaration=True) + b"\n"


def fill_nuspec_template(template: str, version: str) -> bytes:
    """Replace the NuGet $version$ token in a nuspec template."""
    return template.replace(VERSION_TOKEN, version).encode("utf-8")


def _entry(name: str) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, date_time=FIXED_DATE_TIME)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = 0o644 << 16
    info.create_system = 3
    return info


def write_nupkg(
    output_path: Path,
    nuspec_name: str,
    nuspec: bytes,
    source_root: Path,
    files: Iterable[str],
) -> Path:
    """Write the package zip atomically.

    Args:
        output_path: Destination .nupkg path
        nuspec_name: Archive name of the manifest (e.g. "Pkg.nuspec")
        nuspec: Manifest bytes
        source_root: Root the file paths are relative to
        files: Relative POSIX paths of content files

    Returns:
        output_path
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = output_path.with_name(output_path.name + ".tmp")
    with zipfile.ZipFile(tmp_path, "w") as archive:
        archive.writestr(_entry("[Content_Types].xml"), CONTENT_TYPES)
        archive.writestr(_entry(nuspec_name), nuspec)
        for rel in sorted(files):
            archive.writestr(_entry(f"content/{rel}"), (source_root / rel).read_bytes())
    os.replace(tmp_path, output_path)
    return output_path
