"""Writes one flash card file per package."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Optional

from jinja2 import Template, TemplateError

from .docmodel import DocMode, build_package_doc
from .logging import get_logger
from .printer import DeclarationRenderError
from .syntax import FileSet, Package

_TEMP_PREFIX = "gopkgcards"

logger = get_logger("writer")


class DirectoryError(RuntimeError):
    """Raised when the output directory cannot be created."""


class PackageWriteError(RuntimeError):
    """Raised when a package's card file cannot be created or rendered."""


def ensure_output_dir(path: Path | str | None = None) -> Path:
    """Create the output directory, or a fresh temporary one when unset."""
    try:
        if path is None or str(path) == "":
            return Path(tempfile.mkdtemp(prefix=_TEMP_PREFIX))
        directory = Path(path).expanduser()
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryError(f"cannot create output directory {path or '<temp>'}: {exc}") from exc
    return directory


def write_pkg_cards(
    name: str,
    package: Package,
    fileset: FileSet,
    template: Template,
    prefix: str,
    out_dir: Path | str,
) -> Optional[Path]:
    """Render ``template`` for ``package`` into ``<out_dir>/<prefix><name>``.

    Packages named ``main`` are skipped and produce no file. A file that was
    partially written before a failure is left on disk.
    """
    if package.name == "main":
        logger.debug("Skipping package main")
        return None

    destination = Path(out_dir) / f"{prefix}{name}"
    doc = build_package_doc(package, "", DocMode.ALL_DECLS | DocMode.ALL_METHODS)
    try:
        with destination.open("w", encoding="utf-8") as handle:
            template.stream(pkg=doc, fileset=fileset).dump(handle)
    except OSError as exc:
        raise PackageWriteError(f"{destination}: {exc}") from exc
    except (TemplateError, DeclarationRenderError) as exc:
        raise PackageWriteError(f"package {name}: {exc}") from exc

    logger.debug("Wrote cards for package %s to %s", name, destination)
    return destination


__all__ = ["DirectoryError", "PackageWriteError", "ensure_output_dir", "write_pkg_cards"]
