"""Pipeline orchestration from a Go source directory to card files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .logging import get_logger
from .parser import GoParser
from .templates import load_template
from .writer import ensure_output_dir, write_pkg_cards


@dataclass
class GenerationResult:
    """Outcome of a card generation run."""

    source_dir: Path
    output_dir: Path
    written: List[Path] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


class CardGenerator:
    """Parses a source directory and writes one card file per package."""

    def __init__(
        self,
        parser: GoParser | None = None,
        echo: Callable[[str], None] | None = None,
    ) -> None:
        self.parser = parser or GoParser()
        self.echo = echo or print
        self.logger = get_logger("orchestrator")

    def run(
        self,
        src: str | Path,
        out_dir: str | Path | None = None,
        prefix: str = "",
        template_path: str | Path | None = None,
    ) -> GenerationResult:
        """Generate card files for every non-main package under ``src``.

        Stops at the first failing package; files written before the failure
        stay on disk.
        """
        source_dir = Path(src).expanduser()
        fileset, packages = self.parser.parse_dir(source_dir)
        self.logger.debug("Parsed %d file(s) into %d package(s)", len(fileset), len(packages))

        template = load_template(template_path)
        output_dir = ensure_output_dir(out_dir)

        self.echo(f"input: {source_dir}")
        self.echo(f"output: {output_dir}")
        self.echo("generating...")

        result = GenerationResult(source_dir=source_dir, output_dir=output_dir)
        for name in sorted(packages):
            package = packages[name]
            written: Optional[Path] = write_pkg_cards(
                name, package, fileset, template, prefix, output_dir
            )
            if written is None:
                result.skipped.append(name)
            else:
                result.written.append(written)

        self.echo("done")
        return result


__all__ = ["CardGenerator", "GenerationResult"]
