"""CLI entrypoint for gocards."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import load_config
from .logging import configure_logging
from .orchestrator import CardGenerator
from .templates import DEFAULT_TEMPLATE


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gocards",
        description="Generate flash cards from the exported declarations of Go packages.",
    )
    parser.add_argument(
        "--src",
        default=".",
        help="Path to Go source code (defaults to current directory).",
    )
    parser.add_argument(
        "--out",
        default=None,
        help="Path to output directory (defaults to a new temporary directory).",
    )
    parser.add_argument(
        "--prefix",
        default=None,
        help="Prefix for output files.",
    )
    parser.add_argument(
        "--tmpl",
        default=None,
        help="Path to card template file.",
    )
    parser.add_argument(
        "--deftmpl",
        action="store_true",
        help="Print default template to stdout and exit.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a .gocards.yml file (defaults to the one in --src).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for gocards."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # If the caller requested the default template, print it and exit.
    if args.deftmpl:
        print(DEFAULT_TEMPLATE)
        parser.exit(0)

    try:
        if args.config:
            config = load_config(Path(args.config), required=True)
        else:
            config = load_config(Path(args.src))
        configure_logging(
            level=config.log_level,
            verbose=bool(args.verbose),
            log_file=config.log_file,
        )

        out_dir = args.out if args.out is not None else config.output_dir
        prefix = args.prefix if args.prefix is not None else (config.prefix or "")
        template_path = args.tmpl if args.tmpl is not None else config.template

        CardGenerator().run(
            args.src,
            out_dir=out_dir,
            prefix=prefix,
            template_path=template_path,
        )
    except (RuntimeError, OSError) as exc:
        parser.exit(1, f"{exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
