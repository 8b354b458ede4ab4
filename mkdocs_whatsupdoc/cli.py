"""Command line entry point: ``whatsupdoc CONFIG [-v]``."""

from __future__ import annotations

import argparse
import logging
import sys

from . import __version__
from .config import ConfigError, load_config, validate
from .extractor import Extractor
from .output import write_json
from .parser import extract_project

log = logging.getLogger("mkdocs.plugins.whatsupdoc")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="whatsupdoc",
        description="Extract EScript binding documentation from C++ sources into JSON.",
    )
    parser.add_argument("config", help="path to the KEY = VALUE config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )

    try:
        cfg = load_config(args.config)
        validate(cfg)
    except ConfigError as exc:
        log.error("whatsupdoc: %s", exc)
        return 1

    extractor = Extractor()
    nfiles = extract_project(cfg, extractor)
    write_json(extractor.registry, cfg.output_path)
    log.info(
        "whatsupdoc: %d file(s) parsed, %d diagnostic(s)", nfiles, len(extractor.diagnostics)
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
