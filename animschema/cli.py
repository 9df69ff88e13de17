# animschema/cli.py
"""Command line entry point: translate a scene document or script to schema JSON."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .ir_types import GraphError
from .loader import load_graph_file
from .parser import ParseError, parse_file
from .translate import TranslationError, tree_to_schema
from .validator import validate

log = logging.getLogger(__name__)

SCRIPT_SUFFIXES = {".scene", ".txt"}


def load_any(path: Path):
    if path.suffix.lower() in SCRIPT_SUFFIXES:
        return parse_file(path)
    return load_graph_file(path)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="animschema",
        description="Translate an animation scene graph into a flat JSON schema.")
    p.add_argument("input", type=Path, help="scene document (.json) or scene script (.scene)")
    p.add_argument("-o", "--output", type=Path, help="write schema here instead of stdout")
    p.add_argument("--indent", type=int, default=None, help="pretty-print with this indent")
    p.add_argument("--no-validate", action="store_true", help="skip structural validation")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    try:
        graph = load_any(args.input)
        if not args.no_validate:
            validate(graph)
        schema = tree_to_schema(graph)
    except (ParseError, GraphError, TranslationError, OSError, json.JSONDecodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    text = json.dumps(schema, indent=args.indent)
    if args.output:
        args.output.write_text(text + "\n", encoding="utf-8")
        log.info("wrote %s (%d animations)", args.output, len(schema["animations"]))
    else:
        sys.stdout.write(text + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
