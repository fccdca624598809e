from __future__ import annotations

import argparse
import os
import sys
from typing import Optional

from proto2slate.generator.slate_generator import (
    DEFAULT_TITLE,
    UnresolvedReferenceError,
    proto_stem,
    write_slate,
)
from proto2slate.parser.proto_parser import parse_proto_file


def default_output_path(proto_path: str) -> str:
    """``<cwd>/<proto base name up to the first dot>.md``."""
    return os.path.join(os.getcwd(), f"{proto_stem(proto_path)}.md")


def run(proto_path: str, output_path: Optional[str] = None, title: str = DEFAULT_TITLE) -> str:
    """Main pipeline: parse, render, write. Returns the output path."""
    output_path = output_path or default_output_path(proto_path)

    try:
        schema = parse_proto_file(proto_path)
    except OSError as e:
        print(f"FATAL: cannot read {proto_path}: {e}", file=sys.stderr)
        sys.exit(1)

    print(
        f"Parsed {proto_path}: {len(schema.services)} service(s), "
        f"{len(schema.messages)} message(s), {len(schema.enums)} enum(s)"
    )

    try:
        write_slate(schema, proto_path, output_path, title=title)
    except UnresolvedReferenceError as e:
        print(f"FATAL: {e.args[0]}", file=sys.stderr)
        sys.exit(1)

    print(f"slate markdown written to {output_path}")
    return output_path


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Generate Slate markdown API documentation from a .proto file",
    )
    parser.add_argument(
        "proto_file",
        nargs="?",
        help="Path to the .proto file to document",
    )
    parser.add_argument(
        "output",
        nargs="?",
        help="Output markdown path (defaults to <proto name>.md in the current directory)",
    )
    parser.add_argument(
        "--title",
        default=DEFAULT_TITLE,
        help=f"Document title in the front matter (default: {DEFAULT_TITLE})",
    )

    args = parser.parse_args(argv)
    if not args.proto_file:
        print("no proto file provided", file=sys.stderr)
        sys.exit(1)

    run(args.proto_file, args.output, args.title)


if __name__ == "__main__":
    main()
