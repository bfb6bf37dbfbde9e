"""doublegen CLI: command-line interface for the trait double generator.

Commands:
  doublegen double <Name> <file.rs>    Shadow trait, adapter and placeholder impls
  doublegen dummies <file.rs>          Trait with synthesized defaults, placeholder impl
  doublegen classify <file.rs>         Return category of every method (JSON)

<file.rs> holds a single trait declaration; `-` reads it from stdin.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Callable, Optional

from doublegen import __version__
from doublegen.ast_nodes import InterfaceDeclaration
from doublegen.config import DoublegenConfig, FORMATS, load_config
from doublegen.errors import CompileError
from doublegen.expand import Expansion, classify_methods, expand, expand_dummies
from doublegen.formatters import format_classification, format_error, format_expansion
from doublegen.parser import parse_trait

logger = logging.getLogger(__name__)


def _read_source(path: str) -> tuple[str, str]:
    if path == "-":
        return sys.stdin.read(), "<stdin>"
    with open(path, "r", encoding="utf-8") as f:
        return f.read(), path


def _write(text: str, output: Optional[str]) -> None:
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
        logger.info("wrote %s", output)
    else:
        sys.stdout.write(text if text.endswith("\n") else text + "\n")


def _load(args: argparse.Namespace) -> DoublegenConfig:
    """Config file settings, overridden by command-line flags."""
    config = load_config(args.config)
    if args.marker:
        config.marker_type = args.marker
    if getattr(args, "blanket_param", None):
        config.blanket_param = args.blanket_param
    if args.format:
        config.format = args.format
    if args.emit_compile_error:
        config.emit_compile_error = True
    return config


def _run(args: argparse.Namespace,
         generate: Callable[[InterfaceDeclaration, DoublegenConfig], Expansion]) -> int:
    if args.file != "-" and not os.path.isfile(args.file):
        print(json.dumps({"error": f"File not found: {args.file}"}))
        return 1

    try:
        config = _load(args)
    except CompileError as e:
        print(format_error(e, args.format or "rust"), file=sys.stderr)
        return 1

    try:
        source, filename = _read_source(args.file)
        expansion = generate(parse_trait(source, filename), config)
    except CompileError as e:
        if config.emit_compile_error:
            _write(e.to_compile_error(), args.output)
        else:
            print(format_error(e, config.format), file=sys.stderr)
        return 1

    _write(format_expansion(expansion, config.format), args.output)
    return 0


def cmd_double(args: argparse.Namespace) -> int:
    """Generate the shadow trait, the forwarding adapter and the placeholder impl."""
    return _run(args, lambda decl, config: expand(args.name, decl, config))


def cmd_dummies(args: argparse.Namespace) -> int:
    """Give the trait default bodies in place and implement it for the marker type."""
    return _run(args, expand_dummies)


def cmd_classify(args: argparse.Namespace) -> int:
    """Report the return category of every method."""
    if args.file != "-" and not os.path.isfile(args.file):
        print(json.dumps({"error": f"File not found: {args.file}"}))
        return 1
    try:
        source, filename = _read_source(args.file)
        report = classify_methods(parse_trait(source, filename))
    except CompileError as e:
        print(format_error(e, args.format or "json"), file=sys.stderr)
        return 1
    print(format_classification(report, args.format or "json"))
    return 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument("--format", choices=FORMATS, default=None,
                   help="Output format (default: rust, or the config file's)")
    p.add_argument("--marker", default=None,
                   help="Path of the marker type (default: double_trait::Dummy)")
    p.add_argument("--config", default=None, help="Config file (default: nearest .doublegenrc.yml)")
    p.add_argument("--emit-compile-error", action="store_true", dest="emit_compile_error",
                   help="Write failures as compile_error! items instead of failing loudly")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="doublegen",
        description="Generate test-double traits for Rust trait declarations",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # double
    p_double = subparsers.add_parser("double", help="Generate a shadow trait with default bodies")
    p_double.add_argument("name", help="Name of the generated shadow trait")
    p_double.add_argument("file", help="Rust source holding one trait declaration, or -")
    p_double.add_argument("--blanket-param", dest="blanket_param", default=None,
                          help="Type parameter of the adapter impl (default: T)")
    _add_common(p_double)
    p_double.set_defaults(func=cmd_double)

    # dummies
    p_dummies = subparsers.add_parser("dummies", help="Add default bodies to the trait itself")
    p_dummies.add_argument("file", help="Rust source holding one trait declaration, or -")
    _add_common(p_dummies)
    p_dummies.set_defaults(func=cmd_dummies)

    # classify
    p_classify = subparsers.add_parser("classify", help="Report the return category of every method")
    p_classify.add_argument("file", help="Rust source holding one trait declaration, or -")
    p_classify.add_argument("--format", choices=["json", "pretty"], default=None,
                            help="Output format (default: json)")
    p_classify.set_defaults(func=cmd_classify)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
