"""doublegen Output Formatters.

Provides multiple output modes:
    rust    the generated Rust source (default)
    json    machine-readable fragments or errors
    pretty  colored, one header per fragment; errors with locations
"""

from __future__ import annotations

import json
import os
import sys
from typing import Any, Dict, List

from doublegen.errors import CompileError
from doublegen.expand import Expansion


# ── ANSI color helpers ───────────────────────────────────────────────────

_NO_COLOR = os.environ.get("NO_COLOR") is not None or not sys.stdout.isatty()


def _c(code: str, text: str) -> str:
    if _NO_COLOR:
        return text
    return f"\033[{code}m{text}\033[0m"


def red(t: str) -> str:
    return _c("31", t)


def green(t: str) -> str:
    return _c("32", t)


def cyan(t: str) -> str:
    return _c("36", t)


def bold(t: str) -> str:
    return _c("1", t)


def dim(t: str) -> str:
    return _c("2", t)


ICON_ERROR = red("✖")
ICON_OK = green("✔")


# ── Expansions ───────────────────────────────────────────────────────────

def format_expansion(expansion: Expansion, fmt: str = "rust") -> str:
    if fmt == "json":
        return expansion.to_json()
    if fmt == "pretty":
        return format_pretty(expansion)
    return expansion.render()


def format_pretty(expansion: Expansion) -> str:
    lines: List[str] = []
    for fragment in expansion.fragments:
        lines.append(f"{ICON_OK}  {bold(fragment.kind.value)} {dim('·')} {cyan(fragment.name)}")
        lines.append(fragment.source)
        lines.append("")
    return "\n".join(lines)


# ── Errors ───────────────────────────────────────────────────────────────

def format_error(error: CompileError, fmt: str = "rust") -> str:
    if fmt == "json":
        return error.to_json()
    lines: List[str] = []
    for e in error.errors:
        loc = f"{dim(str(e.location))}  " if e.location else ""
        lines.append(f"{ICON_ERROR}  {loc}{red(e.message)}")
    return "\n".join(lines)


# ── Classification report ────────────────────────────────────────────────

def format_classification(report: List[Dict[str, Any]], fmt: str = "json") -> str:
    if fmt != "pretty":
        return json.dumps(report, indent=2)
    width = max((len(r["method"]) for r in report), default=0)
    lines = []
    for r in report:
        prefix = "async " if r["async"] else ""
        lines.append(f"  {cyan(r['method'].ljust(width))}  {dim(prefix)}{r['category']}")
    return "\n".join(lines)
