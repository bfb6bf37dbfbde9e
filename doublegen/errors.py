"""Structured error objects for doublegen.

Every error is machine-readable. Each error carries enough context for the
caller to render it as a located compile-time diagnostic.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    SYNTAX_ERROR = "syntax_error"
    NAME_ERROR = "name_error"
    MALFORMED_RETURN_TYPE = "malformed_return_type"
    CONFIG_ERROR = "config_error"
    INTERNAL_ERROR = "internal_error"


@dataclass
class SourceLocation:
    line: int
    column: int
    file: str = "<stdin>"

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass
class DoubleError:
    kind: ErrorKind
    message: str
    location: Optional[SourceLocation] = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.location:
            d["location"] = {
                "file": self.location.file,
                "line": self.location.line,
                "column": self.location.column,
            }
        if self.details:
            d["details"] = self.details
        return d

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __str__(self) -> str:
        loc = f" at {self.location}" if self.location else ""
        return f"[{self.kind.value}]{loc}: {self.message}"


def syntax_error(
    message: str,
    location: Optional[SourceLocation] = None,
) -> DoubleError:
    return DoubleError(
        kind=ErrorKind.SYNTAX_ERROR,
        message=message,
        location=location,
    )


def name_error(
    name: str,
    reason: str,
    location: Optional[SourceLocation] = None,
) -> DoubleError:
    return DoubleError(
        kind=ErrorKind.NAME_ERROR,
        message=f"Invalid interface name '{name}': {reason}",
        location=location,
        details={"name": name},
    )


def malformed_return_type(
    method_name: str,
    return_type: str,
    location: Optional[SourceLocation] = None,
) -> DoubleError:
    return DoubleError(
        kind=ErrorKind.MALFORMED_RETURN_TYPE,
        message=f"Opaque return type '{return_type}' of method '{method_name}' "
                f"names no trait bound",
        location=location,
        details={
            "method": method_name,
            "return_type": return_type,
        },
    )


def config_error(
    key: str,
    expected: str,
    actual: Any,
    path: Optional[str] = None,
) -> DoubleError:
    details: dict[str, Any] = {"key": key, "expected": expected}
    if path:
        details["path"] = path
    return DoubleError(
        kind=ErrorKind.CONFIG_ERROR,
        message=f"Config key '{key}' expects {expected}, got {type(actual).__name__}",
        details=details,
    )


def rust_string_literal(text: str) -> str:
    """Quote text as a Rust string literal."""
    out = []
    for ch in text:
        if ch == "\\":
            out.append("\\\\")
        elif ch == '"':
            out.append('\\"')
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\r":
            out.append("\\r")
        elif ch == "\t":
            out.append("\\t")
        elif ord(ch) < 0x20:
            out.append(f"\\u{{{ord(ch):x}}}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


class CompileError(Exception):
    """Exception wrapping one or more DoubleErrors."""

    def __init__(self, errors: list[DoubleError] | DoubleError):
        if isinstance(errors, DoubleError):
            errors = [errors]
        self.errors = errors
        super().__init__(self._format())

    def _format(self) -> str:
        return "\n".join(str(e) for e in self.errors)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps([e.to_dict() for e in self.errors], indent=indent)

    def to_compile_error(self) -> str:
        """Render as Rust `compile_error!` items, one per error."""
        lines = []
        for e in self.errors:
            msg = f"{e.location}: {e.message}" if e.location else e.message
            lines.append(f"::core::compile_error!({rust_string_literal(msg)});")
        return "\n".join(lines)
