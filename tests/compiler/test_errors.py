"""doublegen Structured Error Tests: ERR-001 through ERR-002."""

import json

from doublegen.errors import (
    CompileError, ErrorKind, SourceLocation, malformed_return_type, name_error,
    rust_string_literal, syntax_error,
)


class TestERR001:
    """ERR-001: Errors are machine-readable.
    Priority: P0
    """

    def test_to_dict(self):
        """priority_p0: Kind, message, location and details."""
        err = malformed_return_type("run", "impl 'static", SourceLocation(3, 17, "lib.rs"))
        assert err.to_dict() == {
            "kind": "malformed_return_type",
            "message": "Opaque return type 'impl 'static' of method 'run' names no trait bound",
            "location": {"file": "lib.rs", "line": 3, "column": 17},
            "details": {"method": "run", "return_type": "impl 'static"},
        }

    def test_str(self):
        """priority_p0: Human-readable form."""
        err = name_error("fn", "reserved word")
        assert str(err) == "[name_error]: Invalid interface name 'fn': reserved word"

    def test_compile_error_json(self):
        """priority_p1: CompileError wraps one or more errors."""
        exc = CompileError([syntax_error("a"), syntax_error("b")])
        assert [e["message"] for e in json.loads(exc.to_json())] == ["a", "b"]
        assert exc.errors[0].kind == ErrorKind.SYNTAX_ERROR


class TestERR002:
    """ERR-002: compile_error! rendering.
    Priority: P0
    """

    def test_located(self):
        """priority_p0: The location prefixes the message."""
        exc = CompileError(syntax_error("Unexpected '}'", SourceLocation(2, 5, "a.rs")))
        assert exc.to_compile_error() == "::core::compile_error!(\"a.rs:2:5: Unexpected '}'\");"

    def test_escaping(self):
        """priority_p0: Quotes, backslashes and control characters are escaped."""
        assert rust_string_literal('say "hi"\\\n\t\x01') == '"say \\"hi\\"\\\\\\n\\t\\u{1}"'
