"""doublegen: test-double traits for Rust, generated from the trait itself."""

__version__ = "0.1.0"

from doublegen.errors import CompileError, DoubleError
from doublegen.parser import parse_trait
from doublegen.expand import (
    Expansion, FragmentKind, GeneratedFragment,
    expand, expand_dummies, expand_source, expand_dummies_source,
    expand_or_compile_error,
)
