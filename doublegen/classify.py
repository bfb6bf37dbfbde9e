"""Return-type classification.

Maps a method's declared return type onto a ReturnCategory, recursing into
the `Output` binding of `impl Future<..>` return types. The category decides
which default body can stand in for the method (see doublegen.synthesize).

Only the first trait bound of an opaque type is consulted:
`impl Send + Future<Output = u8>` is unsupported even though it names Future.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from doublegen.ast_nodes import (
    TypeExpr, TupleType, ParenType, ImplTraitType, TraitBound, BindingArg,
)
from doublegen.emit import emit_type
from doublegen.errors import CompileError, malformed_return_type

logger = logging.getLogger(__name__)

FUTURE_TRAITS = frozenset({"Future"})

# Every one of these is implemented by `core::iter::Empty`.
ITERATOR_TRAITS = frozenset({
    "Iterator", "DoubleEndedIterator", "ExactSizeIterator", "FusedIterator",
})


@dataclass(frozen=True)
class ReturnCategory:
    """Base class for return categories."""

    def __str__(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class Empty(ReturnCategory):
    """No return type, or the unit tuple."""


@dataclass(frozen=True)
class OpaqueFuture(ReturnCategory):
    inner: ReturnCategory

    def __str__(self) -> str:
        return f"OpaqueFuture({self.inner})"


@dataclass(frozen=True)
class OpaqueIterator(ReturnCategory):
    pass


@dataclass(frozen=True)
class Concrete(ReturnCategory):
    pass


@dataclass(frozen=True)
class UnsupportedOpaque(ReturnCategory):
    pass


def classify(return_type: Optional[TypeExpr], method_name: str = "") -> ReturnCategory:
    """Classify a declared return type.

    Raises CompileError when an opaque type names no trait bound at all.
    """
    if return_type is None:
        return Empty()
    while isinstance(return_type, ParenType):
        return_type = return_type.inner
    if isinstance(return_type, TupleType) and not return_type.elements:
        return Empty()
    if isinstance(return_type, ImplTraitType):
        return _classify_opaque(return_type, method_name)
    return Concrete()


def _classify_opaque(opaque: ImplTraitType, method_name: str) -> ReturnCategory:
    bound = next((b for b in opaque.bounds if isinstance(b, TraitBound)), None)
    if bound is None:
        raise CompileError(malformed_return_type(method_name, emit_type(opaque), opaque.location))

    capability = bound.capability
    if bound.modifier:
        return UnsupportedOpaque()
    if capability in FUTURE_TRAITS:
        output = _output_binding(bound)
        inner = classify(output, method_name) if output is not None else Concrete()
        return OpaqueFuture(inner)
    if capability in ITERATOR_TRAITS:
        return OpaqueIterator()
    logger.debug("method %s: unsupported opaque bound %s", method_name, capability)
    return UnsupportedOpaque()


def _output_binding(bound: TraitBound) -> Optional[TypeExpr]:
    for arg in bound.path.last.generic_args:
        if isinstance(arg, BindingArg) and arg.name == "Output" and not arg.generic_args:
            return arg.type
    return None
