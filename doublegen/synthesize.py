"""Default body synthesis.

Turns a ReturnCategory into a body that type-checks for every return type of
that category:

    Empty              {}
    Concrete           unimplemented!("Interface::method")
    OpaqueIterator     ::core::iter::empty()
    OpaqueFuture(c)    async { <body for c> }
    UnsupportedOpaque  ::core::compile_error!("...")
"""

from __future__ import annotations

from doublegen.ast_nodes import (
    Body, EmptyBody, UnimplementedBody, EmptyIteratorBody, AsyncBlockBody,
    CompileErrorBody,
)
from doublegen.classify import (
    ReturnCategory, Empty, Concrete, OpaqueIterator, OpaqueFuture, UnsupportedOpaque,
)

UNSUPPORTED_OPAQUE_MESSAGE = (
    "opaque return types are unsupported except for impl Future and impl Iterator"
)


def synthesize(category: ReturnCategory, interface_name: str, method_name: str) -> Body:
    if isinstance(category, Empty):
        return EmptyBody()
    if isinstance(category, OpaqueIterator):
        return EmptyIteratorBody()
    if isinstance(category, OpaqueFuture):
        return AsyncBlockBody(inner=synthesize(category.inner, interface_name, method_name))
    if isinstance(category, UnsupportedOpaque):
        return CompileErrorBody(message=UNSUPPORTED_OPAQUE_MESSAGE)
    if isinstance(category, Concrete):
        return UnimplementedBody(interface_name=interface_name, method_name=method_name)
    raise TypeError(f"unknown return category {category!r}")
