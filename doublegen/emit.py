"""doublegen Emit: declarations to Rust source text.

Rendering is deterministic: the same declaration always yields the same text.
Verbatim parts (attributes, default bodies, other trait items) are emitted as
they appeared in the source.
"""

from __future__ import annotations

from typing import Optional

from doublegen.ast_nodes import (
    InterfaceDeclaration, InterfaceItem, MethodSignature, AssociatedTypeDeclaration,
    OtherItem, GenericParam, ReceiverParameter, Parameter,
    Pattern, WildcardPattern, IdentPattern, TuplePattern, RawPattern,
    TypeExpr, TupleType, ParenType, PathType, PathSegment, QualifiedPathType,
    ReferenceType, PointerType, SliceType, ArrayType, BareFnType, NeverType,
    InferType, ImplTraitType, DynTraitType, GenericArg, LifetimeArg, BindingArg,
    ConstraintArg, ConstArg, TypeBound, TraitBound, LifetimeBound,
    PreciseCaptureBound, Body, VerbatimBody, EmptyBody, UnimplementedBody,
    EmptyIteratorBody, AsyncBlockBody, CompileErrorBody, ForwardingBody,
    ImplDeclaration, ImplMethod, ImplType,
)
from doublegen.errors import CompileError, DoubleError, ErrorKind, rust_string_literal


EMPTY_ITERATOR_EXPR = "::core::iter::empty()"


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

def emit_type(ty: TypeExpr) -> str:
    if isinstance(ty, TupleType):
        if len(ty.elements) == 1:
            return f"({emit_type(ty.elements[0])},)"
        return "(" + ", ".join(emit_type(e) for e in ty.elements) + ")"
    if isinstance(ty, ParenType):
        return f"({emit_type(ty.inner)})"
    if isinstance(ty, PathType):
        return emit_path(ty)
    if isinstance(ty, QualifiedPathType):
        trait = f" as {emit_path(ty.trait_path)}" if ty.trait_path else ""
        rest = "::".join(_emit_segment(s) for s in ty.segments)
        return f"<{emit_type(ty.self_type)}{trait}>::{rest}"
    if isinstance(ty, ReferenceType):
        lifetime = f"{ty.lifetime} " if ty.lifetime else ""
        mut = "mut " if ty.mutable else ""
        return f"&{lifetime}{mut}{emit_type(ty.inner)}"
    if isinstance(ty, PointerType):
        return f"*{'mut' if ty.mutable else 'const'} {emit_type(ty.inner)}"
    if isinstance(ty, SliceType):
        return f"[{emit_type(ty.inner)}]"
    if isinstance(ty, ArrayType):
        return f"[{emit_type(ty.inner)}; {ty.length}]"
    if isinstance(ty, BareFnType):
        prefix = f"{ty.prefix} " if ty.prefix else ""
        inputs = ", ".join(emit_type(i) for i in ty.inputs)
        output = f" -> {emit_type(ty.output)}" if ty.output else ""
        return f"{prefix}fn({inputs}){output}"
    if isinstance(ty, NeverType):
        return "!"
    if isinstance(ty, InferType):
        return "_"
    if isinstance(ty, ImplTraitType):
        return "impl " + emit_bounds(ty.bounds)
    if isinstance(ty, DynTraitType):
        return "dyn " + emit_bounds(ty.bounds)
    raise CompileError(DoubleError(
        kind=ErrorKind.INTERNAL_ERROR,
        message=f"Cannot emit type node {type(ty).__name__}",
        location=ty.location,
    ))


def emit_path(path: PathType) -> str:
    lead = "::" if path.leading_colon else ""
    return lead + "::".join(_emit_segment(s) for s in path.segments)


def _emit_segment(segment: PathSegment) -> str:
    if segment.parenthesized is not None:
        inputs = ", ".join(emit_type(i) for i in segment.parenthesized.inputs)
        output = segment.parenthesized.output
        return f"{segment.name}({inputs})" + (f" -> {emit_type(output)}" if output else "")
    if segment.generic_args:
        return f"{segment.name}<{', '.join(_emit_generic_arg(a) for a in segment.generic_args)}>"
    return segment.name


def _emit_generic_arg(arg: GenericArg) -> str:
    if isinstance(arg, LifetimeArg):
        return arg.name
    if isinstance(arg, BindingArg):
        args = f"<{', '.join(_emit_generic_arg(a) for a in arg.generic_args)}>" if arg.generic_args else ""
        return f"{arg.name}{args} = {emit_type(arg.type)}"
    if isinstance(arg, ConstraintArg):
        return f"{arg.name}: {emit_bounds(arg.bounds)}"
    if isinstance(arg, ConstArg):
        return arg.text
    return emit_type(arg)


def emit_bounds(bounds: list[TypeBound]) -> str:
    return " + ".join(_emit_bound(b) for b in bounds)


def _emit_bound(bound: TypeBound) -> str:
    if isinstance(bound, LifetimeBound):
        return bound.name
    if isinstance(bound, PreciseCaptureBound):
        return f"use<{', '.join(bound.args)}>"
    if isinstance(bound, TraitBound):
        hrtb = f"for<{', '.join(bound.for_lifetimes)}> " if bound.for_lifetimes else ""
        text = f"{hrtb}{bound.modifier}{emit_path(bound.path)}"
        return f"({text})" if bound.parenthesized else text
    raise CompileError(DoubleError(
        kind=ErrorKind.INTERNAL_ERROR,
        message=f"Cannot emit bound node {type(bound).__name__}",
        location=bound.location,
    ))


# ---------------------------------------------------------------------------
# Generics, patterns, parameters
# ---------------------------------------------------------------------------

def emit_generic_params(params: list[GenericParam]) -> str:
    if not params:
        return ""
    rendered = []
    for p in params:
        if p.kind == "const":
            text = f"const {p.name}: {p.const_type}"
        else:
            text = p.name + (f": {p.bounds}" if p.bounds else "")
        if p.default:
            text += f" = {p.default}"
        rendered.append(text)
    return "<" + ", ".join(rendered) + ">"


def emit_generic_args(args: list[str]) -> str:
    return "<" + ", ".join(args) + ">" if args else ""


def emit_pattern(pattern: Pattern) -> str:
    if isinstance(pattern, WildcardPattern):
        return "_"
    if isinstance(pattern, IdentPattern):
        return ("ref " if pattern.by_ref else "") + ("mut " if pattern.mutable else "") + pattern.name
    if isinstance(pattern, TuplePattern):
        if len(pattern.elements) == 1:
            return f"({emit_pattern(pattern.elements[0])},)"
        return "(" + ", ".join(emit_pattern(e) for e in pattern.elements) + ")"
    if isinstance(pattern, RawPattern):
        return pattern.text
    raise CompileError(DoubleError(
        kind=ErrorKind.INTERNAL_ERROR,
        message=f"Cannot emit pattern node {type(pattern).__name__}",
        location=pattern.location,
    ))


def emit_param(param: Parameter) -> str:
    if isinstance(param, ReceiverParameter):
        if param.by_ref:
            lifetime = f"{param.lifetime} " if param.lifetime else ""
            return f"&{lifetime}{'mut ' if param.mutable else ''}self"
        ty = f": {emit_type(param.type)}" if param.type is not None else ""
        return f"{'mut ' if param.mutable else ''}self{ty}"
    attrs = "".join(f"{a} " for a in param.attrs)
    return f"{attrs}{emit_pattern(param.pattern)}: {emit_type(param.type)}"


def emit_signature(sig: MethodSignature) -> str:
    quals = []
    if sig.is_const:
        quals.append("const")
    if sig.is_async:
        quals.append("async")
    if sig.is_unsafe:
        quals.append("unsafe")
    if sig.abi is not None:
        quals.append(f"extern {sig.abi}".rstrip())
    quals.append("fn")
    params = ", ".join(emit_param(p) for p in sig.params)
    text = f"{' '.join(quals)} {sig.name}{emit_generic_params(sig.generics)}({params})"
    if sig.return_type is not None:
        text += f" -> {emit_type(sig.return_type)}"
    if sig.where_clause:
        text += f" where {sig.where_clause}"
    return text


# ---------------------------------------------------------------------------
# Bodies
# ---------------------------------------------------------------------------

def emit_body_expr(body: Body) -> Optional[str]:
    """The tail expression of a body, or None when the body is empty."""
    if isinstance(body, EmptyBody):
        return None
    if isinstance(body, UnimplementedBody):
        message = f"{body.interface_name}::{body.method_name}"
        return f"unimplemented!({rust_string_literal(message)})"
    if isinstance(body, EmptyIteratorBody):
        return EMPTY_ITERATOR_EXPR
    if isinstance(body, AsyncBlockBody):
        inner = emit_body_expr(body.inner)
        return f"async {{ {inner} }}" if inner is not None else "async {}"
    if isinstance(body, CompileErrorBody):
        return f"::core::compile_error!({rust_string_literal(body.message)})"
    if isinstance(body, ForwardingBody):
        trait = f"{body.trait_name}{emit_generic_args(body.trait_args)}"
        turbofish = f"::<{', '.join(body.turbofish)}>" if body.turbofish else ""
        call = f"<Self as {trait}>::{body.method_name}{turbofish}({', '.join(body.arguments)})"
        if body.awaited:
            call += ".await"
        return f"unsafe {{ {call} }}" if body.unsafe else call
    raise CompileError(DoubleError(
        kind=ErrorKind.INTERNAL_ERROR,
        message=f"Cannot emit body node {type(body).__name__}",
    ))


def _emit_block(body: Body, indent: str) -> str:
    if isinstance(body, VerbatimBody):
        return body.source
    expr = emit_body_expr(body)
    if expr is None:
        return "{}"
    return "{\n" + indent * 2 + expr + "\n" + indent + "}"


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

class RustEmitter:
    """Emits Rust source for interface and implementation declarations."""

    def __init__(self, indent: int = 4):
        self.indent = " " * indent

    def emit_interface(self, decl: InterfaceDeclaration) -> str:
        lines = list(decl.attrs)
        head = []
        if decl.visibility:
            head.append(decl.visibility)
        if decl.unsafe:
            head.append("unsafe")
        header = " ".join(head + [f"trait {decl.name}{emit_generic_params(decl.generics)}"])
        if decl.supertraits:
            header += f": {decl.supertraits}"
        if decl.where_clause:
            header += f" where {decl.where_clause}"
        body = [self._emit_item(item) for item in decl.items]
        lines.append(self._braced(header, body))
        return "\n".join(lines)

    def _emit_item(self, item: InterfaceItem) -> str:
        lines = [self.indent + a for a in item.attrs]
        if isinstance(item, MethodSignature):
            sig = self.indent + emit_signature(item)
            if item.default is None:
                lines.append(sig + ";")
            else:
                lines.append(f"{sig} {_emit_block(item.default, self.indent)}")
        elif isinstance(item, AssociatedTypeDeclaration):
            text = f"type {item.name}{emit_generic_params(item.generics)}"
            if item.bounds:
                text += f": {item.bounds}"
            if item.where_clause:
                text += f" where {item.where_clause}"
            lines.append(self.indent + text + ";")
        elif isinstance(item, OtherItem):
            lines.append(self.indent + item.source)
        else:
            raise CompileError(DoubleError(
                kind=ErrorKind.INTERNAL_ERROR,
                message=f"Cannot emit trait item {type(item).__name__}",
                location=item.location,
            ))
        return "\n".join(lines)

    def emit_impl(self, impl: ImplDeclaration) -> str:
        header = "unsafe impl" if impl.unsafe else "impl"
        header += emit_generic_params(impl.generics)
        header += f" {impl.trait_name}{emit_generic_args(impl.trait_args)} for {impl.self_type}"
        if impl.where_predicates:
            header += " where " + ", ".join(impl.where_predicates)
        body = [self._emit_impl_item(item) for item in impl.items]
        return self._braced(header, body)

    def _emit_impl_item(self, item: ImplMethod | ImplType) -> str:
        if isinstance(item, ImplType):
            text = f"type {item.name}{emit_generic_params(item.generics)} = {item.type}"
            if item.where_clause:
                text += f" where {item.where_clause}"
            return self.indent + text + ";"
        return f"{self.indent}{emit_signature(item.signature)} {_emit_block(item.body, self.indent)}"

    def _braced(self, header: str, body: list[str]) -> str:
        if not body:
            return header + " {}"
        return header + " {\n" + "\n".join(body) + "\n}"
