"""doublegen AST node definitions.

Trait declarations (methods, associated types, other items), the subset of
the Rust type grammar needed to classify return types, method bodies, and the
implementation blocks generated from a trait.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from doublegen.errors import SourceLocation


# ---------------------------------------------------------------------------
# Generics
# ---------------------------------------------------------------------------

@dataclass
class GenericParam:
    """A single generic parameter:  'a: 'b  |  T: Clone = u8  |  const N: usize"""
    kind: str  # "lifetime" | "type" | "const"
    name: str
    bounds: str = ""
    const_type: str = ""
    default: str = ""
    location: Optional[SourceLocation] = None


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

@dataclass
class TypeExpr:
    location: Optional[SourceLocation] = None


@dataclass
class TupleType(TypeExpr):
    """(A, B)  or the unit type  ()"""
    elements: list[TypeExpr] = field(default_factory=list)


@dataclass
class ParenType(TypeExpr):
    """(dyn A + B)"""
    inner: TypeExpr = field(default_factory=TypeExpr)


@dataclass
class LifetimeArg:
    name: str = ""


@dataclass
class BindingArg:
    """Associated type binding inside generic args:  Output = T"""
    name: str = ""
    generic_args: list[GenericArg] = field(default_factory=list)
    type: TypeExpr = field(default_factory=TypeExpr)


@dataclass
class ConstraintArg:
    """Associated type constraint inside generic args:  Item: Clone"""
    name: str = ""
    bounds: list[TypeBound] = field(default_factory=list)


@dataclass
class ConstArg:
    """Const generic argument kept as source text:  3  |  { N + 1 }"""
    text: str = ""


GenericArg = Union[TypeExpr, LifetimeArg, BindingArg, ConstraintArg, ConstArg]


@dataclass
class ParenthesizedArgs:
    """Fn-trait sugar:  Fn(A, B) -> C"""
    inputs: list[TypeExpr] = field(default_factory=list)
    output: Optional[TypeExpr] = None


@dataclass
class PathSegment:
    name: str = ""
    generic_args: list[GenericArg] = field(default_factory=list)
    parenthesized: Optional[ParenthesizedArgs] = None


@dataclass
class PathType(TypeExpr):
    segments: list[PathSegment] = field(default_factory=list)
    leading_colon: bool = False

    @property
    def last(self) -> PathSegment:
        return self.segments[-1]


@dataclass
class QualifiedPathType(TypeExpr):
    """<T as Trait>::Assoc"""
    self_type: TypeExpr = field(default_factory=TypeExpr)
    trait_path: Optional[PathType] = None
    segments: list[PathSegment] = field(default_factory=list)


@dataclass
class ReferenceType(TypeExpr):
    lifetime: Optional[str] = None
    mutable: bool = False
    inner: TypeExpr = field(default_factory=TypeExpr)


@dataclass
class PointerType(TypeExpr):
    mutable: bool = False
    inner: TypeExpr = field(default_factory=TypeExpr)


@dataclass
class SliceType(TypeExpr):
    inner: TypeExpr = field(default_factory=TypeExpr)


@dataclass
class ArrayType(TypeExpr):
    inner: TypeExpr = field(default_factory=TypeExpr)
    length: str = ""


@dataclass
class BareFnType(TypeExpr):
    """fn(A) -> B  with any qualifiers kept as source text"""
    prefix: str = ""
    inputs: list[TypeExpr] = field(default_factory=list)
    output: Optional[TypeExpr] = None


@dataclass
class NeverType(TypeExpr):
    pass


@dataclass
class InferType(TypeExpr):
    pass


@dataclass
class TypeBound:
    location: Optional[SourceLocation] = None


@dataclass
class TraitBound(TypeBound):
    """A bound naming a trait:  ?Sized  |  for<'a> Fn(&'a u8)  |  Future<Output = T>"""
    path: PathType = field(default_factory=PathType)
    modifier: str = ""
    for_lifetimes: list[str] = field(default_factory=list)
    parenthesized: bool = False

    @property
    def capability(self) -> str:
        return self.path.last.name


@dataclass
class LifetimeBound(TypeBound):
    name: str = ""


@dataclass
class PreciseCaptureBound(TypeBound):
    """use<'a, T>"""
    args: list[str] = field(default_factory=list)


@dataclass
class ImplTraitType(TypeExpr):
    """Opaque type, known only by its bounds:  impl Future<Output = T> + Send"""
    bounds: list[TypeBound] = field(default_factory=list)


@dataclass
class DynTraitType(TypeExpr):
    bounds: list[TypeBound] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Patterns (parameter bindings)
# ---------------------------------------------------------------------------

@dataclass
class Pattern:
    location: Optional[SourceLocation] = None


@dataclass
class WildcardPattern(Pattern):
    """The _ pattern."""
    pass


@dataclass
class IdentPattern(Pattern):
    name: str = ""
    by_ref: bool = False
    mutable: bool = False


@dataclass
class TuplePattern(Pattern):
    elements: list[Pattern] = field(default_factory=list)


@dataclass
class RawPattern(Pattern):
    """Any other irrefutable pattern, kept as source text."""
    text: str = ""


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------

@dataclass
class ReceiverParameter:
    """self  |  mut self  |  &'a mut self  |  self: Box<Self>"""
    by_ref: bool = False
    lifetime: Optional[str] = None
    mutable: bool = False
    type: Optional[TypeExpr] = None
    location: Optional[SourceLocation] = None


@dataclass
class TypedParameter:
    pattern: Pattern
    type: TypeExpr
    attrs: list[str] = field(default_factory=list)
    location: Optional[SourceLocation] = None


Parameter = Union[ReceiverParameter, TypedParameter]


# ---------------------------------------------------------------------------
# Bodies
# ---------------------------------------------------------------------------

@dataclass
class Body:
    """Base class for method bodies."""
    pass


@dataclass
class VerbatimBody(Body):
    """A default body already present in the source, braces included."""
    source: str = ""


@dataclass
class EmptyBody(Body):
    pass


@dataclass
class UnimplementedBody(Body):
    interface_name: str = ""
    method_name: str = ""


@dataclass
class EmptyIteratorBody(Body):
    pass


@dataclass
class AsyncBlockBody(Body):
    inner: Body = field(default_factory=EmptyBody)


@dataclass
class CompileErrorBody(Body):
    message: str = ""


@dataclass
class ForwardingBody(Body):
    """<Self as Shadow<..>>::method::<..>(args).await"""
    trait_name: str = ""
    trait_args: list[str] = field(default_factory=list)
    method_name: str = ""
    turbofish: list[str] = field(default_factory=list)
    arguments: list[str] = field(default_factory=list)
    awaited: bool = False
    unsafe: bool = False


# ---------------------------------------------------------------------------
# Trait items
# ---------------------------------------------------------------------------

@dataclass
class InterfaceItem:
    attrs: list[str] = field(default_factory=list)
    location: Optional[SourceLocation] = None


@dataclass
class MethodSignature(InterfaceItem):
    name: str = ""
    is_async: bool = False
    is_const: bool = False
    is_unsafe: bool = False
    abi: Optional[str] = None
    generics: list[GenericParam] = field(default_factory=list)
    params: list[Parameter] = field(default_factory=list)
    return_type: Optional[TypeExpr] = None
    where_clause: str = ""
    default: Optional[Body] = None


@dataclass
class AssociatedTypeDeclaration(InterfaceItem):
    name: str = ""
    generics: list[GenericParam] = field(default_factory=list)
    bounds: str = ""
    where_clause: str = ""


@dataclass
class OtherItem(InterfaceItem):
    """Constants, macro invocations: copied as source text."""
    source: str = ""


@dataclass
class InterfaceDeclaration:
    name: str = ""
    visibility: str = ""
    generics: list[GenericParam] = field(default_factory=list)
    items: list[InterfaceItem] = field(default_factory=list)
    attrs: list[str] = field(default_factory=list)
    unsafe: bool = False
    supertraits: str = ""
    where_clause: str = ""
    source: Optional[str] = None
    location: Optional[SourceLocation] = None

    @property
    def methods(self) -> list[MethodSignature]:
        return [i for i in self.items if isinstance(i, MethodSignature)]

    @property
    def associated_types(self) -> list[AssociatedTypeDeclaration]:
        return [i for i in self.items if isinstance(i, AssociatedTypeDeclaration)]


# ---------------------------------------------------------------------------
# Generated implementations
# ---------------------------------------------------------------------------

@dataclass
class ImplMethod:
    signature: MethodSignature
    body: Body


@dataclass
class ImplType:
    name: str
    generics: list[GenericParam] = field(default_factory=list)
    type: str = ""
    where_clause: str = ""


@dataclass
class ImplDeclaration:
    """impl<G> Trait<A> for SelfType where P { items }"""
    trait_name: str = ""
    trait_args: list[str] = field(default_factory=list)
    self_type: str = ""
    generics: list[GenericParam] = field(default_factory=list)
    where_predicates: list[str] = field(default_factory=list)
    items: list[Union[ImplMethod, ImplType]] = field(default_factory=list)
    unsafe: bool = False
    # Visibility of the interface this implementation belongs to. Rust impls
    # carry no visibility of their own, so it is not rendered.
    visibility: str = ""

    @property
    def methods(self) -> list[ImplMethod]:
        return [i for i in self.items if isinstance(i, ImplMethod)]

    @property
    def types(self) -> list[ImplType]:
        return [i for i in self.items if isinstance(i, ImplType)]


def generic_args_of(params: list[GenericParam]) -> list[str]:
    """The argument list naming each parameter:  <'a, T, N>"""
    return [p.name for p in params]


def without_defaults(params: list[GenericParam]) -> list[GenericParam]:
    """Generic parameters as an impl block may declare them."""
    return [
        GenericParam(kind=p.kind, name=p.name, bounds=p.bounds,
                     const_type=p.const_type, location=p.location)
        for p in params
    ]
