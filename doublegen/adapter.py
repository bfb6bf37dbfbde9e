"""Adapter builder.

Generates the blanket implementation

    impl<G.., T> Original<G..> for T where T: Shadow<G..> { .. }

with one forwarding method per trait method and one alias per associated
type. Forwarded arguments keep their original names. Parameters without a
usable name (`_`, `ref x`, struct patterns) are rebound to `__arg{index}` in
the adapter signature, which changes no types.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from doublegen.ast_nodes import (
    InterfaceDeclaration, MethodSignature, AssociatedTypeDeclaration,
    GenericParam, ReceiverParameter, Parameter, Pattern, IdentPattern,
    TuplePattern, TypeExpr, TupleType, ParenType, PathType, QualifiedPathType,
    ReferenceType, PointerType, SliceType, ArrayType, BareFnType, ImplTraitType,
    DynTraitType, BindingArg, TraitBound, ForwardingBody, ImplDeclaration,
    ImplMethod, ImplType, generic_args_of, without_defaults,
)
from doublegen.emit import emit_generic_args

DEFAULT_BLANKET_PARAM = "T"


def build_adapter(
    shadow_name: str,
    original: InterfaceDeclaration,
    blanket_param: str = DEFAULT_BLANKET_PARAM,
) -> ImplDeclaration:
    param = fresh_param_name(blanket_param, _declared_generics(original))
    trait_args = generic_args_of(original.generics)
    shadow_bound = f"{shadow_name}{emit_generic_args(trait_args)}"

    where = [f"{param}: {shadow_bound}"]
    if original.where_clause:
        where.append(original.where_clause)

    items: list[ImplMethod | ImplType] = []
    for item in original.items:
        if isinstance(item, MethodSignature):
            items.append(_forward_method(item, shadow_name, trait_args))
        elif isinstance(item, AssociatedTypeDeclaration):
            items.append(_forward_type(item, shadow_bound))

    return ImplDeclaration(
        trait_name=original.name,
        trait_args=trait_args,
        self_type=param,
        generics=without_defaults(original.generics) + [GenericParam("type", param)],
        where_predicates=where,
        items=items,
        unsafe=original.unsafe,
        visibility=original.visibility,
    )


def fresh_param_name(preferred: str, generics: list[GenericParam]) -> str:
    taken = {g.name for g in generics}
    if preferred not in taken:
        return preferred
    n = 1
    while f"{preferred}{n}" in taken:
        n += 1
    return f"{preferred}{n}"


def _declared_generics(original: InterfaceDeclaration) -> list[GenericParam]:
    """Generics of the trait and of its items; all are in scope of the adapter."""
    generics = list(original.generics)
    for item in original.items:
        if isinstance(item, (MethodSignature, AssociatedTypeDeclaration)):
            generics.extend(item.generics)
    return generics


def _forward_type(item: AssociatedTypeDeclaration, shadow_bound: str) -> ImplType:
    args = emit_generic_args(generic_args_of(item.generics))
    return ImplType(
        name=item.name,
        generics=without_defaults(item.generics),
        type=f"<Self as {shadow_bound}>::{item.name}{args}",
        where_clause=item.where_clause,
    )


def _forward_method(sig: MethodSignature, shadow_name: str, trait_args: list[str]) -> ImplMethod:
    params: list[Parameter] = []
    arguments: list[str] = []
    for index, param in enumerate(sig.params):
        if isinstance(param, ReceiverParameter):
            params.append(param)
            arguments.append("self")
            continue
        argument = _as_argument(param.pattern)
        if argument is None:
            name = f"__arg{index}"
            params.append(replace(param, pattern=IdentPattern(name=name, location=param.pattern.location)))
            arguments.append(name)
        else:
            params.append(replace(param, pattern=_without_mut(param.pattern)))
            arguments.append(argument)

    turbofish: list[str] = []
    if not any(contains_impl_trait(p.type) for p in sig.params if not isinstance(p, ReceiverParameter)):
        turbofish = [g.name for g in sig.generics if g.kind != "lifetime"]

    body = ForwardingBody(
        trait_name=shadow_name,
        trait_args=trait_args,
        method_name=sig.name,
        turbofish=turbofish,
        arguments=arguments,
        awaited=sig.is_async,
        unsafe=sig.is_unsafe,
    )
    return ImplMethod(signature=replace(sig, attrs=[], params=params, default=None), body=body)


def _as_argument(pattern: Pattern) -> Optional[str]:
    """The expression passing a bound parameter on, if its pattern allows one."""
    if isinstance(pattern, IdentPattern):
        return None if pattern.by_ref else pattern.name
    if isinstance(pattern, TuplePattern):
        parts = [_as_argument(p) for p in pattern.elements]
        if any(p is None for p in parts):
            return None
        return "(" + ", ".join(parts) + ("," if len(parts) == 1 else "") + ")"
    return None


def _without_mut(pattern: Pattern) -> Pattern:
    # Forwarded bindings are moved, never mutated.
    if isinstance(pattern, IdentPattern):
        return replace(pattern, mutable=False)
    if isinstance(pattern, TuplePattern):
        return replace(pattern, elements=[_without_mut(p) for p in pattern.elements])
    return pattern


def contains_impl_trait(ty: Optional[TypeExpr]) -> bool:
    if ty is None:
        return False
    if isinstance(ty, ImplTraitType):
        return True
    if isinstance(ty, TupleType):
        return any(contains_impl_trait(e) for e in ty.elements)
    if isinstance(ty, (ParenType, ReferenceType, PointerType, SliceType, ArrayType)):
        return contains_impl_trait(ty.inner)
    if isinstance(ty, BareFnType):
        return False
    if isinstance(ty, PathType):
        return any(_arg_contains_impl_trait(a) for s in ty.segments for a in s.generic_args)
    if isinstance(ty, QualifiedPathType):
        return contains_impl_trait(ty.self_type)
    if isinstance(ty, DynTraitType):
        return any(
            _arg_contains_impl_trait(a)
            for b in ty.bounds if isinstance(b, TraitBound)
            for a in b.path.last.generic_args
        )
    return False


def _arg_contains_impl_trait(arg) -> bool:
    if isinstance(arg, BindingArg):
        return contains_impl_trait(arg.type)
    if isinstance(arg, TypeExpr):
        return contains_impl_trait(arg)
    return False
