"""Placeholder builder: implements the shadow interface for the marker type.

The marker type stands in for every associated type, so the implementation
needs no input beyond the trait itself. Methods are covered by the shadow
interface's defaults.
"""

from __future__ import annotations

from doublegen.ast_nodes import (
    InterfaceDeclaration, ImplDeclaration, ImplType, generic_args_of, without_defaults,
)

DEFAULT_MARKER_TYPE = "double_trait::Dummy"


def build_placeholder(
    shadow_name: str,
    original: InterfaceDeclaration,
    marker_type: str = DEFAULT_MARKER_TYPE,
) -> ImplDeclaration:
    items = [
        ImplType(
            name=assoc.name,
            generics=without_defaults(assoc.generics),
            type=marker_type,
            where_clause=assoc.where_clause,
        )
        for assoc in original.associated_types
    ]
    return ImplDeclaration(
        trait_name=shadow_name,
        trait_args=generic_args_of(original.generics),
        self_type=marker_type,
        generics=without_defaults(original.generics),
        where_predicates=[original.where_clause] if original.where_clause else [],
        items=items,
        unsafe=original.unsafe,
        visibility=original.visibility,
    )
