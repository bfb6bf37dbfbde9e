"""Shadow interface builder.

The shadow interface mirrors the original trait item for item. Methods that
already have a default body keep it; every other method gets a synthesized
default, with its parameter bindings replaced by `_` since the default never
reads them.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from doublegen.ast_nodes import (
    InterfaceDeclaration, InterfaceItem, MethodSignature, Parameter,
    TypedParameter, WildcardPattern,
)
from doublegen.classify import classify
from doublegen.synthesize import synthesize

logger = logging.getLogger(__name__)


def build_shadow(shadow_name: str, original: InterfaceDeclaration) -> InterfaceDeclaration:
    items = [_shadow_item(item, shadow_name) for item in original.items]
    return replace(original, name=shadow_name, items=items, source=None)


def _shadow_item(item: InterfaceItem, shadow_name: str) -> InterfaceItem:
    if not isinstance(item, MethodSignature) or item.default is not None:
        return item

    category = classify(item.return_type, item.name)
    logger.debug("%s::%s classified as %s", shadow_name, item.name, category)
    return replace(
        item,
        params=_erase_parameter_names(item.params),
        default=synthesize(category, shadow_name, item.name),
    )


def _erase_parameter_names(params: list[Parameter]) -> list[Parameter]:
    # Receivers keep their form.
    return [
        replace(p, pattern=WildcardPattern(location=p.pattern.location))
        if isinstance(p, TypedParameter) else p
        for p in params
    ]
