"""doublegen Expand: the entry point of the transformation.

    expand(shadow_name, trait)   original trait, shadow trait, adapter impl, placeholder impl
    expand_dummies(trait)        trait with synthesized defaults, placeholder impl

Both are pure: the same input always yields the same fragments, and the
input declaration is never modified.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from doublegen.ast_nodes import InterfaceDeclaration, ImplDeclaration
from doublegen.adapter import build_adapter
from doublegen.classify import classify
from doublegen.config import DoublegenConfig
from doublegen.emit import RustEmitter
from doublegen.errors import CompileError, name_error
from doublegen.parser import parse_trait, parse_identifier
from doublegen.placeholder import build_placeholder
from doublegen.shadow import build_shadow

logger = logging.getLogger(__name__)


class FragmentKind(Enum):
    ORIGINAL = "original"
    SHADOW = "shadow"
    ADAPTER = "adapter"
    PLACEHOLDER = "placeholder"
    DUMMIED = "dummied"


@dataclass
class GeneratedFragment:
    kind: FragmentKind
    node: Union[InterfaceDeclaration, ImplDeclaration]
    source: str

    @property
    def name(self) -> str:
        if isinstance(self.node, InterfaceDeclaration):
            return self.node.name
        return f"{self.node.trait_name} for {self.node.self_type}"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "name": self.name, "source": self.source}


@dataclass
class Expansion:
    fragments: list[GeneratedFragment] = field(default_factory=list)

    def fragment(self, kind: FragmentKind) -> GeneratedFragment:
        for f in self.fragments:
            if f.kind == kind:
                return f
        raise KeyError(kind.value)

    def render(self) -> str:
        return "\n\n".join(f.source for f in self.fragments) + "\n"

    def to_dict(self) -> dict[str, Any]:
        return {"fragments": [f.to_dict() for f in self.fragments]}

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def expand(
    shadow_name: str,
    original: InterfaceDeclaration,
    config: Optional[DoublegenConfig] = None,
) -> Expansion:
    """Generate the shadow trait, adapter and placeholder for a trait."""
    config = config or DoublegenConfig()
    shadow_name = parse_identifier(shadow_name, original.location)
    if shadow_name == original.name:
        raise CompileError(name_error(shadow_name, "must differ from the original trait",
                                      original.location))
    emitter = RustEmitter(config.indent)

    shadow = build_shadow(shadow_name, original)
    adapter = build_adapter(shadow_name, original, config.blanket_param)
    placeholder = build_placeholder(shadow_name, original, config.marker_type)

    original_source = original.source if original.source is not None else emitter.emit_interface(original)
    fragments = [
        GeneratedFragment(FragmentKind.ORIGINAL, original, original_source),
        GeneratedFragment(FragmentKind.SHADOW, shadow, emitter.emit_interface(shadow)),
        GeneratedFragment(FragmentKind.ADAPTER, adapter, emitter.emit_impl(adapter)),
        GeneratedFragment(FragmentKind.PLACEHOLDER, placeholder, emitter.emit_impl(placeholder)),
    ]
    for f in fragments:
        logger.debug("generated %s fragment: %s", f.kind.value, f.name)
    return Expansion(fragments)


def expand_dummies(
    original: InterfaceDeclaration,
    config: Optional[DoublegenConfig] = None,
) -> Expansion:
    """Give the trait itself synthesized defaults and implement it for the marker type."""
    config = config or DoublegenConfig()
    emitter = RustEmitter(config.indent)

    dummied = build_shadow(original.name, original)
    placeholder = build_placeholder(original.name, original, config.marker_type)
    fragments = [
        GeneratedFragment(FragmentKind.DUMMIED, dummied, emitter.emit_interface(dummied)),
        GeneratedFragment(FragmentKind.PLACEHOLDER, placeholder, emitter.emit_impl(placeholder)),
    ]
    for f in fragments:
        logger.debug("generated %s fragment: %s", f.kind.value, f.name)
    return Expansion(fragments)


def expand_source(
    shadow_name: str,
    source: str,
    filename: str = "<stdin>",
    config: Optional[DoublegenConfig] = None,
) -> str:
    return expand(shadow_name, parse_trait(source, filename), config).render()


def expand_dummies_source(
    source: str,
    filename: str = "<stdin>",
    config: Optional[DoublegenConfig] = None,
) -> str:
    return expand_dummies(parse_trait(source, filename), config).render()


def expand_or_compile_error(
    shadow_name: str,
    source: str,
    filename: str = "<stdin>",
    config: Optional[DoublegenConfig] = None,
) -> str:
    """Like expand_source, but failures become `compile_error!` items."""
    try:
        return expand_source(shadow_name, source, filename, config)
    except CompileError as e:
        logger.debug("expansion failed: %s", e)
        return e.to_compile_error() + "\n"


def classify_methods(original: InterfaceDeclaration) -> list[dict[str, Any]]:
    """Category of every method, as the shadow builder would compute it."""
    report = []
    for method in original.methods:
        entry: dict[str, Any] = {"method": method.name, "async": method.is_async}
        if method.default is not None:
            entry["category"] = "ExistingDefault"
        else:
            entry["category"] = str(classify(method.return_type, method.name))
        if method.location:
            entry["line"] = method.location.line
        report.append(entry)
    return report
