"""doublegen Expansion Tests: EXP-001 through EXP-012.

End-to-end checks from trait source to the generated Rust fragments:
shadow trait, forwarding adapter and placeholder implementation.
"""

import json

import pytest

from doublegen import (
    expand, expand_source, expand_dummies, expand_dummies_source, expand_or_compile_error, parse_trait,
)
from doublegen.ast_nodes import IdentPattern, WildcardPattern
from doublegen.config import DoublegenConfig
from doublegen.errors import CompileError, ErrorKind
from doublegen.expand import FragmentKind, classify_methods


def _fragments(shadow_name, source, config=None):
    expansion = expand(shadow_name, parse_trait(source), config)
    return {f.kind: f.source for f in expansion.fragments}


# ===================================================================
# P0: Fragment structure
# ===================================================================


class TestEXP001:
    """EXP-001: An empty trait yields empty shadow, adapter and placeholder.
    Priority: P0
    """

    def test_empty_trait(self):
        """priority_p0: Four fragments in fixed order."""
        expansion = expand("MyTraitDummy", parse_trait("trait MyTrait {}"))
        assert [f.kind for f in expansion.fragments] == [
            FragmentKind.ORIGINAL, FragmentKind.SHADOW,
            FragmentKind.ADAPTER, FragmentKind.PLACEHOLDER,
        ]
        assert expansion.render() == (
            "trait MyTrait {}\n"
            "\n"
            "trait MyTraitDummy {}\n"
            "\n"
            "impl<T> MyTrait for T where T: MyTraitDummy {}\n"
            "\n"
            "impl MyTraitDummy for double_trait::Dummy {}\n"
        )

    def test_original_is_verbatim(self):
        """priority_p0: The original trait is emitted as written."""
        source = "/// Docs.\npub trait  MyTrait {\n  fn a(&self);   // note\n}"
        expansion = expand("MyTraitDummy", parse_trait(source))
        assert expansion.fragment(FragmentKind.ORIGINAL).source == source

    def test_expand_source(self):
        """priority_p0: Source-to-source convenience entry point."""
        assert expand_source("MyTraitDummy", "trait MyTrait {}").startswith("trait MyTrait {}\n")


class TestEXP002:
    """EXP-002: Methods without defaults get synthesized bodies and are forwarded.
    Priority: P0
    """

    def test_concrete_return(self):
        """priority_p0: Shadow, adapter and placeholder for one method."""
        fragments = _fragments("MyTraitDummy", "trait MyTrait {\n    fn answer(&self) -> i32;\n}")
        assert fragments[FragmentKind.SHADOW] == (
            "trait MyTraitDummy {\n"
            "    fn answer(&self) -> i32 {\n"
            '        unimplemented!("MyTraitDummy::answer")\n'
            "    }\n"
            "}"
        )
        assert fragments[FragmentKind.ADAPTER] == (
            "impl<T> MyTrait for T where T: MyTraitDummy {\n"
            "    fn answer(&self) -> i32 {\n"
            "        <Self as MyTraitDummy>::answer(self)\n"
            "    }\n"
            "}"
        )
        assert fragments[FragmentKind.PLACEHOLDER] == "impl MyTraitDummy for double_trait::Dummy {}"

    def test_unimplemented_message_names_shadow(self):
        """priority_p0: The message names the generated trait and method."""
        fragments = _fragments("DummyTrait", "trait OrgTrait { fn answer(&self) -> i32; }")
        assert 'unimplemented!("DummyTrait::answer")' in fragments[FragmentKind.SHADOW]

    def test_unit_return_is_empty_block(self):
        """priority_p0: Unit methods get `{}`."""
        fragments = _fragments("ApiDummy", "trait Api { fn ping(&self); }")
        assert fragments[FragmentKind.SHADOW] == "trait ApiDummy {\n    fn ping(&self) {}\n}"


class TestEXP003:
    """EXP-003: Parameter names are erased in defaults and kept when forwarding.
    Priority: P0
    """

    SOURCE = "trait Service {\n    async fn call(&self, request: String, _: u8) -> u32;\n}"

    def test_shadow_erases_names(self):
        """priority_p0: Synthesized defaults bind nothing."""
        fragments = _fragments("ServiceDummy", self.SOURCE)
        assert "    async fn call(&self, _: String, _: u8) -> u32 {\n" in fragments[FragmentKind.SHADOW]

    def test_adapter_forwards_names(self):
        """priority_p0: Arguments are forwarded by name, `_` is rebound."""
        fragments = _fragments("ServiceDummy", self.SOURCE)
        assert fragments[FragmentKind.ADAPTER] == (
            "impl<T> Service for T where T: ServiceDummy {\n"
            "    async fn call(&self, request: String, __arg2: u8) -> u32 {\n"
            "        <Self as ServiceDummy>::call(self, request, __arg2).await\n"
            "    }\n"
            "}"
        )

    def test_input_not_mutated(self):
        """priority_p0: The parsed declaration is left untouched."""
        decl = parse_trait(self.SOURCE)
        expansion = expand("ServiceDummy", decl)
        assert isinstance(decl.methods[0].params[1].pattern, IdentPattern)
        shadow = expansion.fragment(FragmentKind.SHADOW).node
        assert isinstance(shadow.methods[0].params[1].pattern, WildcardPattern)
        assert decl.methods[0].default is None

    def test_patterns_forwarded(self):
        """priority_p1: Tuple patterns are rebuilt, `mut` dropped, `ref` rebound."""
        fragments = _fragments(
            "PDummy", "trait P { fn f(&self, (mut a, b): (u8, u8), mut c: u8, ref d: u8); }",
        )
        assert fragments[FragmentKind.ADAPTER] == (
            "impl<T> P for T where T: PDummy {\n"
            "    fn f(&self, (a, b): (u8, u8), c: u8, __arg3: u8) {\n"
            "        <Self as PDummy>::f(self, (a, b), c, __arg3)\n"
            "    }\n"
            "}"
        )


class TestEXP004:
    """EXP-004: Existing defaults are preserved verbatim in the shadow.
    Priority: P0
    """

    def test_default_preserved(self):
        """priority_p0: Body and parameter names untouched; still forwarded."""
        fragments = _fragments(
            "GreeterDummy",
            'trait Greeter {\n    fn greet(&self, name: &str) -> String { format!("hi {name}") }\n}',
        )
        assert fragments[FragmentKind.SHADOW] == (
            "trait GreeterDummy {\n"
            '    fn greet(&self, name: &str) -> String { format!("hi {name}") }\n'
            "}"
        )
        assert "<Self as GreeterDummy>::greet(self, name)" in fragments[FragmentKind.ADAPTER]


class TestEXP005:
    """EXP-005: Opaque return types.
    Priority: P0
    """

    def test_impl_future_default(self):
        """priority_p0: `impl Future<Output = ()>` gets `async {}`."""
        fragments = _fragments(
            "DoubleTrait", "trait OriginalTrait {\n    fn method(&self) -> impl Future<Output = ()>;\n}",
        )
        assert fragments[FragmentKind.SHADOW] == (
            "trait DoubleTrait {\n"
            "    fn method(&self) -> impl Future<Output = ()> {\n"
            "        async {}\n"
            "    }\n"
            "}"
        )

    def test_future_of_iterator(self):
        """priority_p0: Nested opaque types nest their bodies."""
        fragments = _fragments(
            "D", "trait O { fn items(&self) -> impl Future<Output = impl Iterator<Item = u8>>; }",
        )
        assert "        async { ::core::iter::empty() }\n" in fragments[FragmentKind.SHADOW]

    def test_iterator(self):
        """priority_p0: `impl Iterator` gets an empty iterator."""
        fragments = _fragments("D", "trait O { fn items(&self) -> impl Iterator<Item = u8>; }")
        assert "        ::core::iter::empty()\n" in fragments[FragmentKind.SHADOW]

    def test_unsupported_trait(self):
        """priority_p0: Other opaque types degrade to a compile error in that method only."""
        fragments = _fragments(
            "D", "trait O {\n    fn thing(&self) -> impl UnsupportedTrait;\n    fn other(&self) -> u8;\n}",
        )
        shadow = fragments[FragmentKind.SHADOW]
        assert (
            '        ::core::compile_error!("opaque return types are unsupported '
            'except for impl Future and impl Iterator")\n'
        ) in shadow
        assert 'unimplemented!("D::other")' in shadow

    def test_malformed_opaque_aborts(self):
        """priority_p0: An opaque type without a trait bound fails the whole trait."""
        with pytest.raises(CompileError) as exc:
            expand("D", parse_trait("trait O { fn f(&self) -> impl 'static; }"))
        assert exc.value.errors[0].kind == ErrorKind.MALFORMED_RETURN_TYPE


class TestEXP006:
    """EXP-006: Associated types.
    Priority: P0
    """

    SOURCE = (
        "trait Container {\n"
        "    type Item;\n"
        "    type Iter<'a>: Iterator<Item = &'a Self::Item> where Self: 'a;\n"
        "    fn first(&self) -> Option<&Self::Item>;\n"
        "}"
    )

    def test_shadow_keeps_types(self):
        """priority_p0: Associated types are copied unchanged."""
        fragments = _fragments("ContainerDummy", self.SOURCE)
        assert fragments[FragmentKind.SHADOW] == (
            "trait ContainerDummy {\n"
            "    type Item;\n"
            "    type Iter<'a>: Iterator<Item = &'a Self::Item> where Self: 'a;\n"
            "    fn first(&self) -> Option<&Self::Item> {\n"
            '        unimplemented!("ContainerDummy::first")\n'
            "    }\n"
            "}"
        )

    def test_adapter_aliases_types(self):
        """priority_p0: One alias per associated type."""
        fragments = _fragments("ContainerDummy", self.SOURCE)
        assert fragments[FragmentKind.ADAPTER] == (
            "impl<T> Container for T where T: ContainerDummy {\n"
            "    type Item = <Self as ContainerDummy>::Item;\n"
            "    type Iter<'a> = <Self as ContainerDummy>::Iter<'a> where Self: 'a;\n"
            "    fn first(&self) -> Option<&Self::Item> {\n"
            "        <Self as ContainerDummy>::first(self)\n"
            "    }\n"
            "}"
        )

    def test_placeholder_binds_marker(self):
        """priority_p0: The marker type stands in for every associated type."""
        fragments = _fragments("ContainerDummy", self.SOURCE)
        assert fragments[FragmentKind.PLACEHOLDER] == (
            "impl ContainerDummy for double_trait::Dummy {\n"
            "    type Item = double_trait::Dummy;\n"
            "    type Iter<'a> = double_trait::Dummy where Self: 'a;\n"
            "}"
        )


class TestEXP007:
    """EXP-007: Generic traits.
    Priority: P0
    """

    SOURCE = "trait Repo<K, V: Clone> where K: Eq {\n    fn put(&mut self, key: K, value: V);\n}"

    def test_generic_trait(self):
        """priority_p0: Generics and where clause flow into every fragment."""
        fragments = _fragments("RepoDummy", self.SOURCE)
        assert fragments[FragmentKind.SHADOW].startswith("trait RepoDummy<K, V: Clone> where K: Eq {\n")
        assert fragments[FragmentKind.ADAPTER] == (
            "impl<K, V: Clone, T> Repo<K, V> for T where T: RepoDummy<K, V>, K: Eq {\n"
            "    fn put(&mut self, key: K, value: V) {\n"
            "        <Self as RepoDummy<K, V>>::put(self, key, value)\n"
            "    }\n"
            "}"
        )
        assert fragments[FragmentKind.PLACEHOLDER] == (
            "impl<K, V: Clone> RepoDummy<K, V> for double_trait::Dummy where K: Eq {}"
        )

    def test_blanket_param_collision(self):
        """priority_p1: A trait generic named T pushes the blanket parameter to T1."""
        fragments = _fragments("WrapDummy", "trait Wrap<T> { fn get(&self) -> T; }")
        assert fragments[FragmentKind.ADAPTER].startswith(
            "impl<T, T1> Wrap<T> for T1 where T1: WrapDummy<T> {\n"
        )

    def test_generic_defaults_dropped_on_impls(self):
        """priority_p1: Impl blocks may not repeat generic defaults."""
        fragments = _fragments("AddDummy", "trait Add<Rhs = Self> { fn add(self, rhs: Rhs); }")
        assert fragments[FragmentKind.SHADOW].startswith("trait AddDummy<Rhs = Self> {\n")
        assert fragments[FragmentKind.ADAPTER].startswith("impl<Rhs, T> Add<Rhs> for T where T: AddDummy<Rhs> {\n")

    def test_blanket_param_avoids_item_generics(self):
        """priority_p1: Method and associated type generics named T also push it to T1."""
        fragments = _fragments(
            "StoreDummy",
            "trait Store {\n    type Entry<T>;\n    fn get<T: Default>(&self, key: &str) -> T;\n}",
        )
        adapter = fragments[FragmentKind.ADAPTER]
        assert adapter.startswith("impl<T1> Store for T1 where T1: StoreDummy {\n")
        assert "    type Entry<T> = <Self as StoreDummy>::Entry<T>;\n" in adapter
        assert "        <Self as StoreDummy>::get::<T>(self, key)\n" in adapter


class TestEXP008:
    """EXP-008: Method generics, unsafe methods and attributes.
    Priority: P1
    """

    def test_turbofish(self):
        """priority_p1: Method type parameters are passed explicitly."""
        fragments = _fragments("ConvDummy", "trait Conv { fn convert<U: From<u8>>(&self, x: u8) -> U; }")
        assert fragments[FragmentKind.ADAPTER] == (
            "impl<T> Conv for T where T: ConvDummy {\n"
            "    fn convert<U: From<u8>>(&self, x: u8) -> U {\n"
            "        <Self as ConvDummy>::convert::<U>(self, x)\n"
            "    }\n"
            "}"
        )

    def test_no_turbofish_with_impl_trait_argument(self):
        """priority_p1: Argument-position `impl Trait` forbids explicit generics."""
        fragments = _fragments("VDummy", "trait V { fn visit<U>(&self, f: impl Fn(U)); }")
        assert "        <Self as VDummy>::visit(self, f)\n" in fragments[FragmentKind.ADAPTER]

    def test_unsafe_method(self):
        """priority_p1: Unsafe methods forward inside an unsafe block."""
        fragments = _fragments("RDummy", "trait R { unsafe fn raw(&self, p: *const u8) -> u8; }")
        assert fragments[FragmentKind.ADAPTER] == (
            "impl<T> R for T where T: RDummy {\n"
            "    unsafe fn raw(&self, p: *const u8) -> u8 {\n"
            "        unsafe { <Self as RDummy>::raw(self, p) }\n"
            "    }\n"
            "}"
        )

    def test_attributes(self):
        """priority_p1: Method attributes stay on the shadow, not on the adapter."""
        fragments = _fragments(
            "DocDummy", "trait Doc {\n    /// Says hi.\n    #[must_use]\n    fn hi(&self) -> u8;\n}",
        )
        assert fragments[FragmentKind.SHADOW].startswith(
            "trait DocDummy {\n    /// Says hi.\n    #[must_use]\n    fn hi(&self) -> u8 {\n"
        )
        assert "#[must_use]" not in fragments[FragmentKind.ADAPTER]

    def test_other_items(self):
        """priority_p1: Constants are mirrored on the shadow and skipped by the adapter."""
        fragments = _fragments("CDummy", "trait C {\n    const LIMIT: usize = 3;\n}")
        assert fragments[FragmentKind.SHADOW] == "trait CDummy {\n    const LIMIT: usize = 3;\n}"
        assert fragments[FragmentKind.ADAPTER] == "impl<T> C for T where T: CDummy {}"


class TestEXP009:
    """EXP-009: Visibility and unsafe traits.
    Priority: P0
    """

    def test_visibility_propagates(self):
        """priority_p0: The shadow inherits the original's visibility."""
        expansion = expand("ApiDummy", parse_trait("pub(crate) trait Api { fn ping(&self); }"))
        shadow = expansion.fragment(FragmentKind.SHADOW)
        assert shadow.source.startswith("pub(crate) trait ApiDummy {")
        assert expansion.fragment(FragmentKind.ADAPTER).node.visibility == "pub(crate)"
        assert expansion.fragment(FragmentKind.PLACEHOLDER).node.visibility == "pub(crate)"

    def test_unsafe_trait(self):
        """priority_p1: Unsafe traits get unsafe impls."""
        fragments = _fragments("SDummy", "unsafe trait S {}")
        assert fragments[FragmentKind.SHADOW] == "unsafe trait SDummy {}"
        assert fragments[FragmentKind.ADAPTER] == "unsafe impl<T> S for T where T: SDummy {}"
        assert fragments[FragmentKind.PLACEHOLDER] == "unsafe impl SDummy for double_trait::Dummy {}"


class TestEXP010:
    """EXP-010: Shadow names are validated.
    Priority: P0
    """

    def test_same_name_rejected(self):
        """priority_p0: The shadow may not reuse the original's name."""
        with pytest.raises(CompileError) as exc:
            expand("MyTrait", parse_trait("trait MyTrait {}"))
        assert exc.value.errors[0].kind == ErrorKind.NAME_ERROR

    def test_reserved_name_rejected(self):
        """priority_p0: Keywords cannot name the shadow."""
        with pytest.raises(CompileError):
            expand("impl", parse_trait("trait MyTrait {}"))

    def test_compile_error_rendering(self):
        """priority_p0: Failures can be rendered as a located compile_error! item."""
        out = expand_or_compile_error("D", "trait O { fn f(&self) -> impl 'static; }", filename="lib.rs")
        assert out.startswith('::core::compile_error!("lib.rs:1:')
        assert "names no trait bound" in out
        assert out.endswith(");\n")


class TestEXP011:
    """EXP-011: Dummies mode fills in the trait itself.
    Priority: P1
    """

    def test_dummies(self):
        """priority_p1: The trait gets defaults and a placeholder implementation."""
        expansion = expand_dummies(parse_trait("trait Clock {\n    fn now(&self) -> u64;\n    type Zone;\n}"))
        assert [f.kind for f in expansion.fragments] == [FragmentKind.DUMMIED, FragmentKind.PLACEHOLDER]
        assert expansion.render() == (
            "trait Clock {\n"
            "    fn now(&self) -> u64 {\n"
            '        unimplemented!("Clock::now")\n'
            "    }\n"
            "    type Zone;\n"
            "}\n"
            "\n"
            "impl Clock for double_trait::Dummy {\n"
            "    type Zone = double_trait::Dummy;\n"
            "}\n"
        )

    def test_dummies_source(self):
        """priority_p1: Source-to-source convenience entry point for dummies mode."""
        out = expand_dummies_source("trait Clock { fn now(&self) -> u64; }")
        assert 'unimplemented!("Clock::now")' in out
        assert out.endswith("impl Clock for double_trait::Dummy {}\n")


class TestEXP012:
    """EXP-012: Configuration, serialization and reports.
    Priority: P1
    """

    def test_marker_and_indent(self):
        """priority_p1: Marker type and indentation are configurable."""
        config = DoublegenConfig(marker_type="crate::Fake", indent=2)
        fragments = _fragments("MDummy", "trait M { type A; fn m(&self) -> u8; }", config)
        assert fragments[FragmentKind.PLACEHOLDER] == "impl MDummy for crate::Fake {\n  type A = crate::Fake;\n}"
        assert '    unimplemented!("MDummy::m")\n  }' in fragments[FragmentKind.SHADOW]

    def test_blanket_param(self):
        """priority_p1: The blanket parameter name is configurable."""
        config = DoublegenConfig(blanket_param="D")
        fragments = _fragments("MDummy", "trait M {}", config)
        assert fragments[FragmentKind.ADAPTER] == "impl<D> M for D where D: MDummy {}"

    def test_json(self):
        """priority_p1: Expansions serialize to JSON."""
        expansion = expand("MDummy", parse_trait("trait M {}"))
        data = json.loads(expansion.to_json())
        assert [f["kind"] for f in data["fragments"]] == ["original", "shadow", "adapter", "placeholder"]
        assert data["fragments"][2]["name"] == "M for T"

    def test_classification_report(self):
        """priority_p1: Per-method categories with source lines."""
        decl = parse_trait(
            "trait R {\n"
            "    async fn a(&self);\n"
            "    fn b(&self) -> impl Iterator<Item = u8>;\n"
            "    fn c(&self) -> u8 { 0 }\n"
            "}"
        )
        assert classify_methods(decl) == [
            {"method": "a", "async": True, "category": "Empty", "line": 2},
            {"method": "b", "async": False, "category": "OpaqueIterator", "line": 3},
            {"method": "c", "async": False, "category": "ExistingDefault", "line": 4},
        ]
