"""Address and name lookups."""

from __future__ import annotations

from locus.core.lookup import LookupIndex
from locus.core.models import Symbol, SymbolScope, SymbolType


def _names(symbols):
    return [s.name for s in symbols]


def test_function_at_static_address(table) -> None:
    assert table.function_at(0x50, relocated=False).name == "foo"
    assert table.function_at(0x6F, relocated=False).name == "foo"
    assert table.function_at(0x70, relocated=False).name == "helper"
    assert table.function_at(0x4F, relocated=False) is None


def test_function_at_relocated_address(table) -> None:
    table.relocate_with_offset(0x8000)
    foo = table.function_at(0x9050, relocated=True)
    assert foo is not None
    assert foo.name == "foo"
    assert foo.base == 0x9000
    assert table.function_at(0x9050, relocated=False) is None


def test_overlapping_ranges_resolve_in_table_order() -> None:
    outer = Symbol(name="outer", type=SymbolType.FUNCTION, section=".text", address=0x0, size=0x100)
    inner = Symbol(name="inner", type=SymbolType.FUNCTION, section=".text", address=0x10, size=0x10)
    assert LookupIndex([outer, inner]).function_at(0x18, relocated=False) is outer
    assert LookupIndex([inner, outer]).function_at(0x18, relocated=False) is inner


def test_functions(table) -> None:
    assert _names(table.functions()) == [
        "helper",
        "merged_static",
        "foo",
        "helper",
        "operator new(unsigned int)",
    ]


def test_global_variables(table) -> None:
    assert _names(table.global_variables()) == ["global_counter"]


def test_static_variables_by_unit(table) -> None:
    assert _names(table.static_variables("a.c")) == ["counter"]
    assert table.static_variables("b.c") == []


def test_symbol_variables_need_a_runtime_base(table) -> None:
    assert table.symbol_variables() == []
    table.relocate_with_offset(0x8000)
    assert _names(table.symbol_variables()) == [".text", ".data", "__bss_start"]


def test_const_variables(table) -> None:
    assert _names(table.const_variables()) == ["BUFFER_LEN"]


def test_const_variables_skip_reserved_names_and_relocated_labels() -> None:
    symbols = [
        Symbol(name=".Ltmp0", scope=SymbolScope.LOCAL, file="a.c"),
        Symbol(name="LIMIT", scope=SymbolScope.LOCAL, file="a.c"),
        Symbol(name="label", scope=SymbolScope.LOCAL, file="a.c", section=".text", base=0x1000),
        Symbol(name="sized", scope=SymbolScope.LOCAL, file="a.c", size=4),
        Symbol(name="exported", scope=SymbolScope.GLOBAL),
    ]
    assert _names(LookupIndex(symbols).const_variables()) == ["LIMIT"]


def test_function_by_name_prefers_static_in_unit(table) -> None:
    local = table.function_by_name("helper", "a.c")
    assert local.scope is SymbolScope.LOCAL
    assert local.file == "a.c"


def test_function_by_name_falls_back_to_global(table) -> None:
    for unit in ("b.c", None):
        found = table.function_by_name("helper", unit)
        assert found.scope is SymbolScope.GLOBAL
        assert found.address == 0x70


def test_function_by_name_finds_promoted_lto_symbols(table) -> None:
    assert table.function_by_name("merged_static").name == "merged_static"


def test_function_by_name_miss(table) -> None:
    assert table.function_by_name("nope") is None
    assert table.function_by_name("counter", "a.c") is None


def test_function_by_name_falls_back_to_unbound_scopes() -> None:
    index = LookupIndex(
        [
            Symbol(name="dual", type=SymbolType.FUNCTION, scope=SymbolScope.LOCAL, file="b.c"),
            Symbol(name="dual", type=SymbolType.FUNCTION, scope=SymbolScope.BOTH, address=0x10),
            Symbol(name="loose", type=SymbolType.FUNCTION, scope=SymbolScope.NEITHER, address=0x20),
        ]
    )
    found = index.function_by_name("dual", "a.c")
    assert found.scope is SymbolScope.BOTH
    assert found.address == 0x10
    assert index.function_by_name("loose").scope is SymbolScope.NEITHER
