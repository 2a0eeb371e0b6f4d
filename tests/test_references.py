from __future__ import annotations

import pytest

import xdrgen


@pytest.mark.parametrize(
    ("descriptor", "expected"),
    [
        (xdrgen.IntType(), "i32"),
        (xdrgen.UIntType(), "u32"),
        (xdrgen.HyperType(), "i64"),
        (xdrgen.UHyperType(), "u64"),
        (xdrgen.BoolType(), "bool"),
        (xdrgen.ReferenceType("AccountId"), "AccountId"),
        (xdrgen.UnlimitedVarOpaqueType(), "UnlimitedVarOpaque"),
        (xdrgen.UnlimitedStringType(), "UnlimitedString"),
    ],
)
def test_t_01_scalar_references_are_identical_in_both_forms(
    descriptor: xdrgen.ReferableType, expected: str
) -> None:
    assert xdrgen.type_reference(descriptor) == expected
    assert xdrgen.qualified_type_reference(descriptor) == expected


@pytest.mark.parametrize(
    ("descriptor", "short", "qualified"),
    [
        (
            xdrgen.LimitedVarArrayType(xdrgen.ReferenceType("Signer"), 20),
            "LimitedVarArray<Signer, 20>",
            "LimitedVarArray::<Signer, 20>",
        ),
        (
            xdrgen.UnlimitedVarArrayType(xdrgen.ReferenceType("Signer")),
            "UnlimitedVarArray<Signer>",
            "UnlimitedVarArray::<Signer>",
        ),
        (xdrgen.ArrayType(xdrgen.IntType(), 4), "[i32; 4]", "<[i32; 4]>"),
        (xdrgen.OpaqueType(32), "[u8; 32]", "<[u8; 32]>"),
        (
            xdrgen.LimitedVarOpaqueType(64),
            "LimitedVarOpaque<64>",
            "LimitedVarOpaque::<64>",
        ),
        (xdrgen.LimitedStringType(28), "LimitedString<28>", "LimitedString::<28>"),
        (
            xdrgen.OptionType(xdrgen.ReferenceType("AccountId")),
            "Option<AccountId>",
            "Option::<AccountId>",
        ),
    ],
)
def test_t_02_composite_references_have_short_and_qualified_forms(
    descriptor: xdrgen.ReferableType, short: str, qualified: str
) -> None:
    assert xdrgen.type_reference(descriptor) == short
    assert xdrgen.qualified_type_reference(descriptor) == qualified


def test_t_03_nested_references_qualify_every_level() -> None:
    descriptor = xdrgen.OptionType(
        xdrgen.LimitedVarArrayType(xdrgen.LimitedStringType(64), 10)
    )

    assert (
        xdrgen.type_reference(descriptor)
        == "Option<LimitedVarArray<LimitedString<64>, 10>>"
    )
    assert (
        xdrgen.qualified_type_reference(descriptor)
        == "Option::<LimitedVarArray::<LimitedString::<64>, 10>>"
    )


def test_t_04_constant_lengths_render_as_constant_names() -> None:
    descriptor = xdrgen.LimitedVarArrayType(
        xdrgen.ReferenceType("Operation"), xdrgen.ReferenceType("maxOpsPerTx")
    )

    assert xdrgen.type_reference(descriptor) == "LimitedVarArray<Operation, MAX_OPS_PER_TX>"
    assert xdrgen.type_reference(
        xdrgen.OpaqueType(xdrgen.ReferenceType("MAX_HASH_LEN"))
    ) == "[u8; MAX_HASH_LEN]"


@pytest.mark.parametrize(
    "descriptor",
    [
        xdrgen.VoidType(),
        xdrgen.OptionType(xdrgen.VoidType()),
        xdrgen.ArrayType(xdrgen.VoidType(), 2),
    ],
)
def test_t_05_void_reference_raises(descriptor: xdrgen.ReferableType) -> None:
    with pytest.raises(xdrgen.InvalidSchemaError) as exc_info:
        xdrgen.type_reference(descriptor)

    assert exc_info.value.code == "VOID_REFERENCE"
    assert "No need to reference void" in str(exc_info.value)


def test_t_06_complex_bundle_is_not_referable() -> None:
    bundle = xdrgen.process_enum("Color", {"red": 0})

    with pytest.raises(ValueError, match="via lookup"):
        xdrgen.type_reference(bundle)


@pytest.mark.parametrize(
    ("descriptor", "expected"),
    [
        (xdrgen.IntType(), frozenset()),
        (xdrgen.LimitedStringType(10), frozenset()),
        (xdrgen.OpaqueType(xdrgen.ReferenceType("HASH_LEN")), frozenset()),
        (xdrgen.ReferenceType("Asset"), frozenset({"Asset"})),
        (
            xdrgen.OptionType(
                xdrgen.UnlimitedVarArrayType(
                    xdrgen.ArrayType(xdrgen.ReferenceType("Asset"), 2)
                )
            ),
            frozenset({"Asset"}),
        ),
        (xdrgen.process_enum("Color", {"red": 0}), frozenset()),
    ],
)
def test_t_07_determine_dependencies_looks_through_wrappers(
    descriptor: xdrgen.XdrType, expected: frozenset[str]
) -> None:
    assert xdrgen.determine_dependencies(descriptor) == expected


def test_t_08_inline_dependencies_stop_at_variable_arrays() -> None:
    by_value = xdrgen.OptionType(xdrgen.ArrayType(xdrgen.ReferenceType("Asset"), 2))
    heap_backed = xdrgen.LimitedVarArrayType(xdrgen.ReferenceType("Asset"), 5)

    assert xdrgen.inline_dependencies(by_value) == frozenset({"Asset"})
    assert xdrgen.inline_dependencies(heap_backed) == frozenset()
    assert xdrgen.determine_dependencies(heap_backed) == frozenset({"Asset"})
