from __future__ import annotations

import pytest

import xdrgen


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("memoText", "MemoText"),
        ("ASSET_TYPE_NATIVE", "AssetTypeNative"),
        ("ENVELOPE_TYPE_TX_V0", "EnvelopeTypeTxV0"),
        ("ed25519", "Ed25519"),
        ("CURVE_25519", "Curve_25519"),
        ("HTTPServer", "HttpServer"),
    ],
)
def test_t_01_pascal_case(name: str, expected: str) -> None:
    assert xdrgen.pascal_case(name) == expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("sourceAccount", "source_account"),
        ("ed25519SignedPayload", "ed25519_signed_payload"),
        ("HTTPServer", "http_server"),
        ("seqNum", "seq_num"),
        ("already_snake", "already_snake"),
    ],
)
def test_t_02_snake_case(name: str, expected: str) -> None:
    assert xdrgen.snake_case(name) == expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("maxOpsPerTx", "MAX_OPS_PER_TX"),
        ("MASK_ACCOUNT_FLAGS", "MASK_ACCOUNT_FLAGS"),
        ("liquidityPoolFeeV18", "LIQUIDITY_POOL_FEE_V18"),
    ],
)
def test_t_03_constant_case(name: str, expected: str) -> None:
    assert xdrgen.constant_case(name) == expected


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        ("type", "type_"),
        ("match", "match_"),
        ("sourceAccount", "source_account"),
        ("types", "types"),
    ],
)
def test_t_04_field_identifier_escapes_rust_keywords(key: str, expected: str) -> None:
    assert xdrgen.field_identifier(key) == expected


@pytest.mark.parametrize(
    "keyword",
    [
        "self", "super", "crate", "const", "let", "for", "if", "else", "enum",
        "return", "true", "false", "as", "mut", "pub", "while", "break",
        "continue", "dyn", "extern", "unsafe", "async", "await", "box",
        "abstract", "final", "override", "try", "yield",
    ],
)
def test_t_05_field_identifier_escapes_strict_and_reserved_keywords(keyword: str) -> None:
    assert xdrgen.field_identifier(keyword) == keyword + "_"


def test_t_06_struct_fields_named_like_keywords_are_escaped() -> None:
    result = xdrgen.process_struct(
        "S",
        [("self", xdrgen.IntType()), ("const", xdrgen.IntType()), ("async", xdrgen.IntType())],
    )

    assert result.type_definition.splitlines()[1:-1] == [
        "    pub self_: i32,",
        "    pub const_: i32,",
        "    pub async_: i32",
    ]
    assert "self.self_.to_xdr_buffered(write_stream);" in result.type_implementation
