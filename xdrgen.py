"""XDR schema compiler for Rust.

Turns an XDR definition graph, registered through a Python schema module's
`define(xdr)` callback, into a single Rust source file holding the type
declarations and `XdrCodec` implementations for every registered type.

Usage:
    python xdrgen.py --schema stellar_schema.py --output-dir src/xdr
"""

import argparse
import importlib.util
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from types import MappingProxyType
from typing import ClassVar

DEFAULT_OUTPUT_DIR = Path("generated")
DEFAULT_FILE_NAME = "xdr.rs"
DEFAULT_FEATURE = "all-types"
DEFAULT_BOXED_PREFIXES = ("ScSpecType",)
ROOT_MAIN_TYPES = (
    "TransactionEnvelope",
    "TransactionResult",
    "TransactionMeta",
    "TrustLineFlags",
    "EnvelopeType",
    "TransactionSignaturePayload",
    "Curve25519Secret",
)
UNBOUNDED_LENGTH = 0x7FFFFFFF


# ===--- CLI config contracts ---=== #


@dataclass(frozen=True)
class GenerateConfig:
    schema: Path
    output_dir: Path
    file_name: str
    roots: tuple[str, ...]
    feature: str
    boxed_prefixes: tuple[str, ...]


@dataclass(frozen=True)
class DiscoveryConfig:
    schema: Path
    roots: tuple[str, ...]
    boxed_prefixes: tuple[str, ...]
    filter_text: str | None


VALID_ERROR_CODES = {
    "PATH_NOT_FOUND",
    "INVALID_FILE_NAME",
    "INVALID_TYPE_NAME",
    "INVALID_FEATURE_NAME",
    "FILTER_WITHOUT_LIST",
    "INVALID_SCHEMA_MODULE",
    "MISSING_DEFINE",
}
_TYPE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_FEATURE_NAME_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_-]*$")
_FILE_NAME_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]*\.rs$")


class ConfigError(Exception):
    def __init__(self, code: str, message: str, suggestion: str | None = None):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown config error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion


def validate_type_name(name: str) -> str:
    if _TYPE_NAME_RE.match(name):
        return name
    raise ConfigError(
        "INVALID_TYPE_NAME",
        f"Invalid type name: {name}",
        "Type names must be Rust identifiers (for example TransactionEnvelope).",
    )


def validate_feature_name(name: str) -> str:
    if _FEATURE_NAME_RE.match(name):
        return name
    raise ConfigError(
        "INVALID_FEATURE_NAME",
        f"Invalid cargo feature name: {name}",
        "Use letters, digits, '_' and '-' only (for example all-types).",
    )


def validate_file_name(name: str) -> str:
    if _FILE_NAME_RE.match(name):
        return name
    raise ConfigError(
        "INVALID_FILE_NAME",
        f"Invalid output file name: {name}",
        "Pass a bare Rust file name ending in .rs (for example xdr.rs).",
    )


def validate_path_exists(
    path: Path | None, flag: str, suggestion: str | None = None
) -> Path:
    if path is None:
        raise ConfigError(
            "PATH_NOT_FOUND",
            f"{flag} is required: no path provided.",
            suggestion or f"Pass the path explicitly: {flag} /path/to/resource",
        )
    if path.exists():
        return path
    raise ConfigError(
        "PATH_NOT_FOUND",
        f"Path for {flag} does not exist: {path}",
        suggestion or "Provide an existing path for this flag.",
    )


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate Rust XDR types and codecs from a schema module"
    )

    parser.add_argument("--schema", type=Path, default=None)
    parser.add_argument("--output-dir", type=Path, default=DEFAULT_OUTPUT_DIR)
    parser.add_argument("--file-name", type=str, default=DEFAULT_FILE_NAME)
    parser.add_argument("--root", action="append", default=None)
    parser.add_argument("--feature", type=str, default=DEFAULT_FEATURE)
    parser.add_argument("--box-prefix", action="append", default=None)

    parser.add_argument("--list-types", action="store_true", default=False)
    parser.add_argument("--filter", type=str, default=None)

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_argument_parser()
    return parser.parse_args(argv)


def validate_config(args: argparse.Namespace) -> GenerateConfig | DiscoveryConfig:
    if args.filter and not args.list_types:
        raise ConfigError(
            "FILTER_WITHOUT_LIST",
            "--filter requires --list-types.",
            "Add --list-types or remove --filter.",
        )

    schema = validate_path_exists(
        args.schema,
        "--schema",
        "Pass the Python module that defines the schema: --schema path/to/schema.py",
    )
    roots = (
        tuple(dict.fromkeys(validate_type_name(name) for name in args.root))
        if args.root
        else ROOT_MAIN_TYPES
    )
    boxed_prefixes = (
        tuple(dict.fromkeys(validate_type_name(p) for p in args.box_prefix))
        if args.box_prefix
        else DEFAULT_BOXED_PREFIXES
    )

    if args.list_types:
        return DiscoveryConfig(
            schema=schema,
            roots=roots,
            boxed_prefixes=boxed_prefixes,
            filter_text=args.filter,
        )

    return GenerateConfig(
        schema=schema,
        output_dir=args.output_dir,
        file_name=validate_file_name(args.file_name),
        roots=roots,
        feature=validate_feature_name(args.feature),
        boxed_prefixes=boxed_prefixes,
    )


def build_config(argv: list[str] | None = None) -> GenerateConfig | DiscoveryConfig:
    return validate_config(parse_args(argv))


# ===--- Schema errors ---=== #


VALID_SCHEMA_ERROR_CODES = {
    "VOID_REFERENCE",
    "MISSING_ARM",
    "UNRESOLVED_REFERENCE",
    "INVALID_DISCRIMINANT",
    "INVALID_DEFAULT_ARM",
    "DUPLICATE_CASE",
}


class InvalidSchemaError(Exception):
    """A schema definition that cannot be turned into Rust types.

    Raised synchronously while processing and aborts the whole run. The fix is
    always in the schema module, never a retry.
    """

    def __init__(self, code: str, message: str):
        if code not in VALID_SCHEMA_ERROR_CODES:
            raise ValueError(f"Unknown schema error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message


# ===--- Type descriptors ---=== #


@dataclass(frozen=True)
class ReferenceType:
    kind: ClassVar[str] = "reference"
    name: str


@dataclass(frozen=True)
class IntType:
    kind: ClassVar[str] = "int"


@dataclass(frozen=True)
class UIntType:
    kind: ClassVar[str] = "uint"


@dataclass(frozen=True)
class HyperType:
    kind: ClassVar[str] = "hyper"


@dataclass(frozen=True)
class UHyperType:
    kind: ClassVar[str] = "uhyper"


@dataclass(frozen=True)
class BoolType:
    kind: ClassVar[str] = "bool"


@dataclass(frozen=True)
class VoidType:
    kind: ClassVar[str] = "void"


Length = int | ReferenceType


@dataclass(frozen=True)
class ArrayType:
    kind: ClassVar[str] = "array"
    inner: "ReferableType"
    length: Length


@dataclass(frozen=True)
class LimitedVarArrayType:
    kind: ClassVar[str] = "limitedVarArray"
    inner: "ReferableType"
    max_length: Length


@dataclass(frozen=True)
class UnlimitedVarArrayType:
    kind: ClassVar[str] = "unlimitedVarArray"
    inner: "ReferableType"


@dataclass(frozen=True)
class OpaqueType:
    kind: ClassVar[str] = "opaque"
    length: Length


@dataclass(frozen=True)
class LimitedVarOpaqueType:
    kind: ClassVar[str] = "limitedVarOpaque"
    max_length: Length


@dataclass(frozen=True)
class UnlimitedVarOpaqueType:
    kind: ClassVar[str] = "unlimitedVarOpaque"


@dataclass(frozen=True)
class LimitedStringType:
    kind: ClassVar[str] = "limitedString"
    max_length: Length


@dataclass(frozen=True)
class UnlimitedStringType:
    kind: ClassVar[str] = "unlimitedString"


@dataclass(frozen=True)
class OptionType:
    kind: ClassVar[str] = "option"
    inner: "ReferableType"


ReferableType = (
    ReferenceType
    | IntType
    | UIntType
    | HyperType
    | UHyperType
    | BoolType
    | VoidType
    | ArrayType
    | LimitedVarArrayType
    | UnlimitedVarArrayType
    | OpaqueType
    | LimitedVarOpaqueType
    | UnlimitedVarOpaqueType
    | LimitedStringType
    | UnlimitedStringType
    | OptionType
)


# ===--- Complex type bundles ---=== #


@dataclass(frozen=True)
class EnumType:
    """Processed enum: rendered declaration, codec body and case count.

    case_count is what union completeness analysis compares against when a
    union switches on this enum.
    """

    kind: ClassVar[str] = "enum"
    name: str
    type_definition: str
    type_implementation: str
    case_count: int


@dataclass(frozen=True)
class StructType:
    """Processed struct.

    Attributes:
        referred_types: Named types reached in one hop through any field.
        inline_types: Subset of referred_types held by value (no Box, no Vec).
            Used only by find_unboxed_cycles.
    """

    kind: ClassVar[str] = "struct"
    name: str
    type_definition: str
    type_implementation: str
    referred_types: frozenset[str]
    inline_types: frozenset[str] = frozenset()


@dataclass(frozen=True)
class UnionType:
    """Processed union. Same dependency attributes as StructType."""

    kind: ClassVar[str] = "union"
    name: str
    type_definition: str
    type_implementation: str
    referred_types: frozenset[str]
    inline_types: frozenset[str] = frozenset()


ComplexType = EnumType | StructType | UnionType
XdrType = ReferableType | ComplexType
COMPLEX_TYPES = (EnumType, StructType, UnionType)

SwitchValue = int | str
Arm = str | VoidType | None


@dataclass(frozen=True)
class UnionDefinition:
    """Unprocessed union as registered by a schema module.

    Attributes:
        switch_on: Discriminant descriptor: int, uint, bool or a lookup of an
            enum (typedef aliases of those are followed).
        switch_name: Name of the discriminant in the XDR source. Kept for
            documentation; the Rust enum does not carry it.
        switches: Ordered (switch value, arm) pairs. The arm is a key into
            arms, or void/None for a case without payload.
        arms: Arm name -> payload descriptor.
        default_arm: Void for an explicit default; a Default case is then
            always synthesized. Payload-carrying defaults are rejected.
    """

    switch_on: ReferableType
    switch_name: str
    switches: Sequence[tuple[SwitchValue, Arm]]
    arms: Mapping[str, ReferableType]
    default_arm: VoidType | None = None


@dataclass(frozen=True)
class Schema:
    """Immutable result of one build: the type table and the constant table.

    types iterates in registration order, which is also emission order.
    """

    types: Mapping[str, XdrType]
    constants: Mapping[str, int | str]


# ===--- Identifier rendering ---=== #

_WORD_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]+")

RUST_RESERVED = {
    # strict
    "as", "async", "await", "break", "const", "continue", "crate", "dyn",
    "else", "enum", "extern", "false", "fn", "for", "if", "impl", "in",
    "let", "loop", "match", "mod", "move", "mut", "pub", "ref", "return",
    "self", "Self", "static", "struct", "super", "trait", "true", "type",
    "unsafe", "use", "where", "while",
    # reserved
    "abstract", "become", "box", "do", "final", "macro", "override", "priv",
    "try", "typeof", "unsized", "virtual", "yield",
}


def split_words(name: str) -> list[str]:
    spaced = _WORD_BOUNDARY_RE.sub(" ", name)
    return [word for word in _NON_ALNUM_RE.split(spaced) if word]


def pascal_case(name: str) -> str:
    parts = []
    for index, word in enumerate(split_words(name)):
        part = word[0].upper() + word[1:].lower()
        if index > 0 and part[0].isdigit():
            part = "_" + part
        parts.append(part)
    return "".join(parts)


def snake_case(name: str) -> str:
    return "_".join(word.lower() for word in split_words(name))


def constant_case(name: str) -> str:
    return "_".join(word.upper() for word in split_words(name))


def field_identifier(key: str) -> str:
    ident = snake_case(key)
    if ident in RUST_RESERVED:
        return ident + "_"
    return ident


# ===--- Reference resolution ---=== #

RUST_PRIMITIVES = {
    IntType: "i32",
    UIntType: "u32",
    HyperType: "i64",
    UHyperType: "u64",
    BoolType: "bool",
}


def render_length(length: Length) -> str:
    if isinstance(length, ReferenceType):
        return constant_case(length.name)
    return str(length)


def type_reference(descriptor: ReferableType) -> str:
    """Rust type as written in a field, variant or generic argument list."""
    return _render_reference(descriptor, qualified=False)


def qualified_type_reference(descriptor: ReferableType) -> str:
    """Rust type as written in front of `::from_xdr_buffered(...)`.

    Generic composites need turbofish syntax (`LimitedVarArray::<T, N>`) and
    array types need angle brackets (`<[u8; 32]>`) to be callable.
    """
    return _render_reference(descriptor, qualified=True)


def _render_reference(descriptor: ReferableType, qualified: bool) -> str:
    sep = "::" if qualified else ""

    if isinstance(descriptor, VoidType):
        raise InvalidSchemaError("VOID_REFERENCE", "No need to reference void")
    if isinstance(descriptor, ReferenceType):
        return descriptor.name
    primitive = RUST_PRIMITIVES.get(type(descriptor))
    if primitive is not None:
        return primitive

    if isinstance(descriptor, LimitedVarArrayType):
        inner = _render_reference(descriptor.inner, qualified)
        return (
            f"LimitedVarArray{sep}<{inner}, {render_length(descriptor.max_length)}>"
        )
    if isinstance(descriptor, UnlimitedVarArrayType):
        inner = _render_reference(descriptor.inner, qualified)
        return f"UnlimitedVarArray{sep}<{inner}>"
    if isinstance(descriptor, ArrayType):
        inner = _render_reference(descriptor.inner, qualified)
        array = f"[{inner}; {render_length(descriptor.length)}]"
        return f"<{array}>" if qualified else array
    if isinstance(descriptor, LimitedVarOpaqueType):
        return f"LimitedVarOpaque{sep}<{render_length(descriptor.max_length)}>"
    if isinstance(descriptor, UnlimitedVarOpaqueType):
        return "UnlimitedVarOpaque"
    if isinstance(descriptor, OpaqueType):
        array = f"[u8; {render_length(descriptor.length)}]"
        return f"<{array}>" if qualified else array
    if isinstance(descriptor, LimitedStringType):
        return f"LimitedString{sep}<{render_length(descriptor.max_length)}>"
    if isinstance(descriptor, UnlimitedStringType):
        return "UnlimitedString"
    if isinstance(descriptor, OptionType):
        inner = _render_reference(descriptor.inner, qualified)
        return f"Option{sep}<{inner}>"

    if isinstance(descriptor, COMPLEX_TYPES):
        raise ValueError(
            f"{descriptor.kind} {descriptor.name} must be referenced by name via lookup()"
        )
    raise ValueError(f"Unsupported type descriptor: {descriptor!r}")


# ===--- Dependency extraction ---=== #

_WRAPPER_TYPES = (ArrayType, LimitedVarArrayType, UnlimitedVarArrayType, OptionType)
_INLINE_WRAPPER_TYPES = (ArrayType, OptionType)


def determine_dependencies(xdr_type: XdrType) -> frozenset[str]:
    """Named types reached in one hop from xdr_type.

    Wrappers are looked through; struct and union bundles return the set
    cached when they were processed. Enums, primitives, opaque blocks and
    strings reach nothing.
    """
    if isinstance(xdr_type, ReferenceType):
        return frozenset({xdr_type.name})
    if isinstance(xdr_type, (StructType, UnionType)):
        return xdr_type.referred_types
    if isinstance(xdr_type, _WRAPPER_TYPES):
        return determine_dependencies(xdr_type.inner)
    return frozenset()


def inline_dependencies(xdr_type: XdrType) -> frozenset[str]:
    """Named types held by value; variable arrays are heap backed and stop."""
    if isinstance(xdr_type, ReferenceType):
        return frozenset({xdr_type.name})
    if isinstance(xdr_type, (StructType, UnionType)):
        return xdr_type.inline_types
    if isinstance(xdr_type, _INLINE_WRAPPER_TYPES):
        return inline_dependencies(xdr_type.inner)
    return frozenset()


# ===--- Enums ---=== #

_DECODE_SIGNATURE = (
    "    fn from_xdr_buffered<T: AsRef<[u8]>>(",
    "        read_stream: &mut ReadStream<T>,",
    "    ) -> Result<Self, DecodeError> {",
)


def process_enum(name: str, cases: Mapping[str, int]) -> EnumType:
    variants = []
    readers = []
    for key, value in cases.items():
        case = pascal_case(key)
        variants.append(f"    {case} = {value}")
        readers.append(f"            {value} => Ok({name}::{case}),")

    type_definition = f"pub enum {name} {{\n" + ",\n".join(variants) + "\n}"
    lines = [
        "    fn to_xdr_buffered(&self, write_stream: &mut WriteStream) {",
        "        let value = *self as i32;",
        "        value.to_xdr_buffered(write_stream);",
        "    }",
        "",
        *_DECODE_SIGNATURE,
        "        let enum_value = i32::from_xdr_buffered(read_stream)?;",
        "        match enum_value {",
        *readers,
        "            _ => Err(DecodeError::InvalidEnumDiscriminator {at_position: read_stream.get_position()})",
        "        }",
        "    }",
    ]
    return EnumType(
        name=name,
        type_definition=type_definition,
        type_implementation="\n".join(lines),
        case_count=len(cases),
    )


# ===--- Structs ---=== #


def is_optional_cycle(descriptor: ReferableType, owner: str) -> bool:
    return (
        isinstance(descriptor, OptionType)
        and isinstance(descriptor.inner, ReferenceType)
        and descriptor.inner.name == owner
    )


def resolve_member_references(
    descriptor: ReferableType, owner: str
) -> tuple[str, str]:
    """Return (type reference, qualified reference) for a field or arm of owner.

    An optional reference back to owner is boxed, otherwise owner could not
    be sized.
    """
    if is_optional_cycle(descriptor, owner):
        return f"Option<Box<{owner}>>", f"Option::<Box<{owner}>>"
    return type_reference(descriptor), qualified_type_reference(descriptor)


def process_struct(
    name: str,
    fields: Sequence[tuple[str, ReferableType]],
    boxed_prefixes: Sequence[str] = DEFAULT_BOXED_PREFIXES,
) -> StructType:
    declarations = []
    writers = []
    readers = []
    referred: set[str] = set()
    inline: set[str] = set()

    # Structs of the boxed families get their first field boxed, nothing else.
    box_first = name.startswith(tuple(boxed_prefixes))

    for index, (key, descriptor) in enumerate(fields):
        ident = field_identifier(key)
        type_ref, qualified_ref = resolve_member_references(descriptor, name)
        decode = f"{qualified_ref}::from_xdr_buffered(read_stream)?"
        boxed = box_first and index == 0

        if boxed:
            declarations.append(f"    pub {ident}: Box<{type_ref}>")
            readers.append(f"            {ident}: Box::new({decode}),")
        else:
            declarations.append(f"    pub {ident}: {type_ref}")
            readers.append(f"            {ident}: {decode},")
        writers.append(f"        self.{ident}.to_xdr_buffered(write_stream);")

        referred |= determine_dependencies(descriptor)
        if not boxed and not is_optional_cycle(descriptor, name):
            inline |= inline_dependencies(descriptor)

    type_definition = f"pub struct {name} {{\n" + ",\n".join(declarations) + "\n}"
    lines = [
        "    fn to_xdr_buffered(&self, write_stream: &mut WriteStream) {",
        *writers,
        "    }",
        "",
        *_DECODE_SIGNATURE,
        f"        Ok({name} {{",
        *readers,
        "        })",
        "    }",
    ]
    return StructType(
        name=name,
        type_definition=type_definition,
        type_implementation="\n".join(lines),
        referred_types=frozenset(referred),
        inline_types=frozenset(inline),
    )


# ===--- Unions ---=== #

_UNBOUNDED_DISCRIMINANTS = (IntType, UIntType, HyperType, UHyperType)


def resolve_switch_type(
    types: Mapping[str, XdrType], switch_on: ReferableType
) -> XdrType:
    """Follow a union discriminant through lookups and typedef aliases.

    Args:
        types: Type table holding every non-union type (phase 1 complete).
        switch_on: The union's discriminant descriptor.

    Returns:
        The resolved IntType, UIntType, HyperType, UHyperType, BoolType or
        EnumType.

    Raises:
        InvalidSchemaError: UNRESOLVED_REFERENCE when a looked-up name is not
            in the table; INVALID_DISCRIMINANT when the resolved type cannot
            discriminate a union or aliases loop.
    """
    seen: set[str] = set()
    resolved: XdrType = switch_on
    while isinstance(resolved, ReferenceType):
        if resolved.name in seen:
            raise InvalidSchemaError(
                "INVALID_DISCRIMINANT",
                f"Discriminant aliases loop through {resolved.name}",
            )
        seen.add(resolved.name)
        target = types.get(resolved.name)
        if target is None:
            raise InvalidSchemaError(
                "UNRESOLVED_REFERENCE",
                f'Discriminant type "{resolved.name}" is not defined',
            )
        resolved = target

    if not isinstance(resolved, _UNBOUNDED_DISCRIMINANTS + (BoolType, EnumType)):
        raise InvalidSchemaError(
            "INVALID_DISCRIMINANT",
            f"A union cannot switch on a {resolved.kind} type",
        )
    return resolved


def is_switch_exhaustive(resolved_switch_type: XdrType, switch_count: int) -> bool:
    """Return True when switch_count cases cover every discriminant value.

    Integer discriminants never are. Booleans need both values and enums need
    at least as many switches as they have cases.
    """
    if isinstance(resolved_switch_type, _UNBOUNDED_DISCRIMINANTS):
        return False
    if isinstance(resolved_switch_type, BoolType):
        return switch_count >= 2
    if isinstance(resolved_switch_type, EnumType):
        return switch_count >= resolved_switch_type.case_count
    return False


def union_case_identifier(value: SwitchValue) -> str:
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, str):
        return pascal_case(value)
    if value < 0:
        return f"VNeg{-value}"
    return f"V{value}"


def _switch_literals(value: SwitchValue, switch_ref: str) -> tuple[str, str]:
    """Return (encode expression, decode pattern) for one switch value."""
    if isinstance(value, bool):
        literal = "true" if value else "false"
        return literal, literal
    if isinstance(value, str):
        path = f"{switch_ref}::{pascal_case(value)}"
        return path, path
    return f"({value} as {switch_ref})", str(value)


def process_union(
    name: str,
    definition: UnionDefinition,
    resolved_switch_type: XdrType,
    boxed_prefixes: Sequence[str] = DEFAULT_BOXED_PREFIXES,
) -> UnionType:
    """Render a union as a Rust enum with discriminant-then-payload codec.

    Args:
        name: Union type name.
        definition: Registered union definition.
        resolved_switch_type: Discriminant after resolve_switch_type; decides
            whether a Default case must be synthesized.
        boxed_prefixes: Payload types whose qualified reference starts with
            one of these are boxed.

    Returns:
        UnionType bundle.

    Raises:
        InvalidSchemaError: MISSING_ARM when a switch names an arm absent from
            definition.arms; VOID_REFERENCE when an arm's payload is void;
            INVALID_DEFAULT_ARM when default_arm carries a payload;
            DUPLICATE_CASE when two switches (or a switch and the synthesized
            Default case) render to the same variant.
    """
    switch_ref = type_reference(definition.switch_on)
    variants = []
    writers = []
    readers = []
    inline: set[str] = set(inline_dependencies(definition.switch_on))
    cases: set[str] = set()

    if definition.default_arm is not None and not isinstance(
        definition.default_arm, VoidType
    ):
        raise InvalidSchemaError(
            "INVALID_DEFAULT_ARM",
            f'Union definition "{name}" has a default arm with a payload; only void is supported',
        )

    for value, arm in definition.switches:
        case = union_case_identifier(value)
        if case in cases:
            raise InvalidSchemaError(
                "DUPLICATE_CASE",
                f'Union definition "{name}" has more than one case named "{case}"',
            )
        cases.add(case)
        encoded, pattern = _switch_literals(value, switch_ref)

        if arm is None or isinstance(arm, VoidType):
            variants.append(f"    {case}")
            writers.append(
                f"            {name}::{case} => {encoded}.to_xdr_buffered(write_stream),"
            )
            readers.append(f"            {pattern} => Ok({name}::{case}),")
            continue

        payload = definition.arms.get(arm)
        if payload is None:
            raise InvalidSchemaError(
                "MISSING_ARM",
                f'Union definition "{name}" has a switch "{case}" without an arm definition',
            )

        type_ref, qualified_ref = resolve_member_references(payload, name)
        decode = f"{qualified_ref}::from_xdr_buffered(read_stream)?"
        if qualified_ref.startswith(tuple(boxed_prefixes)):
            variants.append(f"    {case}(Box<{type_ref}>)")
            decode = f"Box::new({decode})"
        else:
            variants.append(f"    {case}({type_ref})")
            if not is_optional_cycle(payload, name):
                inline |= inline_dependencies(payload)

        writers.append(
            f"            {name}::{case}(value) => "
            f"{{{encoded}.to_xdr_buffered(write_stream); value.to_xdr_buffered(write_stream)}},"
        )
        readers.append(f"            {pattern} => Ok({name}::{case}({decode})),")

    exhaustive = is_switch_exhaustive(resolved_switch_type, len(definition.switches))
    if definition.default_arm is not None or not exhaustive:
        if "Default" in cases:
            raise InvalidSchemaError(
                "DUPLICATE_CASE",
                f'Union definition "{name}" has a case named "Default" and needs a default arm',
            )
        variants.append(f"    Default({switch_ref})")
        writers.append(
            f"            {name}::Default(code) => code.to_xdr_buffered(write_stream),"
        )
        # Must stay the last match arm: it catches every value not listed above.
        readers.append(f"            code => Ok({name}::Default(code)),")

    referred: set[str] = set()
    for payload in definition.arms.values():
        referred |= determine_dependencies(payload)
    referred |= determine_dependencies(definition.switch_on)

    type_definition = f"pub enum {name} {{\n" + ",\n".join(variants) + "\n}"
    lines = [
        "    fn to_xdr_buffered(&self, write_stream: &mut WriteStream) {",
        "        match self {",
        *writers,
        "        }",
        "    }",
        "",
        *_DECODE_SIGNATURE,
        f"        match {switch_ref}::from_xdr_buffered(read_stream)? {{",
        *readers,
        "        }",
        "    }",
    ]
    return UnionType(
        name=name,
        type_definition=type_definition,
        type_implementation="\n".join(lines),
        referred_types=frozenset(referred),
        inline_types=frozenset(inline),
    )


# ===--- Schema builder ---=== #


def _is_unbounded(max_length: Length | None) -> bool:
    return max_length is None or max_length == UNBOUNDED_LENGTH


class SchemaBuilder:
    """Registration context handed to a schema module's `define(xdr)`.

    Building happens in two phases. Phase 1 runs during registration: enums
    and structs are processed as they arrive, typedefs and constants are
    stored. Phase 2 is build(): unions are resolved against the completed
    phase-1 table, since a union switching on an enum needs its case count.
    """

    def __init__(self, boxed_prefixes: Iterable[str] = DEFAULT_BOXED_PREFIXES):
        self.boxed_prefixes = tuple(boxed_prefixes)
        self.types: dict[str, XdrType] = {}
        self.constants: dict[str, int | str] = {}
        self._pending_unions: list[tuple[str, UnionDefinition]] = []

    # Registration

    def typedef(self, name: str, descriptor: ReferableType) -> None:
        self.types[name] = descriptor

    def enum(self, name: str, cases: Mapping[str, int]) -> None:
        self.types[name] = process_enum(name, cases)

    def struct(self, name: str, fields: Sequence[tuple[str, ReferableType]]) -> None:
        self.types[name] = process_struct(name, fields, self.boxed_prefixes)

    def union(
        self, name: str, definition: UnionDefinition | None = None, **fields
    ) -> None:
        if definition is None:
            definition = UnionDefinition(**fields)
        elif fields:
            raise TypeError(
                f"union() got both a definition and keyword fields: {sorted(fields)}"
            )
        self._pending_unions.append((name, definition))

    def const(self, name: str, value: int | str) -> None:
        self.constants[name] = value

    # Descriptors

    def lookup(self, name: str) -> ReferenceType:
        return ReferenceType(name)

    def option(self, inner: ReferableType) -> OptionType:
        return OptionType(inner)

    def opaque(self, length: Length) -> OpaqueType:
        return OpaqueType(length)

    def var_opaque(
        self, max_length: Length | None = None
    ) -> LimitedVarOpaqueType | UnlimitedVarOpaqueType:
        if _is_unbounded(max_length):
            return UnlimitedVarOpaqueType()
        return LimitedVarOpaqueType(max_length)

    def string(
        self, max_length: Length | None = None
    ) -> LimitedStringType | UnlimitedStringType:
        if _is_unbounded(max_length):
            return UnlimitedStringType()
        return LimitedStringType(max_length)

    def array(self, inner: ReferableType, length: Length) -> ArrayType:
        return ArrayType(inner, length)

    def var_array(
        self, inner: ReferableType, max_length: Length | None = None
    ) -> LimitedVarArrayType | UnlimitedVarArrayType:
        if _is_unbounded(max_length):
            return UnlimitedVarArrayType(inner)
        return LimitedVarArrayType(inner, max_length)

    def build(self) -> Schema:
        for name, definition in self._pending_unions:
            resolved = resolve_switch_type(self.types, definition.switch_on)
            self.types[name] = process_union(
                name, definition, resolved, self.boxed_prefixes
            )
        self._pending_unions.clear()
        return Schema(
            types=MappingProxyType(dict(self.types)),
            constants=MappingProxyType(dict(self.constants)),
        )

    # Primitive constructors stay last: their names shadow builtins in the
    # class body, which would break annotations evaluated after them.

    def void(self) -> VoidType:
        return VoidType()

    def bool(self) -> BoolType:
        return BoolType()

    def int(self) -> IntType:
        return IntType()

    def uint(self) -> UIntType:
        return UIntType()

    def hyper(self) -> HyperType:
        return HyperType()

    def uhyper(self) -> UHyperType:
        return UHyperType()


SchemaDefinition = Callable[[SchemaBuilder], None]


def build_schema(
    define: SchemaDefinition,
    boxed_prefixes: Iterable[str] = DEFAULT_BOXED_PREFIXES,
) -> Schema:
    builder = SchemaBuilder(boxed_prefixes)
    define(builder)
    return builder.build()


def load_definition(path: Path) -> SchemaDefinition:
    """Import a schema module from path and return its `define` callable.

    Raises:
        ConfigError: INVALID_SCHEMA_MODULE when path cannot be imported as a
            Python module; MISSING_DEFINE when it has no callable `define`.
        Any exception raised while executing the module body.
    """
    module_name = "xdrgen_schema_" + re.sub(r"\W", "_", path.stem)
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ConfigError(
            "INVALID_SCHEMA_MODULE",
            f"Cannot import schema module: {path}",
            "Pass a Python source file, for example --schema stellar_schema.py.",
        )
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    define = getattr(module, "define", None)
    if not callable(define):
        raise ConfigError(
            "MISSING_DEFINE",
            f"Schema module {path} does not define a callable define(xdr).",
            "Add `def define(xdr): ...` registering the schema's types.",
        )
    return define


# ===--- Reachability ---=== #


@dataclass(frozen=True)
class ReachabilityStats:
    """Diagnostics from a single determine_main_types run.

    Attributes:
        root_count: Number of distinct root names.
        reached_count: Number of types in the closure, roots included.
        iteration_count: Worklist pops until the closure was complete.
    """

    root_count: int
    reached_count: int
    iteration_count: int


def determine_main_types(
    types: Mapping[str, XdrType],
    roots: Sequence[str] = ROOT_MAIN_TYPES,
) -> tuple[frozenset[str], ReachabilityStats]:
    """Compute the transitive dependency closure of the root types.

    Worklist expansion: pop a name, mark it reached, push each of its one-hop
    dependencies that is neither reached nor already queued. Terminates on
    cyclic schemas since every name is pushed at most once.

    Args:
        types: Complete type table.
        roots: Names whose closure is emitted without a feature gate.

    Returns:
        Tuple of (closed frozenset of names, ReachabilityStats).

    Raises:
        InvalidSchemaError: UNRESOLVED_REFERENCE when a root or a reached
            dependency is not in the table.
    """
    remaining = list(dict.fromkeys(roots))
    reached: set[str] = set()
    iteration_count = 0

    while remaining:
        iteration_count += 1
        type_name = remaining.pop()
        reached.add(type_name)

        xdr_type = types.get(type_name)
        if xdr_type is None:
            raise InvalidSchemaError(
                "UNRESOLVED_REFERENCE",
                f'Type "{type_name}" is reachable from the roots but never defined',
            )
        for dep in sorted(determine_dependencies(xdr_type)):
            if dep not in reached and dep not in remaining:
                remaining.append(dep)

    stats = ReachabilityStats(
        root_count=len(set(roots)),
        reached_count=len(reached),
        iteration_count=iteration_count,
    )
    return frozenset(reached), stats


def _reachable_from(start: str, edges: Mapping[str, Sequence[str]]) -> set[str]:
    seen: set[str] = set()
    stack = list(edges.get(start, ()))
    while stack:
        name = stack.pop()
        if name in seen:
            continue
        seen.add(name)
        stack.extend(edges.get(name, ()))
    return seen


def find_unboxed_cycles(types: Mapping[str, XdrType]) -> list[tuple[str, ...]]:
    """Find groups of types that contain each other by value.

    Only by-value edges count (see inline_dependencies); Box, Vec-backed
    arrays and boxed self-optionals break a cycle. Every group returned is a
    strongly connected set that Rust cannot size.

    Args:
        types: Complete type table. Edges to undefined names are ignored.

    Returns:
        One sorted tuple of names per cyclic group, in type-table order of
        each group's first member.
    """
    edges = {
        name: sorted(dep for dep in inline_dependencies(xdr_type) if dep in types)
        for name, xdr_type in types.items()
    }
    reach = {name: _reachable_from(name, edges) for name in edges}

    cycles: list[tuple[str, ...]] = []
    assigned: set[str] = set()
    for name in types:
        if name in assigned or name not in reach[name]:
            continue
        group = tuple(sorted(other for other in reach[name] if name in reach[other]))
        assigned.update(group)
        cycles.append(group)
    return cycles


# ===--- Shared run metadata ---=== #


@dataclass(frozen=True)
class WriteConfig:
    """Generation metadata embedded in the generated file.

    Attributes:
        generated_on: ISO date of the run, e.g. "2026-10-19".
        schema_name: File name of the schema module the types came from.
        feature: Cargo feature gating types not reachable from the roots.
    """

    generated_on: str
    schema_name: str
    feature: str = DEFAULT_FEATURE


@dataclass(frozen=True)
class RustImport:
    """One `use` statement of the generated file.

    Renders as `use <path>::<name>;` for a single name and
    `use <path>::{<name1>, <name2>};` otherwise, preceded by an
    `#[allow(unused_imports)]` attribute.
    """

    path: str
    names: tuple[str, ...]


DEFAULT_IMPORTS: tuple[RustImport, ...] = (
    RustImport("sp_std", ("prelude::*", "boxed::Box")),
    RustImport("core::convert", ("AsRef",)),
    RustImport("super::xdr_codec", ("XdrCodec",)),
    RustImport("super::streams", ("ReadStream", "DecodeError", "WriteStream")),
    RustImport(
        "super::compound_types",
        (
            "LimitedVarOpaque",
            "LimitedString",
            "LimitedVarArray",
            "UnlimitedVarOpaque",
            "UnlimitedString",
            "UnlimitedVarArray",
        ),
    ),
)
"""Runtime codec traits and bounded containers every generated file uses."""


@dataclass(frozen=True)
class FileWriteResult:
    """Result of writing the generated file.

    Attributes:
        filename: File name written, e.g. "xdr.rs".
        path: Absolute path of the written file.
        line_count: Number of newline characters in the written content.
        byte_count: Number of bytes written (UTF-8 encoded).
    """

    filename: str
    path: Path
    line_count: int
    byte_count: int


# ===--- Pure formatting functions ---=== #

ENUM_DERIVES = "Debug, Copy, Clone, Eq, PartialEq"
DATA_DERIVES = "Debug, Clone, Eq, PartialEq"
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


def format_file_header(config: WriteConfig) -> list[str]:
    """Return the comment-block lines at the top of the generated file.

    Output format:
        //! Autogenerated XDR types
        //!
        // This code has been automatically generated on 2026-10-19
        // from schema `stellar_schema.py` by xdrgen
        // Do not edit this file manually!

    Raises:
        ValueError: If config.generated_on is empty.
    """
    if not config.generated_on:
        raise ValueError("generated_on must not be empty")
    return [
        "//! Autogenerated XDR types",
        "//!",
        f"// This code has been automatically generated on {config.generated_on}",
        f"// from schema `{config.schema_name}` by xdrgen",
        "// Do not edit this file manually!",
    ]


def format_import_block(imports: tuple[RustImport, ...]) -> list[str]:
    """Return the `use` lines, each preceded by `#[allow(unused_imports)]`.

    Raises:
        ValueError: If any RustImport has an empty names tuple.
    """
    lines: list[str] = []
    for imp in imports:
        if not imp.names:
            raise ValueError(f"RustImport for '{imp.path}' has empty names tuple")
        lines.append("#[allow(unused_imports)]")
        if len(imp.names) == 1:
            lines.append(f"use {imp.path}::{imp.names[0]};")
        else:
            lines.append(f"use {imp.path}::{{{', '.join(imp.names)}}};")
    return lines


def _constant_declaration(value: int | str) -> tuple[str, str]:
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return "&str", f'"{escaped}"'
    if _I32_MIN <= value <= _I32_MAX:
        return "i32", str(value)
    return "i64", str(value)


def format_constant_lines(constants: Mapping[str, int | str]) -> list[str]:
    lines: list[str] = []
    for name, value in constants.items():
        rust_type, literal = _constant_declaration(value)
        lines.append(f"/// Autogenerated definition for constant {name}")
        lines.append("#[allow(dead_code)]")
        lines.append(f"pub const {constant_case(name)}: {rust_type} = {literal};")
    return lines


def format_type_lines(
    name: str, xdr_type: XdrType, gated: bool, feature: str = DEFAULT_FEATURE
) -> list[str]:
    """Return the declaration (and codec impl) lines for one named type.

    Plain descriptors become `pub type` aliases. Enums, structs and unions
    become a derive-annotated declaration followed by `impl XdrCodec`. When
    gated, both the declaration and the impl carry the feature `cfg`.
    Always ends with one blank line.
    """
    gate = [f'#[cfg(feature = "{feature}")]'] if gated else []
    lines = [f"/// Autogenerated definition for type {name}", "#[allow(dead_code)]"]
    lines.extend(gate)

    if isinstance(xdr_type, COMPLEX_TYPES):
        derive = ENUM_DERIVES if isinstance(xdr_type, EnumType) else DATA_DERIVES
        lines.append(f"#[derive({derive})]")
        lines.extend(xdr_type.type_definition.split("\n"))
        lines.append("")
        lines.extend(gate)
        lines.append(f"impl XdrCodec for {name} {{")
        lines.extend(xdr_type.type_implementation.split("\n"))
        lines.append("}")
    else:
        lines.append(f"pub type {name} = {type_reference(xdr_type)};")

    lines.append("")
    return lines


def assemble_source(
    config: WriteConfig, schema: Schema, main_types: frozenset[str]
) -> str:
    """Assemble the complete Rust source text for a schema.

    File structure:
        <header comment block>
                                    <- blank line
        <import block>
                                    <- blank line
        <constant declarations>     <- omitted with its blank line when empty
                                    <- blank line
        <one block per type>        <- type-table order, no topological sort

    Types outside main_types are gated behind config.feature.

    Returns:
        Complete source string with exactly one trailing newline.

    Raises:
        ValueError: Propagated from format_file_header.
        InvalidSchemaError: VOID_REFERENCE for a typedef of void.
    """
    parts: list[str] = list(format_file_header(config))
    parts.append("")
    parts.extend(format_import_block(DEFAULT_IMPORTS))
    parts.append("")

    if schema.constants:
        parts.extend(format_constant_lines(schema.constants))
        parts.append("")

    for name, xdr_type in schema.types.items():
        parts.extend(
            format_type_lines(name, xdr_type, name not in main_types, config.feature)
        )

    return "\n".join(parts).rstrip("\n") + "\n"


# ===--- Writer I/O ---=== #


def write_source(output_dir: Path, file_name: str, content: str) -> FileWriteResult:
    """Write the generated source to output_dir / file_name.

    Thin I/O shell: creates output_dir (and missing parents) first. Callers
    hand over fully assembled content, so a failed run never leaves a
    partially generated file behind.

    Raises:
        OSError: Propagated directly if the filesystem write fails.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    file_path = output_dir / file_name
    file_path.write_text(content, encoding="utf-8")
    resolved = file_path.resolve()
    return FileWriteResult(
        filename=file_name,
        path=resolved,
        line_count=content.count("\n"),
        byte_count=len(resolved.read_bytes()),
    )


# ===--- Discovery ---=== #


def type_kind_label(xdr_type: XdrType) -> str:
    if isinstance(xdr_type, COMPLEX_TYPES):
        return xdr_type.kind
    return "typedef"


def format_types_table(
    schema: Schema,
    main_types: frozenset[str],
    filter_text: str | None = None,
) -> str:
    """Render the --list-types table.

    One row per type in type-table order: name, kind, one-hop dependency
    count, and whether the type is emitted unconditionally ("root") or behind
    the feature gate ("gated"). filter_text is a case-insensitive substring
    match on the name.
    """
    needle = filter_text.lower() if filter_text else None
    rows = [
        (name, type_kind_label(xdr_type), len(determine_dependencies(xdr_type)))
        for name, xdr_type in schema.types.items()
        if needle is None or needle in name.lower()
    ]

    lines = [f"Types in schema ({len(rows)} of {len(schema.types)}):", ""]
    if not rows:
        lines.append(f"  (no types match '{filter_text}')")
        return "\n".join(lines) + "\n"

    name_width = max(len("Name"), *(len(row[0]) for row in rows))
    lines.append(f"  {'Name':<{name_width}}  {'Kind':<8}  {'Deps':>4}  Emit")
    for name, kind, dep_count in rows:
        emit = "root" if name in main_types else "gated"
        lines.append(f"  {name:<{name_width}}  {kind:<8}  {dep_count:>4}  {emit}")
    return "\n".join(lines) + "\n"


def run_discovery(config: DiscoveryConfig) -> None:
    schema = build_schema(load_definition(config.schema), config.boxed_prefixes)
    main_types, _stats = determine_main_types(schema.types, config.roots)
    print(format_types_table(schema, main_types, config.filter_text), end="")


# ===--- Summary report ---=== #


@dataclass(frozen=True)
class KindCount:
    """Count of one type kind, split by root-reachable vs. feature-gated.

    Invariant: root + gated == total. Enforced by build_generation_counts.
    """

    total: int
    root: int
    gated: int


@dataclass(frozen=True)
class GenerationCounts:
    typedefs: KindCount
    enums: KindCount
    structs: KindCount
    unions: KindCount
    constants: int


@dataclass(frozen=True)
class GenerationSummary:
    """Complete, immutable data for the post-generation console report.

    Attributes:
        schema_label: Schema module file name.
        feature: Cargo feature gating non-root types.
        counts: Per-kind counts from build_generation_counts.
        file: Write result of the generated file.
        unboxed_cycles: Groups reported by find_unboxed_cycles.
    """

    schema_label: str
    feature: str
    counts: GenerationCounts
    file: FileWriteResult
    unboxed_cycles: tuple[tuple[str, ...], ...]


def build_generation_counts(
    schema: Schema, main_types: frozenset[str]
) -> GenerationCounts:
    by_kind: dict[str, list[str]] = {"typedef": [], "enum": [], "struct": [], "union": []}
    for name, xdr_type in schema.types.items():
        by_kind[type_kind_label(xdr_type)].append(name)

    def _count(names: list[str]) -> KindCount:
        total = len(names)
        root = sum(1 for n in names if n in main_types)
        gated = total - root
        assert root + gated == total, (
            f"KindCount invariant violated: {root}+{gated}!={total}"
        )
        return KindCount(total=total, root=root, gated=gated)

    return GenerationCounts(
        typedefs=_count(by_kind["typedef"]),
        enums=_count(by_kind["enum"]),
        structs=_count(by_kind["struct"]),
        unions=_count(by_kind["union"]),
        constants=len(schema.constants),
    )


def build_generation_summary(
    config: GenerateConfig,
    schema: Schema,
    main_types: frozenset[str],
    write_result: FileWriteResult,
    unboxed_cycles: Sequence[tuple[str, ...]] = (),
) -> GenerationSummary:
    return GenerationSummary(
        schema_label=config.schema.name,
        feature=config.feature,
        counts=build_generation_counts(schema, main_types),
        file=write_result,
        unboxed_cycles=tuple(unboxed_cycles),
    )


def format_generation_summary(summary: GenerationSummary) -> str:
    """Render a GenerationSummary as the multi-section console report.

    The "(N root + M gated)" annotation appears only when M > 0. Counts use
    thousands separators. Returns a string with exactly one trailing newline.
    """
    lines: list[str] = ["XDR types generated:", ""]
    lines.append(f"  Schema:     {summary.schema_label}")
    lines.append(f"  Output:     {summary.file.path}")
    lines.append(f"  Feature:    {summary.feature}")
    lines.append("")
    lines.append("  Types generated:")

    def _kind_row(label: str, kc: KindCount) -> str:
        count_str = f"{kc.total:>6}"
        if kc.gated > 0:
            return f"    {label:<11}{count_str}  ({kc.root} root + {kc.gated} gated)"
        return f"    {label:<11}{count_str}"

    lines.append(_kind_row("Typedefs:", summary.counts.typedefs))
    lines.append(_kind_row("Enums:", summary.counts.enums))
    lines.append(_kind_row("Structs:", summary.counts.structs))
    lines.append(_kind_row("Unions:", summary.counts.unions))
    lines.append(f"    {'Constants:':<11}{summary.counts.constants:>6}")

    if summary.unboxed_cycles:
        lines.append("")
        lines.append("  Unboxed recursive types (will not compile):")
        for group in summary.unboxed_cycles:
            lines.append(f"    {', '.join(group)}")

    lines.append("")
    lines.append(
        f"  Written: {summary.file.filename} "
        f"({summary.file.line_count:,} lines, {summary.file.byte_count:,} bytes)"
    )
    lines.append("")
    return "\n".join(lines)


def print_generation_summary(summary: GenerationSummary) -> None:
    print(format_generation_summary(summary), end="")


# ===--- Pipeline ---=== #


def build_write_config(config: GenerateConfig, generated_on: str) -> WriteConfig:
    """Construct WriteConfig from GenerateConfig and the run date.

    Raises:
        ValueError: If generated_on is empty.
    """
    if not generated_on:
        raise ValueError("generated_on must not be empty")
    return WriteConfig(
        generated_on=generated_on,
        schema_name=config.schema.name,
        feature=config.feature,
    )


def run_generate(
    config: GenerateConfig, generated_on: str | None = None
) -> FileWriteResult:
    """Execute the complete generation pipeline for a GenerateConfig.

    Stages: load schema module -> build (phase 1 + union phase 2) ->
    reachability -> cycle diagnostics -> assemble -> write. The source is
    assembled completely before the single write.

    Args:
        config: Validated GenerateConfig from build_config.
        generated_on: Date stamped into the header; today when omitted.

    Returns:
        FileWriteResult of the generated file.

    Raises:
        ConfigError: Schema module not importable or without define().
        InvalidSchemaError: Schema contract violation.
        OSError: Filesystem write failure.
    """
    print(f"Loading schema: {config.schema}")
    define = load_definition(config.schema)
    schema = build_schema(define, config.boxed_prefixes)
    print(
        f"  Registered: {len(schema.types)} types, {len(schema.constants)} constants"
    )

    main_types, stats = determine_main_types(schema.types, config.roots)
    print(
        f"  Reachable: {stats.reached_count} types from {stats.root_count} roots, "
        f"{len(schema.types) - len(main_types)} gated behind '{config.feature}'"
    )

    cycles = find_unboxed_cycles(schema.types)
    for group in cycles:
        print(f"  Warning: unboxed recursive types: {', '.join(group)}")

    write_config = build_write_config(
        config, generated_on or date.today().isoformat()
    )
    source = assemble_source(write_config, schema, main_types)
    result = write_source(config.output_dir, config.file_name, source)

    summary = build_generation_summary(config, schema, main_types, result, cycles)
    print_generation_summary(summary)
    return result


# ===--- Main ---=== #


def _exit_with_config_error(err: ConfigError) -> None:
    print(f"Config error [{err.code}]: {err.message}")
    if err.suggestion:
        print(f"Hint: {err.suggestion}")
    raise SystemExit(1) from err


def main():
    try:
        config = build_config()
    except ConfigError as err:
        _exit_with_config_error(err)

    try:
        if isinstance(config, DiscoveryConfig):
            run_discovery(config)
        else:
            run_generate(config)
    except ConfigError as err:
        _exit_with_config_error(err)
    except InvalidSchemaError as err:
        print(f"Schema error [{err.code}]: {err.message}")
        raise SystemExit(1) from err
    except OSError as err:
        print(f"Error: {err}")
        raise SystemExit(1) from err
    except (RuntimeError, ValueError) as err:
        print(f"Internal error: {err}")
        raise SystemExit(1) from err


if __name__ == "__main__":
    main()
