# hdf5ct/core/schema.py
from __future__ import annotations

from dataclasses import dataclass, field
import logging

from .exceptions import DecodeError, SchemaError
from .values import SemanticType


logger = logging.getLogger(__name__)

TIME_NAMES = frozenset({"time"})
VALUE_NAMES = frozenset({"data", "value"})

# (type class, byte size, signed) -> semantic type
_MEMBER_TYPES: dict[tuple[str, int, bool], SemanticType] = {
    ("FLOAT", 8, True): SemanticType.FLOAT64,
    ("FLOAT", 4, True): SemanticType.FLOAT32,
    ("INTEGER", 8, True): SemanticType.INT64,
    ("INTEGER", 8, False): SemanticType.UINT64,
    ("INTEGER", 4, True): SemanticType.INT32,
    ("INTEGER", 4, False): SemanticType.UINT32,
    ("INTEGER", 2, True): SemanticType.INT16,
    ("INTEGER", 2, False): SemanticType.UINT16,
}


@dataclass(frozen=True, slots=True)
class MemberDescriptor:
    """
    Native description of one compound member, as reported by the container.

    type_class uses HDF5 class names ("INTEGER", "FLOAT", "STRING", ...).
    """
    name: str
    type_class: str
    size: int
    offset: int
    signed: bool = True


@dataclass(frozen=True, slots=True)
class CompoundDescriptor:
    """Element type and dataspace of one dataset."""
    rank: int
    shape: tuple[int, ...] = ()
    itemsize: int = 0
    members: tuple[MemberDescriptor, ...] = field(default_factory=tuple)

    @property
    def n_elements(self) -> int:
        if self.rank != 1 or not self.shape:
            return 0
        return int(self.shape[0])


@dataclass(frozen=True, slots=True)
class FieldSpec:
    name: str
    semantic_type: SemanticType
    byte_size: int
    byte_offset: int

    def __str__(self) -> str:
        return (
            f"{self.semantic_type.value} {self.name}: "
            f"size = {self.byte_size}, offset = {self.byte_offset}"
        )


@dataclass(frozen=True, slots=True)
class DatasetSchema:
    """Validated {time, value} layout of a dataset's compound element."""
    time: FieldSpec
    value: FieldSpec
    stride: int

    def __post_init__(self) -> None:
        if self.stride <= 0:
            raise SchemaError(f"Compound stride must be positive, got {self.stride}.")
        for spec in (self.time, self.value):
            if spec.byte_offset < 0 or spec.byte_offset + spec.byte_size > self.stride:
                raise SchemaError(
                    f"Field '{spec.name}' ({spec.byte_offset}+{spec.byte_size}) "
                    f"does not fit in a {self.stride}-byte element."
                )

    @property
    def fields(self) -> tuple[FieldSpec, FieldSpec]:
        return self.time, self.value


def classify_member(member: MemberDescriptor) -> SemanticType:
    """Map a member's (class, width, signedness) onto one of the semantic types."""
    signed = member.signed if member.type_class == "INTEGER" else True
    try:
        return _MEMBER_TYPES[(member.type_class, int(member.size), bool(signed))]
    except KeyError:
        sign = "" if signed else "unsigned "
        raise DecodeError(
            f"Compound member '{member.name}' has unsupported type "
            f"{sign}{member.type_class} of size {member.size}."
        ) from None


def inspect_schema(descriptor: CompoundDescriptor, *, name: str = "") -> DatasetSchema:
    """
    Validate a dataset's layout and return its DatasetSchema.

    Checks run in order: rank, member count, member types, member names.
    Any failure raises SchemaError (DecodeError for unmapped member types).
    """
    label = name or "dataset"

    if descriptor.rank != 1:
        raise SchemaError(f"{label}: rank is {descriptor.rank}, expected 1.")
    if len(descriptor.members) != 2:
        raise SchemaError(
            f"{label}: element type has {len(descriptor.members)} compound "
            "members, expected 2."
        )

    specs = []
    for member in descriptor.members:
        semantic_type = classify_member(member)
        specs.append(
            FieldSpec(
                name=member.name,
                semantic_type=semantic_type,
                byte_size=int(member.size),
                byte_offset=int(member.offset),
            )
        )
    time_spec, value_spec = specs

    if time_spec.name.lower() not in TIME_NAMES or value_spec.name.lower() not in VALUE_NAMES:
        raise SchemaError(
            f"{label}: members are ('{time_spec.name}', '{value_spec.name}'), "
            "expected ('time', 'data' or 'value')."
        )

    schema = DatasetSchema(time=time_spec, value=value_spec, stride=int(descriptor.itemsize))
    for spec in schema.fields:
        logger.debug("%s\t%s", label, spec)
    logger.debug("%s\tarray length = %d", label, descriptor.n_elements)
    return schema
