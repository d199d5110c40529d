import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union


class FileKind(str, Enum):
    """Kinds of delimited input files the model reads at setup time."""

    PATIENT = "patient"
    SURGEON = "surgeon"
    OPERATING_ROOM = "operating_room"


@dataclass(frozen=True)
class SchemaField:
    """One declared column family.

    A base name ending in ``_`` is a suffix family: it also matches the base
    name followed by one or more digits (``note_`` matches ``note_1``).
    """

    base_name: str
    required: bool = True

    def __post_init__(self) -> None:
        if not self.base_name:
            raise ValueError("base_name must be a non-empty string")

    @property
    def is_family(self) -> bool:
        return self.base_name.endswith("_")

    def matches(self, token: str) -> bool:
        if token is None:
            return False
        if self.is_family:
            # The bare root is not a column of the family.
            return re.fullmatch(re.escape(self.base_name) + "[0-9]+", token) is not None
        return token == self.base_name


def required(base_name: str) -> SchemaField:
    return SchemaField(base_name, required=True)


def optional(base_name: str) -> SchemaField:
    return SchemaField(base_name, required=False)


@dataclass(frozen=True)
class Schema:
    """Ordered, immutable set of fields expected in one kind of file."""

    kind: str
    fields: Tuple[SchemaField, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        fields = tuple(self.fields)
        object.__setattr__(self, "fields", fields)

        seen = set()
        duplicates = []
        for f in fields:
            if f.base_name in seen:
                duplicates.append(f.base_name)
            seen.add(f.base_name)
        if duplicates:
            raise ValueError(
                f"Schema {self.kind!r} declares duplicate base names: {duplicates}"
            )

    def __iter__(self) -> Iterator[SchemaField]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def base_names(self) -> Tuple[str, ...]:
        return tuple(f.base_name for f in self.fields)

    @property
    def required_fields(self) -> Tuple[SchemaField, ...]:
        return tuple(f for f in self.fields if f.required)

    @property
    def optional_fields(self) -> Tuple[SchemaField, ...]:
        return tuple(f for f in self.fields if not f.required)

    def get_field(self, base_name: str) -> SchemaField:
        for f in self.fields:
            if f.base_name == base_name:
                return f
        raise KeyError(f"Field '{base_name}' not found in schema {self.kind!r}")

    def match(self, token: str) -> Optional[SchemaField]:
        """Return the first field matching token, or None."""
        for f in self.fields:
            if f.matches(token):
                return f
        return None


PATIENT_SCHEMA = Schema(
    FileKind.PATIENT.value,
    (
        required("patient_id"),
        optional("name"),
        required("scheduled_datetime"),
        required("procedure"),
        optional("preferred_surgeon"),
        optional("priority"),
    ),
)

SURGEON_SCHEMA = Schema(
    FileKind.SURGEON.value,
    (
        required("surgeon_id"),
        optional("name"),
        optional("skills"),
        optional("shift_start"),
        optional("shift_end"),
    ),
)

OPERATING_ROOM_SCHEMA = Schema(
    FileKind.OPERATING_ROOM.value,
    (
        required("or_id"),
        optional("room_type"),
        optional("turnover_time"),
    ),
)


class SchemaRegistry:
    """Read-only lookup from file kind to its schema.

    Built once from configuration; lookups accept a FileKind or its value.
    """

    def __init__(self, schemas: Iterable[Schema]):
        table: Dict[str, Schema] = {}
        for schema in schemas:
            if schema.kind in table:
                raise ValueError(f"Duplicate schema for file kind {schema.kind!r}")
            table[schema.kind] = schema
        self._schemas: Mapping[str, Schema] = MappingProxyType(table)

    @staticmethod
    def _key(kind: Union[FileKind, str]) -> str:
        return kind.value if isinstance(kind, FileKind) else str(kind)

    def get(self, kind: Union[FileKind, str]) -> Schema:
        key = self._key(kind)
        try:
            return self._schemas[key]
        except KeyError:
            raise KeyError(
                f"No schema registered for file kind {key!r}; known: {sorted(self._schemas)}"
            ) from None

    def __contains__(self, kind: object) -> bool:
        if not isinstance(kind, (FileKind, str)):
            return False
        return self._key(kind) in self._schemas

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)


DEFAULT_REGISTRY = SchemaRegistry([PATIENT_SCHEMA, SURGEON_SCHEMA, OPERATING_ROOM_SCHEMA])
