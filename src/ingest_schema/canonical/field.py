from dataclasses import dataclass, field
from typing import Optional, Set


@dataclass
class TypeModifier:
    """
    Per-column metrics gathered while scanning sampled values.
    Fields only ever grow.
    """
    max_length: int = 0
    precision: int = 0              # digits before the decimal point
    scale: int = 0                  # digits after the decimal point
    contains_non_ascii: bool = False
    nullable: bool = False

    def observe(
        self,
        length: int = 0,
        precision: int = 0,
        scale: int = 0,
        non_ascii: bool = False,
        null: bool = False,
    ) -> "TypeModifier":
        self.max_length = max(self.max_length, length)
        self.precision = max(self.precision, precision)
        self.scale = max(self.scale, scale)
        self.contains_non_ascii = self.contains_non_ascii or non_ascii
        self.nullable = self.nullable or null
        return self

    def merge(self, other: "TypeModifier") -> "TypeModifier":
        """
        Combine two partial summaries into a new modifier.
        """
        return TypeModifier(
            max_length=max(self.max_length, other.max_length),
            precision=max(self.precision, other.precision),
            scale=max(self.scale, other.scale),
            contains_non_ascii=self.contains_non_ascii or other.contains_non_ascii,
            nullable=self.nullable or other.nullable,
        )


@dataclass
class ColumnDefinition:
    """
    Canonical representation of a column.

    File side: possible_types holds the candidate set built while
    sampling, data_type is set once the column is resolved.
    Table side: data_type is the introspected type and native_type the
    database type name it was mapped from.
    """
    name: str
    possible_types: Set[str] = field(default_factory=set)
    data_type: Optional[str] = None
    type_modifier: TypeModifier = field(default_factory=TypeModifier)

    native_type: Optional[str] = None
    description: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return self.data_type is not None
