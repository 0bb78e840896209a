"""Shared enums and summary models for phpscope.

The enums classify reflection elements; the pydantic models describe a
serialisable snapshot of a processed code base (what the ``export`` command
writes and the strict validator inspects).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ElementKind(str, Enum):
    """Kind of reflection element."""

    FILE = "file"
    NAMESPACE = "namespace"
    CLASS = "class"
    FUNCTION = "function"
    METHOD = "method"
    PROPERTY = "property"
    CONSTANT = "constant"
    PARAMETER = "parameter"


class ClassKind(str, Enum):
    """Kind of class-like definition."""

    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"


class Visibility(str, Enum):
    """Visibility/access modifier."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


class ParameterSummary(BaseModel):
    """Function or method parameter."""

    name: str
    position: int
    type_hint: str | None = None
    allows_null: bool = True
    is_optional: bool = False
    is_variadic: bool = False
    by_reference: bool = False
    default: str | None = Field(None, description="Default value definition (source text)")


class ConstantSummary(BaseModel):
    """Class or namespace constant."""

    name: str
    short_name: str
    value: Any = None
    definition: str | None = Field(None, description="Value definition (source text)")
    declaring_class: str | None = None


class PropertySummary(BaseModel):
    """Class property."""

    name: str
    visibility: Visibility = Visibility.PUBLIC
    is_static: bool = False
    default: str | None = Field(None, description="Default value definition (source text)")
    declaring_class: str | None = None
    declaring_trait: str | None = None


class MethodSummary(BaseModel):
    """Class method."""

    name: str
    visibility: Visibility = Visibility.PUBLIC
    is_static: bool = False
    is_abstract: bool = False
    is_final: bool = False
    returns_reference: bool = False
    declaring_class: str | None = None
    declaring_trait: str | None = None
    parameters: list[ParameterSummary] = Field(default_factory=list)


class ClassSummary(BaseModel):
    """Class, interface or trait."""

    name: str
    short_name: str
    namespace: str = ""
    kind: ClassKind = ClassKind.CLASS
    file: str | None = None
    start_line: int | None = None
    end_line: int | None = None
    is_abstract: bool = False
    is_final: bool = False
    parent: str | None = None
    interfaces: list[str] = Field(default_factory=list, description="Own interface names")
    traits: list[str] = Field(default_factory=list, description="Own trait names")
    constants: list[ConstantSummary] = Field(default_factory=list)
    properties: list[PropertySummary] = Field(default_factory=list)
    methods: list[MethodSummary] = Field(default_factory=list)
    short_description: str | None = None


class FunctionSummary(BaseModel):
    """Namespace level function."""

    name: str
    short_name: str
    namespace: str = ""
    file: str | None = None
    start_line: int | None = None
    end_line: int | None = None
    returns_reference: bool = False
    parameters: list[ParameterSummary] = Field(default_factory=list)
    short_description: str | None = None


class ConflictSummary(BaseModel):
    """Symbol defined more than once."""

    kind: ElementKind
    name: str
    first_file: str | None = None
    reasons: list[str] = Field(default_factory=list)


class Snapshot(BaseModel):
    """Snapshot root structure.

    Contains every class, function and constant registered by a broker plus
    the conflicts found while registering them.
    """

    version: str = "1.0"
    files: list[str] = Field(default_factory=list)
    classes: dict[str, ClassSummary] = Field(default_factory=dict)
    functions: dict[str, FunctionSummary] = Field(default_factory=dict)
    constants: dict[str, ConstantSummary] = Field(default_factory=dict)
    conflicts: list[ConflictSummary] = Field(default_factory=list)

    def merge(self, other: Snapshot) -> Snapshot:
        """Merge two snapshots.

        Args:
            other: Another snapshot to merge with this one.

        Returns:
            A new snapshot containing data from both.
        """
        return Snapshot(
            version=self.version,
            files=sorted(set(self.files) | set(other.files)),
            classes={**self.classes, **other.classes},
            functions={**self.functions, **other.functions},
            constants={**self.constants, **other.constants},
            conflicts=self.conflicts + other.conflicts,
        )
