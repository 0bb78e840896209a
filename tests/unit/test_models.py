"""Unit tests for snapshot models and their serialization."""

import json

import pytest
from pydantic import ValidationError

from phpscope.core.models import (
    ClassKind,
    ClassSummary,
    ConflictSummary,
    ElementKind,
    MethodSummary,
    ParameterSummary,
    Snapshot,
    Visibility,
)
from phpscope.core.serializer import SerializationError, deserialize, serialize


class TestEnums:
    """Tests for enum values."""

    def test_element_kind_values(self) -> None:
        assert ElementKind.CLASS.value == "class"
        assert ElementKind.NAMESPACE.value == "namespace"
        assert ElementKind.PARAMETER.value == "parameter"

    def test_class_kind_values(self) -> None:
        assert ClassKind.CLASS.value == "class"
        assert ClassKind.INTERFACE.value == "interface"
        assert ClassKind.TRAIT.value == "trait"

    def test_visibility_values(self) -> None:
        assert Visibility.PUBLIC.value == "public"
        assert Visibility.PRIVATE.value == "private"
        assert Visibility.PROTECTED.value == "protected"


class TestClassSummary:
    """Tests for ClassSummary model."""

    def test_defaults(self) -> None:
        summary = ClassSummary(name="App\\User", short_name="User")
        assert summary.kind == ClassKind.CLASS
        assert summary.parent is None
        assert summary.interfaces == []
        assert summary.methods == []

    def test_invalid_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ClassSummary(name="A", short_name="A", kind="enum")


class TestSerializer:
    """Tests for snapshot serialization."""

    def _snapshot(self) -> Snapshot:
        method = MethodSummary(
            name="save",
            visibility=Visibility.PROTECTED,
            declaring_class="App\\User",
            parameters=[ParameterSummary(name="force", position=0, is_optional=True, default="false")],
        )
        return Snapshot(
            files=["/src/User.php"],
            classes={"App\\User": ClassSummary(name="App\\User", short_name="User", namespace="App", methods=[method])},
            conflicts=[ConflictSummary(kind=ElementKind.FUNCTION, name="helper", first_file="/src/a.php", reasons=["x"])],
        )

    def test_serialize_is_json(self) -> None:
        data = json.loads(serialize(self._snapshot()))
        assert data["version"] == "1.0"
        assert data["classes"]["App\\User"]["methods"][0]["visibility"] == "protected"
        assert data["conflicts"][0]["kind"] == "function"

    def test_round_trip(self) -> None:
        snapshot = self._snapshot()
        assert deserialize(serialize(snapshot)) == snapshot

    def test_invalid_json(self) -> None:
        with pytest.raises(SerializationError) as exc_info:
            deserialize("{not json")
        assert exc_info.value.message == "Invalid JSON format"
        assert exc_info.value.details.startswith("Line 1")

    def test_invalid_structure(self) -> None:
        with pytest.raises(SerializationError) as exc_info:
            deserialize(json.dumps({"classes": {"A": {"name": "A"}}}))
        assert exc_info.value.message == "Snapshot validation failed"
        assert "classes.A.short_name" in exc_info.value.details
