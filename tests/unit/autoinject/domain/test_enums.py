"""Unit tests for domain enums."""

from autoinject.domain.enums import TypeKind


class TestTypeKind:
    """Test cases for the TypeKind enum."""

    def test_values(self):
        """Test the enum values used in error messages."""
        assert TypeKind.CONCRETE.value == "class"
        assert TypeKind.INTERFACE.value == "interface"
        assert TypeKind.ABSTRACT.value == "abstract"

    def test_string_representation(self):
        """Test that str() returns the bare value."""
        assert str(TypeKind.INTERFACE) == "interface"
        assert f"{TypeKind.ABSTRACT}" == "abstract"

    def test_is_string_enum(self):
        """Test that members compare equal to their values."""
        assert TypeKind.CONCRETE == "class"
