"""Tests for typed skill argument accessors."""

import pytest

from voice_assistant.actions.arguments import (
    optional_bool,
    optional_int,
    optional_string,
    optional_string_list,
    require_string,
)
from voice_assistant.actions.exceptions import InvalidArgumentsError
from voice_assistant.actions.models import arguments_from_json


@pytest.mark.unit
class TestStringArguments:
    """Test cases for string accessors."""

    def test_require_string(self) -> None:
        """Test a present string is returned."""
        assert require_string(arguments_from_json({"title": "milk"}), "title") == "milk"

    @pytest.mark.parametrize("raw", [{}, {"title": None}, {"title": "   "}])
    def test_require_string_missing(self, raw: dict) -> None:
        """Test missing, null and blank values are rejected."""
        with pytest.raises(InvalidArgumentsError, match="title"):
            require_string(arguments_from_json(raw), "title")

    def test_optional_string_wrong_type(self) -> None:
        """Test a number is not accepted as a string."""
        with pytest.raises(InvalidArgumentsError, match="must be a string"):
            optional_string(arguments_from_json({"title": 3}), "title")

    def test_optional_string_absent(self) -> None:
        """Test an absent argument returns None."""
        assert optional_string({}, "title") is None


@pytest.mark.unit
class TestScalarArguments:
    """Test cases for number and boolean accessors."""

    def test_optional_int_from_number(self) -> None:
        """Test integral numbers convert to int."""
        assert optional_int(arguments_from_json({"days": 3.0}), "days") == 3

    def test_optional_int_from_string(self) -> None:
        """Test digit strings convert to int."""
        assert optional_int(arguments_from_json({"days": " -2 "}), "days") == -2

    def test_optional_int_rejects_fraction(self) -> None:
        """Test fractional numbers are rejected."""
        with pytest.raises(InvalidArgumentsError):
            optional_int(arguments_from_json({"days": 2.5}), "days")

    def test_optional_int_rejects_bool(self) -> None:
        """Test booleans are not numbers."""
        with pytest.raises(InvalidArgumentsError):
            optional_int(arguments_from_json({"days": True}), "days")

    def test_optional_bool(self) -> None:
        """Test booleans and their string spellings."""
        args = arguments_from_json({"a": True, "b": "False", "c": None})

        assert optional_bool(args, "a") is True
        assert optional_bool(args, "b") is False
        assert optional_bool(args, "c") is None

    def test_optional_bool_rejects_other(self) -> None:
        """Test other strings are rejected."""
        with pytest.raises(InvalidArgumentsError):
            optional_bool(arguments_from_json({"a": "maybe"}), "a")


@pytest.mark.unit
class TestListArguments:
    """Test cases for list accessors."""

    def test_optional_string_list(self) -> None:
        """Test an array of strings is returned as a list."""
        args = arguments_from_json({"tags": ["home", "shop"]})

        assert optional_string_list(args, "tags") == ["home", "shop"]

    def test_optional_string_list_mixed(self) -> None:
        """Test non-string items are rejected."""
        with pytest.raises(InvalidArgumentsError, match="only strings"):
            optional_string_list(arguments_from_json({"tags": ["home", 1]}), "tags")

    def test_optional_string_list_not_array(self) -> None:
        """Test a scalar is rejected."""
        with pytest.raises(InvalidArgumentsError, match="array"):
            optional_string_list(arguments_from_json({"tags": "home"}), "tags")


@pytest.mark.unit
class TestArgumentHelperExports:
    """Test cases for the package-level helper exports."""

    def test_helpers_exported_from_actions(self) -> None:
        """Test skills can import the helpers from the actions package."""
        import voice_assistant.actions as actions

        assert actions.require_string is require_string
        assert actions.optional_string is optional_string
        assert actions.optional_int is optional_int
        assert actions.optional_bool is optional_bool
        assert actions.optional_string_list is optional_string_list
