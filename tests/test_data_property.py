"""
Unit Tests for DataProperty.

Tests for:
- Tri-state modification tracking
- Validation caching and validators
- Null, restricted and multi-valued values
- Async value setting and cancellation
- UI state strings
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from bizobjects.core.cancellation import CancellationToken
from bizobjects.errors import Messages
from bizobjects.properties import (
    AccessLevel,
    DataProperty,
    PropertyChange,
    ValueFormat,
)


class TestModified:
    """Tests for the tri-state modified flag."""

    def test_modified_monotonicity(self):
        prop = DataProperty(name="Name", kind="text")
        assert prop.modified is None

        prop.set_value("a")
        assert prop.modified is False

        prop.set_value("b")
        assert prop.modified is True

        prop.set_value("b")
        assert prop.modified is True

    def test_reset_value(self):
        prop = DataProperty(name="Name", kind="text")
        prop.set_value("a")
        prop.set_value("b")
        prop.reset_value()
        assert prop.value is None
        assert prop.modified is None


class TestValidation:
    """Tests for validation and its cache."""

    def test_validate_is_idempotent(self):
        prop = DataProperty(name="Name", kind="text", required=True)
        validator = MagicMock()
        prop.add_validator(validator)

        first = prop.validate()
        second = prop.validate()

        assert first is second
        assert validator.call_count == 1
        assert [e.code for e in first] == [Messages.VALIDATION_REQUIRED]

    def test_value_change_resets_validation(self):
        prop = DataProperty(name="CustomerName", kind="text", required=True)
        errors = prop.validate()
        assert errors.errors_text == "Customer Name is required."

        prop.set_value("Jane")
        assert prop.validation_errors is None
        assert prop.is_valid()

    def test_force_revalidates(self):
        prop = DataProperty(name="Name", kind="text")
        validator = MagicMock()
        prop.add_validator(validator)
        prop.validate()
        prop.validate(force=True)
        assert validator.call_count == 2

    def test_custom_validator_reports_errors(self):
        prop = DataProperty(name="Code", kind="text")

        def no_spaces(p, value, row):
            if value and " " in value:
                p.add_validation_error(row, "Code cannot contain spaces")

        prop.add_validator(no_spaces)
        prop.set_value("A B")
        assert not prop.is_valid()
        assert prop.errors_text == "Code cannot contain spaces"

        prop.remove_validator(no_spaces)
        assert prop.validate(force=True).errors == []

    def test_not_validated_is_valid(self):
        prop = DataProperty(name="Name", kind="text", required=True)
        assert prop.is_valid(validate=False)

    def test_hidden_or_readonly_properties_are_not_validated(self):
        prop = DataProperty(name="Name", kind="text", required=True)
        prop.visible = False
        assert not prop.validate().has_errors()

        prop.visible = True
        prop.editable = False
        assert not prop.validate(force=True).has_errors()

    def test_leaving_edit_mode_validates(self):
        prop = DataProperty(name="Name", kind="text", required=True)
        prop.editing = True
        prop.set_value("")
        assert prop.validation_errors is None

        prop.editing = False
        assert prop.validation_errors is not None
        assert prop.validation_errors.has_errors()

    def test_multi_valued_values_are_validated_one_by_one(self):
        prop = DataProperty(name="Scores", kind="tiny_integer", multi_valued=True)
        prop.set_value([10, 300, 20])
        codes = [e.code for e in prop.validate()]
        assert codes == [Messages.VALIDATION_NUMBER_MAXIMUM]

    @pytest.mark.asyncio
    async def test_async_validators(self):
        prop = DataProperty(name="Login", kind="text")

        async def unique_login(p, value, row):
            await asyncio.sleep(0)
            if value == "taken":
                p.add_validation_error(row, "Login is already taken")

        prop.add_async_validator(unique_login)
        prop.set_value("taken")

        errors = await prop.validate_async()

        assert errors.errors_text == "Login is already taken"


class TestValues:
    """Tests for value resolution."""

    def test_multi_valued_parsing(self):
        prop = DataProperty(name="Ids", kind="integer", multi_valued=True)
        prop.set_value("1, 2;3")
        assert prop.value == [1, 2, 3]
        assert prop.display_string == "1, 2, 3"
        assert prop.get_value(ValueFormat.TRANSPORT) == [1, 2, 3]

    def test_null_string(self):
        prop = DataProperty(name="Name", kind="text")
        prop.null_string = "(none)"
        assert prop.display_string == "(none)"
        assert prop.edit_string == ""

        prop.set_value("(none)")
        assert prop.value is None
        assert prop.is_null()

    def test_restricted_value(self):
        prop = DataProperty(name="Salary", kind="money")
        prop.set_value(100)
        prop.restricted_string = "***"
        prop.access_level = AccessLevel.NONE

        assert prop.is_restricted()
        assert prop.display_string == "***"
        assert not prop.visible
        assert not prop.editable

    def test_read_only_access(self):
        prop = DataProperty(name="Salary", kind="money")
        prop.access_level = AccessLevel.READ_ONLY
        assert prop.visible
        assert not prop.editable

    def test_value_converter_takes_precedence(self):
        prop = DataProperty(name="Code", kind="text")

        def upper_display(value, fmt):
            if fmt == ValueFormat.DISPLAY_STRING:
                return True, str(value).upper()
            return False, value

        prop.value_converter = upper_display
        prop.set_value("abc")
        assert prop.value == "abc"
        assert prop.display_string == "ABC"

    def test_change_notification(self):
        prop = DataProperty(name="Name", kind="text")
        callback = MagicMock()
        prop.change.connect(callback)

        prop.set_value("x")

        sender, args = callback.call_args[0]
        assert sender is prop
        assert args.change == PropertyChange.VALUE
        assert args.old_value is None
        assert args.new_value == "x"

    def test_label_defaults_to_split_name(self):
        prop = DataProperty(name="CreditLimit")
        assert str(prop) == "Credit Limit"
        prop.label = "Credit"
        assert str(prop) == "Credit"

    def test_copy_from(self):
        source = DataProperty(name="Name", kind="text", required=True)
        source.set_value("Jane")
        source.editable = False
        target = DataProperty(name="Name", kind="text")

        target.copy_from(source)

        assert target.value == "Jane"
        assert target.required
        assert not target.editable

    def test_items_provider(self):
        prop = DataProperty(name="Color", kind="text")
        prop.items_provider = lambda row: ["red", "green"]
        assert prop.get_possible_values() == ["red", "green"]

    @pytest.mark.asyncio
    async def test_async_items_provider(self):
        prop = DataProperty(name="Color", kind="text")
        prop.items_provider = AsyncMock(return_value=["blue"])
        assert await prop.get_possible_values_async() == ["blue"]


class TestAsyncValues:
    """Tests for asynchronous value setting."""

    @pytest.mark.asyncio
    async def test_async_listeners_complete_before_return(self):
        prop = DataProperty(name="Name", kind="text")
        seen = []

        async def listener(sender, args):
            await asyncio.sleep(0.01)
            seen.append(args.new_value)

        prop.async_change.connect(listener)
        await prop.set_value_async("hello")

        assert seen == ["hello"]
        assert prop.value == "hello"

    @pytest.mark.asyncio
    async def test_async_converter(self):
        prop = DataProperty(name="Code", kind="text")
        prop.async_value_converter = AsyncMock(return_value=(True, "converted"))

        await prop.set_value_async("raw")

        assert prop.value == "converted"

    @pytest.mark.asyncio
    async def test_cancelled_token(self):
        prop = DataProperty(name="Name", kind="text")
        token = CancellationToken()
        token.cancel()

        with pytest.raises(asyncio.CancelledError):
            await prop.set_value_async("hello", token=token)
        assert prop.value is None


class TestStateString:
    """Tests for UI state descriptors."""

    def test_state_string(self):
        prop = DataProperty(name="Name", kind="text", required=True)
        assert prop.get_state_string() == "required"

        prop.set_value("a")
        prop.set_value("b")
        prop.validate()
        assert prop.get_state_string() == "required modified valid"

        prop.set_value("")
        prop.validate()
        assert prop.get_state_string() == "required modified invalid"

        prop.editable = False
        assert prop.get_state_string() == "readonly"

        prop.visible = False
        assert prop.get_state_string() == "hidden"

    def test_state_string_filter(self):
        prop = DataProperty(name="Name", kind="text", required=True)
        assert prop.get_state_string(PropertyChange.VALUE) == ""
