"""
Unit Tests for DataObject.

Tests for:
- Member registration and lookup
- Modification, editability and access level across the object tree
- Data contract import and export
- Read/Save/Delete orchestration, sync and async
"""
import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import BaseModel

from bizobjects.core.cancellation import CancellationToken
from bizobjects.errors import ErrorAbortException, ErrorList, ErrorType, Messages
from bizobjects.objects import ContractMapping, CrudOptions, DataObject
from bizobjects.properties import AccessLevel, DataProperty

from conftest import CustomerObject, OrderList, make_rows


class NoteObject(DataObject):
    def initialize(self):
        self.text = DataProperty(self, "Text", "text")


class ParentObject(DataObject):
    def initialize(self):
        self.name = DataProperty(self, "Name", "text")
        self.first = self.add_child_object("First", NoteObject(self))
        self.second = self.add_child_object("Second", NoteObject(self))


class BillingObject(DataObject):
    def initialize(self):
        self.name = DataProperty(self, "Name", "text")
        self.city = DataProperty(self, "Billing_City", "text")
        self.street = DataProperty(self, "Billing_Street", "text")


class AddressModel(BaseModel):
    Street: Optional[str] = None
    City: Optional[str] = None


class CustomerModel(BaseModel):
    CustomerId: Optional[int] = None
    CustomerName: Optional[str] = None
    CreditLimit: Optional[Decimal] = None
    Address: Optional[AddressModel] = None


@dataclass
class CustomerRecord:
    CustomerId: Optional[int] = None
    CustomerName: Optional[str] = None
    Active: Optional[bool] = None


def errors_of(*messages) -> ErrorList:
    errors = ErrorList()
    for msg in messages:
        errors.add_error(ErrorType.FUNCTIONAL, msg)
    return errors


def fill_valid(customer):
    customer.customer_name.set_value("Jane")
    customer.address.city.set_value("Paris")


# =============================================================================
# Registration
# =============================================================================

class TestRegistration:
    """Tests for member registration."""

    def test_properties_are_registered(self, customer):
        assert list(customer.properties) == ["CustomerId", "CustomerName", "CreditLimit", "Active"]
        assert customer["CustomerName"] is customer.customer_name
        assert "Active" in customer
        assert customer.get_child_object("Address") is customer.address

    def test_unknown_property(self, customer):
        with pytest.raises(KeyError):
            customer["Missing"]
        assert customer.get_property("Missing") is None

    def test_child_inherits_settings(self, customer):
        assert customer.address.parent is customer
        assert customer.address.settings is customer.settings
        assert customer.address.city.settings is customer.settings

    def test_set_values_and_value_map(self, customer):
        customer.set_values({"CustomerName": "Jane", "CreditLimit": "100", "Unknown": 1})
        assert customer.to_value_map() == {"CustomerName": "Jane", "CreditLimit": "100"}


# =============================================================================
# State of the object tree
# =============================================================================

class TestObjectState:
    """Tests for modification, editability and access level."""

    def test_modified_aggregates_children(self, customer):
        assert customer.is_modified() is None

        customer.address.city.set_value("Paris")
        assert customer.is_modified() is False

        customer.address.city.set_value("Rome")
        assert customer.is_modified() is True

        customer.set_modified(False, recursive=True)
        assert customer.is_modified() is False

    def test_modification_tracking_disabled(self, customer):
        customer.track_modifications = False
        customer.customer_name.set_value("a")
        customer.customer_name.set_value("b")
        assert customer.is_modified() is False

    def test_editable_propagates_to_children(self, customer):
        customer.editable = False
        assert not customer.customer_name.editable
        assert not customer.address.editable
        assert not customer.address.city.editable

        customer.editable = True
        assert customer.address.city.editable

    def test_read_only_access_level(self, customer):
        changes = []
        customer.address.city.change.connect(lambda s, a: changes.append(a.change))

        customer.access_level = AccessLevel.READ_ONLY

        assert customer.customer_name.visible
        assert not customer.customer_name.editable
        assert not customer.address.city.editable
        assert changes

    def test_no_access_hides_properties(self, customer):
        customer.access_level = AccessLevel.NONE
        assert not customer.customer_name.visible

    def test_copy_and_reset(self, customer):
        customer.customer_name.set_value("Jane")
        customer.address.city.set_value("Paris")
        other = CustomerObject()

        other.copy_from(customer)
        assert other.customer_name.value == "Jane"
        assert other.address.city.value == "Paris"

        other.reset_data()
        assert other.customer_name.is_null()
        assert other.address.city.is_null()


# =============================================================================
# Validation
# =============================================================================

class TestValidation:
    """Tests for object tree validation."""

    def test_errors_of_subtree(self, customer):
        customer.validate()
        codes = [e.code for e in customer.get_validation_errors()]
        assert codes == [Messages.VALIDATION_REQUIRED, Messages.VALIDATION_REQUIRED]

    def test_object_level_validation(self):
        class RangeObject(DataObject):
            def initialize(self):
                self.low = DataProperty(self, "Low", "integer")
                self.high = DataProperty(self, "High", "integer")

            def validate_object(self, errors):
                if (self.low.value or 0) > (self.high.value or 0):
                    errors.add_validation_error("Low cannot exceed High")

        obj = RangeObject()
        obj.low.set_value(5)
        obj.high.set_value(1)
        obj.validate()
        assert obj.get_validation_errors().errors_text == "Low cannot exceed High"

        obj.high.set_value(10)
        obj.validate(True)
        assert not obj.get_validation_errors().has_errors()

    def test_reset_all_validation(self, customer):
        customer.validate()
        customer.reset_all_validation()
        assert customer.validation_errors is None
        assert customer.customer_name.validation_errors is None
        assert customer.address.city.validation_errors is None


# =============================================================================
# Data contracts
# =============================================================================

class TestDataContracts:
    """Tests for contract import and export."""

    def test_from_dict(self, customer):
        customer.from_data_contract({
            "CustomerId": 5,
            "CustomerName": "Jane",
            "Address": {"City": "Paris"},
            "Ignored": "x",
        })
        assert customer.customer_id.value == 5
        assert customer.address.city.value == "Paris"
        assert customer.is_modified() is False

    def test_import_after_edit_is_not_modified(self, customer):
        customer.customer_name.set_value("a")
        customer.customer_name.set_value("b")
        customer.from_data_contract({"CustomerName": "Jane"})
        assert customer.customer_name.modified is False
        assert customer.is_modified() is False

    def test_to_new_dict(self, customer):
        customer.from_data_contract({"CustomerId": 5, "CustomerName": "Jane", "CreditLimit": "12.5"})
        customer.address.city.set_value("Paris")

        contract = customer.to_data_contract()

        assert contract["CustomerId"] == 5
        assert contract["CreditLimit"] == Decimal("12.5")
        assert contract["Active"] is None
        assert contract["Address"] == {"Street": None, "City": "Paris"}

    def test_invalid_values_are_not_exported(self, customer):
        customer.credit_limit.set_value("lots")
        contract = customer.to_data_contract({"CreditLimit": "unchanged"})
        assert contract == {"CreditLimit": "unchanged"}

    def test_pydantic_contract(self, customer):
        customer.from_data_contract(CustomerModel(
            CustomerId=1, CustomerName="Jane", Address=AddressModel(City="Oslo")))
        assert customer.address.city.value == "Oslo"

        out = customer.to_data_contract(CustomerModel())
        assert out.CustomerName == "Jane"
        assert isinstance(out.Address, AddressModel)
        assert out.Address.City == "Oslo"

    def test_dataclass_contract(self, customer):
        customer.from_data_contract(CustomerRecord(CustomerId=3, Active=True))
        assert customer.active.value is True

        record = customer.to_data_contract(CustomerRecord())
        assert record.CustomerId == 3
        assert record.Active is True

    def test_flattened_members(self):
        obj = BillingObject()
        obj.from_data_contract({"Name": "Acme", "Billing": {"City": "Paris"}})
        assert obj.city.value == "Paris"
        assert obj.street.value is None

        contract = obj.to_data_contract({"Name": None, "Billing": None})
        assert contract == {"Name": "Acme", "Billing": {"City": "Paris", "Street": None}}

    def test_mapping_cache_ignores_key_order(self, customer):
        first = ContractMapping.for_object(customer, {"CustomerId": 1, "CustomerName": "a"})
        second = ContractMapping.for_object(customer, {"CustomerName": "b", "CustomerId": 2})
        assert first is second

    def test_mapping_cache_is_bounded(self, customer, monkeypatch):
        monkeypatch.setattr(ContractMapping, "max_cached", 2)
        oldest = ContractMapping.for_object(customer, {"CustomerId": 1})
        ContractMapping.for_object(customer, {"CustomerName": "a"})
        ContractMapping.for_object(customer, {"Active": True})

        assert len(ContractMapping._cache) == 2
        assert ContractMapping.for_object(customer, {"CustomerId": 1}) is not oldest


# =============================================================================
# CRUD
# =============================================================================

class TestCrud:
    """Tests for synchronous Read, Save and Delete."""

    def test_read_clears_new_flag(self, customer):
        customer.do_read = MagicMock(return_value=None)
        errors = customer.read()
        assert not errors.has_errors()
        assert not customer.is_new
        customer.do_read.assert_called_once()

    def test_failed_read_keeps_new_flag(self, customer):
        customer.do_read = MagicMock(return_value=errors_of("not found"))
        errors = customer.read()
        assert errors.errors_text == "not found"
        assert customer.is_new

    def test_save_validates_before_hooks(self, customer):
        customer.do_save = MagicMock()
        customer.address.do_save = MagicMock()

        errors = customer.save()

        assert errors.has_errors()
        customer.do_save.assert_not_called()
        customer.address.do_save.assert_not_called()

    def test_save_success(self, customer):
        fill_valid(customer)
        customer.customer_name.set_value("Janet")
        customer.address.do_save = MagicMock(return_value=None)

        errors = customer.save()

        assert not errors.has_errors()
        assert customer.is_modified() is False
        assert not customer.is_new
        customer.address.do_save.assert_called_once()

    def test_abort_on_errors_skips_remaining_children(self):
        obj = ParentObject()
        obj.first.do_save = MagicMock(return_value=errors_of("first failed"))
        obj.second.do_save = MagicMock()

        errors = obj.save()

        assert errors.errors_text == "first failed"
        obj.second.do_save.assert_not_called()

    def test_continue_on_errors(self):
        obj = ParentObject()
        obj.first.do_save = MagicMock(return_value=errors_of("first failed"))
        obj.second.do_save = MagicMock(return_value=errors_of("second failed"))

        errors = obj.save(CrudOptions(abort_on_errors=False))

        assert [e.message for e in errors] == ["first failed", "second failed"]

    def test_non_recursive(self):
        obj = ParentObject()
        obj.first.do_read = MagicMock()
        obj.read(CrudOptions(recursive=False))
        obj.first.do_read.assert_not_called()

    def test_critical_error_carries_collected_errors(self):
        obj = ParentObject()

        def parent_save(options):
            errors = ErrorList()
            errors.add_warning("parent saved")
            return errors

        def child_save(options):
            ErrorList().critical_error(ErrorType.SYSTEM, "database down")

        obj.do_save = parent_save
        obj.first.do_save = child_save
        obj.second.do_save = MagicMock()

        with pytest.raises(ErrorAbortException) as exc_info:
            obj.save()

        assert [e.message for e in exc_info.value.errors] == ["parent saved", "database down"]
        obj.second.do_save.assert_not_called()

    def test_delete_is_not_recursive(self, customer):
        customer.do_delete = MagicMock(return_value=None)
        customer.address.do_delete = MagicMock()

        customer.delete()

        customer.do_delete.assert_called_once()
        customer.address.do_delete.assert_not_called()


class TestAsyncCrud:
    """Tests for asynchronous Read, Save and Delete."""

    @pytest.mark.asyncio
    async def test_parallel_children_merge_errors(self):
        obj = ParentObject()
        obj.first.do_save_async = AsyncMock(return_value=errors_of("first"))
        obj.second.do_save_async = AsyncMock(return_value=errors_of("second"))

        errors = await obj.save_async(CrudOptions(parallel=True))

        assert sorted(e.message for e in errors) == ["first", "second"]
        obj.first.do_save_async.assert_awaited_once()
        obj.second.do_save_async.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_save_runs_async_validators(self):
        obj = ParentObject()

        async def taken(p, value, row):
            await asyncio.sleep(0)
            if value == "bob":
                p.add_validation_error(row, "Name is already taken")

        obj.first.text.add_async_validator(taken)
        obj.first.text.set_value("bob")
        obj.do_save_async = AsyncMock(return_value=None)

        errors = await obj.save_async()

        assert errors.errors_text == "Name is already taken"
        obj.do_save_async.assert_not_awaited()

        obj.first.text.set_value("alice")
        errors = await obj.save_async()

        assert not errors.has_errors()
        obj.do_save_async.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_list_validate_async_checks_every_row(self):
        orders = OrderList()
        rows = make_rows(orders, [(1, "Acme"), (2, "Zed")])
        orders.set_rows(rows)

        async def no_zed(p, value, row):
            if value == "Zed":
                p.add_validation_error(row, "Zed is blocked")

        orders.customer.add_async_validator(no_zed)

        await orders.validate_async(True)

        assert orders.get_validation_errors().errors_text == "Zed is blocked"
        assert orders.customer.get_validation_errors(rows[0]).errors_text == ""

    @pytest.mark.asyncio
    async def test_parallel_critical_error(self):
        obj = ParentObject()

        async def failing(options, token=None):
            ErrorList().critical_error(ErrorType.SYSTEM, "timeout")

        obj.first.do_read_async = failing
        obj.second.do_read_async = AsyncMock(return_value=errors_of("second"))

        with pytest.raises(ErrorAbortException) as exc_info:
            await obj.read_async(CrudOptions(parallel=True))

        assert sorted(e.message for e in exc_info.value.errors) == ["second", "timeout"]

    @pytest.mark.asyncio
    async def test_sequential_async(self):
        obj = ParentObject()
        order = []

        def hook(name):
            async def read(options, token=None):
                await asyncio.sleep(0)
                order.append(name)
            return read

        obj.first.do_read_async = hook("first")
        obj.second.do_read_async = hook("second")

        errors = await obj.read_async()

        assert not errors.has_errors()
        assert order == ["first", "second"]
        assert not obj.is_new

    @pytest.mark.asyncio
    async def test_default_async_hooks_call_sync_ones(self, customer):
        fill_valid(customer)
        customer.do_save = MagicMock(return_value=None)
        await customer.save_async()
        customer.do_save.assert_called_once()

    @pytest.mark.asyncio
    async def test_cancelled_save(self, customer):
        fill_valid(customer)
        customer.do_save_async = AsyncMock()
        token = CancellationToken()
        token.cancel()

        with pytest.raises(asyncio.CancelledError):
            await customer.save_async(token=token)
        customer.do_save_async.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_async(self, customer):
        customer.do_delete_async = AsyncMock(return_value=errors_of("in use"))
        customer.address.do_delete_async = AsyncMock()

        errors = await customer.delete_async()

        assert errors.errors_text == "in use"
        customer.address.do_delete_async.assert_not_awaited()
