"""
Unit Tests for computed bindings.

Tests for:
- Computed editable/visible/required state of properties
- Computed values
- Object-level computed editability
- Dependencies on objects, members and list selection
"""
from unittest.mock import MagicMock

import pytest

from bizobjects.binding import ComputedBinding, ComputedValueBinding
from bizobjects.objects import DataObject
from bizobjects.properties import ActionProperty, ComboProperty, DataProperty, PropertyChange

from conftest import OrderList, make_rows


class OrderObject(DataObject):
    def initialize(self):
        self.status = DataProperty(self, "Status", "text")
        self.reason = DataProperty(self, "Reason", "text")
        self.quantity = DataProperty(self, "Quantity", "integer")
        self.price = DataProperty(self, "Price", "decimal")
        self.total = DataProperty(self, "Total", "decimal")
        self.save_action = ActionProperty(self, "Save")


# =============================================================================
# Property state
# =============================================================================

class TestComputedState:
    """Tests for computed editable, visible and required flags."""

    def test_computed_required(self):
        order = OrderObject()
        order.reason.set_computed_required(lambda: order.status.value == "Rejected", order.status)

        assert not order.reason.required
        order.status.set_value("Rejected")
        assert order.reason.required
        order.status.set_value("Approved")
        assert not order.reason.required

    def test_computed_state_fires_change(self):
        order = OrderObject()
        order.reason.set_computed_visible(lambda: order.status.value is not None, order.status)
        callback = MagicMock()
        order.reason.change.connect(callback)

        order.status.set_value("New")

        changes = [c.args[1].change for c in callback.call_args_list]
        assert PropertyChange.VISIBLE in changes
        assert order.reason.visible

    def test_manual_change_of_computed_state_is_ignored(self, log_messages):
        order = OrderObject()
        order.reason.set_computed_editable(lambda: False, order.status)

        order.reason.editable = True

        assert not order.reason.editable
        assert any("Ignoring manual editable change" in m for m in log_messages)

    def test_removing_computed_state_restores_manual(self):
        order = OrderObject()
        order.reason.set_computed_editable(lambda: False, order.status)
        order.reason.set_computed_editable(None)
        assert order.reason.editable

    def test_change_mask(self):
        order = OrderObject()
        compute = MagicMock(return_value=True)
        order.reason.set_computed_editable(compute, (order.status, PropertyChange.EDITABLE))
        compute.reset_mock()

        order.status.set_value("x")
        compute.assert_not_called()

        order.status.editable = False
        compute.assert_called()

    def test_computed_enabled_action(self):
        order = OrderObject()
        order.save_action.set_computed_enabled(lambda: not order.status.is_null(), order.status)
        assert not order.save_action.enabled
        order.status.set_value("New")
        assert order.save_action.enabled

    def test_dispose_unsubscribes(self):
        order = OrderObject()
        count = order.status.change.subscriber_count
        order.reason.set_computed_editable(lambda: True, order.status)
        assert order.status.change.subscriber_count == count + 1
        order.reason.set_computed_editable(None)
        assert order.status.change.subscriber_count == count

    def test_unsupported_dependency(self):
        with pytest.raises(TypeError):
            ComputedValueBinding(DataProperty(name="X"), lambda: 1, [42])

    def test_base_binding_is_abstract(self):
        with pytest.raises(TypeError):
            ComputedBinding(DataProperty(name="X"), lambda: 1)


# =============================================================================
# Computed values
# =============================================================================

class TestComputedValue:
    """Tests for computed property values."""

    def test_total_follows_inputs(self):
        order = OrderObject()
        order.total.set_computed_value(
            lambda: (order.quantity.value or 0) * (order.price.value or 0),
            order.quantity, order.price)

        assert not order.total.editable
        order.quantity.set_value(3)
        order.price.set_value("2.50")
        assert str(order.total.value) == "7.50"

    @pytest.mark.asyncio
    async def test_async_update(self):
        order = OrderObject()
        order.total.set_computed_value(lambda: order.quantity.value, order.quantity)

        await order.quantity.set_value_async(5)

        assert order.total.value == 5

    def test_computed_value_in_list_rows(self):
        orders = OrderList()
        orders.set_rows(make_rows(orders, [(1, "a", None, None)]))
        row = orders.get_row(0)

        orders.customer.set_computed_value(lambda r: f"#{orders.order_id.get_value(row=r)}", orders.order_id)
        orders.order_id.set_value(7, row)

        assert row["Customer"] == "#7"


# =============================================================================
# Objects and lists as dependencies
# =============================================================================

class TestObjectDependencies:
    """Tests for object-level bindings."""

    def test_object_editable_computed(self):
        order = OrderObject()
        order.set_computed_editable(lambda: order.status.value != "Closed", order.status)
        changes = []
        order.quantity.change.connect(lambda s, a: changes.append(a.change))

        order.status.set_value("Closed")

        assert not order.editable
        assert not order.quantity.editable
        assert PropertyChange.EDITABLE in changes

    def test_object_member_dependency(self):
        order = OrderObject()
        order.reason.set_computed_editable(lambda: order.is_new, (order, "is_new"))
        assert order.reason.editable

        order.is_new = False
        assert not order.reason.editable

    def test_list_selection_dependency(self):
        orders = OrderList()
        orders.set_rows(make_rows(orders, [(1,), (2,)]))
        action = ActionProperty(name="Open")
        action.set_computed_enabled(lambda: len(orders.get_selected_rows()) == 1, orders)

        assert not action.enabled
        orders.select_row(0)
        assert action.enabled

    def test_dependencies_listing(self):
        order = OrderObject()
        binding = ComputedValueBinding(order.total, lambda: 1, [order.quantity, (order, "is_new")])
        assert binding.dependencies == [order.quantity, order]
        assert isinstance(binding, ComputedBinding)
        binding.dispose()


# =============================================================================
# Combined values
# =============================================================================

class AddressObject(DataObject):
    def initialize(self):
        self.city = DataProperty(self, "City", "text")
        self.state = DataProperty(self, "State", "text")
        self.zip = DataProperty(self, "Zip", "text")
        self.summary = ComboProperty(self, "Summary", format="{0}{, $1}{ $2}")
        self.summary.set_component_properties(self.city, self.state, self.zip)


class TestComboProperty:
    """Tests for values combined from component properties."""

    def test_combines_components(self):
        address = AddressObject()
        address.city.set_value("Austin")
        address.state.set_value("TX")
        address.zip.set_value("78701")

        assert address.summary.value == "Austin, TX 78701"

    def test_blank_component_drops_its_section(self):
        address = AddressObject()
        address.city.set_value("Paris")
        address.zip.set_value("75001")

        assert address.summary.value == "Paris 75001"

    def test_all_components_blank(self):
        address = AddressObject()
        address.city.set_value("Paris")
        address.city.set_value(None)

        assert address.summary.is_null()
        assert address.summary.display_string == ""

    def test_trim_values(self):
        address = AddressObject()
        address.city.set_value("  Oslo ")
        assert address.summary.value == "Oslo"

        address.summary.trim_values = False
        address.summary.update_computed_value()
        assert address.summary.value == "  Oslo "

    def test_is_read_only_and_never_modified(self):
        address = AddressObject()
        address.city.set_value("Rome")
        address.city.set_value("Milan")

        assert not address.summary.editable
        assert not address.summary.modified
        assert address.city.modified

    def test_component_change_notifies(self):
        address = AddressObject()
        callback = MagicMock()
        address.summary.change.connect(callback)

        address.state.set_value("CA")

        changes = [c.args[1].change for c in callback.call_args_list]
        assert PropertyChange.VALUE in changes

    def test_replacing_components_unsubscribes(self):
        address = AddressObject()
        count = address.zip.change.subscriber_count

        address.summary.set_component_properties(address.city)

        assert address.zip.change.subscriber_count == count - 1
        address.zip.set_value("10001")
        assert address.summary.is_null()
