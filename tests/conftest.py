import pytest
from loguru import logger

from bizobjects.core.config import ModelSettings
from bizobjects.criteria import CriteriaObject, OperatorProperty
from bizobjects.objects import DataListObject, DataObject
from bizobjects.objects.contract import ContractMapping
from bizobjects.properties import DataProperty, EnumKind, Header, LookupTable
from bizobjects.properties.kinds import MoneyKind


def status_table() -> LookupTable:
    return LookupTable("status", [
        Header("status", "A", "Active"),
        Header("status", "C", "Closed"),
        Header("status", "X", "Cancelled", is_active=False),
    ])


class AddressObject(DataObject):
    def initialize(self):
        self.street = DataProperty(self, "Street", "text", size=50)
        self.city = DataProperty(self, "City", "text", required=True)


class CustomerObject(DataObject):
    def initialize(self):
        self.customer_id = DataProperty(self, "CustomerId", "integer_key")
        self.customer_id.is_key = True
        self.customer_name = DataProperty(self, "CustomerName", "text", required=True, size=20)
        self.credit_limit = DataProperty(self, "CreditLimit", MoneyKind(minimum=0))
        self.active = DataProperty(self, "Active", "boolean")
        self.address = self.add_child_object("Address", AddressObject(self))


class OrderList(DataListObject):
    def initialize(self):
        self.order_id = DataProperty(self, "OrderId", "integer_key")
        self.order_id.is_key = True
        self.customer = DataProperty(self, "Customer", "text")
        self.amount = DataProperty(self, "Amount", "decimal")
        self.status = DataProperty(self, "Status", EnumKind("status", status_table()))


class OrderCriteria(CriteriaObject):
    def initialize(self):
        self.customer_operator = OperatorProperty(self, "CustomerOperator")
        self.customer = DataProperty(self, "Customer", "text")
        self.amount_operator = OperatorProperty(self, "Amount Operator")
        self.amount = DataProperty(self, "Amount", "decimal")
        self.amount2 = DataProperty(self, "Amount2", "decimal")
        self.status = DataProperty(self, "Status", EnumKind("status", status_table()), multi_valued=True)


def make_rows(lst: DataListObject, data):
    """Build rows of a list from tuples of column values."""
    return [lst.new_row(list(values)) for values in data]


@pytest.fixture(autouse=True)
def clear_contract_cache():
    ContractMapping.clear_cache()
    yield
    ContractMapping.clear_cache()


@pytest.fixture
def settings():
    return ModelSettings()


@pytest.fixture
def customer():
    return CustomerObject()


@pytest.fixture
def orders():
    return OrderList()


@pytest.fixture
def criteria():
    return OrderCriteria()


@pytest.fixture
def log_messages():
    """Capture Loguru output, which does not propagate to caplog."""
    messages = []
    handler_id = logger.add(lambda m: messages.append(str(m)), level="DEBUG", format="{level} {message}")
    yield messages
    logger.remove(handler_id)
