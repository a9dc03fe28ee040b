"""
Data contract mapping.

A data contract is an external flat structure (dict, dataclass, pydantic
model or plain object) exchanged with a data layer. Its members are matched
by name against an object's properties, then its child objects, and finally
against properties following the ``Member_SubMember`` flattening convention.
The resulting mapping table is built once per object type and contract shape.
"""
import dataclasses
import typing
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel


class MappingKind(Enum):
    PROPERTY = "property"
    CHILD = "child"
    FLATTENED = "flattened"


@dataclass
class ContractField:
    member: str
    kind: MappingKind
    target: str = ""
    # (sub member, property name) pairs for flattened members
    fields: List[Tuple[str, str]] = field(default_factory=list)


# --- Contract member access ---
def contract_members(contract: Any) -> List[str]:
    """List member names of a data contract instance or class."""
    if isinstance(contract, dict):
        return list(contract.keys())
    cls = contract if isinstance(contract, type) else type(contract)
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        return list(cls.model_fields.keys())
    if dataclasses.is_dataclass(cls):
        return [f.name for f in dataclasses.fields(cls)]
    if isinstance(contract, type):
        return list(typing.get_type_hints(contract).keys())
    return [k for k in vars(contract) if not k.startswith("_")]


def get_member(contract: Any, member: str, default: Any = None) -> Any:
    if isinstance(contract, dict):
        return contract.get(member, default)
    return getattr(contract, member, default)


def has_member(contract: Any, member: str) -> bool:
    if isinstance(contract, dict):
        return member in contract
    return hasattr(contract, member)


def set_member(contract: Any, member: str, value: Any):
    if isinstance(contract, dict):
        contract[member] = value
    else:
        setattr(contract, member, value)


def new_member_value(contract: Any, member: str) -> Optional[Any]:
    """Create an empty nested contract for a member, based on its declared type."""
    if isinstance(contract, dict):
        return {}
    if isinstance(contract, BaseModel):
        info = type(contract).model_fields.get(member)
        tp = info.annotation if info is not None else None
    else:
        try:
            hints = typing.get_type_hints(type(contract))
        except (NameError, TypeError):
            return None
        tp = hints.get(member)
    if tp is None:
        return None
    args = [a for a in typing.get_args(tp) if a is not type(None)]
    origin = typing.get_origin(tp)
    if origin in (list, List):
        return []
    if origin is not None and len(args) == 1:
        tp = args[0]
    if isinstance(tp, type):
        try:
            return tp()
        except (TypeError, ValueError) as e:
            logger.debug(f"Cannot create contract member '{member}' of {tp}: {e}")
    return None


# --- Mapping table ---
class ContractMapping:
    """Mapping between the members of a contract shape and an object's members."""

    max_cached = 256
    _cache: "OrderedDict[Tuple[type, Any], ContractMapping]" = OrderedDict()

    def __init__(self, fields: List[ContractField]):
        self.fields = fields

    @staticmethod
    def _shape_key(contract: Any) -> Any:
        if isinstance(contract, dict):
            return frozenset(contract.keys())
        return contract if isinstance(contract, type) else type(contract)

    @classmethod
    def for_object(cls, obj, contract: Any) -> "ContractMapping":
        key = (type(obj), cls._shape_key(contract))
        mapping = cls._cache.get(key)
        if mapping is not None:
            cls._cache.move_to_end(key)
            return mapping
        mapping = cls.build(obj, contract_members(contract))
        cls._cache[key] = mapping
        if len(cls._cache) > cls.max_cached:
            cls._cache.popitem(last=False)
        return mapping

    @classmethod
    def build(cls, obj, members: List[str]) -> "ContractMapping":
        fields = []
        for member in members:
            if obj.has_property(member):
                fields.append(ContractField(member, MappingKind.PROPERTY, member))
            elif obj.get_child_object(member) is not None:
                fields.append(ContractField(member, MappingKind.CHILD, member))
            else:
                prefix = member + "_"
                flat = [(name[len(prefix):], name) for name in obj.properties if name.startswith(prefix)]
                if flat:
                    fields.append(ContractField(member, MappingKind.FLATTENED, member, flat))
        logger.debug(f"Built contract mapping for {type(obj).__name__}: {len(fields)} of {len(members)} members")
        return ContractMapping(fields)

    @classmethod
    def clear_cache(cls):
        cls._cache.clear()
