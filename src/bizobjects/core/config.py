"""
Model settings shared by a data object tree, and their file storage.
"""
import json
import os
import tomllib
from typing import List, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field


# --- Settings Sections ---
class ValueSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    null_string: str = ""
    restricted_string: str = ""
    parse_list_separators: List[str] = Field(default_factory=lambda: [",", ";", "\n"])
    display_list_separator: str = ", "
    true_strings: List[str] = Field(default_factory=lambda: ["true", "1", "yes"])
    false_strings: List[str] = Field(default_factory=lambda: ["false", "0", "no"])


class DateSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    datetime_format: str = "%Y-%m-%d %H:%M"
    date_format: str = "%Y-%m-%d"
    time_format: str = "%H:%M"


class NumberSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    decimal_separator: str = "."
    group_separator: str = ","
    currency_symbol: str = "$"
    decimal_display_format: str = ""
    money_display_format: str = ",.2f"
    percent_display_format: str = ".2%"


class CriteriaSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    operator_suffix: str = "Operator"
    second_operand_suffix: str = "2"
    null_check_operators: bool = False


class ListSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    nulls_first: bool = False
    page_size: int = Field(default=20, gt=0)
    page_sizes: List[int] = Field(default_factory=lambda: [10, 20, 50, 100])
    paging_mode: str = "none"


class ModelSettings(BaseModel):
    """Injectable configuration shared by a data object tree."""
    model_config = ConfigDict(validate_assignment=True)

    values: ValueSettings = Field(default_factory=ValueSettings)
    dates: DateSettings = Field(default_factory=DateSettings)
    numbers: NumberSettings = Field(default_factory=NumberSettings)
    criteria: CriteriaSettings = Field(default_factory=CriteriaSettings)
    lists: ListSettings = Field(default_factory=ListSettings)


# --- Files ---
def load_settings(path: str) -> ModelSettings:
    """
    Read model settings from a JSON or TOML file.

    Sections and keys missing from the file keep their defaults. A missing
    file gives default settings; an unreadable or invalid one is logged
    and also gives defaults.
    """
    if not os.path.isfile(path):
        logger.debug(f"No settings file at {path}, using defaults")
        return ModelSettings()
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f) if path.endswith(".toml") else json.load(f)
        settings = ModelSettings.model_validate(raw)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load settings from {path}: {e}")
        return ModelSettings()
    logger.debug(f"Loaded settings from {path}")
    return settings


def save_settings(settings: ModelSettings, path: str):
    """Write settings as JSON, creating the directory if needed."""
    if path.endswith(".toml"):
        raise ValueError(f"Settings can only be saved as JSON: {path}")
    dirname = os.path.dirname(path)
    if dirname:
        os.makedirs(dirname, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(settings.model_dump_json(indent=4))
    logger.debug(f"Saved settings to {path}")


def resolve_settings(settings: Union[ModelSettings, str, None]) -> Optional[ModelSettings]:
    """Accept settings or the path of a settings file."""
    if isinstance(settings, str):
        return load_settings(settings)
    return settings
