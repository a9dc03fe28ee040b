"""
Message codes and the resource provider that turns them into text.
"""
from typing import Dict, Optional


class Messages:
    """Codes of the built-in messages."""
    VALIDATION_REQUIRED = "Validation_Required"
    VALIDATION_MAX_LENGTH = "Validation_MaxLength"
    VALIDATION_INTEGER_FORMAT = "Validation_IntegerFormat"
    VALIDATION_DECIMAL_FORMAT = "Validation_DecimalFormat"
    VALIDATION_DATETIME_FORMAT = "Validation_DateTimeFormat"
    VALIDATION_BOOLEAN_FORMAT = "Validation_BooleanFormat"
    VALIDATION_GUID_FORMAT = "Validation_GuidFormat"
    VALIDATION_NUMBER_MINIMUM = "Validation_NumberMinimum"
    VALIDATION_NUMBER_MAXIMUM = "Validation_NumberMaximum"
    VALIDATION_LOOKUP_VALUE = "Validation_LookupValue"
    VALIDATION_LOOKUP_VALUE_ACTIVE = "Validation_LookupValueActive"
    VALIDATION_INVALID_LOOKUP_TABLE = "Validation_InvalidLookupTable"
    OPERATOR_NOT_SUPPORTED = "Operator_NotSupported"
    OPERATOR_NUMBER_OF_VALUES = "Operator_NumberOfValues"
    OPERATION_CANCELLED = "Operation_Cancelled"


DEFAULT_MESSAGES: Dict[str, str] = {
    Messages.VALIDATION_REQUIRED: "{0} is required.",
    Messages.VALIDATION_MAX_LENGTH: "The value '{2}' for {0} should not be longer than {1} characters.",
    Messages.VALIDATION_INTEGER_FORMAT: "{0} contains an invalid number.",
    Messages.VALIDATION_DECIMAL_FORMAT: "{0} must be a decimal number.",
    Messages.VALIDATION_DATETIME_FORMAT: "{0} has an invalid date/time: {1}. Please use the following format: {2}.",
    Messages.VALIDATION_BOOLEAN_FORMAT: "{0} has an invalid value: {1}. Please enter one of: {2}.",
    Messages.VALIDATION_GUID_FORMAT: "{0} has an invalid unique identifier: {1}.",
    Messages.VALIDATION_NUMBER_MINIMUM: "{0} cannot be less than {1}.",
    Messages.VALIDATION_NUMBER_MAXIMUM: "{0} cannot be greater than {1}.",
    Messages.VALIDATION_LOOKUP_VALUE: "The value '{2}' for {0} should be from the '{1}' lookup table.",
    Messages.VALIDATION_LOOKUP_VALUE_ACTIVE: "The value '{1}' for {0} is not available for selection.",
    Messages.VALIDATION_INVALID_LOOKUP_TABLE: "Invalid lookup table '{1}' specified for {0}.",
    Messages.OPERATOR_NOT_SUPPORTED: "Unsupported operator {0} for the {1}.",
    Messages.OPERATOR_NUMBER_OF_VALUES: "Operator {0} expects {1} value(s), but only {2} were provided for {3}.",
    Messages.OPERATION_CANCELLED: "Operation was cancelled.",
}


class MessageProvider:
    """
    Resolves message codes to display templates.

    Additional templates may be passed in to override or extend the defaults,
    e.g. to localize them.
    """

    def __init__(self, overrides: Optional[Dict[str, str]] = None):
        self._messages = dict(DEFAULT_MESSAGES)
        if overrides:
            self._messages.update(overrides)

    def get_string(self, code: str) -> Optional[str]:
        return self._messages.get(code)

    def register(self, code: str, template: str):
        self._messages[code] = template

    def format(self, code: str, *params) -> str:
        """
        Build the message text for a code.

        Args:
            code: Message code; used as the template when unknown.
            *params: Positional arguments for the template.

        Returns:
            Formatted text, or the raw template if formatting fails.
        """
        message = self.get_string(code)
        if message is None:
            message = code
        try:
            return message.format(*params)
        except (IndexError, KeyError, ValueError):
            return message


default_provider = MessageProvider()
