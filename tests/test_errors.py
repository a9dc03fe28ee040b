"""
Unit Tests for error lists and message resolution.
"""
import pytest

from bizobjects.errors import (
    ErrorAbortException,
    ErrorList,
    ErrorMessage,
    ErrorSeverity,
    ErrorType,
    MessageProvider,
    Messages,
)


class TestMessageProvider:
    """Tests for message templates."""

    def test_formats_default_template(self):
        provider = MessageProvider()
        assert provider.format(Messages.VALIDATION_REQUIRED, "Name") == "Name is required."

    def test_unknown_code_is_used_verbatim(self):
        assert MessageProvider().format("Something went wrong") == "Something went wrong"

    def test_broken_template_is_returned_unformatted(self):
        provider = MessageProvider({"Custom": "{0} and {1}"})
        assert provider.format("Custom", "only one") == "{0} and {1}"

    def test_overrides(self):
        provider = MessageProvider({Messages.VALIDATION_REQUIRED: "{0} fehlt."})
        assert provider.format(Messages.VALIDATION_REQUIRED, "Name") == "Name fehlt."
        provider.register("Greeting", "Hello {0}")
        assert provider.get_string("Greeting") == "Hello {0}"


class TestErrorList:
    """Tests for ErrorList severity handling."""

    def test_warnings_are_not_errors(self):
        errors = ErrorList()
        errors.add_warning("Check the address")
        errors.add_info("Saved draft")
        assert not errors.has_errors()
        assert errors.http_status == 200
        assert len(errors) == 2

    def test_validation_error(self):
        errors = ErrorList()
        err = errors.add_validation_error(Messages.VALIDATION_NUMBER_MINIMUM, "Amount", 0)
        assert errors.has_errors()
        assert err.type == ErrorType.VALIDATION
        assert err.message == "Amount cannot be less than 0."
        assert errors.http_status == 400

    def test_http_status_is_highest(self):
        errors = ErrorList()
        errors.add_error(ErrorType.VALIDATION, "bad input")
        errors.add_error(ErrorType.EXTERNAL, "service down")
        assert errors.http_status == 502
        errors.http_status = 418
        assert errors.http_status == 418

    @pytest.mark.parametrize("type_, status", [
        (ErrorType.SECURITY, 403),
        (ErrorType.DATA, 404),
        (ErrorType.CONCURRENCY, 409),
        (ErrorType.SYSTEM, 500),
    ])
    def test_error_type_status(self, type_, status):
        assert ErrorMessage(type_, "code", "text").http_status == status

    def test_critical_error_aborts(self):
        errors = ErrorList()
        errors.add_warning("first")
        with pytest.raises(ErrorAbortException) as exc_info:
            errors.critical_error(ErrorType.SYSTEM, "Database unavailable")
        assert exc_info.value.errors is errors
        assert errors.has_critical()
        assert str(exc_info.value) == "Database unavailable"

    def test_critical_error_without_abort(self):
        errors = ErrorList()
        errors.critical_error(ErrorType.SYSTEM, "Disk full", abort=False)
        assert errors.has_critical()
        assert errors.errors[0].severity == ErrorSeverity.CRITICAL

    def test_abort_if_has_errors(self):
        errors = ErrorList()
        errors.add_warning("just a warning")
        errors.abort_if_has_errors()
        errors.add_error(ErrorType.FUNCTIONAL, "broken")
        with pytest.raises(ErrorAbortException):
            errors.abort_if_has_errors()

    def test_merge_with(self):
        a = ErrorList()
        a.add_error(ErrorType.DATA, "one")
        b = ErrorList()
        b.add_error(ErrorType.DATA, "two")
        a.merge_with(b)
        a.merge_with(None)
        a.merge_with(a)
        assert [e.message for e in a] == ["one", "two"]
        assert a.errors_text == "one\ntwo"

    def test_empty_list_is_truthy(self):
        errors = ErrorList()
        assert errors
        errors.add_info("x")
        errors.clear()
        assert len(errors) == 0
