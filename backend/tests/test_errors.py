import logging

import pytest

from journal_analytics.core.enums import ErrorCategory, ErrorLevel
from journal_analytics.core.errors import (
    BaseError,
    ConfigurationError,
    ServiceError,
    StorageError,
    ValidationError,
    get_error_class,
)
from journal_analytics.core.errors.decorators import error_handler


class Calculator:
    @error_handler(
        context_extractor=lambda self, user_id, value: {"user_id": user_id, "value": value},
        log_message="Calculation failed"
    )
    def run(self, user_id, value):
        if value < 0:
            raise ValidationError("Negative value", context={"value": "raw"})
        return 10 / value


def test_passes_result_through():
    assert Calculator().run("user-1", 2) == 5


def test_domain_error_enriched_and_reraised():
    with pytest.raises(ValidationError) as exc_info:
        Calculator().run("user-1", -1)

    # existing keys are kept, missing ones added
    assert exc_info.value.context == {"value": "raw", "user_id": "user-1"}


def test_unexpected_error_wrapped_in_service_error():
    with pytest.raises(ServiceError) as exc_info:
        Calculator().run("user-1", 0)

    error = exc_info.value
    assert isinstance(error.__cause__, ZeroDivisionError)
    assert error.parent is error.__cause__
    assert error.message == "Calculation failed"
    assert error.context["user_id"] == "user-1"
    assert "division" in error.context["error"]
    assert "ZeroDivisionError" in error.traceback


def test_broken_context_extractor_does_not_mask_error():
    @error_handler(context_extractor=lambda missing: {})
    def fail():
        raise StorageError("Backend down")

    with pytest.raises(StorageError) as exc_info:
        fail()

    assert "context_error" in exc_info.value.context


def test_to_dict():
    error = ConfigurationError("Bad timezone", context={"timezone": "X"})

    data = error.to_dict()

    assert data["message"] == "Bad timezone"
    assert data["level"] == ErrorLevel.CRITICAL.value
    assert data["category"] == "configuration"
    assert data["error_type"] == "ConfigurationError"
    assert data["parent_error"] is None
    assert str(error) == "Bad timezone | Context: {'timezone': 'X'}"


def test_from_exception():
    error = ServiceError.from_exception(KeyError("k"), context={"step": "load"})

    assert error.parent.args == ("k",)
    assert error.context == {"step": "load"}
    assert error.to_dict()["parent_error"] == "'k'"


@pytest.mark.parametrize(
    "category, expected",
    [
        (ErrorCategory.VALIDATION, ValidationError),
        (ErrorCategory.CONFIGURATION, ConfigurationError),
        (ErrorCategory.STORAGE, StorageError),
        (ErrorCategory.SYSTEM, ServiceError),
    ],
)
def test_get_error_class(category, expected):
    assert get_error_class(category) is expected
    assert issubclass(expected, BaseError)


@pytest.fixture
def handler_log(caplog):
    handler_logger = logging.getLogger("journal_analytics.core.errors.decorators")
    handler_logger.propagate = True
    try:
        with caplog.at_level(logging.WARNING, logger=handler_logger.name):
            yield caplog
    finally:
        handler_logger.propagate = False


def test_nested_handlers_log_once_at_outermost_call(handler_log):
    @error_handler(context_extractor=lambda user_id: {"user_id": user_id}, log_message="Outer failed")
    def outer(user_id):
        return Calculator().run(user_id, -1)

    with pytest.raises(ValidationError) as exc_info:
        outer("user-1")

    assert exc_info.value.context == {"value": "raw", "user_id": "user-1"}
    assert len(handler_log.records) == 1
    record = handler_log.records[0]
    assert record.levelno == logging.WARNING
    assert record.getMessage() == "Outer failed"
    assert record.error_type == "ValidationError"
    assert record.error_context["context"]["user_id"] == "user-1"


def test_wrapped_error_logged_once_at_error_level(handler_log):
    @error_handler(log_message="Outer failed")
    def outer():
        return Calculator().run("user-1", 0)

    with pytest.raises(ServiceError) as exc_info:
        outer()

    assert exc_info.value.message == "Calculation failed"
    assert len(handler_log.records) == 1
    assert handler_log.records[0].levelno == logging.ERROR
    assert handler_log.records[0].error_context["category"] == "system"


def test_sibling_calls_each_log(handler_log):
    for _ in range(2):
        with pytest.raises(ValidationError):
            Calculator().run("user-1", -1)

    assert len(handler_log.records) == 2
