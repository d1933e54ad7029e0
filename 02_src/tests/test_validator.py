"""Tests for EventValidator."""

import logging

import pytest

from mobile_analytics.validation import EventValidator


@pytest.fixture
def validator():
    return EventValidator()


def error_records(caplog):
    return [r for r in caplog.records if r.levelno == logging.ERROR]


class TestValidEvents:
    """Events within every limit pass through unchanged."""

    def test_minimal_event(self, validator, make_event):
        """Test event without attributes or metrics."""
        event = make_event()
        assert validator.validate(event) is event

    def test_limits_inclusive(self, validator, make_event):
        """Test 40 keys, 50-char names and 200-char values are accepted."""
        attributes = {f"a{i:02d}".ljust(50, "x"): "v" * 200 for i in range(20)}
        metrics = {f"m{i:02d}": i * 1.5 for i in range(20)}
        event = make_event(attributes=attributes, metrics=metrics)

        assert validator.validate(event) is event

    def test_int_and_float_metrics(self, validator, make_event):
        """Test both ints and floats count as numeric."""
        event = make_event(metrics={"count": 3, "ratio": 0.5})
        assert validator.validate(event) is event


class TestInvalidEvents:
    """Each broken rule returns None and logs a single error."""

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"metrics": {"score": "high"}}, "Event Metrics must be numeric (score)"),
            ({"metrics": {"flag": True}}, "Event Metrics must be numeric (flag)"),
            (
                {"attributes": {f"k{i}": "v" for i in range(41)}},
                "Event Metric and Attribute Count cannot exceed 40",
            ),
            ({"attributes": {"a" * 51: "v"}}, "Event Attribute names must be 1-50 characters"),
            ({"attributes": {"": "v"}}, "Event Attribute names must be 1-50 characters"),
            ({"metrics": {"m" * 51: 1}}, "Event Metric names must be 1-50 characters"),
            (
                {"attributes": {"note": "x" * 201}},
                "Event Attribute values cannot be longer than 200 characters",
            ),
        ],
    )
    def test_single_rule_violation(self, validator, make_event, caplog, kwargs, message):
        """Test one violation yields None and exactly one error."""
        event = make_event(**kwargs)

        with caplog.at_level(logging.DEBUG):
            assert validator.validate(event) is None

        errors = error_records(caplog)
        assert len(errors) == 1
        assert errors[0].getMessage().startswith(message)

    def test_wrong_version(self, validator, make_event, caplog):
        """Test version other than v2.0 is rejected."""
        event = make_event()
        event.version = "v1.0"

        assert validator.validate(event) is None
        assert "version v2.0" in error_records(caplog)[0].getMessage()

    def test_event_type_not_string(self, validator, make_event, caplog):
        """Test non-string event type is rejected."""
        event = make_event(event_type=42)

        assert validator.validate(event) is None
        assert error_records(caplog)[0].getMessage() == "Event Type must be a string"

    def test_first_failing_rule_wins(self, validator, make_event, caplog):
        """Test only the earliest rule is reported when several fail."""
        event = make_event(
            attributes={"a" * 51: "x" * 201},
            metrics={"score": "high"},
        )

        assert validator.validate(event) is None

        errors = error_records(caplog)
        assert len(errors) == 1
        assert "Metrics must be numeric" in errors[0].getMessage()

    def test_uses_injected_logger(self, make_event):
        """Test errors go to the injected logger."""
        logger = logging.getLogger("test.validator")
        records = []

        class Collect(logging.Handler):
            def emit(self, record):
                records.append(record)

        handler = Collect()
        logger.addHandler(handler)
        try:
            EventValidator(logger=logger).validate(make_event(metrics={"x": "y"}))
        finally:
            logger.removeHandler(handler)

        assert len(records) == 1
