import pytest

from endpointwizard.errors_catalog import actionable_error


def test_actionable_error_formats_message_with_suggested_action():
    message = actionable_error("database_connection_failed", reason="timeout expired")

    assert message.startswith("Could not connect to database. timeout expired")
    assert "Suggested action:" in message


def test_actionable_error_rejects_unknown_codes():
    with pytest.raises(KeyError, match="Unknown error catalog key"):
        actionable_error("does_not_exist")
