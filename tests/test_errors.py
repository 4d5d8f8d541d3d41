"""Tests for deviceprivacy.utils.errors: error types and message extraction."""

from __future__ import annotations

from deviceprivacy.utils.errors import EvidenceUnavailableError, MalformedRecordError, get_error_message


class TestGetErrorMessage:
    """Tests for get_error_message()."""

    def test_exception_with_message(self) -> None:
        assert get_error_message(ValueError("something broke")) == "something broke"

    def test_exception_without_message(self) -> None:
        assert get_error_message(ValueError()) == "ValueError"

    def test_evidence_error(self) -> None:
        assert get_error_message(EvidenceUnavailableError("Could not read Info.plist file")) == "Could not read Info.plist file"

    def test_non_exception(self) -> None:
        assert get_error_message("oops") == "Unknown error"
        assert get_error_message(None) == "Unknown error"


class TestErrorTypes:
    """Error hierarchy used by the boundaries that catch them."""

    def test_malformed_record_is_value_error(self) -> None:
        assert issubclass(MalformedRecordError, ValueError)

    def test_evidence_unavailable_is_not_value_error(self) -> None:
        assert not issubclass(EvidenceUnavailableError, ValueError)
