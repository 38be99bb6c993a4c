"""Unit tests for :mod:`clusteredit.editor.validation`."""

from __future__ import annotations

import pytest

from clusteredit.editor.draft_model import DraftRecord
from clusteredit.editor.validation import (
    NAME_EMPTY_MESSAGE,
    PASSED,
    URL_EMPTY_MESSAGE,
    URL_MALFORMED_MESSAGE,
    URL_TRAILING_SLASH_MESSAGE,
    ValidatedField,
    ValidationState,
    Verdict,
    validate_field,
    validate_name,
    validate_record,
    validate_url,
)


def _draft(name: str = "prod", url: str = "https://crane.example.com") -> DraftRecord:
    return DraftRecord(id="d1", cluster_name=name, crane_url=url)


class TestValidateName:
    def test_accepts_non_empty_name(self) -> None:
        assert validate_name(_draft(name="prod")) == PASSED

    @pytest.mark.parametrize("name", ["", "   ", "\t\n"])
    def test_rejects_empty_or_whitespace(self, name: str) -> None:
        verdict = validate_name(_draft(name=name))
        assert verdict.failed
        assert verdict.message == "cluster name must not be empty."
        assert verdict.message == NAME_EMPTY_MESSAGE


class TestValidateUrl:
    @pytest.mark.parametrize(
        "url",
        ["https://crane.example.com", "http://10.0.0.1:8080", "http://x.com", "https://x.com/a/b"],
    )
    def test_accepts_well_formed_urls(self, url: str) -> None:
        assert validate_url(_draft(url=url)) == PASSED

    def test_empty_url(self) -> None:
        verdict = validate_url(_draft(url=""))
        assert verdict == Verdict(failed=True, message="URL must not be empty")
        assert verdict.message == URL_EMPTY_MESSAGE

    @pytest.mark.parametrize("url", ["crane.example.com", "ftp://x", "HTTPS://crane", " https://crane"])
    def test_missing_scheme(self, url: str) -> None:
        verdict = validate_url(_draft(url=url))
        assert verdict.failed
        assert verdict.message == URL_MALFORMED_MESSAGE

    @pytest.mark.parametrize("url", ["https://crane.example.com/", "http://x/", "https://x.com/"])
    def test_trailing_slash(self, url: str) -> None:
        verdict = validate_url(_draft(url=url))
        assert verdict.failed
        assert verdict.message == URL_TRAILING_SLASH_MESSAGE
        assert "trailing slash" in verdict.message

    def test_scheme_rule_wins_over_trailing_slash(self) -> None:
        verdict = validate_url(_draft(url="crane.example.com/"))
        assert verdict.message == URL_MALFORMED_MESSAGE

    def test_bare_scheme_with_slash_is_a_trailing_slash_failure(self) -> None:
        verdict = validate_url(_draft(url="https://"))
        assert verdict.message == URL_TRAILING_SLASH_MESSAGE


def test_validate_field_dispatches_by_field() -> None:
    record = _draft(name="", url="https://ok")
    assert validate_field(record, ValidatedField.CLUSTER_NAME).failed
    assert not validate_field(record, ValidatedField.CRANE_URL).failed


def test_validate_record_checks_both_fields_independently() -> None:
    verdicts = validate_record(_draft(name="", url=""))

    assert set(verdicts) == {ValidatedField.CLUSTER_NAME, ValidatedField.CRANE_URL}
    assert verdicts[ValidatedField.CLUSTER_NAME].message == NAME_EMPTY_MESSAGE
    assert verdicts[ValidatedField.CRANE_URL].message == URL_EMPTY_MESSAGE


class TestValidationState:
    def test_record_and_overwrite(self) -> None:
        state = ValidationState()
        state.record("d1", ValidatedField.CRANE_URL, Verdict.fail(URL_EMPTY_MESSAGE))
        assert state.has_failure("d1")

        state.record("d1", ValidatedField.CRANE_URL, PASSED)

        assert state.get("d1", ValidatedField.CRANE_URL) == PASSED
        assert not state.has_failure("d1")

    def test_missing_entries_return_none(self) -> None:
        state = ValidationState()
        assert state.get("nope", ValidatedField.CLUSTER_NAME) is None
        assert state.for_draft("nope") == {}
        assert "nope" not in state

    def test_record_all_and_discard(self) -> None:
        state = ValidationState()
        state.record_all("d1", validate_record(_draft(name="")))
        state.record_all("d2", validate_record(_draft()))

        assert len(state) == 2
        assert list(state.draft_ids()) == ["d1", "d2"]

        state.discard("d1")
        assert "d1" not in state
        assert list(state.draft_ids()) == ["d2"]

    def test_clear_and_snapshot(self) -> None:
        state = ValidationState()
        state.record("d1", ValidatedField.CLUSTER_NAME, Verdict.fail(NAME_EMPTY_MESSAGE))

        assert state.snapshot() == {
            "d1": {"cluster_name": {"failed": True, "message": NAME_EMPTY_MESSAGE}},
        }

        state.clear()
        assert state.is_empty()
