"""Unit tests for :mod:`clusteredit.editor.draft_model`."""

from __future__ import annotations

import dataclasses

import pytest

from clusteredit.editor.draft_model import DraftIdSequence, DraftRecord, EditMode


def test_blank_record_defaults() -> None:
    record = DraftRecord(id="d1")

    assert record.cluster_name == ""
    assert record.crane_url == ""
    assert record.is_blank()


def test_merged_returns_new_record_and_keeps_original() -> None:
    record = DraftRecord(id="d1", cluster_name="prod")

    updated = record.merged(crane_url="https://crane.example.com")

    assert updated == DraftRecord(id="d1", cluster_name="prod", crane_url="https://crane.example.com")
    assert record.crane_url == ""
    assert not updated.is_blank()


def test_merged_rejects_unknown_fields() -> None:
    with pytest.raises(TypeError, match="Unknown draft field"):
        DraftRecord(id="d1").merged(region="eu")


def test_merged_cannot_change_id() -> None:
    with pytest.raises(TypeError):
        DraftRecord(id="d1").merged(id="d2")


def test_record_is_frozen() -> None:
    record = DraftRecord(id="d1")
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.cluster_name = "x"  # type: ignore[misc]


def test_snapshot_lists_every_field() -> None:
    record = DraftRecord(id="d1", cluster_name="a", crane_url="http://a")
    assert record.snapshot() == {"id": "d1", "cluster_name": "a", "crane_url": "http://a"}


def test_id_sequence_is_monotonic_and_prefixed() -> None:
    sequence = DraftIdSequence(prefix="tab")
    assert [sequence.next_id() for _ in range(3)] == ["tab-1", "tab-2", "tab-3"]


def test_edit_mode_values() -> None:
    assert EditMode("create") is EditMode.CREATE
    assert EditMode("update") is EditMode.UPDATE
