"""Tests for list-satellite sync planning."""

import pytest

from casework.services.reconcile import ListSyncPolicy, plan_list_sync


def test_replace_all_removes_every_row_and_adds_every_item():
    existing = ["row-a", "row-b"]
    incoming = [{"name": "A"}, {"name": "B"}]

    plan = plan_list_sync(existing, incoming, ListSyncPolicy.REPLACE_ALL)

    assert plan.to_remove == existing
    assert plan.to_add == incoming
    assert plan.to_keep == []


def test_replace_all_with_empty_incoming_clears_list():
    plan = plan_list_sync(["row-a"], [], ListSyncPolicy.REPLACE_ALL)

    assert plan.to_remove == ["row-a"]
    assert plan.to_add == []
    assert not plan.is_noop


def test_replace_all_on_empty_lists_is_noop():
    assert plan_list_sync([], []).is_noop


def test_match_by_content_keeps_unchanged_rows():
    existing = [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}]
    incoming = [{"name": "B"}, {"name": "C"}]

    plan = plan_list_sync(
        existing,
        incoming,
        ListSyncPolicy.MATCH_BY_CONTENT,
        existing_key=lambda row: row["name"],
        incoming_key=lambda item: item["name"],
    )

    assert plan.to_keep == [{"id": 2, "name": "B"}]
    assert plan.to_add == [{"name": "C"}]
    assert plan.to_remove == [{"id": 1, "name": "A"}]


def test_match_by_content_matches_duplicates_one_for_one():
    existing = [{"id": 1, "name": "A"}, {"id": 2, "name": "A"}]
    incoming = [{"name": "A"}]

    plan = plan_list_sync(
        existing,
        incoming,
        ListSyncPolicy.MATCH_BY_CONTENT,
        existing_key=lambda row: row["name"],
        incoming_key=lambda item: item["name"],
    )

    assert plan.to_keep == [{"id": 1, "name": "A"}]
    assert plan.to_remove == [{"id": 2, "name": "A"}]
    assert plan.to_add == []


def test_match_by_content_requires_key_functions():
    with pytest.raises(ValueError):
        plan_list_sync([], [], ListSyncPolicy.MATCH_BY_CONTENT)
