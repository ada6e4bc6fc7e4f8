from __future__ import annotations

import logging

import pytest

from clientsync.core.index import HierarchicalIndex, LeafPath, RecordStore
from tests.fakes.server import make_record


@pytest.fixture
def store() -> RecordStore:
    store = RecordStore([HierarchicalIndex()])
    store.bootstrap(
        [
            make_record("1", city="Laval", sector="Laval", district="Chomedey"),
            make_record("2", city="Brossard", sector="Rive Sud"),
            make_record("3", city="Montréal", sector="Montréal", district="Plateau"),
        ],
        "2024-05-01T10:00:01.000Z",
    )
    return store


def test_bootstrap_sets_watermark_and_rebuilds_projection(store: RecordStore) -> None:
    assert store.watermark == "2024-05-01T10:00:01.000Z"
    assert store.size() == 3
    assert store.hierarchy is not None
    assert store.hierarchy.total() == 3


def test_apply_upserts_reports_added_updated_and_unchanged(store: RecordStore) -> None:
    result = store.apply_upserts(
        [
            make_record("2", city="Brossard", sector="Rive Sud"),
            make_record("1", city="Laval", sector="Laval", district="Sainte-Dorothée"),
            make_record("4", city="Blainville", sector="Rive Nord"),
        ]
    )

    assert result.unchanged == ["2"]
    assert result.updated == ["1"]
    assert result.added == ["4"]
    assert result.applied == ["4", "1"]
    assert store.hierarchy is not None
    assert store.hierarchy.location_of("1") == LeafPath("Laval", district="Sainte-Dorothée")
    assert store.watermark == "2024-05-01T10:00:01.000Z"


def test_apply_upserts_last_occurrence_in_batch_wins(store: RecordStore) -> None:
    store.apply_upserts(
        [
            make_record("5", city="Brossard", sector="Rive Sud"),
            make_record("5", city="Candiac", sector="Rive Sud"),
        ]
    )

    record = store.get("5")
    assert record is not None
    assert record.city == "Candiac"
    assert store.hierarchy is not None
    assert store.hierarchy.total() == 4


def test_apply_upserts_reports_every_input_record(store: RecordStore) -> None:
    seen: list[str] = []

    result = store.apply_upserts(
        [
            make_record("1", city="Laval", sector="Laval", district="Chomedey"),
            make_record("4", city="Longueuil", sector="Rive Sud"),
        ],
        on_item=seen.append,
    )

    assert seen == ["1", "4"]
    assert result.unchanged == ["1"]
    assert result.applied == ["4"]


def test_prune_deleted_removes_absent_ids_and_is_idempotent(store: RecordStore) -> None:
    removed = store.prune_deleted({"1", "3"})
    again = store.prune_deleted({"1", "3"})

    assert removed == ["2"]
    assert again == []
    assert store.ids() == {"1", "3"}
    assert store.hierarchy is not None
    assert store.hierarchy.sector("Rive Sud") is None


@pytest.mark.parametrize("authoritative", [None, set()])
def test_prune_deleted_refuses_empty_or_missing_id_set(
    store: RecordStore, authoritative: set[str] | None, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING):
        removed = store.prune_deleted(authoritative)

    assert removed == []
    assert store.size() == 3
    assert "Refusing to prune" in caplog.text


def test_remove_ignores_unknown_ids(store: RecordStore) -> None:
    assert store.remove(["2", "missing", "2"]) == ["2"]
    assert "2" not in store


def test_attach_rebuilds_late_projection(store: RecordStore) -> None:
    late = HierarchicalIndex()
    store.attach(late)

    assert late.total() == 3


def test_project_returns_records_by_city(store: RecordStore) -> None:
    projected = store.project()

    assert [record.id for record in projected["Brossard"]] == ["2"]
    assert [record.id for record in projected["Laval"]] == ["1"]


def test_project_without_hierarchy_groups_by_record_city() -> None:
    store = RecordStore()
    store.bootstrap([make_record("1", city="Brossard"), make_record("2", city="Brossard")], None)

    assert [record.id for record in store.project()["Brossard"]] == ["1", "2"]
