from __future__ import annotations

from clientsync.core.index import UNKNOWN_CITY, HierarchicalIndex, LeafPath, path_for
from tests.fakes.server import make_record


def _leaf_sum(index: HierarchicalIndex) -> int:
    return sum(len(ids) for _, ids in index.leaves())


def _assert_consistent(index: HierarchicalIndex) -> None:
    seen: list[str] = [record_id for _, ids in index.leaves() for record_id in ids]
    assert len(seen) == len(set(seen)), "record id placed in more than one leaf"
    assert _leaf_sum(index) == index.total() == len(index)
    for path, ids in index.leaves():
        for record_id in ids:
            assert index.location_of(record_id) == path
    for view in index.ordered():
        nested = sum(d.count for d in view.districts) + sum(c.count for c in view.cities)
        assert view.count == len(view.unassigned) + nested
        for city in view.cities:
            assert city.count == len(city.record_ids) + sum(d.count for d in city.districts)


def test_path_for_district_sector_has_no_city() -> None:
    record = make_record("1", city="Montréal", sector="Montréal", district="Plateau")
    assert path_for(record) == LeafPath(sector="Montréal", district="Plateau")


def test_path_for_other_sector_uses_city_or_placeholder() -> None:
    assert path_for(make_record("1", city=" Brossard ", sector="Rive Sud")) == LeafPath("Rive Sud", "Brossard")
    assert path_for(make_record("2", city="", sector="Autres")) == LeafPath("Autres", UNKNOWN_CITY)


def test_path_for_classifies_when_sector_missing() -> None:
    assert path_for(make_record("1", city="Terrebonne")).sector == "Rive Nord"


def test_rebuild_places_every_record_once() -> None:
    index = HierarchicalIndex()
    index.rebuild(
        [
            make_record("m1", city="Montréal", sector="Montréal", district="Plateau"),
            make_record("m2", city="Montréal", sector="Montréal", district="Plateau"),
            make_record("m3", city="Montréal", sector="Montréal"),
            make_record("l1", city="Laval", sector="Laval", district="Chomedey"),
            make_record("s1", city="Brossard", sector="Rive Sud"),
            make_record("s2", city="Longueuil", sector="Rive Sud", district="Vieux-Longueuil"),
            make_record("u1", city="", sector="Non assignés"),
        ]
    )

    _assert_consistent(index)
    montreal = index.sector("Montréal")
    assert montreal is not None
    assert montreal.count == 3
    assert montreal.unassigned == ["m3"]
    assert montreal.districts["Plateau"] == ["m1", "m2"]
    assert index.sector_counts() == {"Montréal": 3, "Laval": 1, "Rive Sud": 2, "Non assignés": 1}


def test_rebuild_ignores_duplicate_ids() -> None:
    index = HierarchicalIndex()
    index.rebuild(
        [
            make_record("1", city="Laval", sector="Laval", district="Chomedey"),
            make_record("1", city="Laval", sector="Laval", district="Vimont"),
        ]
    )

    assert index.location_of("1") == LeafPath("Laval", district="Chomedey")
    _assert_consistent(index)


def test_upsert_relocates_between_districts_and_drops_empty_leaf() -> None:
    index = HierarchicalIndex()
    index.rebuild(
        [
            make_record("1", city="Laval", sector="Laval", district="Chomedey"),
            make_record("2", city="Laval", sector="Laval", district="Vimont"),
        ]
    )

    index.upsert([make_record("1", city="Laval", sector="Laval", district="Sainte-Dorothée")])

    laval = index.sector("Laval")
    assert laval is not None
    assert "Chomedey" not in laval.districts
    assert laval.districts["Sainte-Dorothée"] == ["1"]
    assert laval.count == 2
    _assert_consistent(index)


def test_upsert_moves_record_across_sectors() -> None:
    index = HierarchicalIndex()
    index.rebuild(
        [make_record("1", city="Brossard", sector="Rive Sud"), make_record("2", city="Laval", sector="Laval")]
    )

    index.upsert([make_record("1", city="Blainville", sector="Rive Nord")])

    assert index.sector("Rive Sud") is None
    assert index.location_of("1") == LeafPath("Rive Nord", "Blainville")
    _assert_consistent(index)


def test_upsert_same_location_is_stable() -> None:
    index = HierarchicalIndex()
    record = make_record("1", city="Brossard", sector="Rive Sud")
    index.rebuild([record])

    index.upsert([record])

    assert index.leaf(LeafPath("Rive Sud", "Brossard")) == ["1"]
    _assert_consistent(index)


def test_remove_prunes_empty_nodes_and_ignores_unknown_ids() -> None:
    index = HierarchicalIndex()
    index.rebuild(
        [
            make_record("1", city="Brossard", sector="Rive Sud", district="Centre"),
            make_record("2", city="Laval", sector="Laval"),
        ]
    )

    index.remove(["1", "missing"])

    assert index.sector("Rive Sud") is None
    assert index.total() == 1
    _assert_consistent(index)


def test_ordered_sorts_by_count_with_unassigned_last() -> None:
    index = HierarchicalIndex()
    records = [make_record(f"u{i}", city="", sector="Non assignés") for i in range(5)]
    records += [make_record(f"s{i}", city="Brossard", sector="Rive Sud") for i in range(2)]
    records += [make_record(f"n{i}", city="Blainville", sector="Rive Nord") for i in range(2)]
    records += [make_record(f"n{i + 2}", city="Mirabel", sector="Rive Nord") for i in range(3)]
    index.rebuild(records)

    ordered = index.ordered()

    assert [view.name for view in ordered] == ["Rive Nord", "Rive Sud", "Non assignés"]
    assert [city.name for city in ordered[0].cities] == ["Mirabel", "Blainville"]
    assert ordered[0].count == 5


def test_ordered_breaks_count_ties_by_name() -> None:
    index = HierarchicalIndex()
    index.rebuild(
        [
            make_record("1", city="Montréal", sector="Montréal", district="Verdun"),
            make_record("2", city="Montréal", sector="Montréal", district="Anjou"),
        ]
    )

    districts = index.ordered()[0].districts

    assert [bucket.name for bucket in districts] == ["Anjou", "Verdun"]


def test_project_flattens_to_city_keys() -> None:
    index = HierarchicalIndex()
    index.rebuild(
        [
            make_record("1", city="Montréal", sector="Montréal", district="Plateau"),
            make_record("2", city="Montréal", sector="Montréal"),
            make_record("3", city="Brossard", sector="Rive Sud"),
        ]
    )

    projected = index.project()

    assert sorted(projected["Montréal"]) == ["1", "2"]
    assert projected["Brossard"] == ["3"]
