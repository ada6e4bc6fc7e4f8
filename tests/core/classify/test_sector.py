from __future__ import annotations

import pytest

from clientsync.core.classify import RIVE_NORD_CITIES, RIVE_SUD_CITIES, classify, sector_for
from clientsync.core.contracts.record import Record, SectorTag


@pytest.mark.parametrize(
    ("city", "expected"),
    [
        ("Montréal", SectorTag.MONTREAL),
        ("montreal", SectorTag.MONTREAL),
        ("  MONTRÉAL  ", SectorTag.MONTREAL),
        ("Laval", SectorTag.LAVAL),
        ("Saint-Eustache", SectorTag.RIVE_NORD),
        ("St Eustache", SectorTag.RIVE_NORD),
        ("Terrebonne", SectorTag.RIVE_NORD),
        ("Brossard", SectorTag.RIVE_SUD),
        ("Saint Remi", SectorTag.RIVE_SUD),
        ("Vaudreuil Dorion", SectorTag.RIVE_SUD),
        ("Québec", SectorTag.OTHER),
        ("Sherbrooke", SectorTag.OTHER),
        ("", SectorTag.OTHER),
    ],
)
def test_classify(city: str, expected: SectorTag) -> None:
    assert classify(city) is expected


def test_exact_match_only_for_montreal_and_laval() -> None:
    assert classify("Montréal-Nord") is SectorTag.OTHER
    # "laval" alone is exact; a longer name containing it falls through to the lists.
    assert classify("Lavaltrie") is SectorTag.RIVE_NORD


def test_every_listed_city_classifies_to_its_own_list() -> None:
    for city in RIVE_NORD_CITIES:
        assert classify(city) is SectorTag.RIVE_NORD, city
    for city in RIVE_SUD_CITIES:
        assert classify(city) is SectorTag.RIVE_SUD, city


def test_rive_nord_checked_before_rive_sud() -> None:
    assert classify("Terrebonne / Longueuil") is SectorTag.RIVE_NORD


def test_agrees_with_server_tags_on_reference_cities() -> None:
    server_tags = {
        "Montréal": "Montréal",
        "Laval": "Laval",
        "Blainville": "Rive Nord",
        "Repentigny": "Rive Nord",
        "Sainte-Thérèse": "Rive Nord",
        "Longueuil": "Rive Sud",
        "Châteauguay": "Rive Sud",
        "Candiac": "Rive Sud",
        "Gatineau": "Autres",
    }
    for city, tag in server_tags.items():
        assert classify(city).value == tag


def test_sector_for_prefers_server_tag() -> None:
    tagged = Record(id="1", city="Brossard", sector="Non assignés")
    untagged = Record(id="2", city="Brossard")

    assert sector_for(tagged) == "Non assignés"
    assert sector_for(untagged) == "Rive Sud"
