"""City name to sector tag classification.

The server computes the authoritative tag; this copy is only used when a record
arrives without one, so the lists and the resolution order must stay identical
to the server's.
"""

from __future__ import annotations

import re

from clientsync.core.contracts.record import Record, SectorTag

RIVE_NORD_CITIES: tuple[str, ...] = (
    "terrebonne",
    "blainville",
    "repentigny",
    "st-eustache",
    "saint-eustache",
    "mirabel",
    "mascouche",
    "st-jérôme",
    "saint-jérôme",
    "rosemère",
    "rosemere",
    "l'assomption",
    "lassomption",
    "lorraine",
    "bois-des-filion",
    "bois des filion",
    "st-joseph-du-lac",
    "saint-joseph-du-lac",
    "st-lin--laurentides",
    "saint-lin--laurentides",
    "ste-thérèse",
    "sainte-thérèse",
    "oka",
    "prévost",
    "prevost",
    "ste-marthe-sur-le-lac",
    "sainte-marthe-sur-le-lac",
    "lanoraie",
    "saint-sauveur",
    "st-sauveur",
    "boisbriand",
    "bois-briand",
    "brownsburg-chatham",
    "brownsburg chatham",
    "brownsburg",
    "charlemagne",
    "lavaltrie",
)

RIVE_SUD_CITIES: tuple[str, ...] = (
    "longueuil",
    "brossard",
    "candiac",
    "st-constant",
    "saint-constant",
    "châteauguay",
    "chateauguay",
    "mercier",
    "vaudreuil-dorion",
    "vaudreuil dorion",
    "sorel-tracy",
    "sorel tracy",
    "saint-rémi",
    "st-rémi",
    "saint remi",
    "st remi",
)

_SEPARATORS = re.compile(r"[-\s]")


def _squash(value: str) -> str:
    return _SEPARATORS.sub("", value)


def _matches_any(city: str, candidates: tuple[str, ...]) -> bool:
    if not city:
        return False
    squashed = _squash(city)
    for candidate in candidates:
        if candidate in city:
            return True
    # Second pass ignores hyphen/space differences ("St Eustache" vs "st-eustache").
    return any(_squash(candidate) in squashed for candidate in candidates)


def classify(city_name: str) -> SectorTag:
    city = city_name.lower().strip()
    if city in {"montréal", "montreal"}:
        return SectorTag.MONTREAL
    if city == "laval":
        return SectorTag.LAVAL
    if _matches_any(city, RIVE_NORD_CITIES):
        return SectorTag.RIVE_NORD
    if _matches_any(city, RIVE_SUD_CITIES):
        return SectorTag.RIVE_SUD
    return SectorTag.OTHER


def sector_for(record: Record) -> str:
    """Server-supplied sector when present, local classification otherwise."""
    if record.sector:
        return record.sector
    return classify(record.city).value
