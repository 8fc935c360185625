"""Raum-Normalisierung und -Suche über Freitext-Raumnamen.

Allokationen referenzieren Räume meist über den Anzeigenamen ("R-44",
"Room 4a", "b 14"). Diese Hilfsfunktionen bilden solche Schreibweisen
auf die Room-Stammdaten ab.
"""

import re
from typing import Literal, Optional

from pydantic import BaseModel

from models.room import Room

MatchType = Literal["exact", "normalized", "variation", "not_found"]


class RoomLookupResult(BaseModel):
    """Ergebnis einer einzelnen Raumsuche."""

    success: bool
    original_name: str
    room_id: Optional[str] = None
    room: Optional[Room] = None
    normalized_name: Optional[str] = None
    error: Optional[str] = None
    match_type: MatchType = "not_found"


class RoomValidationResult(BaseModel):
    """Ergebnis der Prüfung einer Liste benötigter Räume."""

    found: list[RoomLookupResult]
    missing: list[RoomLookupResult]

    @property
    def success(self) -> bool:
        return not self.missing


def normalize_room_name(room_name: Optional[str]) -> str:
    """Normalisiert einen Raumnamen für den Vergleich.

    "Room 4a" → "4A", "room B-12" → "B12", "  R-6  " → "R6", "b 14" → "B14".
    """
    if not room_name or not isinstance(room_name, str):
        return ""
    normalized = room_name.strip()
    normalized = re.sub(r"^room\s*", "", normalized, flags=re.IGNORECASE)
    normalized = re.sub(r"[^\w\s]", "", normalized)
    normalized = re.sub(r"\s+", "", normalized)
    return normalized.upper()


def build_room_lookup_map(rooms: list[Room]) -> dict[str, Room]:
    """Baut eine Suchtabelle (kleingeschrieben) über Name, normierten Namen und ID."""
    lookup: dict[str, Room] = {}
    for room in rooms:
        lookup[room.name.lower()] = room
        normalized = normalize_room_name(room.name)
        if normalized:
            lookup.setdefault(normalized.lower(), room)
        lookup[room.id.lower()] = room
        _add_alternative_mappings(room, lookup)
    return lookup


def _add_alternative_mappings(room: Room, lookup: dict[str, Room]) -> None:
    """Gängige Schreibvarianten ("R-6" ↔ "R6", "B12" ↔ "B-12", "62" ↔ "Room 62")."""
    name = room.name
    if re.fullmatch(r"R-\d+", name, flags=re.IGNORECASE):
        number = name[2:]
        lookup.setdefault(f"r{number}", room)
        lookup.setdefault(f"r {number}", room)
    if re.fullmatch(r"B\d+", name, flags=re.IGNORECASE):
        number = name[1:]
        lookup.setdefault(f"b-{number}", room)
        lookup.setdefault(f"b {number}", room)
    if re.fullmatch(r"\d+", name):
        lookup.setdefault(f"room{name}", room)
        lookup.setdefault(f"room {name}", room)


def _name_variations(room_name: str) -> list[str]:
    variations: list[str] = []
    normalized = normalize_room_name(room_name)

    alnum = re.fullmatch(r"(\d+)([a-zA-Z]+)", room_name)
    if alnum:
        number, letter = alnum.groups()
        variations += [
            f"{number}{letter.upper()}",
            f"R{number}{letter.upper()}",
            f"ROOM-{number}{letter.upper()}",
        ]
    if re.fullmatch(r"\d+", normalized):
        variations += [f"R{normalized}", f"R-{normalized}", f"BS-{normalized}"]
    if re.fullmatch(r"B\d+", normalized):
        variations += [f"B-{normalized[1:]}"]

    # Reihenfolge erhalten, Duplikate entfernen
    return list(dict.fromkeys(v for v in variations if v))


def lookup_room(room_name: Optional[str], lookup: dict[str, Room]) -> RoomLookupResult:
    """Sucht einen Raum: exakt → normiert → Schreibvarianten."""
    original = room_name or ""
    trimmed = original.strip()
    if not trimmed:
        return RoomLookupResult(
            success=False, original_name=original, error="Leerer Raumname."
        )

    room = lookup.get(trimmed.lower())
    if room:
        return RoomLookupResult(
            success=True, original_name=original, room_id=room.id, room=room,
            normalized_name=trimmed, match_type="exact",
        )

    normalized = normalize_room_name(trimmed)
    room = lookup.get(normalized.lower()) if normalized else None
    if room:
        return RoomLookupResult(
            success=True, original_name=original, room_id=room.id, room=room,
            normalized_name=normalized, match_type="normalized",
        )

    variations = _name_variations(trimmed)
    for variation in variations:
        room = lookup.get(variation.lower())
        if room:
            return RoomLookupResult(
                success=True, original_name=original, room_id=room.id, room=room,
                normalized_name=variation, match_type="variation",
            )

    searched = ", ".join(dict.fromkeys(v for v in [trimmed, normalized, *variations] if v))
    return RoomLookupResult(
        success=False,
        original_name=original,
        normalized_name=normalized or trimmed,
        error=f"Raum '{original}' nicht gefunden. Gesucht: {searched}",
    )


def validate_required_rooms(required: list[str], rooms: list[Room]) -> RoomValidationResult:
    """Prüft, ob alle benötigten Räume in den Stammdaten auffindbar sind."""
    lookup = build_room_lookup_map(rooms)
    found: list[RoomLookupResult] = []
    missing: list[RoomLookupResult] = []
    for name in required:
        result = lookup_room(name, lookup)
        (found if result.success else missing).append(result)
    return RoomValidationResult(found=found, missing=missing)
