"""
Incredicer - Save Codec

Converts between SaveSnapshot and the JSON-compatible document a store
holds, running schema migrations on the way in.

Migrations are stepwise: a document at version N passes through every step
N -> N+1 until it reaches SAVE_VERSION. Documents newer than SAVE_VERSION are
refused rather than guessed at.
"""

import logging
from typing import Any, Callable

from pydantic import ValidationError

from src.persistence.errors import CorruptSaveError, SaveVersionError
from src.persistence.models import SAVE_VERSION, SaveSnapshot

logger = logging.getLogger(__name__)

Document = dict[str, Any]

# Timestamp used when a version 1 save carries none
_EPOCH = "1970-01-01T00:00:00+00:00"


def encode_snapshot(snapshot: SaveSnapshot) -> Document:
    """JSON-compatible document for a snapshot."""
    return snapshot.model_dump(mode="json")


def decode_snapshot(document: Document) -> SaveSnapshot:
    """Migrate and validate a stored document.

    Raises:
        SaveVersionError: If the document is newer than this code
        CorruptSaveError: If the document cannot be read as a snapshot
    """
    migrated = migrate_document(document)
    try:
        return SaveSnapshot.model_validate(migrated)
    except ValidationError as exc:
        raise CorruptSaveError(f"Save data failed validation: {exc}") from exc


def migrate_document(document: Document, target: int = SAVE_VERSION) -> Document:
    """Bring a document up to ``target`` version.

    Raises:
        SaveVersionError: If the document is newer than ``target``
        CorruptSaveError: If the version field is missing or invalid
    """
    version = document.get("save_version")
    if isinstance(version, bool) or not isinstance(version, int) or version < 1:
        raise CorruptSaveError(f"Save data has no valid save_version (got {version!r}).")

    if version > target:
        raise SaveVersionError(version, target)

    migrated = dict(document)
    while version < target:
        step = _MIGRATIONS.get(version)
        if step is None:
            raise CorruptSaveError(f"No migration from save version {version}.")
        logger.info("Migrating save from version %d to %d", version, version + 1)
        migrated = step(migrated)
        version += 1
        migrated["save_version"] = version

    return migrated


def _migrate_v1_to_v2(data: Document) -> Document:
    """Version 1 stored flat currency fields and a list of owned dice.

    Version 2 groups balances, folds the dice list into per-type counts and
    adds Time Shards, the modifier table and the ascension flag. New fields
    take their documented defaults.
    """
    level = data.get("prestige_level", 0)
    return {
        "save_version": 2,
        "timestamp": data.get("timestamp") or _EPOCH,
        "money": {
            "current": data.get("money", 0.0),
            "lifetime": data.get("lifetime_money", 0.0),
        },
        "dark_matter": {
            "current": data.get("dark_matter", 0.0),
            "lifetime": data.get("lifetime_dark_matter", 0.0),
        },
        "time_shards": {"current": 0.0, "lifetime": 0.0},
        "modifiers": {},
        "unlocked_dice_types": data.get("unlocked_dice_types", ["basic"]),
        "owned_counts": _count_owned_dice(data.get("owned_dice")),
        "unlocked_skill_nodes": data.get("unlocked_skill_nodes", []),
        "unlocked_active_skills": data.get("unlocked_active_skills", []),
        "dice_value_upgrade_level": data.get("dice_value_upgrade_level", 0),
        "prestige": {
            "level": level,
            "total_dark_matter_earned": data.get("total_prestige_dark_matter_earned", 0.0),
            "has_ascended": (
                data.get("dark_matter_unlocked") is True
                or (isinstance(level, int) and level > 0)
            ),
        },
    }


def _count_owned_dice(owned_dice: Any) -> dict[str, int]:
    """Per-type counts from a version 1 dice list.

    Entries are either a type name or an object with a ``type`` key.
    """
    if owned_dice is None:
        return {"basic": 1}
    if not isinstance(owned_dice, list):
        raise CorruptSaveError("Save data owned_dice is not a list.")

    counts: dict[str, int] = {}
    for entry in owned_dice:
        dice_type = entry.get("type") if isinstance(entry, dict) else entry
        if not isinstance(dice_type, str):
            raise CorruptSaveError(f"Save data has an unreadable owned die: {entry!r}.")
        counts[dice_type] = counts.get(dice_type, 0) + 1
    return counts


def _migrate_v2_to_v3(data: Document) -> Document:
    """Version 3 adds milestone progress. Nothing has been claimed yet."""
    return {**data, "claimed_milestones": [], "total_rolls": 0}


_MIGRATIONS: dict[int, Callable[[Document], Document]] = {
    1: _migrate_v1_to_v2,
    2: _migrate_v2_to_v3,
}
