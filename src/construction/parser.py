"""
Parser Module - Raw save snapshot -> Board.

The snapshot carries up to four optional fields, each either already
decoded or embedded as a JSON string:
    CogM: sparse cog catalogue keyed by position
    GemItemsPurchased: flat purchased-upgrades list
    FlagP: flagged board positions
    FlagU: per-position unlock codes

Malformed or missing fields degrade to empty/zero; parsing never raises.
"""

import json
import logging
import math
from typing import Any, Dict, List, Optional, Union

from .board import Board
from .cog import BoostRadius, Cog

logger = logging.getLogger(__name__)

# Index of the flaggy shop upgrade counter in GemItemsPurchased
FLAGGY_UPGRADE_INDEX = 118

# FlagU code of an unlocked, empty-able position
AVAILABLE_SLOT_CODE = -11

# CogM field codes -> Cog attributes
COG_FIELDS = {
    "a": "build_rate",
    "b": "exp_gain",
    "c": "flaggy",
    "d": "exp_bonus",
    "e": "build_radius_boost",
    "f": "exp_radius_boost",
    "g": "flaggy_radius_boost",
    "j": "flag_boost",
}
PATTERN_FIELD = "h"

# Pattern that marks a cog as immovable
FIXED_PATTERN = BoostRadius.EVERYTHING


def _is_number(value: Any) -> bool:
    """True for finite ints and floats, bools excluded."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int beyond float range
        return False


def _number(value: Any) -> float:
    """Numeric field value, anything else (NaN and infinities too) counts as 0."""
    if not _is_number(value):
        return 0.0
    return float(value)


def _decode(value: Any, expected: type) -> Optional[Any]:
    """
    Decode a field that may be embedded as a JSON string.

    Args:
        value: Raw field value
        expected: dict or list

    Returns:
        Decoded value of the expected type, or None
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except (json.JSONDecodeError, ValueError) as e:
            logger.debug(f"Failed to decode embedded field: {e}")
            return None
    if isinstance(value, expected):
        return value
    return None


def extract_cogs(data: Dict[str, Any]) -> Dict[int, Cog]:
    """
    Decode the sparse cog catalogue.

    Args:
        data: Snapshot fields

    Returns:
        Position -> Cog, empty if missing or malformed
    """
    catalogue = _decode(data.get("CogM"), dict)
    if catalogue is None:
        return {}

    cogs: Dict[int, Cog] = {}
    for raw_key, raw_cog in catalogue.items():
        try:
            key = int(raw_key)
        except (TypeError, ValueError):
            logger.debug(f"Skipping cog with non-numeric key {raw_key!r}")
            continue
        if key < 0 or not isinstance(raw_cog, dict):
            logger.debug(f"Skipping malformed cog at {raw_key!r}")
            continue

        attrs = {name: _number(raw_cog.get(code)) for code, name in COG_FIELDS.items()}
        pattern = BoostRadius.parse(raw_cog.get(PATTERN_FIELD))

        cogs[key] = Cog(
            key=key,
            is_player=attrs["exp_gain"] > 0,
            boost_radius=pattern,
            fixed=pattern is FIXED_PATTERN,
            origin=key,
            **attrs,
        )

    return cogs


def extract_flaggy_shop_upgrades(data: Dict[str, Any],
                                 index: int = FLAGGY_UPGRADE_INDEX) -> int:
    """Flaggy upgrade counter from the purchased-upgrades list, default 0."""
    purchased = _decode(data.get("GemItemsPurchased"), list)
    if purchased is None or len(purchased) <= index:
        return 0

    value = purchased[index]
    if not _is_number(value):
        return 0
    return int(value)


def extract_flag_positions(data: Dict[str, Any]) -> List[int]:
    """Flagged positions, negatives and non-integers dropped."""
    flags = _decode(data.get("FlagP"), list)
    if flags is None:
        return []
    return [int(v) for v in flags if _is_number(v) and v >= 0]


def extract_slots(data: Dict[str, Any], flag_positions: List[int]) -> Dict[int, Cog]:
    """
    Synthesize a slot marker for every position in the unlock table.

    Flagged positions with a positive code and any position whose code
    is not the available sentinel become fixed and blocked.
    """
    codes = _decode(data.get("FlagU"), list)
    if codes is None:
        return {}

    flagged = set(flag_positions)
    slots: Dict[int, Cog] = {}
    for i, code in enumerate(codes):
        code = _number(code)
        if code > 0 and i in flagged:
            slots[i] = Cog.slot(i, fixed=True, is_flag=True)
        elif code != AVAILABLE_SLOT_CODE:
            slots[i] = Cog.slot(i, fixed=True)
        else:
            slots[i] = Cog.slot(i)
    return slots


def parse_construction(raw: Union[str, Dict[str, Any], None],
                       flaggy_upgrade_index: int = FLAGGY_UPGRADE_INDEX) -> Board:
    """
    Build a Board from a raw snapshot.

    Args:
        raw: Snapshot dict or JSON string; fields may sit under "data"
        flaggy_upgrade_index: Index of the flaggy upgrade counter

    Returns:
        Board with its initial score computed
    """
    data = _decode(raw, dict) if raw is not None else None
    if data is None:
        logger.warning("Snapshot is not a JSON object, using an empty board")
        data = {}
    if isinstance(data.get("data"), dict):
        data = data["data"]

    cogs = extract_cogs(data)
    flaggy_shop_upgrades = extract_flaggy_shop_upgrades(data, flaggy_upgrade_index)
    flag_positions = extract_flag_positions(data)
    slots = extract_slots(data, flag_positions)

    available_slot_keys = [key for key, slot in slots.items() if not slot.fixed]

    board = Board(
        cogs=cogs,
        slots=slots,
        flag_positions=flag_positions,
        flaggy_shop_upgrades=flaggy_shop_upgrades,
        available_slot_keys=available_slot_keys,
    )

    score = board.score
    logger.info(
        f"Parsed board: {len(cogs)} cogs, {len(slots)} slots, "
        f"{len(available_slot_keys)} available, {len(flag_positions)} flags, "
        f"{flaggy_shop_upgrades} flaggy upgrades"
    )
    if score is not None:
        logger.debug(f"Initial score: {score}")

    return board
