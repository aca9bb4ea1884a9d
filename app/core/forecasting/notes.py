"""Decoding of the movement note side-channel.

The inventory application encodes two intents in the free-text note of a
ledger row: the initial stock of a newly created product, and a stock level
typed directly in the management screen ("old → new"). Both are decoded here
exactly once, when a row becomes a MovementRecord.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime

from app.core.forecasting.domain import MovementRecord, MovementSemantics, MovementType


logger = logging.getLogger(__name__)


CREATION_NOTE_MARKERS: tuple[str, ...] = (
    "création du nouveau produit",
    "product created",
)

ARROW_TOKENS: tuple[str, ...] = ("→", "->")

_NUMBER = r"(-?\d+(?:[.,]\d+)?)"
OVERRIDE_PAIR_RE = re.compile(_NUMBER + r"\s*(?:→|->)\s*" + _NUMBER)


def _parse_number(raw: str) -> float:
    return float(raw.replace(",", "."))


def decode_note(note: str | None) -> tuple[MovementSemantics, float | None]:
    """Return the replay semantics encoded in a note and the override target, if any.

    A note carrying an arrow that cannot be parsed as a numeric pair falls back
    to STANDARD_DELTA.
    """

    if not note:
        return MovementSemantics.STANDARD_DELTA, None

    lowered = note.lower()
    if any(marker in lowered for marker in CREATION_NOTE_MARKERS):
        return MovementSemantics.EXPLICIT_CREATION, None

    if not any(token in note for token in ARROW_TOKENS):
        return MovementSemantics.STANDARD_DELTA, None

    match = OVERRIDE_PAIR_RE.search(note)
    if match is None:
        logger.debug("Unparsable override note %r, applying movement as a delta", note)
        return MovementSemantics.STANDARD_DELTA, None

    return MovementSemantics.EXPLICIT_OVERRIDE, _parse_number(match.group(2))


def build_movement_record(
    product_id: int | None,
    movement_type: MovementType | str,
    quantity: float,
    timestamp: datetime,
    note: str | None = None,
) -> MovementRecord:
    semantics, override_target = decode_note(note)
    return MovementRecord(
        product_id=product_id,
        movement_type=MovementType(movement_type),
        quantity=abs(float(quantity)),
        timestamp=timestamp,
        note=note,
        semantics=semantics,
        override_target=override_target,
    )
