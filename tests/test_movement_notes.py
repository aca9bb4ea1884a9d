from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.core.forecasting.domain import MovementSemantics, MovementType
from app.core.forecasting.notes import build_movement_record, decode_note


@pytest.mark.parametrize("note", [None, "", "Vente au comptoir", "Restock from supplier"])
def test_plain_notes_are_standard_deltas(note):
    assert decode_note(note) == (MovementSemantics.STANDARD_DELTA, None)


@pytest.mark.parametrize(
    "note",
    [
        "Création du nouveau produit",
        "Stock initial - création du nouveau produit TSHIRT-01",
        "Product created from import",
    ],
)
def test_creation_marker_is_detected(note):
    assert decode_note(note) == (MovementSemantics.EXPLICIT_CREATION, None)


@pytest.mark.parametrize(
    "note, expected",
    [
        ("Modification manuelle du stock: 75 → 50", 50.0),
        ("Stock 12->30", 30.0),
        ("ajustement 10,5 → 7,25", 7.25),
    ],
)
def test_override_pair_sets_target(note, expected):
    semantics, target = decode_note(note)
    assert semantics is MovementSemantics.EXPLICIT_OVERRIDE
    assert target == pytest.approx(expected)


@pytest.mark.parametrize("note", ["Modification manuelle: 75 → ?", "→", "old -> new"])
def test_malformed_override_falls_back_to_delta(note):
    assert decode_note(note) == (MovementSemantics.STANDARD_DELTA, None)


def test_creation_takes_precedence_over_arrow_pair():
    semantics, target = decode_note("Création du nouveau produit (0 → 40)")
    assert semantics is MovementSemantics.EXPLICIT_CREATION
    assert target is None


def test_build_movement_record_decodes_once():
    ts = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)
    record = build_movement_record(
        product_id=7,
        movement_type="MANUAL_WITHDRAWAL",
        quantity=-25,
        timestamp=ts,
        note="Correction 75 → 50",
    )

    assert record.movement_type is MovementType.MANUAL_WITHDRAWAL
    assert record.quantity == 25
    assert record.semantics is MovementSemantics.EXPLICIT_OVERRIDE
    assert record.override_target == 50.0


def test_unknown_movement_type_is_rejected():
    with pytest.raises(ValueError):
        build_movement_record(
            product_id=1,
            movement_type="TRANSFER",
            quantity=1,
            timestamp=datetime(2025, 3, 1, tzinfo=timezone.utc),
        )
