"""Unit tests for defeat evaluation."""

from __future__ import annotations

from imperium.domain.defeat import abandon, evaluate_defeat, mark_defeat
from imperium.domain.empire import create_empire
from imperium.domain.enums import DefeatReason, Race
from imperium.domain.models import Empire


def _empire(**fields) -> Empire:
    empire = create_empire(1, "Doomed", Race.HUMAN)
    for name, value in fields.items():
        setattr(empire, name, value)
    return empire


def test_healthy_empire_is_not_defeated():
    assert evaluate_defeat(_empire()) is None


def test_no_land():
    assert evaluate_defeat(_empire(land=0)) == DefeatReason.NO_LAND


def test_no_peasants():
    assert evaluate_defeat(_empire(peasants=0)) == DefeatReason.NO_PEASANTS


def test_excessive_loan():
    empire = _empire()
    empire.loan = empire.networth * 100 + 1
    assert evaluate_defeat(empire) == DefeatReason.EXCESSIVE_LOAN


def test_loan_at_the_limit_is_allowed():
    empire = _empire()
    empire.loan = empire.networth * 100
    assert evaluate_defeat(empire) is None


def test_land_takes_priority():
    empire = _empire(land=0, peasants=0)
    assert evaluate_defeat(empire) == DefeatReason.NO_LAND


def test_mark_defeat_records_first_reason():
    empire = _empire(peasants=0)
    assert mark_defeat(empire) == DefeatReason.NO_PEASANTS
    empire.land = 0
    assert mark_defeat(empire) == DefeatReason.NO_PEASANTS
    assert empire.defeat == DefeatReason.NO_PEASANTS


def test_abandon_returns_a_marked_copy():
    empire = _empire()
    abandoned = abandon(empire)
    assert abandoned.defeat == DefeatReason.ABANDONED
    assert empire.defeat is None


def test_abandon_keeps_an_earlier_defeat():
    empire = _empire(defeat=DefeatReason.NO_LAND)
    assert abandon(empire).defeat == DefeatReason.NO_LAND
