"""Unit tests for the shop-phase draft."""

from __future__ import annotations

import math

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from imperium.domain import draft
from imperium.domain.catalog import ADVISORS, ADVISORS_BY_ID
from imperium.domain.draft import DraftOption
from imperium.domain.empire import create_empire, land_is_balanced
from imperium.domain.enums import (
    DefeatReason,
    DraftKind,
    Era,
    MasteryAction,
    Policy,
    Race,
    Rarity,
)
from imperium.domain.errors import ErrorKind
from imperium.domain.models import Empire


def _empire(**fields) -> Empire:
    empire = create_empire(1, "Drafter", Race.HUMAN)
    for name, value in fields.items():
        setattr(empire, name, value)
    return empire


def _edict(edict_id: str) -> DraftOption:
    return DraftOption(DraftKind.EDICT, edict_id, edict_id, Rarity.COMMON)


def _advisor(advisor_id: str) -> DraftOption:
    advisor = ADVISORS_BY_ID[advisor_id]
    return DraftOption(DraftKind.ADVISOR, advisor.id, advisor.name, advisor.rarity)


class TestGeneration:
    def test_same_seed_same_options(self):
        empire = _empire()
        assert draft.generate_draft_options(empire, "1:2:draft") == (
            draft.generate_draft_options(empire, "1:2:draft")
        )

    @given(seed=st.text(min_size=1, max_size=20))
    @settings(max_examples=50, deadline=None)
    def test_option_counts(self, seed):
        options = draft.generate_draft_options(_empire(), seed)
        advisors = [option for option in options if option.kind == DraftKind.ADVISOR]
        others = [option for option in options if option.kind != DraftKind.ADVISOR]
        assert len(advisors) <= 2
        assert 2 <= len(others) <= 3
        assert len({option.item_id for option in advisors}) == len(advisors)

    @given(seed=st.text(min_size=1, max_size=20))
    @settings(max_examples=30, deadline=None)
    def test_owned_advisors_are_never_offered(self, seed):
        common = [advisor for advisor in ADVISORS if advisor.rarity != Rarity.RARE]
        empire = _empire(advisors=common)
        options = draft.generate_draft_options(empire, seed)
        owned = {advisor.id for advisor in empire.advisors}
        assert not owned & {o.item_id for o in options if o.kind == DraftKind.ADVISOR}

    def test_future_empires_are_not_offered_era_skip(self):
        empire = _empire(era=Era.FUTURE)
        for index in range(30):
            options = draft.generate_draft_options(empire, f"seed-{index}")
            assert "era_skip" not in {option.item_id for option in options}


class TestSelection:
    def test_hire_advisor(self):
        outcome = draft.apply_draft_selection(_empire(), _advisor("warmaster"))
        assert outcome.success
        assert [advisor.id for advisor in outcome.empire.advisors] == ["warmaster"]

    def test_advisor_already_employed(self):
        empire = _empire(advisors=[ADVISORS_BY_ID["warmaster"]])
        outcome = draft.apply_draft_selection(empire, _advisor("warmaster"))
        assert outcome.error.reason == "Warmaster is already employed"

    def test_advisor_slots_are_limited(self):
        hired = [ADVISORS_BY_ID[name] for name in ("warmaster", "warmonger", "archmage")]
        outcome = draft.apply_draft_selection(_empire(advisors=hired), _advisor("conqueror"))
        assert outcome.error.kind == ErrorKind.RULE_GATE
        assert outcome.error.reason == "Cannot have more than 3 advisors. Dismiss one first."

    def test_bonus_slots_raise_the_limit(self):
        hired = [ADVISORS_BY_ID[name] for name in ("warmaster", "warmonger", "archmage")]
        empire = _empire(advisors=hired, advisor_bonus_slots=1)
        assert draft.apply_draft_selection(empire, _advisor("conqueror")).success

    def test_mastery_levels_up(self):
        option = DraftOption(DraftKind.MASTERY, "farm", "Farming Mastery", Rarity.COMMON, 1)
        outcome = draft.apply_draft_selection(_empire(), option)
        assert outcome.empire.masteries[MasteryAction.FARM] == 1

    def test_mastery_is_capped(self):
        option = DraftOption(DraftKind.MASTERY, "farm", "Farming Mastery", Rarity.COMMON, 6)
        empire = _empire(masteries={MasteryAction.FARM: 5})
        assert draft.apply_draft_selection(empire, option).error.kind == ErrorKind.RULE_GATE

    def test_policy_once(self):
        option = DraftOption(DraftKind.POLICY, "forced_march", "Forced March", Rarity.RARE)
        enacted = draft.apply_draft_selection(_empire(), option).empire
        assert Policy.FORCED_MARCH in enacted.policies
        again = draft.apply_draft_selection(enacted, option)
        assert again.error.reason == "Policy forced_march is already enacted"

    @pytest.mark.parametrize(
        ("edict_id", "field", "expected"),
        [
            ("gold_cache", "gold", 100_000),
            ("food_stores", "food", 20_000),
            ("rune_cache", "runes", 1_000),
            ("healing_wave", "health", 100),
        ],
    )
    def test_resource_edicts(self, edict_id, field, expected):
        outcome = draft.apply_draft_selection(_empire(health=40), _edict(edict_id))
        assert getattr(outcome.empire, field) == expected

    def test_fertile_soil_keeps_land_balanced(self):
        outcome = draft.apply_draft_selection(_empire(), _edict("fertile_soil"))
        assert outcome.empire.land == 2200
        assert land_is_balanced(outcome.empire)

    def test_conscription(self):
        empire = _empire()
        drafted = math.floor(empire.peasants * 0.10)
        outcome = draft.apply_draft_selection(empire, _edict("conscription"))
        assert outcome.empire.peasants == empire.peasants - drafted
        assert outcome.empire.troops.infantry == 100 + drafted

    def test_mass_teleport(self):
        outcome = draft.apply_draft_selection(_empire(), _edict("mass_teleport"))
        troops = outcome.empire.troops
        assert (troops.infantry, troops.cavalry, troops.air, troops.naval) == (600, 520, 510, 505)

    def test_era_skip(self):
        assert draft.apply_draft_selection(_empire(), _edict("era_skip")).empire.era == Era.PRESENT
        future = _empire(era=Era.FUTURE)
        outcome = draft.apply_draft_selection(future, _edict("era_skip"))
        assert outcome.error.reason == "Already in future era"

    def test_plunder_takes_gold_from_the_richest_rival(self):
        poor = create_empire(2, "Poor", Race.HUMAN)
        rich = create_empire(3, "Rich", Race.HUMAN)
        rich.gold = 200_000
        outcome = draft.apply_draft_selection(
            _empire(), _edict("plunder"), rivals=[poor, rich]
        )
        assert outcome.success
        assert outcome.empire.gold == 50_000 + 20_000
        assert outcome.rival.id == 3
        assert outcome.rival.gold == 180_000
        assert rich.gold == 200_000

    def test_plunder_skips_defeated_rivals(self):
        fallen = create_empire(2, "Fallen", Race.HUMAN)
        fallen.gold = 900_000
        fallen.defeat = DefeatReason.NO_LAND
        standing = create_empire(3, "Standing", Race.HUMAN)
        outcome = draft.apply_draft_selection(
            _empire(), _edict("plunder"), rivals=[fallen, standing]
        )
        assert outcome.rival.id == 3
        assert outcome.empire.gold == 50_000 + 5_000

    def test_plunder_without_rivals_changes_nothing(self):
        outcome = draft.apply_draft_selection(_empire(), _edict("plunder"))
        assert outcome.success
        assert outcome.rival is None
        assert outcome.empire.gold == 50_000

    def test_unknown_edict(self):
        outcome = draft.apply_draft_selection(_empire(), _edict("golden_goose"))
        assert outcome.error.kind == ErrorKind.VALIDATION

    def test_defeated_empire_cannot_draft(self):
        empire = _empire(defeat=DefeatReason.NO_LAND)
        outcome = draft.apply_draft_selection(empire, _edict("gold_cache"))
        assert outcome.error.kind == ErrorKind.DEFEATED
        assert outcome.empire is empire


class TestDismissal:
    def test_dismiss_advisor(self):
        empire = _empire(advisors=[ADVISORS_BY_ID["warmaster"]])
        outcome = draft.dismiss_advisor(empire, "warmaster")
        assert outcome.success
        assert outcome.empire.advisors == []
        assert len(empire.advisors) == 1

    def test_dismiss_unknown_advisor(self):
        outcome = draft.dismiss_advisor(_empire(), "warmaster")
        assert outcome.error.reason == "Advisor not found"


class TestRerolls:
    def test_reroll_costs_a_fifth_of_gold(self):
        assert draft.reroll_cost(_empire(gold=12_345)) == 2_469

    def test_reroll_pays_and_draws(self):
        outcome, options = draft.reroll_draft(_empire(), "1:1:draft", 0)
        assert outcome.success
        assert outcome.gold_change == -10_000
        assert outcome.empire.gold == 40_000
        assert options
        assert options == draft.generate_draft_options(outcome.empire, "1:1:draft:reroll:1")

    def test_reroll_limit(self):
        outcome, options = draft.reroll_draft(_empire(), "1:1:draft", 2)
        assert not outcome.success
        assert outcome.error.reason == "No rerolls left (2 per draft)"
        assert options == []
