"""Unit tests for spell costs, gates and effects."""

from __future__ import annotations

import math
from dataclasses import replace

import pytest
from hypothesis import given
from hypothesis import strategies as st

from imperium.domain import spells
from imperium.domain.catalog import ADVISORS_BY_ID
from imperium.domain.empire import create_empire, land_is_balanced
from imperium.domain.enums import DefeatReason, Era, Race, SpellType, StopReason, TroopType
from imperium.domain.errors import ErrorKind
from imperium.domain.models import Buildings, Empire, GameContext
from imperium.domain.rules_config import DEFAULT_RULES
from imperium.domain.tables import SPELLS

ROUND_TWO = GameContext(game_id=1, current_round=2)


def _empire(empire_id: int = 1, **fields) -> Empire:
    empire = create_empire(empire_id, f"Mage {empire_id}", Race.HUMAN)
    empire.runes = 100_000
    for name, value in fields.items():
        setattr(empire, name, value)
    return empire


def _strong_caster() -> Empire:
    caster = _empire(1)
    caster.troops.wizard = 1_000
    return caster


def _hire(empire: Empire, *advisor_ids: str) -> Empire:
    empire.advisors = [ADVISORS_BY_ID[advisor_id] for advisor_id in advisor_ids]
    return empire


def _wild_context(fizzle_chance: float) -> GameContext:
    rules = replace(
        DEFAULT_RULES, spells=replace(DEFAULT_RULES.spells, wild_fizzle_chance=fizzle_chance)
    )
    return GameContext(game_id=1, current_round=2, rules=rules)


class TestCosts:
    def test_spell_cost_from_land_and_towers(self):
        # (2000 * 0.1 + 100 + 25 * 0.2) * 4.9
        assert spells.spell_cost(_empire(), SpellType.SHIELD) == 1495

    def test_spell_cost_bonus(self):
        empire = _empire(advisors=[ADVISORS_BY_ID["wizard_conclave"]])
        assert spells.spell_cost(empire, SpellType.SHIELD) == math.ceil(305 * 4.9 / 1.2)


class TestGates:
    @pytest.mark.parametrize(
        ("fields", "reason"),
        [
            ({"turns_remaining": 1}, "Not enough turns"),
            ({"health": 19}, "Health too low"),
            ({"runes": 10}, "Not enough runes: shield costs 1,495"),
        ],
    )
    def test_basic_gates(self, fields, reason):
        check = spells.can_cast_spell(_empire(**fields), SpellType.SHIELD, 2)
        assert not check.can_cast
        assert check.reason == reason
        assert check.cost == 1495

    def test_no_wizards(self):
        empire = _empire()
        empire.troops.wizard = 0
        check = spells.can_cast_spell(empire, SpellType.FOOD, 2)
        assert check.reason == "No wizards available"

    @given(
        spell=st.sampled_from(list(SpellType)),
        current_round=st.integers(min_value=1, max_value=10),
    )
    def test_no_spell_without_wizards(self, spell, current_round):
        empire = _empire()
        empire.troops.wizard = 0
        assert not spells.can_cast_spell(empire, spell, current_round).can_cast

    def test_offensive_spells_wait_for_round_two(self):
        check = spells.can_cast_spell(_empire(), SpellType.SPY, 1)
        assert check.reason == "Offensive spells are not allowed in the first round"
        assert spells.can_cast_spell(_empire(), SpellType.SPY, 2).can_cast

    def test_offensive_spell_limit(self):
        empire = _empire(spells_this_round=10)
        check = spells.can_cast_spell(empire, SpellType.BLAST, 3)
        assert check.reason == "Offensive spell limit of 10 per round reached"

    def test_era_change_cooldown_boundary(self):
        empire = _empire(era_changed_round=3)
        assert not spells.can_cast_spell(empire, SpellType.ADVANCE, 3).can_cast
        assert spells.can_cast_spell(empire, SpellType.ADVANCE, 4).can_cast

    def test_cannot_leave_the_era_range(self):
        assert spells.can_cast_spell(_empire(), SpellType.REGRESS, 2).reason == (
            "Already in past era"
        )
        future = _empire(era=Era.FUTURE)
        assert spells.can_cast_spell(future, SpellType.ADVANCE, 2).reason == (
            "Already in future era"
        )


class TestSelfSpells:
    def test_food_spell(self):
        outcome = spells.cast_spell(_empire(), SpellType.FOOD, ROUND_TWO)
        assert outcome.success
        result = outcome.result
        assert result.turns_spent == 2
        assert outcome.empire.turns_remaining == 48
        wizards = outcome.empire.troops.wizard
        assert result.spell.resources_gained == {"food": wizards * 50}
        assert outcome.empire.runes == 100_000 + result.rune_change

    def test_cash_spell(self):
        outcome = spells.cast_spell(_empire(), SpellType.CASH, ROUND_TWO)
        wizards = outcome.empire.troops.wizard
        assert outcome.result.spell.resources_gained == {"gold": wizards * 100}

    def test_shield_and_gate_last_the_current_round(self):
        shielded = spells.cast_spell(_empire(), SpellType.SHIELD, ROUND_TWO).empire
        gated = spells.cast_spell(_empire(), SpellType.GATE, ROUND_TWO).empire
        assert shielded.effects.shield == 2
        assert gated.effects.gate == 2

    def test_advance_changes_era_and_starts_cooldown(self):
        outcome = spells.cast_spell(_empire(), SpellType.ADVANCE, ROUND_TWO)
        assert outcome.empire.era == Era.PRESENT
        assert outcome.empire.era_changed_round == 2
        assert outcome.result.spell.effect_applied == "advanced to present"

    def test_rejection_returns_input(self):
        empire = _empire(runes=0)
        outcome = spells.cast_spell(empire, SpellType.SHIELD, ROUND_TWO)
        assert not outcome.success
        assert outcome.empire is empire
        assert outcome.result.error.kind == ErrorKind.INSUFFICIENT
        assert empire.turns_remaining == 50

    def test_unknown_spell(self):
        outcome = spells.cast_spell(_empire(), "meteor", ROUND_TWO)
        assert outcome.result.error.reason == "Unknown spell 'meteor'"

    def test_stop_inside_spell_turns_rejects_the_cast(self):
        empire = _empire(food=0, buildings=Buildings(freeland=0))
        outcome = spells.cast_spell(empire, SpellType.SHIELD, ROUND_TWO)
        assert not outcome.success
        assert outcome.result.stopped_early == StopReason.FOOD
        assert outcome.empire is empire


class TestOffensiveSpells:
    def test_needs_a_target(self):
        outcome = spells.cast_spell(_empire(), SpellType.BLAST, ROUND_TWO)
        assert outcome.result.error.reason == "Offensive spells need a target"

    def test_cannot_target_self(self):
        empire = _empire()
        outcome = spells.cast_spell(empire, SpellType.BLAST, ROUND_TWO, empire)
        assert outcome.result.error.kind == ErrorKind.VALIDATION

    def test_cannot_target_defeated_empire(self):
        target = _empire(2, defeat=DefeatReason.NO_LAND)
        outcome = spells.cast_spell(_empire(), SpellType.BLAST, ROUND_TWO, target)
        assert outcome.result.error.kind == ErrorKind.RULE_GATE

    def test_spy_reports_intel_without_tallies(self):
        target = _empire(2)
        outcome = spells.cast_spell(_strong_caster(), SpellType.SPY, ROUND_TWO, target)
        intel = outcome.result.spell.intel
        assert outcome.result.spell.success
        assert intel.target_id == 2
        assert intel.round == 2
        assert intel.troops[TroopType.INFANTRY] == 100
        assert outcome.empire.tallies.offense_total == 0

    def test_blast_destroys_troops(self):
        target = _empire(2)
        outcome = spells.cast_spell(_strong_caster(), SpellType.BLAST, ROUND_TWO, target)
        destroyed = outcome.result.spell.troops_destroyed
        assert destroyed[TroopType.INFANTRY] == 3
        assert outcome.target.troops.infantry == 97
        assert target.troops.infantry == 100
        assert outcome.empire.tallies.offense_won == 1
        assert outcome.target.tallies.defense_total == 1

    def test_shield_softens_blast(self):
        target = _empire(2)
        target.effects.shield = 2
        outcome = spells.cast_spell(_strong_caster(), SpellType.BLAST, ROUND_TWO, target)
        assert outcome.result.spell.troops_destroyed[TroopType.INFANTRY] == 1

    def test_storm_destroys_food_and_gold(self):
        target = _empire(2)
        outcome = spells.cast_spell(_strong_caster(), SpellType.STORM, ROUND_TWO, target)
        result = outcome.result.spell
        assert result.food_destroyed == math.ceil(10_000 * DEFAULT_RULES.spells.storm_food_rate)
        assert result.gold_destroyed == math.ceil(50_000 * DEFAULT_RULES.spells.storm_gold_rate)

    def test_steal_moves_gold(self):
        caster = _strong_caster()
        target = _empire(2)
        outcome = spells.cast_spell(caster, SpellType.STEAL, ROUND_TWO, target)
        stolen = outcome.result.spell.gold_stolen
        assert 5_000 <= stolen <= 7_500
        assert outcome.target.gold == 50_000 - stolen

    def test_fight_moves_land_and_keeps_it_balanced(self):
        target = _empire(2)
        outcome = spells.cast_spell(_strong_caster(), SpellType.FIGHT, ROUND_TWO, target)
        gained = outcome.result.spell.land_gained
        assert gained > 0
        assert outcome.target.land == 2000 - gained
        assert land_is_balanced(outcome.empire)
        assert land_is_balanced(outcome.target)

    def test_failed_spell_costs_wizards(self):
        caster = _empire(1)
        caster.troops.wizard = 1
        target = _empire(2)
        target.troops.wizard = 10_000
        outcome = spells.cast_spell(caster, SpellType.BLAST, ROUND_TWO, target)
        assert outcome.success
        assert not outcome.result.spell.success
        assert outcome.target.tallies.defense_won == 1
        assert outcome.target.troops.infantry == 100

    def test_offensive_cast_costs_health_and_counts(self):
        outcome = spells.cast_spell(_strong_caster(), SpellType.BLAST, ROUND_TWO, _empire(2))
        assert outcome.empire.health == 95
        assert outcome.empire.spells_this_round == 1


class TestSpellAdvisors:
    def test_peaceful_channeler_forbids_offensive_spells(self):
        caster = _hire(_strong_caster(), "peaceful_channeler")
        outcome = spells.cast_spell(caster, SpellType.BLAST, ROUND_TWO, _empire(2))
        assert outcome.result.error.reason == "A Peaceful Channeler forbids offensive spells"
        assert outcome.result.error.kind == ErrorKind.RULE_GATE

    def test_destruction_mage_forbids_production_spells(self):
        caster = _hire(_empire(), "destruction_mage")
        check = spells.can_cast_spell(caster, SpellType.CASH, 2)
        assert not check.can_cast
        assert check.reason == "A Destruction Mage forbids production spells"
        assert spells.can_cast_spell(caster, SpellType.SHIELD, 2).can_cast

    def test_destruction_mage_raises_wizard_power(self):
        target = _empire(2)
        plain = spells.wizard_power_ratio(_strong_caster(), target)
        boosted = spells.wizard_power_ratio(_hire(_strong_caster(), "destruction_mage"), target)
        assert boosted == pytest.approx(plain * 1.4)

    def test_gold_alchemist_raises_cash_yield(self):
        outcome = spells.cast_spell(_hire(_empire(), "gold_alchemist"), SpellType.CASH, ROUND_TWO)
        wizards = outcome.empire.troops.wizard
        assert outcome.result.spell.resources_gained == {"gold": math.floor(wizards * 100 * 1.4)}

    def test_conjure_boost_stacks_with_food_spell_advisor(self):
        caster = _hire(_empire(), "harvest_mage", "conjurers_apprentice")
        assert spells.spell_yield_factor(caster, SpellType.FOOD) == pytest.approx(1.6)
        assert spells.spell_yield_factor(caster, SpellType.RUNES) == 1.0

    def test_peaceful_channeler_raises_every_self_spell(self):
        caster = _hire(_empire(), "peaceful_channeler")
        assert spells.spell_yield_factor(caster, SpellType.RUNES) == pytest.approx(1.6)

    def test_spymaster_lowers_the_threshold(self):
        caster = _hire(_empire(), "mactalon")
        threshold = SPELLS[SpellType.BLAST].threshold
        assert spells.success_threshold(caster, SpellType.BLAST) == pytest.approx(threshold * 0.75)
        assert spells.success_threshold(_empire(), SpellType.BLAST) == threshold

    def test_blood_mage_pays_health_for_every_cast(self):
        plain = spells.cast_spell(_empire(), SpellType.SHIELD, ROUND_TWO)
        blood = spells.cast_spell(_hire(_empire(), "blood_mage"), SpellType.SHIELD, ROUND_TWO)
        assert blood.empire.health == plain.empire.health - 5

    def test_wild_channeler_doubles_effects(self):
        caster = _hire(_empire(), "wild_channeler")
        outcome = spells.cast_spell(caster, SpellType.CASH, _wild_context(0.0))
        wizards = outcome.empire.troops.wizard
        assert outcome.result.spell.resources_gained == {"gold": wizards * 200}
        assert not outcome.result.spell.fizzled

    def test_wild_channeler_can_fizzle(self):
        caster = _hire(_empire(), "wild_channeler")
        outcome = spells.cast_spell(caster, SpellType.CASH, _wild_context(1.0))
        assert outcome.success
        assert outcome.result.spell.fizzled
        assert not outcome.result.spell.success
        assert outcome.result.spell.resources_gained == {}
        assert outcome.empire.runes < caster.runes

    def test_shadow_siphon_steals_more(self):
        plain = spells.cast_spell(_strong_caster(), SpellType.STEAL, ROUND_TWO, _empire(2))
        siphon = spells.cast_spell(
            _hire(_strong_caster(), "shadow_siphon"), SpellType.STEAL, ROUND_TWO, _empire(2)
        )
        assert siphon.result.spell.gold_stolen > plain.result.spell.gold_stolen
        assert siphon.target.gold == 50_000 - siphon.result.spell.gold_stolen

    def test_arcane_duelist_takes_more_land(self):
        plain = spells.cast_spell(_strong_caster(), SpellType.FIGHT, ROUND_TWO, _empire(2))
        duelist = spells.cast_spell(
            _hire(_strong_caster(), "arcane_duelist"), SpellType.FIGHT, ROUND_TWO, _empire(2)
        )
        gained = duelist.result.spell.land_gained
        assert gained > plain.result.spell.land_gained
        assert duelist.target.land == 2000 - gained
        assert land_is_balanced(duelist.empire)
        assert land_is_balanced(duelist.target)

    def test_self_spell_ignores_a_given_target(self):
        target = _empire(2)
        outcome = spells.cast_spell(_empire(), SpellType.FOOD, ROUND_TWO, target)
        assert outcome.success
        assert outcome.result.spell.resources_gained["food"] > 0
        assert outcome.empire.spells_this_round == 0
