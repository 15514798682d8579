"""Unit tests for combat power, gates and resolution."""

from __future__ import annotations

import random

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from imperium.domain import combat
from imperium.domain.catalog import ADVISORS_BY_ID
from imperium.domain.empire import create_empire, land_is_balanced
from imperium.domain.enums import AttackType, DefeatReason, Era, Policy, Race, StopReason, TroopType
from imperium.domain.errors import ErrorKind, RuleViolation
from imperium.domain.models import Buildings, Empire, GameContext

ROUND_TWO = GameContext(game_id=7, current_round=2)


def _empire(empire_id: int, **fields) -> Empire:
    empire = create_empire(empire_id, f"Empire {empire_id}", Race.HUMAN)
    for name, value in fields.items():
        setattr(empire, name, value)
    return empire


def _army(empire_id: int, infantry: int) -> Empire:
    empire = _empire(empire_id)
    empire.troops.infantry = infantry
    return empire


class TestPower:
    def test_starting_offense(self):
        # 100*1 + 20*3 + 10*7 + 5*7 + 10 wizards*3
        assert combat.offense_power(_empire(1)) == 295

    def test_starting_defense(self):
        # 100*2 + 20*2 + 10*5 + 5*6 + 10 wizards*3
        assert combat.defense_power(_empire(1)) == 350

    def test_health_scales_power(self):
        assert combat.offense_power(_empire(1, health=50)) == round(295 * 0.5)

    def test_race_and_advisor_modifiers(self):
        troll = create_empire(1, "Troll", Race.TROLL)
        assert combat.offense_power(troll) == round(295 * 1.24)
        general = _empire(1, advisors=[ADVISORS_BY_ID["grand_general"]])
        assert combat.defense_power(general) == round(350 * 1.25)

    def test_unit_specialist_changes_unit_stats(self):
        empire = _empire(1, advisors=[ADVISORS_BY_ID["ground_commander"]])
        assert combat.offense_power(empire) == 295 + 100 + 20
        assert combat.defense_power(empire) == 350 - 10 * 2 - 5 * 2

    def test_power_depends_on_era(self):
        present = create_empire(1, "Now", Race.HUMAN, era=Era.PRESENT)
        # 100*2 + 20*2 + 10*5 + 5*6 + 30
        assert combat.offense_power(present) == 350


class TestVictoryThreshold:
    def test_end_to_end_margin(self):
        assert combat.is_victory(1000, 950)

    @pytest.mark.parametrize(
        ("offense", "defense", "won"),
        [(998, 950, True), (997, 950, False), (1050, 1000, True), (1049, 1000, False)],
    )
    def test_boundary(self, offense, defense, won):
        assert combat.is_victory(offense, defense) is won

    @given(defense=st.integers(min_value=0, max_value=1_000_000))
    def test_exact_margin_always_wins(self, defense):
        assert combat.is_victory(defense * 105 / 100, defense)
        if defense >= 100:
            assert not combat.is_victory(defense * 105 / 100 - 1, defense)


class TestCapsAndCosts:
    def test_attack_cap(self):
        assert combat.attack_cap(_empire(1)) == 10
        assert combat.attack_cap(_empire(1, advisors=[ADVISORS_BY_ID["warmaster"]])) == 11
        assert combat.attack_cap(_empire(1, policies={Policy.FORCED_MARCH})) == 20
        both = _empire(1, policies={Policy.FORCED_MARCH}, advisors=[ADVISORS_BY_ID["warmonger"]])
        assert combat.attack_cap(both) == 24

    def test_health_cost(self):
        assert combat.attack_health_cost(_empire(1), AttackType.STANDARD) == 6
        assert combat.attack_health_cost(_empire(1), AttackType.AIR) == 5
        surgeon = _empire(1, advisors=[ADVISORS_BY_ID["battle_surgeon"]])
        assert combat.attack_health_cost(surgeon, AttackType.STANDARD) == 3


class TestGates:
    @pytest.mark.parametrize(
        ("attacker_fields", "defender_fields", "current_round", "reason"),
        [
            ({}, {}, 1, "Attacks are not allowed in the first round"),
            ({"attacks_this_round": 10}, {}, 2, "Attack limit of 10 per round reached"),
            ({"turns_remaining": 1}, {}, 2, "Not enough turns"),
            ({"health": 19}, {}, 2, "Health too low"),
            ({}, {"era": Era.PRESENT}, 2, "Different era - need Gate spell"),
        ],
    )
    def test_attack_gates(self, attacker_fields, defender_fields, current_round, reason):
        attacker = _empire(1, **attacker_fields)
        defender = _empire(2, **defender_fields)
        with pytest.raises(RuleViolation) as excinfo:
            combat.check_attack(attacker, defender, AttackType.STANDARD, current_round)
        assert excinfo.value.reason == reason
        assert excinfo.value.kind == ErrorKind.RULE_GATE

    def test_cannot_attack_self(self):
        empire = _empire(1)
        with pytest.raises(RuleViolation, match="your own empire"):
            combat.check_attack(empire, empire, AttackType.STANDARD, 2)

    def test_defeated_defender(self):
        defender = _empire(2, defeat=DefeatReason.NO_PEASANTS)
        with pytest.raises(RuleViolation, match="already been defeated"):
            combat.check_attack(_empire(1), defender, AttackType.STANDARD, 2)

    def test_gate_opens_other_eras(self):
        attacker = _empire(1)
        attacker.effects.gate = 2
        combat.check_attack(attacker, _empire(2, era=Era.FUTURE), AttackType.STANDARD, 2)

    def test_protection_and_pacification(self):
        protected = _empire(2)
        protected.effects.divine_protection = 3
        with pytest.raises(RuleViolation, match="divine protection"):
            combat.check_attack(_empire(1), protected, AttackType.STANDARD, 2)
        pacified = _empire(1)
        pacified.effects.pacification = 2
        with pytest.raises(RuleViolation, match="Your empire is pacified"):
            combat.check_attack(pacified, _empire(2), AttackType.STANDARD, 2)

    def test_single_unit_attack_needs_that_unit(self):
        attacker = _empire(1)
        attacker.troops.cavalry = 0
        with pytest.raises(RuleViolation) as excinfo:
            combat.check_attack(attacker, _empire(2), AttackType.CAVALRY, 2)
        assert excinfo.value.kind == ErrorKind.INSUFFICIENT


class TestPreview:
    def test_preview_reports_gate_reason(self):
        preview = combat.combat_preview(_empire(1), _empire(2), current_round=1)
        assert not preview.can_attack
        assert preview.reason == "Attacks are not allowed in the first round"
        assert preview.estimated_land == 140
        assert preview.offense_power == 295
        assert preview.defense_power == 350

    def test_preview_win_chance_bounds(self):
        strong = combat.combat_preview(_army(1, 100_000), _empire(2), current_round=2)
        weak = combat.combat_preview(_army(1, 0), _army(2, 100_000), current_round=2)
        assert strong.can_attack
        assert strong.win_chance == 0.95
        assert weak.win_chance == 0.05


class TestResolution:
    def test_victory_moves_land(self):
        attacker = _army(1, 10_000)
        defender = _empire(2)
        outcome = combat.resolve_combat(attacker, defender, AttackType.STANDARD, ROUND_TWO)
        assert outcome.success
        result = outcome.result.combat
        assert result.won
        assert result.land_gained > 0
        assert outcome.defender.land == 2000 - result.land_lost
        assert outcome.attacker.land == 2000 + result.land_gained
        assert land_is_balanced(outcome.attacker)
        assert land_is_balanced(outcome.defender)
        assert outcome.attacker.tallies.offense_won == 1
        assert outcome.defender.tallies.defense_total == 1

    def test_attack_spends_turns_and_health(self):
        outcome = combat.resolve_combat(_army(1, 10_000), _empire(2), context=ROUND_TWO)
        assert outcome.result.turns_spent == 2
        assert outcome.attacker.turns_remaining == 48
        assert outcome.attacker.health == 94
        assert outcome.attacker.attacks_this_round == 1

    def test_inputs_are_not_mutated(self):
        attacker = _army(1, 10_000)
        defender = _empire(2)
        combat.resolve_combat(attacker, defender, context=ROUND_TWO)
        assert attacker.turns_remaining == 50
        assert defender.land == 2000

    def test_defeat_keeps_land(self):
        attacker = _army(1, 0)
        defender = _army(2, 10_000)
        outcome = combat.resolve_combat(attacker, defender, context=ROUND_TWO)
        assert outcome.success
        assert not outcome.result.combat.won
        assert outcome.defender.land == 2000
        assert outcome.defender.tallies.defense_won == 1

    def test_single_unit_attack_takes_land_as_freeland(self):
        attacker = _army(1, 10_000)
        outcome = combat.resolve_combat(attacker, _empire(2), AttackType.INFANTRY, ROUND_TWO)
        result = outcome.result.combat
        assert result.won
        assert result.buildings_gained == {}
        assert result.land_gained == result.land_lost
        assert outcome.attacker.buildings.freeland == attacker.buildings.freeland + (
            result.land_gained
        )
        assert set(result.attacker_losses) == {TroopType.INFANTRY}

    def test_same_context_same_battle(self):
        first = combat.resolve_combat(_army(1, 5_000), _empire(2), context=ROUND_TWO)
        second = combat.resolve_combat(_army(1, 5_000), _empire(2), context=ROUND_TWO)
        assert first.result.combat == second.result.combat

    def test_rejected_attack(self):
        attacker = _empire(1)
        outcome = combat.resolve_combat(attacker, _empire(2), context=GameContext())
        assert not outcome.success
        assert outcome.attacker is attacker
        assert outcome.result.error.kind == ErrorKind.RULE_GATE

    def test_unknown_attack_type(self):
        outcome = combat.resolve_combat(_empire(1), _empire(2), "siege", ROUND_TWO)
        assert outcome.result.error.kind == ErrorKind.VALIDATION

    def test_stop_inside_attack_turns(self):
        attacker = _army(1, 10_000)
        attacker.food = 0
        attacker.buildings = Buildings()
        outcome = combat.resolve_combat(attacker, _empire(2), context=ROUND_TWO)
        assert not outcome.success
        assert outcome.result.stopped_early == StopReason.FOOD

    @given(
        game_id=st.integers(min_value=0, max_value=10_000),
        infantry=st.integers(min_value=0, max_value=20_000),
        attack_type=st.sampled_from([AttackType.STANDARD, AttackType.INFANTRY]),
    )
    @settings(max_examples=40, deadline=None)
    def test_land_stays_balanced(self, game_id, infantry, attack_type):
        context = GameContext(game_id=game_id, current_round=3)
        outcome = combat.resolve_combat(_army(1, infantry), _empire(2), attack_type, context)
        assert land_is_balanced(outcome.attacker)
        assert land_is_balanced(outcome.defender)
        assert outcome.defender.land + outcome.result.combat.land_lost == 2000
        assert min(outcome.attacker.troops.as_dict().values()) >= 0
        assert min(outcome.defender.troops.as_dict().values()) >= 0


class TestAdvisorsInBattle:
    def test_pacifist_council_forbids_attacks(self):
        attacker = _empire(1, advisors=[ADVISORS_BY_ID["pacifist"]])
        with pytest.raises(RuleViolation) as excinfo:
            combat.check_attack(attacker, _empire(2), AttackType.STANDARD, 2)
        assert excinfo.value.reason == "Your Pacifist Council forbids attacks"
        assert excinfo.value.kind == ErrorKind.RULE_GATE

    def test_salvage_returns_part_of_the_losses(self):
        attacker = _army(1, 10_000)
        attacker.advisors = [ADVISORS_BY_ID["salvage_expert"]]
        defender = _empire(2)
        result = combat.fight(attacker, defender, AttackType.STANDARD, random.Random(3))
        lost = result.attacker_losses[TroopType.INFANTRY]
        assert result.attacker_salvaged[TroopType.INFANTRY] == lost * 10 // 100
        assert attacker.troops.infantry == 10_000 - lost + lost * 10 // 100
        assert result.defender_salvaged == {}

    def test_toll_keeper_charges_the_attacker(self):
        attacker = _army(1, 10_000)
        attacker.gold = 100_000
        defender = _empire(2, advisors=[ADVISORS_BY_ID["toll_keeper"]])
        defender_gold = defender.gold
        result = combat.fight(attacker, defender, AttackType.STANDARD, random.Random(3))
        assert result.toll_paid == 5_000
        assert attacker.gold == 95_000
        assert defender.gold == defender_gold + 5_000

    def test_no_toll_without_a_toll_keeper(self):
        attacker = _army(1, 10_000)
        result = combat.fight(attacker, _empire(2), AttackType.STANDARD, random.Random(3))
        assert result.toll_paid == 0

    def test_defender_remembers_the_attacker(self):
        outcome = combat.resolve_combat(_army(1, 10_000), _empire(2), context=ROUND_TWO)
        assert 1 in outcome.defender.grudges
        assert outcome.attacker.grudges == set()

    def test_dragon_rider_strengthens_air_units(self):
        plain = combat.offense_power(_empire(1))
        rider = combat.offense_power(_empire(1, advisors=[ADVISORS_BY_ID["dragon_rider"]]))
        # air units hit half again as hard on top of the army-wide 25%
        assert rider > plain * 1.25
