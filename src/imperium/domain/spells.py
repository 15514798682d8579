"""Spell costs, casting gates and spell effects."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass

from imperium.utils.rng import generate_seed, seeded_random
from imperium.utils.rounding import round_half_up

from .defeat import mark_defeat
from .empire import (
    can_change_era,
    clamp_population,
    clone,
    ensure_active,
    has_active_shield,
    refresh_networth,
    shift_era,
)
from .enums import (
    PRODUCTION_SPELLS,
    BuildingType,
    EffectKind,
    ModifierCategory,
    SpellType,
    TroopType,
    TurnAction,
)
from .errors import RuleViolation, gated, insufficient, invalid
from .models import Empire, GameContext, SpellOutcome, SpellResult, SpyIntel
from .modifiers import effect_total, resolve
from .rules_config import DEFAULT_RULES, RulesConfig
from .tables import FIGHT_DESTRUCTION, SPELLS
from .turns import batch_result, rejected_result, run_turns

logger = logging.getLogger(__name__)

ERA_STEPS = {SpellType.ADVANCE: 1, SpellType.REGRESS: -1}

# Advisors that raise the yield of one production spell.
_YIELD_BOOSTS: dict[SpellType, tuple[EffectKind, ...]] = {
    SpellType.FOOD: (EffectKind.FOOD_SPELL, EffectKind.CONJURE_BOOST),
    SpellType.CASH: (EffectKind.CASH_SPELL, EffectKind.CONJURE_BOOST),
    SpellType.RUNES: (),
}


@dataclass(frozen=True, slots=True)
class SpellCheck:
    can_cast: bool
    cost: int
    reason: str | None = None


# ---------------------------------------------------------------------------
# Costs and power


def base_cost(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> float:
    spells = rules.spells
    return (
        empire.land * spells.land_factor
        + spells.base_cost
        + empire.buildings.tower * spells.tower_factor
    )


def spell_cost(empire: Empire, spell: SpellType, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Rune cost of ``spell``; spell-cost bonuses reduce it, never below one rune."""

    discount = resolve(empire, ModifierCategory.SPELL_COST, rules=rules).cost_factor
    cost = base_cost(empire, rules) * SPELLS[spell].cost_multiplier * discount
    return math.ceil(max(1.0, cost))


def magic_factor(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> float:
    return resolve(empire, ModifierCategory.MAGIC, rules=rules).factor


def wizard_power_ratio(
    caster: Empire, target: Empire, rules: RulesConfig = DEFAULT_RULES
) -> float:
    """Caster wizard density over the target's, compared with the spell threshold."""

    average_land = max((caster.land + target.land) / 2, 1)
    caster_power = caster.troops.wizard / average_land * magic_factor(caster, rules)
    target_power = (
        max(target.troops.wizard, 1)
        / max(target.land, 1)
        * rules.spells.enemy_strength_factor
        * magic_factor(target, rules)
    )
    destruction = effect_total(caster, EffectKind.DESTRUCTION_MAGE)
    return caster_power / target_power * (1 + destruction)


def success_threshold(empire: Empire, spell: SpellType) -> float:
    """Wizard power ratio an offensive spell must beat; spymasters lower it."""

    return SPELLS[spell].threshold * max(0.0, 1 + effect_total(empire, EffectKind.SPY_RATIO))


def effect_power(empire: Empire) -> float:
    """Multiplier on every spell effect; wild channelers double it."""

    return max(1.0, effect_total(empire, EffectKind.WILD_CHANNELER))


def spell_yield_factor(empire: Empire, spell: SpellType) -> float:
    boost = effect_total(empire, EffectKind.PEACEFUL_CHANNELER)
    boost += sum(effect_total(empire, kind) for kind in _YIELD_BOOSTS.get(spell, ()))
    return (1 + boost) * effect_power(empire)


# ---------------------------------------------------------------------------
# Gates


def check_spell(
    empire: Empire,
    spell: SpellType,
    current_round: int,
    turns_remaining: int,
    rules: RulesConfig = DEFAULT_RULES,
) -> int:
    """Raise :class:`RuleViolation` when ``spell`` cannot be cast; return its cost."""

    spells = rules.spells
    cost = spell_cost(empire, spell, rules)
    if turns_remaining < spells.turns_per_spell:
        raise gated("Not enough turns")
    if empire.health < rules.economy.min_health_to_act:
        raise gated("Health too low")
    if empire.troops.wizard < 1:
        raise insufficient("No wizards available")
    if empire.runes < cost:
        raise insufficient(f"Not enough runes: {spell} costs {cost:,}")

    if SPELLS[spell].offensive and effect_total(empire, EffectKind.PEACEFUL_CHANNELER) > 0:
        raise gated("A Peaceful Channeler forbids offensive spells")
    if spell in PRODUCTION_SPELLS and effect_total(empire, EffectKind.DESTRUCTION_MAGE) > 0:
        raise gated("A Destruction Mage forbids production spells")

    step = ERA_STEPS.get(spell)
    if step is not None:
        if not can_change_era(empire, current_round):
            raise gated("Era change on cooldown")
        if shift_era(empire.era, step) is None:
            raise gated(f"Already in {empire.era} era")

    if SPELLS[spell].offensive:
        if current_round < rules.combat.first_attack_round:
            raise gated("Offensive spells are not allowed in the first round")
        if empire.spells_this_round >= spells.offensive_per_round:
            limit = spells.offensive_per_round
            raise gated(f"Offensive spell limit of {limit} per round reached")
    return cost


def can_cast_spell(
    empire: Empire,
    spell: SpellType,
    current_round: int,
    turns_remaining: int | None = None,
    rules: RulesConfig = DEFAULT_RULES,
) -> SpellCheck:
    if turns_remaining is None:
        turns_remaining = empire.turns_remaining
    try:
        cost = check_spell(empire, spell, current_round, turns_remaining, rules)
    except RuleViolation as exc:
        cost = spell_cost(empire, spell, rules)
        return SpellCheck(can_cast=False, cost=cost, reason=exc.reason)
    return SpellCheck(can_cast=True, cost=cost)


# ---------------------------------------------------------------------------
# Casting


def cast_spell(
    empire: Empire,
    spell: SpellType,
    context: GameContext | None = None,
    target: Empire | None = None,
) -> SpellOutcome:
    """Cast ``spell``: two economy turns, the rune cost, then the effect.

    The result is successful whenever the spell was cast; ``result.spell.success``
    tells whether an offensive spell beat the target's wizards.
    """

    context = context or GameContext()
    rules = context.rules
    caster = clone(empire)
    victim = clone(target) if target is not None else None
    try:
        ensure_active(caster)
        try:
            spell = SpellType(spell)
        except ValueError as exc:
            raise invalid(f"Unknown spell {spell!r}") from exc
        offensive = SPELLS[spell].offensive
        if offensive:
            _check_target(caster, victim)
        cost = check_spell(caster, spell, context.current_round, caster.turns_remaining, rules)
    except RuleViolation as exc:
        failed = rejected_result(TurnAction.SPELL, empire, error=exc.to_error())
        return SpellOutcome(success=False, empire=empire, target=target, result=failed)

    batch = run_turns(caster, TurnAction.SPELL, rules.spells.turns_per_spell, rules)
    if batch.stopped_early is not None:
        stopped = rejected_result(TurnAction.SPELL, empire, stopped_early=batch.stopped_early)
        return SpellOutcome(success=False, empire=empire, target=target, result=stopped)

    caster.runes -= cost
    opponent = victim if offensive else None
    if offensive and opponent is None:
        raise invalid("Offensive spells need a target")
    target_key = opponent.id if opponent is not None else "self"
    counter = caster.spells_this_round if offensive else caster.actions_this_round
    rng = seeded_random(
        generate_seed(
            context.game_id,
            context.current_round,
            context.phase,
            f"spell:{caster.id}:{target_key}:{spell}:{counter}",
        )
    )
    fizzled = _fizzles(caster, rng, rules)
    if fizzled:
        spell_result = SpellResult(
            success=False, spell=spell, effect_applied="fizzled", fizzled=True
        )
    elif opponent is not None:
        spell_result = _cast_offensive(caster, opponent, spell, context.current_round, rng, rules)
    else:
        spell_result = _cast_self(caster, spell, context.current_round, rules)
    if opponent is not None:
        caster.health = max(0, caster.health - rules.spells.offensive_health_cost)
        caster.spells_this_round += 1
        refresh_networth(opponent, rules)
        mark_defeat(opponent, rules)
    if effect_total(caster, EffectKind.BLOOD_MAGE) > 0:
        caster.health = max(0, caster.health - rules.spells.blood_mage_health_cost)
    caster.actions_this_round += 1
    refresh_networth(caster, rules)
    defeat = mark_defeat(caster, rules)
    logger.debug(
        "empire %s cast %s for %d runes: success=%s", caster.id, spell, cost, spell_result.success
    )

    result = batch_result(
        TurnAction.SPELL,
        caster,
        batch,
        spell=spell_result,
        target=victim,
        rune_change=batch.rune_change - cost,
        defeat=defeat,
    )
    return SpellOutcome(success=True, empire=caster, target=victim, result=result)


def _fizzles(caster: Empire, rng: random.Random, rules: RulesConfig) -> bool:
    """Wild channelers lose some casts outright."""

    if effect_total(caster, EffectKind.WILD_CHANNELER) <= 0:
        return False
    return rng.random() < rules.spells.wild_fizzle_chance


def _check_target(caster: Empire, target: Empire | None) -> None:
    if target is None:
        raise invalid("Offensive spells need a target")
    if target.id == caster.id:
        raise invalid("Cannot target your own empire")
    if target.is_defeated:
        raise gated(f"{target.name} has already been defeated")


def _cast_self(
    empire: Empire, spell: SpellType, current_round: int, rules: RulesConfig
) -> SpellResult:
    spells = rules.spells
    magic = magic_factor(empire, rules)
    yield_factor = spell_yield_factor(empire, spell)

    if spell == SpellType.SHIELD:
        empire.effects.shield = current_round
        return SpellResult(success=True, spell=spell, effect_applied="shield")
    if spell == SpellType.GATE:
        empire.effects.gate = current_round
        return SpellResult(success=True, spell=spell, effect_applied="gate")
    if spell == SpellType.FOOD:
        food = math.floor(empire.troops.wizard * magic * spells.food_per_wizard * yield_factor)
        empire.food += food
        return SpellResult(success=True, spell=spell, resources_gained={"food": food})
    if spell == SpellType.CASH:
        gold = math.floor(empire.troops.wizard * magic * spells.gold_per_wizard * yield_factor)
        empire.gold += gold
        return SpellResult(success=True, spell=spell, resources_gained={"gold": gold})
    if spell == SpellType.RUNES:
        towers = spells.runes_base + empire.buildings.tower * spells.runes_per_tower
        runes = math.floor(towers * magic * yield_factor)
        empire.runes += runes
        return SpellResult(success=True, spell=spell, resources_gained={"runes": runes})
    if spell in ERA_STEPS:
        new_era = shift_era(empire.era, ERA_STEPS[spell])
        if new_era is None:  # pragma: no cover - rejected by check_spell
            raise gated(f"Already in {empire.era} era")
        empire.era = new_era
        empire.era_changed_round = current_round
        verb = "advanced" if spell == SpellType.ADVANCE else "regressed"
        return SpellResult(success=True, spell=spell, effect_applied=f"{verb} to {new_era}")
    raise invalid(f"{spell} is not a self spell")


def _share(held: int, rate: float) -> int:
    return min(held, math.ceil(held * rate))


def _wizard_loss(wizards: int, rng: random.Random, rules: RulesConfig) -> int:
    low = math.ceil(wizards * rules.spells.wizard_loss_min)
    high = math.ceil(wizards * rules.spells.wizard_loss_max + 1)
    return min(wizards, rng.randint(low, max(low, high)))


def _cast_offensive(
    caster: Empire,
    target: Empire,
    spell: SpellType,
    current_round: int,
    rng: random.Random,
    rules: RulesConfig,
) -> SpellResult:
    spells = rules.spells
    ratio = wizard_power_ratio(caster, target, rules)
    succeeded = ratio > success_threshold(caster, spell)
    power = effect_power(caster)
    tallied = spell != SpellType.SPY
    if tallied:
        caster.tallies.offense_total += 1
        target.tallies.defense_total += 1

    if not succeeded:
        if tallied:
            target.tallies.defense_won += 1
        if spell == SpellType.FIGHT:
            lost = _share(caster.troops.wizard, spells.fight_failure_caster_loss)
            target_lost = _share(target.troops.wizard, spells.fight_failure_target_loss)
            caster.troops.wizard -= lost
            target.troops.wizard -= target_lost
            return SpellResult(
                success=False, spell=spell, wizards_lost=lost, target_wizards_lost=target_lost
            )
        lost = _wizard_loss(caster.troops.wizard, rng, rules)
        caster.troops.wizard -= lost
        return SpellResult(success=False, spell=spell, wizards_lost=lost)

    if tallied:
        caster.tallies.offense_won += 1
    shielded = has_active_shield(target, current_round)

    if spell == SpellType.SPY:
        return SpellResult(success=True, spell=spell, intel=_spy(target, current_round))

    if spell == SpellType.BLAST:
        rate = spells.blast_shielded_rate if shielded else spells.blast_rate
        rate = min(1.0, rate * power)
        destroyed = {}
        for unit in TroopType:
            held = target.troops.count(unit)
            lost = min(held, math.ceil(held * rate))
            target.troops.adjust(unit, -lost)
            destroyed[unit] = lost
        return SpellResult(success=True, spell=spell, troops_destroyed=destroyed)

    if spell == SpellType.STORM:
        food_rate = spells.storm_shielded_food_rate if shielded else spells.storm_food_rate
        gold_rate = spells.storm_shielded_gold_rate if shielded else spells.storm_gold_rate
        food_rate = min(1.0, food_rate * power)
        gold_rate = min(1.0, gold_rate * power)
        food = min(target.food, math.ceil(target.food * food_rate))
        gold = min(target.gold, math.ceil(target.gold * gold_rate))
        target.food -= food
        target.gold -= gold
        return SpellResult(success=True, spell=spell, food_destroyed=food, gold_destroyed=gold)

    if spell == SpellType.STRUCT:
        rate = spells.struct_shielded_rate if shielded else spells.struct_rate
        rate = min(1.0, rate * power)
        minimum = target.land / spells.struct_min_share
        destroyed = {}
        for kind in BuildingType:
            held = target.buildings.count(kind)
            if held and held >= minimum:
                destroyed[kind] = min(held, math.ceil(held * rate))
                target.buildings.adjust(kind, -destroyed[kind])
        target.buildings.freeland += sum(destroyed.values())
        return SpellResult(success=True, spell=spell, buildings_destroyed=destroyed)

    if spell == SpellType.STEAL:
        low = spells.steal_shielded_min if shielded else spells.steal_min
        high = spells.steal_shielded_max if shielded else spells.steal_max
        share = rng.uniform(low, high) * (1 + effect_total(caster, EffectKind.STEAL_SPELL))
        stolen = min(target.gold, round_half_up(target.gold * share * power))
        target.gold -= stolen
        caster.gold += stolen
        return SpellResult(success=True, spell=spell, gold_stolen=stolen)

    if spell == SpellType.FIGHT:
        return _wizard_fight(caster, target, power, rules)

    raise invalid(f"{spell} is not an offensive spell")


def _wizard_fight(
    caster: Empire, target: Empire, power: float, rules: RulesConfig
) -> SpellResult:
    """Successful wizard duel: razes some buildings and carries off the land."""

    spells = rules.spells
    destroyed = {}
    for kind, rate in FIGHT_DESTRUCTION.items():
        held = target.buildings.count(kind)
        destroyed[kind] = min(held, math.ceil(held * rate))
        target.buildings.adjust(kind, -destroyed[kind])
    freeland = _share(target.buildings.freeland, spells.fight_freeland_rate)
    target.buildings.freeland -= freeland

    land = sum(destroyed.values()) + freeland
    boost = (1 + effect_total(caster, EffectKind.FIGHT_SPELL)) * power - 1
    extra = min(target.buildings.freeland, math.floor(land * boost))
    target.buildings.freeland -= extra
    land += extra
    target.land -= land
    caster.land += land
    caster.buildings.freeland += land
    clamp_population(target, rules)

    caster_lost = _share(caster.troops.wizard, spells.fight_caster_wizard_loss)
    target_lost = _share(target.troops.wizard, spells.fight_target_wizard_loss)
    caster.troops.wizard -= caster_lost
    target.troops.wizard -= target_lost
    return SpellResult(
        success=True,
        spell=SpellType.FIGHT,
        buildings_destroyed=destroyed,
        land_gained=land,
        wizards_lost=caster_lost,
        target_wizards_lost=target_lost,
    )


def _spy(target: Empire, current_round: int) -> SpyIntel:
    return SpyIntel(
        round=current_round,
        target_id=target.id,
        target_name=target.name,
        era=target.era,
        race=target.race,
        land=target.land,
        networth=target.networth,
        peasants=target.peasants,
        health=target.health,
        tax_rate=target.tax_rate,
        gold=target.gold,
        food=target.food,
        runes=target.runes,
        troops=target.troops.as_dict(),
    )
