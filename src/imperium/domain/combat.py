"""Military combat: power, casualties and land or building capture.

An attack spends two economy turns, then compares the attacker's offense
with the defender's defense.  The attacker needs a 5% margin to win.
Both armies take randomized losses either way; only a victory moves land.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, replace

from imperium.utils.rng import generate_seed, seeded_random
from imperium.utils.rounding import round_half_up

from .defeat import mark_defeat
from .empire import (
    can_attack_era,
    clamp_population,
    clone,
    ensure_active,
    has_divine_protection,
    is_pacified,
    refresh_networth,
)
from .enums import (
    COMBAT_UNITS,
    AttackType,
    BuildingType,
    EffectKind,
    ModifierCategory,
    TroopType,
    TurnAction,
)
from .errors import RuleViolation, gated, insufficient, invalid
from .models import CombatOutcome, CombatResult, Empire, GameContext
from .modifiers import effect_total, resolve, unit_offense_factor, unit_stat_adjustment
from .rules_config import DEFAULT_RULES, RulesConfig
from .tables import (
    BUILDING_CAPTURE,
    FREELAND_LOSS_RATE,
    SINGLE_UNIT_LOSS_RATES,
    STANDARD_LOSS_RATES,
    UNIT_STATS,
    WIZARD_POWER,
)
from .turns import batch_result, rejected_result, run_turns

logger = logging.getLogger(__name__)

C = ModifierCategory


@dataclass(frozen=True, slots=True)
class CombatPreview:
    offense_power: int
    defense_power: int
    win_chance: float
    estimated_land: int
    can_attack: bool
    reason: str | None = None


# ---------------------------------------------------------------------------
# Power


def _army_power(empire: Empire, offense: bool) -> float:
    stats = UNIT_STATS[empire.era]
    power = empire.troops.wizard * WIZARD_POWER
    for unit in COMBAT_UNITS:
        offense_delta, defense_delta = unit_stat_adjustment(empire, unit)
        if offense:
            stat = (stats[unit].offense + offense_delta) * unit_offense_factor(empire, unit)
        else:
            stat = max(0, stats[unit].defense + defense_delta)
        power += empire.troops.count(unit) * stat
    return power


def offense_power(
    empire: Empire, rules: RulesConfig = DEFAULT_RULES, opponent: Empire | None = None
) -> int:
    modifier = resolve(empire, C.OFFENSE, rules=rules, opponent=opponent).factor
    power = _army_power(empire, offense=True) * modifier * empire.health / 100
    return round_half_up(power)


def defense_power(
    empire: Empire, rules: RulesConfig = DEFAULT_RULES, opponent: Empire | None = None
) -> int:
    modifier = resolve(empire, C.DEFENSE, rules=rules, opponent=opponent).factor
    power = _army_power(empire, offense=False) * modifier * empire.health / 100
    return round_half_up(power)


def is_victory(offense: float, defense: float, rules: RulesConfig = DEFAULT_RULES) -> bool:
    """True when offense reaches the winning margin over defense."""

    # Compared in hundredths so the boundary does not depend on float error.
    threshold = defense * rules.combat.win_threshold
    return round_half_up(offense * 100) >= round_half_up(threshold * 100)


def attack_cap(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    resolution = resolve(empire, C.EXTRA_ATTACKS, rules=rules)
    return math.floor(
        (rules.combat.attacks_per_round + resolution.flat_bonus) * resolution.multiplier
    )


def attack_health_cost(
    empire: Empire, attack_type: AttackType, rules: RulesConfig = DEFAULT_RULES
) -> int:
    cost = rules.combat.attack_health_cost
    if attack_type == AttackType.STANDARD:
        cost += rules.combat.standard_health_surcharge
    return round_half_up(cost * resolve(empire, C.ATTACK_HEALTH, rules=rules).cost_factor)


# ---------------------------------------------------------------------------
# Gates


def check_attack(
    attacker: Empire,
    defender: Empire,
    attack_type: AttackType,
    current_round: int,
    rules: RulesConfig = DEFAULT_RULES,
) -> None:
    """Raise :class:`RuleViolation` when the attack is not allowed."""

    combat = rules.combat
    if defender.id == attacker.id:
        raise invalid("Cannot attack your own empire")
    if defender.is_defeated:
        raise gated(f"{defender.name} has already been defeated")
    if current_round < combat.first_attack_round:
        raise gated("Attacks are not allowed in the first round")
    cap = attack_cap(attacker, rules)
    if attacker.attacks_this_round >= cap:
        raise gated(f"Attack limit of {cap} per round reached")
    if attacker.turns_remaining < combat.turns_per_attack:
        raise gated("Not enough turns")
    if attacker.health < rules.economy.min_health_to_act:
        raise gated("Health too low")
    if is_pacified(attacker, current_round):
        raise gated("Your empire is pacified")
    if effect_total(attacker, EffectKind.PACIFIST) > 0:
        raise gated("Your Pacifist Council forbids attacks")
    if not can_attack_era(attacker, defender, current_round):
        raise gated("Different era - need Gate spell")
    if has_divine_protection(defender, current_round):
        raise gated(f"{defender.name} is under divine protection")
    if is_pacified(defender, current_round):
        raise gated(f"{defender.name} is pacified")
    if attack_type != AttackType.STANDARD:
        unit = TroopType(attack_type.value)
        if attacker.troops.count(unit) < 1:
            raise insufficient(f"No {unit} to attack with")


def combat_preview(
    attacker: Empire,
    defender: Empire,
    attack_type: AttackType = AttackType.STANDARD,
    current_round: int = 1,
    rules: RulesConfig = DEFAULT_RULES,
) -> CombatPreview:
    offense = offense_power(attacker, rules, opponent=defender)
    defense = defense_power(defender, rules, opponent=attacker)
    ratio = offense / max(defense * rules.combat.win_threshold, 1)
    if ratio >= 1:
        win_chance = min(0.95, 0.5 + (ratio - 1) * 0.5)
    else:
        win_chance = max(0.05, ratio * 0.5)

    reason = None
    try:
        check_attack(attacker, defender, attack_type, current_round, rules)
    except RuleViolation as exc:
        reason = exc.reason
    return CombatPreview(
        offense_power=offense,
        defense_power=defense,
        win_chance=win_chance,
        estimated_land=math.floor(defender.land * rules.combat.preview_land_share),
        can_attack=reason is None,
        reason=reason,
    )


# ---------------------------------------------------------------------------
# Resolution


def _unit_losses(
    sent: int,
    defending: int,
    rates: tuple[float, float],
    omod: float,
    dmod: float,
    casualty_factor: float,
    rng: random.Random,
    rules: RulesConfig,
) -> tuple[int, int]:
    attack_rate, defend_rate = rates
    attacker_loss = min(rng.randrange(math.ceil(sent * attack_rate * omod) + 1), sent)
    attacker_loss = math.floor(attacker_loss * casualty_factor)

    max_kill = round_half_up(rules.combat.max_kill_base * sent) + rng.randint(
        0, round_half_up(rules.combat.max_kill_spread * sent)
    )
    defender_loss = min(
        rng.randrange(math.ceil(defending * defend_rate * dmod) + 1), defending, max_kill
    )
    return attacker_loss, defender_loss


def fight(
    attacker: Empire,
    defender: Empire,
    attack_type: AttackType,
    rng: random.Random,
    rules: RulesConfig = DEFAULT_RULES,
) -> CombatResult:
    """Roll the battle and apply its losses and captures to both empires."""

    offense = offense_power(attacker, rules, opponent=defender)
    defense = defense_power(defender, rules, opponent=attacker)
    omod = math.sqrt(defense / (offense + 1))
    dmod = math.sqrt(offense / (defense + 1))
    casualty_factor = resolve(attacker, C.CASUALTIES, rules=rules).cost_factor

    if attack_type == AttackType.STANDARD:
        units = list(COMBAT_UNITS)
        rates = STANDARD_LOSS_RATES
    else:
        units = [TroopType(attack_type.value)]
        rates = SINGLE_UNIT_LOSS_RATES

    attacker_losses: dict[TroopType, int] = {}
    defender_losses: dict[TroopType, int] = {}
    for unit in units:
        lost, killed = _unit_losses(
            attacker.troops.count(unit),
            defender.troops.count(unit),
            rates[unit],
            omod,
            dmod,
            casualty_factor,
            rng,
            rules,
        )
        attacker_losses[unit] = lost
        defender_losses[unit] = killed
        attacker.troops.adjust(unit, -lost)
        defender.troops.adjust(unit, -killed)
    attacker_salvaged = _salvage(attacker, attacker_losses)
    defender_salvaged = _salvage(defender, defender_losses)
    toll = _pay_toll(attacker, defender)
    defender.grudges.add(attacker.id)

    won = is_victory(offense, defense, rules)
    attacker.tallies.offense_total += 1
    defender.tallies.defense_total += 1
    outcome = CombatResult(
        won=won,
        attack_type=attack_type,
        offense_power=offense,
        defense_power=defense,
        attacker_losses=attacker_losses,
        defender_losses=defender_losses,
        attacker_salvaged=attacker_salvaged,
        defender_salvaged=defender_salvaged,
        toll_paid=toll,
    )
    if not won:
        defender.tallies.defense_won += 1
        return outcome

    attacker.tallies.offense_won += 1
    captured, destroyed, land_gained, land_lost = _take_land(attacker, defender, attack_type, rules)
    if defender.land <= 0:
        attacker.tallies.kills += 1
    return replace(
        outcome,
        land_gained=land_gained,
        land_lost=land_lost,
        buildings_gained=captured,
        buildings_destroyed=destroyed,
    )


def _salvage(empire: Empire, losses: dict[TroopType, int]) -> dict[TroopType, int]:
    """Return a share of the fallen troops to an empire with a salvage advisor."""

    share = effect_total(empire, EffectKind.SALVAGE)
    if share <= 0:
        return {}
    recovered = {unit: math.floor(lost * share) for unit, lost in losses.items()}
    for unit, count in recovered.items():
        empire.troops.adjust(unit, count)
    return recovered


def _pay_toll(attacker: Empire, defender: Empire) -> int:
    """Defenders with a toll keeper take a share of the attacker's gold."""

    rate = effect_total(defender, EffectKind.TOLL_KEEPER)
    toll = min(attacker.gold, math.floor(attacker.gold * rate)) if rate > 0 else 0
    attacker.gold -= toll
    defender.gold += toll
    return toll


def _take_land(
    attacker: Empire, defender: Empire, attack_type: AttackType, rules: RulesConfig
) -> tuple[dict[BuildingType, int], dict[BuildingType, int], int, int]:
    """Move land after a victory, keeping free land plus buildings equal to land."""

    standard = attack_type == AttackType.STANDARD
    captured: dict[BuildingType, int] = {}
    destroyed: dict[BuildingType, int] = {}
    for kind, (loss_rate, gain_rate) in BUILDING_CAPTURE.items():
        held = defender.buildings.count(kind)
        loss = min(held, math.ceil(held * loss_rate))
        destroyed[kind] = loss
        defender.buildings.adjust(kind, -loss)
        if standard:
            captured[kind] = math.floor(loss * gain_rate)
            attacker.buildings.adjust(kind, captured[kind])

    freeland = min(
        defender.buildings.freeland, math.ceil(defender.buildings.freeland * FREELAND_LOSS_RATE)
    )
    defender.buildings.freeland -= freeland
    land_lost = sum(destroyed.values()) + freeland
    defender.land -= land_lost
    clamp_population(defender, rules)

    if standard:
        gained_buildings = sum(captured.values())
        bonus = math.floor((gained_buildings + freeland) * rules.combat.standard_land_bonus)
        new_freeland = freeland + bonus
        land_gained = gained_buildings + new_freeland
    else:
        new_freeland = land_lost
        land_gained = land_lost
    attacker.land += land_gained
    attacker.buildings.freeland += new_freeland
    return captured, destroyed, land_gained, land_lost


def resolve_combat(
    attacker: Empire,
    defender: Empire,
    attack_type: AttackType = AttackType.STANDARD,
    context: GameContext | None = None,
) -> CombatOutcome:
    """Resolve one attack; both empires change together or not at all."""

    context = context or GameContext()
    rules = context.rules
    offense_side = clone(attacker)
    defense_side = clone(defender)
    try:
        ensure_active(offense_side)
        try:
            attack_type = AttackType(attack_type)
        except ValueError as exc:
            raise invalid(f"Unknown attack type {attack_type!r}") from exc
        check_attack(offense_side, defense_side, attack_type, context.current_round, rules)
    except RuleViolation as exc:
        failed = rejected_result(TurnAction.ATTACK, attacker, error=exc.to_error())
        return CombatOutcome(success=False, attacker=attacker, defender=defender, result=failed)

    batch = run_turns(offense_side, TurnAction.ATTACK, rules.combat.turns_per_attack, rules)
    if batch.stopped_early is not None:
        stopped = rejected_result(TurnAction.ATTACK, attacker, stopped_early=batch.stopped_early)
        return CombatOutcome(success=False, attacker=attacker, defender=defender, result=stopped)

    seed = generate_seed(
        context.game_id,
        context.current_round,
        context.phase,
        f"attack:{offense_side.id}:{defense_side.id}:{offense_side.attacks_this_round}",
    )
    combat = fight(offense_side, defense_side, attack_type, seeded_random(seed), rules)
    offense_side.health = max(
        0, offense_side.health - attack_health_cost(offense_side, attack_type, rules)
    )
    offense_side.attacks_this_round += 1
    offense_side.actions_this_round += 1

    refresh_networth(offense_side, rules)
    refresh_networth(defense_side, rules)
    defeat = mark_defeat(offense_side, rules)
    mark_defeat(defense_side, rules)
    logger.debug(
        "empire %s attacked %s (%s): won=%s land=%d",
        offense_side.id,
        defense_side.id,
        attack_type,
        combat.won,
        combat.land_gained,
    )

    result = batch_result(
        TurnAction.ATTACK,
        offense_side,
        batch,
        combat=combat,
        target=defense_side,
        defeat=defeat,
    )
    return CombatOutcome(success=True, attacker=offense_side, defender=defense_side, result=result)
