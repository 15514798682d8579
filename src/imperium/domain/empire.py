"""Empire creation, copying, net worth and timed-effect helpers."""

from __future__ import annotations

import copy
import math

from .enums import ERA_ORDER, EffectKind, Era, Race, TroopType
from .errors import ErrorKind, RuleViolation, invalid
from .models import Buildings, Empire, EmpireID, IndustryAllocation, Troops
from .modifiers import has_flag
from .rules_config import DEFAULT_RULES, RulesConfig
from .tables import TROOP_COSTS

# ---------------------------------------------------------------------------
# Construction


def create_empire(
    empire_id: int,
    name: str,
    race: Race,
    *,
    era: Era = Era.PAST,
    is_bot: bool = False,
    rules: RulesConfig = DEFAULT_RULES,
) -> Empire:
    """Found a new empire with the configured starting resources."""

    start = rules.starting
    constructed = start.markets + start.barracks + start.exchanges + start.farms + start.towers
    if constructed > start.land:
        raise ValueError("starting buildings exceed starting land")

    empire = Empire(
        id=EmpireID(empire_id),
        name=name,
        race=race,
        era=era,
        gold=start.gold,
        food=start.food,
        runes=start.runes,
        land=start.land,
        peasants=start.peasants,
        health=start.health,
        tax_rate=start.tax_rate,
        buildings=Buildings(
            market=start.markets,
            barracks=start.barracks,
            exchange=start.exchanges,
            farm=start.farms,
            tower=start.towers,
            freeland=start.land - constructed,
        ),
        troops=Troops(
            infantry=start.infantry,
            cavalry=start.cavalry,
            air=start.air,
            naval=start.naval,
            wizard=start.wizards,
        ),
        industry=IndustryAllocation(
            infantry=start.industry_infantry,
            cavalry=start.industry_cavalry,
            air=start.industry_air,
            naval=start.industry_naval,
        ),
        turns_remaining=rules.rounds.turns_per_round,
        is_bot=is_bot,
    )
    refresh_networth(empire, rules)
    return empire


def clone(empire: Empire) -> Empire:
    """Deep copy used as the working state of an operation."""

    return copy.deepcopy(empire)


# ---------------------------------------------------------------------------
# Derived values


def calculate_networth(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    nw = rules.networth
    value = 0.0
    for kind in TroopType:
        value += empire.troops.count(kind) * TROOP_COSTS[kind].networth
    value += empire.peasants * nw.per_peasant
    value += empire.land * nw.per_acre
    value += empire.buildings.freeland * nw.per_free_acre
    value += (empire.gold + empire.savings / 2 - empire.loan * 2) / nw.cash_divisor
    if empire.food > 10:
        value += empire.food / math.log10(empire.food) * nw.food_factor
    return max(0, math.floor(value))


def refresh_networth(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    empire.networth = calculate_networth(empire, rules)
    return empire.networth


def peasant_capacity(land: int, rules: RulesConfig = DEFAULT_RULES) -> int:
    economy = rules.economy
    return math.floor(economy.population_base_capacity + land * economy.population_per_land)


def clamp_population(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> None:
    """Evict peasants the remaining land cannot hold."""

    empire.peasants = min(empire.peasants, peasant_capacity(empire.land, rules))


def land_is_balanced(empire: Empire) -> bool:
    """True when free land plus constructed buildings equals total land."""

    return empire.buildings.freeland + empire.buildings.constructed == empire.land


# ---------------------------------------------------------------------------
# Timed effects


def is_active(expiry: int | None, current_round: int) -> bool:
    return expiry is not None and current_round <= expiry


def has_active_shield(empire: Empire, current_round: int) -> bool:
    if has_flag(empire, EffectKind.PERMANENT_SHIELD):
        return True
    return is_active(empire.effects.shield, current_round)


def has_active_gate(empire: Empire, current_round: int) -> bool:
    if has_flag(empire, EffectKind.PERMANENT_GATE):
        return True
    return is_active(empire.effects.gate, current_round)


def is_pacified(empire: Empire, current_round: int) -> bool:
    return is_active(empire.effects.pacification, current_round)


def has_divine_protection(empire: Empire, current_round: int) -> bool:
    return is_active(empire.effects.divine_protection, current_round)


def clear_expired_effects(empire: Empire, current_round: int) -> list[str]:
    """Drop timed effects that are no longer active; returns their names."""

    cleared = []
    effects = empire.effects
    for name in ("shield", "gate", "pacification", "divine_protection"):
        expiry = getattr(effects, name)
        if expiry is not None and not is_active(expiry, current_round):
            setattr(effects, name, None)
            cleared.append(name)
    return cleared


# ---------------------------------------------------------------------------
# Eras


def shift_era(era: Era, step: int) -> Era | None:
    """Neighbouring era ``step`` positions away, or None past either end."""

    index = ERA_ORDER.index(era) + step
    if 0 <= index < len(ERA_ORDER):
        return ERA_ORDER[index]
    return None


def can_change_era(empire: Empire, current_round: int) -> bool:
    """Era changes are allowed once the round after the last change has begun."""

    return current_round > empire.era_changed_round


def can_attack_era(attacker: Empire, defender: Empire, current_round: int) -> bool:
    """Empires in different eras can only be reached through an active gate."""

    return attacker.era == defender.era or has_active_gate(attacker, current_round)


# ---------------------------------------------------------------------------
# Validation


def ensure_active(empire: Empire) -> None:
    if empire.is_defeated:
        raise RuleViolation(ErrorKind.DEFEATED, f"{empire.name} has been defeated")


def validate_industry(allocation: IndustryAllocation) -> None:
    shares = (allocation.infantry, allocation.cavalry, allocation.air, allocation.naval)
    if any(share < 0 or share > 100 for share in shares):
        raise invalid("Industry percentages must be between 0 and 100")
    if allocation.total != 100:
        raise invalid(f"Industry allocation must sum to 100, got {allocation.total}")


def validate_tax_rate(tax_rate: int) -> None:
    if not 0 <= tax_rate <= 100:
        raise invalid(f"Tax rate must be between 0 and 100, got {tax_rate}")
