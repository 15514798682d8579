"""Per-turn economy: gold, food, runes, troops, land, peasants and health.

``compute_turn`` evaluates one turn of production and upkeep without
touching the empire; ``check_turn`` reports whether applying it would
starve the empire or breach the emergency loan ceiling; ``apply_turn``
commits it.  The turn scheduler always checks before applying, so no
tracked resource is ever clamped.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from imperium.utils.rounding import round_half_up

from .bank import emergency_loan_limit
from .empire import peasant_capacity, refresh_networth
from .enums import (
    COMBAT_UNITS,
    EffectKind,
    ModifierCategory,
    Policy,
    TroopType,
    TurnAction,
    TurnOutcome,
)
from .models import Empire
from .modifiers import effect_total, has_flag, resolve
from .rules_config import DEFAULT_RULES, RulesConfig
from .tables import (
    PEASANT_FOOD,
    SIZE_BONUS_MAX,
    SIZE_BONUS_STEPS,
    TROOP_COSTS,
    TROOP_PRODUCTION_RATES,
)

C = ModifierCategory

# Advisors that raise troop output during turns of another action.
_ACTION_TROOP_BOOSTS: dict[TurnAction, EffectKind] = {
    TurnAction.FARM: EffectKind.FARM_INDUSTRY_BOOST,
    TurnAction.CASH: EffectKind.CASH_INDUSTRY_BOOST,
}


@dataclass(frozen=True, slots=True)
class TurnEconomy:
    """Production and upkeep of a single turn."""

    income: int
    expenses: int
    loan_payment: int
    food_production: int
    food_consumption: int
    rune_production: int
    wizards_trained: int
    troops_produced: dict[TroopType, int] = field(default_factory=dict)

    @property
    def net_gold(self) -> int:
        return self.income - self.expenses - self.loan_payment

    @property
    def net_food(self) -> int:
        return self.food_production - self.food_consumption


# ---------------------------------------------------------------------------
# Gold


def size_bonus(networth: int) -> float:
    """Income divisor that grows with net worth."""

    for ceiling, bonus in SIZE_BONUS_STEPS:
        if networth <= ceiling:
            return bonus
    return SIZE_BONUS_MAX


def per_capita_income(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    land = max(empire.land, 1)
    markets = empire.buildings.market
    income_factor = resolve(empire, C.INCOME, rules=rules).factor
    return round_half_up(rules.economy.pci_base * (1 + markets / land) * income_factor)


def calculate_income(
    empire: Empire, action: TurnAction | None = None, rules: RulesConfig = DEFAULT_RULES
) -> int:
    economy = rules.economy
    pci = per_capita_income(empire, rules)
    peasant_income = pci * empire.tax_rate / 100 * empire.health / 100 * empire.peasants
    market_boost = effect_total(empire, EffectKind.MARKET_BOOST)
    building_income = empire.buildings.market * economy.market_income * (1 + market_boost)

    income = round_half_up((peasant_income + building_income) / size_bonus(empire.networth))
    income = round_half_up(income * (1 + effect_total(empire, EffectKind.INCOME_BOOST)))
    if action == TurnAction.CASH:
        income = round_half_up(income * economy.action_bonus)
    return income


def calculate_expenses(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    economy = rules.economy
    base = sum(empire.troops.count(kind) * TROOP_COSTS[kind].upkeep for kind in TroopType)
    base = round_half_up(base + empire.land * economy.land_upkeep)

    land = max(empire.land, 1)
    exchange_boost = effect_total(empire, EffectKind.EXCHANGE_BOOST)
    race_reduction = resolve(empire, C.EXPENSES, rules=rules).percent / 100
    reduction = min(
        economy.max_expense_reduction,
        race_reduction + empire.buildings.exchange / land * (1 + exchange_boost),
    )
    return base - round_half_up(base * reduction)


def loan_payment(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Forced amortization taken every turn before other spending."""

    return round_half_up(empire.loan / rules.economy.loan_payment_divisor)


# ---------------------------------------------------------------------------
# Food


def _raw_food(empire: Empire, rules: RulesConfig) -> float:
    economy = rules.economy
    land = max(empire.land, 1)
    farms = empire.buildings.farm
    efficiency = math.sqrt(max(0.0, 1 - economy.farm_density_factor * farms / land))
    raw = empire.buildings.freeland * economy.food_per_freeland
    raw += farms * economy.food_per_farm * efficiency
    return raw


def base_food_production(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Food from free land and farms before any race, era or advisor modifier.

    Farms lose efficiency as they crowd the land; free land yields a flat
    amount per acre.
    """
    return round_half_up(_raw_food(empire, rules))


def calculate_food_production(
    empire: Empire, action: TurnAction | None = None, rules: RulesConfig = DEFAULT_RULES
) -> int:
    economy = rules.economy
    factor = resolve(empire, C.FOOD_PRODUCTION, rules=rules).factor
    production = round_half_up(_raw_food(empire, rules) * factor)
    if action == TurnAction.FARM:
        production = round_half_up(production * economy.action_bonus)
    return production


def calculate_food_consumption(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    base = empire.peasants * PEASANT_FOOD
    base += sum(empire.troops.count(kind) * TROOP_COSTS[kind].food for kind in TroopType)
    # A positive consumption modifier means the race eats less.
    consumption_factor = resolve(empire, C.FOOD_CONSUMPTION, rules=rules).factor
    return round_half_up(base * (2 - consumption_factor))


# ---------------------------------------------------------------------------
# Runes and troops


def calculate_rune_production(
    empire: Empire, action: TurnAction | None = None, rules: RulesConfig = DEFAULT_RULES
) -> int:
    economy = rules.economy
    runes = math.floor(
        empire.buildings.tower
        * economy.runes_per_tower
        * resolve(empire, C.RUNE_PRODUCTION, rules=rules).factor
    )
    if action == TurnAction.MEDITATE:
        runes = round_half_up(runes * economy.action_bonus)
    return runes


def calculate_wizard_training(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    return math.floor(
        empire.buildings.tower
        * rules.economy.wizards_per_tower
        * resolve(empire, C.MAGIC, rules=rules).factor
    )


def calculate_troop_production(
    empire: Empire, action: TurnAction | None = None, rules: RulesConfig = DEFAULT_RULES
) -> dict[TroopType, int]:
    economy = rules.economy
    industry = (
        empire.buildings.barracks
        * economy.industry_mult
        * resolve(empire, C.INDUSTRY, rules=rules).factor
    )

    produced: dict[TroopType, int] = {}
    for unit in COMBAT_UNITS:
        bonus = resolve(empire, C.TROOP_PRODUCTION, unit.value, rules=rules).factor
        amount = math.floor(
            industry * empire.industry.share(unit) / 100 * TROOP_PRODUCTION_RATES[unit] * bonus
        )
        if action == TurnAction.INDUSTRY:
            amount = round_half_up(amount * economy.action_bonus)
        elif action == TurnAction.FARM and Policy.WAR_ECONOMY in empire.policies:
            amount += math.floor(amount * economy.war_economy_troop_share)
        boost_kind = _ACTION_TROOP_BOOSTS.get(action) if action else None
        boost = effect_total(empire, boost_kind) if boost_kind else 0.0
        if boost:
            amount = round_half_up(amount * (1 + boost))
        produced[unit] = amount
    return produced


# ---------------------------------------------------------------------------
# Land


def explore_multiplier(empire: Empire) -> float:
    multiplier = 2.0 if has_flag(empire, EffectKind.DOUBLE_EXPLORE) else 1.0
    return max(multiplier, effect_total(empire, EffectKind.EXPANSIONIST))


def calculate_land_gain(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    economy = rules.economy
    land_factor = empire.land * economy.explore_land_factor + economy.explore_offset
    base = math.ceil(
        1 / land_factor * economy.explore_base * resolve(empire, C.EXPLORE, rules=rules).factor
    )
    return math.floor(base * explore_multiplier(empire))


# ---------------------------------------------------------------------------
# Turn evaluation


def compute_turn(
    empire: Empire, action: TurnAction | None = None, rules: RulesConfig = DEFAULT_RULES
) -> TurnEconomy:
    """Evaluate one turn; ``action`` selects the 25% action bonus, if any."""

    return TurnEconomy(
        income=calculate_income(empire, action, rules),
        expenses=calculate_expenses(empire, rules),
        loan_payment=loan_payment(empire, rules),
        food_production=calculate_food_production(empire, action, rules),
        food_consumption=calculate_food_consumption(empire, rules),
        rune_production=calculate_rune_production(empire, action, rules),
        wizards_trained=calculate_wizard_training(empire, rules),
        troops_produced=calculate_troop_production(empire, action, rules),
    )


def projected_loan(empire: Empire, economy: TurnEconomy) -> int:
    """Loan balance after the turn, with any gold shortfall folded in."""

    gold_after = empire.gold + economy.net_gold
    loan = empire.loan - economy.loan_payment
    if gold_after < 0:
        loan -= gold_after
    return loan


def check_turn(
    empire: Empire, economy: TurnEconomy, rules: RulesConfig = DEFAULT_RULES
) -> TurnOutcome:
    """Decide whether ``economy`` may be applied without breaking an invariant."""

    if empire.food + economy.net_food < 0:
        return TurnOutcome.STOP_FOOD
    if projected_loan(empire, economy) > emergency_loan_limit(empire, rules):
        return TurnOutcome.STOP_LOAN
    return TurnOutcome.CONTINUE


def apply_turn(empire: Empire, economy: TurnEconomy, rules: RulesConfig = DEFAULT_RULES) -> None:
    """Commit one evaluated turn to ``empire``."""

    empire.loan = projected_loan(empire, economy)
    empire.gold = max(0, empire.gold + economy.net_gold)
    empire.food += economy.net_food
    grow_peasants(empire, rules)
    empire.runes += economy.rune_production
    for unit, amount in economy.troops_produced.items():
        empire.troops.adjust(unit, amount)
    empire.troops.wizard += economy.wizards_trained
    regenerate_health(empire, rules)
    refresh_networth(empire, rules)


def grow_peasants(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Move the population a twentieth of the way toward its base; returns the change."""

    economy = rules.economy
    lenient = has_flag(empire, EffectKind.LENIENT_TAXES)
    density = effect_total(empire, EffectKind.PEASANT_DENSITY) or 1.0
    divisor = economy.popbase_tax_offset
    if not lenient:
        divisor += empire.tax_rate / 100
    popbase = round_half_up(
        (
            empire.land * economy.popbase_land_factor * density
            + empire.buildings.freeland * economy.popbase_freeland_factor
        )
        / divisor
    )

    change = 0
    if empire.peasants != popbase:
        step = (popbase - empire.peasants) / economy.population_step_divisor
        if not lenient:
            tax_factor = 4 / ((empire.tax_rate + 15) / 20) - 7 / 9
            scale = tax_factor if step > 0 else 1 / tax_factor
            step *= scale * scale
        change = round_half_up(step)

    target = min(empire.peasants + change, peasant_capacity(empire.land, rules))
    target = max(1, target)
    change = target - empire.peasants
    empire.peasants = target
    return change


def regenerate_health(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> None:
    economy = rules.economy
    if empire.health >= economy.health_max:
        return
    tax_penalty = max(0, empire.tax_rate - economy.high_tax_threshold) / 100
    regen = max(0.0, economy.health_regen_per_turn * (1 - tax_penalty))
    regen += resolve(empire, C.HEALTH_REGEN, rules=rules).flat_bonus
    empire.health = min(economy.health_max, empire.health + round_half_up(regen))


def grant_explored_land(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Add one explore turn of free land (and pioneer settlers); returns acres gained."""

    acres = calculate_land_gain(empire, rules)
    empire.land += acres
    empire.buildings.freeland += acres
    pioneers = effect_total(empire, EffectKind.PIONEER)
    if pioneers > 0:
        settlers = math.floor(acres * pioneers)
        empire.peasants = min(empire.peasants + settlers, peasant_capacity(empire.land, rules))
    return acres
