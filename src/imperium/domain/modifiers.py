"""Modifier registry: composes race, era, mastery, advisor and policy effects.

Resolution runs a fixed pipeline of pure stage functions over a
:class:`ModifierAccumulator`:

1. race base modifier (percentage points)
2. era modifier (multiplicative)
3. mastery bonus for the action tied to the category (percentage points)
4. advisor effects (percentage points summed additively, discounts multiply)
   including situational ones that read the empire, its masteries or the
   opposing empire
5. policy flags (gate or scale)

A resolution exposes ``factor`` for benefit categories and ``cost_factor``
for cost categories, where a positive percentage makes things cheaper.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Mapping

from .enums import BuildingType, EffectKind, MasteryAction, ModifierCategory, Policy, TroopType
from .models import (
    ConditionalBonus,
    Empire,
    FlatBonus,
    Flag,
    StatBonus,
    UnitSpecialist,
)
from .rules_config import DEFAULT_RULES, RulesConfig
from .tables import ERA_MODIFIERS, MASTERY_LEVEL_BONUS, RACE_MODIFIERS

C = ModifierCategory

COST_CATEGORIES: frozenset[ModifierCategory] = frozenset(
    {C.BUILD_COST, C.SPELL_COST, C.CASUALTIES, C.ATTACK_HEALTH}
)

_RACE_FIELDS: Mapping[ModifierCategory, str] = MappingProxyType(
    {
        C.INCOME: "income",
        C.FOOD_PRODUCTION: "food_production",
        C.FOOD_CONSUMPTION: "food_consumption",
        C.INDUSTRY: "industry",
        C.EXPLORE: "explore",
        C.MAGIC: "magic",
        C.RUNE_PRODUCTION: "rune_production",
        C.OFFENSE: "offense",
        C.DEFENSE: "defense",
        C.BUILD_COST: "building",
        C.EXPENSES: "expenses",
        C.MARKET: "market",
    }
)

_ERA_FIELDS: Mapping[ModifierCategory, str] = MappingProxyType(
    {
        C.INCOME: "economy",
        C.FOOD_PRODUCTION: "food_production",
        C.INDUSTRY: "industry",
        C.RUNE_PRODUCTION: "energy",
        C.EXPLORE: "explore",
    }
)

_MASTERY_ACTIONS: Mapping[ModifierCategory, MasteryAction] = MappingProxyType(
    {
        C.FOOD_PRODUCTION: MasteryAction.FARM,
        C.INCOME: MasteryAction.CASH,
        C.EXPLORE: MasteryAction.EXPLORE,
        C.INDUSTRY: MasteryAction.INDUSTRY,
        C.RUNE_PRODUCTION: MasteryAction.MEDITATE,
    }
)

_STAT_CATEGORIES: Mapping[EffectKind, tuple[ModifierCategory, ...]] = MappingProxyType(
    {
        EffectKind.INCOME: (C.INCOME,),
        EffectKind.FOOD_PRODUCTION: (C.FOOD_PRODUCTION,),
        EffectKind.INDUSTRY: (C.INDUSTRY,),
        EffectKind.EXPLORE: (C.EXPLORE,),
        EffectKind.OFFENSE: (C.OFFENSE,),
        EffectKind.DEFENSE: (C.DEFENSE,),
        EffectKind.MILITARY: (C.OFFENSE, C.DEFENSE),
        EffectKind.MAGIC: (C.MAGIC,),
        EffectKind.BLOOD_MAGE: (C.MAGIC,),
        EffectKind.RUNE_PRODUCTION: (C.RUNE_PRODUCTION,),
        EffectKind.BUILD_COST: (C.BUILD_COST,),
        EffectKind.SPELL_COST: (C.SPELL_COST,),
        EffectKind.MARKET_BONUS: (C.MARKET,),
        EffectKind.TROOP_PRODUCTION: (C.TROOP_PRODUCTION,),
        EffectKind.BANK_INTEREST: (C.BANK_INTEREST,),
    }
)

# Reductions compose multiplicatively: two 50% reductions leave 25%.
_REDUCTION_CATEGORIES: Mapping[EffectKind, ModifierCategory] = MappingProxyType(
    {
        EffectKind.CASUALTY_REDUCTION: C.CASUALTIES,
        EffectKind.ATTACK_HEALTH_REDUCTION: C.ATTACK_HEALTH,
    }
)

_FLAT_CATEGORIES: Mapping[EffectKind, ModifierCategory] = MappingProxyType(
    {
        EffectKind.EXTRA_TURNS: C.EXTRA_TURNS,
        EffectKind.EXTRA_ATTACKS: C.EXTRA_ATTACKS,
        EffectKind.HEALTH_REGEN: C.HEALTH_REGEN,
        EffectKind.PACIFIST: C.EXTRA_TURNS,
    }
)

# "All actions" bonuses raise every category a mastery can raise.
ACTION_CATEGORIES: frozenset[ModifierCategory] = frozenset(_MASTERY_ACTIONS)
COMBAT_CATEGORIES: frozenset[ModifierCategory] = frozenset({C.OFFENSE, C.DEFENSE})
_ALL_STATS: frozenset[ModifierCategory] = ACTION_CATEGORIES | COMBAT_CATEGORIES | {C.MAGIC}

# Mastery of one action raising another category, per mastery level.
MASTERY_SYNERGIES: Mapping[str, tuple[MasteryAction, ModifierCategory]] = MappingProxyType(
    {
        "explore_boosts_food": (MasteryAction.EXPLORE, C.FOOD_PRODUCTION),
        "explore_boosts_income": (MasteryAction.EXPLORE, C.INCOME),
        "meditate_boosts_industry": (MasteryAction.MEDITATE, C.INDUSTRY),
        "meditate_boosts_food": (MasteryAction.MEDITATE, C.FOOD_PRODUCTION),
        "cash_boosts_offense": (MasteryAction.CASH, C.OFFENSE),
        "cash_boosts_industry": (MasteryAction.CASH, C.INDUSTRY),
        "industry_boosts_magic": (MasteryAction.INDUSTRY, C.MAGIC),
    }
)

# Minimum number of distinct masteries and the categories raised once reached.
MASTERY_THRESHOLDS: Mapping[str, tuple[int, frozenset[ModifierCategory]]] = MappingProxyType(
    {
        "min_2_masteries": (2, ACTION_CATEGORIES),
        "min_3_masteries_combat": (3, COMBAT_CATEGORIES),
        "all_5_masteries": (5, ACTION_CATEGORIES),
    }
)

# Army-wide offense granted alongside the aircraft bonus.
AIRCRAFT_ARMY_BONUS: Mapping[str, float] = MappingProxyType({"plus_25_all": 0.25})

_BUILDING_CATEGORIES: Mapping[EffectKind, ModifierCategory] = MappingProxyType(
    {EffectKind.BUILDING_OFFENSE: C.OFFENSE, EffectKind.BUILDING_DEFENSE: C.DEFENSE}
)

BUILD_DISCOUNTS: Mapping[str, str] = MappingProxyType(
    {
        "per_turn_with_discount": "discounted_rate_multiplier",
        "per_turn": "per_turn_rate_multiplier",
    }
)

_FLAG_POLICIES: Mapping[EffectKind, Policy] = MappingProxyType(
    {
        EffectKind.DOUBLE_EXPLORE: Policy.OPEN_BORDERS,
        EffectKind.DOUBLE_BANK_INTEREST: Policy.BANK_CHARTER,
        EffectKind.PERMANENT_SHIELD: Policy.MAGICAL_IMMUNITY,
    }
)


@dataclass(frozen=True, slots=True)
class ModifierAccumulator:
    """Running state threaded through the pipeline stages."""

    percent: float = 0.0
    multiplier: float = 1.0
    flat_bonus: float = 0.0


@dataclass(frozen=True, slots=True)
class ModifierResolution:
    category: ModifierCategory
    percent: float
    multiplier: float
    flat_bonus: float

    @property
    def factor(self) -> float:
        """Multiplier for benefit categories (production, power, income)."""
        return max(0.0, 1 + self.percent / 100) * self.multiplier

    @property
    def cost_factor(self) -> float:
        """Multiplier for cost categories; positive percentages reduce it."""
        return self.multiplier / max(0.01, 1 + self.percent / 100)


@dataclass(frozen=True, slots=True)
class StageInput:
    empire: Empire
    category: ModifierCategory
    context: str | None
    rules: RulesConfig
    opponent: Empire | None = None


Stage = Callable[[StageInput, ModifierAccumulator], ModifierAccumulator]


def race_stage(data: StageInput, acc: ModifierAccumulator) -> ModifierAccumulator:
    field_name = _RACE_FIELDS.get(data.category)
    if field_name is None:
        return acc
    value = getattr(RACE_MODIFIERS[data.empire.race], field_name)
    return replace(acc, percent=acc.percent + value)


def era_stage(data: StageInput, acc: ModifierAccumulator) -> ModifierAccumulator:
    field_name = _ERA_FIELDS.get(data.category)
    if field_name is None:
        return acc
    value = getattr(ERA_MODIFIERS[data.empire.era], field_name)
    return replace(acc, multiplier=acc.multiplier * (1 + value / 100))


def mastery_stage(data: StageInput, acc: ModifierAccumulator) -> ModifierAccumulator:
    action = _MASTERY_ACTIONS.get(data.category)
    if action is None:
        return acc
    level = data.empire.masteries.get(action, 0)
    return replace(acc, percent=acc.percent + mastery_bonus(level, data.rules))


def advisor_stage(data: StageInput, acc: ModifierAccumulator) -> ModifierAccumulator:
    percent = acc.percent
    multiplier = acc.multiplier
    flat = acc.flat_bonus
    category = data.category
    for advisor in data.empire.advisors:
        effect = advisor.effect
        if isinstance(effect, StatBonus):
            if category in _STAT_CATEGORIES.get(effect.kind, ()):
                percent += effect.magnitude * 100
            elif _REDUCTION_CATEGORIES.get(effect.kind) == category:
                multiplier *= max(0.0, 1 - effect.magnitude)
            else:
                percent += _situational_percent(effect, data)
        elif isinstance(effect, FlatBonus):
            if _FLAT_CATEGORIES.get(effect.kind) == category:
                flat += effect.amount
        elif isinstance(effect, ConditionalBonus):
            if effect.kind == EffectKind.BUILD_RATE:
                if category == C.BUILD_RATE:
                    flat += effect.magnitude
                elif category == C.BUILD_COST and effect.condition in BUILD_DISCOUNTS:
                    multiplier *= getattr(data.rules.buildings, BUILD_DISCOUNTS[effect.condition])
            else:
                percent += _conditional_percent(effect, data)
        elif isinstance(effect, (Flag, UnitSpecialist)):
            # Flags gate behaviour elsewhere; unit specialists adjust unit stats directly.
            continue
        else:  # pragma: no cover - exhaustive over AdvisorEffect
            raise TypeError(f"unknown advisor effect {effect!r}")
    return ModifierAccumulator(percent=percent, multiplier=multiplier, flat_bonus=flat)


def _situational_percent(effect: StatBonus, data: StageInput) -> float:
    """Percentage points from bonuses that depend on the empire's current state."""

    empire = data.empire
    category = data.category
    opponent = data.opponent
    kind = effect.kind
    if kind == EffectKind.PEASANT_CHAMPION and category == C.OFFENSE:
        return effect.magnitude * empire.peasants * 100
    if kind == EffectKind.DYNAMIC_OFFENSE and category == C.OFFENSE:
        return effect.magnitude * empire.attacks_this_round * 100
    if kind == EffectKind.SECOND_WIND and category in _ALL_STATS:
        missing = max(0, data.rules.economy.health_max - empire.health)
        return effect.magnitude * (missing // 10) * 100
    if kind == EffectKind.EARLY_BIRD and category in ACTION_CATEGORIES:
        return effect.magnitude * 100 if empire.actions_this_round == 0 else 0.0
    if kind == EffectKind.MULTI_MASTERY_SCALING and category in ACTION_CATEGORIES:
        return effect.magnitude * mastery_count(empire) * 100
    if opponent is None:
        return 0.0
    if kind == EffectKind.GRUDGE_KEEPER and category == C.OFFENSE:
        return effect.magnitude * 100 if opponent.id in empire.grudges else 0.0
    if kind == EffectKind.UNDERDOG and category in COMBAT_CATEGORIES:
        return effect.magnitude * 100 if empire.networth < opponent.networth else 0.0
    return 0.0


def _conditional_percent(effect: ConditionalBonus, data: StageInput) -> float:
    empire = data.empire
    category = data.category
    kind = effect.kind
    if kind == EffectKind.UNIT_PRODUCTION:
        if category == C.TROOP_PRODUCTION and effect.condition == data.context:
            return effect.magnitude * 100
    elif kind == EffectKind.MASTERY_SCALING:
        synergy = MASTERY_SYNERGIES.get(effect.condition)
        if synergy is not None and synergy[1] == category:
            return effect.magnitude * empire.masteries.get(synergy[0], 0) * 100
    elif kind == EffectKind.MULTI_MASTERY_THRESHOLD:
        minimum, categories = MASTERY_THRESHOLDS.get(effect.condition, (0, frozenset()))
        if category in categories and mastery_count(empire) >= minimum:
            return effect.magnitude * 100
    elif kind in _BUILDING_CATEGORIES:
        if _BUILDING_CATEGORIES[kind] == category:
            held = empire.buildings.count(BuildingType(effect.condition))
            return effect.magnitude * held * 100
    elif kind == EffectKind.AIRCRAFT_OFFENSE:
        if category == C.OFFENSE:
            return AIRCRAFT_ARMY_BONUS.get(effect.condition, 0.0) * 100
    return 0.0


def policy_stage(data: StageInput, acc: ModifierAccumulator) -> ModifierAccumulator:
    policies = data.empire.policies
    if data.category == C.BANK_INTEREST and has_flag(data.empire, EffectKind.DOUBLE_BANK_INTEREST):
        return replace(acc, multiplier=acc.multiplier * 2)
    if data.category == C.EXTRA_ATTACKS and Policy.FORCED_MARCH in policies:
        return replace(acc, multiplier=acc.multiplier * 2)
    return acc


PIPELINE: tuple[Stage, ...] = (race_stage, era_stage, mastery_stage, advisor_stage, policy_stage)


def resolve(
    empire: Empire,
    category: ModifierCategory,
    context: str | None = None,
    *,
    rules: RulesConfig = DEFAULT_RULES,
    opponent: Empire | None = None,
) -> ModifierResolution:
    """Run the pipeline for ``category`` and return the composed modifier.

    ``opponent`` is the empire on the other side of an attack or spell; bonuses
    that compare the two empires only apply when it is given.
    """

    data = StageInput(
        empire=empire, category=category, context=context, rules=rules, opponent=opponent
    )
    acc = ModifierAccumulator()
    for stage in PIPELINE:
        acc = stage(data, acc)
    return ModifierResolution(
        category=category,
        percent=acc.percent,
        multiplier=acc.multiplier,
        flat_bonus=acc.flat_bonus,
    )


def factor(empire: Empire, category: ModifierCategory, context: str | None = None) -> float:
    return resolve(empire, category, context).factor


def mastery_count(empire: Empire) -> int:
    """Number of distinct actions mastered to at least level one."""
    return sum(1 for level in empire.masteries.values() if level > 0)


def mastery_bonus(level: int, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Aggregate percentage bonus for a mastery level (tiered, capped)."""

    level = max(0, min(level, rules.draft.max_mastery_level))
    return min(sum(MASTERY_LEVEL_BONUS[:level]), rules.draft.mastery_cap_percent)


def effect_total(empire: Empire, kind: EffectKind) -> float:
    """Sum of magnitudes for advisor effects of ``kind`` outside the generic pipeline."""

    total = 0.0
    for advisor in empire.advisors:
        effect = advisor.effect
        if isinstance(effect, StatBonus) and effect.kind == kind:
            total += effect.magnitude
        elif isinstance(effect, FlatBonus) and effect.kind == kind:
            total += effect.amount
    return total


def has_flag(empire: Empire, kind: EffectKind) -> bool:
    """True when an advisor grants the flag or a policy unlocks it."""

    policy = _FLAG_POLICIES.get(kind)
    if policy is not None and policy in empire.policies:
        return True
    return any(
        isinstance(advisor.effect, Flag) and advisor.effect.kind == kind
        for advisor in empire.advisors
    )


def unit_stat_adjustment(empire: Empire, unit: TroopType) -> tuple[int, int]:
    """Offense and defense deltas granted to ``unit`` by unit specialists."""

    offense = 0
    defense = 0
    for advisor in empire.advisors:
        effect = advisor.effect
        if not isinstance(effect, UnitSpecialist):
            continue
        if unit in effect.boost_units:
            offense += effect.offense_bonus
        if unit in effect.nerf_units:
            defense -= effect.defense_penalty
    return offense, defense


def unit_offense_factor(empire: Empire, unit: TroopType) -> float:
    """Per-unit offense multiplier from advisors that favour one unit type."""

    bonus = 0.0
    for advisor in empire.advisors:
        effect = advisor.effect
        if (
            isinstance(effect, ConditionalBonus)
            and effect.kind == EffectKind.AIRCRAFT_OFFENSE
            and unit == TroopType.AIR
        ):
            bonus += effect.magnitude
    return 1 + bonus
