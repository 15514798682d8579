"""Construction and demolition costs, build rate and land bookkeeping."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass

from .enums import BuildingType, ModifierCategory
from .errors import insufficient, invalid
from .models import Empire
from .modifiers import resolve
from .rules_config import DEFAULT_RULES, RulesConfig


@dataclass(frozen=True, slots=True)
class BuildPlan:
    """A validated build or demolish request."""

    counts: dict[BuildingType, int]
    total: int
    gold: int
    turns: int


def base_cost(land: int, rules: RulesConfig = DEFAULT_RULES) -> float:
    return rules.buildings.base_cost + land * rules.buildings.land_multiplier


def cost_per_building(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Discounted price of one building at the empire's current land."""

    resolution = resolve(empire, ModifierCategory.BUILD_COST, rules=rules)
    return math.floor(base_cost(empire.land, rules) * resolution.cost_factor)


def demolish_refund(land: int, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Refund per demolished building; never adjusted by cost modifiers."""

    return math.floor(base_cost(land, rules) * rules.buildings.demolish_refund)


def build_rate(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    bonus = resolve(empire, ModifierCategory.BUILD_RATE, rules=rules).flat_bonus
    return max(1, math.floor(empire.land / rules.buildings.acres_per_build_slot + bonus))


def turns_required(empire: Empire, count: int, rules: RulesConfig = DEFAULT_RULES) -> int:
    rate = build_rate(empire, rules)
    return min(rules.rounds.turns_per_round, max(1, math.ceil(count / rate)))


def _normalize(request: Mapping[BuildingType, int]) -> dict[BuildingType, int]:
    counts: dict[BuildingType, int] = {}
    for key, count in request.items():
        try:
            kind = BuildingType(key)
        except ValueError as exc:
            raise invalid(f"Unknown building type {key!r}") from exc
        if not isinstance(count, int) or isinstance(count, bool):
            raise invalid(f"Building count for {kind} must be a whole number")
        if count < 0:
            raise invalid(f"Building count for {kind} cannot be negative")
        if count:
            counts[kind] = counts.get(kind, 0) + count
    if not counts:
        raise invalid("Request at least one building")
    return counts


def plan_build(
    empire: Empire, request: Mapping[BuildingType, int], rules: RulesConfig = DEFAULT_RULES
) -> BuildPlan:
    counts = _normalize(request)
    total = sum(counts.values())
    if total > empire.buildings.freeland:
        raise insufficient(f"Only {empire.buildings.freeland} acres of free land available")
    gold = cost_per_building(empire, rules) * total
    if gold > empire.gold:
        raise insufficient(f"Not enough gold: {total} buildings cost {gold:,}")
    turns = turns_required(empire, total, rules)
    return BuildPlan(counts=counts, total=total, gold=gold, turns=turns)


def plan_demolish(
    empire: Empire, request: Mapping[BuildingType, int], rules: RulesConfig = DEFAULT_RULES
) -> BuildPlan:
    counts = _normalize(request)
    for kind, count in counts.items():
        owned = empire.buildings.count(kind)
        if count > owned:
            raise insufficient(f"Cannot demolish {count} {kind}, only {owned} owned")
    total = sum(counts.values())
    refund = demolish_refund(empire.land, rules) * total
    turns = turns_required(empire, total, rules)
    return BuildPlan(counts=counts, total=total, gold=refund, turns=turns)


def apply_build(empire: Empire, plan: BuildPlan) -> None:
    empire.gold -= plan.gold
    for kind, count in plan.counts.items():
        empire.buildings.adjust(kind, count)
    empire.buildings.freeland -= plan.total


def apply_demolish(empire: Empire, plan: BuildPlan) -> None:
    for kind, count in plan.counts.items():
        empire.buildings.adjust(kind, -count)
    empire.buildings.freeland += plan.total
    empire.gold += plan.gold
