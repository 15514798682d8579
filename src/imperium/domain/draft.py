"""Shop-phase draft: advisors, masteries, policies and one-shot edicts.

Options are drawn from a seed so a draft can be regenerated exactly.  The
empire picks at most one option per draft; rerolling costs a share of the
empire's gold.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from imperium.utils.rng import random_choice, random_int, weighted_choice

from .catalog import ADVISORS, ADVISORS_BY_ID, EDICTS, EDICTS_BY_ID, MASTERIES, POLICIES
from .empire import clone, ensure_active, refresh_networth, shift_era
from .enums import COMBAT_UNITS, DraftKind, EdictKind, MasteryAction, Policy, Rarity, TroopType
from .errors import OperationError, RuleViolation, gated, invalid
from .models import Empire
from .rules_config import DEFAULT_RULES, RulesConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DraftOption:
    kind: DraftKind
    item_id: str
    name: str
    rarity: Rarity
    level: int | None = None


@dataclass(frozen=True, slots=True)
class DraftOutcome:
    success: bool
    empire: Empire
    option: DraftOption | None = None
    gold_change: int = 0
    error: OperationError | None = None
    rival: Empire | None = None


def rarity_weights(rules: RulesConfig = DEFAULT_RULES) -> dict[Rarity, int]:
    draft = rules.draft
    return {
        Rarity.COMMON: draft.weight_common,
        Rarity.UNCOMMON: draft.weight_uncommon,
        Rarity.RARE: draft.weight_rare,
        Rarity.LEGENDARY: draft.weight_legendary,
    }


def advisor_capacity(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    return rules.draft.base_advisor_slots + empire.advisor_bonus_slots


# ---------------------------------------------------------------------------
# Generation


def generate_draft_options(
    empire: Empire, seed: str, rules: RulesConfig = DEFAULT_RULES
) -> list[DraftOption]:
    """Draw 1-2 advisor options and 2-3 mastery, policy or edict options.

    Advisors already owned, or already offered in this draft, are skipped,
    so fewer advisor options can come back when the roll repeats.
    """

    draft = rules.draft
    advisor_slots = random_int(
        f"{seed}:advisor_slots", draft.advisor_options_min, draft.advisor_options_max
    )["value"]
    other_slots = random_int(
        f"{seed}:other_slots", draft.other_options_min, draft.other_options_max
    )["value"]

    options: list[DraftOption] = []
    seen = {advisor.id for advisor in empire.advisors}
    for slot in range(advisor_slots):
        option = _advisor_option(f"{seed}:advisor:{slot}", seen, rules)
        if option is not None:
            seen.add(option.item_id)
            options.append(option)

    for slot in range(other_slots):
        options.append(_other_option(empire, f"{seed}:other:{slot}", rules))
    return options


def _advisor_option(seed: str, owned: set[str], rules: RulesConfig) -> DraftOption | None:
    rarity = weighted_choice(f"{seed}:rarity", rarity_weights(rules))["choice"]
    pool = [advisor for advisor in ADVISORS if advisor.rarity == rarity]
    advisor = random_choice(f"{seed}:pick", pool)["choice"]
    if advisor.id in owned:
        return None
    return DraftOption(DraftKind.ADVISOR, advisor.id, advisor.name, advisor.rarity)


def _other_option(empire: Empire, seed: str, rules: RulesConfig) -> DraftOption:
    kind = weighted_choice(
        f"{seed}:kind", {DraftKind.MASTERY: 40, DraftKind.POLICY: 20, DraftKind.EDICT: 40}
    )["choice"]

    if kind == DraftKind.MASTERY:
        masteries = [
            action
            for action in MASTERIES
            if empire.masteries.get(action, 0) < rules.draft.max_mastery_level
        ]
        if masteries:
            action = random_choice(f"{seed}:pick", masteries)["choice"]
            level = empire.masteries.get(action, 0) + 1
            rarity = Rarity.COMMON if level <= 3 else Rarity.UNCOMMON
            return DraftOption(
                DraftKind.MASTERY, str(action), MASTERIES[action].name, rarity, level=level
            )
    elif kind == DraftKind.POLICY:
        policies = [policy for policy in POLICIES if str(policy.id) not in empire.policies]
        if policies:
            policy = random_choice(f"{seed}:pick", policies)["choice"]
            return DraftOption(DraftKind.POLICY, str(policy.id), policy.name, policy.rarity)

    rarity = weighted_choice(f"{seed}:rarity", rarity_weights(rules))["choice"]
    edicts = [edict for edict in EDICTS if _edict_allowed(empire, edict.kind)]
    pool = [edict for edict in edicts if edict.rarity == rarity] or edicts
    edict = random_choice(f"{seed}:edict", pool)["choice"]
    return DraftOption(DraftKind.EDICT, edict.id, edict.name, edict.rarity)


def _edict_allowed(empire: Empire, kind: EdictKind) -> bool:
    if kind == EdictKind.ADVANCE_ERA:
        return shift_era(empire.era, 1) is not None
    return True


# ---------------------------------------------------------------------------
# Selection


def apply_draft_selection(
    empire: Empire,
    option: DraftOption,
    rules: RulesConfig = DEFAULT_RULES,
    rivals: Iterable[Empire] = (),
) -> DraftOutcome:
    """Apply the picked option to a copy of ``empire``.

    Edicts that take from another empire pick their victim from ``rivals``; the
    changed rival comes back on the outcome.
    """

    working = clone(empire)
    try:
        ensure_active(working)
        rival = _apply_option(working, option, rules, rivals)
    except RuleViolation as exc:
        return DraftOutcome(success=False, empire=empire, option=option, error=exc.to_error())

    refresh_networth(working, rules)
    logger.debug("empire %s drafted %s %s", working.id, option.kind, option.item_id)
    if rival is not None:
        refresh_networth(rival, rules)
    return DraftOutcome(success=True, empire=working, option=option, rival=rival)


def _apply_option(
    empire: Empire, option: DraftOption, rules: RulesConfig, rivals: Iterable[Empire]
) -> Empire | None:
    if option.kind == DraftKind.ADVISOR:
        advisor = ADVISORS_BY_ID.get(option.item_id)
        if advisor is None:
            raise invalid(f"Unknown advisor {option.item_id!r}")
        if any(held.id == advisor.id for held in empire.advisors):
            raise gated(f"{advisor.name} is already employed")
        capacity = advisor_capacity(empire, rules)
        if len(empire.advisors) >= capacity:
            raise gated(f"Cannot have more than {capacity} advisors. Dismiss one first.")
        empire.advisors.append(advisor)
    elif option.kind == DraftKind.MASTERY:
        try:
            action = MasteryAction(option.item_id)
        except ValueError as exc:
            raise invalid(f"Unknown mastery {option.item_id!r}") from exc
        level = empire.masteries.get(action, 0)
        if level >= rules.draft.max_mastery_level:
            raise gated(f"{MASTERIES[action].name} is already at its highest level")
        empire.masteries[action] = level + 1
    elif option.kind == DraftKind.POLICY:
        try:
            policy = Policy(option.item_id)
        except ValueError as exc:
            raise invalid(f"Unknown policy {option.item_id!r}") from exc
        if str(policy) in empire.policies:
            raise gated(f"Policy {policy} is already enacted")
        empire.policies.add(str(policy))
    elif option.kind == DraftKind.EDICT:
        return _apply_edict(empire, option.item_id, rules, rivals)
    else:
        raise invalid(f"Unknown draft option {option.kind!r}")
    return None


def _apply_edict(
    empire: Empire, edict_id: str, rules: RulesConfig, rivals: Iterable[Empire]
) -> Empire | None:
    edict = EDICTS_BY_ID.get(edict_id)
    if edict is None:
        raise invalid(f"Unknown edict {edict_id!r}")

    value = edict.value
    if edict.kind == EdictKind.GOLD:
        empire.gold += int(value)
    elif edict.kind == EdictKind.FOOD:
        empire.food += int(value)
    elif edict.kind == EdictKind.RUNES:
        empire.runes += int(value)
    elif edict.kind == EdictKind.LAND:
        empire.land += int(value)
        empire.buildings.freeland += int(value)
    elif edict.kind == EdictKind.HEALTH:
        empire.health = min(rules.economy.health_max, int(value))
    elif edict.kind == EdictKind.CONSCRIPT:
        conscripted = math.floor(empire.peasants * value)
        empire.peasants -= conscripted
        empire.troops.adjust(TroopType.INFANTRY, conscripted)
    elif edict.kind == EdictKind.TROOPS:
        for unit in COMBAT_UNITS:
            empire.troops.adjust(unit, int(value))
    elif edict.kind == EdictKind.ADVANCE_ERA:
        era = shift_era(empire.era, int(value))
        if era is None:
            raise gated(f"Already in {empire.era} era")
        empire.era = era
    elif edict.kind == EdictKind.STEAL_GOLD:
        return _plunder(empire, value, rivals)
    else:
        raise invalid(f"Unsupported edict {edict.kind}")
    return None


def _plunder(empire: Empire, share: float, rivals: Iterable[Empire]) -> Empire | None:
    """Take ``share`` of the gold held by the richest active rival."""

    candidates = [r for r in rivals if r.id != empire.id and not r.is_defeated]
    if not candidates:
        return None
    rival = clone(max(candidates, key=lambda r: r.gold))
    stolen = math.floor(rival.gold * share)
    rival.gold -= stolen
    empire.gold += stolen
    logger.info("empire %s plundered %d gold from %s", empire.id, stolen, rival.id)
    return rival


def dismiss_advisor(
    empire: Empire, advisor_id: str, rules: RulesConfig = DEFAULT_RULES
) -> DraftOutcome:
    working = clone(empire)
    try:
        ensure_active(working)
        remaining = [advisor for advisor in working.advisors if advisor.id != advisor_id]
        if len(remaining) == len(working.advisors):
            raise invalid("Advisor not found")
    except RuleViolation as exc:
        return DraftOutcome(success=False, empire=empire, error=exc.to_error())

    working.advisors = remaining
    refresh_networth(working, rules)
    return DraftOutcome(success=True, empire=working)


# ---------------------------------------------------------------------------
# Rerolls


def reroll_cost(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    return math.floor(empire.gold * rules.draft.reroll_cost_share)


def reroll_draft(
    empire: Empire,
    seed: str,
    rerolls_used: int,
    rules: RulesConfig = DEFAULT_RULES,
) -> tuple[DraftOutcome, list[DraftOption]]:
    """Pay for a fresh set of options; ``rerolls_used`` counts earlier rerolls."""

    working = clone(empire)
    cost = reroll_cost(working, rules)
    try:
        ensure_active(working)
        if rerolls_used >= rules.draft.max_rerolls:
            raise gated(f"No rerolls left ({rules.draft.max_rerolls} per draft)")
    except RuleViolation as exc:
        return DraftOutcome(success=False, empire=empire, error=exc.to_error()), []

    working.gold -= cost
    refresh_networth(working, rules)
    options = generate_draft_options(working, f"{seed}:reroll:{rerolls_used + 1}", rules)
    return DraftOutcome(success=True, empire=working, gold_change=-cost), options
