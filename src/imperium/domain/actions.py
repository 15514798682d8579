"""Single entry point that routes a submitted action to its rules."""

from __future__ import annotations

import logging
from dataclasses import replace

from .buildings import BuildPlan, apply_build, apply_demolish, plan_build, plan_demolish
from .combat import resolve_combat
from .defeat import mark_defeat
from .empire import clone, ensure_active, refresh_networth, validate_industry, validate_tax_rate
from .enums import ECONOMIC_ACTIONS, TurnAction
from .errors import RuleViolation, gated, invalid
from .models import ActionParams, Empire, GameContext, TurnActionResult
from .rules_config import RulesConfig
from .spells import cast_spell
from .turns import TurnBatch, batch_result, rejected_result, run_turns

logger = logging.getLogger(__name__)

SETTING_ACTIONS = frozenset({TurnAction.SET_TAX, TurnAction.SET_INDUSTRY})


def apply_action(
    empire: Empire,
    action: TurnAction,
    turns: int = 1,
    params: ActionParams | None = None,
    context: GameContext | None = None,
) -> TurnActionResult:
    """Resolve ``action`` for ``empire`` and report what happened.

    Economic actions run up to ``turns`` economy turns.  Build and demolish
    spend the turns their construction rate requires.  Attacks and spells
    always spend two turns and need ``params.target`` / ``params.spell``.
    Setting actions cost no turns.  Rejections come back as a failed result
    holding the untouched input empire.
    """

    params = params or ActionParams()
    context = context or GameContext()
    try:
        action = TurnAction(action)
    except ValueError:
        error = invalid(f"Unknown action {action!r}").to_error()
        return rejected_result(TurnAction.EXPLORE, empire, error=error)

    if action == TurnAction.ATTACK:
        if params.target is None:
            error = invalid("Attacks need a target").to_error()
            return rejected_result(action, empire, error=error)
        return resolve_combat(empire, params.target, params.attack_type, context).result
    if action == TurnAction.SPELL:
        if params.spell is None:
            error = invalid("Choose a spell to cast").to_error()
            return rejected_result(action, empire, error=error)
        return cast_spell(empire, params.spell, context, params.target).result

    rules = context.rules
    working = clone(empire)
    try:
        ensure_active(working)
        if action in SETTING_ACTIONS:
            _apply_setting(working, action, params)
            refresh_networth(working, rules)
            return batch_result(action, working, TurnBatch())
        if action in ECONOMIC_ACTIONS:
            _check_turns(working, turns)
            batch = run_turns(working, action, turns, rules)
            built = {}
        else:
            batch, built = _construct(working, action, params, rules)
    except RuleViolation as exc:
        logger.debug("empire %s %s rejected: %s", empire.id, action, exc.reason)
        return rejected_result(action, empire, error=exc.to_error())

    working.actions_this_round += 1
    refresh_networth(working, rules)
    defeat = mark_defeat(working, rules)
    return batch_result(action, working, batch, buildings_constructed=built, defeat=defeat)


def _check_turns(empire: Empire, turns: int) -> None:
    if not isinstance(turns, int) or isinstance(turns, bool) or turns < 1:
        raise invalid("Turns must be a positive whole number")
    if empire.turns_remaining <= 0:
        raise gated("No turns remaining this round")


def _apply_setting(empire: Empire, action: TurnAction, params: ActionParams) -> None:
    if action == TurnAction.SET_TAX:
        if params.tax_rate is None:
            raise invalid("Provide a tax rate")
        validate_tax_rate(params.tax_rate)
        empire.tax_rate = params.tax_rate
        return
    if params.industry is None:
        raise invalid("Provide an industry allocation")
    validate_industry(params.industry)
    empire.industry = replace(params.industry)


def _construct(
    empire: Empire, action: TurnAction, params: ActionParams, rules: RulesConfig
) -> tuple[TurnBatch, dict]:
    """Build or demolish, spending the turns the construction rate needs.

    Build gold is paid before the turns run; a demolition refund arrives
    after them.  Buildings stay put even if the turns stop early.
    """

    plan: BuildPlan
    if action == TurnAction.BUILD:
        plan = plan_build(empire, params.build, rules)
    elif action == TurnAction.DEMOLISH:
        plan = plan_demolish(empire, params.demolish, rules)
    else:
        raise invalid(f"{action} is not a construction action")
    if empire.turns_remaining < plan.turns:
        raise gated(f"Not enough turns: {plan.total} buildings need {plan.turns}")

    if action == TurnAction.BUILD:
        apply_build(empire, plan)
        batch = run_turns(empire, action, plan.turns, rules)
        return batch, dict(plan.counts)
    batch = run_turns(empire, action, plan.turns, rules)
    apply_demolish(empire, plan)
    return batch, {kind: -count for kind, count in plan.counts.items()}
