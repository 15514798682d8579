"""Round transitions and the ordered bot phase."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace

from .actions import apply_action
from .bank import apply_interest
from .defeat import mark_defeat
from .empire import clear_expired_effects, clone, ensure_active, refresh_networth
from .enums import DefeatReason, GamePhase, ModifierCategory, TurnAction
from .errors import OperationError, RuleViolation, gated
from .models import ActionParams, Empire, EmpireID, GameContext, GameRound, TurnActionResult
from .modifiers import resolve
from .rules_config import DEFAULT_RULES, RulesConfig

logger = logging.getLogger(__name__)

PHASE_SEQUENCE: tuple[GamePhase, ...] = (GamePhase.PLAYER, GamePhase.SHOP, GamePhase.BOT)


@dataclass(frozen=True, slots=True)
class RoundAdvance:
    """Outcome of moving one empire into the next round."""

    success: bool
    empire: Empire
    round: int
    bank_interest: int = 0
    loan_interest: int = 0
    turns_granted: int = 0
    cleared_effects: tuple[str, ...] = ()
    defeat: DefeatReason | None = None
    error: OperationError | None = None


@dataclass(frozen=True, slots=True)
class BotOrder:
    """An externally chosen bot action; ``target_id`` names the empire it targets."""

    action: TurnAction
    turns: int = 1
    params: ActionParams | None = None
    target_id: EmpireID | None = None


@dataclass(frozen=True, slots=True)
class BotPhaseResult:
    bots: list[Empire]
    player: Empire
    results: dict[EmpireID, list[TurnActionResult]] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Empire round transition


def round_turns(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Turns granted at the start of a round, banked bonus turns included."""

    extra = resolve(empire, ModifierCategory.EXTRA_TURNS, rules=rules).flat_bonus
    return rules.rounds.turns_per_round + int(extra) + empire.bonus_turns


def advance_round(
    empire: Empire, current_round: int, rules: RulesConfig = DEFAULT_RULES
) -> RoundAdvance:
    """Close ``current_round`` for ``empire`` and prepare it for the next one.

    Interest accrues once, per-round counters reset and turns refill.
    Troops, buildings and land are left as they are.
    """

    working = clone(empire)
    next_round = current_round + 1
    try:
        ensure_active(working)
    except RuleViolation as exc:
        return RoundAdvance(
            success=False, empire=empire, round=current_round, error=exc.to_error()
        )

    bank_interest, loan_interest = apply_interest(working, rules)
    turns = round_turns(working, rules)
    working.turns_remaining = turns
    working.bonus_turns = 0
    working.attacks_this_round = 0
    working.spells_this_round = 0
    working.actions_this_round = 0
    cleared = clear_expired_effects(working, next_round)

    refresh_networth(working, rules)
    defeat = mark_defeat(working, rules)
    logger.debug(
        "empire %s entered round %d: turns=%d savings+%d loan+%d",
        working.id,
        next_round,
        turns,
        bank_interest,
        loan_interest,
    )
    return RoundAdvance(
        success=True,
        empire=working,
        round=next_round,
        bank_interest=bank_interest,
        loan_interest=loan_interest,
        turns_granted=turns,
        cleared_effects=tuple(cleared),
        defeat=defeat,
    )


# ---------------------------------------------------------------------------
# Game phases


def next_phase(game_round: GameRound, rules: RulesConfig = DEFAULT_RULES) -> GameRound:
    """Return the round and phase that follow ``game_round``."""

    if game_round.is_complete:
        raise gated("The game is already complete")
    index = PHASE_SEQUENCE.index(game_round.phase)
    if index + 1 < len(PHASE_SEQUENCE):
        return replace(game_round, phase=PHASE_SEQUENCE[index + 1])
    if game_round.number >= rules.rounds.total_rounds:
        logger.info("game complete after round %d", game_round.number)
        return replace(game_round, phase=GamePhase.COMPLETE)
    logger.info("round %d begins", game_round.number + 1)
    return GameRound(number=game_round.number + 1, phase=GamePhase.PLAYER)


# ---------------------------------------------------------------------------
# Bot phase


def resolve_bot_phase(
    bots: Iterable[Empire],
    player: Empire,
    orders: Mapping[EmpireID, Sequence[BotOrder]],
    context: GameContext | None = None,
) -> BotPhaseResult:
    """Apply each bot's chosen orders, one empire at a time in id order.

    An order's target is looked up among the current states, so later bots
    see what earlier bots did.
    """

    context = context or GameContext(phase=GamePhase.BOT)
    states: dict[EmpireID, Empire] = {bot.id: bot for bot in bots}
    states[player.id] = player
    results: dict[EmpireID, list[TurnActionResult]] = {}

    for bot_id in sorted(bot_id for bot_id in states if bot_id != player.id):
        applied = results.setdefault(bot_id, [])
        for order in orders.get(bot_id, ()):
            params = order.params or ActionParams()
            if order.target_id is not None:
                target = states.get(order.target_id)
                params = replace(params, target=target)
            result = apply_action(states[bot_id], order.action, order.turns, params, context)
            applied.append(result)
            states[bot_id] = result.empire
            if result.target is not None:
                states[result.target.id] = result.target
        logger.debug("bot %s resolved %d orders", bot_id, len(applied))

    return BotPhaseResult(
        bots=[states[bot_id] for bot_id in sorted(states) if bot_id != player.id],
        player=states[player.id],
        results=results,
    )
