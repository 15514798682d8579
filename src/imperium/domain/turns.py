"""Turn scheduler: spends a turn budget one economy turn at a time.

Each iteration yields a :class:`TurnOutcome`.  The loop continues while
the outcome is ``CONTINUE``; a food or loan shortfall is detected before
the offending turn is applied and ends the batch with ``STOP_FOOD`` or
``STOP_LOAN``; ``EXHAUSTED`` means the requested turns (or the round's
budget) ran out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .enums import COMBAT_UNITS, StopReason, TroopType, TurnAction, TurnOutcome
from .errors import OperationError
from .ledger import TurnEconomy, apply_turn, check_turn, compute_turn, grant_explored_land
from .models import Empire, TurnActionResult
from .rules_config import DEFAULT_RULES, RulesConfig

logger = logging.getLogger(__name__)

# Actions whose turns earn the 25% action bonus.
BONUS_ACTIONS: frozenset[TurnAction] = frozenset(
    {TurnAction.FARM, TurnAction.CASH, TurnAction.MEDITATE, TurnAction.INDUSTRY}
)

STOP_REASONS = {
    TurnOutcome.STOP_FOOD: StopReason.FOOD,
    TurnOutcome.STOP_LOAN: StopReason.LOAN,
}


@dataclass(slots=True)
class TurnBatch:
    """Running totals of the turns applied so far."""

    turns_spent: int = 0
    income: int = 0
    expenses: int = 0
    food_production: int = 0
    food_consumption: int = 0
    rune_change: int = 0
    loan_payment: int = 0
    land_gained: int = 0
    troops_produced: dict[TroopType, int] = field(default_factory=dict)
    stopped_early: StopReason | None = None

    def record(self, economy: TurnEconomy) -> None:
        self.turns_spent += 1
        self.income += economy.income
        self.expenses += economy.expenses
        self.food_production += economy.food_production
        self.food_consumption += economy.food_consumption
        self.rune_change += economy.rune_production
        self.loan_payment += economy.loan_payment
        for unit in COMBAT_UNITS:
            self.troops_produced[unit] = (
                self.troops_produced.get(unit, 0) + economy.troops_produced.get(unit, 0)
            )
        self.troops_produced[TroopType.WIZARD] = (
            self.troops_produced.get(TroopType.WIZARD, 0) + economy.wizards_trained
        )


class TurnScheduler:
    """Applies up to ``requested`` turns of ``action`` to ``empire`` in place."""

    def __init__(
        self,
        empire: Empire,
        action: TurnAction,
        requested: int,
        rules: RulesConfig = DEFAULT_RULES,
    ) -> None:
        self.empire = empire
        self.action = action
        self.requested = requested
        self.rules = rules
        self.batch = TurnBatch()

    def step(self) -> TurnOutcome:
        """Apply one turn, or report why no further turn will be applied."""

        if self.batch.turns_spent >= self.requested or self.empire.turns_remaining <= 0:
            return TurnOutcome.EXHAUSTED

        bonus = self.action if self.action in BONUS_ACTIONS else None
        economy = compute_turn(self.empire, bonus, self.rules)
        outcome = check_turn(self.empire, economy, self.rules)
        if outcome is not TurnOutcome.CONTINUE:
            self.batch.stopped_early = STOP_REASONS[outcome]
            return outcome

        apply_turn(self.empire, economy, self.rules)
        self.batch.record(economy)
        self.empire.turns_remaining -= 1
        if self.action == TurnAction.EXPLORE:
            self.batch.land_gained += grant_explored_land(self.empire, self.rules)
        return TurnOutcome.CONTINUE

    def run(self) -> TurnBatch:
        outcome = self.step()
        while outcome is TurnOutcome.CONTINUE:
            outcome = self.step()
        logger.debug(
            "empire %s spent %d/%d %s turns (%s)",
            self.empire.id,
            self.batch.turns_spent,
            self.requested,
            self.action,
            outcome,
        )
        return self.batch


def run_turns(
    empire: Empire, action: TurnAction, turns: int, rules: RulesConfig = DEFAULT_RULES
) -> TurnBatch:
    return TurnScheduler(empire, action, turns, rules).run()


# ---------------------------------------------------------------------------
# Result construction


def batch_result(
    action: TurnAction, empire: Empire, batch: TurnBatch, **extra: Any
) -> TurnActionResult:
    """Successful result carrying the batch totals and the final empire."""

    return TurnActionResult(
        success=True,
        action=action,
        empire=empire,
        turns_spent=batch.turns_spent,
        turns_remaining=empire.turns_remaining,
        income=batch.income,
        expenses=batch.expenses,
        food_production=batch.food_production,
        food_consumption=batch.food_consumption,
        rune_change=batch.rune_change,
        troops_produced=dict(batch.troops_produced),
        loan_payment=batch.loan_payment,
        stopped_early=batch.stopped_early,
        land_gained=batch.land_gained,
        **extra,
    )


def rejected_result(
    action: TurnAction,
    empire: Empire,
    error: OperationError | None = None,
    stopped_early: StopReason | None = None,
) -> TurnActionResult:
    """Nothing was applied; ``empire`` is the caller's untouched input."""

    return TurnActionResult(
        success=False,
        action=action,
        empire=empire,
        turns_remaining=empire.turns_remaining,
        stopped_early=stopped_early,
        defeat=empire.defeat,
        error=error,
    )
