"""Terminal conditions for an empire."""

from __future__ import annotations

import logging

from .bank import emergency_loan_limit
from .empire import clone
from .enums import DefeatReason
from .models import Empire
from .rules_config import DEFAULT_RULES, RulesConfig

logger = logging.getLogger(__name__)


def evaluate_defeat(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> DefeatReason | None:
    """First matching defeat reason, in priority order, or None."""

    if empire.defeat is not None:
        return empire.defeat
    if empire.land <= 0:
        return DefeatReason.NO_LAND
    if empire.peasants <= 0:
        return DefeatReason.NO_PEASANTS
    if empire.loan > emergency_loan_limit(empire, rules):
        return DefeatReason.EXCESSIVE_LOAN
    return None


def mark_defeat(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> DefeatReason | None:
    """Record a newly reached defeat on ``empire``; returns the reason, if any."""

    reason = evaluate_defeat(empire, rules)
    if reason is not None and empire.defeat is None:
        empire.defeat = reason
        logger.info("empire %s (%s) defeated: %s", empire.id, empire.name, reason)
    return reason


def abandon(empire: Empire) -> Empire:
    """Copy of ``empire`` marked abandoned; an earlier defeat takes precedence."""

    abandoned = clone(empire)
    if abandoned.defeat is None:
        abandoned.defeat = DefeatReason.ABANDONED
        logger.info("empire %s (%s) abandoned", abandoned.id, abandoned.name)
    return abandoned
