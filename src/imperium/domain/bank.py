"""Savings, loans and per-round interest."""

from __future__ import annotations

import math

from .empire import clone, ensure_active, refresh_networth
from .enums import BankOperation, EffectKind, ModifierCategory
from .errors import RuleViolation, insufficient, invalid
from .models import BankInfo, BankOutcome, BankTransaction, Empire
from .modifiers import has_flag, resolve
from .rules_config import DEFAULT_RULES, RulesConfig

# ---------------------------------------------------------------------------
# Limits and rates


def max_loan(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    return math.floor(empire.networth * rules.bank.loan_networth_factor)


def max_savings(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    return math.floor(empire.networth * rules.bank.savings_networth_factor)


def emergency_loan_limit(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Loan balance beyond which turns halt and the empire is bankrupt."""

    return max_loan(empire, rules) * rules.bank.emergency_loan_factor


def savings_rate(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> float:
    """Per-round savings rate: base, doubled by charter effects, plus flat advisor bonuses."""

    resolution = resolve(empire, ModifierCategory.BANK_INTEREST, rules=rules)
    return rules.bank.savings_rate * resolution.multiplier + resolution.percent / 100


def loan_rate(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> float:
    if has_flag(empire, EffectKind.ZERO_INTEREST):
        return 0.0
    return rules.bank.loan_rate


def bank_info(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> BankInfo:
    loan_cap = max_loan(empire, rules)
    savings_cap = max_savings(empire, rules)
    return BankInfo(
        savings=empire.savings,
        loan=empire.loan,
        gold=empire.gold,
        max_loan=loan_cap,
        available_loan=max(0, loan_cap - empire.loan),
        max_savings=savings_cap,
        available_savings=max(0, savings_cap - empire.savings),
        savings_rate=savings_rate(empire, rules),
        loan_rate=loan_rate(empire, rules),
    )


# ---------------------------------------------------------------------------
# Transactions


def transact_bank(
    empire: Empire,
    transaction: BankTransaction,
    rules: RulesConfig = DEFAULT_RULES,
) -> BankOutcome:
    """Move gold between hand, savings and loan; all or nothing."""

    working = clone(empire)
    try:
        ensure_active(working)
        _apply_transaction(working, transaction, rules)
    except RuleViolation as exc:
        return BankOutcome(
            success=False,
            empire=empire,
            bank=bank_info(empire, rules),
            error=exc.to_error(),
        )

    refresh_networth(working, rules)
    return BankOutcome(success=True, empire=working, bank=bank_info(working, rules))


def _apply_transaction(empire: Empire, transaction: BankTransaction, rules: RulesConfig) -> None:
    amount = transaction.amount
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise invalid("Amount must be a whole number")
    if amount < 1:
        raise invalid("Amount must be at least 1")

    operation = transaction.operation
    if operation == BankOperation.DEPOSIT:
        if amount > empire.gold:
            raise insufficient("Insufficient gold")
        available = max(0, max_savings(empire, rules) - empire.savings)
        if amount > available:
            raise insufficient(f"Cannot deposit more than {available:,} gold")
        empire.gold -= amount
        empire.savings += amount
    elif operation == BankOperation.WITHDRAW:
        if amount > empire.savings:
            raise insufficient("Insufficient savings")
        empire.savings -= amount
        empire.gold += amount
    elif operation == BankOperation.TAKE_LOAN:
        available = max(0, max_loan(empire, rules) - empire.loan)
        if amount > available:
            raise insufficient(f"Cannot borrow more than {available:,} gold")
        empire.loan += amount
        empire.gold += amount
    elif operation == BankOperation.PAY_LOAN:
        if amount > empire.gold:
            raise insufficient("Insufficient gold")
        if amount > empire.loan:
            raise insufficient("Amount exceeds loan balance")
        empire.gold -= amount
        empire.loan -= amount
    else:
        raise invalid(f"Unknown bank operation {operation!r}")


# ---------------------------------------------------------------------------
# Interest


def apply_interest(empire: Empire, rules: RulesConfig = DEFAULT_RULES) -> tuple[int, int]:
    """Accrue one round of savings and loan interest; returns both amounts."""

    savings_interest = 0
    if empire.savings > 0:
        savings_interest = math.floor(empire.savings * savings_rate(empire, rules))
        empire.savings += savings_interest

    loan_interest = 0
    if empire.loan > 0:
        loan_interest = math.floor(empire.loan * loan_rate(empire, rules))
        empire.loan += loan_interest

    return savings_interest, loan_interest
