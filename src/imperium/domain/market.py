"""Phase-dependent market prices, shop stock and trades."""

from __future__ import annotations

import copy
import math

from imperium.utils.rng import seeded_random

from .empire import clone, ensure_active, refresh_networth
from .enums import EffectKind, GamePhase, MarketGood, ModifierCategory, TradeSide
from .errors import RuleViolation, gated, insufficient, invalid
from .models import (
    Empire,
    MarketOutcome,
    MarketPrices,
    MarketState,
    MarketTransaction,
    ShopStock,
)
from .modifiers import effect_total, resolve
from .rules_config import DEFAULT_RULES, RulesConfig
from .tables import GOOD_TROOPS, PRIVATE_MARKET, TROOP_COSTS

# ---------------------------------------------------------------------------
# Prices


def private_market_prices() -> MarketPrices:
    """Fixed player-phase prices before empire modifiers."""

    return MarketPrices(
        phase=GamePhase.PLAYER,
        buy={good: price.buy for good, price in PRIVATE_MARKET.items()},
        sell={good: price.sell for good, price in PRIVATE_MARKET.items()},
    )


def generate_shop_prices(seed: str, rules: RulesConfig = DEFAULT_RULES) -> MarketPrices:
    """Shop-phase prices fluctuating around the base values.

    Food and rune prices move up to ``price_fluctuation`` either way; the
    troop multipliers move half as far.
    """

    market = rules.market
    rng = seeded_random(seed)

    def fluctuate(base: float, spread: float) -> float:
        return base * (1 + (rng.random() - 0.5) * 2 * spread)

    food_buy = math.floor(fluctuate(market.shop_food_buy, market.price_fluctuation))
    food_sell = math.floor(fluctuate(market.shop_food_sell, market.price_fluctuation))
    troop_buy = fluctuate(market.troop_buy_multiplier, market.price_fluctuation / 2)
    troop_sell = fluctuate(market.troop_sell_multiplier, market.price_fluctuation / 2)
    rune_buy = math.floor(fluctuate(market.shop_rune_buy, market.price_fluctuation))
    rune_sell = math.floor(fluctuate(market.shop_rune_sell, market.price_fluctuation))

    buy = {MarketGood.FOOD: food_buy, MarketGood.RUNES: rune_buy}
    sell = {MarketGood.FOOD: food_sell, MarketGood.RUNES: rune_sell}
    for good, unit in GOOD_TROOPS.items():
        base_price = TROOP_COSTS[unit].base_price
        buy[good] = math.floor(base_price * troop_buy)
        sell[good] = math.floor(base_price * troop_sell)
    return MarketPrices(phase=GamePhase.SHOP, buy=buy, sell=sell)


def generate_shop_stock(
    empire: Empire, prices: MarketPrices, rules: RulesConfig = DEFAULT_RULES
) -> ShopStock:
    budget = empire.networth * rules.market.stock_networth_share
    return ShopStock(
        items={good: math.floor(budget / max(1, price)) for good, price in prices.buy.items()}
    )


def open_shop(empire: Empire, seed: str, rules: RulesConfig = DEFAULT_RULES) -> MarketState:
    """Market state for a shop phase: seeded prices plus stock sized to the empire."""

    prices = generate_shop_prices(seed, rules)
    return MarketState(
        phase=GamePhase.SHOP,
        shop_prices=prices,
        stock=generate_shop_stock(empire, prices, rules),
    )


def market_prices(
    empire: Empire, market_state: MarketState, rules: RulesConfig = DEFAULT_RULES
) -> MarketPrices:
    """Unit prices this empire pays and receives in the current phase.

    The market modifier lowers buy prices and raises troop sell prices;
    food sell bonuses raise the food sell price.
    """

    if market_state.is_shop:
        if market_state.shop_prices is None:
            raise invalid("Shop prices have not been generated")
        base = market_state.shop_prices
    elif market_state.phase == GamePhase.PLAYER:
        base = private_market_prices()
    else:
        raise gated(f"The market is closed during the {market_state.phase} phase")

    market_factor = resolve(empire, ModifierCategory.MARKET, rules=rules).factor
    food_sell_bonus = effect_total(empire, EffectKind.FOOD_SELL)

    divisor = max(market_factor, 0.01)
    buy = {good: max(1, math.ceil(price / divisor)) for good, price in base.buy.items()}
    sell = {}
    for good, price in base.sell.items():
        if good in GOOD_TROOPS:
            sell[good] = math.floor(price * market_factor)
        elif good == MarketGood.FOOD:
            sell[good] = math.floor(price * (1 + food_sell_bonus))
        else:
            sell[good] = price
    return MarketPrices(phase=base.phase, buy=buy, sell=sell)


def sell_limit(
    empire: Empire, good: MarketGood, market_state: MarketState, rules: RulesConfig = DEFAULT_RULES
) -> int:
    """Most units of ``good`` that may be sold in one transaction."""

    held = _holdings(empire, good)
    if market_state.is_shop and good in GOOD_TROOPS:
        return math.floor(held * rules.market.shop_troop_sell_limit)
    return held


# ---------------------------------------------------------------------------
# Transactions


def transact_market(
    empire: Empire,
    market_state: MarketState,
    transaction: MarketTransaction,
    rules: RulesConfig = DEFAULT_RULES,
) -> MarketOutcome:
    """Buy or sell one good; the empire and the shop stock change together or not at all."""

    working = clone(empire)
    state = copy.deepcopy(market_state)
    try:
        ensure_active(working)
        gold_change = _trade(working, state, transaction, rules)
    except RuleViolation as exc:
        error = exc.to_error()
        return MarketOutcome(success=False, empire=empire, market=market_state, error=error)

    refresh_networth(working, rules)
    return MarketOutcome(success=True, empire=working, market=state, gold_change=gold_change)


def _holdings(empire: Empire, good: MarketGood) -> int:
    if good == MarketGood.FOOD:
        return empire.food
    if good == MarketGood.RUNES:
        return empire.runes
    return empire.troops.count(GOOD_TROOPS[good])


def _adjust_holdings(empire: Empire, good: MarketGood, delta: int) -> None:
    if good == MarketGood.FOOD:
        empire.food += delta
    elif good == MarketGood.RUNES:
        empire.runes += delta
    else:
        empire.troops.adjust(GOOD_TROOPS[good], delta)


def _trade(
    empire: Empire, state: MarketState, transaction: MarketTransaction, rules: RulesConfig
) -> int:
    amount = transaction.amount
    if not isinstance(amount, int) or isinstance(amount, bool) or amount < 1:
        raise invalid("Amount must be a positive whole number")
    good = transaction.good
    prices = market_prices(empire, state, rules)

    if transaction.side == TradeSide.BUY:
        if state.is_shop:
            stock = state.stock or ShopStock()
            available = stock.available(good)
            if amount > available:
                raise insufficient(f"Only {available} {good} in stock")
        cost = amount * prices.buy[good]
        if cost > empire.gold:
            raise insufficient("Not enough gold")
        empire.gold -= cost
        _adjust_holdings(empire, good, amount)
        if state.is_shop and state.stock is not None:
            state.stock.items[good] = state.stock.available(good) - amount
        return -cost

    if transaction.side == TradeSide.SELL:
        if amount > _holdings(empire, good):
            raise insufficient(f"Not enough {good}")
        limit = sell_limit(empire, good, state, rules)
        if amount > limit:
            share = rules.market.shop_troop_sell_limit
            raise gated(f"Can only sell {limit} ({share:.0%} of owned)")
        revenue = amount * prices.sell[good]
        _adjust_holdings(empire, good, -amount)
        empire.gold += revenue
        return revenue

    raise invalid(f"Unknown trade side {transaction.side!r}")
