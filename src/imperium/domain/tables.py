"""Authoritative constant tables for the simulation.

Every component reads race, era, unit, spell and price data from here.
The tables are read-only mappings so they can be shared between game
sessions without copying.  Bump ``TABLES_VERSION`` whenever a value
changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from .enums import BuildingType, Era, MarketGood, Race, SpellType, TroopType

TABLES_VERSION = "1.0"


@dataclass(frozen=True, slots=True)
class RaceModifiers:
    """Percentage modifiers applied on top of the base formulas."""

    offense: int = 0
    defense: int = 0
    building: int = 0
    expenses: int = 0
    magic: int = 0
    industry: int = 0
    income: int = 0
    explore: int = 0
    market: int = 0
    food_production: int = 0
    food_consumption: int = 0
    rune_production: int = 0


@dataclass(frozen=True, slots=True)
class EraModifiers:
    economy: int = 0
    food_production: int = 0
    industry: int = 0
    energy: int = 0
    explore: int = 0


@dataclass(frozen=True, slots=True)
class UnitStats:
    offense: int
    defense: int


@dataclass(frozen=True, slots=True)
class TroopCosts:
    """Market base price, per-turn gold upkeep and food consumption."""

    base_price: int
    upkeep: float
    food: float
    networth: int


@dataclass(frozen=True, slots=True)
class SpellDefinition:
    cost_multiplier: float
    offensive: bool
    threshold: float = 0.0


@dataclass(frozen=True, slots=True)
class TradePrice:
    buy: int
    sell: int


RACE_MODIFIERS: Mapping[Race, RaceModifiers] = MappingProxyType(
    {
        Race.HUMAN: RaceModifiers(),
        Race.ELF: RaceModifiers(
            offense=-14, defense=-2, building=-10, magic=18, industry=-12, income=2,
            explore=12, food_production=-6, rune_production=12,
        ),
        Race.DWARF: RaceModifiers(
            offense=6, defense=16, building=16, expenses=-8, magic=-16, industry=12,
            explore=-18, market=-8,
        ),
        Race.TROLL: RaceModifiers(
            offense=24, defense=-10, building=8, magic=-12, income=4, explore=14,
            market=-12, food_production=-8, rune_production=-8,
        ),
        Race.GNOME: RaceModifiers(
            offense=-16, defense=10, expenses=6, industry=-10, income=10, explore=-12,
            market=24, rune_production=-12,
        ),
        Race.GREMLIN: RaceModifiers(
            offense=10, defense=-6, magic=-10, industry=-14, income=-20, market=8,
            food_production=18, food_consumption=14,
        ),
        Race.ORC: RaceModifiers(
            offense=16, building=4, expenses=-14, magic=-4, industry=8, explore=22,
            food_production=-8, food_consumption=-10, rune_production=-14,
        ),
        Race.DROW: RaceModifiers(
            offense=14, defense=6, building=-12, expenses=-10, magic=18, explore=-16,
            food_production=-6, rune_production=6,
        ),
        Race.GOBLIN: RaceModifiers(
            offense=-18, defense=-16, expenses=18, industry=14, market=-6,
            food_consumption=8,
        ),
    }
)

ERA_MODIFIERS: Mapping[Era, EraModifiers] = MappingProxyType(
    {
        Era.PAST: EraModifiers(economy=-5, food_production=-5, industry=-10, energy=20),
        Era.PRESENT: EraModifiers(food_production=15, industry=5, explore=20),
        Era.FUTURE: EraModifiers(
            economy=15, food_production=-5, industry=15, energy=-20, explore=40
        ),
    }
)

UNIT_STATS: Mapping[Era, Mapping[TroopType, UnitStats]] = MappingProxyType(
    {
        Era.PAST: MappingProxyType(
            {
                TroopType.INFANTRY: UnitStats(1, 2),
                TroopType.CAVALRY: UnitStats(3, 2),
                TroopType.AIR: UnitStats(7, 5),
                TroopType.NAVAL: UnitStats(7, 6),
            }
        ),
        Era.PRESENT: MappingProxyType(
            {
                TroopType.INFANTRY: UnitStats(2, 1),
                TroopType.CAVALRY: UnitStats(2, 6),
                TroopType.AIR: UnitStats(5, 3),
                TroopType.NAVAL: UnitStats(6, 8),
            }
        ),
        Era.FUTURE: MappingProxyType(
            {
                TroopType.INFANTRY: UnitStats(1, 2),
                TroopType.CAVALRY: UnitStats(5, 2),
                TroopType.AIR: UnitStats(6, 3),
                TroopType.NAVAL: UnitStats(7, 7),
            }
        ),
    }
)

WIZARD_POWER = 3

TROOP_COSTS: Mapping[TroopType, TroopCosts] = MappingProxyType(
    {
        TroopType.INFANTRY: TroopCosts(base_price=500, upkeep=1.0, food=0.05, networth=1),
        TroopType.CAVALRY: TroopCosts(base_price=1000, upkeep=2.5, food=0.03, networth=2),
        TroopType.AIR: TroopCosts(base_price=2000, upkeep=4.0, food=0.02, networth=4),
        TroopType.NAVAL: TroopCosts(base_price=3000, upkeep=7.0, food=0.01, networth=6),
        TroopType.WIZARD: TroopCosts(base_price=0, upkeep=0.5, food=0.25, networth=2),
    }
)

PEASANT_FOOD = 0.01

# Barracks output split, per unit of allocated industry.
TROOP_PRODUCTION_RATES: Mapping[TroopType, float] = MappingProxyType(
    {
        TroopType.INFANTRY: 1.2,
        TroopType.CAVALRY: 0.6,
        TroopType.AIR: 0.3,
        TroopType.NAVAL: 0.2,
    }
)

SPELLS: Mapping[SpellType, SpellDefinition] = MappingProxyType(
    {
        SpellType.SHIELD: SpellDefinition(4.9, offensive=False),
        SpellType.FOOD: SpellDefinition(17.0, offensive=False),
        SpellType.CASH: SpellDefinition(15.0, offensive=False),
        SpellType.RUNES: SpellDefinition(12.0, offensive=False),
        SpellType.GATE: SpellDefinition(20.0, offensive=False),
        SpellType.REGRESS: SpellDefinition(20.0, offensive=False),
        SpellType.ADVANCE: SpellDefinition(47.5, offensive=False),
        SpellType.SPY: SpellDefinition(1.0, offensive=True, threshold=1.0),
        SpellType.BLAST: SpellDefinition(2.5, offensive=True, threshold=1.15),
        SpellType.STORM: SpellDefinition(7.25, offensive=True, threshold=1.21),
        SpellType.STRUCT: SpellDefinition(18.0, offensive=True, threshold=1.70),
        SpellType.STEAL: SpellDefinition(25.75, offensive=True, threshold=1.75),
        SpellType.FIGHT: SpellDefinition(22.5, offensive=True, threshold=2.2),
    }
)

# [attacker rate, defender rate]
STANDARD_LOSS_RATES: Mapping[TroopType, tuple[float, float]] = MappingProxyType(
    {
        TroopType.INFANTRY: (0.1455, 0.0805),
        TroopType.CAVALRY: (0.1285, 0.0730),
        TroopType.AIR: (0.0788, 0.0675),
        TroopType.NAVAL: (0.0650, 0.0555),
    }
)

SINGLE_UNIT_LOSS_RATES: Mapping[TroopType, tuple[float, float]] = MappingProxyType(
    {
        TroopType.INFANTRY: (0.1155, 0.0705),
        TroopType.CAVALRY: (0.0985, 0.0530),
        TroopType.AIR: (0.0688, 0.0445),
        TroopType.NAVAL: (0.0450, 0.0355),
    }
)

# [loss rate, capture rate]
BUILDING_CAPTURE: Mapping[BuildingType, tuple[float, float]] = MappingProxyType(
    {
        BuildingType.MARKET: (0.07, 0.70),
        BuildingType.BARRACKS: (0.07, 0.50),
        BuildingType.EXCHANGE: (0.07, 0.70),
        BuildingType.FARM: (0.07, 0.30),
        BuildingType.TOWER: (0.07, 0.60),
    }
)

FREELAND_LOSS_RATE = 0.10

# Wizard duel building destruction per type (already divided by three).
FIGHT_DESTRUCTION: Mapping[BuildingType, float] = MappingProxyType(
    {
        BuildingType.MARKET: 0.05 / 3,
        BuildingType.BARRACKS: 0.07 / 3,
        BuildingType.EXCHANGE: 0.07 / 3,
        BuildingType.FARM: 0.08 / 3,
        BuildingType.TOWER: 0.07 / 3,
    }
)

PRIVATE_MARKET: Mapping[MarketGood, TradePrice] = MappingProxyType(
    {
        MarketGood.FOOD: TradePrice(buy=30, sell=6),
        MarketGood.RUNES: TradePrice(buy=200, sell=60),
        MarketGood.INFANTRY: TradePrice(buy=500, sell=160),
        MarketGood.CAVALRY: TradePrice(buy=1000, sell=340),
        MarketGood.AIR: TradePrice(buy=2000, sell=720),
        MarketGood.NAVAL: TradePrice(buy=3000, sell=1140),
    }
)

GOOD_TROOPS: Mapping[MarketGood, TroopType] = MappingProxyType(
    {
        MarketGood.INFANTRY: TroopType.INFANTRY,
        MarketGood.CAVALRY: TroopType.CAVALRY,
        MarketGood.AIR: TroopType.AIR,
        MarketGood.NAVAL: TroopType.NAVAL,
    }
)

# Per-level mastery bonus in percent, index 0 is level 1.
MASTERY_LEVEL_BONUS: tuple[int, ...] = (10, 10, 10, 15, 15)

# (net worth ceiling, divisor); anything above the last ceiling uses the fallback.
SIZE_BONUS_STEPS: tuple[tuple[int, float], ...] = (
    (10_000, 1.00),
    (100_000, 1.05),
    (1_000_000, 1.10),
)
SIZE_BONUS_MAX = 1.15
