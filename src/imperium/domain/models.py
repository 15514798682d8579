"""Dataclasses describing empires and the records the rules produce.

The empire is the only mutable aggregate.  Every other record here is a
snapshot or a result value handed back to the caller; results are frozen
and never touched again once an operation returns them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NewType

from .enums import (
    AttackType,
    BankOperation,
    BuildingType,
    DefeatReason,
    EffectKind,
    Era,
    GamePhase,
    MarketGood,
    MasteryAction,
    Race,
    Rarity,
    SpellType,
    StopReason,
    TradeSide,
    TroopType,
    TurnAction,
)
from .errors import OperationError
from .rules_config import DEFAULT_RULES, RulesConfig

EmpireID = NewType("EmpireID", int)
GameID = NewType("GameID", int)


# --- Empire components ----------------------------------------------------------


@dataclass(slots=True)
class Buildings:
    """Constructed buildings plus the free land that remains."""

    market: int = 0
    barracks: int = 0
    exchange: int = 0
    farm: int = 0
    tower: int = 0
    freeland: int = 0

    def count(self, kind: BuildingType) -> int:
        return getattr(self, kind.value)

    def adjust(self, kind: BuildingType, delta: int) -> None:
        setattr(self, kind.value, getattr(self, kind.value) + delta)

    @property
    def constructed(self) -> int:
        return self.market + self.barracks + self.exchange + self.farm + self.tower


@dataclass(slots=True)
class Troops:
    infantry: int = 0
    cavalry: int = 0
    air: int = 0
    naval: int = 0
    wizard: int = 0

    def count(self, kind: TroopType) -> int:
        return getattr(self, kind.value)

    def adjust(self, kind: TroopType, delta: int) -> None:
        setattr(self, kind.value, getattr(self, kind.value) + delta)

    def as_dict(self) -> dict[TroopType, int]:
        return {kind: self.count(kind) for kind in TroopType}


@dataclass(slots=True)
class IndustryAllocation:
    """Percentage of barracks output assigned to each combat unit."""

    infantry: int = 50
    cavalry: int = 30
    air: int = 15
    naval: int = 5

    def share(self, kind: TroopType) -> int:
        return getattr(self, kind.value)

    @property
    def total(self) -> int:
        return self.infantry + self.cavalry + self.air + self.naval


@dataclass(slots=True)
class CombatTallies:
    offense_total: int = 0
    offense_won: int = 0
    defense_total: int = 0
    defense_won: int = 0
    kills: int = 0


@dataclass(slots=True)
class TimedEffects:
    """Expiry round per timed effect; active while current round <= expiry."""

    shield: int | None = None
    gate: int | None = None
    pacification: int | None = None
    divine_protection: int | None = None


# --- Advisor effects --------------------------------------------------------------
#
# One variant per payload shape.  The modifier registry dispatches on the
# concrete class, so no effect carries fields it does not use.


@dataclass(frozen=True, slots=True)
class StatBonus:
    """Percentage bonus expressed as a fraction (0.15 == +15%)."""

    kind: EffectKind
    magnitude: float


@dataclass(frozen=True, slots=True)
class FlatBonus:
    """Additive bonus in the unit of its category (turns, health, slots)."""

    kind: EffectKind
    amount: float


@dataclass(frozen=True, slots=True)
class ConditionalBonus:
    """Bonus that only applies when ``condition`` matches (unit type, build mode)."""

    kind: EffectKind
    magnitude: float
    condition: str


@dataclass(frozen=True, slots=True)
class Flag:
    kind: EffectKind


@dataclass(frozen=True, slots=True)
class UnitSpecialist:
    """Raises offense of some units and lowers defense of others."""

    boost_units: tuple[TroopType, ...]
    nerf_units: tuple[TroopType, ...]
    offense_bonus: int = 1
    defense_penalty: int = 2

    @property
    def kind(self) -> EffectKind:
        return EffectKind.UNIT_SPECIALIST


AdvisorEffect = StatBonus | FlatBonus | ConditionalBonus | Flag | UnitSpecialist


@dataclass(frozen=True, slots=True)
class Advisor:
    id: str
    name: str
    rarity: Rarity
    effect: AdvisorEffect
    description: str = ""


# --- Empire -----------------------------------------------------------------------


@dataclass(slots=True)
class Empire:
    """Root aggregate for one player or bot empire."""

    id: EmpireID
    name: str
    race: Race
    era: Era = Era.PAST
    era_changed_round: int = 0
    gold: int = 0
    food: int = 0
    runes: int = 0
    land: int = 0
    peasants: int = 0
    health: int = 100
    tax_rate: int = 35
    savings: int = 0
    loan: int = 0
    networth: int = 0
    buildings: Buildings = field(default_factory=Buildings)
    troops: Troops = field(default_factory=Troops)
    industry: IndustryAllocation = field(default_factory=IndustryAllocation)
    tallies: CombatTallies = field(default_factory=CombatTallies)
    effects: TimedEffects = field(default_factory=TimedEffects)
    turns_remaining: int = 0
    bonus_turns: int = 0
    attacks_this_round: int = 0
    spells_this_round: int = 0
    actions_this_round: int = 0
    grudges: set[EmpireID] = field(default_factory=set)
    advisors: list[Advisor] = field(default_factory=list)
    advisor_bonus_slots: int = 0
    masteries: dict[MasteryAction, int] = field(default_factory=dict)
    policies: set[str] = field(default_factory=set)
    defeat: DefeatReason | None = None
    is_bot: bool = False

    @property
    def freeland(self) -> int:
        return self.buildings.freeland

    @property
    def is_defeated(self) -> bool:
        return self.defeat is not None


# --- Request records --------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GameContext:
    """Game-global inputs an operation may read but never owns."""

    game_id: GameID = GameID(0)
    current_round: int = 1
    phase: GamePhase = GamePhase.PLAYER
    rules: RulesConfig = DEFAULT_RULES


@dataclass(slots=True)
class ActionParams:
    """Optional parameters for ``apply_action``; unused fields are ignored."""

    build: dict[BuildingType, int] = field(default_factory=dict)
    demolish: dict[BuildingType, int] = field(default_factory=dict)
    attack_type: AttackType = AttackType.STANDARD
    target: Empire | None = None
    spell: SpellType | None = None
    tax_rate: int | None = None
    industry: IndustryAllocation | None = None


@dataclass(frozen=True, slots=True)
class BankTransaction:
    operation: BankOperation
    amount: int


@dataclass(frozen=True, slots=True)
class MarketTransaction:
    side: TradeSide
    good: MarketGood
    amount: int


# --- Snapshots --------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BankInfo:
    savings: int
    loan: int
    gold: int
    max_loan: int
    available_loan: int
    max_savings: int
    available_savings: int
    savings_rate: float
    loan_rate: float


@dataclass(frozen=True, slots=True)
class MarketPrices:
    """Unit buy and sell prices for every tradable good in one phase."""

    phase: GamePhase
    buy: dict[MarketGood, int]
    sell: dict[MarketGood, int]


@dataclass(slots=True)
class ShopStock:
    """Remaining shop-phase stock; depletes with purchases."""

    items: dict[MarketGood, int] = field(default_factory=dict)

    def available(self, good: MarketGood) -> int:
        return self.items.get(good, 0)


@dataclass(slots=True)
class MarketState:
    """Phase-global market data shared by every empire in a game."""

    phase: GamePhase
    shop_prices: MarketPrices | None = None
    stock: ShopStock | None = None

    @property
    def is_shop(self) -> bool:
        return self.phase == GamePhase.SHOP


@dataclass(frozen=True, slots=True)
class SpyIntel:
    round: int
    target_id: EmpireID
    target_name: str
    era: Era
    race: Race
    land: int
    networth: int
    peasants: int
    health: int
    tax_rate: int
    gold: int
    food: int
    runes: int
    troops: dict[TroopType, int]


# --- Results ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CombatResult:
    won: bool
    attack_type: AttackType
    offense_power: int
    defense_power: int
    attacker_losses: dict[TroopType, int] = field(default_factory=dict)
    defender_losses: dict[TroopType, int] = field(default_factory=dict)
    land_gained: int = 0
    land_lost: int = 0
    buildings_gained: dict[BuildingType, int] = field(default_factory=dict)
    buildings_destroyed: dict[BuildingType, int] = field(default_factory=dict)
    attacker_salvaged: dict[TroopType, int] = field(default_factory=dict)
    defender_salvaged: dict[TroopType, int] = field(default_factory=dict)
    toll_paid: int = 0


@dataclass(frozen=True, slots=True)
class SpellResult:
    success: bool
    spell: SpellType
    resources_gained: dict[str, int] = field(default_factory=dict)
    troops_destroyed: dict[TroopType, int] = field(default_factory=dict)
    buildings_destroyed: dict[BuildingType, int] = field(default_factory=dict)
    food_destroyed: int = 0
    gold_destroyed: int = 0
    gold_stolen: int = 0
    land_gained: int = 0
    wizards_lost: int = 0
    target_wizards_lost: int = 0
    effect_applied: str | None = None
    intel: SpyIntel | None = None
    fizzled: bool = False


@dataclass(frozen=True, slots=True)
class TurnActionResult:
    """Outcome of one ``apply_action`` batch."""

    success: bool
    action: TurnAction
    empire: Empire
    turns_spent: int = 0
    turns_remaining: int = 0
    income: int = 0
    expenses: int = 0
    food_production: int = 0
    food_consumption: int = 0
    rune_change: int = 0
    troops_produced: dict[TroopType, int] = field(default_factory=dict)
    loan_payment: int = 0
    bank_interest: int = 0
    loan_interest: int = 0
    stopped_early: StopReason | None = None
    land_gained: int = 0
    buildings_constructed: dict[BuildingType, int] = field(default_factory=dict)
    combat: CombatResult | None = None
    spell: SpellResult | None = None
    target: Empire | None = None
    defeat: DefeatReason | None = None
    error: OperationError | None = None


@dataclass(frozen=True, slots=True)
class BankOutcome:
    success: bool
    empire: Empire
    bank: BankInfo
    error: OperationError | None = None


@dataclass(frozen=True, slots=True)
class MarketOutcome:
    success: bool
    empire: Empire
    market: MarketState
    gold_change: int = 0
    error: OperationError | None = None


@dataclass(frozen=True, slots=True)
class CombatOutcome:
    success: bool
    attacker: Empire
    defender: Empire
    result: TurnActionResult


@dataclass(frozen=True, slots=True)
class SpellOutcome:
    success: bool
    empire: Empire
    target: Empire | None
    result: TurnActionResult


@dataclass(slots=True)
class GameRound:
    """Round counter and phase of one game."""

    number: int = 1
    phase: GamePhase = GamePhase.PLAYER

    @property
    def is_complete(self) -> bool:
        return self.phase == GamePhase.COMPLETE
