"""Enumerations shared across the empire simulation domain."""

from __future__ import annotations

from enum import StrEnum


class Race(StrEnum):
    """Playable races; each carries a fixed modifier row."""

    HUMAN = "human"
    ELF = "elf"
    DWARF = "dwarf"
    TROLL = "troll"
    GNOME = "gnome"
    GREMLIN = "gremlin"
    ORC = "orc"
    DROW = "drow"
    GOBLIN = "goblin"


class Era(StrEnum):
    """Technological era of an empire."""

    PAST = "past"
    PRESENT = "present"
    FUTURE = "future"


ERA_ORDER: tuple[Era, ...] = (Era.PAST, Era.PRESENT, Era.FUTURE)


class BuildingType(StrEnum):
    """Constructible building kinds."""

    MARKET = "market"
    BARRACKS = "barracks"
    EXCHANGE = "exchange"
    FARM = "farm"
    TOWER = "tower"


class TroopType(StrEnum):
    """Troop kinds held by an empire."""

    INFANTRY = "infantry"
    CAVALRY = "cavalry"
    AIR = "air"
    NAVAL = "naval"
    WIZARD = "wizard"


COMBAT_UNITS: tuple[TroopType, ...] = (
    TroopType.INFANTRY,
    TroopType.CAVALRY,
    TroopType.AIR,
    TroopType.NAVAL,
)


class TurnAction(StrEnum):
    """Actions a caller can submit to the turn scheduler."""

    EXPLORE = "explore"
    FARM = "farm"
    CASH = "cash"
    MEDITATE = "meditate"
    INDUSTRY = "industry"
    BUILD = "build"
    DEMOLISH = "demolish"
    ATTACK = "attack"
    SPELL = "spell"
    SET_TAX = "set_tax"
    SET_INDUSTRY = "set_industry"


ECONOMIC_ACTIONS: frozenset[TurnAction] = frozenset(
    {
        TurnAction.EXPLORE,
        TurnAction.FARM,
        TurnAction.CASH,
        TurnAction.MEDITATE,
        TurnAction.INDUSTRY,
    }
)


class MasteryAction(StrEnum):
    """Actions that can be mastered through the draft."""

    FARM = "farm"
    CASH = "cash"
    EXPLORE = "explore"
    INDUSTRY = "industry"
    MEDITATE = "meditate"


class TurnOutcome(StrEnum):
    """Result of a single iteration of the turn loop."""

    CONTINUE = "continue"
    STOP_FOOD = "stop_food"
    STOP_LOAN = "stop_loan"
    EXHAUSTED = "exhausted"


class StopReason(StrEnum):
    """Early stop reasons surfaced on a batch result."""

    FOOD = "food"
    LOAN = "loan"


class AttackType(StrEnum):
    """Standard attacks use every combat unit, the others a single type."""

    STANDARD = "standard"
    INFANTRY = "infantry"
    CAVALRY = "cavalry"
    AIR = "air"
    NAVAL = "naval"


class SpellType(StrEnum):
    """Castable spells."""

    SHIELD = "shield"
    FOOD = "food"
    CASH = "cash"
    RUNES = "runes"
    GATE = "gate"
    ADVANCE = "advance"
    REGRESS = "regress"
    SPY = "spy"
    BLAST = "blast"
    STORM = "storm"
    STRUCT = "struct"
    STEAL = "steal"
    FIGHT = "fight"


SELF_SPELLS: frozenset[SpellType] = frozenset(
    {
        SpellType.SHIELD,
        SpellType.FOOD,
        SpellType.CASH,
        SpellType.RUNES,
        SpellType.GATE,
        SpellType.ADVANCE,
        SpellType.REGRESS,
    }
)

# Self spells that yield resources.
PRODUCTION_SPELLS: frozenset[SpellType] = frozenset(
    {SpellType.FOOD, SpellType.CASH, SpellType.RUNES}
)


class Rarity(StrEnum):
    """Draft rarity tiers."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"


class EffectKind(StrEnum):
    """Advisor effect kinds."""

    INCOME_BOOST = "income_boost"
    MARKET_BOOST = "market_boost"
    EXCHANGE_BOOST = "exchange_boost"
    FOOD_PRODUCTION = "food_production"
    RUNE_PRODUCTION = "rune_production"
    TROOP_PRODUCTION = "troop_production"
    UNIT_PRODUCTION = "unit_production"
    INDUSTRY = "industry"
    EXPLORE = "explore"
    INCOME = "income"
    OFFENSE = "offense"
    DEFENSE = "defense"
    MILITARY = "military"
    MAGIC = "magic"
    BUILD_COST = "build_cost"
    SPELL_COST = "spell_cost"
    MARKET_BONUS = "market_bonus"
    FOOD_SELL = "food_sell"
    CASUALTY_REDUCTION = "casualty_reduction"
    ATTACK_HEALTH_REDUCTION = "attack_health_reduction"
    BANK_INTEREST = "bank_interest"
    PIONEER = "pioneer"
    PEASANT_DENSITY = "peasant_density"
    HEALTH_REGEN = "health_regen"
    EXTRA_TURNS = "extra_turns"
    EXTRA_ATTACKS = "extra_attacks"
    EXPANSIONIST = "expansionist"
    BUILD_RATE = "build_rate"
    LENIENT_TAXES = "lenient_taxes"
    DOUBLE_EXPLORE = "double_explore"
    DOUBLE_BANK_INTEREST = "double_bank_interest"
    ZERO_INTEREST = "zero_interest"
    PERMANENT_SHIELD = "permanent_shield"
    PERMANENT_GATE = "permanent_gate"
    UNIT_SPECIALIST = "unit_specialist"
    FARM_INDUSTRY_BOOST = "farm_industry_boost"
    CASH_INDUSTRY_BOOST = "cash_industry_boost"
    MASTERY_SCALING = "mastery_scaling"
    MULTI_MASTERY_THRESHOLD = "multi_mastery_threshold"
    MULTI_MASTERY_SCALING = "multi_mastery_scaling"
    BUILDING_OFFENSE = "building_offense"
    BUILDING_DEFENSE = "building_defense"
    CONJURE_BOOST = "conjure_boost"
    CASH_SPELL = "cash_spell"
    FOOD_SPELL = "food_spell"
    STEAL_SPELL = "steal_spell"
    FIGHT_SPELL = "fight_spell"
    SPY_RATIO = "spy_ratio"
    BLOOD_MAGE = "blood_mage"
    WILD_CHANNELER = "wild_channeler"
    PEACEFUL_CHANNELER = "peaceful_channeler"
    DESTRUCTION_MAGE = "destruction_mage"
    DYNAMIC_OFFENSE = "dynamic_offense"
    GRUDGE_KEEPER = "grudge_keeper"
    UNDERDOG = "underdog"
    PACIFIST = "pacifist"
    SALVAGE = "salvage"
    SECOND_WIND = "second_wind"
    EARLY_BIRD = "early_bird"
    TOLL_KEEPER = "toll_keeper"
    PEASANT_CHAMPION = "peasant_champion"
    AIRCRAFT_OFFENSE = "aircraft_offense"


class ModifierCategory(StrEnum):
    """Effect categories resolved by the modifier registry."""

    INCOME = "income"
    FOOD_PRODUCTION = "food_production"
    FOOD_CONSUMPTION = "food_consumption"
    INDUSTRY = "industry"
    EXPLORE = "explore"
    MAGIC = "magic"
    RUNE_PRODUCTION = "rune_production"
    OFFENSE = "offense"
    DEFENSE = "defense"
    BUILD_COST = "build_cost"
    SPELL_COST = "spell_cost"
    EXPENSES = "expenses"
    MARKET = "market"
    CASUALTIES = "casualties"
    TROOP_PRODUCTION = "troop_production"
    BANK_INTEREST = "bank_interest"
    EXTRA_TURNS = "extra_turns"
    EXTRA_ATTACKS = "extra_attacks"
    BUILD_RATE = "build_rate"
    HEALTH_REGEN = "health_regen"
    ATTACK_HEALTH = "attack_health"


class Policy(StrEnum):
    """Policies unlocked through the draft."""

    OPEN_BORDERS = "open_borders"
    BANK_CHARTER = "bank_charter"
    FORCED_MARCH = "forced_march"
    WAR_ECONOMY = "war_economy"
    MAGICAL_IMMUNITY = "magical_immunity"


class GamePhase(StrEnum):
    """Phases of a round."""

    PLAYER = "player"
    SHOP = "shop"
    BOT = "bot"
    COMPLETE = "complete"


class DefeatReason(StrEnum):
    """Terminal conditions, in evaluation priority order."""

    NO_LAND = "no_land"
    NO_PEASANTS = "no_peasants"
    EXCESSIVE_LOAN = "excessive_loan"
    ABANDONED = "abandoned"


class BankOperation(StrEnum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TAKE_LOAN = "take_loan"
    PAY_LOAN = "pay_loan"


class TradeSide(StrEnum):
    BUY = "buy"
    SELL = "sell"


class MarketGood(StrEnum):
    """Goods tradable on either market."""

    FOOD = "food"
    RUNES = "runes"
    INFANTRY = "infantry"
    CAVALRY = "cavalry"
    AIR = "air"
    NAVAL = "naval"


class DraftKind(StrEnum):
    ADVISOR = "advisor"
    MASTERY = "mastery"
    POLICY = "policy"
    EDICT = "edict"


class EdictKind(StrEnum):
    """One-shot draft effects."""

    GOLD = "gold"
    FOOD = "food"
    RUNES = "runes"
    CONSCRIPT = "conscript"
    LAND = "land"
    HEALTH = "health"
    TROOPS = "troops"
    ADVANCE_ERA = "advance_era"
    STEAL_GOLD = "steal_gold"
