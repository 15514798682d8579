"""Draftable content: advisors, policies, masteries and edicts."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from .enums import EdictKind, EffectKind, MasteryAction, Policy, Rarity, TroopType
from .models import (
    Advisor,
    ConditionalBonus,
    FlatBonus,
    Flag,
    StatBonus,
    UnitSpecialist,
)

INF, CAV, AIR, SEA = TroopType.INFANTRY, TroopType.CAVALRY, TroopType.AIR, TroopType.NAVAL


@dataclass(frozen=True, slots=True)
class PolicyDefinition:
    id: Policy
    name: str
    rarity: Rarity
    description: str


@dataclass(frozen=True, slots=True)
class MasteryDefinition:
    action: MasteryAction
    name: str


@dataclass(frozen=True, slots=True)
class EdictDefinition:
    id: str
    name: str
    rarity: Rarity
    kind: EdictKind
    value: float


ADVISORS: tuple[Advisor, ...] = (
    # common
    Advisor("surplus_trader", "Surplus Trader", Rarity.COMMON,
            StatBonus(EffectKind.FOOD_SELL, 0.25), "Food sells for 25% more"),
    Advisor("pioneer", "Pioneer", Rarity.COMMON,
            FlatBonus(EffectKind.PIONEER, 1), "One peasant settles each explored acre"),
    Advisor("war_bonds", "War Bonds", Rarity.COMMON,
            StatBonus(EffectKind.BANK_INTEREST, 0.02), "+2% savings interest"),
    Advisor("infantry_recruiter", "Infantry Recruiter", Rarity.COMMON,
            ConditionalBonus(EffectKind.UNIT_PRODUCTION, 0.40, INF.value),
            "+40% infantry production"),
    Advisor("cavalry_master", "Cavalry Master", Rarity.COMMON,
            ConditionalBonus(EffectKind.UNIT_PRODUCTION, 0.40, CAV.value),
            "+40% cavalry production"),
    Advisor("flight_school", "Flight School", Rarity.COMMON,
            ConditionalBonus(EffectKind.UNIT_PRODUCTION, 0.40, AIR.value),
            "+40% air production"),
    Advisor("naval_academy", "Naval Academy", Rarity.COMMON,
            ConditionalBonus(EffectKind.UNIT_PRODUCTION, 0.40, SEA.value),
            "+40% naval production"),
    Advisor("lenient_collector", "Lenient Collector", Rarity.COMMON,
            Flag(EffectKind.LENIENT_TAXES), "Peasants ignore the tax rate"),
    Advisor("toll_keeper", "Toll Keeper", Rarity.COMMON,
            StatBonus(EffectKind.TOLL_KEEPER, 0.05), "Attackers pay 5% of their gold"),
    Advisor("salvage_expert", "Salvage Expert", Rarity.COMMON,
            StatBonus(EffectKind.SALVAGE, 0.10), "Recover 10% of troops lost in battle"),
    Advisor("early_bird", "Early Bird", Rarity.COMMON,
            StatBonus(EffectKind.EARLY_BIRD, 0.20), "+20% to the first action each round"),
    Advisor("underdog", "Underdog", Rarity.COMMON,
            StatBonus(EffectKind.UNDERDOG, 0.10),
            "+10% offense and defense against larger empires"),
    Advisor("second_wind", "Second Wind", Rarity.COMMON,
            StatBonus(EffectKind.SECOND_WIND, 0.01), "+1% to all stats per 10 health lost"),
    Advisor("peasant_champion", "Peasant Champion", Rarity.COMMON,
            StatBonus(EffectKind.PEASANT_CHAMPION, 0.0001), "+0.01% offense per peasant"),
    Advisor("grudge_keeper", "Grudge Keeper", Rarity.COMMON,
            StatBonus(EffectKind.GRUDGE_KEEPER, 0.10),
            "+10% offense against empires that attacked you"),
    Advisor("conjurers_apprentice", "Conjurer's Apprentice", Rarity.COMMON,
            StatBonus(EffectKind.CONJURE_BOOST, 0.20), "+20% food and cash spell yield"),
    Advisor("fertile_frontier", "Fertile Frontier", Rarity.COMMON,
            ConditionalBonus(EffectKind.MASTERY_SCALING, 0.15, "explore_boosts_food"),
            "+15% food per exploration mastery level"),
    Advisor("trade_routes", "Trade Routes", Rarity.COMMON,
            ConditionalBonus(EffectKind.MASTERY_SCALING, 0.15, "explore_boosts_income"),
            "+15% income per exploration mastery level"),
    Advisor("mystic_forges", "Mystic Forges", Rarity.COMMON,
            ConditionalBonus(EffectKind.MASTERY_SCALING, 0.15, "meditate_boosts_industry"),
            "+15% troop production per mysticism mastery level"),
    Advisor("arcane_agriculture", "Arcane Agriculture", Rarity.COMMON,
            ConditionalBonus(EffectKind.MASTERY_SCALING, 0.15, "meditate_boosts_food"),
            "+15% food per mysticism mastery level"),
    Advisor("dabblers_luck", "Dabbler's Luck", Rarity.COMMON,
            ConditionalBonus(EffectKind.MULTI_MASTERY_THRESHOLD, 0.10, "min_2_masteries"),
            "+10% to all actions with two masteries"),
    Advisor("market_guards", "Market Guards", Rarity.COMMON,
            ConditionalBonus(EffectKind.BUILDING_DEFENSE, 0.001, "market"),
            "+0.1% defense per market"),
    Advisor("barracks_sentries", "Barracks Sentries", Rarity.COMMON,
            ConditionalBonus(EffectKind.BUILDING_DEFENSE, 0.001, "barracks"),
            "+0.1% defense per barracks"),
    Advisor("farm_militia", "Farm Militia", Rarity.COMMON,
            ConditionalBonus(EffectKind.BUILDING_DEFENSE, 0.001, "farm"),
            "+0.1% defense per farm"),
    Advisor("tower_wardens", "Tower Wardens", Rarity.COMMON,
            ConditionalBonus(EffectKind.BUILDING_DEFENSE, 0.001, "tower"),
            "+0.1% defense per tower"),
    Advisor("exchange_protectors", "Exchange Protectors", Rarity.COMMON,
            ConditionalBonus(EffectKind.BUILDING_DEFENSE, 0.001, "exchange"),
            "+0.1% defense per exchange"),
    Advisor("market_raiders", "Market Raiders", Rarity.COMMON,
            ConditionalBonus(EffectKind.BUILDING_OFFENSE, 0.001, "market"),
            "+0.1% offense per market"),
    Advisor("barracks_veterans", "Barracks Veterans", Rarity.COMMON,
            ConditionalBonus(EffectKind.BUILDING_OFFENSE, 0.001, "barracks"),
            "+0.1% offense per barracks"),
    Advisor("farm_levies", "Farm Levies", Rarity.COMMON,
            ConditionalBonus(EffectKind.BUILDING_OFFENSE, 0.001, "farm"),
            "+0.1% offense per farm"),
    Advisor("tower_battlemages", "Tower Battlemages", Rarity.COMMON,
            ConditionalBonus(EffectKind.BUILDING_OFFENSE, 0.001, "tower"),
            "+0.1% offense per tower"),
    Advisor("exchange_mercenaries", "Exchange Mercenaries", Rarity.COMMON,
            ConditionalBonus(EffectKind.BUILDING_OFFENSE, 0.001, "exchange"),
            "+0.1% offense per exchange"),
    # uncommon
    Advisor("quartermaster", "Quartermaster", Rarity.UNCOMMON,
            StatBonus(EffectKind.TROOP_PRODUCTION, 0.25), "+25% troop production"),
    Advisor("trade_network", "Trade Network", Rarity.UNCOMMON,
            StatBonus(EffectKind.EXCHANGE_BOOST, 0.50), "Exchanges 50% more effective"),
    Advisor("tax_collector", "Tax Collector", Rarity.UNCOMMON,
            StatBonus(EffectKind.INCOME_BOOST, 0.25), "+25% income"),
    Advisor("market_master", "Market Master", Rarity.UNCOMMON,
            StatBonus(EffectKind.MARKET_BOOST, 0.50), "+50% market building income"),
    Advisor("war_council", "War Council", Rarity.UNCOMMON,
            StatBonus(EffectKind.OFFENSE, 0.15), "+15% offense"),
    Advisor("stone_mason", "Stone Mason", Rarity.UNCOMMON,
            StatBonus(EffectKind.BUILD_COST, 0.15), "Buildings 15% cheaper"),
    Advisor("wizard_conclave", "Wizard Conclave", Rarity.UNCOMMON,
            StatBonus(EffectKind.SPELL_COST, 0.20), "Spells 20% cheaper"),
    Advisor("market_insider", "Market Insider", Rarity.UNCOMMON,
            StatBonus(EffectKind.MARKET_BONUS, 0.20), "Better private market prices"),
    Advisor("bella", "Bella of Doublehomes", Rarity.UNCOMMON,
            FlatBonus(EffectKind.PEASANT_DENSITY, 3.0), "Triple peasants per acre"),
    Advisor("frontier_scout", "Frontier Scout", Rarity.UNCOMMON,
            Flag(EffectKind.DOUBLE_EXPLORE), "Explore gains double land"),
    Advisor("royal_banker", "Royal Banker", Rarity.UNCOMMON,
            Flag(EffectKind.DOUBLE_BANK_INTEREST), "Savings interest doubles"),
    Advisor("battle_surgeon", "Battle Surgeon", Rarity.UNCOMMON,
            StatBonus(EffectKind.ATTACK_HEALTH_REDUCTION, 0.50),
            "Attacks cost half the health"),
    Advisor("master_builder", "Master Builder", Rarity.UNCOMMON,
            ConditionalBonus(EffectKind.BUILD_RATE, 1, "per_turn_with_discount"),
            "+1 building per turn, 20% cheaper"),
    Advisor("ground_commander", "Ground Commander", Rarity.UNCOMMON,
            UnitSpecialist(boost_units=(INF, CAV), nerf_units=(AIR, SEA)),
            "+1 offense infantry/cavalry, -2 defense air/naval"),
    Advisor("sky_marshal", "Sky Marshal", Rarity.UNCOMMON,
            UnitSpecialist(boost_units=(AIR, SEA), nerf_units=(INF, CAV)),
            "+1 offense air/naval, -2 defense infantry/cavalry"),
    Advisor("blitzkrieg_tactician", "Blitzkrieg Tactician", Rarity.UNCOMMON,
            UnitSpecialist(boost_units=(INF, AIR), nerf_units=(CAV, SEA)),
            "+1 offense infantry/air, -2 defense cavalry/naval"),
    Advisor("heavy_arms_dealer", "Heavy Arms Dealer", Rarity.UNCOMMON,
            UnitSpecialist(boost_units=(CAV, SEA), nerf_units=(INF, AIR)),
            "+1 offense cavalry/naval, -2 defense infantry/air"),
    Advisor("gold_alchemist", "Gold Alchemist", Rarity.UNCOMMON,
            StatBonus(EffectKind.CASH_SPELL, 0.40), "+40% cash spell yield"),
    Advisor("harvest_mage", "Harvest Mage", Rarity.UNCOMMON,
            StatBonus(EffectKind.FOOD_SPELL, 0.40), "+40% food spell yield"),
    Advisor("shadow_siphon", "Shadow Siphon", Rarity.UNCOMMON,
            StatBonus(EffectKind.STEAL_SPELL, 0.40), "Steal spells take 40% more gold"),
    Advisor("arcane_duelist", "Arcane Duelist", Rarity.UNCOMMON,
            StatBonus(EffectKind.FIGHT_SPELL, 0.30), "Fight spells take 30% more land"),
    Advisor("peaceful_channeler", "Peaceful Channeler", Rarity.UNCOMMON,
            StatBonus(EffectKind.PEACEFUL_CHANNELER, 0.60),
            "+60% self spell yield, no offensive spells"),
    Advisor("destruction_mage", "Destruction Mage", Rarity.UNCOMMON,
            StatBonus(EffectKind.DESTRUCTION_MAGE, 0.40),
            "+40% offensive spell power, no production spells"),
    Advisor("mactalon", "Mactalon the Spymaster", Rarity.UNCOMMON,
            StatBonus(EffectKind.SPY_RATIO, -0.25), "Offensive spells need 25% less power"),
    Advisor("war_economist", "War Economist", Rarity.UNCOMMON,
            ConditionalBonus(EffectKind.MASTERY_SCALING, 0.10, "cash_boosts_offense"),
            "+10% offense per commerce mastery level"),
    Advisor("mercenary_captain", "Mercenary Captain", Rarity.UNCOMMON,
            ConditionalBonus(EffectKind.MASTERY_SCALING, 0.15, "cash_boosts_industry"),
            "+15% troop production per commerce mastery level"),
    Advisor("battle_mages", "Battle Mages", Rarity.UNCOMMON,
            ConditionalBonus(EffectKind.MASTERY_SCALING, 0.10, "industry_boosts_magic"),
            "+10% magic per industry mastery level"),
    Advisor("polymath", "Polymath", Rarity.UNCOMMON,
            StatBonus(EffectKind.MULTI_MASTERY_SCALING, 0.05),
            "+5% to all actions per mastery held"),
    Advisor("farm_profiteer", "Farm Profiteer", Rarity.UNCOMMON,
            StatBonus(EffectKind.FARM_INDUSTRY_BOOST, 0.25),
            "+25% troop production during farm turns"),
    Advisor("trade_profiteer", "Trade Profiteer", Rarity.UNCOMMON,
            StatBonus(EffectKind.CASH_INDUSTRY_BOOST, 0.25),
            "+25% troop production during cash turns"),
    Advisor("expansionist", "Expansionist", Rarity.UNCOMMON,
            FlatBonus(EffectKind.EXPANSIONIST, 3), "Explore gains triple land"),
    Advisor("amphibious_admiral", "Amphibious Admiral", Rarity.UNCOMMON,
            UnitSpecialist(boost_units=(INF, SEA), nerf_units=(CAV, AIR)),
            "+1 offense infantry/naval, -2 defense cavalry/air"),
    Advisor("mechanized_general", "Mechanized General", Rarity.UNCOMMON,
            UnitSpecialist(boost_units=(CAV, AIR), nerf_units=(INF, SEA)),
            "+1 offense cavalry/air, -2 defense infantry/naval"),
    # rare
    Advisor("drill_sergeant", "Drill Sergeant", Rarity.RARE,
            StatBonus(EffectKind.TROOP_PRODUCTION, 0.50), "+50% troop production"),
    Advisor("treasury_master", "Treasury Master", Rarity.RARE,
            StatBonus(EffectKind.INCOME_BOOST, 0.50), "+50% income"),
    Advisor("grand_general", "Grand General", Rarity.RARE,
            StatBonus(EffectKind.MILITARY, 0.25), "+25% offense and defense"),
    Advisor("archmage", "Archmage", Rarity.RARE,
            StatBonus(EffectKind.MAGIC, 0.30), "+30% magic"),
    Advisor("royal_architect", "Royal Architect", Rarity.RARE,
            ConditionalBonus(EffectKind.BUILD_RATE, 1, "per_turn"),
            "+1 building per turn, 25% cheaper"),
    Advisor("matthias", "Matthias the Warrior", Rarity.RARE,
            StatBonus(EffectKind.OFFENSE, 0.25), "+25% offense"),
    Advisor("cregga", "Cregga Rose Eyes", Rarity.RARE,
            StatBonus(EffectKind.DEFENSE, 0.25), "+25% defense"),
    Advisor("grumm", "Grumm the Farmer", Rarity.RARE,
            StatBonus(EffectKind.FOOD_PRODUCTION, 0.50), "+50% food production"),
    Advisor("methuselah", "Methuselah the Wise", Rarity.RARE,
            StatBonus(EffectKind.RUNE_PRODUCTION, 0.50), "+50% rune production"),
    Advisor("brome", "Brome the Healer", Rarity.RARE,
            FlatBonus(EffectKind.HEALTH_REGEN, 2), "+2 health per turn"),
    Advisor("perigord", "Perigord the Protector", Rarity.RARE,
            StatBonus(EffectKind.CASUALTY_REDUCTION, 0.50), "Half the attack casualties"),
    Advisor("warmaster", "Warmaster", Rarity.RARE,
            FlatBonus(EffectKind.EXTRA_ATTACKS, 1), "+1 attack per round"),
    Advisor("warmonger", "Warmonger", Rarity.RARE,
            FlatBonus(EffectKind.EXTRA_ATTACKS, 2), "+2 attacks per round"),
    Advisor("grain_speculator", "Grain Speculator", Rarity.RARE,
            StatBonus(EffectKind.FOOD_SELL, 1.0), "Food sells for double"),
    Advisor("blood_mage", "Blood Mage", Rarity.RARE,
            StatBonus(EffectKind.BLOOD_MAGE, 0.75), "+75% magic, each cast costs health"),
    Advisor("wild_channeler", "Wild Channeler", Rarity.RARE,
            StatBonus(EffectKind.WILD_CHANNELER, 2.0),
            "Spell effects doubled, some casts fizzle"),
    Advisor("generalists_edge", "Generalist's Edge", Rarity.RARE,
            ConditionalBonus(
                EffectKind.MULTI_MASTERY_THRESHOLD, 0.25, "min_3_masteries_combat"
            ),
            "+25% offense and defense with three masteries"),
    Advisor("jack_of_all_trades", "Jack of All Trades", Rarity.RARE,
            ConditionalBonus(EffectKind.MULTI_MASTERY_THRESHOLD, 0.20, "all_5_masteries"),
            "+20% to all actions with every mastery"),
    # legendary
    Advisor("time_weaver", "Time Weaver", Rarity.LEGENDARY,
            Flag(EffectKind.PERMANENT_GATE), "Permanent time gate"),
    Advisor("empire_builder", "Empire Builder", Rarity.LEGENDARY,
            FlatBonus(EffectKind.EXTRA_TURNS, 5), "+5 turns per round"),
    Advisor("debt_eraser", "Debt Eraser", Rarity.LEGENDARY,
            Flag(EffectKind.ZERO_INTEREST), "Loans accrue no interest"),
    Advisor("arcane_ward", "Arcane Ward", Rarity.LEGENDARY,
            Flag(EffectKind.PERMANENT_SHIELD), "Permanent magic shield"),
    Advisor("conqueror", "The Conqueror", Rarity.LEGENDARY,
            FlatBonus(EffectKind.EXPANSIONIST, 3), "Explore gains triple land"),
    Advisor("dragon_rider", "Dragon Rider", Rarity.LEGENDARY,
            ConditionalBonus(EffectKind.AIRCRAFT_OFFENSE, 0.50, "plus_25_all"),
            "+50% air offense, +25% army offense"),
    Advisor("martin", "Martin the Warrior", Rarity.LEGENDARY,
            StatBonus(EffectKind.DYNAMIC_OFFENSE, 0.05), "+5% offense per attack this round"),
    Advisor("pacifist", "Pacifist Council", Rarity.LEGENDARY,
            FlatBonus(EffectKind.PACIFIST, 10), "+10 turns per round, no attacks"),
)

ADVISORS_BY_ID: Mapping[str, Advisor] = MappingProxyType({a.id: a for a in ADVISORS})

POLICIES: tuple[PolicyDefinition, ...] = (
    PolicyDefinition(Policy.OPEN_BORDERS, "Open Borders", Rarity.UNCOMMON,
                     "Explore gains 2x land"),
    PolicyDefinition(Policy.BANK_CHARTER, "Bank Charter", Rarity.UNCOMMON,
                     "Bank interest doubles"),
    PolicyDefinition(Policy.FORCED_MARCH, "Forced March", Rarity.RARE,
                     "Attack cap doubles"),
    PolicyDefinition(Policy.WAR_ECONOMY, "War Economy", Rarity.RARE,
                     "Troop production during farm turns"),
    PolicyDefinition(Policy.MAGICAL_IMMUNITY, "Magical Immunity", Rarity.LEGENDARY,
                     "Permanent shield effect"),
)

POLICIES_BY_ID: Mapping[str, PolicyDefinition] = MappingProxyType(
    {str(p.id): p for p in POLICIES}
)

MASTERIES: Mapping[MasteryAction, MasteryDefinition] = MappingProxyType(
    {
        MasteryAction.FARM: MasteryDefinition(MasteryAction.FARM, "Farming Mastery"),
        MasteryAction.CASH: MasteryDefinition(MasteryAction.CASH, "Commerce Mastery"),
        MasteryAction.EXPLORE: MasteryDefinition(MasteryAction.EXPLORE, "Exploration Mastery"),
        MasteryAction.INDUSTRY: MasteryDefinition(MasteryAction.INDUSTRY, "Industry Mastery"),
        MasteryAction.MEDITATE: MasteryDefinition(MasteryAction.MEDITATE, "Mysticism Mastery"),
    }
)

EDICTS: tuple[EdictDefinition, ...] = (
    EdictDefinition("gold_cache", "Gold Cache", Rarity.COMMON, EdictKind.GOLD, 50_000),
    EdictDefinition("food_stores", "Food Stores", Rarity.COMMON, EdictKind.FOOD, 10_000),
    EdictDefinition("rune_cache", "Rune Cache", Rarity.COMMON, EdictKind.RUNES, 500),
    EdictDefinition("conscription", "Conscription", Rarity.UNCOMMON, EdictKind.CONSCRIPT, 0.10),
    EdictDefinition("fertile_soil", "Fertile Soil", Rarity.UNCOMMON, EdictKind.LAND, 200),
    EdictDefinition("healing_wave", "Healing Wave", Rarity.UNCOMMON, EdictKind.HEALTH, 100),
    EdictDefinition("plunder", "Plunder", Rarity.RARE, EdictKind.STEAL_GOLD, 0.10),
    EdictDefinition("mass_teleport", "Mass Teleport", Rarity.RARE, EdictKind.TROOPS, 500),
    EdictDefinition("era_skip", "Era Skip", Rarity.LEGENDARY, EdictKind.ADVANCE_ERA, 1),
)

EDICTS_BY_ID: Mapping[str, EdictDefinition] = MappingProxyType({e.id: e for e in EDICTS})
