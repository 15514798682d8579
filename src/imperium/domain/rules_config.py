"""Declarative rule configuration for the simulation core."""

from __future__ import annotations

from dataclasses import dataclass

from .tables import TABLES_VERSION


@dataclass(frozen=True, slots=True)
class StartingRules:
    """Values a freshly founded empire begins with."""

    land: int = 2000
    gold: int = 50_000
    food: int = 10_000
    runes: int = 500
    peasants: int = 500
    health: int = 100
    tax_rate: int = 35
    markets: int = 50
    barracks: int = 50
    exchanges: int = 25
    farms: int = 100
    towers: int = 25
    infantry: int = 100
    cavalry: int = 20
    air: int = 10
    naval: int = 5
    wizards: int = 10
    industry_infantry: int = 50
    industry_cavalry: int = 30
    industry_air: int = 15
    industry_naval: int = 5


@dataclass(frozen=True, slots=True)
class EconomyRules:
    """Per-turn production and upkeep constants."""

    pci_base: int = 25
    land_upkeep: int = 8
    market_income: int = 500
    food_per_freeland: int = 10
    food_per_farm: int = 85
    farm_density_factor: float = 0.75
    industry_mult: float = 2.5
    runes_per_tower: int = 3
    wizards_per_tower: float = 0.1
    action_bonus: float = 1.25
    war_economy_troop_share: float = 0.5
    max_expense_reduction: float = 0.5
    loan_payment_divisor: int = 200
    explore_base: int = 20
    explore_land_factor: float = 0.00022
    explore_offset: float = 0.25
    health_regen_per_turn: int = 1
    health_max: int = 100
    min_health_to_act: int = 20
    high_tax_threshold: int = 50
    population_base_capacity: int = 100
    population_per_land: float = 0.5
    popbase_land_factor: int = 2
    popbase_freeland_factor: int = 5
    popbase_tax_offset: float = 0.95
    population_step_divisor: int = 20


@dataclass(frozen=True, slots=True)
class BuildingRules:
    base_cost: int = 1500
    land_multiplier: float = 0.05
    demolish_refund: float = 0.30
    acres_per_build_slot: int = 20
    discounted_rate_multiplier: float = 0.80
    per_turn_rate_multiplier: float = 0.75


@dataclass(frozen=True, slots=True)
class BankRules:
    savings_rate: float = 0.04
    loan_rate: float = 0.075
    loan_networth_factor: int = 50
    savings_networth_factor: int = 100
    emergency_loan_factor: int = 2


@dataclass(frozen=True, slots=True)
class MarketRules:
    """Shop-phase price generation and stock limits."""

    shop_food_buy: int = 20
    shop_food_sell: int = 15
    shop_rune_buy: int = 150
    shop_rune_sell: int = 120
    troop_buy_multiplier: float = 0.7
    troop_sell_multiplier: float = 0.5
    price_fluctuation: float = 0.2
    stock_networth_share: float = 0.05
    shop_troop_sell_limit: float = 0.5


@dataclass(frozen=True, slots=True)
class SpellRules:
    turns_per_spell: int = 2
    base_cost: int = 100
    land_factor: float = 0.1
    tower_factor: float = 0.2
    offensive_health_cost: int = 5
    offensive_per_round: int = 10
    enemy_strength_factor: float = 1.05
    food_per_wizard: int = 50
    gold_per_wizard: int = 100
    runes_base: int = 20
    runes_per_tower: float = 0.5
    wizard_loss_min: float = 0.01
    wizard_loss_max: float = 0.05
    blast_rate: float = 0.03
    blast_shielded_rate: float = 0.01
    storm_food_rate: float = 0.0912
    storm_gold_rate: float = 0.1266
    storm_shielded_food_rate: float = 0.0304
    storm_shielded_gold_rate: float = 0.0422
    struct_rate: float = 0.03
    struct_shielded_rate: float = 0.01
    struct_min_share: int = 100  # building type must be >= land / this
    steal_min: float = 0.10
    steal_max: float = 0.15
    steal_shielded_min: float = 0.03
    steal_shielded_max: float = 0.05
    fight_freeland_rate: float = 0.10 / 3
    fight_caster_wizard_loss: float = 0.05
    fight_target_wizard_loss: float = 0.07
    fight_failure_caster_loss: float = 0.08
    fight_failure_target_loss: float = 0.04
    blood_mage_health_cost: int = 5
    wild_fizzle_chance: float = 0.25


@dataclass(frozen=True, slots=True)
class CombatRules:
    win_threshold: float = 1.05
    turns_per_attack: int = 2
    attack_health_cost: int = 5
    standard_health_surcharge: int = 1
    standard_land_bonus: float = 0.15
    attacks_per_round: int = 10
    first_attack_round: int = 2
    max_kill_base: float = 0.9
    max_kill_spread: float = 0.2
    preview_land_share: float = 0.07


@dataclass(frozen=True, slots=True)
class RoundRules:
    total_rounds: int = 10
    turns_per_round: int = 50
    bot_count: int = 4


@dataclass(frozen=True, slots=True)
class DraftRules:
    advisor_options_min: int = 1
    advisor_options_max: int = 2
    other_options_min: int = 2
    other_options_max: int = 3
    base_advisor_slots: int = 3
    reroll_cost_share: float = 0.2
    max_rerolls: int = 2
    weight_common: int = 60
    weight_uncommon: int = 25
    weight_rare: int = 12
    weight_legendary: int = 3
    mastery_cap_percent: int = 60
    max_mastery_level: int = 5


@dataclass(frozen=True, slots=True)
class NetworthRules:
    per_peasant: int = 3
    per_acre: int = 500
    per_free_acre: int = 100
    cash_divisor: int = 2500
    food_factor: float = 0.06


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container for all subsystems."""

    version: str = TABLES_VERSION
    starting: StartingRules = StartingRules()
    economy: EconomyRules = EconomyRules()
    buildings: BuildingRules = BuildingRules()
    bank: BankRules = BankRules()
    market: MarketRules = MarketRules()
    spells: SpellRules = SpellRules()
    combat: CombatRules = CombatRules()
    rounds: RoundRules = RoundRules()
    draft: DraftRules = DraftRules()
    networth: NetworthRules = NetworthRules()


DEFAULT_RULES = RulesConfig()
