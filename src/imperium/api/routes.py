"""HTTP routes for the Imperium API."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

from imperium.api.runtime import ApiState, GameSession
from imperium.domain import models as dm
from imperium.domain.bank import bank_info
from imperium.domain.enums import (
    AttackType,
    BankOperation,
    BuildingType,
    MarketGood,
    Race,
    SpellType,
    TradeSide,
    TurnAction,
)
from imperium.domain.errors import ErrorKind, OperationError, RuleViolation
from imperium.domain.market import market_prices
from imperium.domain.rounds import BotOrder
from imperium.domain.spells import can_cast_spell

router = APIRouter()

ERROR_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INSUFFICIENT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.RULE_GATE: status.HTTP_409_CONFLICT,
    ErrorKind.DEFEATED: status.HTTP_409_CONFLICT,
}


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


ApiStateDep = Annotated[ApiState, Depends(get_state)]


def get_session(game_id: int, state: ApiStateDep) -> GameSession:
    try:
        return state.sessions.get(game_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="game not found"
        ) from exc


SessionDep = Annotated[GameSession, Depends(get_session)]


def _fail(error: OperationError) -> HTTPException:
    return HTTPException(
        status_code=ERROR_STATUS[error.kind],
        detail={"kind": str(error.kind), "reason": error.reason},
    )


def _payload(result: Any) -> dict[str, Any]:
    """Encode a domain result, raising the mapped HTTP error when it failed."""

    error = getattr(result, "error", None)
    if error is None:
        nested = getattr(result, "result", None)
        error = getattr(nested, "error", None)
    if error is not None:
        raise _fail(error)
    return jsonable_encoder(result)


# ---------------------------------------------------------------------------
# Request models


class CreateGameRequest(BaseModel):
    name: str = Field(min_length=1, max_length=40)
    race: Race = Race.HUMAN
    seed: int | None = Field(default=None, ge=0)


class IndustryRequest(BaseModel):
    infantry: int
    cavalry: int
    air: int
    naval: int


class ActionRequest(BaseModel):
    action: TurnAction
    turns: int = 1
    build: dict[BuildingType, int] = Field(default_factory=dict)
    demolish: dict[BuildingType, int] = Field(default_factory=dict)
    attack_type: AttackType = AttackType.STANDARD
    spell: SpellType | None = None
    target_id: int | None = None
    tax_rate: int | None = None
    industry: IndustryRequest | None = None

    def to_params(self) -> dm.ActionParams:
        industry = None
        if self.industry is not None:
            industry = dm.IndustryAllocation(**self.industry.model_dump())
        return dm.ActionParams(
            build=dict(self.build),
            demolish=dict(self.demolish),
            attack_type=self.attack_type,
            spell=self.spell,
            tax_rate=self.tax_rate,
            industry=industry,
        )


class MarketRequest(BaseModel):
    side: TradeSide
    good: MarketGood
    amount: int


class BankRequest(BaseModel):
    operation: BankOperation
    amount: int


class SpellRequest(BaseModel):
    spell: SpellType
    target_id: int | None = None


class AttackRequest(BaseModel):
    target_id: int
    attack_type: AttackType = AttackType.STANDARD


class BotOrderRequest(BaseModel):
    empire_id: int
    action: TurnAction
    turns: int = 1
    target_id: int | None = None
    attack_type: AttackType = AttackType.STANDARD
    spell: SpellType | None = None
    build: dict[BuildingType, int] = Field(default_factory=dict)


class AdvanceRequest(BaseModel):
    bot_orders: list[BotOrderRequest] = Field(default_factory=list)


class DraftSelectRequest(BaseModel):
    index: int = Field(ge=0)


# ---------------------------------------------------------------------------
# Service


@router.get("/health")
async def health(state: ApiStateDep) -> dict[str, object]:
    return {
        "status": "ok",
        "rules_version": state.settings.rules_version,
        "games": len(state.sessions),
    }


@router.get("/rules")
async def rules_overview(state: ApiStateDep) -> dict[str, object]:
    """Expose a snapshot of the rule constants for clients."""

    rules = state.rules
    return {
        "version": rules.version,
        "rounds": jsonable_encoder(rules.rounds),
        "starting": jsonable_encoder(rules.starting),
        "combat": jsonable_encoder(rules.combat),
        "bank": jsonable_encoder(rules.bank),
    }


# ---------------------------------------------------------------------------
# Games


def _game_summary(session: GameSession) -> dict[str, Any]:
    return {
        "id": int(session.id),
        "round": session.round.number,
        "phase": str(session.round.phase),
        "player": jsonable_encoder(session.player),
        "bots": [
            {
                "id": int(bot.id),
                "name": bot.name,
                "race": str(bot.race),
                "era": str(bot.era),
                "land": bot.land,
                "networth": bot.networth,
                "defeat": bot.defeat,
            }
            for bot in sorted(session.bots.values(), key=lambda bot: bot.id)
        ],
        "draft_options": jsonable_encoder(session.draft_options),
    }


@router.post("/games", status_code=status.HTTP_201_CREATED)
async def create_game(request: CreateGameRequest, state: ApiStateDep) -> dict[str, Any]:
    session = state.sessions.create_game(request.name, request.race, seed=request.seed)
    return _game_summary(session)


@router.get("/games/{game_id}")
def get_game(session: SessionDep) -> dict[str, Any]:
    return _game_summary(session)


@router.post("/games/{game_id}/actions")
def submit_action(request: ActionRequest, session: SessionDep) -> dict[str, Any]:
    try:
        result = session.apply_action(
            request.action, request.turns, request.to_params(), request.target_id
        )
    except RuleViolation as exc:
        raise _fail(exc.to_error()) from exc
    return _payload(result)


@router.get("/games/{game_id}/market")
def get_market(session: SessionDep) -> dict[str, Any]:
    try:
        prices = market_prices(session.player, session.market, session.rules)
    except RuleViolation as exc:
        raise _fail(exc.to_error()) from exc
    stock = session.market.stock.items if session.market.stock is not None else None
    return {"prices": jsonable_encoder(prices), "stock": jsonable_encoder(stock)}


@router.post("/games/{game_id}/market")
def trade(request: MarketRequest, session: SessionDep) -> dict[str, Any]:
    transaction = dm.MarketTransaction(request.side, request.good, request.amount)
    try:
        outcome = session.transact_market(transaction)
    except RuleViolation as exc:
        raise _fail(exc.to_error()) from exc
    return _payload(outcome)


@router.get("/games/{game_id}/bank")
def get_bank(session: SessionDep) -> dict[str, Any]:
    return jsonable_encoder(bank_info(session.player, session.rules))


@router.post("/games/{game_id}/bank")
def bank(request: BankRequest, session: SessionDep) -> dict[str, Any]:
    transaction = dm.BankTransaction(request.operation, request.amount)
    try:
        outcome = session.transact_bank(transaction)
    except RuleViolation as exc:
        raise _fail(exc.to_error()) from exc
    return _payload(outcome)


@router.get("/games/{game_id}/spells")
def list_spells(session: SessionDep) -> list[dict[str, Any]]:
    spells = []
    for spell in SpellType:
        check = can_cast_spell(session.player, spell, session.round.number, rules=session.rules)
        spells.append({"spell": str(spell), **jsonable_encoder(check)})
    return spells


@router.post("/games/{game_id}/spells")
def cast(request: SpellRequest, session: SessionDep) -> dict[str, Any]:
    try:
        outcome = session.cast_spell(request.spell, request.target_id)
    except RuleViolation as exc:
        raise _fail(exc.to_error()) from exc
    return _payload(outcome)


@router.get("/games/{game_id}/attacks/preview")
def preview_attack(
    target_id: int, session: SessionDep, attack_type: AttackType = AttackType.STANDARD
) -> dict[str, Any]:
    try:
        preview = session.preview_attack(target_id, attack_type)
    except RuleViolation as exc:
        raise _fail(exc.to_error()) from exc
    return jsonable_encoder(preview)


@router.post("/games/{game_id}/attacks")
def attack(request: AttackRequest, session: SessionDep) -> dict[str, Any]:
    try:
        outcome = session.attack(request.target_id, request.attack_type)
    except RuleViolation as exc:
        raise _fail(exc.to_error()) from exc
    return _payload(outcome)


@router.post("/games/{game_id}/rounds/advance")
def advance(request: AdvanceRequest, session: SessionDep) -> dict[str, Any]:
    orders: dict[dm.EmpireID, list[BotOrder]] = {}
    for item in request.bot_orders:
        params = dm.ActionParams(
            build=dict(item.build), attack_type=item.attack_type, spell=item.spell
        )
        orders.setdefault(dm.EmpireID(item.empire_id), []).append(
            BotOrder(
                action=item.action,
                turns=item.turns,
                params=params,
                target_id=dm.EmpireID(item.target_id) if item.target_id is not None else None,
            )
        )
    try:
        session.advance(orders)
    except RuleViolation as exc:
        raise _fail(exc.to_error()) from exc
    return _game_summary(session)


@router.post("/games/{game_id}/draft/select")
def select_draft(request: DraftSelectRequest, session: SessionDep) -> dict[str, Any]:
    try:
        outcome = session.select_draft(request.index)
    except RuleViolation as exc:
        raise _fail(exc.to_error()) from exc
    return _payload(outcome)


@router.post("/games/{game_id}/draft/reroll")
def reroll_draft(session: SessionDep) -> dict[str, Any]:
    try:
        outcome = session.reroll_draft()
    except RuleViolation as exc:
        raise _fail(exc.to_error()) from exc
    payload = _payload(outcome)
    payload["options"] = jsonable_encoder(session.draft_options)
    return payload


@router.delete("/games/{game_id}/advisors/{advisor_id}")
def dismiss(advisor_id: str, session: SessionDep) -> dict[str, Any]:
    return _payload(session.dismiss_advisor(advisor_id))


@router.post("/games/{game_id}/abandon")
def abandon_game(session: SessionDep) -> dict[str, Any]:
    return jsonable_encoder(session.abandon())
