"""Runtime primitives backing the Imperium HTTP API.

Each game lives in a :class:`GameSession` that owns a lock; every mutating
call takes it, so requests against one game never interleave.  Sessions
are held in memory only.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from imperium.config import Settings, get_settings
from imperium.domain import models as dm
from imperium.domain.actions import apply_action
from imperium.domain.bank import transact_bank
from imperium.domain.combat import CombatPreview, combat_preview, resolve_combat
from imperium.domain.defeat import abandon
from imperium.domain.draft import (
    DraftOption,
    DraftOutcome,
    apply_draft_selection,
    dismiss_advisor,
    generate_draft_options,
    reroll_draft,
)
from imperium.domain.empire import create_empire
from imperium.domain.enums import AttackType, GamePhase, Race, SpellType, TurnAction
from imperium.domain.errors import gated, invalid
from imperium.domain.market import open_shop, transact_market
from imperium.domain.rounds import BotOrder, advance_round, next_phase, resolve_bot_phase
from imperium.domain.rules_config import RulesConfig
from imperium.domain.spells import cast_spell

logger = logging.getLogger(__name__)

PLAYER_ID = dm.EmpireID(1)
BOT_RACES: tuple[Race, ...] = tuple(Race)


@dataclass(slots=True)
class GameSession:
    """One running game: the player, the bots and the phase-global state."""

    id: dm.GameID
    seed: int
    rules: RulesConfig
    player: dm.Empire
    bots: dict[dm.EmpireID, dm.Empire]
    round: dm.GameRound = field(default_factory=dm.GameRound)
    market: dm.MarketState = field(
        default_factory=lambda: dm.MarketState(phase=GamePhase.PLAYER)
    )
    draft_options: list[DraftOption] = field(default_factory=list)
    rerolls_used: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def context(self) -> dm.GameContext:
        return dm.GameContext(
            game_id=self.id,
            current_round=self.round.number,
            phase=self.round.phase,
            rules=self.rules,
        )

    def phase_seed(self, label: str) -> str:
        return f"{self.seed}:{self.id}:{self.round.number}:{label}"

    def empire(self, empire_id: int) -> dm.Empire:
        if empire_id == self.player.id:
            return self.player
        bot = self.bots.get(dm.EmpireID(empire_id))
        if bot is None:
            raise invalid(f"Empire {empire_id} is not part of this game")
        return bot

    def store(self, empire: dm.Empire | None) -> None:
        if empire is None:
            return
        if empire.id == self.player.id:
            self.player = empire
        else:
            self.bots[empire.id] = empire

    def require_phase(self, *phases: GamePhase) -> None:
        if self.round.phase not in phases:
            allowed = ", ".join(str(phase) for phase in phases)
            raise gated(f"Only allowed during the {allowed} phase, not {self.round.phase}")

    # -- player operations -----------------------------------------------------------

    def apply_action(
        self,
        action: TurnAction,
        turns: int,
        params: dm.ActionParams,
        target_id: int | None = None,
    ) -> dm.TurnActionResult:
        with self.lock:
            self.require_phase(GamePhase.PLAYER)
            if target_id is not None:
                params.target = self.empire(target_id)
            result = apply_action(self.player, action, turns, params, self.context)
            self.store(result.empire)
            self.store(result.target)
            return result

    def attack(self, target_id: int, attack_type: AttackType) -> dm.CombatOutcome:
        with self.lock:
            self.require_phase(GamePhase.PLAYER)
            outcome = resolve_combat(
                self.player, self.empire(target_id), attack_type, self.context
            )
            self.store(outcome.attacker)
            self.store(outcome.defender)
            return outcome

    def preview_attack(self, target_id: int, attack_type: AttackType) -> CombatPreview:
        with self.lock:
            return combat_preview(
                self.player,
                self.empire(target_id),
                attack_type,
                self.round.number,
                self.rules,
            )

    def cast_spell(self, spell: SpellType, target_id: int | None = None) -> dm.SpellOutcome:
        with self.lock:
            self.require_phase(GamePhase.PLAYER)
            target = self.empire(target_id) if target_id is not None else None
            outcome = cast_spell(self.player, spell, self.context, target)
            self.store(outcome.empire)
            self.store(outcome.target)
            return outcome

    def transact_market(self, transaction: dm.MarketTransaction) -> dm.MarketOutcome:
        with self.lock:
            self.require_phase(GamePhase.PLAYER, GamePhase.SHOP)
            outcome = transact_market(self.player, self.market, transaction, self.rules)
            self.player = outcome.empire
            self.market = outcome.market
            return outcome

    def transact_bank(self, transaction: dm.BankTransaction) -> dm.BankOutcome:
        with self.lock:
            self.require_phase(GamePhase.PLAYER, GamePhase.SHOP)
            outcome = transact_bank(self.player, transaction, self.rules)
            self.player = outcome.empire
            return outcome

    # -- draft -----------------------------------------------------------------------

    def select_draft(self, index: int) -> DraftOutcome:
        with self.lock:
            self.require_phase(GamePhase.SHOP)
            if not 0 <= index < len(self.draft_options):
                raise invalid(f"No draft option {index}")
            option = self.draft_options[index]
            outcome = apply_draft_selection(
                self.player, option, self.rules, rivals=list(self.bots.values())
            )
            if outcome.success:
                self.player = outcome.empire
                self.store(outcome.rival)
                self.draft_options = []
            return outcome

    def reroll_draft(self) -> DraftOutcome:
        with self.lock:
            self.require_phase(GamePhase.SHOP)
            if not self.draft_options:
                raise gated("There is no draft to reroll")
            outcome, options = reroll_draft(
                self.player, self.phase_seed("draft"), self.rerolls_used, self.rules
            )
            if outcome.success:
                self.player = outcome.empire
                self.draft_options = options
                self.rerolls_used += 1
            return outcome

    def dismiss_advisor(self, advisor_id: str) -> DraftOutcome:
        with self.lock:
            outcome = dismiss_advisor(self.player, advisor_id, self.rules)
            self.player = outcome.empire
            return outcome

    def abandon(self) -> dm.Empire:
        with self.lock:
            self.player = abandon(self.player)
            logger.info("game %s abandoned in round %d", self.id, self.round.number)
            return self.player

    # -- phases ----------------------------------------------------------------------

    def advance(
        self, bot_orders: Mapping[dm.EmpireID, Sequence[BotOrder]] | None = None
    ) -> dm.GameRound:
        """Finish the current phase and enter the next one."""

        with self.lock:
            if self.round.is_complete:
                raise gated("The game is already complete")
            phase = self.round.phase
            if phase == GamePhase.PLAYER:
                self._enter_shop()
            elif phase == GamePhase.SHOP:
                self.round = next_phase(self.round, self.rules)
                self.market = dm.MarketState(phase=GamePhase.BOT)
                self.draft_options = []
            else:
                self._finish_round(bot_orders or {})
            logger.info(
                "game %s moved from %s to round %d %s",
                self.id,
                phase,
                self.round.number,
                self.round.phase,
            )
            return self.round

    def _enter_shop(self) -> None:
        self.round = next_phase(self.round, self.rules)
        self.market = open_shop(self.player, self.phase_seed("shop"), self.rules)
        self.rerolls_used = 0
        if self.player.is_defeated:
            self.draft_options = []
        else:
            self.draft_options = generate_draft_options(
                self.player, self.phase_seed("draft"), self.rules
            )

    def _finish_round(self, bot_orders: Mapping[dm.EmpireID, Sequence[BotOrder]]) -> None:
        phase = resolve_bot_phase(self.bots.values(), self.player, bot_orders, self.context)
        self.player = phase.player
        self.bots = {bot.id: bot for bot in phase.bots}

        for empire in [self.player, *self.bots.values()]:
            if empire.is_defeated:
                continue
            self.store(advance_round(empire, self.round.number, self.rules).empire)
        self.round = next_phase(self.round, self.rules)
        self.market = dm.MarketState(phase=self.round.phase)


class SessionRegistry:
    """In-memory sessions keyed by game id."""

    def __init__(self, *, rules: RulesConfig, bot_count: int, default_seed: int = 0) -> None:
        self._rules = rules
        self._bot_count = bot_count
        self._default_seed = default_seed
        self._sessions: dict[dm.GameID, GameSession] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def create_game(self, name: str, race: Race, *, seed: int | None = None) -> GameSession:
        with self._lock:
            game_id = dm.GameID(max(self._sessions, default=0) + 1)
            player = create_empire(PLAYER_ID, name, race, rules=self._rules)
            bots = {}
            for index in range(self._bot_count):
                bot_id = dm.EmpireID(int(PLAYER_ID) + index + 1)
                bots[bot_id] = create_empire(
                    bot_id,
                    f"Bot {index + 1}",
                    BOT_RACES[index % len(BOT_RACES)],
                    is_bot=True,
                    rules=self._rules,
                )
            session = GameSession(
                id=game_id,
                seed=self._default_seed if seed is None else seed,
                rules=self._rules,
                player=player,
                bots=bots,
            )
            self._sessions[game_id] = session
        logger.info("game %s created for %s (%s) with %d bots", game_id, name, race, len(bots))
        return session

    def get(self, game_id: int) -> GameSession:
        """Return the session or raise ``KeyError``."""

        return self._sessions[dm.GameID(game_id)]

    def close_all(self) -> None:
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
        logger.info("closed %d game sessions", count)


class ApiState:
    """Aggregated services shared by the FastAPI layer."""

    def __init__(self, *, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.rules = self.settings.rules()
        self.sessions = SessionRegistry(
            rules=self.rules,
            bot_count=self.settings.bot_count,
            default_seed=self.settings.default_seed,
        )

    async def shutdown(self) -> None:
        self.sessions.close_all()


def build_state() -> ApiState:
    """Factory used by the API to initialize state."""

    return ApiState()

