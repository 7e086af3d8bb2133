"""Battle session -- the state behind one battlefield.

A session owns references to the roster and the results list, the two
selected combatants as shown on the battlefield, the battle log, and the
battle currently in flight.  Everything that changes the stores goes
through the resolver or :meth:`BattleSession.add_combatant`.
"""

from __future__ import annotations

import logging

from transformer_battle.battle.cancellation import CancelToken
from transformer_battle.battle.models import BattleOutcome, RoundSnapshot
from transformer_battle.battle.resolver import (
    CombatResolver,
    CompletionCallback,
    RoundObserver,
)
from transformer_battle.config import BattleSettings
from transformer_battle.core.entities import Combatant, Faction
from transformer_battle.core.rng import BattleRNG
from transformer_battle.errors import BattleCancelled, UnknownCombatantError
from transformer_battle.store.results import ResultRecorder
from transformer_battle.store.roster import RosterStore

logger = logging.getLogger(__name__)


class BattleSession:
    """Selection, log and lifecycle of battles between two rosters.

    Parameters
    ----------
    roster:
        Source of combatants and sink for win/loss counters.
    recorder:
        Results list; a new empty one is created when omitted.
    resolver:
        Battle runner.  When omitted one is built from *settings*, wired
        to *roster* and *recorder*.
    settings:
        Used only to build the default resolver.
    """

    def __init__(
        self,
        roster: RosterStore,
        recorder: ResultRecorder | None = None,
        resolver: CombatResolver | None = None,
        settings: BattleSettings | None = None,
    ) -> None:
        self.roster = roster
        self.recorder = recorder if recorder is not None else ResultRecorder()
        if resolver is None:
            settings = settings or BattleSettings()
            resolver = CombatResolver(
                rng=BattleRNG(settings.seed),
                recorder=self.recorder,
                roster=roster,
                round_delay=settings.round_delay,
                max_rounds=settings.max_rounds,
            )
        self.resolver = resolver

        self.autobot: Combatant | None = None
        self.decepticon: Combatant | None = None
        self.logs: list[str] = []
        self._selected: dict[Faction, str] = {}
        self._token: CancelToken | None = None

    # -- queries -------------------------------------------------------------

    @property
    def is_ready(self) -> bool:
        return self.autobot is not None and self.decepticon is not None

    @property
    def in_progress(self) -> bool:
        return self._token is not None

    # -- roster --------------------------------------------------------------

    def add_combatant(self, combatant: Combatant) -> None:
        self.roster.add(combatant)

    # -- selection -----------------------------------------------------------

    def select(self, key: str) -> Combatant:
        """Put a copy of the combatant with id (or name) *key* on its side
        of the battlefield."""
        stored = self.roster.find(key)
        if stored is None:
            raise UnknownCombatantError(f"No combatant matches {key!r}")
        self._selected[stored.faction] = stored.id
        copy = stored.snapshot()
        if stored.faction is Faction.AUTOBOT:
            self.autobot = copy
        else:
            self.decepticon = copy
        logger.debug("Selected %s %s", stored.faction.value, stored.name)
        return copy

    # -- lifecycle -----------------------------------------------------------

    async def start(
        self,
        on_round: RoundObserver | None = None,
        on_complete: CompletionCallback | None = None,
    ) -> BattleOutcome | None:
        """Fight the current selection.

        Fresh copies of the selected roster entries are used, so a second
        battle between the same pair starts at full health.  Returns the
        outcome, or ``None`` if the battle was cancelled by
        :meth:`clear` / :meth:`restart` / :meth:`cancel`.
        """
        if not self.is_ready:
            outcome = await self.resolver.resolve(None, None)
            self.logs.extend(outcome.logs)
            return outcome
        if self._token is not None:
            raise RuntimeError("A battle is already in progress on this session")

        autobot = self._stored(Faction.AUTOBOT)
        decepticon = self._stored(Faction.DECEPTICON)
        token = CancelToken()
        self._token = token

        def publish(snapshot: RoundSnapshot) -> None:
            self._apply_snapshot(snapshot)
            if on_round is not None:
                on_round(snapshot)

        try:
            outcome = await self.resolver.resolve(
                autobot,
                decepticon,
                on_round=publish,
                on_complete=on_complete,
                cancel_token=token,
            )
        except BattleCancelled as exc:
            logger.info("Battle cancelled: %s", exc)
            return None
        finally:
            if self._token is token:
                self._token = None

        self.autobot = outcome.autobot
        self.decepticon = outcome.decepticon
        self.logs = list(outcome.logs)
        return outcome

    def cancel(self, reason: str = "cancelled") -> None:
        if self._token is not None:
            self._token.cancel(reason)
            self._token = None

    def clear(self) -> None:
        """Stop any battle, drop both selections and empty the log."""
        self.cancel("battlefield cleared")
        self.autobot = None
        self.decepticon = None
        self._selected.clear()
        self.logs = []
        logger.info("Battlefield cleared")

    def restart(self) -> None:
        """Stop any battle and put fresh copies of the selection back."""
        self.cancel("battle restarted")
        stored_autobot = self._stored(Faction.AUTOBOT)
        stored_decepticon = self._stored(Faction.DECEPTICON)
        self.autobot = stored_autobot.snapshot() if stored_autobot else None
        self.decepticon = stored_decepticon.snapshot() if stored_decepticon else None
        self.logs = []
        logger.info("Battle restarted")

    # -- internals -----------------------------------------------------------

    def _stored(self, faction: Faction) -> Combatant | None:
        combatant_id = self._selected.get(faction)
        if combatant_id is None:
            return None
        return self.roster.get(combatant_id)

    def _apply_snapshot(self, snapshot: RoundSnapshot) -> None:
        if self.autobot is not None:
            self.autobot = self.autobot.model_copy(update={"health": snapshot.autobot_health})
        if self.decepticon is not None:
            self.decepticon = self.decepticon.model_copy(
                update={"health": snapshot.decepticon_health},
            )
        self.logs = list(snapshot.logs)
