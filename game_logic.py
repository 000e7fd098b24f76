import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from cricket_rules import (
    DARTS_PER_TURN, PLAYERS, PlayerStats, Target, Throw, Variant,
    compute_player_stats, get_variant, other_player, throw_problem,
)

logger = logging.getLogger(__name__)

MATCH_TYPES = {
    "best-of-3": 3,
    "best-of-5": 5,
    "best-of-7": 7,
    "custom": None,
}


class InvalidMatchConfig(ValueError):
    """Raised at match start for a configuration that cannot be played."""


@dataclass
class MatchConfig:
    variant: Union[str, Variant] = "standard"
    total_legs: Optional[int] = None
    match_type: str = "custom"
    player_names: Tuple[str, str] = ("Player 1", "Player 2")

    def __post_init__(self):
        if isinstance(self.variant, str):
            try:
                self.variant = get_variant(self.variant)
            except ValueError as e:
                raise InvalidMatchConfig(str(e)) from e

        if self.match_type not in MATCH_TYPES:
            raise InvalidMatchConfig(
                f"Unknown match type {self.match_type!r}, expected one of {list(MATCH_TYPES)}"
            )
        preset = MATCH_TYPES[self.match_type]
        if preset is not None:
            if self.total_legs is not None and self.total_legs != preset:
                raise InvalidMatchConfig(f"{self.match_type} is {preset} legs, got total_legs={self.total_legs}")
            self.total_legs = preset
        elif self.total_legs is None:
            self.total_legs = 3

        validate_total_legs(self.total_legs)

        names = tuple(self.player_names)
        if len(names) != 2:
            raise InvalidMatchConfig(f"Cricket is played by 2 players, got {len(names)} names")
        if not all(isinstance(n, str) for n in names):
            raise InvalidMatchConfig(f"player names must be strings, got {names!r}")
        self.player_names = tuple(n.strip() or f"Player {i}" for i, n in zip(PLAYERS, names))


def validate_total_legs(total_legs) -> int:
    if isinstance(total_legs, bool) or not isinstance(total_legs, int):
        raise InvalidMatchConfig(f"total_legs must be an integer, got {total_legs!r}")
    if total_legs <= 0 or total_legs % 2 == 0:
        raise InvalidMatchConfig(f"total_legs must be a positive odd number, got {total_legs}")
    return total_legs


def legs_needed(total_legs: int) -> int:
    return -(-total_legs // 2)


# ===============================
# --- Session state
# ===============================
class Phase(str, Enum):
    ACTIVE = "active"
    LEG_WON = "leg_won"
    MATCH_WON = "match_won"


@dataclass(frozen=True)
class TurnState:
    current_player: int = 1
    darts_thrown: int = 0


@dataclass(frozen=True)
class LegOutcome:
    winner: Optional[int] = None


@dataclass(frozen=True)
class LegResult:
    leg: int
    winner: int
    scores: Dict[int, int]


@dataclass
class MatchState:
    total_legs: int
    legs_won: Dict[int, int] = field(default_factory=lambda: {1: 0, 2: 0})
    current_leg: int = 1
    winner: Optional[int] = None
    history: List[LegResult] = field(default_factory=list)

    @property
    def legs_needed(self) -> int:
        return legs_needed(self.total_legs)

    def to_dict(self) -> dict:
        return {
            "total_legs": self.total_legs,
            "legs_needed": self.legs_needed,
            "legs_won": dict(self.legs_won),
            "current_leg": self.current_leg,
            "winner": self.winner,
            "history": [
                {"leg": r.leg, "winner": r.winner, "scores": dict(r.scores)} for r in self.history
            ],
        }


@dataclass(frozen=True)
class Snapshot:
    """Everything a host needs to redraw after a command."""

    accepted: bool
    phase: Phase
    variant: str
    player_names: Tuple[str, str]
    turn: TurnState
    stats: Dict[int, PlayerStats]
    disabled_targets: Tuple[Target, ...]
    leg_winner: Optional[int]
    match: MatchState
    logs: Dict[int, Tuple[Throw, ...]]

    def to_dict(self) -> dict:
        return {
            "accepted": self.accepted,
            "phase": self.phase.value,
            "variant": self.variant,
            "players": {p: name for p, name in zip(PLAYERS, self.player_names)},
            "current_player": self.turn.current_player,
            "darts_thrown": self.turn.darts_thrown,
            "stats": {p: s.to_dict() for p, s in self.stats.items()},
            "disabled_targets": [t.value for t in self.disabled_targets],
            "leg_winner": self.leg_winner,
            "match": self.match.to_dict(),
            "throws": {p: [t.to_dict() for t in log] for p, log in self.logs.items()},
        }


# ===============================
# --- Match session
# ===============================
class MatchSession:
    """
    One two-player cricket match: the throw logs of the current leg,
    whose turn it is, and the leg/match tally.

    Every command returns a fresh Snapshot. Illegal commands change
    nothing and come back with accepted=False.
    """

    def __init__(self, config: Optional[MatchConfig] = None):
        self.config = config or MatchConfig()
        self._reset_match()

    # --- lifecycle

    def new_match(self, config: MatchConfig) -> Snapshot:
        self.config = config
        self._reset_match()
        logger.info("[match-start] variant=%s legs=%d players=%s",
                    self.variant.name, self.match.total_legs, self.config.player_names)
        return self.snapshot()

    def start_match(self, total_legs: int) -> Snapshot:
        """Restart with a new leg count, keeping variant and player names."""
        validate_total_legs(total_legs)
        return self.new_match(MatchConfig(
            variant=self.variant,
            total_legs=total_legs,
            player_names=self.config.player_names,
        ))

    def _reset_match(self):
        self.match = MatchState(total_legs=self.config.total_legs)
        self.phase = Phase.ACTIVE
        self._clear_leg()

    def _clear_leg(self):
        self.logs: Dict[int, List[Throw]] = {1: [], 2: []}
        self.current_player = 1
        self.darts_thrown = 0
        self.leg_winner: Optional[int] = None

    @property
    def variant(self) -> Variant:
        return self.config.variant

    # --- commands

    def record_throw(self, target: Union[Target, str], multiplier: int = 1) -> Snapshot:
        reason = self._throw_rejection(target, multiplier)
        if reason:
            return self._reject("throw", reason)

        throw = Throw(_as_target(target), multiplier)
        self.logs[self.current_player].append(throw)
        self.darts_thrown += 1
        logger.debug("[throw] player=%d target=%s x%d dart=%d",
                     self.current_player, throw.target.value, multiplier, self.darts_thrown)
        self._check_leg_winner()
        return self.snapshot()

    def undo_last(self) -> Snapshot:
        if self.phase is not Phase.ACTIVE:
            return self._reject("undo", f"phase is {self.phase.value}")
        log = self.logs[self.current_player]
        if not log:
            return self._reject("undo", f"player {self.current_player} has no throws")

        throw = log.pop()
        self.darts_thrown = max(0, self.darts_thrown - 1)
        logger.debug("[undo] player=%d target=%s x%d", self.current_player, throw.target.value, throw.multiplier)
        self._check_leg_winner()
        return self.snapshot()

    def switch_player(self) -> Snapshot:
        if self.phase is not Phase.ACTIVE:
            return self._reject("switch", f"phase is {self.phase.value}")
        self.current_player = other_player(self.current_player)
        self.darts_thrown = 0
        logger.debug("[switch] player=%d to throw", self.current_player)
        return self.snapshot()

    def reset_leg(self) -> Snapshot:
        if self.phase is Phase.MATCH_WON:
            return self._reject("reset", "match is over")
        self._clear_leg()
        self.phase = Phase.ACTIVE
        logger.debug("[reset] leg %d restarted", self.match.current_leg)
        return self.snapshot()

    def advance_leg(self) -> Snapshot:
        if self.phase is not Phase.LEG_WON:
            return self._reject("advance", f"phase is {self.phase.value}")

        winner = self.leg_winner
        scores = {p: s.score for p, s in self._stats().items()}
        self.match.legs_won[winner] += 1
        self.match.history.append(LegResult(leg=self.match.current_leg, winner=winner, scores=scores))

        if self.match.legs_won[winner] >= self.match.legs_needed:
            self.match.winner = winner
            self.phase = Phase.MATCH_WON
            logger.info("[match-won] player=%d legs=%s", winner, self.match.legs_won)
            return self.snapshot()

        self.match.current_leg += 1
        self._clear_leg()
        self.phase = Phase.ACTIVE
        logger.info("[next-leg] leg=%d of %d legs_won=%s",
                    self.match.current_leg, self.match.total_legs, self.match.legs_won)
        return self.snapshot()

    # --- queries

    def get_stats(self, player: int) -> PlayerStats:
        return self._stats()[player]

    def is_target_disabled(self, target: Union[Target, str]) -> bool:
        """True once both players have closed the target."""
        target = _as_target(target)
        if target is None or target not in self.variant:
            return False
        stats = self._stats()
        return all(stats[p].closed[target] for p in PLAYERS)

    def is_multiplier_available(self, target: Union[Target, str], multiplier: int) -> bool:
        """Whether record_throw(target, multiplier) would be accepted now."""
        return self._throw_rejection(target, multiplier) is None

    def get_turn_state(self) -> TurnState:
        return TurnState(current_player=self.current_player, darts_thrown=self.darts_thrown)

    def get_leg_outcome(self) -> LegOutcome:
        return LegOutcome(winner=self.leg_winner)

    def get_match_state(self) -> MatchState:
        return copy.deepcopy(self.match)

    def snapshot(self, accepted: bool = True) -> Snapshot:
        stats = self._stats()
        return Snapshot(
            accepted=accepted,
            phase=self.phase,
            variant=self.variant.name,
            player_names=self.config.player_names,
            turn=self.get_turn_state(),
            stats=stats,
            disabled_targets=tuple(
                t for t in self.variant.targets if all(stats[p].closed[t] for p in PLAYERS)
            ),
            leg_winner=self.leg_winner,
            match=self.get_match_state(),
            logs={p: tuple(log) for p, log in self.logs.items()},
        )

    # --- internals

    def _stats(self) -> Dict[int, PlayerStats]:
        return compute_player_stats(self.logs[1], self.logs[2], self.variant)

    def _throw_rejection(self, target, multiplier) -> Optional[str]:
        if self.phase is not Phase.ACTIVE:
            return f"phase is {self.phase.value}"
        if self.darts_thrown >= DARTS_PER_TURN:
            return "turn is full"
        target = _as_target(target)
        if target is None or target not in self.variant:
            return f"not a {self.variant.title} target"
        problem = throw_problem(target, multiplier)
        if problem:
            return problem

        stats = self._stats()
        own, opp = stats[self.current_player], stats[other_player(self.current_player)]
        if own.closed[target] and opp.closed[target]:
            if not self.variant.scoring_rule.special_shot(own.closed, opp.closed, multiplier):
                return f"{target.value} is closed by both players"
        return None

    def _check_leg_winner(self):
        winner = find_leg_winner(self._stats(), self.variant, last_thrower=self.current_player)
        if winner is not None:
            self.leg_winner = winner
            self.phase = Phase.LEG_WON
            logger.info("[leg-won] leg=%d player=%d", self.match.current_leg, winner)

    def _reject(self, command: str, reason: str) -> Snapshot:
        logger.debug("[%s-rejected] %s", command, reason)
        return self.snapshot(accepted=False)


def find_leg_winner(stats: Dict[int, PlayerStats], variant: Variant, last_thrower: int) -> Optional[int]:
    """
    A player wins the leg with every target closed and a score at least
    equal to the opponent's. If both qualify at once the player who made
    the last move takes the leg.
    """
    qualified = [
        p for p in PLAYERS
        if stats[p].all_closed(variant.targets) and stats[p].score >= stats[other_player(p)].score
    ]
    if not qualified:
        return None
    if len(qualified) == 2:
        return last_thrower
    return qualified[0]


def _as_target(value) -> Optional[Target]:
    if isinstance(value, Target):
        return value
    try:
        return Target(str(value).upper())
    except ValueError:
        return None
