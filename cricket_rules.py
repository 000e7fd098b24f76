from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

# ===============================
# --- Targets
# ===============================
MAX_MARKS = 3
DARTS_PER_TURN = 3
PLAYERS = (1, 2)


class Target(str, Enum):
    """Cricket targets. D and T are the Super Cricket double/triple areas."""

    TWENTY = "20"
    NINETEEN = "19"
    EIGHTEEN = "18"
    SEVENTEEN = "17"
    SIXTEEN = "16"
    FIFTEEN = "15"
    BULL = "B"
    DOUBLE = "D"
    TRIPLE = "T"

    @property
    def point_value(self) -> int:
        if self is Target.BULL:
            return 25
        if self in (Target.DOUBLE, Target.TRIPLE):
            return 0
        return int(self.value)

    @property
    def is_area(self) -> bool:
        return self in (Target.DOUBLE, Target.TRIPLE)


NUMBER_TARGETS = (
    Target.TWENTY, Target.NINETEEN, Target.EIGHTEEN,
    Target.SEVENTEEN, Target.SIXTEEN, Target.FIFTEEN,
)


def throw_problem(target: Target, multiplier: int) -> Optional[str]:
    """Return why (target, multiplier) can never be a dart, or None."""
    if isinstance(multiplier, bool) or not isinstance(multiplier, int) or multiplier not in (1, 2, 3):
        return f"multiplier must be 1, 2 or 3, got {multiplier!r}"
    if target is Target.BULL and multiplier == 3:
        return "bull cannot be a triple"
    if target.is_area and multiplier != 1:
        return f"{target.value} area is always a single mark"
    return None


@dataclass(frozen=True)
class Throw:
    """One recorded dart."""

    target: Target
    multiplier: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "target", Target(self.target))
        problem = throw_problem(self.target, self.multiplier)
        if problem:
            raise ValueError(problem)

    def to_dict(self) -> dict:
        return {"target": self.target.value, "multiplier": self.multiplier}


# ===============================
# --- Variants
# ===============================
class StandardRule:
    """Plain cricket: closed-by-opponent numbers never score."""

    name = "standard"

    def special_shot(self, own_closed: Dict[Target, bool],
                     opp_closed: Dict[Target, bool], multiplier: int) -> bool:
        return False


class SuperRule(StandardRule):
    """
    Super Cricket: closing T (resp. D) before the opponent lets triples
    (resp. doubles) keep scoring on numbers the opponent has closed.
    """

    name = "super"

    def special_shot(self, own_closed, opp_closed, multiplier):
        opened_triples = own_closed.get(Target.TRIPLE, False) and not opp_closed.get(Target.TRIPLE, False)
        opened_doubles = own_closed.get(Target.DOUBLE, False) and not opp_closed.get(Target.DOUBLE, False)
        return (multiplier == 3 and opened_triples) or (multiplier == 2 and opened_doubles)


@dataclass(frozen=True)
class Variant:
    name: str
    title: str
    targets: Tuple[Target, ...]
    scoring_rule: StandardRule

    def __contains__(self, target) -> bool:
        return target in self.targets


STANDARD = Variant(
    name="standard",
    title="Cricket",
    targets=NUMBER_TARGETS + (Target.BULL,),
    scoring_rule=StandardRule(),
)

SUPER = Variant(
    name="super",
    title="Super Cricket",
    targets=NUMBER_TARGETS + (Target.BULL, Target.DOUBLE, Target.TRIPLE),
    scoring_rule=SuperRule(),
)

VARIANTS = {v.name: v for v in (STANDARD, SUPER)}


def get_variant(name: str) -> Variant:
    try:
        return VARIANTS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown cricket variant {name!r}, expected one of {sorted(VARIANTS)}") from None


# ===============================
# --- Derived stats
# ===============================
@dataclass
class PlayerStats:
    marks: Dict[Target, int] = field(default_factory=dict)
    closed: Dict[Target, bool] = field(default_factory=dict)
    score: int = 0

    def all_closed(self, targets: Iterable[Target]) -> bool:
        return all(self.closed.get(t, False) for t in targets)

    def to_dict(self) -> dict:
        return {
            "marks": {t.value: m for t, m in self.marks.items()},
            "closed": {t.value: c for t, c in self.closed.items()},
            "score": self.score,
        }


def _empty_stats(targets: Iterable[Target]) -> PlayerStats:
    targets = list(targets)
    return PlayerStats(marks={t: 0 for t in targets}, closed={t: False for t in targets})


def _apply_marks(stats: PlayerStats, throw: Throw) -> int:
    """Add a throw's marks to stats (capped at 3); return the excess marks."""
    prev = stats.marks.get(throw.target, 0)
    stats.marks[throw.target] = min(prev + throw.multiplier, MAX_MARKS)
    if stats.marks[throw.target] >= MAX_MARKS:
        stats.closed[throw.target] = True
    return max(0, prev + throw.multiplier - MAX_MARKS)


def compute_stats(log: Sequence[Throw], targets: Iterable[Target]) -> PlayerStats:
    """Marks and closed state for one player's log. Score is left at 0."""
    stats = _empty_stats(targets)
    for throw in log:
        _apply_marks(stats, throw)
    return stats


# ===============================
# --- Chronological order
# ===============================
MergedThrow = Tuple[Throw, int, int]
# (throw, player, index in that player's log)


def merge_throws(log1: Sequence[Throw], log2: Sequence[Throw]) -> List[MergedThrow]:
    """
    Rebuild game order from two logs, assuming players alternate turns
    of three darts with player 1 first.
    """
    longest = max(len(log1), len(log2))
    max_turns = -(-longest // DARTS_PER_TURN)
    merged: List[MergedThrow] = []
    for turn in range(max_turns):
        start, stop = turn * DARTS_PER_TURN, (turn + 1) * DARTS_PER_TURN
        for player, log in ((1, log1), (2, log2)):
            for index in range(start, min(stop, len(log))):
                merged.append((log[index], player, index))
    return merged


# ===============================
# --- Scoring
# ===============================
def compute_scores(log1: Sequence[Throw], log2: Sequence[Throw], variant: Variant) -> Dict[int, int]:
    """
    Replay both logs in game order and return {player: score}.

    A throw scores its excess marks times the target's point value when
    the opponent has not closed the target at that moment, or when the
    variant's rule grants a special shot based on the thrower's closed
    state before the throw.
    """
    live = {p: _empty_stats(variant.targets) for p in PLAYERS}
    scores = {p: 0 for p in PLAYERS}
    rule = variant.scoring_rule

    for throw, player, _ in merge_throws(log1, log2):
        own, opp = live[player], live[other_player(player)]
        special = rule.special_shot(own.closed, opp.closed, throw.multiplier)
        excess = _apply_marks(own, throw)
        if excess and (not opp.closed.get(throw.target, False) or special):
            scores[player] += excess * throw.target.point_value
    return scores


def compute_score(for_player: int, log1: Sequence[Throw], log2: Sequence[Throw], variant: Variant) -> int:
    return compute_scores(log1, log2, variant)[for_player]


def compute_player_stats(log1: Sequence[Throw], log2: Sequence[Throw], variant: Variant) -> Dict[int, PlayerStats]:
    """Full derived stats (marks, closed, score) for both players."""
    scores = compute_scores(log1, log2, variant)
    stats = {1: compute_stats(log1, variant.targets), 2: compute_stats(log2, variant.targets)}
    for player in PLAYERS:
        stats[player].score = scores[player]
    return stats


def other_player(player: int) -> int:
    return 2 if player == 1 else 1
