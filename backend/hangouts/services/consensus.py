"""Consensus evaluator — decides whether a poll should finalize.

Pure and deterministic: the same ballots, options and participant count
always yield the same decision. No database access happens here; callers
read a fresh vote snapshot and pass it in.

Rules:
- not ready while the active participant count is below ``min_participants``
- an option qualifies when ``votes / active_participants * 100 >= threshold``
- the winner is the qualifying option with the most votes; equal counts go
  to the option that comes first in the poll's option order
"""
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

DEFAULT_THRESHOLD = 70
DEFAULT_MIN_PARTICIPANTS = 2


@dataclass(frozen=True)
class OptionTally:
    option_id: str
    votes: int
    percentage: float
    qualifies: bool


@dataclass(frozen=True)
class ConsensusDecision:
    ready: bool
    winner: Optional[dict[str, Any]]
    active_participants: int
    threshold: int
    tallies: list[OptionTally] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "ready": self.ready,
            "winner": self.winner,
            "active_participants": self.active_participants,
            "threshold": self.threshold,
            "tallies": [t.__dict__ for t in self.tallies],
        }


def count_ballots(options: Sequence[Mapping[str, Any]], ballots: Mapping[str, str]) -> dict[str, int]:
    """Count one-per-user ballots per option id, in option order.

    Ballots naming an option that is not on the poll are ignored.
    """
    counts = {opt["option_id"]: 0 for opt in options}
    for option_id in ballots.values():
        if option_id in counts:
            counts[option_id] += 1
    return counts


def _qualifies(votes: int, active_participants: int, threshold: int) -> bool:
    # integer comparison avoids 66.666...% rounding surprises
    return votes > 0 and votes * 100 >= threshold * active_participants


def evaluate(
    options: Sequence[Mapping[str, Any]],
    ballots: Mapping[str, str],
    active_participants: int,
    threshold: int = DEFAULT_THRESHOLD,
    min_participants: int = DEFAULT_MIN_PARTICIPANTS,
) -> ConsensusDecision:
    """Score every option and pick a winner if the threshold is met.

    ``ballots`` maps user id to the single option id that user's vote counts
    toward (see ``vote_ledger.canonical_ballots``).
    """
    counts = count_ballots(options, ballots)

    if active_participants <= 0 or active_participants < min_participants:
        tallies = [OptionTally(oid, n, 0.0, False) for oid, n in counts.items()]
        return ConsensusDecision(False, None, active_participants, threshold, tallies)

    tallies = [
        OptionTally(
            option_id=oid,
            votes=n,
            percentage=n / active_participants * 100,
            qualifies=_qualifies(n, active_participants, threshold),
        )
        for oid, n in counts.items()
    ]

    winner_tally: Optional[OptionTally] = None
    for tally in tallies:
        if not tally.qualifies:
            continue
        # strict '>' keeps the earliest option on equal counts
        if winner_tally is None or tally.votes > winner_tally.votes:
            winner_tally = tally

    if winner_tally is None:
        return ConsensusDecision(False, None, active_participants, threshold, tallies)

    winner = next(dict(opt) for opt in options if opt["option_id"] == winner_tally.option_id)
    return ConsensusDecision(True, winner, active_participants, threshold, tallies)


def leading_option(
    options: Sequence[Mapping[str, Any]], ballots: Mapping[str, str]
) -> Optional[dict[str, Any]]:
    """Most-voted option regardless of threshold, earliest on ties.

    None when nobody has voted. Used when the creator ends voting early.
    """
    counts = count_ballots(options, ballots)
    best_id, best = None, 0
    for option_id, votes in counts.items():
        if votes > best:
            best_id, best = option_id, votes
    if best_id is None:
        return None
    return next(dict(opt) for opt in options if opt["option_id"] == best_id)
