"""Return-to-player metrics over a game mode's library of books.

This module turns the accepted books of a simulation run into payout
arrays and summarises them per criteria and for the whole mode.
"""

from collections.abc import Iterable, Mapping
from typing import NamedTuple

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from reelbook.ledger.book import Book


class ConfidenceInterval(NamedTuple):
    """Confidence interval bounds."""

    lower: float
    upper: float
    confidence_level: float


class CriteriaSummary(NamedTuple):
    """Totals of the books of one criteria."""

    num_sims: int
    basegame_wins: float
    freespins_wins: float
    rtp: float


class ModeSummary(NamedTuple):
    """Totals of a game mode's library."""

    num_sims: int
    cost: float
    total_win: float
    rtp: float
    hit_rate: float
    max_payout: float
    criteria: dict[str, CriteriaSummary]


def payout_array(books: Iterable[Book]) -> NDArray[np.float64]:
    """Payout multipliers of the given books.

    Example:
        >>> payout_array([Book(id=1, payout=150), Book(id=2, payout=0)])
        array([1.5, 0. ])
    """
    return np.array([book.payout for book in books], dtype=np.float64) / 100.0


def rtp(payouts: NDArray[np.float64], cost: float = 1.0) -> float:
    """Return to player: mean payout per unit of stake.

    Args:
        payouts: Payout multipliers, one per simulation.
        cost: Cost of one spin as a bet multiplier.

    Returns:
        RTP as a fraction, 0.0 for no payouts.

    Raises:
        ValueError: If cost is not positive.
    """
    if cost <= 0:
        raise ValueError("cost must be positive")
    if payouts.size == 0:
        return 0.0
    return float(np.mean(payouts) / cost)


def hit_rate(payouts: NDArray[np.float64]) -> float:
    """Fraction of simulations with a positive payout."""
    if payouts.size == 0:
        return 0.0
    return float(np.count_nonzero(payouts > 0) / payouts.size)


def payout_confidence_interval(
    payouts: NDArray[np.float64],
    confidence_level: float = 0.95,
) -> ConfidenceInterval:
    """Normal-approximation confidence interval of the mean payout.

    Args:
        payouts: Payout multipliers, one per simulation.
        confidence_level: Confidence level between 0 and 1 (default 0.95).

    Returns:
        ConfidenceInterval named tuple with lower, upper, and confidence_level.

    Raises:
        ValueError: If confidence_level is not between 0 and 1.
    """
    if not 0 < confidence_level < 1:
        raise ValueError("confidence_level must be between 0 and 1")

    if payouts.size == 0:
        return ConfidenceInterval(0.0, 0.0, confidence_level)

    mean = float(np.mean(payouts))
    if payouts.size == 1:
        return ConfidenceInterval(mean, mean, confidence_level)

    alpha = 1 - confidence_level
    z = float(stats.norm.ppf(1 - alpha / 2))
    half_width = z * float(np.std(payouts, ddof=1)) / np.sqrt(payouts.size)
    return ConfidenceInterval(mean - half_width, mean + half_width, confidence_level)


def summarize_mode(library: Mapping[int, Book], cost: float) -> ModeSummary:
    """Summarise a game mode's library per criteria and overall.

    Per criteria RTP is the criteria's total win over the stake of its own
    simulations.

    Args:
        library: Simulation id to accepted book.
        cost: Cost of one spin in the mode.

    Returns:
        ModeSummary of the library.
    """
    books = list(library.values())
    payouts = payout_array(books)

    by_criteria: dict[str, list[Book]] = {}
    for book in books:
        by_criteria.setdefault(book.criteria, []).append(book)

    criteria = {}
    for label, group in by_criteria.items():
        basegame = float(np.sum([book.basegame_wins for book in group]))
        freespins = float(np.sum([book.freespins_wins for book in group]))
        criteria[label] = CriteriaSummary(
            num_sims=len(group),
            basegame_wins=basegame,
            freespins_wins=freespins,
            rtp=(basegame + freespins) / (len(group) * cost),
        )

    return ModeSummary(
        num_sims=len(books),
        cost=cost,
        total_win=float(np.sum(payouts)),
        rtp=rtp(payouts, cost),
        hit_rate=hit_rate(payouts),
        max_payout=float(np.max(payouts)) if payouts.size else 0.0,
        criteria=criteria,
    )
