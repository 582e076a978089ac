"""Outcome categories ("result sets") and deterministic criteria assignment.

Each game mode declares a pool of result sets. Every simulation id is
assigned exactly one result set up front, and an attempt is retried with a
fresh draw until it satisfies that result set's acceptance rule.
"""

import logging
import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from reelbook.errors import ConfigurationError
from reelbook.sim.rng import RandomSource
from reelbook.sim.state import StateSnapshot

logger = logging.getLogger(__name__)

WeightsFn = Callable[[StateSnapshot], Mapping[str, float] | None]
AcceptFn = Callable[[StateSnapshot], bool]


@dataclass(frozen=True, slots=True)
class FixedReelWeights:
    """Static reel-set weights per spin type.

    Attributes:
        per_spin_type: Spin type to a mapping of reel set id to weight.
    """

    per_spin_type: Mapping[str, Mapping[str, float]]

    def weights_for(self, snapshot: StateSnapshot) -> Mapping[str, float]:
        """Reel set weights of the snapshot's spin type."""
        weights = self.per_spin_type.get(snapshot.spin_type)
        if not weights:
            raise ConfigurationError(
                f'no reel weights for spin type "{snapshot.spin_type}" '
                f'in criteria "{snapshot.criteria}"'
            )
        return weights


@dataclass(frozen=True, slots=True)
class ComputedReelWeights:
    """Reel-set weights computed from the attempt state.

    ``func`` receives a read-only snapshot. When it returns an empty or
    ``None`` result, the static ``fallback`` weights are used instead.
    """

    func: WeightsFn
    fallback: FixedReelWeights

    def weights_for(self, snapshot: StateSnapshot) -> Mapping[str, float]:
        """Weights chosen by the callback, or the fallback's when it returns none."""
        weights = self.func(snapshot)
        if weights:
            return weights
        return self.fallback.weights_for(snapshot)


ReelWeights = FixedReelWeights | ComputedReelWeights


@dataclass(frozen=True, slots=True)
class ResultSet:
    """A named target bucket of simulation outcomes.

    Attributes:
        criteria: Short label for the bucket, e.g. "0", "basegame", "freegame".
        quota: Fraction (0 to 1) of the mode's simulations forced into it.
        reel_weights: Reel-set weights, fixed or computed. A plain mapping of
            spin type to weights is accepted and wrapped.
        multiplier: If set, the final win must equal this multiplier.
        force_max_win: Require the final win to reach the game's max win.
        force_freespins: Require the free-spin feature to be triggered.
        evaluate: Optional extra acceptance predicate.
        user_data: Arbitrary data the game flow can read.
    """

    criteria: str
    quota: float
    reel_weights: ReelWeights
    multiplier: float | None = None
    force_max_win: bool = False
    force_freespins: bool = False
    evaluate: AcceptFn | None = None
    user_data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate the result set."""
        if not self.criteria:
            raise ConfigurationError("criteria cannot be empty")
        if not 0 <= self.quota <= 1:
            raise ConfigurationError(
                f'quota of criteria "{self.criteria}" must be between 0 and 1'
            )
        if self.multiplier is not None and self.multiplier < 0:
            raise ConfigurationError(
                f'multiplier of criteria "{self.criteria}" cannot be negative'
            )
        if isinstance(self.reel_weights, Mapping):
            object.__setattr__(self, "reel_weights", FixedReelWeights(self.reel_weights))

    def meets_criteria(self, snapshot: StateSnapshot, max_win: float) -> bool:
        """Test a completed attempt against this result set.

        All of the following must hold: a forced feature was triggered; the
        win equals ``multiplier`` when one is declared (otherwise any
        positive win); a forced max win reached ``max_win``; and the custom
        predicate, if any, returned True.

        Args:
            snapshot: State of the completed attempt.
            max_win: The game's max-win multiplier.

        Returns:
            True if the attempt is accepted.
        """
        win = snapshot.current_win

        freespins_met = snapshot.triggered_freespins if self.force_freespins else True

        if self.multiplier is not None:
            # Compared at the stored precision (multiplier x 100)
            multiplier_met = (
                round(win * 100) == round(self.multiplier * 100) and not self.force_max_win
            )
        else:
            multiplier_met = win > 0

        max_win_met = win >= max_win if self.force_max_win else True

        accepted = freespins_met and multiplier_met and max_win_met
        if accepted and self.evaluate is not None:
            accepted = self.evaluate(snapshot) is True
        return accepted


def _criteria_counts(
    result_sets: Sequence[ResultSet],
    total: int,
    rng: RandomSource,
) -> dict[str, int]:
    if not result_sets:
        raise ConfigurationError("no result sets configured")
    if total <= 0:
        raise ConfigurationError("number of simulations must be positive")
    if len(result_sets) > total:
        raise ConfigurationError(
            f"{len(result_sets)} result sets cannot be filled by {total} simulations"
        )

    total_quota = sum(rs.quota for rs in result_sets)
    if total_quota <= 0:
        raise ConfigurationError("total quota of result sets must be positive")

    counts = {
        rs.criteria: max(math.floor(rs.quota / total_quota * total), 1)
        for rs in result_sets
    }
    weights = {rs.criteria: rs.quota for rs in result_sets}

    assigned = sum(counts.values())
    while assigned != total:
        criteria = rng.weighted_choice(weights)
        if assigned > total:
            if counts[criteria] > 1:
                counts[criteria] -= 1
        else:
            counts[criteria] += 1
        assigned = sum(counts.values())

    return counts


def criteria_counts(
    result_sets: Sequence[ResultSet],
    total: int,
    seed: int = 0,
) -> dict[str, int]:
    """Split ``total`` simulations across result sets by quota.

    Quotas are normalised to sum to 1 and floored with a minimum of one
    simulation per result set. Single units are then added or removed at
    result sets drawn by quota weight until the counts sum to ``total``.

    Args:
        result_sets: The game mode's result sets.
        total: Number of simulations requested for the mode.
        seed: Seed of the random source used for the adjustment.

    Returns:
        Mapping of criteria label to number of simulations.

    Raises:
        ConfigurationError: If the result sets cannot be split over ``total``.

    Example:
        >>> rs = [ResultSet("0", 0.5, {}, multiplier=0), ResultSet("win", 0.5, {})]
        >>> criteria_counts(rs, 10)
        {'0': 5, 'win': 5}
    """
    return _criteria_counts(result_sets, total, RandomSource(seed))


def assign_criteria(
    result_sets: Sequence[ResultSet],
    total: int,
    seed: int = 0,
) -> dict[int, str]:
    """Build the simulation id to criteria table for a game mode.

    The per-criteria counts are expanded into a flat list of labels,
    shuffled and assigned to ids ``1..total`` in order. The same seed always
    yields the same table, so every worker can rebuild it independently.

    Returns:
        Mapping of simulation id to criteria label.
    """
    rng = RandomSource(seed)
    counts = _criteria_counts(result_sets, total, rng)

    labels: list[str] = []
    for criteria, count in counts.items():
        labels.extend([criteria] * count)

    shuffled = rng.shuffle(labels)
    logger.debug("Assigned %d simulations to criteria %s", total, counts)
    return {sim_id: criteria for sim_id, criteria in enumerate(shuffled, start=1)}
