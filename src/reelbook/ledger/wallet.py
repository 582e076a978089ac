"""Win bookkeeping for the running attempt and across simulations.

All amounts are bet multipliers. Wins are capped at the game's max win and
rounded to cents when an attempt is confirmed.
"""

import math
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from reelbook.errors import WalletConsistencyError
from reelbook.sim.state import BASE_GAME, FREE_SPINS, SPIN_TYPES

if TYPE_CHECKING:
    from reelbook.ledger.book import Book


def to_cents(value: float) -> int:
    """Round a multiplier to an integer number of cents, halves up."""
    return math.floor(value * 100 + 0.5)


def process_win(value: float, max_win: float) -> float:
    """Cap ``value`` at ``max_win`` and round it to cents."""
    return to_cents(min(value, max_win)) / 100


def split_cents(total_cents: int, wins: Mapping[str, float]) -> dict[str, int]:
    """Split ``total_cents`` across spin types in proportion to their wins.

    Each share is floored and the leftover cents go to the shares with the
    largest fractional parts, so the shares always add up to the total.

    Example:
        >>> split_cents(25, {"basegame": 0.125, "freespins": 0.125})
        {'basegame': 13, 'freespins': 12}
    """
    raw_total = sum(wins.values())
    if total_cents <= 0 or raw_total <= 0:
        return dict.fromkeys(wins, 0)

    exact = {spin_type: win * total_cents / raw_total for spin_type, win in wins.items()}
    cents = {spin_type: math.floor(value) for spin_type, value in exact.items()}
    leftover = total_cents - sum(cents.values())
    by_fraction = sorted(wins, key=lambda s: exact[s] - cents[s], reverse=True)
    for spin_type in by_fraction[:leftover]:
        cents[spin_type] += 1
    return cents


class Wallet:
    """Running win accumulators.

    ``add_spin_win`` collects wins of the spin being played,
    ``confirm_spin_win`` moves them to a spin type, and ``confirm_wins``
    closes the attempt by folding the capped, rounded totals into the
    cumulative figures.

    Args:
        spin_types: Spin types wins can be confirmed to.
    """

    def __init__(self, spin_types: Iterable[str] = SPIN_TYPES) -> None:
        self.spin_types: tuple[str, ...] = tuple(spin_types)
        self.cumulative_wins = 0.0
        self.cumulative_wins_per_spin_type = dict.fromkeys(self.spin_types, 0.0)
        self.current_win = 0.0
        self.current_win_per_spin_type = dict.fromkeys(self.spin_types, 0.0)
        self.current_spin_win = 0.0
        self.current_tumble_win = 0.0

    def add_spin_win(self, amount: float) -> None:
        """Add a win to the spin being played."""
        self.current_spin_win += amount

    def add_tumble_win(self, amount: float) -> None:
        """Add a win of the running tumble sequence to the spin."""
        self.current_tumble_win += amount
        self.add_spin_win(amount)

    def confirm_spin_win(self, spin_type: str) -> None:
        """Assign the spin's win to ``spin_type`` and start a new spin.

        Raises:
            ValueError: If the wallet does not track ``spin_type``.
        """
        if spin_type not in self.current_win_per_spin_type:
            raise ValueError(f'spin type "{spin_type}" does not exist in the wallet')
        self.current_win_per_spin_type[spin_type] += self.current_spin_win
        self.current_win += self.current_spin_win
        self.current_spin_win = 0.0
        self.current_tumble_win = 0.0

    def reset_current_win(self) -> None:
        """Discard every win of the running attempt."""
        self.current_win = 0.0
        self.current_spin_win = 0.0
        self.current_tumble_win = 0.0
        for spin_type in self.current_win_per_spin_type:
            self.current_win_per_spin_type[spin_type] = 0.0

    def processed_win(self, max_win: float) -> tuple[int, dict[str, int]]:
        """Capped, rounded win of the attempt and its split per spin type.

        The total is capped and rounded once, then split so the spin type
        shares add up to it exactly.

        Args:
            max_win: Win cap of the game.

        Returns:
            Tuple of the total in cents and the cents of each spin type.

        Raises:
            WalletConsistencyError: If the per-spin-type wins do not add up
                to the total win.
        """
        spin_type_wins = sum(self.current_win_per_spin_type.values())
        if not math.isclose(spin_type_wins, self.current_win, abs_tol=1e-9):
            raise WalletConsistencyError(
                f"current win {self.current_win} does not equal "
                f"the sum of spin type wins {spin_type_wins}"
            )
        total = to_cents(min(self.current_win, max_win))
        return total, split_cents(total, self.current_win_per_spin_type)

    def confirm_wins(self, max_win: float) -> None:
        """Fold the attempt's wins into the cumulative totals and reset them.

        Args:
            max_win: Win cap of the game.

        Raises:
            WalletConsistencyError: If the per-spin-type wins do not add up
                to the total win.
        """
        total, per_spin_type = self.processed_win(max_win)
        self.cumulative_wins += total / 100
        for spin_type, cents in per_spin_type.items():
            self.cumulative_wins_per_spin_type[spin_type] += cents / 100
        self.reset_current_win()

    def write_payout_to_book(self, book: "Book", max_win: float) -> None:
        """Store the attempt's final payout on ``book``.

        The payout is kept as an integer multiplier times 100, and the
        spin type wins are the same split ``confirm_wins`` applies.
        """
        total, per_spin_type = self.processed_win(max_win)
        book.payout = total
        book.basegame_wins = per_spin_type.get(BASE_GAME, 0) / 100
        book.freespins_wins = per_spin_type.get(FREE_SPINS, 0) / 100

    def merge(self, other: "Wallet") -> None:
        """Add another wallet's cumulative totals to this one."""
        self.cumulative_wins += other.cumulative_wins
        for spin_type in self.cumulative_wins_per_spin_type:
            self.cumulative_wins_per_spin_type[spin_type] += (
                other.cumulative_wins_per_spin_type.get(spin_type, 0.0)
            )

    def to_dict(self) -> dict[str, Any]:
        """Serialize every figure of the wallet."""
        return {
            "cumulativeWins": self.cumulative_wins,
            "cumulativeWinsPerSpinType": dict(self.cumulative_wins_per_spin_type),
            "currentWin": self.current_win,
            "currentWinPerSpinType": dict(self.current_win_per_spin_type),
            "currentSpinWin": self.current_spin_win,
            "currentTumbleWin": self.current_tumble_win,
        }

    def merge_dict(self, data: Mapping[str, Any]) -> None:
        """Add every figure of a serialized wallet to this one."""
        self.cumulative_wins += data["cumulativeWins"]
        self.current_win += data["currentWin"]
        self.current_spin_win += data["currentSpinWin"]
        self.current_tumble_win += data["currentTumbleWin"]
        for spin_type in self.spin_types:
            self.cumulative_wins_per_spin_type[spin_type] += (
                data["cumulativeWinsPerSpinType"].get(spin_type, 0.0)
            )
            self.current_win_per_spin_type[spin_type] += (
                data["currentWinPerSpinType"].get(spin_type, 0.0)
            )
