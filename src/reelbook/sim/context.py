"""Everything a game flow needs to play one simulation attempt.

The flow callback of a :class:`~reelbook.sim.config.GameConfig` receives a
:class:`GameContext` and builds the game out of its operations: draw a
board, evaluate wins, add them to the wallet, award free spins and log
events to the book.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from reelbook.errors import ConfigurationError
from reelbook.ledger.book import Book, BookEvent
from reelbook.ledger.recorder import Recorder
from reelbook.ledger.wallet import Wallet
from reelbook.sim.board import Board, Cell, TumbleResult
from reelbook.sim.config import GameConfig, GameMode
from reelbook.sim.criteria import ResultSet
from reelbook.sim.rng import RandomSource
from reelbook.sim.state import GameState, StateSnapshot
from reelbook.sim.symbols import GameSymbol, ReelSet

logger = logging.getLogger(__name__)


class GameContext:
    """Game state, board, wallet, book and recorder of one attempt.

    Args:
        config: The game configuration.
        mode: The game mode being simulated.
        rng: Random source. Defaults to one seeded with 0.
        recorder: Recorder the accepted records are committed to.
    """

    def __init__(
        self,
        config: GameConfig,
        mode: GameMode,
        rng: RandomSource | None = None,
        recorder: Recorder | None = None,
    ) -> None:
        self.config = config
        self.mode = mode
        self.rng = rng if rng is not None else RandomSource(0)
        self.recorder = recorder if recorder is not None else Recorder()
        self.state = GameState(game_mode=mode.name)
        self.board = Board()
        self.wallet = Wallet()
        self.book = Book(id=0)
        self.start_attempt(0, "N/A")

    def start_attempt(self, sim_id: int, criteria: str) -> None:
        """Reset everything but the random source for a new attempt."""
        self.state.sim_id = sim_id
        self.state.criteria = criteria
        self.state.reset(self.config.user_state)
        self.board.reset(self.mode.reels_amount)
        self.wallet = Wallet()
        self.book = Book(id=sim_id, criteria=criteria)
        self.recorder.clear_pending()

    @property
    def result_set(self) -> ResultSet:
        """Result set of the criteria being simulated."""
        return self.mode.result_set(self.state.criteria)

    def snapshot(self) -> StateSnapshot:
        """Read-only copy of the attempt state and its current wins."""
        return StateSnapshot.capture(
            self.state,
            current_win=self.wallet.current_win,
            win_per_spin_type=self.wallet.current_win_per_spin_type,
        )

    # Reels and board

    def reel_set(self, reel_set_id: str) -> ReelSet:
        """Reel set of the game mode by id."""
        return self.mode.reel_set(reel_set_id)

    def random_reel_set(self) -> ReelSet:
        """Pick a reel set by the weights of the attempt's result set."""
        weights = self.result_set.reel_weights.weights_for(self.snapshot())
        return self.mode.reel_set(self.rng.weighted_choice(weights))

    def draw_random_board(self, reels: ReelSet | None = None) -> list[int]:
        """Draw the board at random stops, from a random reel set by default."""
        if reels is None:
            reels = self.random_reel_set()
        return self.board.draw_random(
            reels, self.mode.symbols_per_reel, self.config.pad_symbols, self.rng
        )

    def draw_forced_board(
        self,
        forced_stops: Mapping[int, int],
        reels: ReelSet | None = None,
        randomize_offset: bool = True,
    ) -> list[int]:
        """Draw the board with the given strip positions made visible."""
        if reels is None:
            reels = self.random_reel_set()
        return self.board.draw_forced(
            reels,
            forced_stops,
            self.mode.symbols_per_reel,
            self.config.pad_symbols,
            self.rng,
            randomize_offset=randomize_offset,
        )

    def tumble_board(self, cells: Iterable[Cell]) -> TumbleResult:
        """Remove ``cells`` from the board and refill the reels."""
        return self.board.tumble(cells, self.mode.symbols_per_reel, self.config.pad_symbols)

    def apply_anticipation(self, scatter: GameSymbol | Mapping[str, Any]) -> None:
        """Flag every reel after the one where the scatter count reaches the
        anticipation trigger of the current spin type.
        """
        trigger = self.config.anticipation_triggers.get(self.state.spin_type)
        if trigger is None or trigger <= 0:
            return
        seen = 0
        for reel_idx in range(len(self.board.reels)):
            self.board.set_anticipation(reel_idx, seen >= trigger)
            seen += self.board.count_on_reel(scatter, reel_idx)

    # Free spins

    def free_spins_for_scatters(self, scatter_count: int, spin_type: str | None = None) -> int:
        """Free spins awarded for ``scatter_count`` scatters, 0 when none.

        Raises:
            ConfigurationError: If the spin type has no free spin awards.
        """
        spin_type = spin_type or self.state.spin_type
        awards = self.config.scatter_to_freespins.get(spin_type)
        if not awards:
            raise ConfigurationError(f'no free spin awards for spin type "{spin_type}"')
        return awards.get(scatter_count, 0)

    def verify_scatter_count(self, scatter_count: int) -> int:
        """Clamp a scatter count to the range that awards free spins."""
        awards = self.config.scatter_to_freespins.get(self.state.spin_type)
        if not awards:
            raise ConfigurationError(
                f'no free spin awards for spin type "{self.state.spin_type}"'
            )
        return max(min(awards), min(scatter_count, max(awards)))

    def award_freespins(self, amount: int) -> None:
        """Add free spins and mark the feature as triggered."""
        self.state.current_freespins += amount
        self.state.total_freespins += amount
        self.state.triggered_freespins = True

    @property
    def max_win_reached(self) -> bool:
        """Whether the attempt has won at least the max win."""
        return self.wallet.current_win + self.wallet.current_spin_win >= self.config.max_win

    # Wallet

    def add_spin_win(self, amount: float) -> None:
        """Add a win to the spin being played."""
        self.wallet.add_spin_win(amount)

    def add_tumble_win(self, amount: float) -> None:
        """Add a tumble win to the spin being played."""
        self.wallet.add_tumble_win(amount)

    def confirm_spin_win(self, spin_type: str | None = None) -> None:
        """Assign the spin win to ``spin_type``, the current spin type by default."""
        self.wallet.confirm_spin_win(spin_type or self.state.spin_type)

    # Book and recorder

    def add_event(self, type: str, data: Mapping[str, Any]) -> BookEvent:
        """Append an event to the attempt's book."""
        return self.book.add_event(type, data)

    def record(self, properties: Mapping[str, Any]) -> None:
        """Record a property set for the attempt, committed on acceptance."""
        self.recorder.record(self.state.sim_id, properties)

    def record_symbol_occurrence(self, kind: int, symbol_id: str, **extra: Any) -> None:
        """Record a winning symbol and kind for the current spin type."""
        self.record(
            {"kind": kind, "symbol": symbol_id, "spinType": self.state.spin_type, **extra}
        )
