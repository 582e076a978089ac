"""Static game, game mode and simulation configuration."""

import os
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from reelbook.errors import ConfigurationError
from reelbook.sim.criteria import ResultSet
from reelbook.sim.symbols import GameSymbol, ReelSet

if TYPE_CHECKING:
    from reelbook.sim.context import GameContext

FlowFn = Callable[["GameContext"], None]
AcceptedHook = Callable[["GameContext"], None]

MAX_DEFAULT_WORKERS = 6


@dataclass(frozen=True, slots=True)
class GameMode:
    """One purchasable way of playing the game.

    Attributes:
        name: Mode name, e.g. "base" or "bonus".
        reels_amount: Number of reels on the board.
        symbols_per_reel: Visible rows, one entry per reel.
        cost: Cost of one spin in this mode, as a bet multiplier.
        reel_sets: Reel set id to its reel strips.
        result_sets: Outcome categories simulated for this mode.
        rtp: Target return to player.
        is_bonus_buy: Whether the mode buys straight into a feature.
    """

    name: str
    reels_amount: int
    symbols_per_reel: Sequence[int]
    cost: float
    reel_sets: Mapping[str, ReelSet]
    result_sets: Sequence[ResultSet]
    rtp: float = 0.96
    is_bonus_buy: bool = False

    def __post_init__(self) -> None:
        """Validate the game mode."""
        if not self.name:
            raise ConfigurationError("game mode name cannot be empty")
        if self.reels_amount <= 0:
            raise ConfigurationError(f'reels_amount of mode "{self.name}" must be positive')
        if len(self.symbols_per_reel) != self.reels_amount:
            raise ConfigurationError(
                f'symbols_per_reel of mode "{self.name}" must have {self.reels_amount} entries'
            )
        if any(rows <= 0 for rows in self.symbols_per_reel):
            raise ConfigurationError(f'symbols_per_reel of mode "{self.name}" must be positive')
        if self.cost <= 0:
            raise ConfigurationError(f'cost of mode "{self.name}" must be positive')
        if not 0 < self.rtp <= 1:
            raise ConfigurationError(f'rtp of mode "{self.name}" must be in (0, 1]')
        if not self.reel_sets:
            raise ConfigurationError(f'mode "{self.name}" has no reel sets')
        if not self.result_sets:
            raise ConfigurationError(f'mode "{self.name}" has no result sets')

        reel_sets: dict[str, ReelSet] = {}
        for reel_set_id, strips in self.reel_sets.items():
            if len(strips) != self.reels_amount:
                raise ConfigurationError(
                    f'reel set "{reel_set_id}" of mode "{self.name}" must have '
                    f"{self.reels_amount} reels, got {len(strips)}"
                )
            if any(len(strip) == 0 for strip in strips):
                raise ConfigurationError(
                    f'reel set "{reel_set_id}" of mode "{self.name}" has an empty reel'
                )
            reel_sets[reel_set_id] = tuple(tuple(strip) for strip in strips)

        labels = [rs.criteria for rs in self.result_sets]
        if len(set(labels)) != len(labels):
            raise ConfigurationError(f'mode "{self.name}" has duplicate criteria labels')

        object.__setattr__(self, "symbols_per_reel", tuple(self.symbols_per_reel))
        object.__setattr__(self, "reel_sets", reel_sets)
        object.__setattr__(self, "result_sets", tuple(self.result_sets))

    def result_set(self, criteria: str) -> ResultSet:
        """Look up the result set with the given criteria label.

        Raises:
            ConfigurationError: If the mode declares no such criteria.
        """
        for result_set in self.result_sets:
            if result_set.criteria == criteria:
                return result_set
        raise ConfigurationError(f'mode "{self.name}" has no criteria "{criteria}"')

    def reel_set(self, reel_set_id: str) -> ReelSet:
        """Look up a reel set by id.

        Raises:
            ConfigurationError: If the mode declares no such reel set.
        """
        try:
            return self.reel_sets[reel_set_id]
        except KeyError:
            raise ConfigurationError(
                f'mode "{self.name}" has no reel set "{reel_set_id}"'
            ) from None


@dataclass(frozen=True, slots=True)
class GameConfig:
    """Declarative description of a game.

    Attributes:
        id: Machine-readable game id.
        name: Display name.
        symbols: Symbol id to symbol.
        game_modes: Mode name to game mode.
        max_win: Win cap as a bet multiplier.
        flow: Game-specific callback that plays one attempt.
        scatter_to_freespins: Spin type to a mapping of scatter count to
            the number of free spins awarded.
        pad_symbols: Padding depth kept above and below each reel.
        user_state: Initial game-specific state, copied into each attempt.
        on_simulation_accepted: Optional hook run when an attempt is accepted.
    """

    id: str
    name: str
    symbols: Mapping[str, GameSymbol]
    game_modes: Mapping[str, GameMode]
    max_win: float
    flow: FlowFn
    scatter_to_freespins: Mapping[str, Mapping[int, int]] = field(default_factory=dict)
    pad_symbols: int = 1
    user_state: Mapping[str, Any] = field(default_factory=dict)
    on_simulation_accepted: AcceptedHook | None = None

    def __post_init__(self) -> None:
        """Validate the game configuration."""
        if not self.id:
            raise ConfigurationError("game id cannot be empty")
        if not self.symbols:
            raise ConfigurationError("game must define at least one symbol")
        for key, symbol in self.symbols.items():
            if key != symbol.id:
                raise ConfigurationError(
                    f'symbol key "{key}" does not match symbol id "{symbol.id}"'
                )
        if not self.game_modes:
            raise ConfigurationError("game must define at least one game mode")
        for key, mode in self.game_modes.items():
            if key != mode.name:
                raise ConfigurationError(
                    f'game mode key "{key}" does not match mode name "{mode.name}"'
                )
            for reel_set_id, strips in mode.reel_sets.items():
                for strip in strips:
                    unknown = {s.id for s in strip} - set(self.symbols)
                    if unknown:
                        raise ConfigurationError(
                            f'reel set "{reel_set_id}" of mode "{mode.name}" uses '
                            f"unknown symbols {sorted(unknown)}"
                        )
        if self.max_win <= 0:
            raise ConfigurationError("max_win must be positive")
        if self.pad_symbols < 0:
            raise ConfigurationError("pad_symbols cannot be negative")
        for spin_type, awards in self.scatter_to_freespins.items():
            if not awards:
                raise ConfigurationError(
                    f'scatter_to_freespins for "{spin_type}" cannot be empty'
                )

    @property
    def anticipation_triggers(self) -> dict[str, int]:
        """Scatter count that starts anticipation, per spin type.

        One scatter short of the smallest count that awards free spins.
        """
        return {
            spin_type: min(awards) - 1
            for spin_type, awards in self.scatter_to_freespins.items()
        }

    def game_mode(self, name: str) -> GameMode:
        """Look up a game mode by name.

        Raises:
            ConfigurationError: If the game has no such mode.
        """
        try:
            return self.game_modes[name]
        except KeyError:
            raise ConfigurationError(f'game has no mode "{name}"') from None

    def symbol(self, symbol_id: str) -> GameSymbol:
        """Look up a symbol by id.

        Raises:
            ConfigurationError: If the game has no such symbol.
        """
        try:
            return self.symbols[symbol_id]
        except KeyError:
            raise ConfigurationError(f'game has no symbol "{symbol_id}"') from None


def default_workers() -> int:
    """Number of worker processes used when none is configured."""
    return max(1, min(os.cpu_count() or 1, MAX_DEFAULT_WORKERS))


@dataclass(frozen=True, slots=True)
class SimulationConfig:
    """Parameters of a simulation run.

    Attributes:
        runs: Game mode name to number of simulations. A count of zero
            skips the mode.
        workers: Number of worker processes per mode.
        assignment_seed: Seed of the criteria assignment table.
    """

    runs: Mapping[str, int]
    workers: int = field(default_factory=default_workers)
    assignment_seed: int = 0

    def __post_init__(self) -> None:
        """Validate simulation parameters."""
        if not self.runs:
            raise ConfigurationError("runs must name at least one game mode")
        for mode, count in self.runs.items():
            if count < 0:
                raise ConfigurationError(f'run count of mode "{mode}" cannot be negative')
        if self.workers < 1:
            raise ConfigurationError("workers must be at least 1")
