"""Per-attempt game state and its read-only snapshot."""

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

BASE_GAME = "basegame"
FREE_SPINS = "freespins"
SPIN_TYPES: tuple[str, ...] = (BASE_GAME, FREE_SPINS)


@dataclass(slots=True)
class GameState:
    """Mutable state of the simulation attempt currently being played.

    Attributes:
        sim_id: Id of the simulation (and of its book).
        game_mode: Name of the game mode being simulated.
        criteria: Criteria label of the assigned outcome category.
        spin_type: Current spin type, e.g. ``BASE_GAME`` or ``FREE_SPINS``.
        current_freespins: Free spins left in the running feature.
        total_freespins: Free spins awarded during the attempt.
        triggered_freespins: Whether the free-spin feature was triggered.
        triggered_max_win: Whether the attempt reached the max win.
        user_data: Game-specific state, copied fresh for every attempt.
    """

    sim_id: int = 0
    game_mode: str = ""
    criteria: str = ""
    spin_type: str = BASE_GAME
    current_freespins: int = 0
    total_freespins: int = 0
    triggered_freespins: bool = False
    triggered_max_win: bool = False
    user_data: dict[str, Any] = field(default_factory=dict)

    def reset(self, user_state: Mapping[str, Any]) -> None:
        """Return to the start-of-attempt state."""
        self.spin_type = BASE_GAME
        self.current_freespins = 0
        self.total_freespins = 0
        self.triggered_freespins = False
        self.triggered_max_win = False
        self.user_data = copy.deepcopy(dict(user_state))


@dataclass(frozen=True, slots=True)
class StateSnapshot:
    """Immutable view of an attempt handed to caller-supplied strategies.

    Dynamic reel weights and custom acceptance predicates receive this
    instead of the live state so they cannot mutate it mid-attempt.
    """

    sim_id: int
    game_mode: str
    criteria: str
    spin_type: str
    current_freespins: int
    total_freespins: int
    triggered_freespins: bool
    triggered_max_win: bool
    current_win: float
    win_per_spin_type: Mapping[str, float]
    user_data: Mapping[str, Any]

    @classmethod
    def capture(
        cls,
        state: GameState,
        current_win: float = 0.0,
        win_per_spin_type: Mapping[str, float] | None = None,
    ) -> "StateSnapshot":
        """Copy ``state`` and the wallet figures into a snapshot."""
        return cls(
            sim_id=state.sim_id,
            game_mode=state.game_mode,
            criteria=state.criteria,
            spin_type=state.spin_type,
            current_freespins=state.current_freespins,
            total_freespins=state.total_freespins,
            triggered_freespins=state.triggered_freespins,
            triggered_max_win=state.triggered_max_win,
            current_win=current_win,
            win_per_spin_type=MappingProxyType(dict(win_per_spin_type or {})),
            user_data=MappingProxyType(copy.deepcopy(state.user_data)),
        )
