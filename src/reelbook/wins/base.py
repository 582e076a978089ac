"""Shared types for win evaluation.

Every evaluator turns a board into a :class:`WinResult`. Evaluators are
stateless between calls, so evaluating the same board twice gives the same
result.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NamedTuple

from reelbook.sim.board import Board
from reelbook.sim.symbols import GameSymbol, Reels

if TYPE_CHECKING:
    from reelbook.sim.context import GameContext

WildSymbol = GameSymbol | Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class WinSymbol:
    """A board cell taking part in a win."""

    symbol: GameSymbol
    is_wild: bool
    reel: int
    row: int


@dataclass(frozen=True, slots=True)
class WinCombination:
    """One winning group of cells.

    Attributes:
        payout: Payout of the group as a bet multiplier.
        kind: Match length (lines, ways) or cell count (clusters).
        base_symbol: The symbol the group pays as.
        symbols: The cells of the group.
    """

    payout: float
    kind: int
    base_symbol: GameSymbol
    symbols: tuple[WinSymbol, ...]

    def to_dict(self) -> dict[str, Any]:
        """Plain representation for book events."""
        return {
            "symbol": self.base_symbol.id,
            "kind": self.kind,
            "win": self.payout,
            "positions": [{"reel": s.reel, "row": s.row} for s in self.symbols],
        }


@dataclass(frozen=True, slots=True)
class LineWinCombination(WinCombination):
    line_number: int = 0

    def to_dict(self) -> dict[str, Any]:
        data = WinCombination.to_dict(self)
        data["line"] = self.line_number
        return data


@dataclass(frozen=True, slots=True)
class WaysWinCombination(WinCombination):
    ways: int = 1

    def to_dict(self) -> dict[str, Any]:
        data = WinCombination.to_dict(self)
        data["ways"] = self.ways
        return data


class WinResult(NamedTuple):
    """Total payout and the combinations it is made of."""

    payout: float
    combinations: tuple[WinCombination, ...]

    def post_process(
        self, func: Callable[[WinCombination], WinCombination]
    ) -> "WinResult":
        """Rewrite each combination, e.g. to apply a multiplier.

        Args:
            func: Maps a combination to its replacement. Use
                :func:`dataclasses.replace` to change the payout.

        Returns:
            A new result whose payout is the sum of the rewritten payouts.

        Example:
            >>> doubled = result.post_process(lambda c: replace(c, payout=c.payout * 2))
        """
        combinations = tuple(func(combination) for combination in self.combinations)
        return WinResult(sum(c.payout for c in combinations), combinations)

    def to_dicts(self) -> list[dict[str, Any]]:
        """Plain representation of every combination."""
        return [combination.to_dict() for combination in self.combinations]


class WinType:
    """Base class of the win evaluators.

    Args:
        wild_symbol: The wild symbol, or a property subset identifying wilds
            (e.g. ``{"wild": True}``). None means the game has no wilds.
        ctx: Optional game context. When given, every win is reported as a
            symbol occurrence for the current spin type.
    """

    def __init__(
        self,
        wild_symbol: WildSymbol | None = None,
        ctx: "GameContext | None" = None,
    ) -> None:
        self.wild_symbol = wild_symbol
        self.ctx = ctx

    def is_wild(self, symbol: GameSymbol) -> bool:
        """Whether ``symbol`` substitutes as a wild."""
        return self.wild_symbol is not None and symbol.compare(self.wild_symbol)

    def evaluate(self, board: Board | Reels) -> WinResult:
        """Evaluate the wins on a board.

        Args:
            board: A :class:`Board` or its visible reels.

        Returns:
            Total payout and winning combinations.
        """
        reels = board.reels if isinstance(board, Board) else board
        combinations = self._evaluate(reels)

        if self.ctx is not None:
            for combination in combinations:
                self.ctx.record_symbol_occurrence(combination.kind, combination.base_symbol.id)

        return WinResult(sum(c.payout for c in combinations), tuple(combinations))

    def _evaluate(self, reels: Reels) -> list[WinCombination]:
        raise NotImplementedError

    def _win_symbol(self, symbol: GameSymbol, reel: int, row: int) -> WinSymbol:
        return WinSymbol(symbol, self.is_wild(symbol), reel, row)

    def _base_symbol(self, cells: list[WinSymbol]) -> GameSymbol:
        """First non-wild symbol of ``cells``, else the first symbol."""
        for cell in cells:
            if not cell.is_wild:
                return cell.symbol
        return cells[0].symbol
