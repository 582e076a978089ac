"""Fixed payline evaluation."""

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from reelbook.errors import ConfigurationError
from reelbook.sim.symbols import GameSymbol, Reels
from reelbook.wins.base import LineWinCombination, WildSymbol, WinCombination, WinSymbol, WinType

if TYPE_CHECKING:
    from reelbook.sim.context import GameContext


class LinesWinType(WinType):
    """Pays matching symbols along fixed lines, left to right.

    Leading wilds are counted but do not fix the paying symbol; the first
    non-wild symbol does. The chain continues while symbols are wild or
    equal to it and stops at the first mismatch. A line pays the larger of
    the chain's payout and the payout of its leading wilds on their own.

    Args:
        lines: Line number (starting at 1) to the row index on each reel.
        wild_symbol: The wild symbol or a property subset identifying wilds.
        ctx: Optional game context, used to validate the lines against the
            current mode and to record symbol occurrences.

    Raises:
        ConfigurationError: If no lines are given or they are not numbered
            from 1.

    Example:
        >>> lines = LinesWinType({1: [0, 0, 0], 2: [1, 1, 1]}, wild_symbol={"wild": True})
        >>> result = lines.evaluate(board)
    """

    def __init__(
        self,
        lines: Mapping[int, Sequence[int]],
        wild_symbol: WildSymbol | None = None,
        ctx: "GameContext | None" = None,
    ) -> None:
        super().__init__(wild_symbol, ctx)
        if not lines:
            raise ConfigurationError("at least one line must be defined")
        if min(lines) != 1:
            raise ConfigurationError(f"lines must start from 1, found {min(lines)}")
        self.lines = {int(number): tuple(rows) for number, rows in sorted(lines.items())}

    def _validate(self, reels: Reels) -> None:
        if self.ctx is not None:
            rows_per_reel = list(self.ctx.mode.symbols_per_reel)
        else:
            rows_per_reel = [len(column) for column in reels]

        for number, rows in self.lines.items():
            if len(rows) != len(rows_per_reel):
                raise ConfigurationError(
                    f"line {number} has {len(rows)} positions for {len(rows_per_reel)} reels"
                )
            for reel_idx, row in enumerate(rows):
                if not 0 <= row < rows_per_reel[reel_idx]:
                    raise ConfigurationError(
                        f"line {number} has invalid row {row} on reel {reel_idx}"
                    )

    def _evaluate(self, reels: Reels) -> list[WinCombination]:
        self._validate(reels)
        wins: list[WinCombination] = []

        for number, rows in self.lines.items():
            chain: list[WinSymbol] = []
            base: GameSymbol | None = None
            for reel_idx, row in enumerate(rows):
                cell = self._win_symbol(reels[reel_idx][row], reel_idx, row)
                if base is None:
                    if not cell.is_wild:
                        base = cell.symbol
                elif not cell.is_wild and not cell.symbol.compare(base):
                    break
                chain.append(cell)

            leading_wilds: list[WinSymbol] = []
            for cell in chain:
                if not cell.is_wild:
                    break
                leading_wilds.append(cell)

            base_symbol = self._base_symbol(chain)
            payout = base_symbol.payout_for(len(chain))
            cells = chain

            if leading_wilds:
                wild = leading_wilds[0].symbol
                wild_payout = wild.payout_for(len(leading_wilds))
                if wild_payout > payout:
                    base_symbol, payout, cells = wild, wild_payout, leading_wilds

            if payout <= 0:
                continue

            wins.append(
                LineWinCombination(
                    payout=payout,
                    kind=len(cells),
                    base_symbol=base_symbol,
                    symbols=tuple(cells),
                    line_number=number,
                )
            )

        return wins
