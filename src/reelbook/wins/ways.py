"""Ways pays: symbols on consecutive reels from the leftmost reel."""

from reelbook.sim.symbols import GameSymbol, Reels
from reelbook.wins.base import WaysWinCombination, WinCombination, WinSymbol, WinType


class WaysWinType(WinType):
    """Pays every symbol present, or substituted by a wild, on consecutive
    reels starting at reel 0.

    The number of ways is the product of matching cells per reel, and the
    payout is the single-way payout at the match length times the ways.
    Each symbol id yields at most one combination.
    """

    def _candidates(self, reels: Reels) -> list[GameSymbol]:
        candidates: dict[str, GameSymbol] = {}
        for column in reels:
            has_wild = False
            for symbol in column:
                candidates.setdefault(symbol.id, symbol)
                if self.is_wild(symbol):
                    has_wild = True
            # A reel without wilds ends every chain that has not started yet
            if not has_wild:
                break
        return list(candidates.values())

    def _evaluate(self, reels: Reels) -> list[WinCombination]:
        wins: list[WinCombination] = []

        for candidate in self._candidates(reels):
            matched: list[list[WinSymbol]] = []
            for reel_idx, column in enumerate(reels):
                cells = [
                    self._win_symbol(symbol, reel_idx, row)
                    for row, symbol in enumerate(column)
                    if candidate.compare(symbol) or self.is_wild(symbol)
                ]
                if not cells:
                    break
                matched.append(cells)

            length = len(matched)
            min_kind = candidate.min_pay_kind
            if min_kind is None or length < min_kind:
                continue

            ways = 1
            for cells in matched:
                ways *= len(cells)

            symbols = [cell for cells in matched for cell in cells]
            base_symbol = self._base_symbol(symbols)
            payout = base_symbol.payout_for(length) * ways
            if payout <= 0:
                continue

            wins.append(
                WaysWinCombination(
                    payout=payout,
                    kind=length,
                    base_symbol=base_symbol,
                    symbols=tuple(symbols),
                    ways=ways,
                )
            )

        return wins
