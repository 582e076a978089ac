"""Cluster pays: connected regions of equal symbols."""

from reelbook.sim.symbols import GameSymbol, Reels
from reelbook.wins.base import WinCombination, WinType

Cell = tuple[int, int]

_DIRECTIONS: tuple[Cell, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


class ClusterWinType(WinType):
    """Pays groups of horizontally or vertically connected equal symbols.

    Clusters are grown from every non-wild cell first, then from every wild
    cell not yet claimed. A non-wild cell belongs to at most one cluster.
    Wild cells are only tracked per cluster, so one wild can join clusters
    of several symbols as well as a pure wild cluster.

    A cluster pays its base symbol's pay table at its cell count. Clusters
    whose base symbol does not pay are dropped, but their cells stay claimed.
    """

    def _evaluate(self, reels: Reels) -> list[WinCombination]:
        checked: set[Cell] = set()
        clusters: list[list[Cell]] = []

        for wild_pass in (False, True):
            for reel_idx, column in enumerate(reels):
                for row, symbol in enumerate(column):
                    cell = (reel_idx, row)
                    if self.is_wild(symbol) != wild_pass or cell in checked:
                        continue
                    checked.add(cell)
                    matches: dict[Cell, None] = {}
                    self._grow(reels, symbol, cell, checked, set(), matches)
                    if matches:
                        clusters.append([cell, *matches])

        wins: list[WinCombination] = []
        for cells in clusters:
            symbols = [self._win_symbol(reels[r][s], r, s) for r, s in cells]
            base_symbol = self._base_symbol(symbols)
            payout = base_symbol.payout_for(len(symbols))
            if payout <= 0:
                continue
            wins.append(
                WinCombination(
                    payout=payout,
                    kind=len(symbols),
                    base_symbol=base_symbol,
                    symbols=tuple(symbols),
                )
            )
        return wins

    def _grow(
        self,
        reels: Reels,
        root: GameSymbol,
        cell: Cell,
        checked: set[Cell],
        checked_wilds: set[Cell],
        matches: dict[Cell, None],
    ) -> None:
        """Depth-first flood fill from ``cell``.

        ``checked`` is shared by every cluster of the evaluation,
        ``checked_wilds`` only by the cluster rooted at ``root``.
        """
        for neighbor in self._neighbors(reels, cell):
            if neighbor in checked or neighbor in checked_wilds:
                continue
            symbol = reels[neighbor[0]][neighbor[1]]
            same = symbol.compare(root)
            wild = self.is_wild(symbol)
            if not (same or wild):
                continue

            matches[neighbor] = None
            if same:
                checked.add(neighbor)
            if wild:
                checked_wilds.add(neighbor)
            self._grow(reels, root, neighbor, checked, checked_wilds, matches)

    @staticmethod
    def _neighbors(reels: Reels, cell: Cell) -> list[Cell]:
        reel_idx, row = cell
        neighbors = []
        for d_reel, d_row in _DIRECTIONS:
            n_reel, n_row = reel_idx + d_reel, row + d_row
            if 0 <= n_reel < len(reels) and 0 <= n_row < len(reels[n_reel]):
                neighbors.append((n_reel, n_row))
        return neighbors
