"""Game symbols and reel strip types.

A symbol is an immutable token placed on reels. It optionally carries a pay
table mapping a match length ("kind") to a payout multiplier, and a bag of
arbitrary properties (e.g. ``{"wild": True}``) used to recognise special
symbols.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from reelbook.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class GameSymbol:
    """A symbol that can be placed on a reel.

    Attributes:
        id: Unique identifier, e.g. "W", "H1", "L5".
        pays: Optional pay table of match length to payout multiplier.
        properties: Extra properties used to identify special symbols.
    """

    id: str
    pays: Mapping[int, float] | None = None
    properties: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate and normalise the pay table."""
        if not self.id:
            raise ConfigurationError("symbol id cannot be empty")
        if self.pays is not None:
            if len(self.pays) == 0:
                raise ConfigurationError(f'symbol "{self.id}" must have pays defined')
            pays = {int(kind): float(value) for kind, value in self.pays.items()}
            object.__setattr__(self, "pays", MappingProxyType(dict(sorted(pays.items()))))
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    def __reduce__(self) -> tuple[Any, ...]:
        # MappingProxyType does not pickle; rebuild from plain dicts
        pays = dict(self.pays) if self.pays is not None else None
        return (GameSymbol, (self.id, pays, dict(self.properties)))

    def compare(self, other: "GameSymbol | Mapping[str, Any]") -> bool:
        """Compare against another symbol (by id) or a property subset.

        Args:
            other: A symbol, or a mapping of properties that must all be
                present on this symbol with equal values.

        Returns:
            True if the symbol matches.
        """
        if isinstance(other, GameSymbol):
            return self.id == other.id
        for key, value in other.items():
            if key not in self.properties or self.properties[key] != value:
                return False
        return True

    @property
    def min_pay_kind(self) -> int | None:
        """Smallest match length that pays, or None without a pay table."""
        if not self.pays:
            return None
        return min(self.pays)

    def payout_for(self, kind: int) -> float:
        """Look up the payout for a match of ``kind`` symbols.

        The largest pay key not exceeding ``kind`` is used, so a match
        length between two defined keys pays at the lower key.

        Returns:
            Payout multiplier, or 0.0 when ``kind`` is below the smallest
            key or the symbol has no pay table.
        """
        if not self.pays:
            return 0.0
        payout = 0.0
        for pay_kind, value in self.pays.items():
            if pay_kind > kind:
                break
            payout = value
        return payout


ReelStrip = tuple[GameSymbol, ...]
ReelSet = tuple[ReelStrip, ...]
Reels = list[list[GameSymbol]]
