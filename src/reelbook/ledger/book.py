"""The book: event log and payout of one accepted simulation."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class BookEvent:
    """One entry of a book's event log. ``index`` starts at 1."""

    index: int
    type: str
    data: Mapping[str, Any]

    def to_dict(self) -> dict[str, Any]:
        """Serialize the event."""
        return {"index": self.index, "type": self.type, "data": dict(self.data)}


@dataclass(slots=True)
class Book:
    """Record of one simulation.

    Attributes:
        id: Simulation id, unique within a game mode.
        criteria: Criteria label the simulation was assigned.
        events: Ordered event log.
        payout: Final payout as an integer multiplier times 100.
        basegame_wins: Base game share of the win, as a multiplier.
        freespins_wins: Free spins share of the win, as a multiplier.
    """

    id: int
    criteria: str = "N/A"
    events: list[BookEvent] = field(default_factory=list)
    payout: int = 0
    basegame_wins: float = 0.0
    freespins_wins: float = 0.0

    def add_event(self, type: str, data: Mapping[str, Any]) -> BookEvent:
        """Append an event, numbering it after the last one."""
        event = BookEvent(index=len(self.events) + 1, type=type, data=dict(data))
        self.events.append(event)
        return event

    @property
    def payout_multiplier(self) -> float:
        """Payout as a bet multiplier."""
        return self.payout / 100

    def to_dict(self) -> dict[str, Any]:
        """Serialize the book with its bookkeeping fields."""
        return {
            "id": self.id,
            "criteria": self.criteria,
            "events": [event.to_dict() for event in self.events],
            "payout": self.payout,
            "basegameWins": self.basegame_wins,
            "freespinsWins": self.freespins_wins,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Book":
        """Rebuild a book from ``to_dict`` output."""
        return cls(
            id=int(data["id"]),
            criteria=data.get("criteria", "N/A"),
            events=[
                BookEvent(index=e["index"], type=e["type"], data=e["data"])
                for e in data.get("events", [])
            ],
            payout=int(data.get("payout", 0)),
            basegame_wins=float(data.get("basegameWins", 0.0)),
            freespins_wins=float(data.get("freespinsWins", 0.0)),
        )

    def written(self) -> dict[str, Any]:
        """The book as it appears in the persisted book log."""
        return {
            "id": self.id,
            "payoutMultiplier": self.payout,
            "events": [event.to_dict() for event in self.events],
        }
