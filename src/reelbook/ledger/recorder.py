"""Statistical tallies of named property sets, mergeable across workers."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

RecordKey = tuple[tuple[str, str], ...]


def record_key(properties: Mapping[str, Any]) -> RecordKey:
    """Canonical key of a property set: its ``(name, value)`` pairs sorted by name."""
    return tuple(sorted((str(name), str(value)) for name, value in properties.items()))


@dataclass(slots=True)
class RecordItem:
    """A committed tally.

    Attributes:
        search: The property set, as sorted ``(name, value)`` pairs.
        times_triggered: How often the set was recorded.
        book_ids: Ids of the books that recorded it, in first-seen order.
    """

    search: RecordKey
    times_triggered: int = 0
    book_ids: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Persisted form of the tally."""
        return {
            "search": [{"name": name, "value": value} for name, value in self.search],
            "timesTriggered": self.times_triggered,
            "bookIds": list(self.book_ids),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RecordItem":
        """Rebuild a tally from its persisted form."""
        return cls(
            search=record_key({s["name"]: s["value"] for s in data["search"]}),
            times_triggered=int(data["timesTriggered"]),
            book_ids=[int(book_id) for book_id in data["bookIds"]],
        )


class Recorder:
    """Collects records of the running attempt and tallies accepted ones.

    Records are held as pending until the attempt is accepted; a rejected
    attempt simply clears them.
    """

    def __init__(self) -> None:
        self.pending: list[tuple[int, dict[str, str]]] = []
        self._records: dict[RecordKey, RecordItem] = {}

    @property
    def records(self) -> list[RecordItem]:
        """Committed tallies."""
        return list(self._records.values())

    def get(self, properties: Mapping[str, Any]) -> RecordItem | None:
        """Committed tally for a property set, if any."""
        return self._records.get(record_key(properties))

    def record(self, book_id: int, properties: Mapping[str, Any]) -> None:
        """Add a pending record. Values are stored as strings."""
        self.pending.append((book_id, {str(k): str(v) for k, v in properties.items()}))

    def clear_pending(self) -> None:
        """Drop the records of a rejected attempt."""
        self.pending.clear()

    def confirm(self) -> None:
        """Commit all pending records to the tallies."""
        for book_id, properties in self.pending:
            item = self._item(record_key(properties))
            item.times_triggered += 1
            if not item.book_ids or item.book_ids[-1] != book_id:
                item.book_ids.append(book_id)
        self.pending.clear()

    def merge(self, other: "Recorder") -> None:
        """Add another recorder's tallies to this one."""
        self._merge_items(other.records)

    def to_dicts(self) -> list[dict[str, Any]]:
        """Persisted form of every tally."""
        return [item.to_dict() for item in self._records.values()]

    @classmethod
    def from_dicts(cls, data: Iterable[Mapping[str, Any]]) -> "Recorder":
        """Rebuild a recorder from ``to_dicts`` output."""
        recorder = cls()
        recorder._merge_items(RecordItem.from_dict(item) for item in data)
        return recorder

    def _item(self, key: RecordKey) -> RecordItem:
        item = self._records.get(key)
        if item is None:
            item = self._records[key] = RecordItem(search=key)
        return item

    def _merge_items(self, items: Iterable[RecordItem]) -> None:
        for other in items:
            item = self._item(other.search)
            item.times_triggered += other.times_triggered
            known = set(item.book_ids)
            item.book_ids.extend(book_id for book_id in other.book_ids if book_id not in known)
