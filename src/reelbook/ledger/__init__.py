"""Bookkeeping: wallet, books and the statistics recorder."""

from reelbook.ledger.book import Book, BookEvent
from reelbook.ledger.recorder import Recorder, RecordItem
from reelbook.ledger.wallet import Wallet

__all__ = ["Book", "BookEvent", "Recorder", "RecordItem", "Wallet"]
