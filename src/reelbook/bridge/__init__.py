"""Bridge module for reel files and published outputs."""

from reelbook.bridge.export import (
    book_lines,
    force_keys,
    force_records,
    lookup_table_rows,
    mode_index,
    reel_set_from_ids,
    segmented_lookup_rows,
)

__all__ = [
    "reel_set_from_ids",
    "lookup_table_rows",
    "segmented_lookup_rows",
    "book_lines",
    "force_records",
    "force_keys",
    "mode_index",
]
