"""Read-only record store clients."""

from .postgrest import PostgrestStore, render_filter
from .store import Filter, FilterOp, MemoryRecordStore, RecordStore, Row

__all__ = ["Filter", "FilterOp", "MemoryRecordStore", "PostgrestStore", "RecordStore", "Row", "render_filter"]
