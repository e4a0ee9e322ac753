"""Per-metric buffer of points waiting for the next flush."""

from __future__ import annotations

from typing import Callable, Optional

from gmonitor.models import DataPoint

DEFAULT_GROUP_KEY = "__default__"

MergeFn = Callable[[DataPoint, DataPoint], DataPoint]
GroupByFn = Callable[[DataPoint], Optional[str]]


class BatchBuffer:
    """Pending points keyed by group, merged on collision.

    Points whose group key is already present are merged into the existing
    entry, which keeps its first-seen position. Without a ``group_by`` every
    point shares ``DEFAULT_GROUP_KEY``.
    """

    def __init__(self, merge: MergeFn, group_by: GroupByFn | None = None):
        self._merge = merge
        self._group_by = group_by
        self._points: dict[str, DataPoint] = {}

    def __len__(self) -> int:
        return len(self._points)

    def keys(self) -> list[str]:
        return list(self._points)

    def group_key(self, point: DataPoint) -> str:
        if self._group_by is None:
            return DEFAULT_GROUP_KEY
        return self._group_by(point) or DEFAULT_GROUP_KEY

    def push(self, point: DataPoint) -> str:
        """Add ``point`` to the buffer and return the group key it landed in."""
        key = self.group_key(point)
        existing = self._points.get(key)
        if existing is None:
            self._points[key] = point
        else:
            self._points[key] = self._merge(existing, point)
        return key

    def drain_and_reset(self) -> list[DataPoint]:
        """Return pending points in first-seen group order and start empty."""
        # Swap (atomic in single-threaded async)
        points = self._points
        self._points = {}
        return list(points.values())
