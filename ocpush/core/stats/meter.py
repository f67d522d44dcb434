"""Meter: view registry and in-memory aggregation.

The meter owns the registered views and, per view, one row per distinct
combination of the view's tag values. Recording is safe from many
threads; each view's rows are guarded by that view's lock, and
snapshots copy rows under the same lock.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ocpush.core.errors import DuplicateViewError, InvalidTagError, UnknownViewError
from ocpush.core.stats.aggregation import Row, new_aggregation_data
from ocpush.core.stats.measure import Measurement
from ocpush.core.stats.view import View
from ocpush.core.tags import TagMap, TagsLike, as_tag_map

logger = logging.getLogger(__name__)

RowKey = Tuple[Optional[str], ...]


class _ViewRows:
    """Rows of one registered view."""

    def __init__(self, view: View):
        self.view = view
        self.lock = threading.Lock()
        self.rows: Dict[RowKey, Row] = {}

    def row_key(self, tags: TagMap) -> RowKey:
        return tuple(tags.get(key) for key in self.view.tag_keys)

    def update(
        self,
        tags: TagMap,
        value: Union[int, float],
        attachments: Optional[Mapping[str, Any]],
    ) -> None:
        key = self.row_key(tags)
        with self.lock:
            row = self.rows.get(key)
            if row is None:
                row_tags = tuple(
                    (tag_key, tag_value)
                    for tag_key, tag_value in zip(self.view.tag_keys, key)
                    if tag_value is not None
                )
                data = new_aggregation_data(self.view.aggregation)
                # a value that cannot be aggregated must not leave an empty row
                data.add(value)
                row = Row(row_tags, data)
                self.rows[key] = row
            else:
                row.data.add(value)
            if attachments:
                row.attachments = dict(attachments)

    def snapshot(self) -> List[Row]:
        with self.lock:
            items = [(key, row.copy()) for key, row in self.rows.items()]
        items.sort(key=lambda item: tuple((v is not None, v or "") for v in item[0]))
        return [row for _, row in items]


class Meter:
    """Registry of views and their aggregated rows."""

    def __init__(self):
        self._lock = threading.Lock()
        self._views: Dict[str, _ViewRows] = {}
        self._by_measure: Dict[str, List[_ViewRows]] = {}

    def register(self, *views: View) -> None:
        """Register views in order.

        Raises:
            DuplicateViewError: a view with the same name is registered.
                Views earlier in ``views`` stay registered.
        """
        with self._lock:
            for view in views:
                if view.name in self._views:
                    raise DuplicateViewError(view.name)
                view_rows = _ViewRows(view)
                self._views[view.name] = view_rows
                self._by_measure.setdefault(view.measure.name, []).append(view_rows)
                logger.debug(f"Registered view {view.name} on measure {view.measure.name}")

    def unregister(self, *views: Union[View, str]) -> None:
        """Remove views and drop their rows. Unknown names are ignored."""
        with self._lock:
            for view in views:
                name = view if isinstance(view, str) else view.name
                view_rows = self._views.pop(name, None)
                if view_rows is None:
                    continue
                siblings = self._by_measure.get(view_rows.view.measure.name, [])
                siblings.remove(view_rows)
                if not siblings:
                    self._by_measure.pop(view_rows.view.measure.name, None)

    def find(self, name: str) -> Optional[View]:
        """Get a registered view by name."""
        with self._lock:
            view_rows = self._views.get(name)
        return view_rows.view if view_rows else None

    def views(self) -> List[View]:
        """Registered views in registration order."""
        with self._lock:
            return [view_rows.view for view_rows in self._views.values()]

    def record(
        self,
        tags: TagsLike,
        measurements: Iterable[Measurement],
        attachments: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Aggregate measurements into every view of their measure.

        Measurements of measures without a registered view are dropped.
        Never raises for bad input; problems are logged.
        """
        try:
            tag_map = as_tag_map(tags)
        except InvalidTagError as e:
            logger.warning(f"Dropping measurements with invalid tags: {e}")
            return

        for measurement in measurements:
            with self._lock:
                targets = list(self._by_measure.get(measurement.measure.name, ()))
            if not targets:
                logger.debug(f"No view for measure {measurement.measure.name}, dropped")
                continue
            for view_rows in targets:
                try:
                    view_rows.update(tag_map, measurement.value, attachments)
                except (TypeError, ValueError) as e:
                    logger.warning(
                        f"Dropping measurement for view {view_rows.view.name}: {e}"
                    )

    def retrieve_data(self, view_name: str) -> List[Row]:
        """Snapshot the rows of a view.

        Rows are copies, ordered by tag values. Empty when nothing has
        been recorded.

        Raises:
            UnknownViewError: no view with that name is registered.
        """
        with self._lock:
            view_rows = self._views.get(view_name)
        if view_rows is None:
            raise UnknownViewError(view_name)
        return view_rows.snapshot()
