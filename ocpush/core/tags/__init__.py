"""Tag Context Module.

Provides tag propagation:
- Ordered tag maps
- Context-scoped current tags
- Derived child scopes
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass, field
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union

from ocpush.core.errors import InvalidTagError

MAX_TAG_LENGTH = 255

# Context variable for the tags of the current logical call
_current_tags: contextvars.ContextVar["TagMap"] = contextvars.ContextVar("ocpush_tags")


def _is_printable(text: str) -> bool:
    return all(" " <= ch <= "~" for ch in text)


def validate_key(key: str) -> str:
    """Check a tag key and return it."""
    if not isinstance(key, str) or not key:
        raise InvalidTagError("Tag key must be a non-empty string")
    if len(key) > MAX_TAG_LENGTH or not _is_printable(key):
        raise InvalidTagError(f"Invalid tag key {key!r}")
    return key


def validate_value(value: str) -> str:
    """Check a tag value and return it."""
    if not isinstance(value, str):
        raise InvalidTagError(f"Tag value must be a string, got {type(value).__name__}")
    if len(value) > MAX_TAG_LENGTH or not _is_printable(value):
        raise InvalidTagError(f"Invalid tag value {value!r}")
    return value


@dataclass
class TagMap:
    """Insertion-ordered set of tag key/value pairs."""

    _items: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        items = self._items
        self._items = {}
        for key, value in items.items():
            self._items[validate_key(key)] = validate_value(value)

    @classmethod
    def of(cls, *pairs: Tuple[str, str], **tags: str) -> "TagMap":
        """Build a tag map from pairs and keyword tags, in that order."""
        tag_map = cls()
        for key, value in pairs:
            tag_map.upsert(key, value)
        for key, value in tags.items():
            tag_map.upsert(key, value)
        return tag_map

    def insert(self, key: str, value: str) -> None:
        """Add a tag unless the key is already present."""
        if key not in self._items:
            self._items[validate_key(key)] = validate_value(value)

    def update(self, key: str, value: str) -> None:
        """Replace the value of an existing key; no-op otherwise."""
        if key in self._items:
            self._items[key] = validate_value(value)

    def upsert(self, key: str, value: str) -> None:
        """Add or replace a tag."""
        self._items[validate_key(key)] = validate_value(value)

    def delete(self, key: str) -> None:
        """Remove a tag."""
        self._items.pop(key, None)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._items.get(key, default)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self._items.items())

    def copy(self) -> "TagMap":
        new_map = TagMap()
        new_map._items = self._items.copy()
        return new_map

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def to_dict(self) -> Dict[str, str]:
        return dict(self._items)


TagsLike = Union[TagMap, Mapping[str, str], None]


def as_tag_map(tags: TagsLike) -> TagMap:
    """Coerce a mapping (or None) into a TagMap."""
    if tags is None:
        return TagMap()
    if isinstance(tags, TagMap):
        return tags
    return TagMap(dict(tags))


def current_tags() -> TagMap:
    """Get the tags bound to the current context (empty when none)."""
    tags = _current_tags.get(None)
    return tags if tags is not None else TagMap()


def set_current_tags(tags: TagMap) -> contextvars.Token:
    """Bind tags to the current context."""
    return _current_tags.set(tags)


def reset_tags(token: contextvars.Token) -> None:
    """Restore the tags that were current before ``set_current_tags``."""
    _current_tags.reset(token)


class TagScope:
    """Context manager binding a tag map for the duration of a block."""

    def __init__(self, tags: TagMap):
        self._tags = tags
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> TagMap:
        self._token = set_current_tags(self._tags)
        return self._tags

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token:
            reset_tags(self._token)
            self._token = None


def tag_scope(tags: TagsLike = None, **extra: str) -> TagScope:
    """Create a scope with exactly the given tags."""
    tag_map = as_tag_map(tags).copy()
    for key, value in extra.items():
        tag_map.upsert(key, value)
    return TagScope(tag_map)


def child_scope(**extra: str) -> TagScope:
    """Create a scope inheriting the current tags plus ``extra``."""
    tag_map = current_tags().copy()
    for key, value in extra.items():
        tag_map.upsert(key, value)
    return TagScope(tag_map)


__all__ = [
    "MAX_TAG_LENGTH",
    "TagMap",
    "TagScope",
    "TagsLike",
    "as_tag_map",
    "child_scope",
    "current_tags",
    "reset_tags",
    "set_current_tags",
    "tag_scope",
    "validate_key",
    "validate_value",
]
