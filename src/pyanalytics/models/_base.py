"""Base mapping type for context and trait data.

Every context sub-object inherits from :class:`ValueMap` which provides:

* insertion-ordered ``str`` keys backed by a plain ``dict``
* fluent ``put_value`` so setters can be chained
* typed getters that coerce stored values (``get_string``, ``get_float`` ...)
* ``get_value_map`` which re-wraps a nested plain mapping as a typed sub-map
* read-only copies via ``unmodifiable_copy``

It also holds :data:`FrozenMapping`, the field type payload models use so
a built payload cannot be changed through its mapping fields.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator, Mapping, MutableMapping
from types import MappingProxyType
from typing import Annotated, Any, Self, TypeVar

from pydantic import AfterValidator, PlainSerializer

TMap = TypeVar("TMap", bound="ValueMap")


class ValueMap(MutableMapping[str, Any]):
    """Ordered string-keyed mapping that can be sealed read-only.

    A read-only instance raises :class:`TypeError` on any mutation.  The
    seal is shallow: nested mutable values stay whatever they were.
    """

    __slots__ = ("_delegate", "_read_only")

    def __init__(self, values: Mapping[str, Any] | None = None, *, read_only: bool = False) -> None:
        self._delegate: dict[str, Any] = dict(values) if values is not None else {}
        self._read_only = read_only

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __getitem__(self, key: str) -> Any:
        return self._delegate[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._check_writable()
        self._delegate[key] = value

    def __delitem__(self, key: str) -> None:
        self._check_writable()
        del self._delegate[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._delegate)

    def __len__(self) -> int:
        return len(self._delegate)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._delegate!r})"

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:
        return type(self)(copy.deepcopy(self._delegate, memo), read_only=self._read_only)

    def _check_writable(self) -> None:
        if self._read_only:
            raise TypeError(f"{type(self).__name__} is read-only")

    @property
    def read_only(self) -> bool:
        return self._read_only

    # ------------------------------------------------------------------
    # Fluent writes and typed reads
    # ------------------------------------------------------------------

    def put_value(self, key: str, value: Any) -> Self:
        """Store *value* under *key* and return ``self`` for chaining."""
        self[key] = value
        return self

    def get_string(self, key: str) -> str | None:
        value = self._delegate.get(key)
        if value is None:
            return None
        return value if isinstance(value, str) else str(value)

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self._delegate.get(key)
        if isinstance(value, bool):
            return default
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return default
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._delegate.get(key)
        if isinstance(value, bool):
            return default
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value)
        if isinstance(value, str):
            try:
                return int(float(value))
            except ValueError:
                return default
        return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._delegate.get(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return default

    def get_value_map(self, key: str, cls: type[TMap]) -> TMap | None:
        """Return the nested map under *key* typed as *cls*.

        A plain mapping found under *key* is wrapped as *cls* and, when this
        instance is writable, stored back so later writes through the
        returned object are visible here.
        """
        value = self._delegate.get(key)
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            return None
        read_only = value.read_only if isinstance(value, ValueMap) else self._read_only
        typed = cls(value, read_only=read_only)
        if not self._read_only:
            self._delegate[key] = typed
        return typed

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------

    def unmodifiable_copy(self) -> Self:
        """Return a read-only shallow copy of this map."""
        return type(self)(self._delegate, read_only=True)

    def to_dict(self) -> dict[str, Any]:
        """Recursively convert into plain ``dict``/``list`` containers."""
        return {key: to_plain(value) for key, value in self._delegate.items()}


def to_plain(value: Any) -> Any:
    """Convert nested mappings and sequences into plain containers."""
    if isinstance(value, Mapping):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


def freeze(value: Any) -> Any:
    """Return a read-only deep copy of *value*.

    Mappings become :class:`types.MappingProxyType` over a fresh ``dict``
    and lists or tuples become tuples.  :func:`to_plain` reverses this.
    """
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


FrozenMapping = Annotated[
    Mapping[str, Any],
    AfterValidator(freeze),
    PlainSerializer(to_plain, return_type=dict[str, Any]),
]
"""Annotated model field holding a frozen deep copy, dumped as plain containers."""
