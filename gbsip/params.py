"""Ordered header and URI parameters."""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping, Union

ParamValue = Union[str, None]

_WHITESPACE = frozenset(" \t\r\n")


class Params:
    """Ordered set of ``key[=value]`` parameters.

    A value of ``None`` marks a flag parameter rendered without ``=``.
    Re-adding an existing key replaces its value but keeps its position.
    """

    def __init__(
        self,
        items: Mapping[str, ParamValue] | Iterable[tuple[str, ParamValue]] | None = None,
    ) -> None:
        self._values: dict[str, ParamValue] = {}
        if items is not None:
            pairs = items.items() if isinstance(items, Mapping) else items
            for key, value in pairs:
                self.add(key, value)

    def get(self, key: str) -> ParamValue:
        """Value of ``key``; ``None`` when absent or a flag (use ``in`` to tell apart)."""
        return self._values.get(key)

    def add(self, key: str, value: ParamValue) -> Params:
        """Set ``key`` to ``value`` and return ``self`` for chaining."""
        if value is not None and not isinstance(value, str):
            raise TypeError(f"parameter value must be str or None, not {type(value).__name__}")
        self._values[key] = value
        return self

    def clone(self) -> Params:
        """Independent copy with the same order."""
        return Params(self._values)

    def to_string(self, sep: str) -> str:
        """Render parameters joined by ``sep``, quoting values with whitespace."""
        parts = []
        for key, value in self._values.items():
            if value is None:
                parts.append(key)
            elif _WHITESPACE.intersection(value):
                parts.append(f'{key}="{value}"')
            else:
                parts.append(f"{key}={value}")
        return sep.join(parts)

    def items(self) -> dict[str, ParamValue]:
        """Copy of the parameters as an ordered dict."""
        return dict(self._values)

    def keys(self) -> list[str]:
        """Parameter names in order."""
        return list(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Params):
            return NotImplemented
        return self._values == other._values

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return self.to_string("&")

    def __repr__(self) -> str:
        return f"Params({self._values!r})"