"""Directory helpers and the pool graph used to look up quotes between tokens."""

from __future__ import annotations

from collections import defaultdict
from os import PathLike
from pathlib import Path
from typing import Any, Hashable


def read_json_dir(directory: str | PathLike[str]) -> list[str]:
    """Paths of the entries in a directory whose extension is exactly ``json``.

    Raises FileNotFoundError when the directory does not exist.
    """
    return sorted(
        str(entry) for entry in Path(directory).iterdir() if entry.suffix == ".json"
    )


class PoolGraph:
    """Quotes between token indices, grouped by source and then destination."""

    def __init__(self) -> None:
        self._edges: defaultdict[Hashable, defaultdict[Hashable, list[Any]]] = defaultdict(
            lambda: defaultdict(list)
        )

    def add_quote(self, src: Hashable, dst: Hashable, quote: Any) -> None:
        """Record a pool that quotes from ``src`` to ``dst``."""
        self._edges[src][dst].append(quote)

    def quotes(self, src: Hashable, dst: Hashable) -> list[Any]:
        """Pools quoting from ``src`` to ``dst``, in the order they were added."""
        edge = self._edges.get(src)
        if edge is None:
            return []
        return list(edge.get(dst, ()))

    def __repr__(self) -> str:
        plain = {src: dict(edge) for src, edge in self._edges.items()}
        return f"PoolGraph({plain!r})"