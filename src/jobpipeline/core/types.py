"""Type aliases used across the job pipeline."""

from __future__ import annotations

from typing import Any, Callable

Passable = tuple[Any, ...]
SendFn = Callable[..., Any]
Listener = Callable[..., None]
