"""In-process telemetry for gating and eligibility decisions."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, Dict, List

from .config import get_settings

logger = logging.getLogger("progression.telemetry")

Listener = Callable[["TelemetryEvent"], None]


@dataclass(frozen=True)
class TelemetryEvent:
    name: str
    payload: Dict[str, Any]


_listeners: List[Listener] = []
_lock = RLock()


def register_listener(listener: Listener) -> None:
    """Register a listener that receives every emitted event."""
    with _lock:
        _listeners.append(listener)


def clear_listeners() -> None:
    with _lock:
        _listeners.clear()


def emit_event(name: str, **fields: Any) -> None:
    """Fan an event out to listeners, then log it as one JSON line.

    Sets and tuples in ``fields`` are converted to sorted lists so listeners
    and the log line see the same JSON-friendly payload.
    """
    payload = {key: _jsonable(value) for key, value in fields.items()}
    event = TelemetryEvent(name=name, payload=payload)

    with _lock:
        listeners = list(_listeners)

    for listener in listeners:
        try:
            listener(event)
        except Exception:  # noqa: BLE001
            logger.exception("Telemetry listener failed for %s", name)

    if get_settings().telemetry_logging:
        logger.info("TELEMETRY %s", json.dumps({"event": name, **payload}, default=str))


def _jsonable(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, tuple):
        return list(value)
    return value


__all__ = [
    "TelemetryEvent",
    "clear_listeners",
    "emit_event",
    "register_listener",
]
