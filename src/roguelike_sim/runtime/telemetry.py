from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any, Mapping


@dataclass(slots=True)
class Metrics:
    counters: dict[str, float] = field(default_factory=dict)
    gauges: dict[str, Any] = field(default_factory=dict)

    def inc(self, path: str, n: float = 1.0) -> float:
        self.counters[path] = self.counters.get(path, 0.0) + float(n)
        return self.counters[path]

    def set_gauge(self, path: str, value: Any) -> Any:
        self.gauges[path] = value
        return value

    def snapshot_signature(self) -> str:
        canonical = {
            "counters": {k: float(v) for k, v in sorted(self.counters.items())},
            "gauges": {k: self._to_jsonable(v) for k, v in sorted(self.gauges.items())},
        }
        return json.dumps(canonical, sort_keys=True, separators=(",", ":"))

    def _to_jsonable(self, value: Any) -> Any:
        if isinstance(value, (str, int, float, bool)) or value is None:
            return value
        if isinstance(value, Mapping):
            return {str(k): self._to_jsonable(v) for k, v in sorted(value.items(), key=lambda itm: str(itm[0]))}
        if isinstance(value, (list, tuple, set)):
            return [self._to_jsonable(v) for v in value]
        return str(value)


@dataclass(slots=True)
class EventRing:
    capacity: int = 200
    events: list[Mapping[str, object]] = field(default_factory=list)

    def append(self, event: Mapping[str, object]) -> None:
        self.events.append(dict(event))
        if len(self.events) > max(1, int(self.capacity)):
            self.events = self.events[-int(self.capacity) :]

    def of_type(self, event_type: str) -> list[Mapping[str, object]]:
        return [event for event in self.events if event.get("type") == event_type]


@dataclass(slots=True)
class DebugConfig:
    level: str = "minimal"

    def has_event_ring(self) -> bool:
        return self.level in {"standard", "verbose"}


def ensure_metrics(owner: Any) -> Metrics:
    metrics = getattr(owner, "metrics", None)
    if isinstance(metrics, Metrics):
        return metrics
    converted = Metrics()
    if isinstance(metrics, Mapping):
        for key, value in metrics.items():
            try:
                converted.counters[str(key)] = float(value)
            except (TypeError, ValueError):
                continue
    owner.metrics = converted
    return converted


def ensure_event_ring(owner: Any) -> EventRing:
    cfg = getattr(owner, "debug_cfg", None)
    if not isinstance(cfg, DebugConfig):
        cfg = DebugConfig()
        owner.debug_cfg = cfg
    ring = getattr(owner, "event_ring", None)
    if cfg.has_event_ring():
        if not isinstance(ring, EventRing):
            ring = EventRing()
            owner.event_ring = ring
        return ring
    return ring if isinstance(ring, EventRing) else EventRing(capacity=0)


def record_event(owner: Any, event: Mapping[str, object]) -> None:
    ring = ensure_event_ring(owner)
    if ring.capacity <= 0:
        return
    payload = dict(event)
    if "turn" not in payload:
        state = getattr(owner, "state", None)
        payload["turn"] = getattr(state, "turn", 0)
    ring.append(payload)


__all__ = [
    "DebugConfig",
    "EventRing",
    "Metrics",
    "ensure_event_ring",
    "ensure_metrics",
    "record_event",
]
