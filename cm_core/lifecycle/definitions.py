# cm_core/lifecycle/definitions.py
"""
Table-driven lifecycle definitions.

A record kind (claim, policy) is described by one `Lifecycle` value:
an explicit edge list, the editable field set per status, the required
field set per target status and an optional side-effect function.
Everything here is pure data plus lookups. No database, no request.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Tuple

from cm_core.common.api.exceptions import InternalError

SideEffect = Callable[[str, Optional[str], datetime], Dict[str, Any]]


@dataclass(frozen=True)
class TransitionEdge:
    from_status: str
    to_status: str
    reason_required: bool = False


@dataclass(frozen=True)
class Lifecycle:
    kind: str
    initial_status: str
    statuses: Tuple[str, ...]
    edges: Tuple[TransitionEdge, ...]
    editable: Mapping[str, FrozenSet[str]]
    invariants: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    side_effect: Optional[SideEffect] = None

    def __post_init__(self):
        known = set(self.statuses)
        if self.initial_status not in known:
            raise ValueError(f"{self.kind}: unknown initial status {self.initial_status}")

        seen = set()
        for e in self.edges:
            if e.from_status not in known or e.to_status not in known:
                raise ValueError(f"{self.kind}: edge {e.from_status}->{e.to_status} uses an unknown status")
            if e.from_status == e.to_status:
                raise ValueError(f"{self.kind}: self edge on {e.from_status}")
            pair = (e.from_status, e.to_status)
            if pair in seen:
                raise ValueError(f"{self.kind}: duplicate edge {e.from_status}->{e.to_status}")
            seen.add(pair)

        for status in list(self.editable) + list(self.invariants):
            if status not in known:
                raise ValueError(f"{self.kind}: table entry for unknown status {status}")

    # ------------------------------------------------------------------
    # TransitionPolicy
    # ------------------------------------------------------------------
    def edge(self, from_status: str, to_status: str) -> Optional[TransitionEdge]:
        for e in self.edges:
            if e.from_status == from_status and e.to_status == to_status:
                return e
        return None

    def is_legal(self, from_status: str, to_status: str) -> bool:
        return self.edge(from_status, to_status) is not None

    def reason_required(self, from_status: str, to_status: str) -> bool:
        e = self.edge(from_status, to_status)
        return bool(e and e.reason_required)

    @property
    def terminal_statuses(self) -> FrozenSet[str]:
        sources = {e.from_status for e in self.edges}
        return frozenset(s for s in self.statuses if s not in sources)

    def side_effect_fields(self, to_status: str, reason: Optional[str], at: datetime) -> Dict[str, Any]:
        if self.side_effect is None:
            return {}
        return dict(self.side_effect(to_status, reason, at))

    # ------------------------------------------------------------------
    # FieldEditabilityPolicy / InvariantPolicy
    # ------------------------------------------------------------------
    def editable_fields(self, status: str) -> FrozenSet[str]:
        return frozenset(self.editable.get(status, frozenset()))

    def required_fields(self, status: str) -> Tuple[str, ...]:
        return tuple(self.invariants.get(status, ()))


_REGISTRY: Dict[str, Lifecycle] = {}


def register(lifecycle: Lifecycle) -> Lifecycle:
    existing = _REGISTRY.get(lifecycle.kind)
    if existing is not None and existing is not lifecycle:
        raise ValueError(f"Lifecycle already registered: {lifecycle.kind}")
    _REGISTRY[lifecycle.kind] = lifecycle
    return lifecycle


def get_lifecycle(kind: str) -> Lifecycle:
    try:
        return _REGISTRY[kind]
    except KeyError:
        raise InternalError(f"Lifecycle is not configured: {kind}")


def is_legal(kind: str, from_status: str, to_status: str) -> bool:
    return get_lifecycle(kind).is_legal(from_status, to_status)


def reason_required(kind: str, from_status: str, to_status: str) -> bool:
    return get_lifecycle(kind).reason_required(from_status, to_status)


def editable_fields(kind: str, status: str) -> FrozenSet[str]:
    return get_lifecycle(kind).editable_fields(status)


def required_fields(kind: str, status: str) -> Tuple[str, ...]:
    return get_lifecycle(kind).required_fields(status)
