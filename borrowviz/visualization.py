"""Timelines of resource access points and the states they pass through."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from borrowviz.data import (
    Event,
    EventKind,
    ExternalEvent,
    ExternalEventKind,
    Function,
    MutRef,
    Owner,
    ResourceAccessPoint,
    State,
    StateKind,
    StaticRef,
    Struct,
    VisualizationError,
    resource_access_point_extract,
)


@dataclass
class Timeline:
    """Events of one access point, in the order they were recorded."""

    resource_access_point: ResourceAccessPoint
    history: list[tuple[int, Event]] = field(default_factory=list)


@dataclass
class StructsInfo:
    """Struct boxes as (owner hash, owner x, x of the rightmost member)."""

    structs: list[tuple[int, int, int]] = field(default_factory=list)


def _insert_sorted(mapping: dict, key, value) -> dict:
    """Insert into a dict and return it with its keys in ascending order."""
    mapping[key] = value
    return dict(sorted(mapping.items()))


def _event_invalid(event: Event) -> bool:
    """Variables cannot borrow from, or return resources to, functions."""
    if event.kind in (EventKind.STATIC_BORROW, EventKind.MUTABLE_BORROW):
        return isinstance(event.from_, Function)
    if event.kind in (EventKind.STATIC_DIE, EventKind.MUTABLE_DIE):
        return isinstance(event.to, Function)
    return False


@dataclass
class VisualizationData:
    """All information a frontend needs: timelines keyed by hash, and raw events."""

    timelines: dict[int, Timeline] = field(default_factory=dict)
    external_events: list[tuple[int, ExternalEvent]] = field(default_factory=list)
    preprocess_external_events: list[tuple[int, ExternalEvent]] = field(
        default_factory=list
    )
    event_line_map: dict[int, list[ExternalEvent]] = field(default_factory=dict)

    def get_name_from_hash(self, hash_: int) -> Optional[str]:
        timeline = self.timelines.get(hash_)
        return timeline.resource_access_point.name if timeline is not None else None

    def get_state(self, hash_: int, line_number: int) -> Optional[State]:
        """Placeholder state lookup: OutOfScope for known hashes, None otherwise."""
        if hash_ in self.timelines:
            return State.out_of_scope()
        return None

    def is_mut(self, hash_: int) -> bool:
        return self.timelines[hash_].resource_access_point.is_mut

    def is_mutref(self, hash_: int) -> bool:
        return self.timelines[hash_].resource_access_point.is_mutref()

    def calc_state(
        self, previous_state: State, event: Event, event_line: int, hash_: int
    ) -> State:
        """State of the access point ``hash_`` right after ``event``."""
        if _event_invalid(event):
            return State.invalid()

        prev = previous_state.kind
        kind = event.kind

        if prev is StateKind.INVALID:
            return State.invalid()

        if prev is StateKind.OUT_OF_SCOPE:
            if kind in (EventKind.ACQUIRE, EventKind.COPY, EventKind.MUTABLE_BORROW):
                return State.full_privilege()
            if kind is EventKind.STATIC_BORROW:
                return State.partial_privilege(1, [event.from_])
            if kind is EventKind.INIT_REF_PARAM:
                param = event.param
                if isinstance(param, Function):
                    raise VisualizationError(
                        "Cannot initialize function as as valid parameter!"
                    )
                if isinstance(param, StaticRef):
                    return State.partial_privilege(1, [param])
                return State.full_privilege()

        if prev is StateKind.RESOURCE_MOVED and kind is EventKind.ACQUIRE:
            if self.is_mut(hash_):
                return State.full_privilege()
            raise VisualizationError(
                f"Immutable variable {self.get_name_from_hash(hash_)} "
                "cannot reacquire resources!"
            )

        if prev is StateKind.FULL_PRIVILEGE:
            if kind is EventKind.MOVE:
                return State.resource_moved(event.to, event_line)
            if kind is EventKind.MUTABLE_LEND:
                # Lending mutably needs a mutable binding or a mutable reference.
                if self.is_mut(hash_) or self.is_mutref(hash_):
                    return State.revoked_privilege(None, event.to)
                return State.invalid()
            if kind is EventKind.MUTABLE_DIE:
                return State.out_of_scope()
            if kind in (EventKind.ACQUIRE, EventKind.COPY):
                return State.full_privilege() if self.is_mut(hash_) else State.invalid()
            if kind in (EventKind.OWNER_GO_OUT_OF_SCOPE, EventKind.REF_GO_OUT_OF_SCOPE):
                return State.out_of_scope()
            if kind is EventKind.STATIC_LEND:
                if event.to is None:
                    raise VisualizationError("Cannot lend a resource to nothing!")
                return State.partial_privilege(1, [event.to])

        if prev is StateKind.PARTIAL_PRIVILEGE:
            if kind is EventKind.MUTABLE_LEND:
                return State.invalid()
            if kind is EventKind.STATIC_LEND:
                if event.to is None:
                    raise VisualizationError("Cannot lend a resource to nothing!")
                return State.partial_privilege(
                    previous_state.borrow_count + 1,
                    previous_state.borrow_to | {event.to},
                )
            if kind is EventKind.STATIC_DIE:
                return State.out_of_scope()
            if kind is EventKind.STATIC_REACQUIRE:
                new_count = previous_state.borrow_count - 1
                if new_count == 0:
                    return State.full_privilege()
                if event.from_ is None or event.from_ not in previous_state.borrow_to:
                    raise VisualizationError(
                        "Resource reacquired from an access point it was not lent to!"
                    )
                return State.partial_privilege(
                    new_count, previous_state.borrow_to - {event.from_}
                )
            if kind in (EventKind.OWNER_GO_OUT_OF_SCOPE, EventKind.REF_GO_OUT_OF_SCOPE):
                return State.out_of_scope()

        if prev is StateKind.REVOKED_PRIVILEGE and kind is EventKind.MUTABLE_REACQUIRE:
            return State.full_privilege()

        if kind is EventKind.DUPLICATE:
            return previous_state

        return State.invalid()

    def get_states(self, hash_: int) -> list[tuple[int, int, State]]:
        """(start line, end line, state) spans of the access point ``hash_``."""
        states: list[tuple[int, int, State]] = []
        previous_line = 1
        prev_state = State.out_of_scope()
        for line_number, event in self.timelines[hash_].history:
            states.append((previous_line, line_number, prev_state))
            prev_state = self.calc_state(prev_state, event, line_number, hash_)
            previous_line = line_number
        states.append((previous_line, previous_line, prev_state))
        return states

    def append_external_event(self, event: ExternalEvent, line_number: int) -> None:
        """Record an event before line numbers are adjusted for stacked arrows."""
        self.preprocess_external_events.append((line_number, event))
        from_ro, to_ro = resource_access_point_extract(event)
        if from_ro is None or to_ro is None:
            return
        if isinstance(from_ro, Function) or isinstance(to_ro, Function):
            return
        if line_number in self.event_line_map:
            self.event_line_map[line_number].append(event)
        else:
            self.event_line_map = _insert_sorted(
                self.event_line_map, line_number, [event]
            )

    def append_event(
        self,
        resource_access_point: ResourceAccessPoint,
        event: Event,
        line_number: int,
    ) -> None:
        """Append an event to the timeline of the access point, creating it if needed.

        Use append_external_event when building a visualization.
        """
        key = resource_access_point.hash
        if key not in self.timelines:
            self.timelines = _insert_sorted(
                self.timelines, key, Timeline(resource_access_point)
            )
        self.timelines[key].history.append((line_number, event))

    def _maybe_append(
        self, rap: Optional[ResourceAccessPoint], event: Event, line_number: int
    ) -> None:
        if rap is not None:
            self.append_event(rap, event, line_number)

    def append_processed_external_event(
        self, event: ExternalEvent, line_number: int
    ) -> None:
        """Record an event and split it into per-access-point events."""
        self.external_events.append((line_number, event))
        kind = event.kind
        from_ro, to_ro = event.from_, event.to
        add = self._maybe_append

        if kind is ExternalEventKind.MOVE:
            add(to_ro, Event(EventKind.ACQUIRE, from_=from_ro), line_number)
            add(from_ro, Event(EventKind.MOVE, to=to_ro), line_number)
        elif kind is ExternalEventKind.BIND:
            add(to_ro, Event(EventKind.ACQUIRE, from_=from_ro), line_number)
            add(from_ro, Event(EventKind.DUPLICATE, to=to_ro), line_number)
        elif kind is ExternalEventKind.COPY:
            add(to_ro, Event(EventKind.COPY, from_=from_ro), line_number)
            add(from_ro, Event(EventKind.DUPLICATE, to=to_ro), line_number)
        elif kind is ExternalEventKind.STATIC_BORROW:
            add(from_ro, Event(EventKind.STATIC_LEND, to=to_ro), line_number)
            if from_ro is not None:
                add(to_ro, Event(EventKind.STATIC_BORROW, from_=from_ro), line_number)
        elif kind is ExternalEventKind.STATIC_DIE:
            add(to_ro, Event(EventKind.STATIC_REACQUIRE, from_=from_ro), line_number)
            add(from_ro, Event(EventKind.STATIC_DIE, to=to_ro), line_number)
        elif kind is ExternalEventKind.MUTABLE_BORROW:
            add(from_ro, Event(EventKind.MUTABLE_LEND, to=to_ro), line_number)
            if from_ro is not None:
                add(to_ro, Event(EventKind.MUTABLE_BORROW, from_=from_ro), line_number)
        elif kind is ExternalEventKind.MUTABLE_DIE:
            add(to_ro, Event(EventKind.MUTABLE_REACQUIRE, from_=from_ro), line_number)
            add(from_ro, Event(EventKind.MUTABLE_DIE, to=to_ro), line_number)
        elif kind is ExternalEventKind.PASS_BY_STATIC_REFERENCE:
            add(from_ro, Event(EventKind.STATIC_LEND, to=to_ro), line_number)
            if from_ro is None:
                raise VisualizationError(
                    "Must pass a function to PassByStaticReference.to!"
                )
            add(to_ro, Event(EventKind.STATIC_BORROW, from_=from_ro), line_number)
            add(from_ro, Event(EventKind.STATIC_REACQUIRE, from_=to_ro), line_number)
            add(to_ro, Event(EventKind.STATIC_DIE, to=from_ro), line_number)
        elif kind is ExternalEventKind.PASS_BY_MUTABLE_REFERENCE:
            add(from_ro, Event(EventKind.MUTABLE_LEND, to=to_ro), line_number)
            if from_ro is None:
                raise VisualizationError(
                    "Must pass a function to PassByMutableReference.to!"
                )
            add(to_ro, Event(EventKind.MUTABLE_BORROW, from_=from_ro), line_number)
            add(from_ro, Event(EventKind.MUTABLE_REACQUIRE, from_=to_ro), line_number)
            add(to_ro, Event(EventKind.MUTABLE_DIE, to=from_ro), line_number)
        elif kind is ExternalEventKind.INIT_REF_PARAM:
            ro = event.ro
            add(ro, Event(EventKind.INIT_REF_PARAM, param=ro), line_number)
        elif kind is ExternalEventKind.GO_OUT_OF_SCOPE:
            ro = event.ro
            if isinstance(ro, (Owner, Struct)):
                add(ro, Event(EventKind.OWNER_GO_OUT_OF_SCOPE), line_number)
            elif isinstance(ro, (MutRef, StaticRef)):
                add(ro, Event(EventKind.REF_GO_OUT_OF_SCOPE), line_number)
            else:
                raise VisualizationError(
                    "Functions do not go out of scope! "
                    f'We do not expect to see "{ro.name}" here.'
                )