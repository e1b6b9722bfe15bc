"""Resource access points, events and states behind a lifetime visualization."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional

from borrowviz import hover_messages

LINE_SPACE = 30


class VisualizationError(Exception):
    """Raised when the events describe an impossible program."""


class ResourceAccessPoint:
    """Something that can hold or access a resource: owner, reference or function."""

    name: str
    hash: int

    def is_ref(self) -> bool:
        return isinstance(self, (MutRef, StaticRef))

    def is_mutref(self) -> bool:
        return isinstance(self, MutRef)

    def is_struct_group(self) -> bool:
        return isinstance(self, Struct)

    def is_struct(self) -> bool:
        return isinstance(self, Struct) and not self.is_member

    def get_owner(self) -> int:
        """Hash of the owning struct for struct members, otherwise own hash."""
        if isinstance(self, Struct):
            return self.owner
        return self.hash


@dataclass(frozen=True)
class Owner(ResourceAccessPoint):
    """A variable that is not a reference."""

    name: str
    hash: int
    is_mut: bool = False
    is_member: ClassVar[bool] = False


@dataclass(frozen=True)
class MutRef(ResourceAccessPoint):
    """A reference of type ``&mut T``."""

    name: str
    hash: int
    is_mut: bool = False
    is_member: ClassVar[bool] = False


@dataclass(frozen=True)
class StaticRef(ResourceAccessPoint):
    """A reference of type ``&T``."""

    name: str
    hash: int
    is_mut: bool = False
    is_member: ClassVar[bool] = False


@dataclass(frozen=True)
class Function(ResourceAccessPoint):
    """A function that values are passed to or returned from."""

    name: str
    hash: int
    is_mut: ClassVar[bool] = False
    is_member: ClassVar[bool] = False


@dataclass(frozen=True)
class Struct(ResourceAccessPoint):
    """A struct instance or one of its members."""

    name: str
    hash: int
    owner: int
    is_mut: bool = False
    is_member: bool = False


class ExternalEventKind(Enum):
    """Events as written in the annotation language."""

    BIND = "Bind"
    COPY = "Copy"
    MOVE = "Move"
    STATIC_BORROW = "StaticBorrow"
    MUTABLE_BORROW = "MutableBorrow"
    STATIC_DIE = "StaticDie"
    MUTABLE_DIE = "MutableDie"
    PASS_BY_STATIC_REFERENCE = "PassByStaticReference"
    PASS_BY_MUTABLE_REFERENCE = "PassByMutableReference"
    GO_OUT_OF_SCOPE = "GoOutOfScope"
    INIT_REF_PARAM = "InitRefParam"


_SINGLE_RAP_KINDS = frozenset(
    {ExternalEventKind.GO_OUT_OF_SCOPE, ExternalEventKind.INIT_REF_PARAM}
)


@dataclass(frozen=True)
class ExternalEvent:
    """An event between two access points, or on one (``ro``)."""

    kind: ExternalEventKind
    from_: Optional[ResourceAccessPoint] = None
    to: Optional[ResourceAccessPoint] = None
    ro: Optional[ResourceAccessPoint] = None

    def __post_init__(self) -> None:
        if self.kind in _SINGLE_RAP_KINDS and self.ro is None:
            raise ValueError(f"{self.kind.value} requires a resource access point")


def resource_access_point_extract(
    external_event: ExternalEvent,
) -> tuple[Optional[ResourceAccessPoint], Optional[ResourceAccessPoint]]:
    """Return (from, to) of a two-party event; (None, None) otherwise."""
    if external_event.kind in _SINGLE_RAP_KINDS:
        return None, None
    return external_event.from_, external_event.to


class EventKind(Enum):
    """What happens to a single access point on a line."""

    ACQUIRE = "Acquire"
    DUPLICATE = "Duplicate"
    COPY = "Copy"
    MOVE = "Move"
    MUTABLE_LEND = "MutableLend"
    MUTABLE_BORROW = "MutableBorrow"
    MUTABLE_DIE = "MutableDie"
    MUTABLE_REACQUIRE = "MutableReacquire"
    STATIC_LEND = "StaticLend"
    STATIC_BORROW = "StaticBorrow"
    STATIC_DIE = "StaticDie"
    STATIC_REACQUIRE = "StaticReacquire"
    OWNER_GO_OUT_OF_SCOPE = "OwnerGoOutOfScope"
    REF_GO_OUT_OF_SCOPE = "RefGoOutOfScope"
    INIT_REF_PARAM = "InitRefParam"


_EVENT_LABELS = {
    EventKind.ACQUIRE: "",
    EventKind.DUPLICATE: "Copying resource",
    EventKind.COPY: "Copying resource from some variable",
    EventKind.MOVE: "Moving resource",
    EventKind.MUTABLE_LEND: "Mutable lend",
    EventKind.MUTABLE_BORROW: "Fully borrows resource",
    EventKind.MUTABLE_DIE: "Fully returns resource",
    EventKind.MUTABLE_REACQUIRE: "Fully reacquires resource",
    EventKind.STATIC_LEND: "Partially lends resource",
    EventKind.STATIC_BORROW: "Partially borrows resource",
    EventKind.STATIC_DIE: "Partially returns resource",
    EventKind.STATIC_REACQUIRE: "Partially reacquires resource",
    EventKind.INIT_REF_PARAM: "Function parameter is initialized",
    EventKind.OWNER_GO_OUT_OF_SCOPE: "Goes out of Scope as an owner of resource",
    EventKind.REF_GO_OUT_OF_SCOPE: "Goes out of Scope as a reference to resource",
}

_Message2 = Callable[[str, str], str]


def _safe_message(
    functor: _Message2, my_name: str, target: Optional[ResourceAccessPoint]
) -> str:
    return functor(my_name, target.name if target is not None else "another value")


# Messages for events whose dot is the source of an arrow (target in ``to``).
_TO_MESSAGES: dict[EventKind, _Message2] = {
    EventKind.DUPLICATE: hover_messages.event_dot_copy_to,
    EventKind.STATIC_LEND: hover_messages.event_dot_static_lend,
    EventKind.MUTABLE_LEND: hover_messages.event_dot_mut_lend,
    EventKind.STATIC_DIE: hover_messages.event_dot_static_return,
    EventKind.MUTABLE_DIE: hover_messages.event_dot_mut_return,
}

# Messages for events whose dot is the destination of an arrow (target in ``from_``).
_FROM_MESSAGES: dict[EventKind, _Message2] = {
    EventKind.ACQUIRE: hover_messages.event_dot_acquire,
    EventKind.COPY: hover_messages.event_dot_copy_from,
    EventKind.MUTABLE_BORROW: hover_messages.event_dot_mut_borrow,
    EventKind.STATIC_BORROW: hover_messages.event_dot_static_borrow,
    EventKind.STATIC_REACQUIRE: hover_messages.event_dot_static_reacquire,
    EventKind.MUTABLE_REACQUIRE: hover_messages.event_dot_mut_reacquire,
}

_DOT_MESSAGES: dict[EventKind, Callable[[str], str]] = {
    EventKind.OWNER_GO_OUT_OF_SCOPE: hover_messages.event_dot_owner_go_out_out_scope,
    EventKind.REF_GO_OUT_OF_SCOPE: hover_messages.event_dot_ref_go_out_out_scope,
    EventKind.INIT_REF_PARAM: hover_messages.event_dot_init_param,
}


@dataclass(frozen=True)
class Event:
    """Acquisition or release of a resource by one access point."""

    kind: EventKind
    from_: Optional[ResourceAccessPoint] = None
    to: Optional[ResourceAccessPoint] = None
    param: Optional[ResourceAccessPoint] = None

    def __post_init__(self) -> None:
        if (
            self.kind in (EventKind.MUTABLE_BORROW, EventKind.STATIC_BORROW)
            and self.from_ is None
        ):
            raise ValueError(f"{self.kind.value} requires a source")
        if self.kind is EventKind.INIT_REF_PARAM and self.param is None:
            raise ValueError("InitRefParam requires a parameter")

    def __str__(self) -> str:
        display = _EVENT_LABELS[self.kind]
        if self.from_ is not None:
            display = f"{display} from {self.from_.name}"
        if self.to is not None:
            display = f"{display} to {self.to.name}"
        return display

    def print_message_with_name(self, my_name: str) -> str:
        """Tooltip text for this event on the timeline of ``my_name``."""
        if self.kind in _DOT_MESSAGES:
            return _DOT_MESSAGES[self.kind](my_name)
        if self.kind is EventKind.MOVE:
            functor = (
                hover_messages.event_dot_move_to
                if self.to is not None
                else hover_messages.event_dot_move_to_caller
            )
            return _safe_message(functor, my_name, self.to)
        if self.kind in _TO_MESSAGES:
            return _safe_message(_TO_MESSAGES[self.kind], my_name, self.to)
        return _safe_message(_FROM_MESSAGES[self.kind], my_name, self.from_)


class StateKind(Enum):
    """Access an access point has to its resource right after a line."""

    OUT_OF_SCOPE = "OutOfScope"
    RESOURCE_MOVED = "ResourceMoved"
    FULL_PRIVILEGE = "FullPrivilege"
    PARTIAL_PRIVILEGE = "PartialPrivilege"
    REVOKED_PRIVILEGE = "RevokedPrivilege"
    INVALID = "Invalid"


@dataclass(frozen=True)
class State:
    """A state and the data that goes with its kind.

    ``move_to``/``move_at_line`` belong to RESOURCE_MOVED, ``borrow_count`` and
    ``borrow_to`` to PARTIAL_PRIVILEGE, ``to`` and ``lent_to`` to REVOKED_PRIVILEGE.
    """

    kind: StateKind
    move_to: Optional[ResourceAccessPoint] = None
    move_at_line: int = 0
    borrow_count: int = 0
    borrow_to: frozenset[ResourceAccessPoint] = field(default_factory=frozenset)
    to: Optional[ResourceAccessPoint] = None
    lent_to: Optional[ResourceAccessPoint] = None

    @classmethod
    def out_of_scope(cls) -> State:
        return cls(StateKind.OUT_OF_SCOPE)

    @classmethod
    def full_privilege(cls) -> State:
        return cls(StateKind.FULL_PRIVILEGE)

    @classmethod
    def invalid(cls) -> State:
        return cls(StateKind.INVALID)

    @classmethod
    def resource_moved(
        cls, move_to: Optional[ResourceAccessPoint], move_at_line: int
    ) -> State:
        return cls(StateKind.RESOURCE_MOVED, move_to=move_to, move_at_line=move_at_line)

    @classmethod
    def partial_privilege(
        cls, borrow_count: int, borrow_to: Iterable[ResourceAccessPoint]
    ) -> State:
        return cls(
            StateKind.PARTIAL_PRIVILEGE,
            borrow_count=borrow_count,
            borrow_to=frozenset(borrow_to),
        )

    @classmethod
    def revoked_privilege(
        cls,
        to: Optional[ResourceAccessPoint],
        lent_to: Optional[ResourceAccessPoint],
    ) -> State:
        return cls(StateKind.REVOKED_PRIVILEGE, to=to, lent_to=lent_to)

    def __str__(self) -> str:
        return self.kind.value

    def print_message_with_name(self, my_name: str) -> str:
        """Tooltip text for the state line of ``my_name``."""
        kind = self.kind
        if kind is StateKind.OUT_OF_SCOPE:
            return hover_messages.state_out_of_scope(my_name)
        if kind is StateKind.RESOURCE_MOVED:
            return _safe_message(hover_messages.state_resource_moved, my_name, self.move_to)
        if kind is StateKind.FULL_PRIVILEGE:
            return hover_messages.state_full_privilege(my_name)
        if kind is StateKind.PARTIAL_PRIVILEGE:
            return hover_messages.state_partial_privilege(my_name)
        if kind is StateKind.REVOKED_PRIVILEGE:
            return _safe_message(
                hover_messages.state_resource_revoked, my_name, self.lent_to
            )
        return hover_messages.state_invalid(my_name)