import pytest

from borrowviz import hover_messages
from borrowviz.data import (
    Event,
    EventKind,
    ExternalEvent,
    ExternalEventKind,
    Function,
    MutRef,
    Owner,
    State,
    StateKind,
    StaticRef,
    Struct,
    resource_access_point_extract,
)

X = Owner("x", 1)
Y = Owner("y", 2, is_mut=True)
R = MutRef("r", 3)
S = StaticRef("s", 4)
F = Function("takes_ownership()", 5)
PARENT = Struct("rect", 6, owner=6, is_mut=True)
MEMBER = Struct("rect.w", 7, owner=6, is_member=True)


@pytest.mark.parametrize(
    "rap, is_ref, is_mutref, is_group, is_struct",
    [
        (X, False, False, False, False),
        (R, True, True, False, False),
        (S, True, False, False, False),
        (F, False, False, False, False),
        (PARENT, False, False, True, True),
        (MEMBER, False, False, True, False),
    ],
)
def test_kind_predicates(rap, is_ref, is_mutref, is_group, is_struct):
    assert rap.is_ref() is is_ref
    assert rap.is_mutref() is is_mutref
    assert rap.is_struct_group() is is_group
    assert rap.is_struct() is is_struct


def test_get_owner_and_membership():
    assert MEMBER.get_owner() == PARENT.hash
    assert PARENT.get_owner() == PARENT.hash
    assert X.get_owner() == X.hash
    assert MEMBER.is_member is True
    assert X.is_member is False


def test_mutability():
    assert Y.is_mut is True
    assert X.is_mut is False
    assert F.is_mut is False


def test_variants_hash_and_compare_by_kind():
    assert Owner("a", 1) == Owner("a", 1)
    assert len({Owner("a", 1), MutRef("a", 1), Owner("a", 1)}) == 2


def test_extract_two_party_event():
    event = ExternalEvent(ExternalEventKind.MOVE, from_=X, to=F)
    assert resource_access_point_extract(event) == (X, F)


def test_extract_single_party_event():
    event = ExternalEvent(ExternalEventKind.GO_OUT_OF_SCOPE, ro=X)
    assert resource_access_point_extract(event) == (None, None)


def test_single_party_event_requires_rap():
    with pytest.raises(ValueError):
        ExternalEvent(ExternalEventKind.INIT_REF_PARAM)


def test_external_events_compare_by_value():
    a = ExternalEvent(ExternalEventKind.COPY, from_=X, to=Y)
    b = ExternalEvent(ExternalEventKind.COPY, from_=X, to=Y)
    assert [a].index(b) == 0


def test_event_display():
    assert str(Event(EventKind.MOVE, to=F)) == "Moving resource to takes_ownership()"
    assert str(Event(EventKind.MUTABLE_BORROW, from_=X)) == "Fully borrows resource from x"
    assert str(Event(EventKind.OWNER_GO_OUT_OF_SCOPE)) == (
        "Goes out of Scope as an owner of resource"
    )


def test_borrow_event_requires_source():
    with pytest.raises(ValueError):
        Event(EventKind.STATIC_BORROW)


def test_init_param_event_requires_param():
    with pytest.raises(ValueError):
        Event(EventKind.INIT_REF_PARAM)


def test_move_message_depends_on_target():
    assert Event(EventKind.MOVE, to=F).print_message_with_name("s") == (
        hover_messages.event_dot_move_to("s", F.name)
    )
    assert Event(EventKind.MOVE).print_message_with_name("s") == (
        hover_messages.event_dot_move_to_caller("s", "another value")
    )


def test_copy_message_names_source_plainly():
    message = Event(EventKind.COPY, from_=X).print_message_with_name("y")
    assert message == "y is initialized by copy from x"


def test_dot_messages_without_arrow():
    assert Event(EventKind.REF_GO_OUT_OF_SCOPE).print_message_with_name("r") == (
        hover_messages.event_dot_ref_go_out_out_scope("r")
    )
    assert Event(EventKind.INIT_REF_PARAM, param=R).print_message_with_name("r") == (
        hover_messages.event_dot_init_param("r")
    )


def test_borrow_and_reacquire_messages():
    assert Event(EventKind.STATIC_BORROW, from_=X).print_message_with_name("s") == (
        hover_messages.event_dot_static_borrow("s", "x")
    )
    assert Event(EventKind.MUTABLE_REACQUIRE).print_message_with_name("x") == (
        hover_messages.event_dot_mut_reacquire("x", "another value")
    )


@pytest.mark.parametrize(
    "state, text",
    [
        (State.out_of_scope(), "OutOfScope"),
        (State.resource_moved(None, 3), "ResourceMoved"),
        (State.full_privilege(), "FullPrivilege"),
        (State.partial_privilege(1, [S]), "PartialPrivilege"),
        (State.revoked_privilege(None, R), "RevokedPrivilege"),
        (State.invalid(), "Invalid"),
    ],
)
def test_state_display(state, text):
    assert str(state) == text


def test_partial_privilege_keeps_borrowers():
    state = State.partial_privilege(2, [S, R, S])
    assert state.kind is StateKind.PARTIAL_PRIVILEGE
    assert state.borrow_count == 2
    assert state.borrow_to == frozenset({S, R})


def test_resource_moved_fields():
    state = State.resource_moved(F, 7)
    assert (state.move_to, state.move_at_line) == (F, 7)


def test_state_messages():
    assert State.full_privilege().print_message_with_name("x") == (
        hover_messages.state_full_privilege("x")
    )
    assert State.resource_moved(F, 2).print_message_with_name("x") == (
        hover_messages.state_resource_moved("x", F.name)
    )
    assert State.revoked_privilege(None, None).print_message_with_name("x") == (
        hover_messages.state_resource_revoked("x", "another value")
    )
    assert State.invalid().print_message_with_name("x") == (
        hover_messages.state_invalid("x")
    )