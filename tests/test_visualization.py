import pytest

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
    VisualizationError,
)
from borrowviz.visualization import StructsInfo, Timeline, VisualizationData


def _ev(kind, from_=None, to=None, ro=None):
    return ExternalEvent(kind, from_=from_, to=to, ro=ro)


@pytest.fixture
def copy_example():
    x = Owner("x", 1)
    y = Owner("y", 2)
    vd = VisualizationData()
    vd.append_processed_external_event(_ev(ExternalEventKind.BIND, to=x), 2)
    vd.append_processed_external_event(_ev(ExternalEventKind.COPY, from_=x, to=y), 3)
    vd.append_processed_external_event(_ev(ExternalEventKind.GO_OUT_OF_SCOPE, ro=x), 4)
    vd.append_processed_external_event(_ev(ExternalEventKind.GO_OUT_OF_SCOPE, ro=y), 4)
    return vd


def test_copy_example_states(copy_example):
    states = copy_example.get_states(1)
    assert [(s, e, st.kind) for s, e, st in states] == [
        (1, 2, StateKind.OUT_OF_SCOPE),
        (2, 3, StateKind.FULL_PRIVILEGE),
        (3, 4, StateKind.FULL_PRIVILEGE),
        (4, 4, StateKind.OUT_OF_SCOPE),
    ]


def test_copy_example_history(copy_example):
    kinds = [e.kind for _, e in copy_example.timelines[2].history]
    assert kinds == [EventKind.COPY, EventKind.OWNER_GO_OUT_OF_SCOPE]
    assert len(copy_example.external_events) == 4


def test_names_and_missing_hash(copy_example):
    assert copy_example.get_name_from_hash(2) == "y"
    assert copy_example.get_name_from_hash(99) is None
    assert copy_example.get_state(99, 1) is None
    assert copy_example.get_state(1, 1).kind is StateKind.OUT_OF_SCOPE


def test_timelines_sorted_by_hash():
    vd = VisualizationData()
    for h in (5, 2, 9):
        vd.append_event(Owner(f"v{h}", h), Event(EventKind.OWNER_GO_OUT_OF_SCOPE), 1)
    assert list(vd.timelines) == [2, 5, 9]
    assert isinstance(vd.timelines[5], Timeline)


def test_append_external_event_line_map():
    a, b = Owner("a", 1), Owner("b", 2)
    f = Function("f", 3)
    vd = VisualizationData()
    e1 = _ev(ExternalEventKind.MOVE, from_=a, to=b)
    e2 = _ev(ExternalEventKind.MOVE, from_=a, to=f)
    e3 = _ev(ExternalEventKind.GO_OUT_OF_SCOPE, ro=a)
    vd.append_external_event(e1, 4)
    vd.append_external_event(e2, 4)
    vd.append_external_event(e3, 2)
    vd.append_external_event(e1, 1)
    assert vd.event_line_map == {1: [e1], 4: [e1]}
    assert list(vd.event_line_map) == [1, 4]
    assert vd.preprocess_external_events == [(4, e1), (4, e2), (2, e3), (1, e1)]


def test_move_makes_resource_moved():
    a, b = Owner("a", 1), Owner("b", 2)
    vd = VisualizationData()
    vd.append_processed_external_event(_ev(ExternalEventKind.BIND, to=a), 1)
    vd.append_processed_external_event(_ev(ExternalEventKind.MOVE, from_=a, to=b), 2)
    final = vd.get_states(1)[-1][2]
    assert final.kind is StateKind.RESOURCE_MOVED
    assert final.move_to == b
    assert final.move_at_line == 2


def test_immutable_reacquire_raises():
    a = Owner("a", 1)
    vd = VisualizationData()
    vd.append_event(a, Event(EventKind.ACQUIRE), 1)
    moved = State.resource_moved(None, 1)
    with pytest.raises(VisualizationError):
        vd.calc_state(moved, Event(EventKind.ACQUIRE), 2, 1)


def test_mutable_reacquire_after_move():
    a = Owner("a", 1, is_mut=True)
    vd = VisualizationData()
    vd.append_event(a, Event(EventKind.ACQUIRE), 1)
    state = vd.calc_state(State.resource_moved(None, 1), Event(EventKind.ACQUIRE), 2, 1)
    assert state.kind is StateKind.FULL_PRIVILEGE


def test_static_lend_and_reacquire_counts():
    a = Owner("a", 1)
    r1, r2 = StaticRef("r1", 2), StaticRef("r2", 3)
    vd = VisualizationData()
    vd.append_event(a, Event(EventKind.ACQUIRE), 1)
    s = vd.calc_state(State.full_privilege(), Event(EventKind.STATIC_LEND, to=r1), 2, 1)
    s = vd.calc_state(s, Event(EventKind.STATIC_LEND, to=r2), 3, 1)
    assert s.kind is StateKind.PARTIAL_PRIVILEGE
    assert s.borrow_count == 2
    assert s.borrow_to == frozenset({r1, r2})
    s = vd.calc_state(s, Event(EventKind.STATIC_REACQUIRE, from_=r1), 4, 1)
    assert s.borrow_count == 1
    assert s.borrow_to == frozenset({r2})
    s = vd.calc_state(s, Event(EventKind.STATIC_REACQUIRE, from_=r2), 5, 1)
    assert s.kind is StateKind.FULL_PRIVILEGE


def test_reacquire_from_unknown_raises():
    a = Owner("a", 1)
    r1, r2, r3 = StaticRef("r1", 2), StaticRef("r2", 3), StaticRef("r3", 4)
    vd = VisualizationData()
    vd.append_event(a, Event(EventKind.ACQUIRE), 1)
    s = State.partial_privilege(2, [r1, r2])
    with pytest.raises(VisualizationError):
        vd.calc_state(s, Event(EventKind.STATIC_REACQUIRE, from_=r3), 2, 1)


def test_mutable_lend_requires_mutability():
    imm = Owner("a", 1)
    mut = Owner("b", 2, is_mut=True)
    r = MutRef("r", 3)
    vd = VisualizationData()
    vd.append_event(imm, Event(EventKind.ACQUIRE), 1)
    vd.append_event(mut, Event(EventKind.ACQUIRE), 1)
    lend = Event(EventKind.MUTABLE_LEND, to=r)
    assert vd.calc_state(State.full_privilege(), lend, 2, 1).kind is StateKind.INVALID
    revoked = vd.calc_state(State.full_privilege(), lend, 2, 2)
    assert revoked.kind is StateKind.REVOKED_PRIVILEGE
    assert revoked.lent_to == r
    back = vd.calc_state(revoked, Event(EventKind.MUTABLE_REACQUIRE, from_=r), 3, 2)
    assert back.kind is StateKind.FULL_PRIVILEGE


def test_borrow_from_function_is_invalid():
    r = StaticRef("r", 1)
    vd = VisualizationData()
    vd.append_event(r, Event(EventKind.REF_GO_OUT_OF_SCOPE), 1)
    ev = Event(EventKind.STATIC_BORROW, from_=Function("f", 2))
    assert vd.calc_state(State.out_of_scope(), ev, 1, 1).kind is StateKind.INVALID


def test_duplicate_keeps_state():
    vd = VisualizationData()
    vd.append_event(Owner("a", 1), Event(EventKind.ACQUIRE), 1)
    prev = State.partial_privilege(1, [StaticRef("r", 2)])
    assert vd.calc_state(prev, Event(EventKind.DUPLICATE), 2, 1) == prev


def test_init_ref_param_states():
    vd = VisualizationData()
    sr = StaticRef("s", 1)
    vd.append_processed_external_event(_ev(ExternalEventKind.INIT_REF_PARAM, ro=sr), 1)
    state = vd.get_states(1)[-1][2]
    assert state.kind is StateKind.PARTIAL_PRIVILEGE
    assert state.borrow_to == frozenset({sr})
    with pytest.raises(VisualizationError):
        vd.calc_state(
            State.out_of_scope(),
            Event(EventKind.INIT_REF_PARAM, param=Function("f", 2)),
            1,
            1,
        )


def test_pass_by_static_reference_events():
    s = Owner("s", 1)
    f = Function("println!", 2)
    vd = VisualizationData()
    vd.append_processed_external_event(_ev(ExternalEventKind.BIND, to=s), 1)
    vd.append_processed_external_event(
        _ev(ExternalEventKind.PASS_BY_STATIC_REFERENCE, from_=s, to=f), 2
    )
    assert [e.kind for _, e in vd.timelines[1].history] == [
        EventKind.ACQUIRE,
        EventKind.STATIC_LEND,
        EventKind.STATIC_REACQUIRE,
    ]
    assert [e.kind for _, e in vd.timelines[2].history] == [
        EventKind.STATIC_BORROW,
        EventKind.STATIC_DIE,
    ]
    assert vd.get_states(1)[-1][2].kind is StateKind.FULL_PRIVILEGE


def test_pass_by_reference_without_source_raises():
    vd = VisualizationData()
    with pytest.raises(VisualizationError):
        vd.append_processed_external_event(
            _ev(ExternalEventKind.PASS_BY_MUTABLE_REFERENCE, to=Function("f", 1)), 1
        )


def test_function_out_of_scope_raises():
    vd = VisualizationData()
    with pytest.raises(VisualizationError):
        vd.append_processed_external_event(
            _ev(ExternalEventKind.GO_OUT_OF_SCOPE, ro=Function("f", 1)), 1
        )


def test_struct_and_ref_go_out_of_scope_kinds():
    vd = VisualizationData()
    st = Struct("r", 1, owner=1)
    ref = MutRef("m", 2)
    vd.append_processed_external_event(_ev(ExternalEventKind.GO_OUT_OF_SCOPE, ro=st), 3)
    vd.append_processed_external_event(_ev(ExternalEventKind.GO_OUT_OF_SCOPE, ro=ref), 3)
    assert vd.timelines[1].history[0][1].kind is EventKind.OWNER_GO_OUT_OF_SCOPE
    assert vd.timelines[2].history[0][1].kind is EventKind.REF_GO_OUT_OF_SCOPE
    assert vd.is_mutref(2) and not vd.is_mutref(1)


def test_structs_info_holds_boxes():
    info = StructsInfo()
    info.structs.append((1, 70, 140))
    assert info.structs == [(1, 70, 140)]