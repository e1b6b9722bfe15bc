import pytest

from borrowviz.annotations import extract_events
from borrowviz.data import ExternalEvent, ExternalEventKind, Function, Owner
from borrowviz.definitions import ParseError, parse_variables, parse_vars_to_map
from borrowviz.events import add_events
from borrowviz.visualization import VisualizationData

K = ExternalEventKind

COPY_EXAMPLE = """/* --- BEGIN Variable Definitions ---
Owner x; Owner y
--- END Variable Definitions --- */
fn main() {
    let x = 5; // !{ Bind(x) }
    let y = x; // !{ Copy(x->y) }
} /* !{
    GoOutOfScope(x),
    GoOutOfScope(y)
} */
"""


@pytest.fixture
def variables():
    return parse_variables("Owner x; Owner y; Function takes()")


def test_bind_and_copy(variables):
    vd = VisualizationData()
    add_events(vd, variables, [(1, "Bind(x)"), (2, "Copy(x->y)")])
    x, y = variables["x"], variables["y"]
    assert vd.preprocess_external_events == [
        (1, ExternalEvent(K.BIND, None, x)),
        (2, ExternalEvent(K.COPY, x, y)),
    ]
    assert vd.event_line_map == {2: [ExternalEvent(K.COPY, x, y)]}


def test_init_owner_param_is_move_from_none(variables):
    vd = VisualizationData()
    add_events(vd, variables, [(5, "InitOwnerParam(x)")])
    assert vd.preprocess_external_events == [
        (5, ExternalEvent(K.MOVE, None, variables["x"]))
    ]


def test_go_out_of_scope_and_function_target(variables):
    vd = VisualizationData()
    add_events(
        vd,
        variables,
        [(3, "PassByStaticReference(x->takes())"), (4, "GoOutOfScope(x)")],
    )
    assert isinstance(vd.preprocess_external_events[0][1].to, Function)
    assert vd.preprocess_external_events[1][1] == ExternalEvent(
        K.GO_OUT_OF_SCOPE, ro=variables["x"]
    )
    assert vd.event_line_map == {}


@pytest.mark.parametrize(
    "text",
    [
        "Teleport(x)",
        "Bind x",
        "Copy(x)",
        "GoOutOfScope(None)",
        "InitRefParam(None)",
        "Move(x->nope)",
        "Bind()",
    ],
)
def test_bad_events_raise(variables, text):
    with pytest.raises(ParseError):
        add_events(VisualizationData(), variables, [(1, text)])


def test_unknown_event_message_names_it(variables):
    with pytest.raises(ParseError, match="Teleport is not a valid event"):
        add_events(VisualizationData(), variables, [(1, "Teleport(x)")])


def test_full_copy_example(tmp_path):
    path = tmp_path / "main.rs"
    path.write_text(COPY_EXAMPLE, encoding="utf-8")
    lines, main_line, var_map = parse_vars_to_map(path)
    vd = VisualizationData()
    add_events(vd, var_map, extract_events(lines, main_line))
    kinds = [event.kind for _, event in vd.preprocess_external_events]
    assert kinds == [K.BIND, K.COPY, K.GO_OUT_OF_SCOPE, K.GO_OUT_OF_SCOPE]
    assert [line for line, _ in vd.preprocess_external_events] == [2, 3, 4, 4]
    assert vd.preprocess_external_events[1][1] == ExternalEvent(
        K.COPY, Owner("x", 1), Owner("y", 2)
    )