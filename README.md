# borrowviz

borrowviz turns a small annotated Rust example into a picture of ownership.

You write the example with two kinds of annotation:

* a header block that declares every variable, reference, struct and function
  that takes part in the example;
* `!{ ... }` comments on the code lines that say what happens to them.

borrowviz works out the state of each variable line by line and renders one
timeline per variable as SVG fragments. The timelines show when the variable
owns its resource, lends it out, borrows it, or goes out of scope. Each dot,
line and arrow carries a hover message that explains it.

## Annotating an example

```rust
/* --- BEGIN Variable Definitions ---
Owner x; Owner y
--- END Variable Definitions --- */
fn main() {
    let x = 5; // !{ Bind(x) }
    let y = x; // !{ Copy(x->y) }
} /* !{
    GoOutOfScope(x),
    GoOutOfScope(y)
} */
```

The first and last lines of the header must be exactly as shown.

### Declarations

Declarations are separated by semicolons. Each one has one of these forms:

| Declaration                    | Meaning                                     |
|--------------------------------|---------------------------------------------|
| `Owner <:mut> name`            | a value that owns its resource              |
| `MutRef <:mut> name`           | a `&mut T` reference                        |
| `StaticRef <:mut> name`        | a `&T` reference                            |
| `Function name()`              | a function that values flow into or out of  |
| `Struct <:mut> name{a, mut b}` | a struct instance and its members `name.a`, `name.b` |

Hashes are given out from 1 in order of declaration; struct members take the
hashes right after their struct.

### Events

An annotation holds one or more events, separated by commas. It may also span
several lines as a block comment; it then counts as the line it starts on.

The events are `Bind`, `Copy`, `Move`, `StaticBorrow`, `MutableBorrow`,
`StaticDie`, `MutableDie`, `PassByStaticReference`, `PassByMutableReference`,
`InitRefParam`, `InitOwnerParam` and `GoOutOfScope`.

Most events are written `Event(from->to)`. `Bind`, `InitRefParam`,
`InitOwnerParam` and `GoOutOfScope` take a single name, for example
`GoOutOfScope(x)`. The name `None` stands for "no variable", as in
`Move(None->some_string)`.

## Using the library

```python
from borrowviz.definitions import parse_variables
from borrowviz.events import add_events
from borrowviz.visualization import VisualizationData
from borrowviz.timeline_panel import render_timeline_panel

variables = parse_variables("Owner x; Owner y")

vd = VisualizationData()
add_events(vd, variables, [
    (2, "Bind(x)"),
    (3, "Copy(x->y)"),
    (4, "GoOutOfScope(x)"),
    (4, "GoOutOfScope(y)"),
])

# add_events only records the events; build the timelines from them.
for line_number, event in vd.preprocess_external_events:
    vd.append_processed_external_event(event, line_number)

timeline_svg, width = render_timeline_panel(vd)
```

To start from a file instead:

```python
from borrowviz.definitions import parse_vars_to_map
from borrowviz.annotations import extract_events

lines, header_end, variables = parse_vars_to_map("example/main.rs")
events = extract_events(lines, header_end)
```

### Modules

* `borrowviz.definitions` — `parse_vars_to_map` reads the header of an
  annotated file and returns the lines after it, the line the header ends on,
  and the declared access points; `parse_variables` parses declaration text.
* `borrowviz.annotations` — `extract_events` collects the `!{ ... }` events as
  `(line number, event text)` pairs.
* `borrowviz.events` — `add_events` turns event texts into `ExternalEvent`s on a
  `VisualizationData`.
* `borrowviz.data` — access points (`Owner`, `MutRef`, `StaticRef`,
  `Function`, `Struct`), `ExternalEvent`, `Event` and `State`, with their hover
  messages.
* `borrowviz.visualization` — `VisualizationData` stores the timelines;
  `get_states` reports `(start line, end line, state)` spans for a variable.
* `borrowviz.timeline_layout`, `borrowviz.timeline_lines`,
  `borrowviz.timeline_panel` — column layout, labels, dots, state lines,
  reference lines, arrows and struct boxes; `render_timeline_panel` assembles
  them and returns the SVG fragment and the panel width.
* `borrowviz.code_panel` — `render_code_panel` renders the numbered source
  listing and returns the SVG group, the next line number, and the length of
  the longest plain source line.
* `borrowviz.hover_messages` — every tooltip text used in the diagrams.
* `borrowviz.line_styles` — enums naming the kinds of lines drawn.
* `borrowviz.utils` — small file helpers.

Problems in an annotated example raise `borrowviz.definitions.ParseError` or
`borrowviz.data.VisualizationError`: a bad declaration, an unknown event, an
undeclared variable, an unclosed annotation, or an impossible sequence of
events.

## What borrowviz does not do

* There is no command-line program; everything is used from Python.
* It produces SVG fragments only. It does not wrap them in a complete SVG
  document, supply a stylesheet or templates, or write the final image files.
* It does not shift line numbers to make room when several arrows share a
  source line; pass the line numbers you want to `append_processed_external_event`.
* It does not read Rust source to write the declaration header for you.