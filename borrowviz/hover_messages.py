"""Tooltip texts for event dots, arrows and state lines."""

_SPAN_BEGIN = (
    "&lt;span style=&quot;font-family: 'Source Code Pro',\n"
    "        Consolas, 'Ubuntu Mono', Menlo, 'DejaVu Sans Mono',\n"
    "        monospace, monospace !important;&quot;&gt;"
)
_SPAN_END = "&lt;/span&gt;"


def fmt_style(plain: str) -> str:
    """Wrap a name in an escaped monospace span."""
    return _SPAN_BEGIN + plain + _SPAN_END


# Event dots that connect to no arrow.

def event_dot_ref_go_out_out_scope(my_name: str) -> str:
    return f"{fmt_style(my_name)} goes out of scope"


def event_dot_owner_go_out_out_scope(my_name: str) -> str:
    # The resource is not said to be dropped: it may have been moved earlier.
    return f"{fmt_style(my_name)} goes out of scope"


def event_dot_init_param(my_name: str) -> str:
    return f"{fmt_style(my_name)} is initialized as the function argument"


# Event dots that are the source of an arrow.

def event_dot_copy_to(my_name: str, target_name: str) -> str:
    return f"{fmt_style(my_name)}'s resource is copied"


def event_dot_move_to(my_name: str, target_name: str) -> str:
    return f"{fmt_style(my_name)}'s resource is moved"


def event_dot_move_to_caller(my_name: str, target_name: str) -> str:
    return f"{fmt_style(my_name)}'s resource is moved to the caller"


def event_dot_static_lend(my_name: str, target_name: str) -> str:
    return f"{fmt_style(my_name)}'s resource is immutably borrowed"


def event_dot_mut_lend(my_name: str, target_name: str) -> str:
    return f"{fmt_style(my_name)}'s resource is mutably borrowed"


def event_dot_static_return(my_name: str, target_name: str) -> str:
    return f"{fmt_style(my_name)}'s mutable borrow ends"


def event_dot_mut_return(my_name: str, target_name: str) -> str:
    return f"{fmt_style(my_name)}'s immutable borrow ends"


# Event dots that are the destination of an arrow.

def event_dot_acquire(my_name: str, target_name: str) -> str:
    return f"{fmt_style(my_name)} acquires ownership of a resource"


def event_dot_copy_from(my_name: str, target_name: str) -> str:
    return f"{my_name} is initialized by copy from {target_name}"


def event_dot_mut_borrow(my_name: str, target_name: str) -> str:
    return f"{fmt_style(my_name)} mutably borrows a resource"


def event_dot_static_borrow(my_name: str, target_name: str) -> str:
    return f"{fmt_style(my_name)} immutably borrows a resource"


def event_dot_static_reacquire(my_name: str, target_name: str) -> str:
    return f"{fmt_style(my_name)}'s resource is no longer immutably borrowed"


def event_dot_mut_reacquire(my_name: str, target_name: str) -> str:
    return f"{fmt_style(my_name)}'s resource is no longer mutably borrowed"


# Arrows.

def arrow_move_val_to_val(from_name: str, to_name: str) -> str:
    return f"{fmt_style(from_name)}'s resource is moved to {fmt_style(to_name)}"


def arrow_copy_val_to_val(from_name: str, to_name: str) -> str:
    return f"{fmt_style(from_name)}'s resource is copied to {fmt_style(to_name)}"


def arrow_move_val_to_func(from_name: str, to_name: str) -> str:
    return (
        f"{fmt_style(from_name)}'s resource is moved to function "
        f"{fmt_style(to_name)}"
    )


def arrow_copy_val_to_func(from_name: str, to_name: str) -> str:
    return (
        f"{fmt_style(from_name)}'s resource is copied to function "
        f"{fmt_style(to_name)}"
    )


def arrow_move_func_to_val(from_name: str, to_name: str) -> str:
    return (
        f"Function {fmt_style(from_name)}'s resource is moved to "
        f"{fmt_style(to_name)}"
    )


def arrow_static_lend_val_to_val(from_name: str, to_name: str) -> str:
    return (
        f"{fmt_style(from_name)}'s resource is immutably borrowed by "
        f"{fmt_style(to_name)}"
    )


def arrow_static_lend_val_to_func(from_name: str, to_name: str) -> str:
    return (
        f"{fmt_style(from_name)}'s resource is immutably borrowed by function "
        f"{fmt_style(to_name)}"
    )


def arrow_mut_lend_val_to_val(from_name: str, to_name: str) -> str:
    return (
        f"{fmt_style(from_name)}'s resource is mutably borrowed by "
        f"{fmt_style(to_name)}"
    )


def arrow_mut_lend_val_to_func(from_name: str, to_name: str) -> str:
    return (
        f"{fmt_style(from_name)}'s resource is mutably borrowed by function "
        f"{fmt_style(to_name)}"
    )


def arrow_static_return(from_name: str, to_name: str) -> str:
    return (
        f"{fmt_style(from_name)}'s immutable borrow of "
        f"{fmt_style(to_name)}'s resource ends"
    )


def arrow_mut_return(from_name: str, to_name: str) -> str:
    return (
        f"{fmt_style(from_name)}'s mutable borrow of "
        f"{fmt_style(to_name)}'s resource ends"
    )


# State lines.

def state_out_of_scope(my_name: str) -> str:
    return f"{fmt_style(my_name)} is out of scope"


def state_resource_moved(my_name: str, to_name: str) -> str:
    styled = fmt_style(my_name)
    return f"{styled}'s resource was moved, so {styled} no longer has ownership"


def state_resource_revoked(my_name: str, to_name: str) -> str:
    return (
        f"{fmt_style(my_name)}'s resource is mutably borrowed, "
        "so it cannot access the resource"
    )


def state_full_privilege(my_name: str) -> str:
    return f"{fmt_style(my_name)} is the owner of the resource"


def state_partial_privilege(my_name: str) -> str:
    return f"{fmt_style(my_name)}'s resource is being shared by one or more variables"


def state_invalid(my_name: str) -> str:
    return f"something is wrong with the timeline of {fmt_style(my_name)}"


def structure(my_name: str) -> str:
    return f"the components in the box belong to struct {fmt_style(my_name)}"