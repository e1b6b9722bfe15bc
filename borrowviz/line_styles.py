"""Line styles used when drawing timelines."""

from enum import Enum, auto


class LineStyle(Enum):
    """Kind of vertical line drawn for a column."""

    OWNER_LINE = auto()
    REF_VALUE_LINE = auto()
    REF_DATA_LINE = auto()


class OwnerLine(Enum):
    """What an owner can currently do with its resource."""

    SOLID = auto()  # assign, write and read
    HOLLOW = auto()  # read only
    DOTTED = auto()  # temporarily nothing: mutably borrowed away
    EMPTY = auto()  # nothing, ever again: moved


class RefValueLine(Enum):
    """Whether a reference can be pointed elsewhere right after a line."""

    REASSIGNABLE = auto()
    NOT_REASSIGNABLE = auto()


class RefDataLine(Enum):
    """What a reference can do with the data it points to."""

    SOLID = auto()
    HOLLOW = auto()
    DOTTED = auto()
    EMPTY = auto()