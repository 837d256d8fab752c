"""Outputs (monitors): lookup, properties and placement."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Sequence

from .client import CallbackVec, request, send_msg
from .messages import Message, OutputArgs, Request

if TYPE_CHECKING:
    from .tag import TagHandle

__all__ = [
    "AlignmentHorizontal",
    "AlignmentVertical",
    "OutputHandle",
    "OutputProperties",
    "connect_for_all",
    "get_all",
    "get_by_name",
    "get_focused",
]


class AlignmentHorizontal(enum.Enum):
    """Horizontal alignment of one output against another."""

    LEFT = "Left"
    CENTER = "Center"
    RIGHT = "Right"


class AlignmentVertical(enum.Enum):
    """Vertical alignment of one output against another."""

    TOP = "Top"
    CENTER = "Center"
    BOTTOM = "Bottom"


def _half(value: int) -> int:
    """Halve an integer, rounding toward zero."""
    return -((-value) // 2) if value < 0 else value // 2


def _response_fields(req: Request, kind: str) -> dict[str, Any]:
    response = request(req)
    if response.kind != kind:
        raise RuntimeError(f"expected a {kind} response, got {response.kind}")
    return dict(response.fields)


@dataclass
class OutputProperties:
    """Properties of an output; ``None`` where the compositor had no value."""

    make: str | None = None
    model: str | None = None
    loc: tuple[int, int] | None = None
    res: tuple[int, int] | None = None
    refresh_rate: int | None = None
    physical_size: tuple[int, int] | None = None
    focused: bool | None = None
    tags: list[TagHandle] = field(default_factory=list)


@dataclass(frozen=True)
class OutputHandle:
    """A handle to an output, identified by its connector name such as ``HDMI-1``.

    An empty name stands for an invalid output.
    """

    name: str

    def properties(self) -> OutputProperties:
        """Ask the compositor for this output's properties."""
        from .tag import TagHandle

        fields = _response_fields(
            Request("GetOutputProps", {"output_name": self.name}), "OutputProps"
        )
        return OutputProperties(
            make=fields.get("make"),
            model=fields.get("model"),
            loc=fields.get("loc"),
            res=fields.get("res"),
            refresh_rate=fields.get("refresh_rate"),
            physical_size=fields.get("physical_size"),
            focused=fields.get("focused"),
            tags=[TagHandle(tag_id) for tag_id in fields.get("tag_ids") or []],
        )

    def add_tags(self, names: Sequence[str]) -> None:
        """Add tags with the given names to this output."""
        from .tag import add

        add(self, names)

    def set_loc(self, x: int | None = None, y: int | None = None) -> None:
        """Place this output in the global space; ``None`` keeps that coordinate."""
        send_msg(Message("SetOutputLocation", {"output_name": self.name, "x": x, "y": y}))

    def set_loc_right_of(self, other: OutputHandle, alignment: AlignmentVertical) -> None:
        """Place this output to the right of ``other``."""
        self._set_loc_horizontal(other, right=True, alignment=alignment)

    def set_loc_left_of(self, other: OutputHandle, alignment: AlignmentVertical) -> None:
        """Place this output to the left of ``other``."""
        self._set_loc_horizontal(other, right=False, alignment=alignment)

    def set_loc_top_of(self, other: OutputHandle, alignment: AlignmentHorizontal) -> None:
        """Place this output above ``other``."""
        self._set_loc_vertical(other, bottom=False, alignment=alignment)

    def set_loc_bottom_of(self, other: OutputHandle, alignment: AlignmentHorizontal) -> None:
        """Place this output below ``other``."""
        self._set_loc_vertical(other, bottom=True, alignment=alignment)

    def _geometry(self, other: OutputHandle):
        mine = self.properties()
        theirs = other.properties()
        if None in (mine.loc, mine.res, theirs.loc, theirs.res):
            return None
        return mine.res, theirs.loc, theirs.res

    def _set_loc_horizontal(
        self, other: OutputHandle, *, right: bool, alignment: AlignmentVertical
    ) -> None:
        geometry = self._geometry(other)
        if geometry is None:
            return
        (self_w, self_h), (other_x, other_y), (_other_w, other_h) = geometry

        x = other_x + self_w if right else other_x - self_w
        if alignment is AlignmentVertical.TOP:
            y = other_y
        elif alignment is AlignmentVertical.CENTER:
            y = other_y + _half(other_h - self_h)
        else:
            y = other_y + (other_h - self_h)
        self.set_loc(x, y)

    def _set_loc_vertical(
        self, other: OutputHandle, *, bottom: bool, alignment: AlignmentHorizontal
    ) -> None:
        geometry = self._geometry(other)
        if geometry is None:
            return
        (self_w, self_h), (other_x, other_y), (other_w, other_h) = geometry

        y = other_y + other_h if bottom else other_y - self_h
        if alignment is AlignmentHorizontal.LEFT:
            x = other_x
        elif alignment is AlignmentHorizontal.CENTER:
            x = other_x + _half(other_w - self_w)
        else:
            x = other_x + (other_w - self_w)
        self.set_loc(x, y)


def _output_names() -> list[str]:
    return list(_response_fields(Request("GetOutputs"), "Outputs")["output_names"])


def get_by_name(name: str) -> OutputHandle | None:
    """The output plugged into the connector ``name``, if connected."""
    return next(
        (OutputHandle(found) for found in _output_names() if found == name), None
    )


def get_all() -> list[OutputHandle]:
    """Handles to all connected outputs."""
    return [OutputHandle(name) for name in _output_names()]


def get_focused() -> OutputHandle | None:
    """The focused output, the one the pointer is on."""
    return next(
        (output for output in get_all() if output.properties().focused is True), None
    )


def connect_for_all(
    func: Callable[[OutputHandle, CallbackVec], None], callbacks: CallbackVec
) -> None:
    """Run ``func`` for every connected output and every output connected later.

    It runs once per connector, and only after the whole configuration has
    been processed.
    """

    def run(args: object, cbs: CallbackVec) -> None:
        if isinstance(args, OutputArgs):
            func(OutputHandle(args.output_name), cbs)

    msg = Message("ConnectForAllOutputs", {"callback_id": len(callbacks)})
    callbacks.add(run)
    send_msg(msg)