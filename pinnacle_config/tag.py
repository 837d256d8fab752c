"""Tags: lookup, activation and layouts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from . import output as _output
from .client import request, send_msg
from .messages import Layout, Message, Request
from .output import OutputHandle

__all__ = [
    "Layout",
    "LayoutCycler",
    "TagHandle",
    "TagProperties",
    "add",
    "get",
    "get_all",
    "layout_cycler",
]


@dataclass
class TagProperties:
    """Properties of a tag; ``None`` where the compositor had no value."""

    active: bool | None = None
    name: str | None = None
    output: OutputHandle | None = None


@dataclass(frozen=True)
class TagHandle:
    """A handle to a tag. A ``tag_id`` of ``None`` is an invalid tag."""

    tag_id: int | None

    def properties(self) -> TagProperties:
        """Ask the compositor for this tag's properties."""
        response = request(Request("GetTagProps", {"tag_id": self.tag_id}))
        if response.kind != "TagProps":
            raise RuntimeError(f"expected a TagProps response, got {response.kind}")
        output_name = response.fields.get("output_name")
        return TagProperties(
            active=response.fields.get("active"),
            name=response.fields.get("name"),
            output=None if output_name is None else OutputHandle(output_name),
        )

    def toggle(self) -> None:
        """Toggle this tag between active and inactive."""
        send_msg(Message("ToggleTag", {"tag_id": self.tag_id}))

    def switch_to(self) -> None:
        """Activate this tag and deactivate all others on its output."""
        send_msg(Message("SwitchToTag", {"tag_id": self.tag_id}))

    def set_layout(self, layout: Layout) -> None:
        """Set this tag's layout."""
        send_msg(Message("SetLayout", {"tag_id": self.tag_id, "layout": layout}))


def get_all() -> list[TagHandle]:
    """Handles to all tags on all outputs."""
    response = request(Request("GetTags"))
    if response.kind != "Tags":
        raise RuntimeError(f"expected a Tags response, got {response.kind}")
    return [TagHandle(tag_id) for tag_id in response.fields["tag_ids"]]


def get(name: str, output: OutputHandle | None = None) -> TagHandle | None:
    """The first tag called ``name`` on ``output``, or on the focused output."""
    focused: list[OutputHandle | None] = []
    for tag in get_all():
        props = tag.properties()
        if props.output is None:
            continue
        if output is not None:
            wanted = output
        else:
            if not focused:
                focused.append(_output.get_focused())
            wanted = focused[0]
        if props.output == wanted and props.name == name:
            return tag
    return None


def add(output: OutputHandle, names: Sequence[str]) -> None:
    """Add tags called ``names`` to ``output``."""
    send_msg(Message("AddTags", {"output_name": output.name, "tag_names": list(names)}))


class LayoutCycler:
    """Cycles the layout of the active tag, keeping a position per tag."""

    def __init__(self, layouts: Sequence[Layout]) -> None:
        self.layouts = list(layouts)
        self._indices: dict[int | None, int] = {}

    def _active_tag(self, output: OutputHandle | None) -> TagHandle | None:
        if output is None:
            output = _output.get_focused()
        if output is None:
            return None
        return next(
            (tag for tag in output.properties().tags if tag.properties().active is True),
            None,
        )

    def next(self, output: OutputHandle | None = None) -> None:
        """Move the active tag on ``output`` (default: focused) to the next layout."""
        tag = self._active_tag(output)
        if tag is None:
            return
        index = self._indices.get(tag.tag_id, 0)
        index = 0 if index + 1 >= len(self.layouts) else index + 1
        self._indices[tag.tag_id] = index
        tag.set_layout(self.layouts[index])

    def prev(self, output: OutputHandle | None = None) -> None:
        """Move the active tag on ``output`` (default: focused) to the previous layout."""
        tag = self._active_tag(output)
        if tag is None:
            return
        index = self._indices.get(tag.tag_id, 0)
        index = len(self.layouts) - 1 if index == 0 else index - 1
        self._indices[tag.tag_id] = index
        tag.set_layout(self.layouts[index])


def layout_cycler(layouts: Sequence[Layout]) -> LayoutCycler:
    """Create a :class:`LayoutCycler` over ``layouts``."""
    return LayoutCycler(layouts)