"""Windows: lookup, properties and state changes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .client import request, send_msg
from .messages import FullscreenOrMaximized, Message, Request

if TYPE_CHECKING:
    from .input import MouseButton
    from .tag import TagHandle

__all__ = [
    "WindowHandle",
    "WindowProperties",
    "begin_move",
    "begin_resize",
    "get_all",
    "get_by_class",
    "get_focused",
]


@dataclass
class WindowProperties:
    """Properties of a window; ``None`` where the compositor had no value."""

    size: tuple[int, int] | None = None
    loc: tuple[int, int] | None = None
    window_class: str | None = None
    title: str | None = None
    focused: bool | None = None
    floating: bool | None = None
    fullscreen_or_maximized: FullscreenOrMaximized | None = None


def _response_fields(req: Request, kind: str) -> dict[str, Any]:
    response = request(req)
    if response.kind != kind:
        raise RuntimeError(f"expected a {kind} response, got {response.kind}")
    return dict(response.fields)


@dataclass(frozen=True)
class WindowHandle:
    """A handle to a window. A ``window_id`` of ``None`` is an invalid window."""

    window_id: int | None

    def _send(self, name: str, **fields: Any) -> None:
        send_msg(Message(name, {"window_id": self.window_id, **fields}))

    def toggle_floating(self) -> None:
        """Toggle this window between floating and tiled."""
        self._send("ToggleFloating")

    def toggle_fullscreen(self) -> None:
        """Toggle fullscreen; a maximized window becomes fullscreen."""
        self._send("ToggleFullscreen")

    def toggle_maximized(self) -> None:
        """Toggle maximized; a fullscreen window becomes maximized."""
        self._send("ToggleMaximized")

    def set_size(self, width: int | None = None, height: int | None = None) -> None:
        """Set this window's size; ``None`` leaves that dimension unchanged."""
        self._send("SetWindowSize", width=width, height=height)

    def close(self) -> None:
        """Ask this window to close."""
        self._send("CloseWindow")

    def properties(self) -> WindowProperties:
        """Ask the compositor for this window's properties."""
        fields = _response_fields(
            Request("GetWindowProps", {"window_id": self.window_id}), "WindowProps"
        )
        return WindowProperties(
            size=fields.get("size"),
            loc=fields.get("loc"),
            window_class=fields.get("class"),
            title=fields.get("title"),
            focused=fields.get("focused"),
            floating=fields.get("floating"),
            fullscreen_or_maximized=fields.get("fullscreen_or_maximized"),
        )

    def toggle_tag(self, tag: TagHandle) -> None:
        """Add ``tag`` to this window, or remove it if the window has it."""
        self._send("ToggleTagOnWindow", tag_id=tag.tag_id)

    def move_to_tag(self, tag: TagHandle) -> None:
        """Put this window on ``tag`` alone, removing all its other tags."""
        self._send("MoveWindowToTag", tag_id=tag.tag_id)


def get_all() -> list[WindowHandle]:
    """Handles to all windows."""
    fields = _response_fields(Request("GetWindows"), "Windows")
    return [WindowHandle(window_id) for window_id in fields["window_ids"]]


def get_by_class(window_class: str) -> list[WindowHandle]:
    """All windows whose class is ``window_class``."""
    return [win for win in get_all() if win.properties().window_class == window_class]


def get_focused() -> WindowHandle | None:
    """The focused window, if there is one."""
    return next((win for win in get_all() if win.properties().focused is True), None)


def begin_move(button: MouseButton | int) -> None:
    """Start moving the window under the pointer until ``button`` is released."""
    send_msg(Message("WindowMoveGrab", {"button": int(button)}))


def begin_resize(button: MouseButton | int) -> None:
    """Start resizing the window under the pointer until ``button`` is released."""
    send_msg(Message("WindowResizeGrab", {"button": int(button)}))