"""Keybinds, mousebinds and input device settings."""

from __future__ import annotations

import enum
from typing import Callable, Sequence

from .client import CallbackVec, send_msg
from .messages import LibinputSetting, Message, Modifier, MouseEdge

__all__ = [
    "Modifier",
    "MouseButton",
    "MouseEdge",
    "keybind",
    "mousebind",
    "set_libinput_setting",
    "set_xkb_config",
]


class MouseButton(enum.IntEnum):
    """A mouse button, by its input event code."""

    LEFT = 0x110
    RIGHT = 0x111
    MIDDLE = 0x112
    SIDE = 0x113
    EXTRA = 0x114
    FORWARD = 0x115
    BACK = 0x116


Action = Callable[[CallbackVec], None]


def _ignoring_args(action: Action) -> Callable[..., None]:
    def run(_args: object, callbacks: CallbackVec) -> None:
        action(callbacks)

    return run


def keybind(
    modifiers: Sequence[Modifier],
    key: int | str,
    action: Action,
    callbacks: CallbackVec,
) -> None:
    """Run ``action`` when ``key`` is pressed with ``modifiers`` held.

    ``key`` is a character such as ``"a"`` or ``"@"``, a keysym name, or a
    raw keysym number. ``action`` is called with ``callbacks``.
    """
    msg = Message(
        "SetKeybind",
        {"key": key, "modifiers": list(modifiers), "callback_id": len(callbacks)},
    )
    callbacks.add(_ignoring_args(action))
    send_msg(msg)


def mousebind(
    modifiers: Sequence[Modifier],
    button: MouseButton | int,
    edge: MouseEdge,
    action: Action,
    callbacks: CallbackVec,
) -> None:
    """Run ``action`` when ``button`` is pressed or released with ``modifiers`` held.

    An existing mousebind with the same modifiers, button and edge is replaced.
    """
    msg = Message(
        "SetMousebind",
        {
            "modifiers": list(modifiers),
            "button": int(button),
            "edge": edge,
            "callback_id": len(callbacks),
        },
    )
    callbacks.add(_ignoring_args(action))
    send_msg(msg)


def set_xkb_config(
    rules: str | None = None,
    model: str | None = None,
    layout: str | None = None,
    variant: str | None = None,
    options: str | None = None,
) -> None:
    """Set the keyboard's xkb configuration; ``None`` means the default."""
    send_msg(
        Message(
            "SetXkbConfig",
            {
                "rules": rules,
                "variant": variant,
                "layout": layout,
                "model": model,
                "options": options,
            },
        )
    )


def set_libinput_setting(setting: LibinputSetting) -> None:
    """Apply a libinput setting to all input devices."""
    send_msg(Message("SetLibinputSetting", {"setting": setting}))