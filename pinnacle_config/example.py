"""A sample configuration showing binds, tags and layouts."""

from __future__ import annotations

import argparse
from typing import Sequence

from . import client, output, process, tag, window
from .client import CallbackVec
from .input import MouseButton, keybind, mousebind
from .messages import Layout, Modifier, MouseEdge

KEY_RETURN = 0xFF0D
KEY_SPACE = 0x0020

MOD_KEY = Modifier.CTRL
TERMINAL = "alacritty"
TAG_NAMES = ("1", "2", "3", "4", "5")


def _tag(name: str, on_output: output.OutputHandle | None = None) -> tag.TagHandle:
    found = tag.get(name, on_output)
    if found is None:
        raise LookupError(f"no tag named {name!r}")
    return found


def _with_focused(action):
    def run(_callbacks: CallbackVec) -> None:
        focused = window.get_focused()
        if focused is not None:
            action(focused)

    return run


def _bind_tag_keys(name: str, callbacks: CallbackVec) -> None:
    key = name[0]
    keybind([MOD_KEY], key, lambda _: _tag(name).switch_to(), callbacks)
    keybind([MOD_KEY, Modifier.SHIFT], key, lambda _: _tag(name).toggle(), callbacks)
    keybind(
        [MOD_KEY, Modifier.ALT],
        key,
        _with_focused(lambda win: win.move_to_tag(_tag(name))),
        callbacks,
    )
    keybind(
        [MOD_KEY, Modifier.SHIFT, Modifier.ALT],
        key,
        _with_focused(lambda win: win.toggle_tag(_tag(name))),
        callbacks,
    )


def configure(callbacks: CallbackVec) -> None:
    """Register the sample configuration with the connected compositor."""
    process.set_env("MOZ_ENABLE_WAYLAND", "1")

    mousebind(
        [MOD_KEY],
        MouseButton.LEFT,
        MouseEdge.PRESS,
        lambda _: window.begin_move(MouseButton.LEFT),
        callbacks,
    )
    mousebind(
        [MOD_KEY],
        MouseButton.RIGHT,
        MouseEdge.PRESS,
        lambda _: window.begin_resize(MouseButton.RIGHT),
        callbacks,
    )

    keybind([MOD_KEY, Modifier.ALT], "q", lambda _: client.quit(), callbacks)
    keybind([MOD_KEY, Modifier.ALT], "c", _with_focused(lambda w: w.close()), callbacks)
    keybind([MOD_KEY], KEY_RETURN, lambda _: process.spawn([TERMINAL]), callbacks)
    keybind(
        [MOD_KEY, Modifier.ALT],
        KEY_SPACE,
        _with_focused(lambda w: w.toggle_floating()),
        callbacks,
    )
    keybind([MOD_KEY], "f", _with_focused(lambda w: w.toggle_fullscreen()), callbacks)
    keybind([MOD_KEY], "m", _with_focused(lambda w: w.toggle_maximized()), callbacks)

    def setup_output(handle: output.OutputHandle, _callbacks: CallbackVec) -> None:
        tag.add(handle, TAG_NAMES)
        _tag("1", handle).toggle()

    output.connect_for_all(setup_output, callbacks)

    cycler = tag.layout_cycler(
        [
            Layout.MASTER_STACK,
            Layout.DWINDLE,
            Layout.SPIRAL,
            Layout.CORNER_TOP_LEFT,
            Layout.CORNER_TOP_RIGHT,
            Layout.CORNER_BOTTOM_LEFT,
            Layout.CORNER_BOTTOM_RIGHT,
        ]
    )
    keybind([MOD_KEY], KEY_SPACE, lambda _: cycler.next(None), callbacks)
    keybind([MOD_KEY, Modifier.SHIFT], KEY_SPACE, lambda _: cycler.prev(None), callbacks)

    for name in TAG_NAMES:
        _bind_tag_keys(name, callbacks)


def main(argv: Sequence[str] | None = None) -> None:
    """Connect to the compositor, register the configuration and listen."""
    parser = argparse.ArgumentParser(description="Run the sample configuration.")
    parser.add_argument("--socket", help="path of the compositor's socket")
    args = parser.parse_args(argv)

    client.connect(args.socket)
    callbacks = CallbackVec()
    configure(callbacks)
    client.listen(callbacks)


if __name__ == "__main__":
    main()