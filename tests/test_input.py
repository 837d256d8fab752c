import socket
import struct

import msgpack
import pytest

from pinnacle_config.client import CallbackVec, Client, install
from pinnacle_config.input import (
    MouseButton,
    keybind,
    mousebind,
    set_libinput_setting,
    set_xkb_config,
)
from pinnacle_config.messages import LibinputSetting, Message, Modifier, MouseEdge


def recv_exact(sock, size):
    data = b""
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        assert chunk
        data += chunk
    return data


def read_frame(sock):
    (length,) = struct.unpack("=I", recv_exact(sock, 4))
    return msgpack.unpackb(recv_exact(sock, length), raw=False)


@pytest.fixture
def peer():
    a, b = socket.socketpair()
    a.settimeout(5)
    b.settimeout(5)
    client = Client(a)
    install(client)
    yield b
    install(None)
    client.close()
    b.close()


@pytest.mark.parametrize(
    "button, code",
    [
        (MouseButton.LEFT, 0x110),
        (MouseButton.RIGHT, 0x111),
        (MouseButton.MIDDLE, 0x112),
        (MouseButton.SIDE, 0x113),
        (MouseButton.EXTRA, 0x114),
        (MouseButton.FORWARD, 0x115),
        (MouseButton.BACK, 0x116),
    ],
)
def test_mousebind_sends_button_code(peer, button, code):
    callbacks = CallbackVec()
    mousebind([], button, MouseEdge.PRESS, lambda cbs: None, callbacks)
    assert read_frame(peer)["SetMousebind"]["button"] == code
    assert len(callbacks) == 1


def test_keybind_with_character(peer):
    callbacks = CallbackVec()
    keybind([Modifier.CTRL, Modifier.ALT], "q", lambda cbs: None, callbacks)
    assert read_frame(peer) == {
        "SetKeybind": {
            "key": {"String": "q"},
            "modifiers": ["Ctrl", "Alt"],
            "callback_id": 0,
        }
    }
    assert len(callbacks) == 1


def test_keybind_with_keysym_number(peer):
    callbacks = CallbackVec()
    keybind([Modifier.SUPER], 0xFF0D, lambda cbs: None, callbacks)
    assert read_frame(peer)["SetKeybind"]["key"] == {"Int": 0xFF0D}
    assert len(callbacks) == 1


def test_keybind_ids_follow_callback_count(peer):
    callbacks = CallbackVec()
    keybind([], "a", lambda cbs: None, callbacks)
    keybind([], "b", lambda cbs: None, callbacks)
    ids = [read_frame(peer)["SetKeybind"]["callback_id"] for _ in range(2)]
    assert ids == [0, 1]
    assert len(callbacks) == 2


def test_keybind_callback_runs_action_with_callbacks(peer):
    callbacks = CallbackVec()
    seen = []
    keybind([], "f", seen.append, callbacks)
    callbacks.callbacks[0](None, callbacks)
    assert seen == [callbacks]


def test_invalid_key_registers_nothing(peer):
    callbacks = CallbackVec()
    with pytest.raises(ValueError):
        keybind([], "", lambda cbs: None, callbacks)
    assert len(callbacks) == 0


def test_mousebind(peer):
    callbacks = CallbackVec()
    mousebind([Modifier.CTRL], MouseButton.LEFT, MouseEdge.PRESS, lambda cbs: None, callbacks)
    assert read_frame(peer) == {
        "SetMousebind": {
            "modifiers": ["Ctrl"],
            "button": 0x110,
            "edge": "Press",
            "callback_id": 0,
        }
    }
    assert len(callbacks) == 1


def test_mousebind_callback_ignores_args(peer):
    callbacks = CallbackVec()
    seen = []
    mousebind([], MouseButton.RIGHT, MouseEdge.RELEASE, seen.append, callbacks)
    callbacks.callbacks[0]("ignored", callbacks)
    assert seen == [callbacks]


def test_set_xkb_config(peer):
    fields = {
        "rules": None,
        "variant": None,
        "layout": "us",
        "model": None,
        "options": "caps:escape",
    }
    set_xkb_config(layout="us", options="caps:escape")
    frame = read_frame(peer)
    assert frame == {"SetXkbConfig": fields}
    assert Message("SetXkbConfig", fields).to_wire() == frame


def test_set_libinput_setting(peer):
    setting = LibinputSetting("TapEnabled", True)
    set_libinput_setting(setting)
    frame = read_frame(peer)
    assert frame == {"SetLibinputSetting": {"TapEnabled": True}}
    assert setting.to_wire() == frame["SetLibinputSetting"]


def test_set_libinput_setting_rejects_other_types(peer):
    with pytest.raises(TypeError):
        set_libinput_setting({"TapEnabled": True})