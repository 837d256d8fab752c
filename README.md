# pinnacle_config

A Python client for configuring the Pinnacle Wayland compositor. It connects to
the compositor's Unix socket, sends MessagePack-encoded messages (each framed
by a native-endian 32-bit length) and runs your callbacks when the compositor
calls them.

## Installation

```
pip install .
```

## Connecting

`client.connect()` connects to the socket named by `$PINNACLE_SOCKET`, falling
back to `/tmp/pinnacle_socket`, and makes the connection the current client.
Calling it a second time raises `RuntimeError`. A path can also be given:
`client.connect("/run/user/1000/pinnacle_socket")`.

```python
from pinnacle_config import client, input, output, process, tag, window
from pinnacle_config.client import CallbackVec
from pinnacle_config.messages import Layout, Modifier

client.connect()
callbacks = CallbackVec()

input.keybind([Modifier.CTRL, Modifier.ALT], "q", lambda cbs: client.quit(), callbacks)
input.keybind([Modifier.CTRL], "Return", lambda cbs: process.spawn(["alacritty"]), callbacks)

def setup_output(handle, cbs):
    tag.add(handle, ["1", "2", "3"])
    first = tag.get("1", handle)
    if first is not None:
        first.toggle()

output.connect_for_all(setup_output, callbacks)

cycler = tag.layout_cycler([Layout.MASTER_STACK, Layout.DWINDLE, Layout.SPIRAL])
input.keybind([Modifier.CTRL], "space", lambda cbs: cycler.next(None), callbacks)

client.listen(callbacks)
```

Keys are given as a single character, a keysym name such as `"Return"`, or a
raw keysym number. `listen` dispatches callback messages and returns only by
raising, for instance `ConnectionError` when the connection closes.

Functions that need the connection (`send_msg`, `request`, `listen`, `quit`
and everything built on them) raise `RuntimeError` before `connect()` has been
called. `client.install()` sets or clears the current client, which is useful
for driving a `Client` over any connected socket.

## Modules

- `pinnacle_config.messages` – wire types: `Modifier`, `MouseEdge`, `Layout`,
  `FloatingOrTiled`, `FullscreenOrMaximized`, the libinput enums and
  `LibinputSetting`, `ModifierMask`, `Message`, `Request`, `RequestResponse`,
  `CallCallback`, plus `encode_message` and `decode_incoming`.
- `pinnacle_config.client` – `Client`, `CallbackVec`, `connect`, `install`,
  `get_client`, `send_msg`, `request`, `listen` and `quit`.
- `pinnacle_config.input` – `MouseButton`, `keybind`, `mousebind`,
  `set_xkb_config` and `set_libinput_setting`, for example
  `set_libinput_setting(LibinputSetting("TapEnabled", True))`.
- `pinnacle_config.process` – `spawn`, `spawn_with_callback` (called with
  stdout line, stderr line, exit code, exit message and the callbacks) and
  `set_env`.
- `pinnacle_config.output` – `OutputHandle` with `properties`, `add_tags`,
  `set_loc` and `set_loc_right_of` / `left_of` / `top_of` / `bottom_of`
  using `AlignmentHorizontal` and `AlignmentVertical`; `get_by_name`,
  `get_all`, `get_focused` and `connect_for_all`.
- `pinnacle_config.tag` – `TagHandle` with `properties`, `toggle`,
  `switch_to` and `set_layout`; `get`, `get_all`, `add` and `LayoutCycler`
  (via `layout_cycler`), which keeps a layout position per tag.
- `pinnacle_config.window` – `WindowHandle` with `properties`,
  `toggle_floating`, `toggle_fullscreen`, `toggle_maximized`, `set_size`,
  `close`, `toggle_tag` and `move_to_tag`; `get_all`, `get_by_class`,
  `get_focused`, `begin_move` and `begin_resize`.
- `pinnacle_config.rules` – chainable `WindowRule` and `WindowRuleCondition`
  builders and `add`, for example
  `rules.add(WindowRuleCondition().window_class(["firefox"]), WindowRule().floating_or_tiled(FloatingOrTiled.FLOATING))`.
- `pinnacle_config.example` – a complete sample configuration (`configure`)
  and its entry point (`main`).

## Example configuration

The sample configuration binds Ctrl-based keys for closing, floating,
fullscreen, maximizing, spawning `alacritty`, cycling layouts and switching
between tags `1` to `5`. Start it while the compositor is running:

```
pinnacle-example-config
pinnacle-example-config --socket /path/to/socket
```

## What this package does not do

This package is only the configuration client. It contains no compositor: it
does not draw windows, manage input devices or run programs itself. Spawning,
layouts, window rules and every other action are carried out by a running
Pinnacle compositor that receives the messages this package sends.