import queue
import socket
import struct
import threading

import msgpack
import pytest

from pinnacle_config.client import Client, install
from pinnacle_config.messages import Layout
from pinnacle_config.output import OutputHandle
from pinnacle_config.tag import (
    LayoutCycler,
    TagHandle,
    TagProperties,
    add,
    get,
    get_all,
    layout_cycler,
)


class FakeCompositor:
    def __init__(self):
        self.outputs = {
            "HDMI-1": {"focused": False, "tag_ids": [1, 2]},
            "DP-1": {"focused": True, "tag_ids": [3]},
        }
        self.tags = {
            1: {"active": True, "name": "1", "output_name": "HDMI-1"},
            2: {"active": False, "name": "2", "output_name": "HDMI-1"},
            3: {"active": True, "name": "1", "output_name": "DP-1"},
        }
        self.sent = queue.Queue()
        self.server, client_sock = socket.socketpair()
        self.client = Client(client_sock)
        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.start()

    def _recv_exact(self, size):
        data = b""
        while len(data) < size:
            try:
                chunk = self.server.recv(size - len(data))
            except OSError:
                return None
            if not chunk:
                return None
            data += chunk
        return data

    def _respond(self, req):
        if req == "GetOutputs":
            return {"Outputs": {"output_names": list(self.outputs)}}
        if req == "GetTags":
            return {"Tags": {"tag_ids": list(self.tags)}}
        ((name, body),) = req.items()
        if name == "GetOutputProps":
            return {"OutputProps": dict(self.outputs.get(body["output_name"], {}))}
        if name == "GetTagProps":
            return {"TagProps": dict(self.tags.get(body["tag_id"], {}))}
        raise AssertionError(f"unexpected request {req!r}")

    def _run(self):
        while True:
            header = self._recv_exact(4)
            if header is None:
                return
            (length,) = struct.unpack("=I", header)
            payload = self._recv_exact(length)
            if payload is None:
                return
            obj = msgpack.unpackb(payload, raw=False, strict_map_key=False)
            if isinstance(obj, dict) and "Request" in obj:
                body = obj["Request"]
                reply = {
                    "RequestResponse": {
                        "request_id": body["request_id"],
                        "response": self._respond(body["request"]),
                    }
                }
                data = msgpack.packb(reply, use_bin_type=True)
                self.server.sendall(struct.pack("=I", len(data)) + data)
            else:
                self.sent.put(obj)

    def take(self, count=1):
        return [self.sent.get(timeout=5) for _ in range(count)]

    def close(self):
        self.client.close()
        self.thread.join(timeout=5)
        self.server.close()


@pytest.fixture
def compositor():
    fake = FakeCompositor()
    install(fake.client)
    yield fake
    install(None)
    fake.close()


LAYOUTS = [Layout.MASTER_STACK, Layout.DWINDLE, Layout.SPIRAL]


def layouts_sent(messages, tag_id):
    result = []
    for msg in messages:
        body = msg["SetLayout"]
        assert body["tag_id"] == tag_id
        result.append(body["layout"])
    return result


def test_get_all(compositor):
    assert get_all() == [TagHandle(1), TagHandle(2), TagHandle(3)]


def test_properties(compositor):
    assert TagHandle(1).properties() == TagProperties(
        active=True, name="1", output=OutputHandle("HDMI-1")
    )


def test_properties_of_unknown_tag(compositor):
    assert TagHandle(99).properties() == TagProperties()


def test_get_on_given_output(compositor):
    assert get("1", OutputHandle("HDMI-1")) == TagHandle(1)
    assert get("2", OutputHandle("HDMI-1")) == TagHandle(2)


def test_get_defaults_to_focused_output(compositor):
    assert get("1") == TagHandle(3)
    assert get("2") is None


def test_get_missing(compositor):
    assert get("missing", OutputHandle("DP-1")) is None


def test_toggle_switch_and_layout_wire(compositor):
    tag = TagHandle(2)
    tag.toggle()
    tag.switch_to()
    tag.set_layout(Layout.CORNER_TOP_LEFT)
    assert compositor.take(3) == [
        {"ToggleTag": {"tag_id": 2}},
        {"SwitchToTag": {"tag_id": 2}},
        {"SetLayout": {"tag_id": 2, "layout": "CornerTopLeft"}},
    ]


def test_invalid_tag_wire(compositor):
    TagHandle(None).toggle()
    assert compositor.take() == [{"ToggleTag": {"tag_id": "None"}}]


def test_add_wire(compositor):
    add(OutputHandle("HDMI-1"), ("x", "y"))
    assert compositor.take() == [
        {"AddTags": {"output_name": "HDMI-1", "tag_names": ["x", "y"]}}
    ]


def test_cycler_next_wraps_on_focused_output(compositor):
    cycler = layout_cycler(LAYOUTS)
    for _ in range(len(LAYOUTS)):
        cycler.next()
    assert layouts_sent(compositor.take(3), 3) == ["Dwindle", "Spiral", "MasterStack"]


def test_cycler_prev_from_start_goes_to_last(compositor):
    cycler = LayoutCycler(LAYOUTS)
    cycler.prev()
    cycler.prev()
    assert layouts_sent(compositor.take(2), 3) == ["Spiral", "Dwindle"]


def test_cycler_next_then_prev_returns(compositor):
    cycler = LayoutCycler(LAYOUTS)
    cycler.next()
    cycler.prev()
    assert layouts_sent(compositor.take(2), 3) == [LAYOUTS[1].value, LAYOUTS[0].value]


def test_cycler_tracks_tags_separately(compositor):
    cycler = LayoutCycler(LAYOUTS)
    cycler.next()
    cycler.next(OutputHandle("HDMI-1"))
    first, second = compositor.take(2)
    assert first["SetLayout"] == {"tag_id": 3, "layout": "Dwindle"}
    assert second["SetLayout"] == {"tag_id": 1, "layout": "Dwindle"}


def test_cycler_without_active_tag_sends_nothing(compositor):
    compositor.tags[3]["active"] = False
    cycler = LayoutCycler(LAYOUTS)
    cycler.next()
    TagHandle(3).toggle()
    assert compositor.take() == [{"ToggleTag": {"tag_id": 3}}]
    assert compositor.sent.empty()


def test_cycler_without_focused_output_sends_nothing(compositor):
    compositor.outputs["DP-1"]["focused"] = False
    cycler = LayoutCycler(LAYOUTS)
    cycler.prev()
    TagHandle(1).switch_to()
    assert compositor.take() == [{"SwitchToTag": {"tag_id": 1}}]
    assert compositor.sent.empty()


def test_cycler_with_no_layouts_raises(compositor):
    cycler = LayoutCycler([])
    with pytest.raises(IndexError):
        cycler.next()