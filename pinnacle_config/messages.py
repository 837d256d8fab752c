"""Messages exchanged with the compositor and their MessagePack wire form.

Enums use the externally tagged layout: unit variants are bare strings,
variants with data are one-entry maps from the variant name to its data.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, NamedTuple, Sequence

import msgpack

_U32_MAX = 2**32 - 1
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


class Modifier(enum.Enum):
    """A modifier key."""

    SHIFT = "Shift"
    CTRL = "Ctrl"
    ALT = "Alt"
    SUPER = "Super"


_MODIFIER_BITS = {
    Modifier.SHIFT: 0b0000_0001,
    Modifier.CTRL: 0b0000_0010,
    Modifier.ALT: 0b0000_0100,
    Modifier.SUPER: 0b0000_1000,
}


class MouseEdge(enum.Enum):
    """Whether a mousebind fires on press or on release."""

    PRESS = "Press"
    RELEASE = "Release"


class Layout(enum.Enum):
    """Tiling layouts for tags."""

    MASTER_STACK = "MasterStack"
    DWINDLE = "Dwindle"
    SPIRAL = "Spiral"
    CORNER_TOP_LEFT = "CornerTopLeft"
    CORNER_TOP_RIGHT = "CornerTopRight"
    CORNER_BOTTOM_LEFT = "CornerBottomLeft"
    CORNER_BOTTOM_RIGHT = "CornerBottomRight"


class FloatingOrTiled(enum.Enum):
    """Whether a window floats or is tiled."""

    FLOATING = "Floating"
    TILED = "Tiled"


class FullscreenOrMaximized(enum.Enum):
    """Whether a window is fullscreen, maximized or neither."""

    NEITHER = "Neither"
    FULLSCREEN = "Fullscreen"
    MAXIMIZED = "Maximized"


class AccelProfile(enum.Enum):
    """Pointer acceleration profile."""

    FLAT = "Flat"
    ADAPTIVE = "Adaptive"


class ClickMethod(enum.Enum):
    """Touchpad click method."""

    BUTTON_AREAS = "ButtonAreas"
    CLICKFINGER = "Clickfinger"


class ScrollMethod(enum.Enum):
    """Touchpad scroll method."""

    NO_SCROLL = "NoScroll"
    TWO_FINGER = "TwoFinger"
    EDGE = "Edge"
    ON_BUTTON_DOWN = "OnButtonDown"


class TapButtonMap(enum.Enum):
    """Mapping from finger count to button for taps."""

    LEFT_RIGHT_MIDDLE = "LeftRightMiddle"
    LEFT_MIDDLE_RIGHT = "LeftMiddleRight"


# --- value converters ------------------------------------------------------


def _int_in(value: Any, low: int, high: int, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise ValueError(f"{what} out of range: {value}")
    return value


def _u32(value: Any) -> int:
    return _int_in(value, 0, _U32_MAX, "u32")


def _i32(value: Any) -> int:
    return _int_in(value, _I32_MIN, _I32_MAX, "i32")


def _nonzero_u32(value: Any) -> int:
    return _int_in(value, 1, _U32_MAX, "non-zero u32")


def _str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {value!r}")
    return value


def _bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"expected a bool, got {value!r}")
    return value


def _float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {value!r}")
    return float(value)


def _list_of(convert: Callable[[Any], Any]) -> Callable[[Any], list]:
    def convert_all(values: Any) -> list:
        if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
            raise TypeError(f"expected a sequence, got {values!r}")
        return [convert(v) for v in values]

    return convert_all


def _optional(convert: Callable[[Any], Any]) -> Callable[[Any], Any]:
    return lambda value: None if value is None else convert(value)


def _enum(cls: type[enum.Enum]) -> Callable[[Any], str]:
    return lambda value: cls(value).value


def _id(value: Any) -> Any:
    """Window and tag ids: ``None`` stands for the invalid id."""
    return "None" if value is None else _u32(value)


def _pair(convert: Callable[[Any], Any]) -> Callable[[Any], list]:
    def convert_pair(value: Any) -> list:
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            raise TypeError(f"expected a pair, got {value!r}")
        if len(value) != 2:
            raise ValueError(f"expected exactly two values, got {len(value)}")
        return [convert(value[0]), convert(value[1])]

    return convert_pair


def _matrix(value: Any) -> list[float]:
    values = _list_of(_float)(value)
    if len(values) != 6:
        raise ValueError(f"calibration matrix needs 6 values, got {len(values)}")
    return values


def _modifier(value: Any) -> str:
    return Modifier(value).value


def key_to_wire(key: int | str) -> dict[str, Any]:
    """Encode a key given as a raw keysym number or as a character/keysym name."""
    if isinstance(key, str):
        if not key:
            raise ValueError("key must not be empty")
        return {"String": key}
    return {"Int": _u32(key)}


# --- libinput --------------------------------------------------------------

_LIBINPUT_KINDS: dict[str, Callable[[Any], Any]] = {
    "AccelProfile": _enum(AccelProfile),
    "AccelSpeed": _float,
    "CalibrationMatrix": _matrix,
    "ClickMethod": _enum(ClickMethod),
    "DisableWhileTypingEnabled": _bool,
    "LeftHanded": _bool,
    "MiddleEmulationEnabled": _bool,
    "RotationAngle": _u32,
    "ScrollMethod": _enum(ScrollMethod),
    "NaturalScrollEnabled": _bool,
    "ScrollButton": _u32,
    "TapButtonMap": _enum(TapButtonMap),
    "TapDragEnabled": _bool,
    "TapDragLockEnabled": _bool,
    "TapEnabled": _bool,
}


@dataclass(frozen=True)
class LibinputSetting:
    """One libinput setting, such as ``LibinputSetting("TapEnabled", True)``."""

    setting: str
    value: Any

    def __post_init__(self) -> None:
        if self.setting not in _LIBINPUT_KINDS:
            raise ValueError(f"unknown libinput setting: {self.setting!r}")
        if isinstance(self.value, list):
            object.__setattr__(self, "value", tuple(self.value))
        self.to_wire()

    def to_wire(self) -> dict[str, Any]:
        return {self.setting: _LIBINPUT_KINDS[self.setting](self.value)}


# --- modifier masks --------------------------------------------------------


@dataclass(frozen=True)
class ModifierMask:
    """A bitmask of modifiers, usable as a dictionary key."""

    bits: int = 0

    @classmethod
    def from_modifiers(cls, modifiers: Sequence[Modifier | str]) -> ModifierMask:
        bits = 0
        for modifier in modifiers:
            bits |= _MODIFIER_BITS[Modifier(modifier)]
        return cls(bits)

    @classmethod
    def from_state(
        cls, shift: bool = False, ctrl: bool = False, alt: bool = False, logo: bool = False
    ) -> ModifierMask:
        held = (
            (shift, Modifier.SHIFT),
            (ctrl, Modifier.CTRL),
            (alt, Modifier.ALT),
            (logo, Modifier.SUPER),
        )
        return cls.from_modifiers([modifier for pressed, modifier in held if pressed])

    def values(self) -> list[Modifier]:
        """The modifiers in the mask, in Shift, Ctrl, Alt, Super order."""
        return [m for m, bit in _MODIFIER_BITS.items() if self.bits & bit == bit]


# --- window rules ----------------------------------------------------------


@dataclass
class ConditionData:
    """The condition part of a window rule."""

    cond_any: list[ConditionData] | None = None
    cond_all: list[ConditionData] | None = None
    window_class: list[str] | None = None
    title: list[str] | None = None
    tag: list[int | None] | None = None

    def to_wire(self) -> dict[str, Any]:
        def nested(conds: list[ConditionData] | None) -> list | None:
            return None if conds is None else [_condition(c) for c in conds]

        return {
            "cond_any": nested(self.cond_any),
            "cond_all": nested(self.cond_all),
            "class": _optional(_list_of(_str))(self.window_class),
            "title": _optional(_list_of(_str))(self.title),
            "tag": _optional(_list_of(_id))(self.tag),
        }


@dataclass
class RuleData:
    """What a window rule applies to matching windows."""

    output: str | None = None
    tags: list[int | None] | None = None
    floating_or_tiled: FloatingOrTiled | None = None
    fullscreen_or_maximized: FullscreenOrMaximized | None = None
    size: tuple[int, int] | None = None
    location: tuple[int, int] | None = None

    def to_wire(self) -> dict[str, Any]:
        return {
            "output": _optional(_str)(self.output),
            "tags": _optional(_list_of(_id))(self.tags),
            "floating_or_tiled": _optional(_enum(FloatingOrTiled))(self.floating_or_tiled),
            "fullscreen_or_maximized": _optional(_enum(FullscreenOrMaximized))(
                self.fullscreen_or_maximized
            ),
            "size": _optional(_pair(_nonzero_u32))(self.size),
            "location": _optional(_pair(_i32))(self.location),
        }


def _condition(value: Any) -> dict[str, Any]:
    if not isinstance(value, ConditionData):
        raise TypeError(f"expected ConditionData, got {value!r}")
    return value.to_wire()


def _rule(value: Any) -> dict[str, Any]:
    if not isinstance(value, RuleData):
        raise TypeError(f"expected RuleData, got {value!r}")
    return value.to_wire()


def _libinput(value: Any) -> dict[str, Any]:
    if not isinstance(value, LibinputSetting):
        raise TypeError(f"expected LibinputSetting, got {value!r}")
    return value.to_wire()


# --- outgoing variants -----------------------------------------------------


class _Field(NamedTuple):
    name: str
    convert: Callable[[Any], Any]
    required: bool = True


def _opt(name: str, convert: Callable[[Any], Any]) -> _Field:
    return _Field(name, _optional(convert), required=False)


_Schema = Mapping[str, tuple[_Field, ...]]


def _check_fields(kind: str, name: str, fields: Mapping[str, Any], schema: _Schema) -> None:
    specs = schema.get(name)
    if specs is None:
        raise ValueError(f"unknown {kind} variant: {name!r}")
    known = {spec.name for spec in specs}
    unknown = sorted(set(fields) - known)
    if unknown:
        raise ValueError(f"{name} has no fields {unknown}")
    missing = [spec.name for spec in specs if spec.required and spec.name not in fields]
    if missing:
        raise ValueError(f"{name} is missing fields {missing}")


def _variant_to_wire(name: str, fields: Mapping[str, Any], schema: _Schema) -> Any:
    specs = schema[name]
    if not specs:
        return name
    return {name: {spec.name: spec.convert(fields.get(spec.name)) for spec in specs}}


_WINDOW_ID = _Field("window_id", _id)
_TAG_ID = _Field("tag_id", _id)

_REQUEST_SCHEMA: _Schema = {
    "GetWindows": (),
    "GetWindowProps": (_WINDOW_ID,),
    "GetOutputs": (),
    "GetOutputProps": (_Field("output_name", _str),),
    "GetTags": (),
    "GetTagProps": (_TAG_ID,),
}


@dataclass(frozen=True)
class Request:
    """A request that the compositor answers with a :class:`RequestResponse`."""

    name: str
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_fields("request", self.name, self.fields, _REQUEST_SCHEMA)
        object.__setattr__(self, "fields", dict(self.fields))
        self.to_wire()

    def to_wire(self) -> Any:
        return _variant_to_wire(self.name, self.fields, _REQUEST_SCHEMA)


def _request(value: Any) -> Any:
    if not isinstance(value, Request):
        raise TypeError(f"expected Request, got {value!r}")
    return value.to_wire()


_MODIFIERS = _Field("modifiers", _list_of(_modifier))
_CALLBACK_ID = _Field("callback_id", _u32)
_BUTTON = _Field("button", _u32)

_MESSAGE_SCHEMA: _Schema = {
    "SetKeybind": (_Field("key", key_to_wire), _MODIFIERS, _CALLBACK_ID),
    "SetMousebind": (_MODIFIERS, _BUTTON, _Field("edge", _enum(MouseEdge)), _CALLBACK_ID),
    "CloseWindow": (_WINDOW_ID,),
    "SetWindowSize": (_WINDOW_ID, _opt("width", _i32), _opt("height", _i32)),
    "MoveWindowToTag": (_WINDOW_ID, _TAG_ID),
    "ToggleTagOnWindow": (_WINDOW_ID, _TAG_ID),
    "ToggleFloating": (_WINDOW_ID,),
    "ToggleFullscreen": (_WINDOW_ID,),
    "ToggleMaximized": (_WINDOW_ID,),
    "AddWindowRule": (_Field("cond", _condition), _Field("rule", _rule)),
    "WindowMoveGrab": (_BUTTON,),
    "WindowResizeGrab": (_BUTTON,),
    "ToggleTag": (_TAG_ID,),
    "SwitchToTag": (_TAG_ID,),
    "AddTags": (_Field("output_name", _str), _Field("tag_names", _list_of(_str))),
    "RemoveTags": (_Field("tag_ids", _list_of(_id)),),
    "SetLayout": (_TAG_ID, _Field("layout", _enum(Layout))),
    "ConnectForAllOutputs": (_CALLBACK_ID,),
    "SetOutputLocation": (_Field("output_name", _str), _opt("x", _i32), _opt("y", _i32)),
    "Spawn": (_Field("command", _list_of(_str)), _opt("callback_id", _u32)),
    "SetEnv": (_Field("key", _str), _Field("value", _str)),
    "Quit": (),
    "SetXkbConfig": (
        _opt("rules", _str),
        _opt("variant", _str),
        _opt("layout", _str),
        _opt("model", _str),
        _opt("options", _str),
    ),
    "SetLibinputSetting": (_Field("setting", _libinput),),
    "Request": (_Field("request_id", _u32), _Field("request", _request)),
}


@dataclass(frozen=True)
class Message:
    """A message sent from the configuration to the compositor."""

    name: str
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_fields("message", self.name, self.fields, _MESSAGE_SCHEMA)
        object.__setattr__(self, "fields", dict(self.fields))
        self.to_wire()

    def to_wire(self) -> Any:
        if self.name == "SetLibinputSetting":
            # A newtype variant: the setting itself is the payload.
            return {self.name: _libinput(self.fields["setting"])}
        return _variant_to_wire(self.name, self.fields, _MESSAGE_SCHEMA)


def encode_message(msg: Message) -> bytes:
    """Serialize a message to MessagePack, without any length prefix."""
    return msgpack.packb(msg.to_wire(), use_bin_type=True)


# --- incoming --------------------------------------------------------------


@dataclass(frozen=True)
class SpawnArgs:
    """A line of output or the exit status of a spawned process."""

    stdout: str | None = None
    stderr: str | None = None
    exit_code: int | None = None
    exit_msg: str | None = None


@dataclass(frozen=True)
class OutputArgs:
    """The name of an output passed to a connect-for-all callback."""

    output_name: str


@dataclass(frozen=True)
class CallCallback:
    """The compositor asks for a callback to be run."""

    callback_id: int
    args: SpawnArgs | OutputArgs | None = None


@dataclass(frozen=True)
class RequestResponse:
    """The compositor's answer to a :class:`Request`."""

    request_id: int
    kind: str
    fields: Mapping[str, Any] = field(default_factory=dict)


def _decode_id(value: Any) -> int | None:
    if value == "None":
        return None
    return _u32(value)


def _decode_pair(value: Any) -> tuple[int, int]:
    first, second = _pair(_i32)(value)
    return (first, second)


_ID_LIST = _list_of(_decode_id)

_RESPONSE_SCHEMA: _Schema = {
    "Window": (_opt("window_id", _decode_id),),
    "Windows": (_Field("window_ids", _ID_LIST),),
    "WindowProps": (
        _opt("size", _decode_pair),
        _opt("loc", _decode_pair),
        _opt("class", _str),
        _opt("title", _str),
        _opt("focused", _bool),
        _opt("floating", _bool),
        _opt("fullscreen_or_maximized", FullscreenOrMaximized),
    ),
    "Output": (_opt("output_name", _str),),
    "Outputs": (_Field("output_names", _list_of(_str)),),
    "OutputProps": (
        _opt("make", _str),
        _opt("model", _str),
        _opt("loc", _decode_pair),
        _opt("res", _decode_pair),
        _opt("refresh_rate", _i32),
        _opt("physical_size", _decode_pair),
        _opt("focused", _bool),
        _opt("tag_ids", _ID_LIST),
    ),
    "Tags": (_Field("tag_ids", _ID_LIST),),
    "TagProps": (
        _opt("active", _bool),
        _opt("name", _str),
        _opt("output_name", _str),
    ),
}


def _split_variant(obj: Any) -> tuple[str, Any]:
    if isinstance(obj, str):
        return obj, None
    if isinstance(obj, dict) and len(obj) == 1:
        ((name, body),) = obj.items()
        if isinstance(name, str):
            return name, body
    raise ValueError(f"not an enum variant: {obj!r}")


def _body(name: str, body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise ValueError(f"{name} needs a map of fields, got {body!r}")
    return body


def _decode_args(obj: Any) -> SpawnArgs | OutputArgs | None:
    if obj is None:
        return None
    name, body = _split_variant(obj)
    if name == "Spawn":
        body = _body(name, body)
        return SpawnArgs(
            stdout=_optional(_str)(body.get("stdout")),
            stderr=_optional(_str)(body.get("stderr")),
            exit_code=_optional(_i32)(body.get("exit_code")),
            exit_msg=_optional(_str)(body.get("exit_msg")),
        )
    if name == "ConnectForAllOutputs":
        return OutputArgs(_str(_body(name, body)["output_name"]))
    raise ValueError(f"unknown callback arguments: {name!r}")


def _decode_response(request_id: int, obj: Any) -> RequestResponse:
    kind, body = _split_variant(obj)
    specs = _RESPONSE_SCHEMA.get(kind)
    if specs is None:
        raise ValueError(f"unknown response kind: {kind!r}")
    body = _body(kind, body)
    decoded = {}
    for spec in specs:
        if spec.required and spec.name not in body:
            raise ValueError(f"{kind} response is missing {spec.name!r}")
        decoded[spec.name] = spec.convert(body.get(spec.name))
    return RequestResponse(request_id, kind, decoded)


def decode_incoming(data: bytes) -> CallCallback | RequestResponse:
    """Parse one MessagePack payload sent by the compositor."""
    try:
        obj = msgpack.unpackb(data, raw=False, strict_map_key=False)
    except (ValueError, msgpack.exceptions.UnpackException) as err:
        raise ValueError(f"malformed message: {err}") from err
    try:
        name, body = _split_variant(obj)
        body = _body(name, body)
        if name == "CallCallback":
            return CallCallback(_u32(body["callback_id"]), _decode_args(body.get("args")))
        if name == "RequestResponse":
            return _decode_response(_u32(body["request_id"]), body["response"])
    except (KeyError, TypeError) as err:
        raise ValueError(f"malformed message: {err!r}") from err
    raise ValueError(f"unknown incoming message: {name!r}")