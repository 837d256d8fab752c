"""Client library and sample configuration for the Pinnacle Wayland compositor."""

__version__ = "0.1.0"

__all__ = [
    "client",
    "example",
    "input",
    "messages",
    "output",
    "process",
    "rules",
    "tag",
    "window",
]