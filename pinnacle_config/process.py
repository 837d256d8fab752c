"""Spawning programs and setting the compositor's environment."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from .client import CallbackVec, send_msg
from .messages import Message, SpawnArgs

SpawnCallback = Callable[
    [Optional[str], Optional[str], Optional[int], Optional[str], CallbackVec], None
]


def spawn(command: Sequence[str]) -> None:
    """Spawn a program.

    The command is run directly, not through a shell, so shell syntax such
    as ``~`` needs an explicit shell.
    """
    send_msg(Message("Spawn", {"command": list(command), "callback_id": None}))


def spawn_with_callback(
    command: Sequence[str],
    callback: SpawnCallback,
    callbacks: CallbackVec,
) -> None:
    """Spawn a program and receive its output lines and exit status.

    ``callback`` is called with ``(stdout, stderr, exit_code, exit_msg,
    callbacks)``, where each call carries one stdout line, one stderr line,
    or the exit information.
    """
    def run(args: object, cbs: CallbackVec) -> None:
        if isinstance(args, SpawnArgs):
            callback(args.stdout, args.stderr, args.exit_code, args.exit_msg, cbs)

    msg = Message("Spawn", {"command": list(command), "callback_id": len(callbacks)})
    callbacks.add(run)
    send_msg(msg)


def set_env(key: str, value: str) -> None:
    """Set an environment variable for programs the compositor spawns."""
    send_msg(Message("SetEnv", {"key": key, "value": value}))