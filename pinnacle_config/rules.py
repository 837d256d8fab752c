"""Window rules: conditions and what to apply to matching windows."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Sequence

from .client import send_msg
from .messages import (
    ConditionData,
    FloatingOrTiled,
    FullscreenOrMaximized,
    Message,
    RuleData,
)

if TYPE_CHECKING:
    from .output import OutputHandle
    from .tag import TagHandle

__all__ = ["WindowRule", "WindowRuleCondition", "add"]


class WindowRule:
    """What is applied to a window meeting a :class:`WindowRuleCondition`.

    Built by chaining: ``WindowRule().floating_or_tiled(...).size(800, 600)``.
    """

    def __init__(self) -> None:
        self.data = RuleData()

    def output(self, output: OutputHandle) -> WindowRule:
        """Open windows on ``output``."""
        self.data.output = output.name
        return self

    def tags(self, tags: Sequence[TagHandle]) -> WindowRule:
        """Open windows with ``tags``."""
        self.data.tags = [tag.tag_id for tag in tags]
        return self

    def floating_or_tiled(self, floating_or_tiled: FloatingOrTiled) -> WindowRule:
        """Open windows floating or tiled."""
        self.data.floating_or_tiled = FloatingOrTiled(floating_or_tiled)
        return self

    def fullscreen_or_maximized(
        self, fullscreen_or_maximized: FullscreenOrMaximized
    ) -> WindowRule:
        """Open windows fullscreen, maximized or neither."""
        self.data.fullscreen_or_maximized = FullscreenOrMaximized(fullscreen_or_maximized)
        return self

    def size(self, width: int, height: int) -> WindowRule:
        """Open windows with this size; visible only for floating windows."""
        for value in (width, height):
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"size must be integers, got {value!r}")
            if not 0 < value < 2**32:
                raise ValueError(f"size must be a non-zero u32, got {value}")
        self.data.size = (width, height)
        return self

    def location(self, x: int, y: int) -> WindowRule:
        """Open windows at this location; tiled windows snap here when floated."""
        self.data.location = (x, y)
        return self


class WindowRuleCondition:
    """A condition for a :class:`WindowRule` to apply, built by chaining."""

    def __init__(self) -> None:
        self.data = ConditionData()

    def any(self, conds: Sequence[WindowRuleCondition]) -> WindowRuleCondition:
        """Met when at least one of ``conds`` is met."""
        self.data.cond_any = [copy.deepcopy(cond.data) for cond in conds]
        return self

    def all(self, conds: Sequence[WindowRuleCondition]) -> WindowRuleCondition:
        """Met when all of ``conds`` are met."""
        self.data.cond_all = [copy.deepcopy(cond.data) for cond in conds]
        return self

    def window_class(self, classes: Sequence[str]) -> WindowRuleCondition:
        """Met when the window's class matches.

        At top level or inside :meth:`all` every class must match; inside
        :meth:`any` one is enough.
        """
        self.data.window_class = list(classes)
        return self

    def title(self, titles: Sequence[str]) -> WindowRuleCondition:
        """Met when the window's title matches, combined as for classes."""
        self.data.title = list(titles)
        return self

    def tag(self, tags: Sequence[TagHandle]) -> WindowRuleCondition:
        """Met when the window opens on the given tags, combined as for classes."""
        self.data.tag = [tag.tag_id for tag in tags]
        return self


def add(cond: WindowRuleCondition, rule: WindowRule) -> None:
    """Apply ``rule`` to windows that meet ``cond``."""
    send_msg(
        Message(
            "AddWindowRule",
            {"cond": copy.deepcopy(cond.data), "rule": copy.deepcopy(rule.data)},
        )
    )