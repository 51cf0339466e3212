"""SGR (mode 1006) mouse report parsing.

Terminals with SGR mouse reporting enabled send ``ESC [ < b ; x ; y M`` for
presses, drags and wheel notches, and the same with a final ``m`` for
releases.  ``x`` and ``y`` are 1-based screen cells.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, IntEnum

# Enable button tracking + drag motion + SGR extended coordinates
ENABLE_MOUSE = "\x1b[?1002h\x1b[?1006h"
DISABLE_MOUSE = "\x1b[?1006l\x1b[?1002l"

_SGR_MOUSE_RE = re.compile(r"\x1b\[<(\d+);(\d+);(\d+)([Mm])")

_MOTION_BIT = 32
_WHEEL_BIT = 64
_MODIFIER_BITS = 4 | 8 | 16


class MouseButton(IntEnum):
    LEFT = 0
    MIDDLE = 1
    RIGHT = 2
    NONE = 3
    WHEEL_UP = 64
    WHEEL_DOWN = 65


class MouseAction(Enum):
    PRESS = "press"
    DRAG = "drag"
    RELEASE = "release"
    WHEEL = "wheel"


@dataclass(frozen=True)
class MouseEvent:
    """A decoded mouse report with 0-based screen coordinates."""

    action: MouseAction
    button: MouseButton
    x: int
    y: int
    shift: bool = False
    alt: bool = False
    ctrl: bool = False


def parse_mouse_event(data: str) -> MouseEvent | None:
    """Decode a single SGR mouse report; returns ``None`` for anything else."""
    m = _SGR_MOUSE_RE.fullmatch(data)
    if m is None:
        return None

    code = int(m.group(1))
    x = int(m.group(2)) - 1
    y = int(m.group(3)) - 1
    released = m.group(4) == "m"

    shift = bool(code & 4)
    alt = bool(code & 8)
    ctrl = bool(code & 16)
    base = code & ~(_MODIFIER_BITS | _MOTION_BIT)

    if base & 128:
        # Extra buttons (back / forward)
        return None
    if base & _WHEEL_BIT:
        if base & 0b10:
            # Horizontal wheel
            return None
        button = MouseButton.WHEEL_UP if (base & 0b11) == 0 else MouseButton.WHEEL_DOWN
        action = MouseAction.WHEEL
    else:
        button = MouseButton(base & 0b11)
        if released:
            action = MouseAction.RELEASE
        elif code & _MOTION_BIT:
            action = MouseAction.DRAG
        else:
            action = MouseAction.PRESS

    return MouseEvent(action, button, max(0, x), max(0, y), shift=shift, alt=alt, ctrl=ctrl)


def iter_mouse_events(data: str):
    """Yield every mouse event in *data* (a chunk may carry several reports)."""
    for m in _SGR_MOUSE_RE.finditer(data):
        event = parse_mouse_event(m.group(0))
        if event is not None:
            yield event
