from __future__ import annotations

import re
from typing import Any, Optional

from .vocabulary import (
    COARSE_PLAYER_STATES,
    REPEAT_MODES,
    SPECIAL_KINDS,
    PlayerState,
    RepeatMode,
)


_KEYWORD_PREFIX_PATTERN = re.compile(r"^k\.")
_SEPARATOR_PATTERN = re.compile(r"[\s_\-]+")

# Cyclic order the player's own repeat button follows.
_REPEAT_CYCLE = {
    RepeatMode.OFF: RepeatMode.ALL,
    RepeatMode.ALL: RepeatMode.ONE,
    RepeatMode.ONE: RepeatMode.OFF,
}


def symbol_text(value: Any) -> str:
    """Return the lower-case text of a native symbolic constant.

    Accepts keyword objects exposing ``name`` (appscript keywords), their
    ``k.name`` string form, or plain strings.
    """
    name = getattr(value, "name", None)
    text = name if isinstance(name, str) else str(value)
    text = _KEYWORD_PREFIX_PATTERN.sub("", text.strip())
    return text.lower()


def _joined(text: str, separator: str) -> str:
    return _SEPARATOR_PATTERN.sub(separator, text).strip(separator)


def player_state_from_symbol(value: Any) -> PlayerState:
    """Map a symbolic player state (``playing``, ``k.fast_forwarding``...) to the canonical state."""
    return PlayerState(_joined(symbol_text(value), "_"))


def coarse_player_state(state: PlayerState) -> int:
    return COARSE_PLAYER_STATES[state]


def repeat_mode_from_index(index: int) -> RepeatMode:
    return REPEAT_MODES[int(index)]


def repeat_mode_index(mode: RepeatMode) -> int:
    return REPEAT_MODES.index(mode)


def repeat_mode_from_symbol(value: Any) -> RepeatMode:
    return RepeatMode(symbol_text(value))


def parse_repeat_mode(value: Any) -> Optional[RepeatMode]:
    """Recognise repeat-mode setter input, or return None.

    Recognised forms are a ``RepeatMode``, a canonical name in any case (an
    optional ``k.`` prefix is ignored) and a number or its string form
    (``0`` off, ``1`` one, ``2`` all).
    """
    if isinstance(value, RepeatMode):
        return value
    text = symbol_text(value)
    for mode in REPEAT_MODES:
        if text == mode.value or text == str(repeat_mode_index(mode)):
            return mode
    return None


def next_repeat_mode(current: RepeatMode) -> RepeatMode:
    """Advance the way the player's repeat button does: off -> all -> one -> off."""
    return _REPEAT_CYCLE[current]


def special_kind_index(value: Any) -> Optional[int]:
    """Position of a native special-kind name in ``SPECIAL_KINDS``, or None when unlisted."""
    text = _joined(symbol_text(value), "-")
    try:
        return SPECIAL_KINDS.index(text)
    except ValueError:
        return None


def special_kind_name(index: Optional[int]) -> Optional[str]:
    if index is None:
        return None
    return SPECIAL_KINDS[index]


def resolve_special_kind(value: Any) -> int:
    """Turn setter input (table index or name) into a table index."""
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value < len(SPECIAL_KINDS):
            return value
        raise ValueError(f"Special kind index out of range: {value}")
    index = special_kind_index(value)
    if index is None:
        raise ValueError(f"Unknown special kind: {value!r}")
    return index
