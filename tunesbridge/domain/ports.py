from __future__ import annotations

from typing import Any, List, Optional, Protocol

from .vocabulary import (
    BackendTag,
    Command,
    ElementKind,
    PlayerState,
    PlaylistKind,
    Prop,
    Relation,
    RepeatMode,
)


class _RootHandle:
    """Marker handle addressing the application object itself."""

    def __repr__(self) -> str:
        return "ROOT"


ROOT = _RootHandle()


class Backend(Protocol):
    """Port defining the capability contract every automation backend implements.

    Handles are opaque native objects, or ``ROOT`` for the application
    itself. A native null is never a handle: ``related`` returns ``None``
    when the host has no such object, and callers must not pass it back.
    Implementations translate native representations into
    the canonical vocabulary and must not swallow native call failures.
    """

    tag: BackendTag
    supports_bulk_columns: bool

    @property
    def root(self) -> Any:
        """Top-level native application handle."""

    def command(self, handle: Any, command: Command) -> None:
        """Send a fire-and-forget command (transport, or play on a playlist)."""

    def get_property(self, handle: Any, prop: Prop) -> Any:
        """Read one canonical property from the native object."""

    def set_property(self, handle: Any, prop: Prop, value: Any) -> Any:
        """Write one canonical property and return the host-confirmed value."""

    def related(self, handle: Any, relation: Relation) -> Any:
        """Fresh native handle related to ``handle`` (current track, parent...), or None."""

    def elements(self, handle: Any, kind: ElementKind) -> List[Any]:
        """Snapshot the native element handles of ``handle`` in native order."""

    def count_elements(self, handle: Any, kind: ElementKind) -> int:
        """Number of elements without materialising their handles."""

    def player_state(self) -> PlayerState:
        """Canonical player state."""

    def coarse_player_state(self) -> int:
        """Coarse 0..3 player state code (0 is stopped or paused)."""

    def song_repeat(self, handle: Any) -> RepeatMode:
        """Repeat mode of a playlist."""

    def set_song_repeat(self, handle: Any, mode: RepeatMode) -> RepeatMode:
        """Store a repeat mode and return the confirmed mode."""

    def special_kind_index(self, handle: Any) -> Optional[int]:
        """Position of the playlist's special kind in the canonical table."""

    def set_special_kind_index(self, handle: Any, index: int) -> Optional[int]:
        """Store a special kind given as a table index."""

    def playlist_kind(self, handle: Any) -> PlaylistKind:
        """Coarse playlist classification."""

    def close(self) -> None:
        """Release the native root handle."""


class BulkColumnBackend(Backend, Protocol):
    """Backend that can read one property of every track of a playlist in a single query.

    Only backends with ``supports_bulk_columns`` set implement it.
    """

    def column(self, handle: Any, prop: Prop) -> List[Any]:
        """Read ``prop`` of every track of the playlist ``handle``, in native order."""
