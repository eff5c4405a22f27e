from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from .collection import ItemCollection
from .normalization import (
    next_repeat_mode,
    parse_repeat_mode,
    repeat_mode_index,
    resolve_special_kind,
    special_kind_name,
)
from .ports import ROOT, Backend
from .vocabulary import (
    BackendTag,
    Command,
    ElementKind,
    ItemType,
    PlaylistKind,
    Prop,
    Relation,
    RepeatMode,
)


@dataclass(frozen=True, eq=False)
class ItemRef:
    """Identity shared by every entity variant: one native handle plus the active backend."""

    handle: Any
    backend: Backend

    def __post_init__(self) -> None:
        if self.handle is None or self.handle is ROOT:
            raise ValueError("An item needs a native handle of its own")

    @property
    def backend_tag(self) -> BackendTag:
        return self.backend.tag

    def get(self, prop: Prop) -> Any:
        return self.backend.get_property(self.handle, prop)

    def set(self, prop: Prop, value: Any) -> Any:
        """Write ``prop`` and return the value the host confirms."""
        return self.backend.set_property(self.handle, prop, value)


def _field(prop: Prop, doc: str, writable: bool = True) -> property:
    def getter(self):
        return self.ref.get(prop)

    def setter(self, value):
        self.ref.set(prop, value)

    return property(getter, setter if writable else None, doc=doc)


class Track:
    """A track inside the host application."""

    item_type = ItemType.TRACK

    def __init__(self, handle: Any, backend: Backend) -> None:
        self.ref = ItemRef(handle, backend)

    name = _field(Prop.NAME, "Track name.")
    index = _field(
        Prop.INDEX,
        "Native identifier (index on COM, persistent ID elsewhere); valid while the host runs.",
        writable=False,
    )
    artist = _field(Prop.ARTIST, "Artist name.")
    album = _field(Prop.ALBUM, "Album name.")
    rating = _field(Prop.RATING, "Rating, 0..100.")
    enabled = _field(Prop.ENABLED, "Whether the track is checked for playback.")
    year = _field(Prop.YEAR, "Release year.")
    genre = _field(Prop.GENRE, "Genre.")
    lyrics = _field(Prop.LYRICS, "Lyrics.")
    composer = _field(Prop.COMPOSER, "Composer.")
    track_number = _field(Prop.TRACK_NUMBER, "Position of the track on its album.")
    url = _field(Prop.URL, "Stream address of a URL track.")
    time = _field(Prop.TIME, "Length formatted as MM:SS.", writable=False)
    database_id = _field(
        Prop.DATABASE_ID,
        "ID shared by every playlist entry of the same file; runtime-only on COM.",
        writable=False,
    )
    played_count = _field(Prop.PLAYED_COUNT, "Number of times played.", writable=False)
    played_date = _field(Prop.PLAYED_DATE, "When the track was last played.", writable=False)
    skipped_count = _field(Prop.SKIPPED_COUNT, "Number of times skipped.", writable=False)
    skipped_date = _field(Prop.SKIPPED_DATE, "When the track was last skipped.", writable=False)

    @property
    def kind(self) -> None:
        # Native meaning differs between backends (integer file class vs. a
        # human readable string), so no canonical value is exposed.
        return None

    def set_field(self, field: Union[Prop, str], value: Any) -> Any:
        return self.ref.set(Prop(field), value)

    def __repr__(self) -> str:
        return f"Track(backend={self.ref.backend_tag.value})"


class Playlist:
    """A playlist; ``parent`` and ``tracks`` build fresh entities on every call."""

    item_type = ItemType.PLAYLIST

    def __init__(self, handle: Any, backend: Backend) -> None:
        self.ref = ItemRef(handle, backend)

    name = _field(Prop.NAME, "Playlist name.")
    index = _field(Prop.INDEX, "Native identifier.", writable=False)
    shuffle = _field(Prop.SHUFFLE, "Whether the playlist plays shuffled.")
    duration = _field(Prop.DURATION, "Total duration in seconds.", writable=False)
    time = _field(Prop.TIME, "Total duration formatted as MM:SS.", writable=False)

    @property
    def song_repeat(self) -> RepeatMode:
        return self.ref.backend.song_repeat(self.ref.handle)

    @song_repeat.setter
    def song_repeat(self, value: Any) -> None:
        self.set_song_repeat(value)

    def set_song_repeat(self, value: Any) -> RepeatMode:
        """Set the repeat mode from a mode, a name or a number.

        Input that matches none of those advances the current mode instead
        (off -> all -> one -> off), like pressing the player's repeat button.
        """
        mode = parse_repeat_mode(value)
        if mode is None:
            mode = next_repeat_mode(self.song_repeat)
        return self.ref.backend.set_song_repeat(self.ref.handle, mode)

    @property
    def song_repeat_index(self) -> int:
        """Repeat mode as 0 (off), 1 (one) or 2 (all)."""
        return repeat_mode_index(self.song_repeat)

    @property
    def special_kind_index(self) -> Optional[int]:
        return self.ref.backend.special_kind_index(self.ref.handle)

    @special_kind_index.setter
    def special_kind_index(self, value: int) -> None:
        self.set_special_kind(value)

    @property
    def special_kind(self) -> Optional[str]:
        """Name from the special-kind table, or None for kinds the table does not list."""
        return special_kind_name(self.special_kind_index)

    @special_kind.setter
    def special_kind(self, value: Any) -> None:
        self.set_special_kind(value)

    def set_special_kind(self, value: Any) -> Optional[int]:
        return self.ref.backend.set_special_kind_index(self.ref.handle, resolve_special_kind(value))

    @property
    def kind(self) -> PlaylistKind:
        return self.ref.backend.playlist_kind(self.ref.handle)

    @property
    def tracks(self) -> ItemCollection[Track]:
        backend = self.ref.backend
        return ItemCollection.wrap(backend.elements(self.ref.handle, ElementKind.TRACKS), backend, Track)

    @property
    def parent(self) -> Optional["Playlist"]:
        """Enclosing folder playlist, or None for a top-level playlist."""
        backend = self.ref.backend
        handle = backend.related(self.ref.handle, Relation.PARENT)
        return None if handle is None else Playlist(handle, backend)

    def play(self) -> None:
        """Start playing this playlist from its first track."""
        self.ref.backend.command(self.ref.handle, Command.PLAY_PLAYLIST)

    def set_field(self, field: Union[Prop, str], value: Any) -> Any:
        return self.ref.set(Prop(field), value)

    def __repr__(self) -> str:
        return f"Playlist(backend={self.ref.backend_tag.value})"


class Source:
    """A library, device, CD or shared source."""

    item_type = ItemType.SOURCE

    def __init__(self, handle: Any, backend: Backend) -> None:
        self.ref = ItemRef(handle, backend)

    name = _field(Prop.NAME, "Source name.")
    index = _field(Prop.INDEX, "Native identifier.", writable=False)
    capacity = _field(Prop.CAPACITY, "Total size in bytes, for fixed-size sources.", writable=False)

    @property
    def playlists(self) -> ItemCollection[Playlist]:
        backend = self.ref.backend
        return ItemCollection.wrap(backend.elements(self.ref.handle, ElementKind.PLAYLISTS), backend, Playlist)

    def set_field(self, field: Union[Prop, str], value: Any) -> Any:
        return self.ref.set(Prop(field), value)

    def __repr__(self) -> str:
        return f"Source(backend={self.ref.backend_tag.value})"


Item = Union[Track, Playlist, Source]
