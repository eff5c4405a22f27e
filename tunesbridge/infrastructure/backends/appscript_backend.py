import logging
from typing import Any, List, Optional

from tunesbridge.crosscutting.config import Settings
from tunesbridge.domain.errors import BackendUnavailableError, SessionClosedError
from tunesbridge.domain.normalization import (
    coarse_player_state,
    player_state_from_symbol,
    repeat_mode_from_symbol,
    special_kind_index,
)
from tunesbridge.domain.ports import ROOT, BulkColumnBackend
from tunesbridge.domain.vocabulary import (
    BackendTag,
    Command,
    ElementKind,
    PlayerState,
    PlaylistKind,
    Prop,
    Relation,
    RepeatMode,
)

logger = logging.getLogger(__name__)


_PROPERTY_NAMES = {
    Prop.SOUND_VOLUME: 'sound_volume',
    Prop.MUTE: 'mute',
    Prop.PLAYER_POSITION: 'player_position',
    Prop.NAME: 'name',
    Prop.INDEX: 'persistent_ID',
    Prop.ARTIST: 'artist',
    Prop.ALBUM: 'album',
    Prop.RATING: 'rating',
    Prop.ENABLED: 'enabled',
    Prop.YEAR: 'year',
    Prop.GENRE: 'genre',
    Prop.LYRICS: 'lyrics',
    Prop.COMPOSER: 'composer',
    Prop.TIME: 'time',
    Prop.TRACK_NUMBER: 'track_number',
    Prop.DATABASE_ID: 'database_ID',
    Prop.PLAYED_COUNT: 'played_count',
    Prop.PLAYED_DATE: 'played_date',
    Prop.SKIPPED_COUNT: 'skipped_count',
    Prop.SKIPPED_DATE: 'skipped_date',
    Prop.URL: 'address',
    Prop.SHUFFLE: 'shuffle',
    Prop.DURATION: 'duration',
    Prop.CAPACITY: 'capacity',
}

_COMMANDS = {
    Command.PLAY: 'play',
    Command.PAUSE: 'pause',
    Command.PLAYPAUSE: 'playpause',
    Command.PREVIOUS_TRACK: 'previous_track',
    Command.NEXT_TRACK: 'next_track',
    Command.STOP: 'stop',
    Command.PLAY_PLAYLIST: 'play',
}

_RELATIONS = {
    Relation.CURRENT_TRACK: 'current_track',
    Relation.CURRENT_PLAYLIST: 'current_playlist',
    Relation.PARENT: 'parent',
}

# element reference name, keyword used as the ``each`` argument of count
_ELEMENTS = {
    ElementKind.TRACKS: ('tracks', 'track'),
    ElementKind.PLAYLISTS: ('playlists', 'playlist'),
    ElementKind.SOURCES: ('sources', 'source'),
}

# iTunes dictionary spelling of each special kind, by position in SPECIAL_KINDS.
# Keywords are case-sensitive.
SPECIAL_KIND_KEYWORDS = (
    'none',
    'Music',
    'Party_Shuffle',
    'Podcasts',
    'folder',
    'Videos',
    'Music',
    'Movies',
    'TV_Shows',
    'Audiobooks',
)


class AppscriptBackend(BulkColumnBackend):
    """appscript adapter: every property is a reference that must be read with get()."""

    tag = BackendTag.APPSCRIPT
    supports_bulk_columns = True

    def __init__(self, app: Any, keywords: Any):
        """Initialize backend.

        Args:
            app: Application reference returned by ``appscript.app()``
            keywords: Keyword namespace (``appscript.k``) used to build symbolic values
        """
        self._app = app
        self._k = keywords

    @property
    def root(self) -> Any:
        if self._app is None:
            raise SessionClosedError("appscript session has been closed")
        return self._app

    def _target(self, handle: Any) -> Any:
        return self.root if handle is ROOT else handle

    def _reference(self, handle: Any, prop: Prop) -> Any:
        return getattr(self._target(handle), _PROPERTY_NAMES[prop])

    def command(self, handle: Any, command: Command) -> None:
        logger.debug(f"appscript: sending {command.value}")
        getattr(self._target(handle), _COMMANDS[command])()

    def get_property(self, handle: Any, prop: Prop) -> Any:
        return self._reference(handle, prop).get()

    def set_property(self, handle: Any, prop: Prop, value: Any) -> Any:
        reference = self._reference(handle, prop)
        reference.set(value)
        return reference.get()

    def related(self, handle: Any, relation: Relation) -> Any:
        return getattr(self._target(handle), _RELATIONS[relation]).get()

    def elements(self, handle: Any, kind: ElementKind) -> List[Any]:
        name, _ = _ELEMENTS[kind]
        return list(getattr(self._target(handle), name).get())

    def count_elements(self, handle: Any, kind: ElementKind) -> int:
        name, keyword = _ELEMENTS[kind]
        return int(getattr(self._target(handle), name).count(each=getattr(self._k, keyword)))

    def column(self, handle: Any, prop: Prop) -> List[Any]:
        """One query returning ``prop`` for every track of the playlist."""
        return list(getattr(handle.tracks, _PROPERTY_NAMES[prop]).get())

    def player_state(self) -> PlayerState:
        return player_state_from_symbol(self.root.player_state.get())

    def coarse_player_state(self) -> int:
        return coarse_player_state(self.player_state())

    def song_repeat(self, handle: Any) -> RepeatMode:
        return repeat_mode_from_symbol(handle.song_repeat.get())

    def set_song_repeat(self, handle: Any, mode: RepeatMode) -> RepeatMode:
        handle.song_repeat.set(getattr(self._k, mode.value))
        return self.song_repeat(handle)

    def special_kind_index(self, handle: Any) -> Optional[int]:
        return special_kind_index(handle.special_kind.get())

    def set_special_kind_index(self, handle: Any, index: int) -> Optional[int]:
        handle.special_kind.set(getattr(self._k, SPECIAL_KIND_KEYWORDS[index]))
        return self.special_kind_index(handle)

    def playlist_kind(self, handle: Any) -> PlaylistKind:
        # Not exposed by the scripting dictionary; every playlist reports as a user playlist.
        return PlaylistKind.USER

    def close(self) -> None:
        self._app = None


def open_appscript_backend(settings: Settings) -> AppscriptBackend:
    """Load appscript and attach to the configured application.

    Raises:
        ImportError: appscript is not installed
        BackendUnavailableError: the application could not be attached
    """
    import appscript

    try:
        app = appscript.app(settings.app_name)
    except Exception as e:
        raise BackendUnavailableError(
            BackendTag.APPSCRIPT.value,
            f"appscript could not attach to '{settings.app_name}': {e}",
        ) from e
    logger.info(f"appscript attached to '{settings.app_name}'")
    return AppscriptBackend(app, appscript.k)
