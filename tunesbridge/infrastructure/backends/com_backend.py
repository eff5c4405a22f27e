import logging
from typing import Any, List, Optional, Tuple, Type

from tunesbridge.crosscutting.config import Settings
from tunesbridge.domain.errors import BackendUnavailableError, SessionClosedError
from tunesbridge.domain.normalization import repeat_mode_from_index, repeat_mode_index
from tunesbridge.domain.ports import ROOT, Backend
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
    Prop.SOUND_VOLUME: 'SoundVolume',
    Prop.MUTE: 'Mute',
    Prop.PLAYER_POSITION: 'PlayerPosition',
    Prop.NAME: 'Name',
    Prop.INDEX: 'Index',
    Prop.ARTIST: 'Artist',
    Prop.ALBUM: 'Album',
    Prop.RATING: 'Rating',
    Prop.ENABLED: 'Enabled',
    Prop.YEAR: 'Year',
    Prop.GENRE: 'Genre',
    Prop.LYRICS: 'Lyrics',
    Prop.COMPOSER: 'Composer',
    Prop.TIME: 'Time',
    Prop.TRACK_NUMBER: 'TrackNumber',
    Prop.DATABASE_ID: 'TrackDatabaseID',
    Prop.PLAYED_COUNT: 'PlayedCount',
    Prop.PLAYED_DATE: 'PlayedDate',
    Prop.SKIPPED_COUNT: 'SkippedCount',
    Prop.SKIPPED_DATE: 'SkippedDate',
    Prop.URL: 'URL',
    Prop.SHUFFLE: 'Shuffle',
    Prop.DURATION: 'Duration',
    Prop.CAPACITY: 'Capacity',
}

_COMMANDS = {
    Command.PLAY: 'Play',
    Command.PAUSE: 'Pause',
    Command.PLAYPAUSE: 'PlayPause',
    Command.PREVIOUS_TRACK: 'PreviousTrack',
    Command.NEXT_TRACK: 'NextTrack',
    Command.STOP: 'Stop',
    Command.PLAY_PLAYLIST: 'PlayFirstTrack',
}

_RELATIONS = {
    Relation.CURRENT_TRACK: 'CurrentTrack',
    Relation.CURRENT_PLAYLIST: 'CurrentPlaylist',
    Relation.PARENT: 'Parent',
}

_ELEMENTS = {
    ElementKind.TRACKS: 'Tracks',
    ElementKind.PLAYLISTS: 'Playlists',
    ElementKind.SOURCES: 'Sources',
}

# ITPlayerState values other than 0 (stopped or paused)
_MOVING_STATES = {
    1: PlayerState.PLAYING,
    2: PlayerState.FAST_FORWARDING,
    3: PlayerState.REWINDING,
}


class ComBackend(Backend):
    """COM automation adapter: plain properties, 1-based collections, integer enums."""

    tag = BackendTag.COM
    supports_bulk_columns = False

    def __init__(self, app: Any, error_types: Tuple[Type[BaseException], ...] = (Exception,)):
        """Initialize backend.

        Args:
            app: Dispatch object for the application (IiTunes)
            error_types: Exception types the COM layer raises for rejected calls
        """
        self._app = app
        self._error_types = error_types

    @property
    def root(self) -> Any:
        if self._app is None:
            raise SessionClosedError("COM session has been closed")
        return self._app

    def _target(self, handle: Any) -> Any:
        return self.root if handle is ROOT else handle

    def command(self, handle: Any, command: Command) -> None:
        logger.debug(f"COM: calling {_COMMANDS[command]}")
        getattr(self._target(handle), _COMMANDS[command])()

    def get_property(self, handle: Any, prop: Prop) -> Any:
        return getattr(self._target(handle), _PROPERTY_NAMES[prop])

    def set_property(self, handle: Any, prop: Prop, value: Any) -> Any:
        # Property puts are synchronous; a rejected value raises instead of being ignored.
        setattr(self._target(handle), _PROPERTY_NAMES[prop], value)
        return value

    def related(self, handle: Any, relation: Relation) -> Any:
        return getattr(self._target(handle), _RELATIONS[relation])

    def elements(self, handle: Any, kind: ElementKind) -> List[Any]:
        collection = getattr(self._target(handle), _ELEMENTS[kind])
        return [collection.Item(i) for i in range(1, collection.Count + 1)]

    def count_elements(self, handle: Any, kind: ElementKind) -> int:
        return int(getattr(self._target(handle), _ELEMENTS[kind]).Count)

    def coarse_player_state(self) -> int:
        return int(self.root.PlayerState)

    def player_state(self) -> PlayerState:
        """Canonical player state.

        COM reports stopped and paused alike. Reading the player position
        fails while stopped, so a successful read means paused. The two reads
        are not atomic: a state change in between can misreport.
        """
        code = self.coarse_player_state()
        if code in _MOVING_STATES:
            return _MOVING_STATES[code]
        try:
            _ = self.root.PlayerPosition
        except self._error_types:
            return PlayerState.STOPPED
        return PlayerState.PAUSED

    def song_repeat(self, handle: Any) -> RepeatMode:
        return repeat_mode_from_index(handle.SongRepeat)

    def set_song_repeat(self, handle: Any, mode: RepeatMode) -> RepeatMode:
        handle.SongRepeat = repeat_mode_index(mode)
        return mode

    def special_kind_index(self, handle: Any) -> Optional[int]:
        # Only user playlists carry SpecialKind.
        if int(handle.Kind) != PlaylistKind.USER:
            return 0
        return int(handle.SpecialKind)

    def set_special_kind_index(self, handle: Any, index: int) -> Optional[int]:
        handle.SpecialKind = index
        return index

    def playlist_kind(self, handle: Any) -> PlaylistKind:
        return PlaylistKind(int(handle.Kind))

    def close(self) -> None:
        self._app = None


def open_com_backend(settings: Settings) -> ComBackend:
    """Dispatch the configured COM server.

    Raises:
        ImportError: pywin32 is not installed
        BackendUnavailableError: the COM server could not be created
    """
    import pywintypes
    import win32com.client

    try:
        app = win32com.client.Dispatch(settings.com_prog_id)
    except pywintypes.com_error as e:
        raise BackendUnavailableError(
            BackendTag.COM.value,
            f"Could not dispatch COM server '{settings.com_prog_id}': {e}",
        ) from e
    logger.info(f"COM attached to '{settings.com_prog_id}'")
    return ComBackend(app, error_types=(pywintypes.com_error,))
