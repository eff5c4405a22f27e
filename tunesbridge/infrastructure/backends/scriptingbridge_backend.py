import logging
from typing import Any, Dict, List, Optional, Union

from tunesbridge.crosscutting.config import Settings
from tunesbridge.domain.errors import BackendUnavailableError, SessionClosedError
from tunesbridge.domain.normalization import coarse_player_state
from tunesbridge.domain.ports import ROOT, Backend
from tunesbridge.domain.vocabulary import (
    SPECIAL_KINDS,
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


def fourcc(code: str) -> int:
    """Integer value of a four-character Apple Event code such as 'kPSP'."""
    raw = code.encode('mac_roman')
    if len(raw) != 4:
        raise ValueError(f"Four-character code expected, got {code!r}")
    return int.from_bytes(raw, 'big')


def _code(value: Union[int, str]) -> int:
    return fourcc(value) if isinstance(value, str) else int(value)


# Enumerated constants from the player's scripting definition (iTunesEPlS, iTunesERpt, iTunesESpK).
PLAYER_STATE_CODES: Dict[int, PlayerState] = {
    fourcc('kPSS'): PlayerState.STOPPED,
    fourcc('kPSP'): PlayerState.PLAYING,
    fourcc('kPSp'): PlayerState.PAUSED,
    fourcc('kPSF'): PlayerState.FAST_FORWARDING,
    fourcc('kPSR'): PlayerState.REWINDING,
}

REPEAT_CODES: Dict[RepeatMode, int] = {
    RepeatMode.OFF: fourcc('kRpO'),
    RepeatMode.ONE: fourcc('kRp1'),
    RepeatMode.ALL: fourcc('kAll'),
}

SPECIAL_KIND_CODES: Dict[str, int] = {
    'none': fourcc('kNon'),
    'music': fourcc('kSpZ'),
    'party-shuffle': fourcc('kSpS'),
    'podcasts': fourcc('kSpP'),
    'folder': fourcc('kSpF'),
    'videos': fourcc('kSpV'),
    'movies': fourcc('kSpI'),
    'tv-shows': fourcc('kSpT'),
    'audiobooks': fourcc('kSpA'),
}

_REPEAT_MODES_BY_CODE = {code: mode for mode, code in REPEAT_CODES.items()}
_SPECIAL_KIND_NAMES_BY_CODE = {code: name for name, code in SPECIAL_KIND_CODES.items()}

_PROPERTY_NAMES = {
    Prop.SOUND_VOLUME: 'soundVolume',
    Prop.MUTE: 'mute',
    Prop.PLAYER_POSITION: 'playerPosition',
    Prop.NAME: 'name',
    Prop.INDEX: 'persistentID',
    Prop.ARTIST: 'artist',
    Prop.ALBUM: 'album',
    Prop.RATING: 'rating',
    Prop.ENABLED: 'enabled',
    Prop.YEAR: 'year',
    Prop.GENRE: 'genre',
    Prop.LYRICS: 'lyrics',
    Prop.COMPOSER: 'composer',
    Prop.TIME: 'time',
    Prop.TRACK_NUMBER: 'trackNumber',
    Prop.DATABASE_ID: 'databaseID',
    Prop.PLAYED_COUNT: 'playedCount',
    Prop.PLAYED_DATE: 'playedDate',
    Prop.SKIPPED_COUNT: 'skippedCount',
    Prop.SKIPPED_DATE: 'skippedDate',
    Prop.URL: 'address',
    Prop.SHUFFLE: 'shuffle',
    Prop.DURATION: 'duration',
    Prop.CAPACITY: 'capacity',
}

# selector, positional arguments
_COMMANDS = {
    Command.PLAY: ('playOnce_', (False,)),
    Command.PAUSE: ('pause', ()),
    Command.PLAYPAUSE: ('playpause', ()),
    Command.PREVIOUS_TRACK: ('previousTrack', ()),
    Command.NEXT_TRACK: ('nextTrack', ()),
    Command.STOP: ('stop', ()),
    Command.PLAY_PLAYLIST: ('playOnce_', (False,)),
}

_RELATIONS = {
    Relation.CURRENT_TRACK: 'currentTrack',
    Relation.CURRENT_PLAYLIST: 'currentPlaylist',
    Relation.PARENT: 'parent',
}

_ELEMENTS = {
    ElementKind.TRACKS: 'tracks',
    ElementKind.PLAYLISTS: 'playlists',
    ElementKind.SOURCES: 'sources',
}


def _setter(name: str) -> str:
    return f"set{name[0].upper()}{name[1:]}_"


class ScriptingBridgeBackend(Backend):
    """ScriptingBridge adapter: properties are accessor methods, enums are four-char codes."""

    tag = BackendTag.SCRIPTING_BRIDGE
    supports_bulk_columns = False

    def __init__(self, app: Any):
        self._app = app

    @property
    def root(self) -> Any:
        if self._app is None:
            raise SessionClosedError("ScriptingBridge session has been closed")
        return self._app

    def _target(self, handle: Any) -> Any:
        return self.root if handle is ROOT else handle

    def _read(self, target: Any, name: str) -> Any:
        return getattr(target, name)()

    def _write(self, target: Any, name: str, value: Any) -> Any:
        getattr(target, _setter(name))(value)
        return self._read(target, name)

    def command(self, handle: Any, command: Command) -> None:
        selector, args = _COMMANDS[command]
        logger.debug(f"ScriptingBridge: sending {selector}")
        getattr(self._target(handle), selector)(*args)

    def get_property(self, handle: Any, prop: Prop) -> Any:
        return self._read(self._target(handle), _PROPERTY_NAMES[prop])

    def set_property(self, handle: Any, prop: Prop, value: Any) -> Any:
        return self._write(self._target(handle), _PROPERTY_NAMES[prop], value)

    def related(self, handle: Any, relation: Relation) -> Any:
        return self._read(self._target(handle), _RELATIONS[relation])

    def elements(self, handle: Any, kind: ElementKind) -> List[Any]:
        return list(self._read(self._target(handle), _ELEMENTS[kind]))

    def count_elements(self, handle: Any, kind: ElementKind) -> int:
        return len(self._read(self._target(handle), _ELEMENTS[kind]))

    def player_state(self) -> PlayerState:
        return PLAYER_STATE_CODES[_code(self.root.playerState())]

    def coarse_player_state(self) -> int:
        return coarse_player_state(self.player_state())

    def song_repeat(self, handle: Any) -> RepeatMode:
        return _REPEAT_MODES_BY_CODE[_code(handle.songRepeat())]

    def set_song_repeat(self, handle: Any, mode: RepeatMode) -> RepeatMode:
        handle.setSongRepeat_(REPEAT_CODES[mode])
        return self.song_repeat(handle)

    def special_kind_index(self, handle: Any) -> Optional[int]:
        name = _SPECIAL_KIND_NAMES_BY_CODE.get(_code(handle.specialKind()))
        if name is None:
            return None
        return SPECIAL_KINDS.index(name)

    def set_special_kind_index(self, handle: Any, index: int) -> Optional[int]:
        handle.setSpecialKind_(SPECIAL_KIND_CODES[SPECIAL_KINDS[index]])
        return self.special_kind_index(handle)

    def playlist_kind(self, handle: Any) -> PlaylistKind:
        # Not exposed by the scripting dictionary; every playlist reports as a user playlist.
        return PlaylistKind.USER

    def close(self) -> None:
        self._app = None


def open_scriptingbridge_backend(settings: Settings) -> ScriptingBridgeBackend:
    """Load the ScriptingBridge framework and attach to the configured bundle.

    Raises:
        ImportError: PyObjC's ScriptingBridge bindings are not installed
        BackendUnavailableError: no application with the bundle identifier exists
    """
    from ScriptingBridge import SBApplication

    app = SBApplication.applicationWithBundleIdentifier_(settings.bundle_id)
    if app is None:
        raise BackendUnavailableError(
            BackendTag.SCRIPTING_BRIDGE.value,
            f"No application with bundle identifier '{settings.bundle_id}'",
        )
    logger.info(f"ScriptingBridge attached to '{settings.bundle_id}'")
    return ScriptingBridgeBackend(app)
