from __future__ import annotations

from enum import Enum, IntEnum
from typing import Tuple


class BackendTag(str, Enum):
    """Automation interface bound for the lifetime of a session."""

    APPSCRIPT = "appscript"
    SCRIPTING_BRIDGE = "scriptingbridge"
    COM = "com"


class PlayerState(str, Enum):
    STOPPED = "stopped"
    PAUSED = "paused"
    PLAYING = "playing"
    FAST_FORWARDING = "fast_forwarding"
    REWINDING = "rewinding"


# Coarse 0..3 code the COM interface reports; 0 covers both stopped and paused.
COARSE_PLAYER_STATES = {
    PlayerState.STOPPED: 0,
    PlayerState.PAUSED: 0,
    PlayerState.PLAYING: 1,
    PlayerState.FAST_FORWARDING: 2,
    PlayerState.REWINDING: 3,
}


class RepeatMode(str, Enum):
    OFF = "off"
    ONE = "one"
    ALL = "all"


# Positional order matches the 0/1/2 numeric encoding.
REPEAT_MODES: Tuple[RepeatMode, ...] = (RepeatMode.OFF, RepeatMode.ONE, RepeatMode.ALL)


# Indexed positionally; "music" appears twice and lookups resolve to the first.
SPECIAL_KINDS: Tuple[str, ...] = (
    "none",
    "music",
    "party-shuffle",
    "podcasts",
    "folder",
    "videos",
    "music",
    "movies",
    "tv-shows",
    "audiobooks",
)


class PlaylistKind(IntEnum):
    UNKNOWN = 0
    LIBRARY = 1
    USER = 2
    CD = 3
    DEVICE = 4
    RADIO = 5


class ItemType(str, Enum):
    """Tag distinguishing the entity variants of the Item sum type."""

    TRACK = "track"
    PLAYLIST = "playlist"
    SOURCE = "source"


class Prop(str, Enum):
    """Canonical property names, mapped to native names by each backend."""

    # application
    SOUND_VOLUME = "sound_volume"
    MUTE = "mute"
    PLAYER_POSITION = "player_position"

    # every item
    NAME = "name"
    INDEX = "index"

    # track
    ARTIST = "artist"
    ALBUM = "album"
    RATING = "rating"
    ENABLED = "enabled"
    YEAR = "year"
    GENRE = "genre"
    LYRICS = "lyrics"
    COMPOSER = "composer"
    TIME = "time"
    TRACK_NUMBER = "track_number"
    DATABASE_ID = "database_id"
    PLAYED_COUNT = "played_count"
    PLAYED_DATE = "played_date"
    SKIPPED_COUNT = "skipped_count"
    SKIPPED_DATE = "skipped_date"
    URL = "url"

    # playlist
    SHUFFLE = "shuffle"
    DURATION = "duration"

    # source
    CAPACITY = "capacity"


class Command(str, Enum):
    PLAY = "play"
    PAUSE = "pause"
    PLAYPAUSE = "playpause"
    PREVIOUS_TRACK = "previous_track"
    NEXT_TRACK = "next_track"
    STOP = "stop"
    PLAY_PLAYLIST = "play_playlist"


class Relation(str, Enum):
    CURRENT_TRACK = "current_track"
    CURRENT_PLAYLIST = "current_playlist"
    PARENT = "parent"


class ElementKind(str, Enum):
    TRACKS = "tracks"
    PLAYLISTS = "playlists"
    SOURCES = "sources"
