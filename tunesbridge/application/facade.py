from __future__ import annotations

import logging
from typing import Any, Optional

from tunesbridge.crosscutting.config import Settings
from tunesbridge.domain.collection import ItemCollection
from tunesbridge.domain.entities import Playlist, Source, Track
from tunesbridge.domain.ports import ROOT, Backend
from tunesbridge.domain.vocabulary import (
    BackendTag,
    Command,
    ElementKind,
    PlayerState,
    Prop,
    Relation,
)
from tunesbridge.infrastructure.selector import BackendSession, open_session

logger = logging.getLogger(__name__)


class Application:
    """Facade root for the running media player.

    Create one per process (or per API session) and pass it around; every
    entity it hands out shares its backend. Calls block until the host
    application answers and are not safe to issue concurrently.
    """

    def __init__(self, session: BackendSession):
        self._session = session

    @classmethod
    def open(cls, settings: Optional[Settings] = None, platform: Optional[str] = None) -> "Application":
        """Select a backend for this host and wrap it."""
        return cls(open_session(settings=settings, platform=platform))

    @property
    def _backend(self) -> Backend:
        return self._session.backend

    @property
    def backend_tag(self) -> BackendTag:
        return self._session.tag

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "Application":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _send(self, command: Command) -> None:
        logger.debug(f"Sending {command.value} via {self.backend_tag.value}")
        self._backend.command(ROOT, command)

    # Transport. Sent even when nothing is loaded; the player decides what happens.

    def play(self) -> None:
        self._send(Command.PLAY)

    def pause(self) -> None:
        """Pause playback. Depending on the current playlist the player may stop instead."""
        self._send(Command.PAUSE)

    def playpause(self) -> None:
        self._send(Command.PLAYPAUSE)

    toggle_play_pause = playpause

    def previous_track(self) -> None:
        """Go to the previous track; on the first track the player may stop."""
        self._send(Command.PREVIOUS_TRACK)

    def next_track(self) -> None:
        """Go to the next track; on the last track the player may stop."""
        self._send(Command.NEXT_TRACK)

    def stop(self) -> None:
        self._send(Command.STOP)

    # Properties. set_* return what the host reports after the write.

    @property
    def sound_volume(self) -> int:
        """Sound volume, 0..100."""
        return self._backend.get_property(ROOT, Prop.SOUND_VOLUME)

    @sound_volume.setter
    def sound_volume(self, value: int) -> None:
        self.set_sound_volume(value)

    def set_sound_volume(self, value: int) -> int:
        return self._backend.set_property(ROOT, Prop.SOUND_VOLUME, value)

    @property
    def mute(self) -> bool:
        return self._backend.get_property(ROOT, Prop.MUTE)

    @mute.setter
    def mute(self, value: bool) -> None:
        self.set_mute(value)

    def set_mute(self, value: bool) -> bool:
        return self._backend.set_property(ROOT, Prop.MUTE, value)

    @property
    def player_position(self) -> Any:
        """Position in the current track, in seconds."""
        return self._backend.get_property(ROOT, Prop.PLAYER_POSITION)

    @player_position.setter
    def player_position(self, value: Any) -> None:
        self.set_player_position(value)

    def set_player_position(self, value: Any) -> Any:
        return self._backend.set_property(ROOT, Prop.PLAYER_POSITION, value)

    @property
    def player_state(self) -> PlayerState:
        """Canonical player state.

        On COM, telling paused from stopped takes a second, racy read of the
        player position; see ``ComBackend.player_state``.
        """
        return self._backend.player_state()

    @property
    def coarse_player_state(self) -> int:
        """0 stopped or paused, 1 playing, 2 fast forwarding, 3 rewinding."""
        return self._backend.coarse_player_state()

    @property
    def current_track(self) -> Optional[Track]:
        """Track loaded in the player, or None when nothing is loaded."""
        backend = self._backend
        handle = backend.related(ROOT, Relation.CURRENT_TRACK)
        return None if handle is None else Track(handle, backend)

    @property
    def current_playlist(self) -> Optional[Playlist]:
        backend = self._backend
        handle = backend.related(ROOT, Relation.CURRENT_PLAYLIST)
        return None if handle is None else Playlist(handle, backend)

    @property
    def sources(self) -> ItemCollection[Source]:
        backend = self._backend
        return ItemCollection.wrap(backend.elements(ROOT, ElementKind.SOURCES), backend, Source)

    def __repr__(self) -> str:
        return f"Application(backend={self.backend_tag.value})"
