"""Behaviour every backend must share, replayed against each fake native shape."""
import pytest

from tunesbridge.application.facade import Application
from tunesbridge.domain.collection import ItemCollection
from tunesbridge.domain.entities import Playlist, Source, Track
from tunesbridge.domain.errors import SessionClosedError
from tunesbridge.domain.vocabulary import ItemType, PlayerState, PlaylistKind, RepeatMode
from tunesbridge.infrastructure.selector import BackendSession
from tunesbridge.tests.fakes import Library


def _open(build, library=None):
    backend, app = build(library or Library())
    return Application(BackendSession(backend)), app


# Native call recorded for each transport command, per backend.
_TRANSPORT_CALLS = {
    'appscript': {
        'play': 'play', 'pause': 'pause', 'playpause': 'playpause',
        'previous_track': 'previous_track', 'next_track': 'next_track', 'stop': 'stop',
    },
    'scriptingbridge': {
        'play': ('playOnce_', (False,)), 'pause': ('pause', ()), 'playpause': ('playpause', ()),
        'previous_track': ('previousTrack', ()), 'next_track': ('nextTrack', ()), 'stop': ('stop', ()),
    },
    'com': {
        'play': 'Play', 'pause': 'Pause', 'playpause': 'PlayPause',
        'previous_track': 'PreviousTrack', 'next_track': 'NextTrack', 'stop': 'Stop',
    },
}

_PLAY_PLAYLIST_CALLS = {
    'appscript': 'play',
    'scriptingbridge': ('playOnce_', (False,)),
    'com': 'PlayFirstTrack',
}


def test_playing_host_reports_playing(build):
    application, _ = _open(build)

    assert application.player_state is PlayerState.PLAYING
    assert application.coarse_player_state == 1


@pytest.mark.parametrize("state, coarse", [
    (PlayerState.STOPPED, 0),
    (PlayerState.PAUSED, 0),
    (PlayerState.PLAYING, 1),
    (PlayerState.FAST_FORWARDING, 2),
    (PlayerState.REWINDING, 3),
])
def test_every_player_state_is_canonical(build, state, coarse):
    application, _ = _open(build, Library(player_state=state))

    assert application.player_state is state
    assert application.coarse_player_state == coarse


@pytest.mark.parametrize("command", sorted(_TRANSPORT_CALLS['com']))
def test_transport_commands_reach_the_host(build, backend_name, command):
    application, app = _open(build)

    getattr(application, command)()

    assert app.calls == [_TRANSPORT_CALLS[backend_name][command]]


def test_application_properties(build):
    application, _ = _open(build)

    assert application.sound_volume == 50
    assert application.mute is False
    assert application.player_position == 42


def test_application_setters_return_written_value(build):
    application, _ = _open(build)

    assert application.set_sound_volume(30) == 30
    assert application.sound_volume == 30
    assert application.set_mute(True) is True
    application.mute = False
    assert application.mute is False


@pytest.mark.parametrize("backend_name", ['appscript', 'scriptingbridge'])
def test_setter_returns_value_confirmed_by_host(build):
    application, _ = _open(build, Library(max_volume=80))

    assert application.set_sound_volume(95) == 80


def test_current_track_fields(build):
    application, _ = _open(build)

    track = application.current_track

    assert isinstance(track, Track)
    assert track.item_type is ItemType.TRACK
    assert track.name == 'Song A'
    assert track.artist == 'Artist A'
    assert track.year == 2001
    assert track.database_id == 101
    assert track.kind is None


def test_nothing_loaded_has_no_current_track(build):
    application, _ = _open(build, Library(tracks=[], has_current_playlist=False))

    assert application.current_track is None
    assert application.current_playlist is None
    assert application.sound_volume == 50


def test_track_field_write_round_trips(build):
    application, _ = _open(build)
    track = application.current_track

    track.rating = 40

    assert application.current_track.rating == 40


def test_current_playlist_and_tracks(build):
    application, _ = _open(build)

    playlist = application.current_playlist
    tracks = playlist.tracks

    assert isinstance(playlist, Playlist)
    assert playlist.name == 'Road Trip'
    assert isinstance(tracks, ItemCollection)
    assert tracks.count == 3
    assert [t.name for t in tracks] == ['Song A', 'Song B', 'Song C']


def test_empty_playlist_counts_zero(build):
    application, _ = _open(build, Library(tracks=[]))

    tracks = application.current_playlist.tracks

    assert tracks.count == 0
    assert list(tracks) == []


@pytest.mark.parametrize("mode", [RepeatMode.OFF, RepeatMode.ONE, RepeatMode.ALL])
def test_song_repeat_round_trip(build, mode):
    application, _ = _open(build)
    playlist = application.current_playlist

    assert playlist.set_song_repeat(mode) is mode
    assert playlist.song_repeat is mode


@pytest.mark.parametrize("value, expected", [
    ('all', RepeatMode.ALL),
    ('ONE', RepeatMode.ONE),
    ('k.off', RepeatMode.OFF),
    (2, RepeatMode.ALL),
    ('1', RepeatMode.ONE),
])
def test_song_repeat_accepts_names_and_numbers(build, value, expected):
    application, _ = _open(build)
    playlist = application.current_playlist

    assert playlist.set_song_repeat(value) is expected
    assert playlist.song_repeat is expected


def test_song_repeat_unrecognised_input_cycles(build):
    application, _ = _open(build, Library(song_repeat=RepeatMode.OFF))
    playlist = application.current_playlist

    assert playlist.set_song_repeat('bogus') is RepeatMode.ALL
    assert playlist.set_song_repeat('bogus') is RepeatMode.ONE
    assert playlist.set_song_repeat('bogus') is RepeatMode.OFF


def test_parent_is_a_fresh_entity_each_time(build):
    application, _ = _open(build)
    playlist = application.current_playlist

    first = playlist.parent
    second = playlist.parent

    assert first is not second
    assert first.name == second.name == 'Mixes'


def test_top_level_playlist_has_no_parent(build):
    application, _ = _open(build)
    folder = application.current_playlist.parent

    assert folder.parent is None
    assert folder.name == 'Mixes'


def test_special_kind_read_and_write(build):
    application, _ = _open(build)
    playlist = application.current_playlist

    assert playlist.special_kind_index == 0
    assert playlist.special_kind == 'none'

    assert playlist.set_special_kind('podcasts') == 3
    assert playlist.special_kind == 'podcasts'

    playlist.special_kind = 'tv shows'
    assert playlist.special_kind_index == 8


def test_user_playlist_kind(build):
    application, _ = _open(build)

    assert application.current_playlist.kind is PlaylistKind.USER


@pytest.mark.parametrize("backend_name", ['com'])
def test_com_non_user_playlist_has_no_special_kind(build):
    application, _ = _open(build, Library(playlist_kind=PlaylistKind.LIBRARY, special_kind_index=3))
    playlist = application.current_playlist

    assert playlist.kind is PlaylistKind.LIBRARY
    assert playlist.special_kind_index == 0


def test_playlist_play(build, backend_name):
    application, app = _open(build)
    playlist = application.current_playlist

    playlist.play()

    assert playlist.ref.handle.calls == [_PLAY_PLAYLIST_CALLS[backend_name]]
    assert app.calls == []


def test_sources_and_their_playlists(build):
    application, _ = _open(build)

    sources = application.sources

    assert sources.count == 1
    source = sources[0]
    assert isinstance(source, Source)
    assert source.item_type is ItemType.SOURCE
    assert source.name == 'Library'
    assert [p.name for p in source.playlists] == ['Road Trip', 'Mixes']


def test_entities_share_the_session_backend(build):
    application, _ = _open(build)

    track = application.current_track
    playlist = application.current_playlist

    assert track.ref.backend is playlist.ref.backend
    assert track.ref.backend_tag is application.backend_tag


def test_closed_session_rejects_calls(build):
    application, _ = _open(build)
    application.close()

    with pytest.raises(SessionClosedError):
        application.sound_volume
    with pytest.raises(SessionClosedError):
        application.play()
