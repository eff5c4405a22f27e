import pytest
from unittest.mock import Mock, patch

from tunesbridge.application.facade import Application
from tunesbridge.domain.entities import Playlist, Source, Track
from tunesbridge.domain.errors import SessionClosedError
from tunesbridge.domain.ports import ROOT
from tunesbridge.domain.vocabulary import (
    BackendTag,
    Command,
    ElementKind,
    PlayerState,
    Prop,
    Relation,
)
from tunesbridge.infrastructure.selector import BackendSession


class TestApplication:
    """Tests for the Application facade."""

    def setup_method(self):
        """Set up test fixtures."""
        self.backend = Mock()
        self.backend.tag = BackendTag.APPSCRIPT
        self.session = BackendSession(self.backend)
        self.application = Application(self.session)

    @pytest.mark.parametrize("method, command", [
        ('play', Command.PLAY),
        ('pause', Command.PAUSE),
        ('playpause', Command.PLAYPAUSE),
        ('toggle_play_pause', Command.PLAYPAUSE),
        ('previous_track', Command.PREVIOUS_TRACK),
        ('next_track', Command.NEXT_TRACK),
        ('stop', Command.STOP),
    ])
    def test_transport_commands(self, method, command):
        """Test transport commands are sent to the application root."""
        getattr(self.application, method)()
        self.backend.command.assert_called_once_with(ROOT, command)

    def test_sound_volume(self):
        """Test reading and writing the sound volume."""
        self.backend.get_property.return_value = 70
        self.backend.set_property.return_value = 65

        assert self.application.sound_volume == 70
        assert self.application.set_sound_volume(65) == 65
        self.backend.get_property.assert_called_once_with(ROOT, Prop.SOUND_VOLUME)
        self.backend.set_property.assert_called_once_with(ROOT, Prop.SOUND_VOLUME, 65)

    def test_property_assignment_writes_through(self):
        """Test assigning facade properties writes to the root."""
        self.application.mute = True
        self.application.player_position = 12

        assert self.backend.set_property.call_args_list[0].args == (ROOT, Prop.MUTE, True)
        assert self.backend.set_property.call_args_list[1].args == (ROOT, Prop.PLAYER_POSITION, 12)

    def test_player_state(self):
        """Test player state comes from the backend."""
        self.backend.player_state.return_value = PlayerState.PAUSED
        self.backend.coarse_player_state.return_value = 0

        assert self.application.player_state is PlayerState.PAUSED
        assert self.application.coarse_player_state == 0

    def test_current_track_and_playlist(self):
        """Test current entities wrap the related handles."""
        self.backend.related.side_effect = lambda handle, relation: relation.value

        track = self.application.current_track
        playlist = self.application.current_playlist

        assert isinstance(track, Track)
        assert track.ref.handle == Relation.CURRENT_TRACK.value
        assert isinstance(playlist, Playlist)
        assert playlist.ref.handle == Relation.CURRENT_PLAYLIST.value

    def test_nothing_loaded(self):
        """Test a missing current track or playlist is None, never the application."""
        self.backend.related.return_value = None

        assert self.application.current_track is None
        assert self.application.current_playlist is None
        self.backend.get_property.assert_not_called()

    def test_current_playlist_is_fresh_each_call(self):
        """Test each access builds a new entity."""
        self.backend.related.return_value = 'p'
        assert self.application.current_playlist is not self.application.current_playlist

    def test_sources(self):
        """Test sources are wrapped in order."""
        self.backend.elements.return_value = ['s1', 's2']

        sources = self.application.sources

        assert [s.ref.handle for s in sources] == ['s1', 's2']
        assert all(isinstance(s, Source) for s in sources)
        self.backend.elements.assert_called_once_with(ROOT, ElementKind.SOURCES)

    def test_backend_tag_and_repr(self):
        """Test backend tag reporting."""
        assert self.application.backend_tag is BackendTag.APPSCRIPT
        assert repr(self.application) == "Application(backend=appscript)"

    def test_context_manager_closes_session(self):
        """Test leaving the context closes the session once."""
        with self.application as application:
            assert application is self.application

        assert self.session.closed
        self.backend.close.assert_called_once()
        with pytest.raises(SessionClosedError):
            self.application.stop()

    @patch('tunesbridge.application.facade.open_session')
    def test_open_selects_a_backend(self, mock_open_session):
        """Test open delegates backend selection."""
        mock_open_session.return_value = self.session
        settings = Mock()

        application = Application.open(settings, platform='darwin')

        assert application.backend_tag is BackendTag.APPSCRIPT
        mock_open_session.assert_called_once_with(settings=settings, platform='darwin')
