import argparse
import sys
import time
from typing import List, Optional

from tunesbridge.application.facade import Application
from tunesbridge.application.query import TRACK_FIELD_ACCESSORS, query_fields
from tunesbridge.crosscutting.config import Settings, setup_config
from tunesbridge.crosscutting.logging import get_logger, log_error, setup_logging
from tunesbridge.domain.entities import Playlist
from tunesbridge.domain.vocabulary import PlayerState, RepeatMode

logger = get_logger(__name__)

_TRANSPORT_COMMANDS = {
    'play': 'play',
    'pause': 'pause',
    'playpause': 'playpause',
    'next': 'next_track',
    'previous': 'previous_track',
    'stop': 'stop',
}


class CLI:
    """Command Line Interface for tunesbridge."""

    def __init__(self, application: Optional[Application] = None):
        """Initialize CLI.

        Args:
            application: Facade to drive; opened from configuration when omitted
        """
        self.parser = self._create_parser()
        self._application = application
        self._start_time = None

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create argument parser."""
        parser = argparse.ArgumentParser(
            prog='tunesbridge',
            description='Control the running media player from the command line'
        )
        parser.add_argument(
            '--log-level',
            choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
            default=None,
            help='Set logging level (default from TUNESBRIDGE_LOG_LEVEL or INFO)'
        )
        parser.add_argument(
            '--env-file',
            default=None,
            help='Read TUNESBRIDGE_* settings from this .env file'
        )

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        for name in _TRANSPORT_COMMANDS:
            subparsers.add_parser(name, help=f'Send {name} to the player')

        subparsers.add_parser('status', help='Show player state, volume and current track')

        volume_parser = subparsers.add_parser('volume', help='Show or set the sound volume')
        volume_parser.add_argument(
            'level',
            nargs='?',
            type=int,
            help='New volume, 0-100'
        )

        mute_parser = subparsers.add_parser('mute', help='Show or set mute')
        mute_parser.add_argument(
            'state',
            nargs='?',
            choices=['on', 'off'],
            help='New mute state'
        )

        repeat_parser = subparsers.add_parser('repeat', help='Show or set repeat mode of the current playlist')
        repeat_parser.add_argument(
            'mode',
            nargs='?',
            help='off, one, all or 0-2; any other value cycles to the next mode'
        )

        subparsers.add_parser('sources', help='List sources and their playlists')

        query_parser = subparsers.add_parser('query', help='Print fields of every track in the current playlist')
        query_parser.add_argument(
            'fields',
            nargs='+',
            help=f"Track fields ({', '.join(sorted(p.value for p in TRACK_FIELD_ACCESSORS))})"
        )

        return parser

    def _setup_logging(self, level: str, log_file: Optional[str] = None) -> None:
        """Setup logging configuration."""
        setup_logging(level=level, log_file=log_file)

    def _load_settings(self, args: argparse.Namespace) -> Settings:
        return setup_config(env_file=args.env_file).load_settings()

    def _get_application(self, settings: Settings) -> Application:
        if self._application is None:
            self._application = Application.open(settings)
        return self._application

    def _cleanup_resources(self) -> None:
        """Clean up resources on exit."""
        if self._start_time:
            duration = time.time() - self._start_time
            logger.debug(f"CLI execution time: {duration:.2f}s")
        if self._application is not None:
            self._application.close()

    def _transport(self, app: Application, command: str) -> None:
        getattr(app, _TRANSPORT_COMMANDS[command])()

    def _status(self, app: Application) -> None:
        state = app.player_state
        print(f"backend:  {app.backend_tag.value}")
        print(f"state:    {state.value}")
        print(f"volume:   {app.sound_volume}")
        print(f"mute:     {'on' if app.mute else 'off'}")
        if state is not PlayerState.STOPPED:
            track = app.current_track
            if track is not None:
                print(f"track:    {track.artist} - {track.name} ({track.time})")
            print(f"position: {app.player_position}")

    def _volume(self, app: Application, level: Optional[int]) -> None:
        if level is None:
            print(app.sound_volume)
            return
        if not 0 <= level <= 100:
            raise ValueError("Volume must be between 0 and 100")
        print(app.set_sound_volume(level))

    def _mute(self, app: Application, state: Optional[str]) -> None:
        if state is not None:
            app.set_mute(state == 'on')
        print('on' if app.mute else 'off')

    def _current_playlist(self, app: Application) -> Playlist:
        playlist = app.current_playlist
        if playlist is None:
            raise ValueError("No current playlist")
        return playlist

    def _repeat(self, app: Application, mode: Optional[str]) -> None:
        playlist = self._current_playlist(app)
        if mode is None:
            result: RepeatMode = playlist.song_repeat
        else:
            result = playlist.set_song_repeat(mode)
        print(result.value)

    def _sources(self, app: Application) -> None:
        for source in app.sources:
            print(source.name)
            for playlist in source.playlists:
                print(f"  {playlist.name}")

    def _query(self, app: Application, fields: List[str]) -> None:
        rows = query_fields(self._current_playlist(app), fields) or []
        for row in rows:
            print('\t'.join('' if value is None else str(value) for value in row))

    def _dispatch(self, app: Application, args: argparse.Namespace) -> None:
        if args.command in _TRANSPORT_COMMANDS:
            self._transport(app, args.command)
        elif args.command == 'status':
            self._status(app)
        elif args.command == 'volume':
            self._volume(app, args.level)
        elif args.command == 'mute':
            self._mute(app, args.state)
        elif args.command == 'repeat':
            self._repeat(app, args.mode)
        elif args.command == 'sources':
            self._sources(app)
        elif args.command == 'query':
            self._query(app, args.fields)
        else:
            self.parser.print_help()
            sys.exit(1)

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Run the CLI."""
        self._start_time = time.time()
        args = None

        try:
            args = self.parser.parse_args(argv)

            if not args.command:
                self.parser.print_help()
                sys.exit(1)

            settings = self._load_settings(args)
            if args.log_level:
                settings = settings.with_overrides(log_level=args.log_level)
            self._setup_logging(settings.log_level, settings.log_file)

            app = self._get_application(settings)
            self._dispatch(app, args)

        except KeyboardInterrupt:
            logger.warning("Operation cancelled by user")
            sys.exit(130)
        except Exception as e:
            log_error(logger, f"CLI error: {e}", e, command=getattr(args, "command", None))
            sys.exit(1)
        finally:
            self._cleanup_resources()


def main():
    """Main entry point."""
    cli = CLI()
    cli.run()


if __name__ == '__main__':
    main()
