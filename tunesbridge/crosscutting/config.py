import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Any, Optional

from dotenv import dotenv_values

from tunesbridge.domain.vocabulary import BackendTag


ENV_PREFIX = 'TUNESBRIDGE_'

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off'}
_LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}


class ConfigError(Exception):
    """Configuration error."""
    pass


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for one facade session."""

    app_name: str = 'iTunes'
    bundle_id: str = 'com.apple.iTunes'
    com_prog_id: str = 'iTunes.Application'
    prefer_appscript: bool = True
    backend: Optional[BackendTag] = None
    log_level: str = 'INFO'
    log_file: Optional[str] = None
    extra: Dict[str, str] = field(default_factory=dict)

    def with_overrides(self, **changes: Any) -> 'Settings':
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


def _parse_bool(key: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{key} must be a boolean flag, got '{value}'")


def _parse_backend(key: str, value: str) -> Optional[BackendTag]:
    if not value.strip():
        return None
    try:
        return BackendTag(value.strip().lower())
    except ValueError:
        choices = ', '.join(tag.value for tag in BackendTag)
        raise ConfigError(f"{key} must be one of {choices}, got '{value}'")


def _parse_log_level(key: str, value: str) -> str:
    level = value.strip().upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(f"{key} must be one of {', '.join(sorted(_LOG_LEVELS))}, got '{value}'")
    return level


class ConfigManager:
    """Loads settings from a .env file in the config directory and the process environment."""

    def __init__(self, config_dir: Optional[str] = None, env_file: Optional[str] = None):
        """Initialize config manager.

        Args:
            config_dir: Directory holding the default .env file (defaults to ~/.tunesbridge)
            env_file: Explicit .env file, used instead of the one in config_dir
        """
        self.config_dir = Path(config_dir) if config_dir else Path.home() / '.tunesbridge'
        self.env_file = Path(env_file) if env_file else self.config_dir / '.env'

    def load_env_vars(self) -> Dict[str, str]:
        """Load TUNESBRIDGE_* variables from the .env file, then overlay the environment."""
        env_vars: Dict[str, str] = {}

        if self.env_file.exists():
            try:
                file_values = dotenv_values(self.env_file)
            except (OSError, UnicodeDecodeError) as e:
                raise ConfigError(f"Failed to load .env file {self.env_file}: {e}")
            for key, value in file_values.items():
                if key.startswith(ENV_PREFIX) and value is not None:
                    env_vars[key] = value

        for key, value in os.environ.items():
            if key.startswith(ENV_PREFIX):
                env_vars[key] = value

        return env_vars

    def load_settings(self) -> Settings:
        """Build validated Settings from the merged variables."""
        env_vars = self.load_env_vars()
        defaults = Settings()

        def get(name: str) -> Optional[str]:
            return env_vars.get(ENV_PREFIX + name)

        known = {'APP_NAME', 'BUNDLE_ID', 'COM_PROG_ID', 'PREFER_APPSCRIPT', 'BACKEND', 'LOG_LEVEL', 'LOG_FILE'}
        extra = {
            key: value for key, value in env_vars.items()
            if key[len(ENV_PREFIX):] not in known
        }

        prefer = get('PREFER_APPSCRIPT')
        backend = get('BACKEND')
        log_level = get('LOG_LEVEL')

        return Settings(
            app_name=get('APP_NAME') or defaults.app_name,
            bundle_id=get('BUNDLE_ID') or defaults.bundle_id,
            com_prog_id=get('COM_PROG_ID') or defaults.com_prog_id,
            prefer_appscript=(
                _parse_bool(ENV_PREFIX + 'PREFER_APPSCRIPT', prefer)
                if prefer is not None else defaults.prefer_appscript
            ),
            backend=_parse_backend(ENV_PREFIX + 'BACKEND', backend) if backend is not None else None,
            log_level=(
                _parse_log_level(ENV_PREFIX + 'LOG_LEVEL', log_level)
                if log_level is not None else defaults.log_level
            ),
            log_file=get('LOG_FILE') or None,
            extra=extra,
        )

    def get_config_summary(self) -> Dict[str, Any]:
        """Get configuration summary."""
        settings = self.load_settings()
        return {
            'config_dir': str(self.config_dir),
            'env_file': str(self.env_file),
            'env_file_exists': self.env_file.exists(),
            'app_name': settings.app_name,
            'bundle_id': settings.bundle_id,
            'com_prog_id': settings.com_prog_id,
            'prefer_appscript': settings.prefer_appscript,
            'backend': settings.backend.value if settings.backend else None,
            'log_level': settings.log_level,
        }


# Global instance
config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    """Get global config manager instance."""
    return config_manager


def get_settings() -> Settings:
    """Load settings through the global config manager."""
    return config_manager.load_settings()


def setup_config(config_dir: Optional[str] = None, env_file: Optional[str] = None) -> ConfigManager:
    """Setup configuration with custom directory or .env file."""
    global config_manager
    config_manager = ConfigManager(config_dir, env_file)
    return config_manager
