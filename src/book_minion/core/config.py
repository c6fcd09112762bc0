"""
Configuration management for Book Minion
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class PlayerConfig:
    """Configuration for the playback session."""

    mpv_binary: str = "mpv"
    volume: int = 80
    skip_ms: int = 10000  # Rewind/forward step
    tick_interval_seconds: float = 1.0  # Progress sampling + persistence period
    resume_on_load: bool = True
    autoplay_on_load: bool = False
    load_timeout_seconds: float = 2.0

    def validate(self) -> None:
        """Validate player configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.skip_ms <= 0:
            raise ValueError(f"skip_ms must be positive, got {self.skip_ms}")
        if self.tick_interval_seconds <= 0:
            raise ValueError(
                f"tick_interval_seconds must be positive, got {self.tick_interval_seconds}"
            )
        if not 0 <= self.volume <= 100:
            raise ValueError(f"volume must be between 0 and 100, got {self.volume}")


@dataclass
class SleepTimerConfig:
    """Configuration for the sleep timer."""

    default_minutes: int = 30
    max_minutes: int = 480


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/book-minion/book-minion.log)
    )
    console_output: bool = False  # Also output to console (for debugging)


@dataclass
class NotificationsConfig:
    """Configuration for desktop notifications."""

    enabled: bool = True
    show_errors: bool = True


@dataclass
class IPCConfig:
    """Configuration for IPC (Inter-Process Communication)."""

    enabled: bool = True


@dataclass
class Config:
    """Main configuration object."""

    player: PlayerConfig = field(default_factory=PlayerConfig)
    sleep_timer: SleepTimerConfig = field(default_factory=SleepTimerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)
    ipc: IPCConfig = field(default_factory=IPCConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "book-minion"
    return Path.home() / ".config" / "book-minion"


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the current working directory first, then
    falls back to XDG_CONFIG_HOME/book-minion (or ~/.config/book-minion).
    """
    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "book-minion"
    return Path.home() / ".local" / "share" / "book-minion"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Book Minion Configuration

[player]
# mpv executable used for decoding and output
mpv_binary = "mpv"

# Default volume (0-100)
volume = 80

# Rewind/forward step in milliseconds
skip_ms = 10000

# How often (seconds) progress is sampled and saved while playing
tick_interval_seconds = 1.0

# Resume books where you left off
resume_on_load = true

# Start playing immediately after a book is opened
autoplay_on_load = false

# Seconds to wait for mpv to report a track duration
load_timeout_seconds = 2.0

[sleep_timer]
# Minutes used by 'sleep' without an argument
default_minutes = 30

# Longest accepted timer
max_minutes = 480

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/book-minion/book-minion.log)
# log_file = "/path/to/custom/book-minion.log"

# Also output logs to console (useful for debugging)
console_output = false

[notifications]
# Enable desktop notifications
enabled = true

# Show error notifications
show_errors = true

[ipc]
# Enable IPC (Inter-Process Communication) for external commands
enabled = true
""".strip()


def _parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML, keeping defaults for missing keys."""
    config = Config()

    if "player" in toml_data:
        player_data = toml_data["player"]
        config.player = PlayerConfig(
            mpv_binary=player_data.get("mpv_binary", config.player.mpv_binary),
            volume=player_data.get("volume", config.player.volume),
            skip_ms=player_data.get("skip_ms", config.player.skip_ms),
            tick_interval_seconds=float(
                player_data.get(
                    "tick_interval_seconds", config.player.tick_interval_seconds
                )
            ),
            resume_on_load=player_data.get(
                "resume_on_load", config.player.resume_on_load
            ),
            autoplay_on_load=player_data.get(
                "autoplay_on_load", config.player.autoplay_on_load
            ),
            load_timeout_seconds=float(
                player_data.get(
                    "load_timeout_seconds", config.player.load_timeout_seconds
                )
            ),
        )
        try:
            config.player.validate()
        except ValueError as e:
            print(f"Warning: Invalid player configuration: {e}")
            print("Using default player configuration.")
            config.player = PlayerConfig()

    if "sleep_timer" in toml_data:
        timer_data = toml_data["sleep_timer"]
        config.sleep_timer = SleepTimerConfig(
            default_minutes=timer_data.get(
                "default_minutes", config.sleep_timer.default_minutes
            ),
            max_minutes=timer_data.get("max_minutes", config.sleep_timer.max_minutes),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    if "notifications" in toml_data:
        notifications_data = toml_data["notifications"]
        config.notifications = NotificationsConfig(
            enabled=notifications_data.get("enabled", config.notifications.enabled),
            show_errors=notifications_data.get(
                "show_errors", config.notifications.show_errors
            ),
        )

    if "ipc" in toml_data:
        config.ipc = IPCConfig(enabled=toml_data["ipc"].get("enabled", True))

    return config


def load_config() -> Config:
    """Load configuration from file or create default.

    Environment variables (also read from a .env file in the config
    directory) override TOML values:
    - BOOK_MINION_LOG_LEVEL
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        print(f"Created default configuration at: {config_path}")
        config = Config()
    else:
        try:
            with open(config_path, "rb") as f:
                toml_data = tomllib.load(f)
            config = _parse_config(toml_data)
        except (OSError, tomllib.TOMLDecodeError) as e:
            print(f"Error loading configuration from {config_path}: {e}")
            print("Using default configuration.")
            config = Config()

    log_level = os.environ.get("BOOK_MINION_LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    return config


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
