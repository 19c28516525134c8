"""Cross-platform directory resolution."""

from __future__ import annotations

from pathlib import Path

import platformdirs

_APP_NAME = "Keysmith"
_APP_AUTHOR = "Keysmith"


def get_data_dir() -> Path:
    """Return the platform-appropriate data directory (XDG on Linux)."""
    return Path(platformdirs.user_data_dir(_APP_NAME, _APP_AUTHOR))


# -- path helpers -----------------------------------------------------------
def get_log_path(data_dir: Path) -> Path:
    return data_dir / "keysmith.log"


def get_config_path(data_dir: Path) -> Path:
    return data_dir / "config.ini"
