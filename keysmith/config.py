"""Centralised configuration, policy presets, and config.ini I/O."""

from __future__ import annotations

import configparser
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger("keysmith.config")


# ============================================================================
#  Presets  (email / social / wifi / custom)
# ============================================================================
PRESETS = {
    "email": {
        "description": "Strong passwords for e-mail accounts (16-20 characters)",
        "policy": {
            "length": 18,
            "classes": ["upper", "lower", "digit", "symbol"],
            "avoid_ambiguous": True,
            "min_per_class": {"upper": 1, "lower": 1, "digit": 1, "symbol": 1},
            "avoid_repeats": True,
            "max_consecutive_repeats": 2,
        },
    },
    "social": {
        "description": "Passwords for social networks (14-18 characters)",
        "policy": {
            "length": 16,
            "classes": ["upper", "lower", "digit", "symbol"],
            "avoid_ambiguous": True,
            "min_per_class": {"upper": 1, "lower": 1, "digit": 1, "symbol": 2},
            "avoid_repeats": True,
            "max_consecutive_repeats": 2,
        },
    },
    "wifi": {
        "description": "Long passphrases for Wi-Fi networks (20-32 characters)",
        "policy": {
            "length": 24,
            "classes": ["upper", "lower", "digit"],
            "avoid_ambiguous": True,
            "min_per_class": {"upper": 2, "lower": 2, "digit": 2},
            "avoid_repeats": True,
            "max_consecutive_repeats": 2,
        },
    },
    "custom": {
        "description": "General purpose configuration",
        "policy": {
            "length": 16,
            "classes": ["upper", "lower", "digit", "symbol"],
            "avoid_ambiguous": True,
            "avoid_repeats": True,
            "max_consecutive_repeats": 2,
        },
    },
}
DEFAULT_PRESET = "custom"


def get_preset(name: str):
    """Return a fresh, caller-owned Policy for the named preset."""
    from keysmith.policy.models import Policy

    try:
        preset = PRESETS[name]
    except KeyError:
        raise KeyError(
            f"Unknown preset '{name}' (choose from {', '.join(sorted(PRESETS))})"
        ) from None
    return Policy.from_dict(preset["policy"])


# ============================================================================
#  Config class
# ============================================================================
class Config:
    """Centralised settings."""

    # Generation
    DEFAULT_PASSWORD_LENGTH = 16
    MIN_GENERATED_PASSWORD_LENGTH = 4
    MAX_GENERATED_PASSWORD_LENGTH = 128
    MAX_GENERATION_ATTEMPTS = 1000
    MAX_BATCH_COUNT = 50

    # Performance
    ENTROPY_CACHE_SIZE = 100

    # Breach lookup
    HIBP_RANGE_URL = "https://api.pwnedpasswords.com/range"
    BREACH_TIMEOUT = 10.0  # seconds
    MIN_BREACH_TIMEOUT = 1.0
    USER_AGENT = "keysmith-password-generator"

    # ------------------------------------------------------------------
    #  config.ini helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _read(data_dir: Path | None) -> configparser.ConfigParser | None:
        if data_dir is None:
            from keysmith.paths import get_data_dir

            data_dir = get_data_dir()

        config_path = data_dir / "config.ini"
        if not config_path.exists():
            return None
        cfg = configparser.ConfigParser()
        try:
            cfg.read(config_path, encoding="utf-8")
        except configparser.Error as exc:
            logger.warning("Ignoring unreadable config.ini: %s", exc)
            return None
        return cfg

    @staticmethod
    def get_breach_settings(data_dir: Path | None = None) -> dict:
        """Read breach lookup settings, enforcing a timeout floor."""
        settings = {"api_url": Config.HIBP_RANGE_URL, "timeout": Config.BREACH_TIMEOUT}
        cfg = Config._read(data_dir)
        if cfg is None:
            return settings

        try:
            settings["api_url"] = cfg.get(
                "breach", "api_url", fallback=Config.HIBP_RANGE_URL
            ).rstrip("/")
            settings["timeout"] = max(
                cfg.getfloat("breach", "timeout", fallback=Config.BREACH_TIMEOUT),
                Config.MIN_BREACH_TIMEOUT,
            )
        except ValueError as exc:
            logger.warning("Invalid [breach] settings, using defaults: %s", exc)
            return {"api_url": Config.HIBP_RANGE_URL, "timeout": Config.BREACH_TIMEOUT}

        from keysmith.breach.checker import build_range_url
        from keysmith.errors import BreachServiceError

        try:
            build_range_url(settings["api_url"], "00000")
        except BreachServiceError:
            logger.warning("Invalid [breach] api_url in config.ini, using the default")
            settings["api_url"] = Config.HIBP_RANGE_URL
        return settings

    @staticmethod
    def get_default_preset(data_dir: Path | None = None) -> str:
        cfg = Config._read(data_dir)
        if cfg is None:
            return DEFAULT_PRESET
        name = cfg.get("generator", "preset", fallback=DEFAULT_PRESET)
        if name not in PRESETS:
            logger.warning("Unknown preset '%s' in config.ini, using '%s'", name, DEFAULT_PRESET)
            return DEFAULT_PRESET
        return name

    @staticmethod
    def config_exists(data_dir: Path) -> bool:
        return (data_dir / "config.ini").exists()


def write_default_config(data_dir: Path) -> None:
    _write_config(
        data_dir,
        {
            "generator": {"preset": DEFAULT_PRESET},
            "breach": {
                "api_url": Config.HIBP_RANGE_URL,
                "timeout": str(Config.BREACH_TIMEOUT),
            },
        },
    )
    logger.info("Default config.ini written")


# ============================================================================
#  Atomic config writer
# ============================================================================
def _write_config(data_dir: Path, sections: dict) -> None:
    data_dir.mkdir(parents=True, exist_ok=True)
    if os.name != "nt":
        try:
            os.chmod(data_dir, 0o700)
        except OSError:
            pass

    config_path = data_dir / "config.ini"
    cfg = configparser.ConfigParser()
    for name, values in sections.items():
        cfg[name] = values

    fd = tempfile.NamedTemporaryFile(
        mode="w", dir=data_dir, prefix="cfg_tmp_", suffix=".ini", delete=False, encoding="utf-8"
    )
    try:
        cfg.write(fd)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        tmp = Path(fd.name)
        if os.name != "nt":
            os.chmod(tmp, 0o600)
        tmp.replace(config_path)
    except BaseException:
        fd.close()
        try:
            Path(fd.name).unlink(missing_ok=True)
        except OSError:
            pass
        raise
