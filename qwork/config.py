"""Single source of truth for qwork settings.

All modules import from here, never from os.environ directly.

Settings come from QWORK_* environment variables, falling back to an optional
dotenv file ($QWORK_ENV_FILE, default ~/.config/qwork/qwork.env).
"""

import os
from pathlib import Path

from dotenv import dotenv_values

DEFAULT_ENV_FILE = Path.home() / ".config" / "qwork" / "qwork.env"


def load_env_file(dotenv_path: str | Path) -> dict[str, str | None]:
    """Load a plain .env file, or nothing if it does not exist.

    Args:
        dotenv_path: Path to an unencrypted .env file.

    Returns:
        Dictionary of key-value pairs.
    """
    path = Path(dotenv_path).expanduser()
    if not path.exists():
        return {}
    return dict(dotenv_values(path))


def load_settings(dotenv_path: str | Path) -> dict[str, str | None]:
    """Merge the dotenv file with QWORK_* variables from the environment."""
    settings = load_env_file(dotenv_path)
    settings.update({k: v for k, v in os.environ.items() if k.startswith("QWORK_")})
    return settings


def _int_setting(settings: dict[str, str | None], key: str, default: int) -> int:
    raw = settings.get(key) or str(default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None


ENV_FILE = Path(os.environ.get("QWORK_ENV_FILE", str(DEFAULT_ENV_FILE)))

_settings = load_settings(ENV_FILE)

# --- Postfix queue tools (looked up on PATH unless given as paths) ---
POSTQUEUE_COMMAND: str = _settings.get("QWORK_POSTQUEUE") or "postqueue"
POSTSUPER_COMMAND: str = _settings.get("QWORK_POSTSUPER") or "postsuper"
POSTCAT_COMMAND: str = _settings.get("QWORK_POSTCAT") or "postcat"

# --- Delay reason formatting ---
REASON_WRAP_WIDTH: int = _int_setting(_settings, "QWORK_WRAP_WIDTH", 72)
REASON_INDENT: int = _int_setting(_settings, "QWORK_REASON_INDENT", 4)
