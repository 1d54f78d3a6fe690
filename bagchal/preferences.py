from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "BAGCHAL_HOME"
PREFERENCES_FILE = "preferences.yaml"


@dataclass
class Preferences:
    display_name: str = ""
    welcome_seen: bool = False


def preferences_path() -> Path:
    base = os.environ.get(HOME_ENV_VAR)
    root = Path(base) if base else Path.home() / ".config" / "bagchal"
    return root / PREFERENCES_FILE


def load_preferences(path: Optional[Path] = None) -> Preferences:
    path = path or preferences_path()
    if not path.exists():
        return Preferences()
    data = yaml.safe_load(path.read_text()) or {}
    if not isinstance(data, dict):
        logger.warning("Ignoring malformed preferences file %s", path)
        return Preferences()
    return Preferences(
        display_name=str(data.get("display_name", "")),
        welcome_seen=bool(data.get("welcome_seen", False)),
    )


def save_preferences(preferences: Preferences, path: Optional[Path] = None) -> Path:
    path = path or preferences_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(asdict(preferences), sort_keys=True))
    return path


def remember_display_name(name: str, path: Optional[Path] = None) -> Preferences:
    """Store a trimmed, non-empty display name and return the updated preferences."""
    name = name.strip()
    preferences = load_preferences(path)
    if name:
        preferences.display_name = name
        save_preferences(preferences, path)
    return preferences
