"""Per-note cursor offset persistence.

Offsets are stored as a single JSON object mapping the absolute path of each
note to the character offset of its cursor, so a note reopens where it was
left. The file lives in the OS-appropriate config directory.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

import platformdirs

from .constants import EditorConstants

logger = logging.getLogger(__name__)


class CursorStore:
    """Manages the JSON file of saved cursor offsets."""

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is None:
            config_dir = Path(platformdirs.user_config_dir(EditorConstants.APP_NAME))
        self._config_dir = Path(config_dir)
        self._store_file = self._config_dir / EditorConstants.CURSOR_STORE_FILENAME
        self._cache: Optional[Dict[str, int]] = None

    @property
    def path(self) -> Path:
        return self._store_file

    def _ensure_config_dir(self) -> None:
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create config directory {self._config_dir}: {e}")

    def _load_all(self) -> Dict[str, int]:
        """Load every saved offset, tolerating a missing or corrupt file."""
        if self._cache is not None:
            return self._cache

        if not self._store_file.exists():
            self._cache = {}
            return self._cache

        try:
            with open(self._store_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load cursor positions from {self._store_file}: {e}")
            self._cache = {}
            return self._cache

        if not isinstance(data, dict):
            logger.warning("Cursor position file has invalid format (not a dict), ignoring")
            self._cache = {}
            return self._cache

        # Drop entries that are not plain integers
        self._cache = {
            k: v for k, v in data.items()
            if isinstance(k, str) and isinstance(v, int) and not isinstance(v, bool)
        }
        return self._cache

    def _save_all(self, positions: Dict[str, int]) -> bool:
        """Write all offsets atomically (temp file + rename)."""
        self._ensure_config_dir()
        temp_file = self._store_file.with_suffix('.tmp')

        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(positions, f, indent=2)
            temp_file.replace(self._store_file)
            self._cache = positions
            return True
        except OSError as e:
            logger.warning(f"Could not save cursor positions to {self._store_file}: {e}")
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                pass
            return False

    @staticmethod
    def _key(note_path: str) -> str:
        return os.path.abspath(note_path)

    def load(self, note_path: Optional[str]) -> int:
        """Saved offset for a note, or 0 if none was recorded."""
        if not note_path:
            return 0
        return self._load_all().get(self._key(note_path), 0)

    def save(self, note_path: Optional[str], offset: int) -> bool:
        """Record the cursor offset for a note."""
        if not note_path:
            return False
        positions = dict(self._load_all())
        positions[self._key(note_path)] = max(0, int(offset))
        return self._save_all(positions)

    def clear_cache(self) -> None:
        """Clear the in-memory cache of offsets."""
        self._cache = None


# Global instance
_store: Optional[CursorStore] = None


def get_cursor_store() -> CursorStore:
    """Get the global cursor store instance."""
    global _store
    if _store is None:
        _store = CursorStore()
    return _store
