"""Small key/value store for client state that must survive an auth redirect."""

import json
import logging
from pathlib import Path
from typing import Optional

from panoproperty.models.profile import Role
from panoproperty.utils.config import AppConfig

logger = logging.getLogger(__name__)

PENDING_ROLE_KEY = "pendingRole"


class LocalStore:
    """String values kept in memory and, when a path is given, in a JSON file."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else None
        self._values: dict[str, str] = self._read()

    def _read(self) -> dict[str, str]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file: {e}", extra={"path": str(self.path)})
            return {}
        return {str(k): str(v) for k, v in data.items()} if isinstance(data, dict) else {}

    def _write(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._values), encoding="utf-8")

    def _refresh(self) -> None:
        # The file is shared with other stores and processes.
        if self.path is not None:
            self._values = self._read()

    def get(self, key: str) -> Optional[str]:
        self._refresh()
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._refresh()
        self._values[key] = value
        self._write()

    def remove(self, key: str) -> None:
        self._refresh()
        if self._values.pop(key, None) is not None:
            self._write()


_shared_stores: dict[Optional[str], LocalStore] = {}


def shared_store() -> LocalStore:
    """The process-wide store for the configured state file (or memory)."""
    path = AppConfig.STATE_FILE
    if path not in _shared_stores:
        _shared_stores[path] = LocalStore(path)
    return _shared_stores[path]


def reset_shared_stores() -> None:
    _shared_stores.clear()


class PendingRoleStore:
    """Role picked before a redirect-based sign-in, applied once afterwards.

    Without an explicit store every instance shares ``shared_store()``, so
    the role staged by the auth calls is the one the session state reads.
    """

    def __init__(self, store: Optional[LocalStore] = None):
        self.store = store if store is not None else shared_store()

    def stage(self, role: str) -> None:
        self.store.set(PENDING_ROLE_KEY, Role(role).value)

    def peek(self) -> Optional[str]:
        role = self.store.get(PENDING_ROLE_KEY)
        if role in (Role.BUYER.value, Role.SELLER.value):
            return role
        return None

    def clear(self) -> None:
        self.store.remove(PENDING_ROLE_KEY)
