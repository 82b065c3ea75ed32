"""
Sync status of each synchronized folder.

``SyncState`` values are immutable; each transition returns a new state.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class FolderSyncState:
    """Base class of the per-folder states."""

    @property
    def name(self) -> str:
        return type(self).__name__.lower()

    def to_dict(self) -> Dict[str, Any]:
        return {"state": self.name}


@dataclass(frozen=True)
class Syncing(FolderSyncState):
    pass


@dataclass(frozen=True)
class Success(FolderSyncState):
    pass


@dataclass(frozen=True)
class Error(FolderSyncState):
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"state": self.name, "message": self.message}


@dataclass(frozen=True)
class SyncState:
    """Last sync time plus the state of every folder of the current/last pass."""

    last_sync: Optional[datetime] = None
    folder_states: Dict[str, FolderSyncState] = field(default_factory=dict)

    @classmethod
    def initial_state(cls) -> "SyncState":
        return cls()

    @property
    def is_syncing(self) -> bool:
        return any(isinstance(state, Syncing) for state in self.folder_states.values())

    @property
    def has_errors(self) -> bool:
        return any(isinstance(state, Error) for state in self.folder_states.values())

    def as_start_syncing(self) -> "SyncState":
        return replace(self, folder_states={})

    def as_syncing(self, folder_name: str) -> "SyncState":
        return self._with_folder_state(folder_name, Syncing())

    def as_success(self, folder_name: str) -> "SyncState":
        return self._with_folder_state(folder_name, Success())

    def as_error(self, folder_name: str, message: str) -> "SyncState":
        return self._with_folder_state(folder_name, Error(message=message))

    def as_finish_syncing(self, now: Optional[datetime] = None) -> "SyncState":
        return replace(self, last_sync=now or datetime.now(timezone.utc))

    def _with_folder_state(
        self, folder_name: str, state: FolderSyncState
    ) -> "SyncState":
        return replace(self, folder_states={**self.folder_states, folder_name: state})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "last_sync": self.last_sync.isoformat() if self.last_sync else None,
            "folder_states": {
                name: state.to_dict() for name, state in self.folder_states.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SyncState":
        last_sync = data.get("last_sync")
        folder_states: Dict[str, FolderSyncState] = {}
        for name, state in (data.get("folder_states") or {}).items():
            kind = state.get("state")
            if kind == "syncing":
                folder_states[name] = Syncing()
            elif kind == "success":
                folder_states[name] = Success()
            elif kind == "error":
                folder_states[name] = Error(message=state.get("message", ""))
            else:
                raise ValueError(f"Unknown folder sync state: {kind!r}")
        return cls(
            last_sync=datetime.fromisoformat(last_sync) if last_sync else None,
            folder_states=folder_states,
        )
