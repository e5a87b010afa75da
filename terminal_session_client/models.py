"""
Core data models for the Terminal Session Client.

This module defines the data structures describing remote sessions as the
server reports them, and the window records this client keeps for terminals
it spawned itself.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Dict, Any


class TitleMode(Enum):
    """How the server manages a session's terminal title."""
    STATIC = "static"
    DYNAMIC = "dynamic"
    FILTER = "filter"


class SessionStatus(Enum):
    """Lifecycle status of a remote session, derived from server state."""
    RUNNING = "running"
    EXITED = "exited"
    UNKNOWN = "unknown"


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, tolerating a trailing ``Z``."""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _optional_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


@dataclass(frozen=True)
class Session:
    """
    A server-managed, long-lived remote process addressable by a stable id.

    Instances are snapshots: the monitor replaces them wholesale on every
    refresh and nothing mutates them locally.
    """
    session_id: str
    name: str = ""
    command: Tuple[str, ...] = ()
    working_dir: str = ""
    cols: Optional[int] = None
    rows: Optional[int] = None
    title_mode: TitleMode = TitleMode.DYNAMIC
    spawned: bool = False
    status: SessionStatus = SessionStatus.UNKNOWN
    pid: Optional[int] = None
    exit_code: Optional[int] = None
    started_at: Optional[datetime] = None
    last_modified: Optional[datetime] = None

    def is_running(self) -> bool:
        """Check if the server reports the session as running."""
        return self.status == SessionStatus.RUNNING

    def is_exited(self) -> bool:
        """Check if the server reports the session as exited."""
        return self.status == SessionStatus.EXITED

    @property
    def display_name(self) -> str:
        """Name to show to a user, falling back to the command line."""
        if self.name:
            return self.name
        if self.command:
            return " ".join(self.command)
        return self.session_id

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        """
        Build a session from one entry of the server's session listing.

        Args:
            data: JSON object as returned by ``GET /api/sessions``

        Returns:
            Session: Parsed session

        Raises:
            ValueError: If the entry has no usable identifier
        """
        if not isinstance(data, dict):
            raise ValueError(f"Session entry must be an object, got {type(data).__name__}")

        session_id = data.get("id") or data.get("sessionId")
        if not isinstance(session_id, str) or not session_id:
            raise ValueError("Session entry has no id")

        command = data.get("command", ())
        if isinstance(command, str):
            command = (command,)
        elif isinstance(command, list):
            command = tuple(str(part) for part in command)
        else:
            command = ()

        try:
            status = SessionStatus(data.get("status", "unknown"))
        except ValueError:
            status = SessionStatus.UNKNOWN

        try:
            title_mode = TitleMode(data.get("titleMode", TitleMode.DYNAMIC.value))
        except ValueError:
            title_mode = TitleMode.DYNAMIC

        return cls(
            session_id=session_id,
            name=data.get("name") or "",
            command=command,
            working_dir=data.get("workingDir") or "",
            cols=_optional_int(data.get("initialCols", data.get("cols"))),
            rows=_optional_int(data.get("initialRows", data.get("rows"))),
            title_mode=title_mode,
            spawned=bool(data.get("spawnTerminal", data.get("spawn_terminal", False))),
            status=status,
            pid=_optional_int(data.get("pid")),
            exit_code=_optional_int(data.get("exitCode")),
            started_at=_parse_timestamp(data.get("startedAt")),
            last_modified=_parse_timestamp(data.get("lastModified")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert session to dictionary for serialization."""
        return {
            "id": self.session_id,
            "name": self.name,
            "command": list(self.command),
            "workingDir": self.working_dir,
            "cols": self.cols,
            "rows": self.rows,
            "titleMode": self.title_mode.value,
            "spawnTerminal": self.spawned,
            "status": self.status.value,
            "pid": self.pid,
            "exitCode": self.exit_code,
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "lastModified": self.last_modified.isoformat() if self.last_modified else None,
        }


@dataclass
class WindowRecord:
    """A terminal window this client opened for a session."""
    session_id: str
    window_ref: Any = None
    opened_at: datetime = field(default_factory=datetime.now)
