"""File-based session state adapter."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from dailylist.core.undo import DeletedTask

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """Presentation state carried between CLI runs."""

    completed_first: bool = False
    undo_snapshot: DeletedTask | None = None
    undo_expires_at: datetime | None = None


class FileSessionState:
    """Reads and writes SessionState as a small JSON document."""

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def load(self, default_completed_first: bool = False) -> SessionState:
        """Load state; a missing or unreadable file gives defaults."""
        if not self.path.exists():
            return SessionState(completed_first=default_completed_first)
        try:
            data = json.loads(self.path.read_text())
            state = SessionState(
                completed_first=bool(data.get("completed_first", default_completed_first))
            )
            undo = data.get("undo")
            if undo:
                state.undo_snapshot = DeletedTask.from_dict(undo["snapshot"])
                state.undo_expires_at = datetime.fromisoformat(undo["expires_at"])
            return state
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Could not read session state {self.path}: {e}")
            return SessionState(completed_first=default_completed_first)

    def save(self, state: SessionState) -> None:
        data: dict = {"completed_first": state.completed_first}
        if state.undo_snapshot is not None and state.undo_expires_at is not None:
            data["undo"] = {
                "snapshot": state.undo_snapshot.to_dict(),
                "expires_at": state.undo_expires_at.isoformat(),
            }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2))
