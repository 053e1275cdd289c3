import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from tennis_scoring.config import DEFAULT_MATCH_FILE


class MatchStore(Protocol):
    def save(self, snapshot: Dict[str, Any]) -> None:
        ...

    def load(self) -> Optional[Dict[str, Any]]:
        ...


class JsonFileStore:
    """Keeps the latest match snapshot in a single JSON file."""

    def __init__(self, path: Path = DEFAULT_MATCH_FILE):
        self.path = Path(path)

    def save(self, snapshot: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Written beside the target, then swapped in, so a failed write
        # never leaves a truncated snapshot behind
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, indent=4)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None

        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)


class MemoryStore:
    def __init__(self):
        self.snapshot: Optional[Dict[str, Any]] = None
        self.saves = 0

    def save(self, snapshot: Dict[str, Any]) -> None:
        # Round-trip through JSON so callers never share mutable state
        self.snapshot = json.loads(json.dumps(snapshot))
        self.saves += 1

    def load(self) -> Optional[Dict[str, Any]]:
        return self.snapshot
