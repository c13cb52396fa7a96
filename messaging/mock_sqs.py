from __future__ import annotations
import json
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional
from uuid import uuid4


class MockSQSQueue:
    """Queue kept in memory, optionally persisted to a JSON file."""

    def __init__(self, name: str, persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self._messages: Dict[str, str] = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def send(self, payload: str) -> str:
        message_id = str(uuid4())
        with self._lock:
            self._messages[message_id] = payload
            self._persist()
        return message_id

    def pending(self) -> List[tuple[str, str]]:
        with self._lock:
            return list(self._messages.items())

    def drain_event(self, batch_size: Optional[int] = None) -> Dict[str, Any]:
        """Remove up to ``batch_size`` messages and return them as a queue delivery event."""
        with self._lock:
            message_ids = list(self._messages)[:batch_size]
            records = [
                {"messageId": message_id, "body": self._messages.pop(message_id)}
                for message_id in message_ids
            ]
            self._persist()
        return {"Records": records}

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        self.persistence_path.write_text(json.dumps(self._messages, indent=2))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            data = {}

        for message_id, body in data.items():
            self._messages[message_id] = str(body)
