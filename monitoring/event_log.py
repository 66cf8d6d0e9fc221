"""
Append-only JSONL log of progress events.

Attach to a reporter (or the controller) as a subscriber to keep an
application history on disk: one JSON object per line.
"""

import json
import logging
from pathlib import Path
from typing import Iterator, Union

from monitoring.progress import EventKind, ProgressEvent

logger = logging.getLogger(__name__)


class JsonlEventLog:
    def __init__(self, path: Union[str, Path], kinds=None):
        self.path = Path(path)
        self.kinds = frozenset(kinds) if kinds else None
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def __call__(self, event: ProgressEvent):
        if self.kinds and event.kind not in self.kinds:
            return
        try:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(event.to_dict(), ensure_ascii=True) + "\n")
        except OSError as e:
            logger.warning(f"Could not write event to {self.path}: {e}")

    def read(self) -> Iterator[dict]:
        if not self.path.exists():
            return
        with self.path.open(encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    yield json.loads(line)

    def applications(self) -> Iterator[dict]:
        """Recorded job_applied events, oldest first."""
        for record in self.read():
            if record.get("type") == EventKind.JOB_APPLIED.value:
                yield record
