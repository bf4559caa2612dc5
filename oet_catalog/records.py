"""
Numbered file-backed record store.

One directory holds <id>.json (Record) and <id>.png (question image), ids starting at 1.
Records are only created or patched in place; nothing here deletes files.
"""
import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Incomplete:
    """Record has no recognized question text yet."""


@dataclass(frozen=True)
class Complete:
    question: str


CompletionState = Union[Incomplete, Complete]


@dataclass
class Record:
    id: int
    answers: List[str]
    correct_index: int
    question: Optional[str] = None

    @property
    def state(self) -> CompletionState:
        if self.question is None:
            return Incomplete()
        return Complete(self.question)

    def to_dict(self) -> dict:
        out = {"answers": list(self.answers), "correctIndex": self.correct_index}
        if self.question is not None:
            out["question"] = self.question
        return out

    @classmethod
    def from_dict(cls, record_id: int, data: dict) -> "Record":
        """Presence checks only: answers must be a list, correctIndex an int."""
        if not isinstance(data, dict):
            raise ValueError(f"Record {record_id}: expected a JSON object")
        answers = data.get("answers")
        if not isinstance(answers, list):
            raise ValueError(f"Record {record_id}: 'answers' missing or not a list")
        correct_index = data.get("correctIndex")
        if not isinstance(correct_index, int) or isinstance(correct_index, bool):
            raise ValueError(f"Record {record_id}: 'correctIndex' missing or not an integer")
        question = data.get("question")
        if question is not None and not isinstance(question, str):
            raise ValueError(f"Record {record_id}: 'question' is not a string")
        return cls(id=record_id, answers=answers, correct_index=correct_index, question=question)


class RecordStore:
    """Read/write Records and images keyed by integer id inside one directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def ensure_dir(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, record_id: int, suffix: str = ".json") -> Path:
        return self.directory / f"{record_id}{suffix}"

    def exists(self, record_id: int) -> bool:
        return self.path_for(record_id).is_file()

    def load(self, record_id: int) -> Record:
        path = self.path_for(record_id)
        if not path.is_file():
            raise FileNotFoundError(f"Record not found: {path}")
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Record {record_id}: invalid JSON ({e})") from e
        return Record.from_dict(record_id, data)

    def save(self, record: Record) -> Path:
        """Write the full record; the old file stays intact if the write fails."""
        self.ensure_dir()
        path = self.path_for(record.id)
        payload = json.dumps(record.to_dict(), indent=2, ensure_ascii=False)
        self._atomic_write(path, payload.encode("utf-8"))
        return path

    def save_image(self, record_id: int, data: bytes, suffix: str = ".png") -> Path:
        self.ensure_dir()
        path = self.path_for(record_id, suffix)
        self._atomic_write(path, data)
        return path

    def _atomic_write(self, path: Path, data: bytes) -> None:
        fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def ids(self) -> List[int]:
        """Sorted ids of all <int>.json files in the directory."""
        if not self.directory.is_dir():
            return []
        out = []
        for path in self.directory.glob("*.json"):
            if path.stem.isdigit():
                out.append(int(path.stem))
        return sorted(out)

    def scan(self) -> Dict[int, CompletionState]:
        """Completion state of every readable record, recomputed from disk."""
        states: Dict[int, CompletionState] = {}
        for record_id in self.ids():
            try:
                states[record_id] = self.load(record_id).state
            except ValueError as e:
                logger.warning("Skipping unreadable record %s: %s", record_id, e)
        return states
