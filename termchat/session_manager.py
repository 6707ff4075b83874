"""Transcript persistence: save, load and list named conversations."""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass, field, asdict
from pathlib import Path

from termchat.config import BUILTIN_PROMPTS, TRANSCRIPTS_DIR
from termchat.llm_adapter import Message

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass
class TranscriptMeta:
    name: str
    model: str
    created_at: float = field(default_factory=time.time)


@dataclass
class Transcript:
    meta: TranscriptMeta
    messages: list[Message] = field(default_factory=list)


def validate_name(name: str) -> str:
    if not _NAME_RE.match(name) or name in (".", ".."):
        raise ValueError(f"Invalid transcript name: {name!r}")
    return name


def builtin_transcript(name: str, model: str) -> Transcript | None:
    prompt = BUILTIN_PROMPTS.get(name)
    if prompt is None:
        return None
    return Transcript(
        meta=TranscriptMeta(name=name, model=model),
        messages=[Message(role="system", content=prompt)],
    )


class TranscriptStore:
    """Stores transcripts as JSONL files, one per name."""

    def __init__(self, directory: Path | str | None = None) -> None:
        self.directory = Path(directory) if directory else TRANSCRIPTS_DIR

    def _path(self, name: str) -> Path:
        return self.directory / f"{validate_name(name)}.jsonl"

    def save(self, transcript: Transcript) -> Path:
        path = self._path(transcript.meta.name)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            # First line: metadata
            f.write(json.dumps({"_meta": asdict(transcript.meta)}) + "\n")
            for msg in transcript.messages:
                f.write(json.dumps(asdict(msg)) + "\n")
        logger.debug("saved transcript %s (%d messages)", path, len(transcript.messages))
        return path

    def load(self, name: str, model: str = "") -> Transcript:
        """Load a saved transcript, or a built-in prompt of that name."""
        path = self._path(name)
        if not path.exists():
            builtin = builtin_transcript(name, model)
            if builtin is not None:
                return builtin
            raise FileNotFoundError(f"Transcript not found: {name}")

        with open(path, encoding="utf-8") as f:
            lines = [line for line in f if line.strip()]

        try:
            first = json.loads(lines[0])
            meta = TranscriptMeta(**first["_meta"])
            messages = [Message(**json.loads(line)) for line in lines[1:]]
        except (IndexError, KeyError, TypeError, json.JSONDecodeError) as exc:
            raise ValueError(f"Corrupt transcript: {name}") from exc
        logger.debug("loaded transcript %s (%d messages)", path, len(messages))
        return Transcript(meta=meta, messages=messages)

    def list(self) -> list[str]:
        """Return saved transcript names followed by unsaved built-in ones."""
        saved: list[str] = []
        if self.directory.is_dir():
            saved = sorted(p.stem for p in self.directory.glob("*.jsonl"))
        builtins = sorted(n for n in BUILTIN_PROMPTS if n not in saved)
        return saved + builtins

    def delete(self, name: str) -> None:
        path = self._path(name)
        if not path.exists():
            raise FileNotFoundError(f"Transcript not found: {name}")
        path.unlink()
