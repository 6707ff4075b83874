"""Edit mode: ask the model to rewrite a file, show a diff, apply on confirm."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from pathlib import Path

from termchat.config import EDIT_SYSTEM_PROMPT
from termchat.llm_adapter import LLMAdapter, Message

logger = logging.getLogger(__name__)

_WRAPPING_FENCE_RE = re.compile(r"\A\s*```[^\n]*\n(.*?)\n?```\s*\Z", re.DOTALL)


def strip_wrapping_fence(text: str) -> str:
    """Drop a single code fence wrapped around the whole reply, if any."""
    m = _WRAPPING_FENCE_RE.match(text)
    if m:
        return m.group(1) + "\n"
    return text


def build_edit_messages(original: str | None, instruction: str, filename: str) -> list[Message]:
    if original is None:
        user = f"Create the file {filename}.\nInstructions: {instruction}"
    else:
        user = (
            f"File {filename}:\n```\n{original}\n```\n"
            f"Instructions: {instruction}"
        )
    return [
        Message(role="system", content=EDIT_SYSTEM_PROMPT),
        Message(role="user", content=user),
    ]


def show_diff(path: Path, new_content: str, diff_tool: str) -> int:
    """Pipe *new_content* into ``diff_tool path -`` and return its exit code."""
    proc = subprocess.run(
        [diff_tool, str(path), "-", "--color=auto"],
        input=new_content,
        text=True,
    )
    return proc.returncode


def confirm(question: str, default: bool = False, input_fn=input) -> bool:
    suffix = " [Y/n] " if default else " [y/N] "
    try:
        answer = input_fn(question + suffix).strip().lower()
    except (EOFError, KeyboardInterrupt):
        return False
    if not answer:
        return default
    return answer in ("y", "yes")


def edit_mode(
    llm: LLMAdapter,
    file: str,
    instruction: list[str],
    new: bool = False,
    diff_tool: str | None = None,
    input_fn=input,
) -> bool:
    """Run one edit round trip; return True if the file was written."""
    path = Path(file)
    path.touch(exist_ok=True)
    original = None if new else path.read_text(encoding="utf-8")
    prompt = " ".join(instruction)

    response = llm.chat(build_edit_messages(original, prompt, path.name))
    content = strip_wrapping_fence(response.content)
    logger.debug("edit reply: %d chars, finish_reason=%s", len(content), response.finish_reason)

    tool = diff_tool or os.environ.get("EXTERNAL_DIFF", "diff")
    try:
        show_diff(path, content, tool)
    except OSError as exc:
        print(f"Could not run diff tool {tool!r}: {exc}")
        print(content)

    if not confirm("Do you want to apply these changes?", default=False, input_fn=input_fn):
        return False
    path.write_text(content, encoding="utf-8")
    print("File written")
    return True
