"""Interactive shell state and ``!`` command handling."""

from __future__ import annotations

from dataclasses import dataclass, field

from termchat.llm_adapter import Message
from termchat.session_manager import Transcript, TranscriptMeta, TranscriptStore

COMMAND_PREFIX = "!"

HELP = """
Commands:
  !help          Show this help
  !debug         Toggle debug mode (raw fragments and render mode)
  !model [NAME]  Show or switch the model
  !save [NAME]   Save the conversation
  !load NAME     Load a saved conversation or built-in prompt
  !list          List saved conversations and built-in prompts
  !delete NAME   Delete a saved conversation
  !new           Start over, keeping the system prompt
  !prompt        Show the conversation so far

Ctrl+D or Ctrl+C quits.
"""


@dataclass
class ChatState:
    model: str
    prompt_name: str | None = None
    messages: list[Message] = field(default_factory=list)
    debug: bool = False

    def prompt_left(self) -> str:
        return self.prompt_name or "Unsaved"

    def prompt_right(self) -> str:
        return f"({self.model})"

    def to_transcript(self, name: str) -> Transcript:
        return Transcript(
            meta=TranscriptMeta(name=name, model=self.model),
            messages=list(self.messages),
        )

    def load_transcript(self, transcript: Transcript) -> None:
        self.prompt_name = transcript.meta.name
        self.messages = list(transcript.messages)
        if transcript.meta.model:
            self.model = transcript.meta.model


def is_command(line: str) -> bool:
    return line.startswith(COMMAND_PREFIX)


def format_history(messages: list[Message]) -> str:
    if not messages:
        return "(empty)"
    return "\n".join(f"[{m.role}] {m.content}" for m in messages)


def handle_command(state: ChatState, line: str, store: TranscriptStore) -> str | None:
    """Run a ``!command`` against *state* and return the text to show, if any."""
    cmd, _, args = line[len(COMMAND_PREFIX):].partition(" ")
    args = args.strip()

    if cmd == "debug":
        state.debug = not state.debug
        return f"Debug mode is {'on' if state.debug else 'off'}"

    if cmd == "model":
        if not args:
            return f"Model: {state.model}"
        state.model = args
        return None

    if cmd == "help":
        return HELP

    if cmd == "save":
        name = args or state.prompt_name
        if not name:
            return "Usage: !save NAME"
        try:
            path = store.save(state.to_transcript(name))
        except (ValueError, OSError) as exc:
            return f"Save failed: {exc}"
        state.prompt_name = name
        return f"Saved to {path}"

    if cmd == "load":
        if not args:
            return "Usage: !load NAME"
        try:
            transcript = store.load(args, model=state.model)
        except (ValueError, FileNotFoundError) as exc:
            return str(exc)
        state.load_transcript(transcript)
        return f"Loaded {transcript.meta.name} ({len(transcript.messages)} messages)"

    if cmd == "list":
        names = store.list()
        return "\n".join(names) if names else "No saved conversations."

    if cmd == "delete":
        if not args:
            return "Usage: !delete NAME"
        try:
            store.delete(args)
        except (ValueError, FileNotFoundError) as exc:
            return str(exc)
        if state.prompt_name == args:
            state.prompt_name = None
        return f"Deleted {args}"

    if cmd == "new":
        state.messages = [m for m in state.messages if m.role == "system"]
        state.prompt_name = None
        return "Conversation cleared."

    if cmd == "prompt":
        return format_history(state.messages)

    return "Unknown command"
