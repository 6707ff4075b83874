"""Entry point for termchat."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from termchat.cli import build_parser
from termchat.commands import ChatState, format_history, handle_command, is_command
from termchat.config import HISTORY_FILE, Settings, load_settings
from termchat.editor import edit_mode
from termchat.formatter import StreamFormatter
from termchat.grammar import GrammarCatalog, Theme, default_catalog, default_theme
from termchat.input_reader import InputReader
from termchat.llm_adapter import APIError, ChatResponse, LLMAdapter, Message
from termchat.session_manager import TranscriptStore
from termchat.spinner import Spinner

logger = logging.getLogger(__name__)


# ── ANSI color constants ─────────────────────────────────────
_GREEN = "\033[38;2;118;185;0m"
_BOLD  = "\033[1m"
_DIM   = "\033[90m"
_RESET = "\033[0m"


def run_turn(
    llm: LLMAdapter,
    state: ChatState,
    catalog: GrammarCatalog,
    theme: Theme,
    user_input: str,
    out: TextIO | None = None,
) -> str:
    """Send *user_input*, stream the reply to *out* and record it in history.

    Returns the reply text.  On Ctrl+C the partial reply is kept.  Transport
    errors propagate after the unanswered user message is dropped.
    """
    out = out or sys.stdout
    state.messages.append(Message(role="user", content=user_input))
    llm.model = state.model

    fmt = StreamFormatter(catalog, theme, debug=state.debug)
    spinner = Spinner(f"Waiting for {state.model}...")
    spinner.start()
    try:
        for chunk in llm.chat_stream(state.messages):
            if isinstance(chunk, ChatResponse):
                logger.debug("turn finished: %s", chunk.finish_reason)
                continue
            spinner.stop()
            output = fmt.feed(chunk)
            if output:
                out.write(output)
                out.flush()
    except KeyboardInterrupt:
        out.write(f"{_RESET}\n{_DIM}[interrupted]{_RESET}")
    except (APIError, ConnectionError):
        state.messages.pop()
        raise
    finally:
        spinner.stop()
        out.write(fmt.flush() + "\n")
        out.flush()

    reply = fmt.text
    if reply:
        state.messages.append(Message(role="assistant", content=reply))
    if state.debug:
        print(f"\nCurrent prompt:\n{format_history(state.messages)}", file=sys.stderr)
    return reply


def chat_loop(settings: Settings, llm: LLMAdapter, load: str | None = None) -> None:
    catalog = default_catalog()
    theme = default_theme(settings.style)
    store = TranscriptStore(settings.transcripts_dir)
    state = ChatState(model=settings.model, debug=settings.debug)

    if load:
        print(handle_command(state, f"!load {load}", store))

    print(f"{_BOLD}{_GREEN}termchat{_RESET} {_DIM}!help for commands, Ctrl+D to quit{_RESET}")

    with InputReader(HISTORY_FILE) as reader:
        while True:
            result = reader.read_input(state.prompt_left(), state.prompt_right())
            if result.action == "exit":
                print("Quitting")
                break
            if not result.text:
                continue

            if is_command(result.text):
                res = handle_command(state, result.text, store)
                if res is not None:
                    print(res)
                continue

            try:
                run_turn(llm, state, catalog, theme, result.text)
            except (APIError, ConnectionError) as exc:
                print(exc)


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args)
    except ValueError as exc:
        parser.error(str(exc))

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    llm = LLMAdapter(
        settings.api_key,
        settings.model,
        base_url=settings.base_url,
        max_tokens=settings.max_tokens,
    )

    try:
        if args.command == "models":
            for model_id in llm.list_models():
                print(model_id)
        elif args.command == "edit":
            edit_mode(llm, args.file, args.instruction, new=args.new, diff_tool=args.diff)
        else:
            chat_loop(settings, llm, load=getattr(args, "load", None))
    except (APIError, ConnectionError) as exc:
        print(f"Error: {exc}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.")


if __name__ == "__main__":
    main()
