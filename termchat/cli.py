"""CLI argument parser for termchat."""

from __future__ import annotations

import argparse

from termchat.config import DEFAULT_MAX_TOKENS, DEFAULT_MODEL, HIGHLIGHT_STYLE


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="termchat",
        description="Access hosted chat models from the command line",
    )

    parser.add_argument(
        "-a", "--api-key",
        type=str,
        default=None,
        help="Your API key (default: $OPENAI_API_KEY)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=DEFAULT_MODEL,
        help=f"Model to use (default: {DEFAULT_MODEL})",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="Base URL of an OpenAI-compatible API (default: $OPENAI_BASE_URL)",
    )
    parser.add_argument(
        "--max-tokens",
        type=int,
        default=DEFAULT_MAX_TOKENS,
        help=f"Completion token limit (default: {DEFAULT_MAX_TOKENS})",
    )
    parser.add_argument(
        "--style",
        type=str,
        default=HIGHLIGHT_STYLE,
        help=f"Pygments style for code blocks (default: {HIGHLIGHT_STYLE})",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print raw fragments with their render mode, and debug logs",
    )

    sub = parser.add_subparsers(dest="command")

    chat = sub.add_parser("chat", help="Interactive chat (default)")
    chat.add_argument(
        "--load",
        type=str,
        default=None,
        metavar="NAME",
        help="Start from a saved conversation or built-in prompt",
    )

    edit = sub.add_parser("edit", help="Ask the model to create or edit a file")
    edit.add_argument("file", help="The file to create or edit")
    edit.add_argument("instruction", nargs="+", help="The edit instructions")
    edit.add_argument(
        "-n", "--new",
        action="store_true",
        default=False,
        help="Create a new file, do not send the original",
    )
    edit.add_argument(
        "--diff",
        type=str,
        default=None,
        help="Diff tool to use (default: $EXTERNAL_DIFF or diff)",
    )

    sub.add_parser("models", help="List available models")
    return parser
