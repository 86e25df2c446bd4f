"""Styled diagnostics for the peridio CLI.

A :class:`StyledMessage` collects ``(style, text)`` fragments and renders them
once to an error stream. The ``print_*`` helpers return the exit code that
goes with the outcome; the caller returns it from ``main``.
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Iterable, TextIO

from rich.color import ColorSystem
from rich.style import Style as TextStyle

from peridio.cli.exit_codes import EXIT_DATA_ERROR, EXIT_SUCCESS

COLOR_CHOICES = ("auto", "always", "never")


class Style(Enum):
    SUCCESS = "green"
    WARNING = "yellow"
    ERROR = "bold red"


class StyledMessage:
    def __init__(self) -> None:
        self.messages: list[tuple[Style | None, str]] = []

    def push(self, style: Style | None, message: str) -> None:
        if message:
            self.messages.append((style, message))

    def plain(self) -> str:
        return "".join(message for _, message in self.messages)

    def render(self, *, color: bool = False) -> str:
        """Return the message with ANSI styling when ``color`` is set.

        Fragments are written verbatim, so tab indents survive rendering.
        """
        color_system = ColorSystem.STANDARD if color else None
        return "".join(
            TextStyle.parse(style.value).render(message, color_system=color_system)
            if style is not None
            else message
            for style, message in self.messages
        )

    def print_err(self, stream: TextIO, *, color: bool = False) -> None:
        stream.write(self.render(color=color) + "\n")
        stream.flush()

    def print_data_err(self, stream: TextIO, *, color: bool = False) -> int:
        self.print_err(stream, color=color)
        return EXIT_DATA_ERROR

    def print_success(self, stream: TextIO, *, color: bool = False) -> int:
        self.print_err(stream, color=color)
        return EXIT_SUCCESS


def use_color(choice: str, stream: TextIO) -> bool:
    if choice == "always":
        return True
    if choice == "never":
        return False
    if os.getenv("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def error(prefix: str, message: str) -> StyledMessage:
    styled = StyledMessage()
    styled.push(Style.ERROR, "error: ")
    styled.push(None, f"{prefix}: {message}")
    return styled


def invalid_value(arg: str, value: str, reason: str) -> StyledMessage:
    styled = StyledMessage()
    styled.push(Style.ERROR, "error: ")
    styled.push(None, "invalid value '")
    styled.push(Style.WARNING, value)
    styled.push(None, "' for '")
    styled.push(Style.SUCCESS, arg)
    styled.push(None, f"': {reason}")
    return styled


def missing_globals(flags: Iterable[str]) -> StyledMessage:
    styled = StyledMessage()
    styled.push(Style.ERROR, "error: ")
    styled.push(None, "The following arguments are required at the global level:")
    for flag in flags:
        styled.push(None, "\n\t")
        styled.push(Style.SUCCESS, flag)
    return styled


def success(message: str) -> StyledMessage:
    styled = StyledMessage()
    styled.push(Style.SUCCESS, message)
    return styled
