"""Loader for the JSON document served by ``GET /get/body``.

The file is read fresh on every call; nothing is cached. The response is the
validated text with insignificant whitespace removed, so numbers keep their
original spelling (``1e400`` is served as-is, not as a float). The file must
be UTF-8; undecodable bytes are reported as an unreadable body rather than
replaced with U+FFFD. This module MUST NOT implement HTTP concerns.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

BODY_FILE = Path("body.txt")
_JSON_WHITESPACE = frozenset(" \t\n\r")


class BodyError(Exception):
    """Base error for body loading failures."""

    kind = "body_error"

    def __init__(self, path: Path, detail: str) -> None:
        super().__init__(f"{self.kind}: {detail}")
        self.path = path
        self.detail = detail


class BodyUnavailableError(BodyError):
    """The body file is missing, unreadable or not valid UTF-8."""

    kind = "body_unreadable"


class InvalidBodyError(BodyError):
    """The normalized body text is not a JSON value."""

    kind = "invalid_body_json"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid constant {name!r}")


class BodySource:
    """Read, normalize and validate the body file."""

    def __init__(self, path: Path = BODY_FILE) -> None:
        # Relative paths resolve against the working directory at read time.
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read_text(self) -> str:
        """Return the whole file as text."""
        try:
            with self._path.open("rb") as fp:
                raw = fp.read()
        except OSError as e:
            raise BodyUnavailableError(self._path, f"{e.strerror or e}: {self._path}") from e
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise BodyUnavailableError(self._path, str(e)) from e

    @staticmethod
    def normalize(text: str) -> str:
        """Drop every newline and carriage return, wherever it occurs."""
        return text.replace("\n", "").replace("\r", "")

    def parse(self, text: str) -> Any:
        """Parse ``text`` as a single JSON value."""
        try:
            return json.loads(text, parse_constant=_reject_constant)
        except ValueError as e:
            raise InvalidBodyError(self._path, str(e)) from e

    def load(self) -> Any:
        """Return the parsed body. Raises a ``BodyError`` subclass on failure."""
        return self.parse(self.normalize(self.read_text()))

    @staticmethod
    def compact(text: str) -> str:
        """Drop whitespace outside string literals of already-valid JSON text."""
        out: list[str] = []
        in_string = False
        escaped = False
        for ch in text:
            if in_string:
                out.append(ch)
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
                out.append(ch)
            elif ch not in _JSON_WHITESPACE:
                out.append(ch)
        return "".join(out)

    def load_json(self) -> str:
        """Return the validated body as compact JSON text."""
        text = self.normalize(self.read_text())
        self.parse(text)
        return self.compact(text)
