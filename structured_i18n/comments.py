"""
Developer comments in JSON5 message files.

``json5`` drops comments, so this module scans the text a second time and
records the comments as a side channel:

* comments before the root object form the top-of-file block. A line of the
  form ``key: comment`` there applies to every message named ``key``;
* comments immediately before a key (or an array element) apply to that path.

A comment that follows a value on the same line belongs to that value and is
ignored.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from .errors import InvalidTranslationFile, log_then_raise

PathKey = Union[str, int]
Path = Tuple[PathKey, ...]

_re_key_comment = re.compile(r"^(\w+):[ \t]*(.+)$")
_TOKEN_END = set(",:{}[]/ \t\r\n")


@dataclass
class SourceComments:
    by_key: Dict[str, str] = field(default_factory=dict)
    by_path: Dict[Path, str] = field(default_factory=dict)

    def update(self, other: "SourceComments") -> None:
        self.by_key.update(other.by_key)
        self.by_path.update(other.by_path)

    def moved(self, old_prefix: Path, new_prefix: Path) -> "SourceComments":
        """The path comments found under ``old_prefix``, moved to ``new_prefix``."""
        result = SourceComments()
        for path, comment in self.by_path.items():
            if path[: len(old_prefix)] == old_prefix:
                result.by_path[new_prefix + path[len(old_prefix):]] = comment
        return result


class _Container:
    __slots__ = ("path", "is_array", "key", "index", "expecting_key")

    def __init__(self, path: Path, is_array: bool) -> None:
        self.path = path
        self.is_array = is_array
        self.key: Optional[str] = None
        self.index = 0
        self.expecting_key = not is_array


class _Scanner:
    def __init__(self, text: str, filename: str) -> None:
        self.text = text
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.last_token_line = 0
        self.stack: List[_Container] = []
        self.pending: List[str] = []
        self.result = SourceComments()
        self.before_all: List[str] = []
        self.started = False

    # ---------- low-level reading ------------------------------------------ #
    def _advance(self, count: int = 1) -> str:
        chunk = self.text[self.pos:self.pos + count]
        self.line += chunk.count("\n")
        self.pos += count
        return chunk

    def _read_comment(self) -> None:
        start_line = self.line
        if self.text.startswith("//", self.pos):
            end = self.text.find("\n", self.pos)
            end = len(self.text) if end == -1 else end
            body = self.text[self.pos + 2:end]
        else:
            end = self.text.find("*/", self.pos + 2)
            if end == -1:
                log_then_raise(self.filename, "unterminated comment", InvalidTranslationFile)
            body = self.text[self.pos + 2:end]
            end += 2
        self._advance(end - self.pos)

        # A comment after a value on the same line is a trailing comment.
        if self.started and start_line == self.last_token_line:
            return
        self.pending.append(body.strip())

    def _read_string(self) -> str:
        quote = self._advance()
        chars: List[str] = []
        while self.pos < len(self.text):
            ch = self._advance()
            if ch == "\\":
                chars.append(self._advance())
            elif ch == quote:
                return "".join(chars)
            else:
                chars.append(ch)
        log_then_raise(self.filename, "unterminated string", InvalidTranslationFile)

    def _read_bare(self) -> str:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] not in _TOKEN_END:
            self._advance()
        if self.pos == start:
            log_then_raise(self.text[start:start + 20], f"{self.filename}: unexpected character", InvalidTranslationFile)
        return self.text[start:self.pos]

    # ---------- structure -------------------------------------------------- #
    def _attach(self, path: Path) -> None:
        if self.pending:
            self.result.by_path[path] = " ".join(self.pending)
            self.pending = []

    def _value_starts(self) -> None:
        if not self.stack:
            return
        top = self.stack[-1]
        if top.is_array:
            self._attach(top.path + (top.index,))
        else:
            self.pending = []

    def _key_read(self, key: str) -> None:
        top = self.stack[-1]
        top.key = key
        top.expecting_key = False
        self._attach(top.path + (key,))

    def _child_path(self) -> Path:
        if not self.stack:
            return ()
        top = self.stack[-1]
        return top.path + ((top.index,) if top.is_array else (top.key,))

    def scan(self) -> SourceComments:
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch in " \t\r\n":
                self._advance()
                continue
            if self.text.startswith("//", self.pos) or self.text.startswith("/*", self.pos):
                self._read_comment()
                continue

            self.last_token_line = self.line
            in_key_position = bool(self.stack) and self.stack[-1].expecting_key

            if ch in "{[":
                if not self.started:
                    self.before_all, self.pending = self.pending, []
                    self.started = True
                else:
                    self._value_starts()
                self.stack.append(_Container(self._child_path(), ch == "["))
                self._advance()
                # A comment after an opening bracket precedes the first entry.
                self.last_token_line = 0
            elif ch in "}]":
                if not self.stack:
                    log_then_raise(self.filename, "unbalanced brackets", InvalidTranslationFile)
                self.stack.pop()
                self.pending = []
                self._advance()
            elif ch == ":":
                self._advance()
            elif ch == ",":
                if self.stack:
                    top = self.stack[-1]
                    if top.is_array:
                        top.index += 1
                    else:
                        top.expecting_key = True
                self._advance()
            else:
                token = self._read_string() if ch in "\"'" else self._read_bare()
                if in_key_position:
                    self._key_read(token)
                else:
                    self._value_starts()

        for comment in self.before_all:
            for line in comment.splitlines():
                match = _re_key_comment.match(line.strip())
                if match is not None:
                    self.result.by_key[match.group(1)] = match.group(2)
        return self.result


def scan_comments(text: str, filename: str = "<string>") -> SourceComments:
    """Collect the developer comments of a JSON5 document."""
    return _Scanner(text, filename).scan()
