"""Split a stream of concatenated JSON documents into complete documents.

Only object and array documents are recognized, which covers every JSON-RPC
message. The splitter tracks nesting depth and string state, so documents may
arrive back to back (``{...}{...}``), separated by whitespace, or cut at any
byte across several ``feed`` calls. It does not validate the documents it
emits; parsing them is left to the caller.
"""

from __future__ import annotations

import codecs
import json
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_MAX_BUFFER_SIZE = 8 * 1024 * 1024

OPENERS = "{["
WHITESPACE = " \t\r\n"

_STRUCTURAL = re.compile(r'["{}\[\]]')
_STRING_SPECIAL = re.compile(r'["\\]')
_GARBAGE_END = re.compile(r"[\s{\[]")


class FragmentKind(str, Enum):
    document = "document"
    garbage = "garbage"
    overflow = "overflow"
    abandoned = "abandoned"


@dataclass(slots=True, frozen=True)
class Fragment:
    kind: FragmentKind
    text: str


@dataclass(slots=True)
class _ScanState:
    open_containers: list[str] = field(default_factory=list)
    in_string: bool = False
    escape: bool = False


def _advance(state: _ScanState, text: str, pos: int) -> int | None:
    """Scan an open document; return the index just past its end, or None."""
    n = len(text)
    while pos < n:
        if state.in_string:
            if state.escape:
                state.escape = False
                pos += 1
                continue
            match = _STRING_SPECIAL.search(text, pos)
            if match is None:
                return None
            pos = match.end()
            if match.group() == "\\":
                state.escape = True
            else:
                state.in_string = False
            continue
        match = _STRUCTURAL.search(text, pos)
        if match is None:
            return None
        pos = match.end()
        char = match.group()
        if char == '"':
            state.in_string = True
        elif char in OPENERS:
            state.open_containers.append(char)
        else:
            state.open_containers.pop()
            if not state.open_containers:
                return pos
    return None


def looks_like_envelope(value: Any) -> bool:
    """True for an object that can only be a top level JSON-RPC message.

    A batch counts when every member qualifies.
    """
    if isinstance(value, list):
        return bool(value) and all(looks_like_envelope(item) for item in value)
    if not isinstance(value, dict):
        return False
    return "jsonrpc" in value or ("id" in value and ("result" in value or "error" in value))


def is_self_contained(text: str) -> bool:
    """True if ``text`` starts at a document boundary with a fresh message.

    The first document must parse and look like a JSON-RPC envelope, so a
    nested value that happens to complete inside a continuation chunk is not
    taken for a new message. Later documents must parse; a trailing
    unfinished document is allowed.
    """
    state = _ScanState()
    complete = 0
    pos, n = 0, len(text)
    while pos < n:
        if text[pos] in WHITESPACE:
            pos += 1
            continue
        if text[pos] not in OPENERS:
            return False
        end = _advance(state, text, pos)
        if end is None:
            break
        try:
            value = json.loads(text[pos:end])
        except (ValueError, RecursionError):
            return False
        if complete == 0 and not looks_like_envelope(value):
            return False
        complete += 1
        pos = end
    return complete > 0


@dataclass
class ConcatJsonSplitter:
    max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE
    resync: bool = True
    _partial: list[str] = field(default_factory=list, init=False, repr=False)
    _partial_size: int = field(default=0, init=False, repr=False)
    _discarding: bool = field(default=False, init=False, repr=False)
    _state: _ScanState = field(default_factory=_ScanState, init=False, repr=False)

    def __post_init__(self) -> None:
        # a bad byte turns into U+FFFD and only spoils the document holding it
        self._text_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def buffered(self) -> int:
        """Number of characters held for an unfinished document."""
        return self._partial_size

    @property
    def document_open(self) -> bool:
        return bool(self._state.open_containers)

    def feed(self, chunk: bytes | bytearray | memoryview | str) -> Iterator[Fragment]:
        """Decode ``chunk`` now and return a lazy iterator over the fragments it completes.

        Raises TypeError for unsupported chunk types, leaving the splitter
        state as it was.
        """
        if isinstance(chunk, str):
            text = chunk
        elif isinstance(chunk, (bytes, bytearray, memoryview)):
            text = self._text_decoder.decode(bytes(chunk))
        else:
            raise TypeError(f"expected bytes or str chunk, got {type(chunk).__name__}")
        return self._split(text)

    def reset(self) -> None:
        self._partial = []
        self._partial_size = 0
        self._discarding = False
        self._state = _ScanState()

    def _can_resync(self, text: str) -> bool:
        # members of an open array may legitimately be envelopes (a batch)
        if not self.resync or not self.document_open:
            return False
        return self._state.open_containers[-1] == "{" and is_self_contained(text)

    def _split(self, text: str) -> Iterator[Fragment]:
        if self._can_resync(text):
            stale = "".join(self._partial)
            self.reset()
            if stale:
                yield Fragment(FragmentKind.abandoned, stale)

        pos, n = 0, len(text)
        if self.document_open:
            end = _advance(self._state, text, 0)
            if end is None:
                yield from self._hold(text)
                return
            pos = end
            if self._discarding:
                self.reset()
            else:
                document = "".join(self._partial) + text[:end]
                self.reset()
                yield Fragment(FragmentKind.document, document)

        while pos < n:
            char = text[pos]
            if char in WHITESPACE:
                pos += 1
                continue
            if char in OPENERS:
                end = _advance(self._state, text, pos)
                if end is None:
                    yield from self._hold(text[pos:])
                    return
                yield Fragment(FragmentKind.document, text[pos:end])
                pos = end
                continue
            match = _GARBAGE_END.search(text, pos)
            end = match.start() if match else n
            yield Fragment(FragmentKind.garbage, text[pos:end])
            pos = end

    def _hold(self, text: str) -> Iterator[Fragment]:
        if self._discarding:
            return
        self._partial.append(text)
        self._partial_size += len(text)
        if self._partial_size > self.max_buffer_size:
            preview = "".join(self._partial)[:200]
            self._partial = []
            self._partial_size = 0
            # keep scanning until the oversized document ends, dropping its text
            self._discarding = True
            yield Fragment(FragmentKind.overflow, preview)


__all__ = [
    "DEFAULT_MAX_BUFFER_SIZE",
    "ConcatJsonSplitter",
    "Fragment",
    "FragmentKind",
    "is_self_contained",
    "looks_like_envelope",
]
