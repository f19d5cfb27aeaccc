"""Turn inbound byte chunks into decoded JSON values."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from .jsonstream import DEFAULT_MAX_BUFFER_SIZE, ConcatJsonSplitter, Fragment, FragmentKind

_REASONS = {
    FragmentKind.garbage: "unexpected data between documents",
    FragmentKind.overflow: "document exceeds buffer limit",
    FragmentKind.abandoned: "unterminated document abandoned",
}


@dataclass(slots=True, frozen=True)
class DecodeFailure:
    """Marker yielded in place of a value that could not be decoded."""

    reason: str
    fragment: str


class StreamDecoder:
    """Feed chunks in, get decoded values (or DecodeFailure markers) out.

    Buffering of documents split across chunks lives in the splitter and
    persists between ``feed`` calls.
    """

    def __init__(
        self,
        splitter: ConcatJsonSplitter | None = None,
        *,
        max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE,
    ) -> None:
        self._splitter = splitter or ConcatJsonSplitter(max_buffer_size=max_buffer_size)

    @property
    def buffered(self) -> int:
        return self._splitter.buffered

    def feed(self, chunk: bytes | bytearray | str) -> Iterator[Any]:
        fragments = self._splitter.feed(chunk)
        return self._decode(fragments)

    def _decode(self, fragments: Iterable[Fragment]) -> Iterator[Any]:
        for fragment in fragments:
            if fragment.kind is not FragmentKind.document:
                yield DecodeFailure(reason=_REASONS[fragment.kind], fragment=fragment.text)
                continue
            try:
                value = json.loads(fragment.text)
            except json.JSONDecodeError as exc:
                yield DecodeFailure(reason=f"invalid JSON: {exc.msg}", fragment=fragment.text)
            except RecursionError:
                yield DecodeFailure(reason="document nested too deeply", fragment=fragment.text)
            else:
                yield value


__all__ = ["DecodeFailure", "StreamDecoder"]
