"""Lexical ids: the markers that tell apart identifiers sharing a name.

Every quote operation mints one id from a process-wide counter. Ids only ever
increase, so the ids minted while a macro transformer runs form a contiguous
range that the expander can hand to the hygiene renamer.
"""

from __future__ import annotations

import threading

# Reserved id for identifiers that must resolve against the macro call site.
CALL_SITE = 0


class LexicalCounter:
    __slots__ = ("_next", "_lock")

    def __init__(self, start: int = 1):
        self._next = start
        self._lock = threading.Lock()

    def mint(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value

    def peek(self) -> int:
        """The id the next call to mint() will return."""
        return self._next


_counter = LexicalCounter()


def fresh_lexical_id() -> int:
    return _counter.mint()


def next_lexical_id() -> int:
    return _counter.peek()
