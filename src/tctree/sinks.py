#
# src/tctree/sinks.py
#
"""
Output sinks that receive protocol lines from a tree.
"""
import sys
from typing import Protocol, TextIO, runtime_checkable


@runtime_checkable
class MessageSink(Protocol):
    """
    Append-only, order-preserving destination for protocol lines.
    """
    def writeln(self, line: str) -> None:
        """
        Appends one complete protocol line. The line carries no terminator.
        """
        ...


class StreamSink:
    """
    Writes each line to a text stream, terminated by a newline.
    """
    def __init__(self, stream: TextIO, flush: bool = True):
        self._stream = stream
        self._flush = flush

    @classmethod
    def stdout(cls, flush: bool = True) -> "StreamSink":
        """
        Binds the interpreter's original stdout rather than ``sys.stdout``.

        Test frameworks commonly replace ``sys.stdout`` with a capture buffer
        that is only drained when the run ends; the IDE needs every line as
        soon as it is produced.
        """
        stream = sys.__stdout__ if sys.__stdout__ is not None else sys.stdout
        return cls(stream, flush=flush)

    @classmethod
    def stderr(cls, flush: bool = True) -> "StreamSink":
        stream = sys.__stderr__ if sys.__stderr__ is not None else sys.stderr
        return cls(stream, flush=flush)

    @property
    def stream(self) -> TextIO:
        return self._stream

    def writeln(self, line: str) -> None:
        self._stream.write(line + "\n")
        if self._flush:
            self._stream.flush()


class CollectingSink:
    """
    Keeps every line in memory. Handy for tests and for tools that post-process output.
    """
    def __init__(self) -> None:
        self.lines: list[str] = []

    def writeln(self, line: str) -> None:
        self.lines.append(line)

    def clear(self) -> None:
        self.lines.clear()

    def getvalue(self) -> str:
        return "".join(line + "\n" for line in self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self):
        return iter(self.lines)

# 🔼⚙️
