# src/tctree/tree.py

"""
The reporting session: hidden root suite, id allocation and session-level messages.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from tctree.ids import IdAllocator
from tctree.nodes import TestSuiteNode
from tctree.protocol.messages import format_message
from tctree.sinks import MessageSink, StreamSink
from tctree.state import ROOT_NODE_ID
from tctree.telemetry import get_logger, set_library_log_level

if TYPE_CHECKING:
    from tctree.config import ReporterConfig

log = get_logger("tree")

ROOT_NODE_NAME = "hidden root"


class Tree:
    """
    Root of a single test-reporting session.

    The root suite is invisible: no message is ever sent for it, and nodes
    added directly under it report ``parentNodeId='0'``. A tree is not
    reusable across sessions.

    Args:
        sink: Destination of protocol lines.
        id_prefix: Optional namespace for node ids (``"<prefix>-<n>"``).
    """

    def __init__(self, sink: MessageSink, id_prefix: str | None = None):
        self.sink = sink
        self.id_prefix = id_prefix
        self._ids = IdAllocator(prefix=id_prefix)
        self.root = TestSuiteNode(self, ROOT_NODE_ID, None, ROOT_NODE_NAME)
        log.debug("Test tree created", id_prefix=id_prefix, sink=type(sink).__name__)

    @classmethod
    def from_config(cls, config: "ReporterConfig", sink: MessageSink | None = None) -> "Tree":
        """
        Builds a tree writing to ``sink`` or, if omitted, to the configured stream.

        Also applies ``config.log_level`` to the library's loggers.
        """
        set_library_log_level(config.numeric_log_level)
        if sink is None:
            factory = StreamSink.stderr if config.stream == "stderr" else StreamSink.stdout
            sink = factory(flush=config.flush)
        return cls(sink, id_prefix=config.id_prefix)

    def next_id(self) -> int | str:
        return self._ids.next_id()

    @property
    def node_count(self) -> int:
        """Number of nodes created in this tree, excluding the root."""
        return self._ids.allocated

    def writeln(self, line: str) -> None:
        self.sink.writeln(line)

    # --- Session messages ---

    def start_notify(self) -> None:
        """Handshake telling the IDE that service messages follow."""
        self.writeln(format_message("enteredTheMatrix"))

    def update_root_node(
        self, name: str, comment: str | None = None, location: str | None = None
    ) -> None:
        attributes = [("name", name)]
        if isinstance(comment, str):
            attributes.append(("comment", comment))
        if isinstance(location, str):
            attributes.append(("location", location))
        self.writeln(format_message("rootName", attributes))

    def add_total_test_count(self, total_test_count: int) -> None:
        """Reports the expected number of tests; ignored unless it is a positive number."""
        if (
            isinstance(total_test_count, (int, float))
            and not isinstance(total_test_count, bool)
            and total_test_count > 0
        ):
            self.writeln(format_message("testCount", [("count", total_test_count)]))

    def testing_started(self) -> None:
        self.writeln(format_message("testingStarted"))

    def testing_finished(self) -> None:
        self.writeln(format_message("testingFinished"))

    # --- Termination ---

    def finish_all(self) -> None:
        """Force-finishes every outstanding node, children before parents."""
        log.debug("Force-finishing all outstanding nodes", node_count=self.node_count)
        self.root.finish_if_started()

    @contextmanager
    def session(self) -> Iterator["Tree"]:
        """
        Wraps a run in ``testingStarted`` / ``testingFinished``.

        Whatever is still open when the block exits, normally or through an
        exception, is force-finished first. Exceptions are re-raised.
        """
        self.testing_started()
        try:
            yield self
        except BaseException:
            log.warning("Test session aborted, closing outstanding nodes", exc_info=True)
            raise
        finally:
            self.finish_all()
            self.testing_finished()


# 🔼⚙️
