# src/tctree/nodes.py

"""
Test tree nodes and their lifecycle.

A node is either a suite (``TestSuiteNode``) or a leaf test (``TestNode``).
Both share the lifecycle implemented by ``Node``:

    CREATED -> REGISTERED -> STARTED -> FINISHED
    CREATED -> STARTED -> FINISHED

Every transition writes exactly one protocol line to the tree's sink, except
for starting an already started node, which is a no-op.
"""

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from tctree.exceptions import AlreadySetError, IllegalStateError, MissingOverrideError
from tctree.protocol.messages import format_message
from tctree.state import ROOT_NODE_ID, NodeState, TestOutcome
from tctree.telemetry import get_logger

if TYPE_CHECKING:
    from tctree.tree import Tree

log = get_logger("nodes")

# Reported for a started leaf that is force-finished before it got an outcome.
INTERRUPTED_MESSAGE = "Test was interrupted before reporting a result"


class Node:
    """
    Base class for suite and leaf nodes. Not meant to be instantiated directly.

    Args:
        tree: Owning tree; supplies ids and the output sink.
        node_id: Id unique among all nodes of ``tree``.
        parent: Parent suite, ``None`` only for the hidden root.
        name: Display name (suite name, spec name, ...).
        node_type: Optional type tag (e.g. 'suite', 'browser').
        location_path: Navigation info, reported as ``<node_type>://<location_path>``.
    """

    __test__ = False

    def __init__(
        self,
        tree: "Tree",
        node_id: int | str,
        parent: "TestSuiteNode | None",
        name: str,
        node_type: str | None = None,
        location_path: str | None = None,
    ):
        self.tree = tree
        self.id = node_id
        self.parent = parent
        self.name = name
        self.node_type = node_type
        self.location_path = location_path
        self.state = NodeState.CREATED
        self.metainfo: str | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, name={self.name!r}, state={self.state})"

    # --- Variant hooks ---

    @property
    def start_command_name(self) -> str:
        raise MissingOverrideError(f"{type(self).__name__} must define start_command_name")

    @property
    def finish_command_name(self) -> str:
        raise MissingOverrideError(f"{type(self).__name__} must define finish_command_name")

    def extra_finish_attributes(self) -> list[tuple[str, Any]]:
        raise MissingOverrideError(f"{type(self).__name__} must define extra_finish_attributes")

    def iter_children(self) -> Iterator["Node"]:
        return iter(())

    # --- Lifecycle ---

    @property
    def is_root(self) -> bool:
        return self.tree.root is self

    @property
    def is_finished(self) -> bool:
        return self.state is NodeState.FINISHED

    def register(self) -> None:
        """
        Announces the node to the IDE without marking it as running.

        The IDE adds the node with a 'pending' icon.
        """
        if self.state is not NodeState.CREATED:
            raise IllegalStateError("Only a created node can be registered", self.id, self.state)
        self.tree.writeln(self._init_message(running=False))
        self._set_state(NodeState.REGISTERED)

    def start(self) -> None:
        """
        Marks the node as running, announcing it first if the IDE has not seen it.
        Starting a started node does nothing.
        """
        if self.state is NodeState.STARTED:
            return
        if self.state is NodeState.FINISHED:
            raise IllegalStateError("Cannot start a finished node", self.id, self.state)
        if self.state is NodeState.CREATED:
            text = self._init_message(running=True)
        elif self.state is NodeState.REGISTERED:
            text = format_message(self.start_command_name, [("nodeId", self.id), ("running", True)])
        else:
            raise IllegalStateError("Unexpected node state", self.id, self.state)
        self.tree.writeln(text)
        self._set_state(NodeState.STARTED)

    def finish(self, finish_parent_if_last: bool = False) -> None:
        """
        Finishes the node. Does nothing for the hidden root.

        Args:
            finish_parent_if_last: Notify the parent suite, which finishes itself
                once all of its children are finished.
        """
        if self.is_root:
            return
        if self.state not in (NodeState.REGISTERED, NodeState.STARTED):
            raise IllegalStateError("Only a registered or started node can be finished", self.id, self.state)
        self.tree.writeln(self._finish_message())
        self._set_state(NodeState.FINISHED)
        if finish_parent_if_last:
            parent = self.parent
            if parent is not None and not parent.is_root:
                parent.on_child_finished()

    def finish_if_started(self) -> None:
        """
        Force-finishes this node and every unfinished descendant, children first.

        Meant for abrupt session termination. Nodes the IDE never heard of
        (still CREATED) are closed silently.
        """
        if self.state is NodeState.FINISHED:
            return
        for child in self.iter_children():
            child.finish_if_started()
        if self.is_root:
            return
        if self.state is NodeState.CREATED:
            log.debug("Closing node that was never announced", node_id=self.id, name=self.name)
            self._set_state(NodeState.FINISHED)
            return
        self.tree.writeln(self._finish_message(forced=True))
        self._set_state(NodeState.FINISHED)

    # --- Message building ---

    @property
    def parent_id(self) -> int | str:
        return self.parent.id if self.parent is not None else ROOT_NODE_ID

    def _init_message(self, running: bool) -> str:
        attributes: list[tuple[str, Any]] = [
            ("nodeId", self.id),
            ("parentNodeId", self.parent_id),
            ("name", self.name),
            ("running", running),
        ]
        if self.node_type is not None:
            attributes.append(("nodeType", self.node_type))
            if self.location_path is not None:
                attributes.append(("locationHint", f"{self.node_type}://{self.location_path}"))
        if isinstance(self.metainfo, str):
            attributes.append(("metainfo", self.metainfo))
        return format_message(self.start_command_name, attributes)

    def _finish_message(self, forced: bool = False) -> str:
        attributes: list[tuple[str, Any]] = [("nodeId", self.id)]
        attributes.extend(self.extra_finish_attributes())
        return format_message(self.finish_command_name, attributes)

    def _set_state(self, new_state: NodeState) -> None:
        old_state = self.state
        self.state = new_state
        log.debug(
            "Node state changed",
            node_id=self.id,
            name=self.name,
            old_state=old_state.name,
            new_state=new_state.name,
        )


class TestSuiteNode(Node):
    """
    Non-leaf node. Its result is derived from its children.

    Children keep insertion order, which is also the report order. Several
    children may share a name (e.g. retried tests).
    """

    def __init__(
        self,
        tree: "Tree",
        node_id: int | str,
        parent: "TestSuiteNode | None",
        name: str,
        node_type: str | None = None,
        location_path: str | None = None,
    ):
        super().__init__(tree, node_id, parent, name, node_type, location_path)
        self.children: list[Node] = []
        self._children_by_name: dict[str, list[Node]] = {}
        self.finished_child_count = 0

    @property
    def start_command_name(self) -> str:
        return "testSuiteStarted"

    @property
    def finish_command_name(self) -> str:
        return "testSuiteFinished"

    def extra_finish_attributes(self) -> list[tuple[str, Any]]:
        return []

    def iter_children(self) -> Iterator[Node]:
        return iter(self.children)

    def add_test_child(
        self, name: str, node_type: str | None = None, location_path: str | None = None
    ) -> "TestNode":
        """Adds a leaf test under this suite."""
        return self._add_child(TestNode, name, node_type, location_path)

    def add_test_suite_child(
        self, name: str, node_type: str | None = None, location_path: str | None = None
    ) -> "TestSuiteNode":
        """Adds a nested suite under this suite."""
        return self._add_child(TestSuiteNode, name, node_type, location_path)

    def _add_child(self, node_class, name, node_type, location_path):
        if self.state is NodeState.FINISHED:
            raise IllegalStateError("Child node cannot be created for a finished node", self.id, self.state)
        child = node_class(self.tree, self.tree.next_id(), self, name, node_type, location_path)
        self.children.append(child)
        self._children_by_name.setdefault(name, []).append(child)
        log.debug(
            "Child node added",
            parent_id=self.id,
            node_id=child.id,
            name=name,
            kind=node_class.__name__,
        )
        return child

    def find_children_by_name(self, name: str) -> tuple[Node, ...]:
        """All children named ``name``, in insertion order."""
        return tuple(self._children_by_name.get(name, ()))

    def find_child_node_by_name(self, name: str) -> Node | None:
        """
        Returns the child named ``name``, or None.

        When several children share the name, a suite wins over a leaf;
        otherwise the earliest added child is returned.
        """
        matches = self._children_by_name.get(name)
        if not matches:
            return None
        for child in matches:
            if isinstance(child, TestSuiteNode):
                return child
        return matches[0]

    def on_child_finished(self) -> None:
        """Counts a finished child and finishes this suite after the last one."""
        self.finished_child_count += 1
        if self.finished_child_count == len(self.children) and self.state is not NodeState.FINISHED:
            log.debug("All children finished, finishing suite", node_id=self.id, name=self.name)
            self.finish(True)


class TestNode(Node):
    """
    Leaf test node carrying an outcome and its diagnostics.
    """

    def __init__(
        self,
        tree: "Tree",
        node_id: int | str,
        parent: "TestSuiteNode | None",
        name: str,
        node_type: str | None = None,
        location_path: str | None = None,
    ):
        super().__init__(tree, node_id, parent, name, node_type, location_path)
        self.outcome: TestOutcome | None = None
        self.duration_millis: int | float | None = None
        self.failure_message: str | None = None
        self.failure_details: str | None = None
        self.expected: str | None = None
        self.actual: str | None = None
        self.expected_file_path: str | None = None
        self.actual_file_path: str | None = None

    def set_outcome(
        self,
        outcome: TestOutcome | str,
        duration_millis: int | float | None = None,
        failure_message: str | None = None,
        failure_details: str | None = None,
        expected: str | None = None,
        actual: str | None = None,
        expected_file_path: str | None = None,
        actual_file_path: str | None = None,
    ) -> None:
        """
        Records the test result. Must be called once, before ``finish()``.

        Raises:
            AlreadySetError: if an outcome was recorded before.
        """
        if self.outcome is not None:
            raise AlreadySetError("Test outcome has already been set", self.id)
        self.outcome = TestOutcome(outcome)
        self.duration_millis = duration_millis
        self.failure_message = _text_or_none(failure_message)
        self.failure_details = _text_or_none(failure_details)
        self.expected = _text_or_none(expected)
        self.actual = _text_or_none(actual)
        self.expected_file_path = _text_or_none(expected_file_path)
        self.actual_file_path = _text_or_none(actual_file_path)
        if self.outcome is TestOutcome.SKIPPED and not self.failure_message:
            self.failure_message = f"Pending test '{self.name}'"
        log.debug(
            "Test outcome set",
            node_id=self.id,
            name=self.name,
            outcome=self.outcome.name,
            duration_ms=duration_millis,
        )

    def set_metainfo(self, metainfo: str | None) -> None:
        """Free-form metadata, reported with the node's init message only."""
        self.metainfo = metainfo

    def add_std_err(self, text: str) -> None:
        """
        Sends diagnostic output for this test. Independent of the lifecycle, so
        it may be called after the node has finished.
        """
        if isinstance(text, str) and text:
            self.tree.writeln(format_message("testStdErr", [("nodeId", self.id), ("out", text)]))

    @property
    def start_command_name(self) -> str:
        return "testStarted"

    @property
    def finish_command_name(self) -> str:
        outcome = self.outcome
        if outcome is TestOutcome.SUCCESS:
            return "testFinished"
        if outcome is TestOutcome.SKIPPED:
            return "testIgnored"
        if outcome is TestOutcome.FAILED or outcome is TestOutcome.ERROR:
            return "testFailed"
        raise IllegalStateError("Test outcome must be set before finishing", self.id, self.state)

    def extra_finish_attributes(self) -> list[tuple[str, Any]]:
        attributes: list[tuple[str, Any]] = []
        if _is_number(self.duration_millis):
            attributes.append(("duration", _format_duration(self.duration_millis)))
        if self.outcome is TestOutcome.ERROR:
            attributes.append(("error", "yes"))
        attributes.extend(
            (key, value)
            for key, value in (
                ("message", self.failure_message),
                ("details", self.failure_details),
                ("expected", self.expected),
                ("actual", self.actual),
                ("expectedFile", self.expected_file_path),
                ("actualFile", self.actual_file_path),
            )
            if isinstance(value, str)
        )
        return attributes

    def _finish_message(self, forced: bool = False) -> str:
        if forced and self.outcome is None:
            log.debug("Reporting interrupted test as failed", node_id=self.id, name=self.name)
            return format_message(
                "testFailed", [("nodeId", self.id), ("message", INTERRUPTED_MESSAGE)]
            )
        return super()._finish_message(forced)


def _text_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _format_duration(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# 🔼⚙️
