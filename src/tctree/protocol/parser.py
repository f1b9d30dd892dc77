# src/tctree/protocol/parser.py

"""
Parsing and consistency checking of ##teamcity service-message streams.

Used by the ``tctree validate`` command and by tests to read back what a
tree wrote.
"""

from collections.abc import Iterable

from attrs import define, field

from tctree.exceptions import ProtocolError
from tctree.protocol.escaping import ESCAPE_CHAR, unescape_attribute_value
from tctree.protocol.messages import MESSAGE_PREFIX, MESSAGE_SUFFIX
from tctree.state import ROOT_NODE_ID
from tctree.telemetry import get_logger

log = get_logger("protocol.parser")

ROOT_NODE_WIRE_ID = str(ROOT_NODE_ID)

START_COMMANDS = {"testSuiteStarted": "suite", "testStarted": "test"}
FINISH_COMMANDS = {
    "testSuiteFinished": "suite",
    "testFinished": "test",
    "testIgnored": "test",
    "testFailed": "test",
}


@define(frozen=True, slots=True)
class ServiceMessage:
    """A decoded protocol line."""

    command: str
    attributes: dict[str, str] = field(factory=dict)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.attributes.get(key, default)


def is_service_message(line: str) -> bool:
    return line.startswith(MESSAGE_PREFIX)


def parse_message(line: str) -> ServiceMessage:
    """
    Decode a single ``##teamcity[...]`` line.

    Raises:
        ProtocolError: if the line is not a well-formed service message.
    """
    text = line.rstrip("\r\n")
    if not text.startswith(MESSAGE_PREFIX) or not text.endswith(MESSAGE_SUFFIX):
        raise ProtocolError("Not a service message", line=line)
    body = text[len(MESSAGE_PREFIX) : -len(MESSAGE_SUFFIX)]

    pos = 0
    length = len(body)
    while pos < length and not body[pos].isspace():
        pos += 1
    command = body[:pos]
    if not command:
        raise ProtocolError("Service message has no command", line=line)

    attributes: dict[str, str] = {}
    while True:
        while pos < length and body[pos].isspace():
            pos += 1
        if pos >= length:
            break
        eq = body.find("=", pos)
        if eq == -1:
            raise ProtocolError(f"Attribute without value at offset {pos}", line=line)
        key = body[pos:eq]
        if not key or any(ch.isspace() for ch in key):
            raise ProtocolError(f"Malformed attribute name {key!r}", line=line)
        if eq + 1 >= length or body[eq + 1] != "'":
            raise ProtocolError(f"Attribute {key!r} value is not quoted", line=line)

        start = eq + 2
        pos = start
        while pos < length and body[pos] != "'":
            # Skip the character following an escape, it may be a quote.
            pos += 2 if body[pos] == ESCAPE_CHAR else 1
        if pos >= length:
            raise ProtocolError(f"Unterminated value for attribute {key!r}", line=line)
        if key in attributes:
            raise ProtocolError(f"Duplicate attribute {key!r}", line=line)
        attributes[key] = unescape_attribute_value(body[start:pos])
        pos += 1
        if pos < length and not body[pos].isspace():
            raise ProtocolError(f"Expected whitespace after attribute {key!r}", line=line)

    return ServiceMessage(command=command, attributes=attributes)


@define(frozen=True, slots=True)
class ValidationReport:
    """Outcome of checking a protocol stream."""

    message_count: int
    problems: tuple[str, ...] = ()
    unfinished: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.problems and not self.unfinished


@define(slots=True)
class _SeenNode:
    kind: str
    parent_id: str
    state: str


class ProtocolValidator:
    """
    Checks that a stream of protocol lines describes a consistent tree.

    Lines that are not service messages are ignored, since real output is
    interleaved with ordinary test stdout.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, _SeenNode] = {}
        self._problems: list[str] = []
        self._message_count = 0

    def feed_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.feed(line)

    def feed(self, line: str) -> ServiceMessage | None:
        """Check one line; returns the decoded message or None if skipped."""
        if not is_service_message(line):
            return None
        self._message_count += 1
        try:
            message = parse_message(line)
        except ProtocolError as e:
            self._problem(f"line {self._message_count}: {e}")
            return None
        self._check(message)
        return message

    def finish(self) -> ValidationReport:
        unfinished = tuple(
            node_id for node_id, node in self._nodes.items() if node.state != "finished"
        )
        report = ValidationReport(
            message_count=self._message_count,
            problems=tuple(self._problems),
            unfinished=unfinished,
        )
        log.debug(
            "Protocol validation complete",
            messages=report.message_count,
            problems=len(report.problems),
            unfinished=len(report.unfinished),
        )
        return report

    def _problem(self, text: str) -> None:
        log.debug("Protocol problem", problem=text)
        self._problems.append(text)

    def _check(self, message: ServiceMessage) -> None:
        command = message.command
        where = f"message {self._message_count} ({command})"
        if command in START_COMMANDS:
            self._check_start(message, START_COMMANDS[command], where)
        elif command in FINISH_COMMANDS:
            self._check_finish(message, FINISH_COMMANDS[command], where)
        elif command == "testStdErr":
            node_id = message.get("nodeId")
            if node_id not in self._nodes:
                self._problem(f"{where}: output for unknown node '{node_id}'")

    def _check_start(self, message: ServiceMessage, kind: str, where: str) -> None:
        node_id = message.get("nodeId")
        running = message.get("running")
        if node_id is None:
            self._problem(f"{where}: missing nodeId")
            return
        if running not in ("true", "false"):
            self._problem(f"{where}: running must be 'true' or 'false', got {running!r}")

        parent_id = message.get("parentNodeId")
        if parent_id is None:
            # Re-start of a node that was registered earlier.
            seen = self._nodes.get(node_id)
            if seen is None:
                self._problem(f"{where}: start of unknown node '{node_id}'")
            elif seen.state != "registered":
                self._problem(f"{where}: node '{node_id}' restarted while {seen.state}")
            elif seen.kind != kind:
                self._problem(f"{where}: node '{node_id}' is a {seen.kind}, not a {kind}")
            else:
                seen.state = "started"
            return

        if node_id in self._nodes or node_id == ROOT_NODE_WIRE_ID:
            self._problem(f"{where}: duplicate node id '{node_id}'")
            return
        if message.get("name") is None:
            self._problem(f"{where}: missing name")
        if parent_id != ROOT_NODE_WIRE_ID:
            parent = self._nodes.get(parent_id)
            if parent is None:
                self._problem(f"{where}: unknown parent '{parent_id}'")
            elif parent.kind != "suite":
                self._problem(f"{where}: parent '{parent_id}' is not a suite")
            elif parent.state == "finished":
                self._problem(f"{where}: parent '{parent_id}' already finished")
        state = "started" if running == "true" else "registered"
        self._nodes[node_id] = _SeenNode(kind=kind, parent_id=parent_id, state=state)

    def _check_finish(self, message: ServiceMessage, kind: str, where: str) -> None:
        node_id = message.get("nodeId")
        seen = self._nodes.get(node_id) if node_id is not None else None
        if seen is None:
            self._problem(f"{where}: finish of unknown node '{node_id}'")
            return
        if seen.kind != kind:
            self._problem(f"{where}: node '{node_id}' is a {seen.kind}, not a {kind}")
        if seen.state == "finished":
            self._problem(f"{where}: node '{node_id}' finished twice")
        seen.state = "finished"


# 🔼⚙️
