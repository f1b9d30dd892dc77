# src/tctree/state.py

"""
Lifecycle and outcome enumerations for test tree nodes.
"""

from enum import Enum

# Id of the hidden root suite; top-level nodes report it as parentNodeId.
ROOT_NODE_ID = 0


class NodeState(Enum):
    """Lifecycle of a node. FINISHED is terminal."""

    CREATED = "created"
    REGISTERED = "registered"  # Known to the IDE, not running yet.
    STARTED = "started"
    FINISHED = "finished"

    def __str__(self) -> str:
        return self.value


class TestOutcome(Enum):
    """Terminal classification of a leaf test."""

    __test__ = False  # Not a pytest test class.

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


# 🔼⚙️
