#
# src/tctree/__init__.py
#
"""
tctree: in-memory test tree that reports its transitions as ##teamcity service messages.
"""
from .exceptions import (
    AlreadySetError,
    ConfigurationError,
    IllegalStateError,
    MissingOverrideError,
    ProtocolError,
    TreeError,
)
from .ids import IdAllocator
from .nodes import Node, TestNode, TestSuiteNode
from .protocol import escape_attribute_value, format_message, parse_message, unescape_attribute_value
from .sinks import CollectingSink, MessageSink, StreamSink
from .state import ROOT_NODE_ID, NodeState, TestOutcome
from .tree import Tree

__all__ = [
    "ROOT_NODE_ID",
    "AlreadySetError",
    "CollectingSink",
    "ConfigurationError",
    "IdAllocator",
    "IllegalStateError",
    "MessageSink",
    "MissingOverrideError",
    "Node",
    "NodeState",
    "ProtocolError",
    "StreamSink",
    "TestNode",
    "TestOutcome",
    "TestSuiteNode",
    "Tree",
    "TreeError",
    "escape_attribute_value",
    "format_message",
    "parse_message",
    "unescape_attribute_value",
]

# 🔼⚙️
