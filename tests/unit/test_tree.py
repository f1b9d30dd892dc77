#
# tests/unit/test_tree.py
#
"""
Tests for session-level messages, end-to-end scenarios and forced termination.
"""

import io
import logging
import sys

import pytest

from tctree import ROOT_NODE_ID, CollectingSink, NodeState, StreamSink, TestOutcome, Tree
from tctree.config import ReporterConfig
from tctree.nodes import INTERRUPTED_MESSAGE
from tctree.protocol import ProtocolValidator, parse_message


class TestSessionMessages:
    def test_handshake(self, tree: Tree, sink: CollectingSink) -> None:
        tree.start_notify()
        assert sink.lines == ["##teamcity[enteredTheMatrix]"]

    def test_root_name_with_optional_fields(self, tree: Tree, sink: CollectingSink) -> None:
        tree.update_root_node("Karma", "karma.conf.js", "file:///project/karma.conf.js")
        assert sink.lines == [
            "##teamcity[rootName name='Karma' comment='karma.conf.js' "
            "location='file:///project/karma.conf.js']"
        ]

    def test_root_name_only(self, tree: Tree, sink: CollectingSink) -> None:
        tree.update_root_node("Mocha [unit]")
        assert sink.lines == ["##teamcity[rootName name='Mocha |[unit|]']"]

    def test_total_count(self, tree: Tree, sink: CollectingSink) -> None:
        tree.add_total_test_count(5)
        assert sink.lines == ["##teamcity[testCount count='5']"]

    @pytest.mark.parametrize("count", [0, -1, None, True, "5"])
    def test_total_count_ignored_unless_positive_number(
        self, tree: Tree, sink: CollectingSink, count
    ) -> None:
        tree.add_total_test_count(count)
        assert sink.lines == []

    def test_testing_started_and_finished(self, tree: Tree, sink: CollectingSink) -> None:
        tree.testing_started()
        tree.testing_finished()
        assert sink.lines == ["##teamcity[testingStarted]", "##teamcity[testingFinished]"]

    def test_root_is_hidden(self, tree: Tree) -> None:
        assert tree.root.id == ROOT_NODE_ID
        assert tree.root.parent is None
        assert tree.root.is_root

    def test_top_level_nodes_report_root_as_parent(self, tree: Tree, sink: CollectingSink) -> None:
        tree.root.add_test_child("t").start()
        assert parse_message(sink.lines[0]).get("parentNodeId") == str(ROOT_NODE_ID)
        validator = ProtocolValidator()
        validator.feed_lines(sink.lines)
        assert validator.finish().problems == ()


class TestEndToEnd:
    def test_single_passing_test_with_prefix(self, prefixed_tree: Tree, sink: CollectingSink) -> None:
        suite = prefixed_tree.root.add_test_suite_child("Login Tests")
        leaf = suite.add_test_child("renders form")

        suite.start()
        leaf.start()
        leaf.set_outcome(TestOutcome.SUCCESS, 42)
        leaf.finish(True)

        assert sink.lines == [
            "##teamcity[testSuiteStarted nodeId='1-1' parentNodeId='0' name='Login Tests' running='true']",
            "##teamcity[testStarted nodeId='1-2' parentNodeId='1-1' name='renders form' running='true']",
            "##teamcity[testFinished nodeId='1-2' duration='42']",
            "##teamcity[testSuiteFinished nodeId='1-1']",
        ]

    def test_full_session(self, tree: Tree, sink: CollectingSink, commands) -> None:
        tree.start_notify()
        tree.update_root_node("pytest")
        tree.add_total_test_count(2)
        tree.testing_started()
        suite = tree.root.add_test_suite_child("test_math.py", "file", "tests/test_math.py")
        ok = suite.add_test_child("test_add")
        bad = suite.add_test_child("test_div")
        suite.register()
        ok.register()
        bad.register()
        suite.start()
        ok.start()
        ok.set_outcome(TestOutcome.SUCCESS, 1)
        ok.finish(True)
        bad.start()
        bad.add_std_err("ZeroDivisionError\n")
        bad.set_outcome(TestOutcome.ERROR, 2, "ZeroDivisionError", "Traceback ...")
        bad.finish(True)
        tree.testing_finished()

        assert commands() == [
            "enteredTheMatrix",
            "rootName",
            "testCount",
            "testingStarted",
            "testSuiteStarted",
            "testStarted",
            "testStarted",
            "testSuiteStarted",
            "testStarted",
            "testFinished",
            "testStarted",
            "testStdErr",
            "testFailed",
            "testSuiteFinished",
            "testingFinished",
        ]


class TestForcedTermination:
    def test_force_finish_mid_run(self, tree: Tree, sink: CollectingSink) -> None:
        suite = tree.root.add_test_suite_child("Suite")
        leaves = [suite.add_test_child(f"t{i}") for i in range(3)]
        suite.start()
        for leaf in leaves:
            leaf.start()
        leaves[0].set_outcome(TestOutcome.SUCCESS)
        leaves[0].finish(True)

        suite.finish_if_started()

        finish_lines = [line for line in sink.lines if "Started" not in line]
        assert finish_lines == [
            "##teamcity[testFinished nodeId='2']",
            f"##teamcity[testFailed nodeId='3' message='{INTERRUPTED_MESSAGE}']",
            f"##teamcity[testFailed nodeId='4' message='{INTERRUPTED_MESSAGE}']",
            "##teamcity[testSuiteFinished nodeId='1']",
        ]
        assert all(node.state is NodeState.FINISHED for node in [suite, *leaves])

    def test_forced_finish_uses_reported_outcome(self, tree: Tree, sink: CollectingSink) -> None:
        suite = tree.root.add_test_suite_child("Suite")
        leaf = suite.add_test_child("t")
        suite.start()
        leaf.start()
        leaf.set_outcome(TestOutcome.FAILED, failure_message="boom")
        tree.finish_all()
        assert sink.lines[-2:] == [
            "##teamcity[testFailed nodeId='2' message='boom']",
            "##teamcity[testSuiteFinished nodeId='1']",
        ]

    def test_never_announced_nodes_are_closed_silently(self, tree: Tree, sink: CollectingSink) -> None:
        suite = tree.root.add_test_suite_child("Suite")
        pending = suite.add_test_child("never ran")
        suite.start()
        tree.finish_all()
        assert sink.lines[-1] == "##teamcity[testSuiteFinished nodeId='1']"
        assert pending.is_finished
        assert len(sink) == 2

    def test_finish_all_is_repeatable(self, tree: Tree, sink: CollectingSink) -> None:
        suite = tree.root.add_test_suite_child("Suite")
        suite.start()
        tree.finish_all()
        tree.finish_all()
        assert len(sink) == 2

    def test_nested_children_before_parents(self, tree: Tree, sink: CollectingSink) -> None:
        outer = tree.root.add_test_suite_child("outer")
        inner = outer.add_test_suite_child("inner")
        leaf = inner.add_test_child("leaf")
        sibling = outer.add_test_child("sibling")
        for node in (outer, inner, leaf, sibling):
            node.start()
        tree.finish_all()
        assert sink.lines[-4:] == [
            f"##teamcity[testFailed nodeId='{leaf.id}' message='{INTERRUPTED_MESSAGE}']",
            f"##teamcity[testSuiteFinished nodeId='{inner.id}']",
            f"##teamcity[testFailed nodeId='{sibling.id}' message='{INTERRUPTED_MESSAGE}']",
            f"##teamcity[testSuiteFinished nodeId='{outer.id}']",
        ]


class TestSessionContext:
    def test_session_wraps_run(self, tree: Tree, sink: CollectingSink) -> None:
        with tree.session() as session:
            assert session is tree
            suite = tree.root.add_test_suite_child("Suite")
            suite.start()
        assert sink.lines == [
            "##teamcity[testingStarted]",
            "##teamcity[testSuiteStarted nodeId='1' parentNodeId='0' name='Suite' running='true']",
            "##teamcity[testSuiteFinished nodeId='1']",
            "##teamcity[testingFinished]",
        ]

    def test_session_closes_nodes_on_error(self, tree: Tree, sink: CollectingSink) -> None:
        with pytest.raises(RuntimeError, match="crash"):
            with tree.session():
                suite = tree.root.add_test_suite_child("Suite")
                leaf = suite.add_test_child("t")
                suite.start()
                leaf.start()
                raise RuntimeError("crash")
        assert sink.lines[-3:] == [
            f"##teamcity[testFailed nodeId='2' message='{INTERRUPTED_MESSAGE}']",
            "##teamcity[testSuiteFinished nodeId='1']",
            "##teamcity[testingFinished]",
        ]


class TestFromConfig:
    def test_uses_given_sink_and_prefix(self) -> None:
        sink = CollectingSink()
        tree = Tree.from_config(ReporterConfig(id_prefix="w3"), sink=sink)
        assert tree.sink is sink
        assert tree.root.add_test_child("t").id == "w3-1"

    def test_stderr_stream(self) -> None:
        tree = Tree.from_config(ReporterConfig(stream="stderr", flush=False))
        assert isinstance(tree.sink, StreamSink)
        assert tree.sink.stream is (sys.__stderr__ or sys.stderr)

    def test_writes_to_stream(self) -> None:
        buffer = io.StringIO()
        tree = Tree(StreamSink(buffer))
        tree.start_notify()
        tree.testing_started()
        assert buffer.getvalue() == "##teamcity[enteredTheMatrix]\n##teamcity[testingStarted]\n"

    def test_applies_log_level(self, caplog) -> None:
        tree = Tree.from_config(ReporterConfig(log_level="DEBUG"), sink=CollectingSink())
        assert logging.getLogger("tctree").getEffectiveLevel() == logging.DEBUG

        tree.root.add_test_child("t").start()
        assert any("Node state changed" in record.getMessage() for record in caplog.records)

    def test_default_level_silences_debug(self, caplog) -> None:
        caplog.set_level(logging.DEBUG)
        tree = Tree.from_config(ReporterConfig(), sink=CollectingSink())
        tree.root.add_test_child("t").start()
        assert not [record for record in caplog.records if record.name.startswith("tctree.")]
