import logging

import pytest
import structlog

from tctree import CollectingSink, Tree
from tctree.protocol import parse_message
from tctree.telemetry import BASE_LOGGER_NAME


@pytest.fixture
def sink() -> CollectingSink:
    return CollectingSink()


@pytest.fixture
def tree(sink: CollectingSink) -> Tree:
    return Tree(sink)


@pytest.fixture
def prefixed_tree(sink: CollectingSink) -> Tree:
    return Tree(sink, id_prefix="1")


@pytest.fixture
def commands(sink: CollectingSink):
    """Returns a callable listing the command of every line written so far."""
    def _commands() -> list[str]:
        return [parse_message(line).command for line in sink.lines]
    return _commands


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo setup_logging() side effects between tests."""
    root_logger = logging.getLogger()
    library_logger = logging.getLogger(BASE_LOGGER_NAME)
    saved_level = root_logger.level
    saved_library_level = library_logger.level
    yield
    for handler in list(root_logger.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            handler.close()
            root_logger.removeHandler(handler)
    root_logger.setLevel(saved_level)
    library_logger.setLevel(saved_library_level)
    structlog.reset_defaults()
