"""Pytest configuration and fixtures."""

import pytest

from logmsglint.analyzers.message_analyzer import LogMessageAnalyzer
from logmsglint.config import get_settings
from logmsglint.parsers.python_parser import PythonParser, walk

# Sample Python code for testing
SAMPLE_STDLIB_LOGGING = '''
import logging

logger = logging.getLogger(__name__)

def start():
    logger.info("Starting server")
    logger.debug("listening on port %d", 8080)
'''

SAMPLE_STRUCTLOG = '''
import structlog

log = structlog.get_logger()

def login(user_id):
    log.info("User logged in!", user_id=user_id)
'''

SAMPLE_UNRELATED_INFO = '''
class Reporter:
    """Not a logger, just shares the method name."""

    def info(self, message):
        print(message)

reporter = Reporter()
reporter.info("Hello World!")
'''

SAMPLE_CONCATENATION = '''
import logging

logger = logging.getLogger(__name__)

def authenticate(user_id):
    logger.info("Token " + user_id)
'''

SAMPLE_SELF_LOGGER = '''
import logging

class Worker:
    def __init__(self):
        self.logger = logging.getLogger("worker")

    def run(self):
        self.logger.warning("Retrying...")
'''

SAMPLE_CLEAN = '''
import logging

logger = logging.getLogger(__name__)

def start(port):
    logger.info("starting server on port %d", port)
    logger.error(f"Failed to bind {port}!")
'''


def find_call(unit, prefix: str):
    """First call node whose source text starts with ``prefix``."""
    for node in walk(unit.root):
        if node.type == "call" and unit.text(node).startswith(prefix):
            return node
    raise AssertionError(f"no call starting with {prefix!r}")


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; tests that patch the environment need a fresh copy."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def parser():
    return PythonParser()


@pytest.fixture
def analyzer():
    return LogMessageAnalyzer()


@pytest.fixture
def lint(parser, analyzer):
    """Parse and analyze a source string."""

    def _lint(code: str, file_path: str = "test.py"):
        return analyzer.analyze(parser.parse(code, file_path))

    return _lint


@pytest.fixture
def sample_stdlib_logging():
    """Module-level stdlib logger sample."""
    return SAMPLE_STDLIB_LOGGING


@pytest.fixture
def sample_structlog():
    """structlog logger sample."""
    return SAMPLE_STRUCTLOG


@pytest.fixture
def sample_unrelated_info():
    """Look-alike ``info`` method sample."""
    return SAMPLE_UNRELATED_INFO


@pytest.fixture
def sample_concatenation():
    """Concatenated message sample."""
    return SAMPLE_CONCATENATION


@pytest.fixture
def sample_self_logger():
    """Logger stored on ``self`` sample."""
    return SAMPLE_SELF_LOGGER


@pytest.fixture
def sample_clean():
    """Sample with nothing to report."""
    return SAMPLE_CLEAN


@pytest.fixture
def find_call_node():
    """Look up a call node by its leading source text."""
    return find_call


@pytest.fixture
def call_in(parser):
    """Parse ``code`` and return its first call (or the first one starting with ``prefix``)."""

    def _call_in(code: str, prefix: str = ""):
        return find_call(parser.parse(code), prefix)

    return _call_in
