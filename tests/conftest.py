import logging
from pathlib import Path

import pytest

from openrpc_diff import config
from openrpc_diff.report_generator import ReportGenerator
from openrpc_diff.spec_comparator import SpecComparator
from openrpc_diff.spec_loader import SpecLoader

logger = logging.getLogger(__name__)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def reset_openrpc_diff_config():
    """Module-level configuration must not leak between tests."""
    config.reset_config()
    yield
    config.reset_config()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def loader() -> SpecLoader:
    return SpecLoader()


@pytest.fixture
def comparator() -> SpecComparator:
    return SpecComparator()


@pytest.fixture
def generator() -> ReportGenerator:
    return ReportGenerator()


@pytest.fixture
def v1_document(loader):
    return loader.load(FIXTURES_DIR / "petstore_v1.json", side="left")


@pytest.fixture
def v2_document(loader):
    return loader.load(FIXTURES_DIR / "petstore_v2.json", side="right")
