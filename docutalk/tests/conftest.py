import os
import tempfile
from typing import List

import pytest

# Keep log files out of the working tree during tests
os.environ.setdefault("APP_LOG_DIR", tempfile.mkdtemp(prefix="docutalk-test-logs-"))

from docutalk.domain.errors import RetrievalError  # noqa: E402
from docutalk.modules.rag.client import Passage  # noqa: E402
from docutalk.tests.fakes import FakeRetrieval  # noqa: E402


@pytest.fixture
def passages() -> List[Passage]:
    return [
        Passage(content="Alpha content", source="docs/alpha.pdf", score=0.9),
        Passage(content="Beta content", source="docs/beta.pdf", score=0.8),
    ]


@pytest.fixture
def retrieval(passages) -> FakeRetrieval:
    return FakeRetrieval(passages=passages, sources=["uploads/alpha.pdf", "uploads/beta.pdf"])


@pytest.fixture
def failing_retrieval() -> FakeRetrieval:
    return FakeRetrieval(error=RetrievalError("Search service is unreachable", code="RETRIEVAL_UNREACHABLE"))
