import pytest

from client.metrics import reset_metrics
from tools.knowledge_base.kb_store import KnowledgeStore

TEST_KEY = "k1eFjP@7xL9qZ#5mR2tY8sA3vB6nC0wD"


@pytest.fixture(autouse=True)
def clean_metrics():
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture
def kb_path(tmp_path):
    return tmp_path / "knowledge_base.dat"


@pytest.fixture
def store(kb_path):
    return KnowledgeStore(kb_path, TEST_KEY)
