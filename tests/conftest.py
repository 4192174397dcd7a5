from unittest.mock import MagicMock

import pytest

from common.checkpoint import CheckpointStore


@pytest.fixture
def mock_client():
    mock = MagicMock()
    mock.fetch_events.return_value = ([], "f/next")
    return mock


@pytest.fixture
def mock_sink():
    mock = MagicMock()
    return mock


@pytest.fixture
def store(tmp_path):
    return CheckpointStore(str(tmp_path / "state.yml"))
