import pytest

from tests.doubles import RecordingProvider


@pytest.fixture
def provider() -> RecordingProvider:
    return RecordingProvider()
