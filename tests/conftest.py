from pathlib import Path

import pytest

from sqlfluent.base import Database
from tests.fakes import FakeProviderFactory

here = Path(__file__).parent
root_path = here.parent


@pytest.fixture
def provider() -> FakeProviderFactory:
    return FakeProviderFactory()


@pytest.fixture
def database(provider: FakeProviderFactory) -> Database:
    return Database(provider, "Data Source=fake")
