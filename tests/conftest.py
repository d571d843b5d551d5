import pytest

from rental.config import Settings
from rental.system import RentalSystem
from storage.flat_file_store import FlatFileStore
from storage.memory_store import InMemoryStore


@pytest.fixture()
def memory_store():
    return InMemoryStore()


@pytest.fixture()
def system(memory_store):
    return RentalSystem.open(memory_store)


@pytest.fixture()
def settings(tmp_path):
    return Settings(data_dir=tmp_path, save_retries=1, save_backoff_seconds=0)


@pytest.fixture()
def flat_store(settings):
    return FlatFileStore(settings)
