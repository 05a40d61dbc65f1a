from tests.mocks.server import MockApplicationServer, MockServiceContainer
from tests.mocks.store import FakeClock, InMemoryStore

__all__ = [
    "FakeClock",
    "InMemoryStore",
    "MockApplicationServer",
    "MockServiceContainer",
]
