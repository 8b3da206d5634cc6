"""
Test Fixtures

Common test classes used across test modules
"""

import threading
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar('T')


class Database:
    """Test database class"""

    def __init__(self):
        self.name = "TestDB"


class CacheService:
    """Test cache service"""

    def __init__(self):
        self.cache = {}


class UserRepository:
    """Test repository with dependencies"""

    def __init__(self, db: Database, cache: CacheService):
        self.db = db
        self.cache = cache


class CounterService:
    """Service with mutable state for testing singleton behavior"""

    def __init__(self):
        self.counter = 0

    def increment(self):
        self.counter += 1
        return self.counter


class ServiceWithoutHint:
    """Service with missing type hint - for error testing"""

    def __init__(self, dependency):  # No type hint!
        self.dependency = dependency


class FailingService:
    """Service whose constructor always fails"""

    def __init__(self):
        raise RuntimeError("connection refused")


class ServiceA:
    """First half of a constructor cycle"""

    def __init__(self, b: "ServiceB"):
        self.b = b


class ServiceB:
    """Second half of a constructor cycle"""

    def __init__(self, a: ServiceA):
        self.a = a


class Session:
    """Thread bound state"""

    def __init__(self):
        self.thread_id = threading.get_ident()


class SessionConsumer:
    """Long lived service that keeps a session"""

    def __init__(self, session: Session):
        self.session = session


# -- targets -------------------------------------------------------------------

class Serializable:
    """Marker base class"""


class Qux:
    pass


class SpecialQux(Qux):
    pass


class Bar:

    def __init__(self, qux: Qux):
        self.qux = qux


class SpecialBar(Bar):
    pass


class Foo(Serializable):

    def __init__(self, bar: Bar):
        self.bar = bar


class Baz:

    def __init__(self, bar: Bar):
        self.bar = bar


# -- contracts -----------------------------------------------------------------

class Storage(ABC):
    """Abstract storage"""

    @abstractmethod
    def read(self, key: str) -> str:
        pass


class FileStorage(Storage):

    def read(self, key: str) -> str:
        return f"file:{key}"


class MemoryStorage(Storage):

    def read(self, key: str) -> str:
        return f"memory:{key}"


class User:
    pass


class Order:
    pass


class Repository(Generic[T]):
    """Generic repository"""


class UserRepo(Repository[User]):
    pass


class OrderRepo(Repository[Order]):
    pass


class Plugin:

    def __init__(self, name: str = "plugin"):
        self.name = name
