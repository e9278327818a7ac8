# Infrastructure Adapters Package
from .memory_repository import InMemoryProgressRepository

__all__ = ["InMemoryProgressRepository"]
