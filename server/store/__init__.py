from core.abstract import MatchStore
from core.config import Settings


def build_store(settings: Settings) -> MatchStore:
    """Instantiate the configured store backend."""
    if settings.store_backend == "memory":
        from .memory_store import MemoryMatchStore

        return MemoryMatchStore()

    from .prisma_store import PrismaMatchStore

    return PrismaMatchStore(settings.database_url)


__all__ = ["build_store"]
