from ttlshortener.services.allocator import IdentifierAllocator
from ttlshortener.services.shortening_service import ShorteningService
from ttlshortener.services.factory import build_dao, build_service


__all__ = [
    'IdentifierAllocator',
    'ShorteningService',
    'build_dao',
    'build_service',
]
