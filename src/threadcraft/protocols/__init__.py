"""Protocol interfaces for swappable implementations.

Protocols enable:
- Swapping the in-memory cache for a shared store without touching services
- Unit testing services with fake fetchers and gateways
- Clear separation of concerns

Usage:
    ```python
    from threadcraft.protocols import CacheStore, ModelGateway

    store: CacheStore = InMemoryCacheRepository(ttl=3600)
    gateway: ModelGateway = ChatCompletionGateway(client, settings)
    ```
"""

from .cache_store import CacheStore
from .content_fetcher import ContentFetcher
from .model_gateway import ModelGateway

__all__ = [
    "CacheStore",
    "ContentFetcher",
    "ModelGateway",
]
