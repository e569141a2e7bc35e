"""
Caching adapter implementation for RefGraphLib.

Provides a transparent caching layer that can wrap any ModelAdapter. Node
resolution, child enumeration and version attributes are cached; plugins
and reference discovery always go to the wrapped adapter, since references
depend on the current content of a workspace.
"""

from typing import Any, Dict, Hashable, Iterator, List, Optional
from cachetools import TTLCache

from .core.adapter import ModelAdapter
from .core.identity import ModuleVersion, NodePath
from .core.node import ClassificationNode, ModuleNode, Node


class CachingModelAdapter(ModelAdapter):
    """
    Optional caching layer for any model adapter.

    Useful when the model is expensive to query (remote configuration,
    parsed files) and several jobs run against it in the same execution.

    Example:
        model = CachingModelAdapter(XmlModelAdapter(config_path), max_size=5000)
        context = ExecContext(model)
    """

    def __init__(
        self,
        base_adapter: ModelAdapter,
        max_size: int = 10000,
        ttl: float = 300.0  # 5 minutes
    ):
        """
        Initialize caching adapter.

        Args:
            base_adapter: The underlying model adapter to wrap
            max_size: Maximum number of entries in cache
            ttl: Time-to-live for cache entries in seconds
        """
        self._adapter = base_adapter
        self._cache = TTLCache(maxsize=max_size, ttl=ttl)

        # Statistics
        self.cache_hits = 0
        self.cache_misses = 0

    @property
    def base_adapter(self) -> ModelAdapter:
        return self._adapter

    def _cached(self, cache_key: Hashable, compute) -> Any:
        if cache_key in self._cache:
            self.cache_hits += 1
            return self._cache[cache_key]
        self.cache_misses += 1
        value = compute()
        self._cache[cache_key] = value
        return value

    def get_node(self, node_path: NodePath) -> Optional[Node]:
        return self._cached(("node", node_path), lambda: self._adapter.get_node(node_path))

    def get_children(self, node: ClassificationNode) -> Iterator[Node]:
        children: List[Node] = self._cached(
            ("children", node.node_path),
            lambda: list(self._adapter.get_children(node)),
        )
        return iter(children)

    def get_version_attributes(self, module_version: ModuleVersion) -> Dict[str, str]:
        attributes = self._cached(
            ("attributes", module_version),
            lambda: dict(self._adapter.get_version_attributes(module_version)),
        )
        # Callers get their own copy
        return dict(attributes)

    def get_scm_plugin(self, module: ModuleNode):
        """
        Delegate to underlying adapter.
        """
        return self._adapter.get_scm_plugin(module)

    def get_reference_manager(self, module: ModuleNode):
        """
        Delegate to underlying adapter.
        """
        return self._adapter.get_reference_manager(module)

    def get_cache_stats(self) -> dict:
        """
        Get cache statistics for monitoring and debugging.
        """
        total_requests = self.cache_hits + self.cache_misses
        hit_rate = self.cache_hits / total_requests if total_requests > 0 else 0

        return {
            'cache_hits': self.cache_hits,
            'cache_misses': self.cache_misses,
            'hit_rate': hit_rate,
            'cache_size': len(self._cache),
            'max_size': self._cache.maxsize,
            'ttl': self._cache.ttl
        }

    def clear_cache(self) -> None:
        """
        Clear all cached entries.
        """
        self._cache.clear()
        self.cache_hits = 0
        self.cache_misses = 0
