"""Feature registry.

The registry maps each feature type to its ``Feature`` channel. Consumers
can ask for a feature before it is registered; the channel they receive
stays pending until a matching ``add`` publishes an instance.

Example:
    >>> registry = FeatureRegistry()
    >>> cache = registry.get(CacheFeature)          # pending
    >>> registry.add(CacheFeature, lambda r: CacheFeature(size=100))
    >>> cache.subscribe(lambda instance: print(instance.size))
    100
"""

import threading
from typing import Any, Callable, Dict, Iterator, List, Optional, Type, TypeVar

from settingsflow.features.feature import Feature
from settingsflow.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class FeatureRegistry:
    """Central registry of features, keyed by their exact type.

    Args:
        feature_factory: Creates an instance from a type when ``add`` is called
            without a factory. Defaults to calling the type with no arguments.
    """

    def __init__(self, feature_factory: Optional[Callable[[type], Any]] = None):
        self._features: Dict[type, Feature] = {}
        self._lock = threading.RLock()
        self._feature_factory = feature_factory or (lambda feature_type: feature_type())

    def _entry(self, feature_type: Type[T]) -> Feature[T]:
        with self._lock:
            feature = self._features.get(feature_type)
            if feature is None:
                feature = self._features[feature_type] = Feature(feature_type)
            return feature

    def add(
        self,
        feature_type: Type[T],
        factory: Optional[Callable[["FeatureRegistry"], T]] = None,
    ) -> "FeatureRegistry":
        """Register ``feature_type`` and publish a new instance of it.

        Adding a type that is already registered publishes the new instance
        on the existing channel. An exception raised while creating the
        instance is delivered on that feature's channel only.

        Args:
            feature_type: The feature class
            factory: Receives this registry and returns the instance

        Returns:
            This registry, so calls can be chained
        """
        feature = self._entry(feature_type)

        try:
            if factory is not None:
                instance = factory(self)
            else:
                instance = self._feature_factory(feature_type)
        except Exception as e:
            logger.warning(f"Failed to create feature '{feature.name}': {e!r}")
            feature.on_error(e)
            return self

        feature.on_next(instance)
        logger.debug(f"Registered feature: {feature.name}")
        return self

    def get(self, feature_type: Type[T]) -> Feature[T]:
        """Channel of ``feature_type``, pending until the type is added."""
        return self._entry(feature_type)

    def reset(self) -> None:
        """Forget every feature (mainly for testing)."""
        with self._lock:
            self._features.clear()
        logger.debug("Feature registry reset")

    def __iter__(self) -> Iterator[Feature]:
        with self._lock:
            features: List[Feature] = list(self._features.values())
        return iter(features)

    def __len__(self) -> int:
        with self._lock:
            return len(self._features)

    def __contains__(self, feature_type: object) -> bool:
        with self._lock:
            return feature_type in self._features


# Global registry instance
_global_registry = FeatureRegistry()


def get_feature_registry() -> FeatureRegistry:
    """The process-wide registry used by ``register_feature`` and ``get_feature``."""
    return _global_registry


def register_feature(
    feature_type: Type[T],
    factory: Optional[Callable[[FeatureRegistry], T]] = None,
) -> FeatureRegistry:
    """Register a feature with the global registry.

    Args:
        feature_type: The feature class
        factory: Optional factory receiving the registry
    """
    return _global_registry.add(feature_type, factory)


def get_feature(feature_type: Type[T]) -> Feature[T]:
    """Get a feature channel from the global registry."""
    return _global_registry.get(feature_type)
