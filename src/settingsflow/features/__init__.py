"""Features with dependency-gated activation.

This package provides:
- FeatureActivator: runs activate/deactivate callbacks as boolean
  dependencies come and go, exactly once per change however many
  subscribers there are
- Feature: replaying channel of a feature instance and its availability
- FeatureRegistry: type-keyed registry supporting subscription before
  registration
- OnOffFeature / SingleActivationFeature: base classes for self-activating
  features

Example:
    >>> from settingsflow.features import register_feature, get_feature, is_available
    >>>
    >>> register_feature(SearchIndex)
    >>> is_available(get_feature(SearchIndex))
    True
"""

from .channel import (
    BehaviorSubject,
    Disposable,
    Observable,
    Observer,
    ReplaySubject,
    Subject,
    combine_latest,
    return_value,
)
from .activator import ActivationState, BooleanFeatureActivator, FeatureActivator
from .feature import Feature, SupportsAvailability, is_available
from .base import OnOffFeature, SingleActivationFeature
from .registry import (
    FeatureRegistry,
    get_feature,
    get_feature_registry,
    register_feature,
)

__all__ = [
    # Channels
    "Observable",
    "Observer",
    "Disposable",
    "Subject",
    "BehaviorSubject",
    "ReplaySubject",
    "combine_latest",
    "return_value",
    # Activation
    "ActivationState",
    "FeatureActivator",
    "BooleanFeatureActivator",
    # Features
    "Feature",
    "SupportsAvailability",
    "is_available",
    "OnOffFeature",
    "SingleActivationFeature",
    # Registry
    "FeatureRegistry",
    "get_feature_registry",
    "register_feature",
    "get_feature",
]
