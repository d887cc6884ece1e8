"""
ormhub Registration Layer.

Everything that happens while plugins are registering, before the host
starts:

    raw input ──► ConfigNormalizer ──► ConfigFragment ──► Collector.merge()
                       │                                      │
                 ReferenceResolver                       ScopeStore
"""

from .collector import Collector
from .normalizer import ConfigNormalizer
from .resolver import ReferenceResolver
from .scopes import ROOT_SCOPE, Scope, ScopeRecord, ScopeStore

__all__ = [
    "Collector",
    "ConfigNormalizer",
    "ReferenceResolver",
    "ROOT_SCOPE",
    "Scope",
    "ScopeRecord",
    "ScopeStore",
]
