"""aotcache data models: all Pydantic v2, all frozen (immutable)."""

from aotcache.models.invocation import InvocationDescriptor
from aotcache.models.phases import (
    CONFIG_SUFFIX,
    CacheArtifact,
    FlagVocabulary,
    Phase,
    Runtime,
)

__all__ = [
    "CONFIG_SUFFIX",
    "CacheArtifact",
    "FlagVocabulary",
    "InvocationDescriptor",
    "Phase",
    "Runtime",
]
