"""
Storage Package for Guild Status Bot

Persisted configuration models, the JSON configuration store and the
in-memory snapshot shared by the scheduler and the command layer.
"""

from storage.models import (
    ServerEntry,
    GuildConfig,
    GuildMapping,
    parse_document,
    build_document,
)
from storage.store import ConfigStore
from storage.snapshot import ConfigSnapshot

__all__ = [
    "ServerEntry",
    "GuildConfig",
    "GuildMapping",
    "parse_document",
    "build_document",
    "ConfigStore",
    "ConfigSnapshot",
]
