"""
============================================================================
GUILD STATUS BOT - CONFIGURATION SNAPSHOT
============================================================================
In-memory mirror of the persisted configuration.

The snapshot is created once by the application and handed to the
scheduler and the registry. Readers always get copies, so a monitoring
cycle works on a stable view even if a command mutates the guild while
the cycle is running. Writers hold ``lock`` across mutate + save.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import asyncio
from typing import Dict, Mapping, Optional

from storage.models import GuildConfig, GuildMapping, ServerEntry


class ConfigSnapshot:
    """
    Lock-protected mapping of guild id to ``GuildConfig``.

    ``GuildConfig`` is frozen; every mutation builds a new config for
    the guild and swaps it in.
    """

    def __init__(self, guilds: Optional[Mapping[str, GuildConfig]] = None):
        self._guilds: GuildMapping = {}
        self.lock = asyncio.Lock()
        self.replace(guilds or {})

    # ------------------------------------------------------------------
    # READ
    # ------------------------------------------------------------------

    def servers(self, guild_id: str) -> Dict[str, ServerEntry]:
        config = self._guilds.get(str(guild_id))
        return dict(config.servers) if config else {}

    def guild(self, guild_id: str) -> Optional[GuildConfig]:
        return self._guilds.get(str(guild_id))

    def has_servers(self, guild_id: str) -> bool:
        config = self._guilds.get(str(guild_id))
        return config is not None and not config.is_empty

    def guilds(self) -> GuildMapping:
        """Shallow copy of the whole mapping, suitable for ``ConfigStore.save``."""
        return dict(self._guilds)

    @property
    def total_servers(self) -> int:
        return sum(len(config.servers) for config in self._guilds.values())

    def __len__(self) -> int:
        return len(self._guilds)

    def __contains__(self, guild_id: object) -> bool:
        return str(guild_id) in self._guilds

    # ------------------------------------------------------------------
    # WRITE
    # ------------------------------------------------------------------

    def put_server(self, guild_id: str, host: str, entry: ServerEntry) -> Optional[ServerEntry]:
        """Insert or replace *host*; returns the entry it replaced."""
        guild_id = str(guild_id)
        servers = self.servers(guild_id)
        previous = servers.get(host)
        servers[host] = entry
        self._guilds[guild_id] = GuildConfig(servers=servers)
        return previous

    def remove_server(self, guild_id: str, host: str) -> Optional[ServerEntry]:
        """
        Remove *host* from the guild.

        When it was the guild's last entry the guild key itself is
        dropped. Returns the removed entry, or None if it was unknown.
        """
        guild_id = str(guild_id)
        servers = self.servers(guild_id)
        removed = servers.pop(host, None)
        if removed is None:
            return None

        if servers:
            self._guilds[guild_id] = GuildConfig(servers=servers)
        else:
            self._guilds.pop(guild_id, None)
        return removed

    def set_guild(self, guild_id: str, config: Optional[GuildConfig]) -> None:
        """Restore a guild to *config*; None or an empty config drops the key."""
        guild_id = str(guild_id)
        if config is None or config.is_empty:
            self._guilds.pop(guild_id, None)
        else:
            self._guilds[guild_id] = config

    def replace(self, guilds: Mapping[str, GuildConfig]) -> None:
        self._guilds = {
            str(guild_id): config for guild_id, config in guilds.items() if not config.is_empty
        }
