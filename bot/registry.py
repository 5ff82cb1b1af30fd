"""
============================================================================
GUILD STATUS BOT - SERVER REGISTRY
============================================================================
The only writer of guild configuration.

Every mutation runs under the snapshot lock as

    validate → mutate snapshot → save → (re)arm or stop the guild

When the save fails the snapshot is rolled back to what it was before
the mutation, the error reaches the requester, and the guild's timer is
left as it was.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from typing import Iterable, List, Optional, Tuple

from config.constants import Limits, ProtocolVariant
from config.settings import Settings, get_settings
from exceptions import ConfigSaveFailed, ServerNotFoundError
from monitoring.reconciler import GuildHandle
from monitoring.scheduler import CycleSummary, GuildMonitorScheduler
from storage.models import GuildConfig, ServerEntry
from storage.snapshot import ConfigSnapshot
from storage.store import ConfigStore
from utils.logger import get_logger
from utils.validators import ServerValidator


logger = get_logger("ServerRegistry")


class ServerRegistry:
    """
    Add, remove and list the servers a guild monitors.
    """

    def __init__(
        self,
        snapshot: ConfigSnapshot,
        store: ConfigStore,
        scheduler: GuildMonitorScheduler,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.snapshot = snapshot
        self.store = store
        self.scheduler = scheduler

    # ------------------------------------------------------------------
    # MUTATIONS
    # ------------------------------------------------------------------

    async def add_server(
        self,
        guild: GuildHandle,
        host: str,
        protocol: ProtocolVariant,
        channel_id: str,
        port: Optional[int] = None,
        online_name: Optional[str] = None,
        offline_name: Optional[str] = None,
    ) -> Tuple[str, ServerEntry]:
        """
        Monitor *host* in *guild*, replacing any entry with the same host.

        Returns:
            The normalized host and the stored entry

        Raises:
            InvalidHostError, InvalidPortError, InvalidTemplateError:
                the request is rejected, nothing changes
            ConfigSaveFailed: nothing changes in memory or on disk
        """
        protocol = ProtocolVariant(protocol)
        host, port = ServerValidator.validate_new_server(
            host, protocol, port, online_name, offline_name
        )

        entry = ServerEntry(
            channel_id=str(channel_id),
            port=port,
            protocol=protocol,
            online_name=online_name or self.settings.monitoring.default_online_name,
            offline_name=offline_name or self.settings.monitoring.default_offline_name,
        )

        guild_id = str(guild.id)
        async with self.snapshot.lock:
            before = self.snapshot.guild(guild_id)
            replaced = self.snapshot.put_server(guild_id, host, entry)
            await self._save_or_rollback(guild_id, before)

        self.scheduler.start(guild)

        logger.info(
            f"[Registry] Guild {guild_id} {'updated' if replaced else 'added'} "
            f"{host}:{port} ({protocol.value}) → channel {channel_id}"
        )
        return host, entry

    async def remove_server(self, guild_id: str, host: str) -> Tuple[str, ServerEntry]:
        """
        Stop monitoring *host*. Removing the guild's last server drops the
        guild from the configuration and disarms its timer.

        Returns:
            The stored host key and the removed entry

        Raises:
            ServerNotFoundError: the guild does not monitor *host*
            ConfigSaveFailed: nothing changes in memory or on disk
        """
        guild_id = str(guild_id)

        async with self.snapshot.lock:
            key = self._find_host(guild_id, host)
            before = self.snapshot.guild(guild_id)
            removed = self.snapshot.remove_server(guild_id, key) if key else None
            if removed is None:
                raise ServerNotFoundError(host=host, guild_id=guild_id)

            await self._save_or_rollback(guild_id, before)
            emptied = not self.snapshot.has_servers(guild_id)

        if emptied:
            self.scheduler.stop(guild_id)

        logger.info(f"[Registry] Guild {guild_id} removed {key}")
        return key, removed

    async def _save_or_rollback(self, guild_id: str, before: Optional[GuildConfig]) -> None:
        try:
            await self.store.save(self.snapshot.guilds())
        except ConfigSaveFailed:
            self.snapshot.set_guild(guild_id, before)
            logger.warning(f"[Registry] Rolled back guild {guild_id} after a failed save")
            raise

    # ------------------------------------------------------------------
    # QUERIES
    # ------------------------------------------------------------------

    def list_servers(self, guild_id: str) -> List[Tuple[str, ServerEntry]]:
        return sorted(self.snapshot.servers(str(guild_id)).items())

    def matching_hosts(
        self,
        guild_id: str,
        query: str = "",
        limit: int = Limits.AUTOCOMPLETE_CHOICES,
    ) -> List[str]:
        """Hosts containing *query*, case-insensitively, for autocomplete."""
        needle = (query or "").strip().lower()
        hosts = sorted(self.snapshot.servers(str(guild_id)))
        return [host for host in hosts if needle in host.lower()][:limit]

    def _find_host(self, guild_id: str, host: str) -> Optional[str]:
        servers = self.snapshot.servers(guild_id)
        if host in servers:
            return host
        normalized = (host or "").strip().rstrip(".").lower()
        return normalized if normalized in servers else None

    # ------------------------------------------------------------------
    # MONITORING CONTROL
    # ------------------------------------------------------------------

    async def refresh(self, guild: GuildHandle) -> CycleSummary:
        """Run one monitoring cycle for *guild* right now."""
        return await self.scheduler.run_cycle(guild)

    def start_monitoring(self, guilds: Iterable[GuildHandle]) -> int:
        """Arm every guild in *guilds* that has configured servers."""
        armed = 0
        for guild in guilds:
            if self.snapshot.has_servers(str(guild.id)):
                self.scheduler.start(guild)
                armed += 1
        return armed

    def stop_monitoring(self, guild_id: str) -> bool:
        """Disarm a guild without touching its configuration."""
        return self.scheduler.stop(str(guild_id))
