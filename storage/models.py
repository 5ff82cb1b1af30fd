"""
============================================================================
GUILD STATUS BOT - PERSISTED MODELS
============================================================================
Pydantic models of the persisted configuration document:

    {
      "<guild id>": {
        "servers": {
          "<host>": {
            "channelId": "...", "port": 25565, "protocol": "java",
            "onlineName": "Online | {online}/{max} players",
            "offlineName": "Offline | Server down"
          }
        }
      }
    }

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from config.constants import Defaults, Limits, ProtocolVariant


class ServerEntry(BaseModel):
    """
    One monitored game server inside a guild.

    The host is not stored here; it is the key of the entry in
    ``GuildConfig.servers``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    channel_id: str = Field(alias="channelId", min_length=1)
    port: int = Field(ge=Limits.MIN_PORT, le=Limits.MAX_PORT)
    protocol: ProtocolVariant = Field(default=ProtocolVariant.JAVA)
    online_name: str = Field(default=Defaults.ONLINE_NAME, alias="onlineName")
    offline_name: str = Field(default=Defaults.OFFLINE_NAME, alias="offlineName")

    @model_validator(mode="before")
    @classmethod
    def apply_protocol_defaults(cls, data: Any) -> Any:
        """
        Accept the legacy ``bedrock`` flag and fill in the default port.
        """
        if not isinstance(data, dict):
            return data

        data = dict(data)
        if "protocol" not in data and "bedrock" in data:
            data["protocol"] = (
                ProtocolVariant.BEDROCK if data.pop("bedrock") else ProtocolVariant.JAVA
            )
        else:
            data.pop("bedrock", None)

        if data.get("port") is None:
            protocol = ProtocolVariant(data.get("protocol", ProtocolVariant.JAVA))
            data["port"] = protocol.default_port
        return data

    @field_validator("channel_id", mode="before")
    @classmethod
    def coerce_channel_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def is_bedrock(self) -> bool:
        return self.protocol is ProtocolVariant.BEDROCK

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class GuildConfig(BaseModel):
    """
    All servers monitored by one guild, keyed by host.
    """

    model_config = ConfigDict(frozen=True)

    servers: Dict[str, ServerEntry] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.servers

    def to_document(self) -> Dict[str, Any]:
        return {"servers": {host: entry.to_document() for host, entry in self.servers.items()}}


GuildMapping = Dict[str, GuildConfig]

document_adapter = TypeAdapter(Dict[str, GuildConfig])


def parse_document(data: Any) -> GuildMapping:
    """Validate a decoded JSON document into guild configs."""
    return document_adapter.validate_python(data)


def build_document(guilds: Dict[str, GuildConfig]) -> Dict[str, Any]:
    """Serialize guild configs into the persisted layout."""
    return {guild_id: config.to_document() for guild_id, config in guilds.items()}
