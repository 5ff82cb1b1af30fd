from __future__ import annotations

from bot.handlers import BotHelpers
from config.constants import MessageTemplates, ProtocolVariant
from tests.fakes import make_entry


def test_empty_server_list() -> None:
    assert BotHelpers.format_server_list([]) == "**Servers:**\n" + MessageTemplates.SERVER_LIST_EMPTY


def test_server_list_lines() -> None:
    text = BotHelpers.format_server_list(
        [
            ("a.example.com", make_entry(channel_id="100", port=25570)),
            ("be.example.com", make_entry(channel_id="200", protocol=ProtocolVariant.BEDROCK)),
        ]
    )

    assert text.splitlines() == [
        "**Servers:**",
        "• `a.example.com:25570` (Java) → <#100>",
        "• `be.example.com:19132` (Bedrock) → <#200>",
    ]


def test_long_server_list_fits_one_message() -> None:
    servers = [(f"host{i:03d}.example.com", make_entry()) for i in range(200)]

    assert len(BotHelpers.format_server_list(servers)) <= 2000
