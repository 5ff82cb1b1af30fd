"""
============================================================================
GUILD STATUS BOT - CONFIGURATION STORE
============================================================================
Durable JSON document holding every guild's monitored servers.

Contract
--------
load()   → missing file: empty mapping.
           unreadable / corrupt file: empty mapping, ConfigLoadDegraded is
           reported and the bad file is kept as ``<file>.corrupt``.
save()   → serialize the whole mapping into ``<file>.tmp``, fsync, then
           ``os.replace`` it over the durable file. If that fails, one
           direct overwrite is attempted; if that fails too,
           ConfigSaveFailed is raised.

Blocking file I/O runs in the default executor so the event loop keeps
serving Discord events while a save is in progress.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import asyncio
import json
import os
import shutil
from pathlib import Path
from typing import Mapping, Optional, Union

from pydantic import ValidationError

from config.settings import Settings, get_settings
from exceptions import ConfigLoadDegraded, ConfigSaveFailed
from storage.models import GuildConfig, GuildMapping, build_document, parse_document
from utils.logger import get_logger, log_execution_time
from utils.reporting import ErrorReporter


logger = get_logger("ConfigStore")


class ConfigStore:
    """
    Load/save of the whole guild configuration snapshot.

    The store is single-writer: every mutation funnels through the
    command layer, which serializes saves.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        reporter: Optional[ErrorReporter] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.path = Path(path) if path is not None else self.settings.storage.data_file
        self.indent = self.settings.storage.indent
        self.reporter = reporter or ErrorReporter("ConfigStore")

    @property
    def tmp_path(self) -> Path:
        return self.path.with_name(self.path.name + ".tmp")

    @property
    def corrupt_path(self) -> Path:
        return self.path.with_name(self.path.name + ".corrupt")

    # ------------------------------------------------------------------
    # LOAD
    # ------------------------------------------------------------------

    async def load(self) -> GuildMapping:
        """Read the durable mapping; never raises for missing or bad data."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._load_sync)

    def _load_sync(self) -> GuildMapping:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            logger.info(f"No configuration at {self.path}, starting empty")
            return {}
        except OSError as e:
            self.reporter.report(ConfigLoadDegraded(path=self.path, cause=e))
            return {}

        # Undecodable bytes count as corrupt content, not as a read error
        try:
            guilds = parse_document(json.loads(raw.decode("utf-8")))
        except (ValueError, ValidationError) as e:
            preserved = self._preserve_corrupt()
            self.reporter.report(
                ConfigLoadDegraded(path=self.path, preserved_as=preserved, cause=e)
            )
            return {}

        # A guild without servers is not a tenant anymore
        guilds = {guild_id: cfg for guild_id, cfg in guilds.items() if not cfg.is_empty}

        logger.info(
            f"Loaded {sum(len(c.servers) for c in guilds.values())} server(s) "
            f"for {len(guilds)} guild(s) from {self.path}"
        )
        return guilds

    def _preserve_corrupt(self) -> Optional[Path]:
        try:
            shutil.copyfile(self.path, self.corrupt_path)
            return self.corrupt_path
        except OSError as e:
            logger.warning(f"Could not preserve corrupt configuration: {e}")
            return None

    # ------------------------------------------------------------------
    # SAVE
    # ------------------------------------------------------------------

    @log_execution_time
    async def save(self, snapshot: Mapping[str, GuildConfig]) -> None:
        """
        Persist the full mapping with an atomic replace.

        Raises:
            ConfigSaveFailed: the atomic replace and the fallback both failed
        """
        text = json.dumps(build_document(dict(snapshot)), indent=self.indent, ensure_ascii=False)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._save_sync, text)

    def _save_sync(self, text: str) -> None:
        try:
            self._write_atomic(text)
            logger.debug(f"Saved configuration to {self.path}")
            return
        except OSError as e:
            atomic_error = e
            logger.error(f"Atomic save to {self.path} failed: {e!r}, trying direct write")

        try:
            self._write_direct(text)
            logger.warning(f"Configuration saved to {self.path} with a direct write")
        except OSError as fallback_error:
            error = ConfigSaveFailed(
                path=self.path,
                cause=atomic_error,
                fallback_error=fallback_error,
            )
            self.reporter.report(error)
            raise error from fallback_error

    def _write_atomic(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.tmp_path, "w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(self.tmp_path, self.path)
        except OSError:
            self._discard_tmp()
            raise

    def _write_direct(self, text: str) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())

    def _discard_tmp(self) -> None:
        try:
            self.tmp_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.debug(f"Could not remove {self.tmp_path}: {e}")
