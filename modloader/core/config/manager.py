from __future__ import annotations

import os
from typing import Any, Dict, Optional

from pydantic import ValidationError

from modloader.core.config.io import atomic_write_json, ensure_dirs, quarantine_corrupt, read_json_file
from modloader.core.config.models import LoaderConfig, default_loader_config_dict
from modloader.core.config.paths import ConfigFsPaths
from modloader.core.errors import ConfigError


class ConfigManager:
    def __init__(
        self,
        *,
        fs: Optional[ConfigFsPaths] = None,
        logger=None,
        read_only: bool = False,
        max_backups: int = 10,
    ):
        self.fs = fs or ConfigFsPaths(".")
        self.logger = logger
        self.read_only = read_only
        self.max_backups = int(max_backups)
        self._cfg: Optional[LoaderConfig] = None

    # ---------- public API ----------
    def load(self) -> LoaderConfig:
        ensure_dirs(self.fs.config_dir, self.fs.backups_dir)
        raw = self._read_raw()
        try:
            cfg = LoaderConfig.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(f"{os.path.basename(self.fs.loader)} invalid: {e.errors()[:3]}", path=self.fs.loader) from e
        self._cfg = cfg
        return cfg

    def get(self) -> LoaderConfig:
        if self._cfg is None:
            raise ConfigError("Config not loaded.")
        return self._cfg

    def save(self, cfg: LoaderConfig) -> None:
        """Atomic write + backup of config/loader.json."""
        if self.read_only:
            raise ConfigError("Config manager is read-only.")
        data = cfg.model_dump(mode="json")
        atomic_write_json(self.fs.loader, data, self.fs.backups_dir, max_backups=self.max_backups)
        self._cfg = cfg

    def set_game_path(self, game_path: str) -> LoaderConfig:
        cfg = self.get().model_copy(update={"game_path": str(game_path)})
        self.save(cfg)
        return cfg

    def set_mod_enabled(self, unique_name: str, enabled: bool) -> LoaderConfig:
        mods = dict(self.get().mods)
        mods[str(unique_name)] = bool(enabled)
        cfg = self.get().model_copy(update={"mods": mods})
        self.save(cfg)
        return cfg

    # ---------- internals ----------
    def _read_raw(self) -> Dict[str, Any]:
        rr = read_json_file(self.fs.loader)
        if rr.ok:
            return rr.data
        if rr.error == "missing":
            data = default_loader_config_dict()
            if not self.read_only:
                atomic_write_json(self.fs.loader, data, self.fs.backups_dir, max_backups=self.max_backups)
            return data
        # corrupt or not an object: keep a copy, start from defaults
        if self.logger:
            self.logger.warning(f"Config file unreadable ({rr.error}); restoring defaults.")
        data = default_loader_config_dict()
        if not self.read_only:
            quarantine_corrupt(self.fs.loader, self.fs.backups_dir)
            atomic_write_json(self.fs.loader, data, self.fs.backups_dir, max_backups=self.max_backups)
        return data
