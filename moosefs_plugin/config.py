from pathlib import Path
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ALIAS = "moosefs"


class Settings(BaseSettings):
    # MooseFS master
    host: str = "mfsmaster"
    port: int = 9421
    remote_path: str = "/docker/volumes"  # Path on MooseFS used for volume storage

    # Plugin identity
    alias: str = DEFAULT_ALIAS  # Driver alias when not running as a managed plugin
    root_volume_name: str = ""  # Volume that maps onto remote_path itself

    # Local paths
    volume_root: str = "/mnt/moosefs"  # Staging mount point for remote_path
    container_volume_path: str = "/mnt/docker-volumes"  # Volume mounts inside plugin
    local_path: str = ""  # Same directory as seen by the host

    # mfsmount
    mount_options: str = ""  # Extra mfsmount arguments, space separated
    connect_timeout: int = 10000  # Milliseconds, bounds every helper invocation

    # Logging
    log_level: str = "INFO"
    log_file_path: str = ""
    log_retention_days: int = 7

    model_config = SettingsConfigDict(env_file="settings.env", extra="ignore")

    @field_validator("alias")
    @classmethod
    def _default_alias(cls, value: str) -> str:
        return value or DEFAULT_ALIAS

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return (value or "INFO").upper()

    @property
    def socket_path(self) -> str:
        """Unix socket Docker discovers the plugin on."""
        return f"/run/docker/plugins/{self.alias}.sock"

    @property
    def host_volume_path(self) -> str:
        # Without LOCAL_PATH the plugin runs managed by Docker and the
        # propagated mount makes both paths identical.
        return self.local_path or self.container_volume_path

    @property
    def mount_option_list(self) -> List[str]:
        return self.mount_options.split()

    @property
    def connect_timeout_seconds(self) -> float:
        return self.connect_timeout / 1000.0

    @property
    def root_volume(self) -> Optional[str]:
        return self.root_volume_name or None

    @property
    def log_directory(self) -> Optional[Path]:
        """Directory holding the log file, if file logging is enabled."""
        if not self.log_file_path:
            return None
        return Path(self.log_file_path).parent
