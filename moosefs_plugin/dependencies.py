from functools import lru_cache
from typing import Dict, Any

from .config import Settings
from .services.mount_helper import BaseMountHelper, MooseFSMountHelper
from .services.mount_executor import VolumeMountExecutor
from .services.mount_tracker import MountReferenceTracker
from .services.remote_gateway import RemoteMountGateway
from .services.shutdown_coordinator import ShutdownCoordinator
from .services.volume_directory_store import VolumeDirectoryStore
from .services.volume_manager import VolumeManager

# Global singleton instances
_singletons: Dict[str, Any] = {}


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_mount_helper() -> BaseMountHelper:
    if "mount_helper" not in _singletons:
        settings = get_settings()
        _singletons["mount_helper"] = MooseFSMountHelper(
            host=settings.host,
            port=settings.port,
            timeout=settings.connect_timeout_seconds,
            mount_options=settings.mount_option_list,
        )
    return _singletons["mount_helper"]


def build_volume_manager(settings: Settings, mount_helper: BaseMountHelper) -> VolumeManager:
    """Wire up a complete VolumeManager from settings and a mount helper."""
    gateway = RemoteMountGateway(
        mount_helper=mount_helper,
        remote_path=settings.remote_path,
        staging_path=settings.volume_root,
    )
    directory_store = VolumeDirectoryStore(
        volume_root=settings.volume_root,
        mount_helper=mount_helper,
        root_volume_name=settings.root_volume,
    )
    executor = VolumeMountExecutor(
        mount_helper=mount_helper,
        remote_path=settings.remote_path,
        container_volume_path=settings.container_volume_path,
        host_volume_path=settings.host_volume_path,
        root_volume_name=settings.root_volume,
    )
    tracker = MountReferenceTracker(executor)
    return VolumeManager(
        gateway=gateway,
        directory_store=directory_store,
        tracker=tracker,
        shutdown_coordinator=ShutdownCoordinator(tracker, executor, gateway),
        root_volume_name=settings.root_volume,
    )


def get_volume_manager() -> VolumeManager:
    if "volume_manager" not in _singletons:
        _singletons["volume_manager"] = build_volume_manager(
            get_settings(), get_mount_helper()
        )
    return _singletons["volume_manager"]


def reset_singletons() -> None:
    global _singletons
    _singletons.clear()
