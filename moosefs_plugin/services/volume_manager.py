import logging
from typing import List, Optional

from moosefs_plugin.core.exceptions import NotFoundError
from moosefs_plugin.models import VolumeInfo
from moosefs_plugin.services.remote_gateway import RemoteMountGateway
from moosefs_plugin.services.volume_directory_store import VolumeDirectoryStore
from moosefs_plugin.services.mount_tracker import MountReferenceTracker
from moosefs_plugin.services.shutdown_coordinator import ShutdownCoordinator


class VolumeManager:
    """
    The volume lifecycle behind the VolumeDriver endpoints.

    Owns the gateway, directory store and mount tracker, so all plugin
    state lives in one instance that is handed to the API layer.
    Each operation computes exactly one outcome: a result or a
    VolumePluginError subclass.
    """

    def __init__(
        self,
        gateway: RemoteMountGateway,
        directory_store: VolumeDirectoryStore,
        tracker: MountReferenceTracker,
        shutdown_coordinator: ShutdownCoordinator,
        root_volume_name: Optional[str] = None,
    ):
        self._gateway = gateway
        self._store = directory_store
        self._tracker = tracker
        self._shutdown_coordinator = shutdown_coordinator
        self._root_volume_name = root_volume_name

    @property
    def tracker(self) -> MountReferenceTracker:
        return self._tracker

    @property
    def gateway(self) -> RemoteMountGateway:
        return self._gateway

    def is_root_volume(self, name: str) -> bool:
        return bool(self._root_volume_name) and name == self._root_volume_name

    async def ensure_ready(self) -> None:
        """Mount the remote root if that has not happened yet. Raises ConnectError."""
        await self._gateway.ensure_established()

    async def create(self, name: str, storage_class: Optional[str] = None) -> None:
        if self.is_root_volume(name):
            logging.warning(
                "Tried to create a volume with same name as root volume. Ignoring request."
            )
            return

        await self._store.create(name, storage_class)

    async def remove(self, name: str) -> None:
        await self._store.remove(name)

    async def mount(self, name: str, mount_id: str) -> str:
        """Attach mount_id to the volume and return the host mount path."""
        # Directory existence, not a prior Create, decides whether a volume can be mounted
        if not self.is_root_volume(name) and not await self._store.exists(name):
            raise NotFoundError(name, "no such volume directory")

        return await self._tracker.attach(name, mount_id)

    async def unmount(self, name: str, mount_id: str) -> None:
        await self._tracker.detach(name, mount_id)

    def path(self, name: str) -> Optional[str]:
        return self._mountpoint(name)

    async def get(self, name: str) -> VolumeInfo:
        if not self.is_root_volume(name):
            await self._store.check_accessible(name)
            logging.debug(f"Found Volume: {name}")

        return VolumeInfo(name=name, mountpoint=self._mountpoint(name))

    async def list_volumes(self) -> List[VolumeInfo]:
        volumes = []
        if self._root_volume_name:
            volumes.append(
                VolumeInfo(
                    name=self._root_volume_name,
                    mountpoint=self._mountpoint(self._root_volume_name),
                )
            )

        for name in await self._store.list_volume_names():
            volumes.append(VolumeInfo(name=name, mountpoint=self._mountpoint(name)))
        return volumes

    async def shutdown(self) -> int:
        return await self._shutdown_coordinator.shutdown()

    def _mountpoint(self, name: str) -> Optional[str]:
        return self._tracker.host_mount_path_if_mounted(name)
