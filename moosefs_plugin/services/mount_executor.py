import logging
import os
import posixpath
from typing import Optional

import aiofiles.os

from moosefs_plugin.core.exceptions import MountError, UnmountError
from moosefs_plugin.services.mount_helper import BaseMountHelper, CommandResult


class VolumeMountExecutor:
    """
    Performs the OS-level mount and unmount of a single volume.

    Holds no state of its own; MountReferenceTracker decides when to call it.
    Volumes are mounted below the container volume path, while Docker is
    told the matching path below the host volume path.
    """

    def __init__(
        self,
        mount_helper: BaseMountHelper,
        remote_path: str,
        container_volume_path: str,
        host_volume_path: str,
        root_volume_name: Optional[str] = None,
    ):
        self._mount_helper = mount_helper
        self._remote_path = remote_path
        self._container_volume_path = container_volume_path
        self._host_volume_path = host_volume_path
        self._root_volume_name = root_volume_name

    def container_mount_path(self, volume_name: str) -> str:
        return os.path.join(self._container_volume_path, volume_name)

    def host_mount_path(self, volume_name: str) -> str:
        return os.path.join(self._host_volume_path, volume_name)

    def remote_subpath(self, volume_name: str) -> str:
        # The root volume exposes the directory containing *all* volumes
        if self._root_volume_name and volume_name == self._root_volume_name:
            return self._remote_path
        return posixpath.join(self._remote_path, volume_name)

    async def mount(self, volume_name: str) -> str:
        """Mount the volume and return its container-side mount point."""
        mount_point = self.container_mount_path(volume_name)
        remote_subpath = self.remote_subpath(volume_name)

        try:
            await aiofiles.os.makedirs(mount_point, exist_ok=True)
        except OSError as e:
            raise MountError(
                volume_name, CommandResult(error=f"Could not create mount point {mount_point}: {e}")
            ) from e

        logging.info(f"Mounting volume {volume_name}: {remote_subpath} -> {mount_point}")
        result = await self._mount_helper.mount(mount_point, remote_subpath)
        if not result.success:
            raise MountError(volume_name, result)

        return mount_point

    async def unmount(self, volume_name: str) -> None:
        mount_point = self.container_mount_path(volume_name)

        logging.info(f"Unmounting volume {volume_name} from {mount_point}")
        result = await self._mount_helper.unmount(mount_point)
        if not result.success:
            raise UnmountError(mount_point, result)
