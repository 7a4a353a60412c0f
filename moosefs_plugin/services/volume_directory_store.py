import asyncio
import logging
import os
import shutil
from typing import List, Optional

import aiofiles.os

from moosefs_plugin.core.exceptions import (
    InvalidOperationError,
    NotFoundError,
    StorageClassError,
)
from moosefs_plugin.services.mount_helper import BaseMountHelper


class VolumeDirectoryStore:
    """
    Per-volume directories below the mounted MooseFS remote root.

    A volume exists when its directory exists. The root volume has no
    directory of its own and can never be removed through this store.
    """

    def __init__(
        self,
        volume_root: str,
        mount_helper: BaseMountHelper,
        root_volume_name: Optional[str] = None,
    ):
        self._volume_root = volume_root
        self._mount_helper = mount_helper
        self._root_volume_name = root_volume_name

    @staticmethod
    def validate_name(name: str) -> None:
        if not name or name in (".", "..") or "/" in name or "\0" in name:
            raise InvalidOperationError(f"Invalid volume name: {name!r}")

    def volume_path(self, name: str) -> str:
        self.validate_name(name)
        return os.path.join(self._volume_root, name)

    async def create(self, name: str, storage_class: Optional[str] = None) -> str:
        """
        Ensure the volume directory exists and optionally apply a storage class.

        Not atomic: when the storage class cannot be applied the directory is
        left in place and StorageClassError is raised.
        """
        path = self.volume_path(name)
        await aiofiles.os.makedirs(path, exist_ok=True)
        logging.debug(f"Volume directory ready: {path}")

        if storage_class:
            result = await self._mount_helper.set_storage_class(path, storage_class)
            if not result.success:
                raise StorageClassError(
                    f"Volume '{name}' created but storage class '{storage_class}' "
                    f"could not be applied: {result.describe()}"
                )
            logging.info(f"Applied storage class {storage_class} to {path}")

        return path

    async def remove(self, name: str) -> None:
        if self._root_volume_name and name == self._root_volume_name:
            raise InvalidOperationError("You cannot delete the MooseFS root volume.")

        path = self.volume_path(name)
        if not await aiofiles.os.path.exists(path):
            logging.debug(f"Volume directory already gone: {path}")
            return

        # rmtree can walk a large tree over the network, keep it off the loop
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, shutil.rmtree, path)
        logging.info(f"Removed volume directory: {path}")

    async def exists(self, name: str) -> bool:
        return await aiofiles.os.path.isdir(self.volume_path(name))

    async def check_accessible(self, name: str) -> None:
        path = self.volume_path(name)

        if not await aiofiles.os.path.isdir(path):
            raise NotFoundError(name, f"{path} does not exist")

        readable_writable = await asyncio.to_thread(os.access, path, os.R_OK | os.W_OK)
        if not readable_writable:
            raise NotFoundError(name, f"{path} is not readable and writable")

    async def list_volume_names(self) -> List[str]:
        """Names of all volume directories, excluding one shadowing the root volume."""
        names = []
        for entry in sorted(await aiofiles.os.listdir(self._volume_root)):
            if not await aiofiles.os.path.isdir(os.path.join(self._volume_root, entry)):
                continue
            if self._root_volume_name and entry == self._root_volume_name:
                logging.warning(
                    f"Found volume with same name as root volume: '{entry}'. "
                    "Skipping volume, root volume takes precedence."
                )
                continue
            names.append(entry)
        return names
