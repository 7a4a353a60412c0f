import asyncio
import logging
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from moosefs_plugin.core.exceptions import NotMountedError, UnmountError
from moosefs_plugin.services.mount_executor import VolumeMountExecutor


class MountReferenceTracker:
    """
    Single source of truth for which volumes are mounted, and by whom.

    Each mounted volume has a record holding the set of Docker mount IDs
    currently using it. A record exists exactly while the volume is
    OS-mounted:

        Unmounted --attach(id)--> Mounted({id})            (mounts)
        Mounted(S) --attach(id)--> Mounted(S | {id})       (bookkeeping)
        Mounted(S) --detach(id)--> Mounted(S - {id})       (bookkeeping)
        Mounted({id}) --detach(id)--> Unmounted            (unmounts)

    All transitions, including the executor calls they trigger, run under
    one lock so a detach always sees the state left by an earlier attach.
    """

    def __init__(self, executor: VolumeMountExecutor):
        self._executor = executor
        self._records: Dict[str, Set[str]] = {}
        self._lock = asyncio.Lock()

    async def attach(self, volume_name: str, mount_id: str) -> str:
        """Register mount_id on the volume, mounting it first if needed. Returns the host path."""
        async with self._lock:
            mount_ids = self._records.get(volume_name)

            if mount_ids:
                mount_ids.add(mount_id)
                logging.debug(
                    f"Volume {volume_name} already mounted, now used by {len(mount_ids)} mount(s)"
                )
            else:
                # MountError propagates and no record is created
                await self._executor.mount(volume_name)
                self._records[volume_name] = {mount_id}
                logging.info(f"Volume {volume_name} mounted for {mount_id}")

        return self._executor.host_mount_path(volume_name)

    async def detach(self, volume_name: str, mount_id: str) -> None:
        async with self._lock:
            mount_ids = self._records.get(volume_name)
            if mount_ids is None:
                raise NotMountedError(volume_name)

            # Unknown IDs are ignored, the count never goes below the real set
            mount_ids.discard(mount_id)
            if mount_ids:
                logging.debug(f"Volume {volume_name} still used by {len(mount_ids)} mount(s)")
                return

            # The record goes away even if umount fails
            del self._records[volume_name]
            try:
                await self._executor.unmount(volume_name)
            except UnmountError as e:
                logging.warning(f"Volume {volume_name} released but unmount failed: {e}")
            else:
                logging.info(f"Volume {volume_name} unmounted")

    def is_mounted(self, volume_name: str) -> bool:
        return bool(self._records.get(volume_name))

    def mount_ids(self, volume_name: str) -> FrozenSet[str]:
        return frozenset(self._records.get(volume_name, ()))

    def host_mount_path_if_mounted(self, volume_name: str) -> Optional[str]:
        if not self.is_mounted(volume_name):
            return None
        return self._executor.host_mount_path(volume_name)

    def list_mounted(self) -> List[Tuple[str, str]]:
        """(volume name, host mount path) for every mounted volume, in mount order."""
        return [
            (volume_name, self._executor.host_mount_path(volume_name))
            for volume_name, mount_ids in self._records.items()
            if mount_ids
        ]

    async def drain(self) -> List[str]:
        """Forget every record and return the volumes that were mounted."""
        async with self._lock:
            volume_names = [name for name, ids in self._records.items() if ids]
            self._records.clear()
        return volume_names
