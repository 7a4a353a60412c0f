"""Remote Mount Gateway - mounts the MooseFS remote root exactly once."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from moosefs_plugin.core.exceptions import ConnectError, UnmountError
from moosefs_plugin.services.mount_helper import BaseMountHelper, CommandResult


class RemoteMountGateway:
    """
    Establishes the single mount of the remote root onto the staging path.

    The mount is attempted lazily on the first volume call. Callers that
    arrive while an attempt is running share that attempt and its outcome,
    so only one mfsmount is ever in flight. A failed attempt leaves the
    gateway unestablished and the next call tries again.
    """

    def __init__(self, mount_helper: BaseMountHelper, remote_path: str, staging_path: str):
        self._mount_helper = mount_helper
        self._remote_path = remote_path
        self._staging_path = staging_path
        self._established = False
        self._attempt: Optional[asyncio.Task] = None

    @property
    def is_established(self) -> bool:
        return self._established

    @property
    def staging_path(self) -> str:
        return self._staging_path

    async def ensure_established(self) -> None:
        if self._established:
            return

        if self._attempt is None:
            self._attempt = asyncio.create_task(self._establish())
            self._attempt.add_done_callback(self._clear_attempt)

        # Shielded so one cancelled request does not abort the mount for the others
        await asyncio.shield(self._attempt)

    def _clear_attempt(self, task: asyncio.Task) -> None:
        if self._attempt is task:
            self._attempt = None
        if not task.cancelled():
            # Every waiter may have gone away; mark the outcome as seen
            task.exception()

    async def _establish(self) -> None:
        logging.info(f"Mounting MooseFS remote path {self._remote_path} on {self._staging_path}")

        try:
            await asyncio.to_thread(Path(self._staging_path).mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise ConnectError(
                self._remote_path,
                CommandResult(error=f"Could not create staging path {self._staging_path}: {e}"),
            ) from e

        result = await self._mount_helper.mount(self._staging_path, self._remote_path)

        if not result.success:
            logging.error(f"Mounting MooseFS remote path failed: {result.describe()}")
            raise ConnectError(self._remote_path, result)

        self._established = True
        logging.info("MooseFS remote path mounted")

    async def unmount_root(self) -> None:
        """Unmount the staging path. Raises UnmountError on failure."""
        if not self._established:
            return

        logging.debug(f"Unmounting volume root: {self._staging_path}")
        result = await self._mount_helper.unmount(self._staging_path)
        if not result.success:
            raise UnmountError(self._staging_path, result)

        self._established = False
