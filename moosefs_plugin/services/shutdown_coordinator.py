import logging

from moosefs_plugin.services.mount_executor import VolumeMountExecutor
from moosefs_plugin.services.mount_tracker import MountReferenceTracker
from moosefs_plugin.services.remote_gateway import RemoteMountGateway


class ShutdownCoordinator:
    """Best-effort teardown of all mounts when the plugin is stopped."""

    def __init__(
        self,
        tracker: MountReferenceTracker,
        executor: VolumeMountExecutor,
        gateway: RemoteMountGateway,
    ):
        self._tracker = tracker
        self._executor = executor
        self._gateway = gateway

    async def shutdown(self) -> int:
        """
        Unmount every mounted volume, then the remote root.

        Failures are logged and skipped; each helper call is bounded by the
        connect timeout, so shutdown always finishes. Returns the number of
        volumes that failed to unmount.
        """
        logging.info("Termination signal detected, shutting down")

        failures = 0
        for volume_name in await self._tracker.drain():
            try:
                logging.debug(f"Unmounting volume: {volume_name}")
                await self._executor.unmount(volume_name)
            except Exception as e:
                failures += 1
                logging.warning(f"Couldn't unmount volume: {volume_name}: {e}")

        if self._gateway.is_established:
            try:
                await self._gateway.unmount_root()
            except Exception as e:
                logging.warning(
                    f"Couldn't unmount volume root '{self._gateway.staging_path}': {e}"
                )

        logging.info(f"Shutdown complete, {failures} volume(s) could not be unmounted")
        return failures
