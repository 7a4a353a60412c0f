# moosefs_plugin/core/exceptions.py

from typing import Optional

from moosefs_plugin.services.mount_helper.base_mounter import CommandResult


class VolumePluginError(Exception):
    """Base class for errors reported back to Docker as an ``Err`` string."""


class ConnectError(VolumePluginError):
    """Raised when the remote MooseFS root could not be mounted. Retryable."""

    def __init__(self, remote_path: str, result: CommandResult):
        self.remote_path = remote_path
        self.result = result
        super().__init__(
            f"Could not mount MooseFS remote path '{remote_path}': {result.describe()}"
        )


class MountError(VolumePluginError):
    def __init__(self, volume_name: str, result: CommandResult):
        self.volume_name = volume_name
        self.result = result
        super().__init__(f"Could not mount volume '{volume_name}': {result.describe()}")


class UnmountError(VolumePluginError):
    def __init__(self, mount_point: str, result: CommandResult):
        self.mount_point = mount_point
        self.result = result
        super().__init__(f"Could not unmount '{mount_point}': {result.describe()}")


class NotFoundError(VolumePluginError):
    def __init__(self, volume_name: str, reason: Optional[str] = None):
        self.volume_name = volume_name
        message = f"Volume '{volume_name}' not found"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NotMountedError(VolumePluginError):
    def __init__(self, volume_name: str):
        self.volume_name = volume_name
        super().__init__(f"Volume '{volume_name}' is not mounted")


class InvalidOperationError(VolumePluginError):
    """Raised for requests that are never allowed, e.g. removing the root volume."""


class StorageClassError(VolumePluginError):
    """The volume directory exists but mfssetsclass failed on it."""
