"""
Mount Helper Module

Wraps the external tools that perform the actual OS-level work:
- BaseMountHelper: abstract interface (mount, unmount, set_storage_class)
- MooseFSMountHelper: mfsmount / umount / mfssetsclass implementation
- CommandResult: outcome of one helper invocation

Every invocation is bounded by the configured connect timeout so an
unresponsive MooseFS master cannot stall Docker operations.
"""

from .base_mounter import BaseMountHelper, CommandResult
from .moosefs_mounter import MooseFSMountHelper

__all__ = [
    "BaseMountHelper",
    "CommandResult",
    "MooseFSMountHelper",
]
