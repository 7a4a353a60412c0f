"""Abstract Mount Helper - interface to the external mount tooling."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class CommandResult:
    """Outcome of a single helper invocation."""

    command: List[str] = field(default_factory=list)
    return_code: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0
    timed_out: bool = False
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.return_code == 0 and not self.timed_out and self.error is None

    def describe(self) -> str:
        """Human readable diagnostic for error messages."""
        if self.timed_out:
            return f"'{self._program}' timed out after {self.duration:.1f}s"
        if self.error:
            return self.error
        output = (self.stderr or self.stdout).strip() or "no output"
        return f"'{self._program}' exited with code {self.return_code}: {output}"

    @property
    def _program(self) -> str:
        return self.command[0] if self.command else "helper"


class BaseMountHelper(ABC):
    """Abstract base class for mount, unmount and attribute operations."""

    @abstractmethod
    async def mount(self, mount_point: str, remote_path: str) -> CommandResult:
        """Mount remote_path of the remote filesystem onto mount_point."""
        pass

    @abstractmethod
    async def unmount(self, mount_point: str) -> CommandResult:
        """Unmount whatever is mounted on mount_point."""
        pass

    @abstractmethod
    async def set_storage_class(self, path: str, storage_class: str) -> CommandResult:
        """Apply a storage class to a directory on the remote filesystem."""
        pass
