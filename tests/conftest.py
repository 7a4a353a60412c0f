"""
Pytest configuration and shared fixtures.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

import pytest

from moosefs_plugin.config import Settings
from moosefs_plugin.dependencies import build_volume_manager, reset_singletons
from moosefs_plugin.services.mount_helper import BaseMountHelper, CommandResult


class FakeMountHelper(BaseMountHelper):
    """
    In-memory stand-in for mfsmount / umount / mfssetsclass.

    Records every call and answers with success unless a failure has been
    registered for the operation (optionally for one specific target).
    """

    def __init__(self, delay: float = 0.0):
        self.calls: List[Tuple[str, ...]] = []
        self.delay = delay
        self._failures: Dict[Tuple[str, Optional[str]], CommandResult] = {}

    def fail(
        self,
        operation: str,
        target: Optional[str] = None,
        stderr: str = "simulated failure",
        timed_out: bool = False,
    ) -> None:
        self._failures[(operation, target)] = CommandResult(
            command=[operation],
            return_code=None if timed_out else 1,
            stderr=stderr,
            duration=0.5,
            timed_out=timed_out,
        )

    def clear_failures(self) -> None:
        self._failures.clear()

    def calls_for(self, operation: str) -> List[Tuple[str, ...]]:
        return [call for call in self.calls if call[0] == operation]

    async def mount(self, mount_point: str, remote_path: str) -> CommandResult:
        return await self._answer("mount", mount_point, remote_path)

    async def unmount(self, mount_point: str) -> CommandResult:
        return await self._answer("unmount", mount_point)

    async def set_storage_class(self, path: str, storage_class: str) -> CommandResult:
        return await self._answer("set_storage_class", path, storage_class)

    async def _answer(self, operation: str, target: str, *args: str) -> CommandResult:
        self.calls.append((operation, target, *args))
        if self.delay:
            await asyncio.sleep(self.delay)

        failure = self._failures.get((operation, target)) or self._failures.get((operation, None))
        if failure is not None:
            return failure
        return CommandResult(command=[operation, target, *args], return_code=0)


@pytest.fixture(autouse=True)
def clean_singletons():
    """Automatically reset singletons before each test."""
    reset_singletons()
    yield
    reset_singletons()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        host="mfsmaster.test",
        port=9421,
        remote_path="/docker/volumes",
        alias="moosefs",
        root_volume_name="moosefs-root",
        volume_root=str(tmp_path / "moosefs"),
        container_volume_path=str(tmp_path / "docker-volumes"),
        local_path="/var/lib/docker/plugins/abc123/propagated-mount",
        mount_options="-o mfscachemode=AUTO",
        connect_timeout=3000,
        log_level="DEBUG",
        log_file_path="",
    )


@pytest.fixture
def mount_helper() -> FakeMountHelper:
    return FakeMountHelper()


@pytest.fixture
def volume_manager(settings, mount_helper):
    return build_volume_manager(settings, mount_helper)


@pytest.fixture
def restore_root_logging():
    """setup_logging replaces the root handlers; put the test runner's back afterwards."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
