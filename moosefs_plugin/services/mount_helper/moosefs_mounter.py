"""MooseFS Mount Helper - shells out to mfsmount, umount and mfssetsclass."""

import asyncio
import logging
import time
from typing import List, Optional, Sequence

from .base_mounter import BaseMountHelper, CommandResult


class MooseFSMountHelper(BaseMountHelper):
    """Runs the MooseFS client tools, each bounded by the connect timeout."""

    def __init__(
        self,
        host: str,
        port: int,
        timeout: float,
        mount_options: Optional[Sequence[str]] = None,
    ):
        self._host = host
        self._port = port
        self._timeout = timeout
        self._mount_options: List[str] = list(mount_options or [])

    async def mount(self, mount_point: str, remote_path: str) -> CommandResult:
        cmd = [
            "mfsmount",
            mount_point,
            "-H", self._host,
            "-P", str(self._port),
            "-S", remote_path,
            *self._mount_options,
        ]
        return await self._run(cmd)

    async def unmount(self, mount_point: str) -> CommandResult:
        return await self._run(["umount", mount_point])

    async def set_storage_class(self, path: str, storage_class: str) -> CommandResult:
        return await self._run(["mfssetsclass", storage_class, path])

    async def _run(self, cmd: List[str]) -> CommandResult:
        logging.debug(f"Running helper: {' '.join(cmd)}")
        started = time.monotonic()

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logging.error(f"Could not start {cmd[0]}: {e}")
            return CommandResult(
                command=cmd,
                duration=time.monotonic() - started,
                error=f"Could not start '{cmd[0]}': {e}",
            )

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            # Never leave the helper running
            logging.error(f"{cmd[0]} timed out after {self._timeout}s, killing it")
            process.kill()
            await process.wait()
            return CommandResult(
                command=cmd,
                return_code=process.returncode,
                duration=time.monotonic() - started,
                timed_out=True,
            )

        result = CommandResult(
            command=cmd,
            return_code=process.returncode,
            stdout=stdout.decode(errors="replace") if stdout else "",
            stderr=stderr.decode(errors="replace") if stderr else "",
            duration=time.monotonic() - started,
        )
        if not result.success:
            logging.debug(f"{cmd[0]} failed: {result.describe()}")
        return result
