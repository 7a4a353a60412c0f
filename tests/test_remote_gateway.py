import asyncio

import pytest

from moosefs_plugin.core.exceptions import ConnectError, UnmountError
from moosefs_plugin.services.remote_gateway import RemoteMountGateway


@pytest.fixture
def gateway(mount_helper, tmp_path) -> RemoteMountGateway:
    return RemoteMountGateway(
        mount_helper=mount_helper,
        remote_path="/docker/volumes",
        staging_path=str(tmp_path / "moosefs"),
    )


@pytest.mark.asyncio
async def test_first_call_mounts_remote_root(gateway, mount_helper, tmp_path):
    assert not gateway.is_established

    await gateway.ensure_established()

    assert gateway.is_established
    assert (tmp_path / "moosefs").is_dir()
    assert mount_helper.calls == [("mount", str(tmp_path / "moosefs"), "/docker/volumes")]


@pytest.mark.asyncio
async def test_established_gateway_does_not_mount_again(gateway, mount_helper):
    await gateway.ensure_established()
    await gateway.ensure_established()
    await gateway.ensure_established()

    assert len(mount_helper.calls_for("mount")) == 1


@pytest.mark.asyncio
async def test_failure_leaves_gateway_retryable(gateway, mount_helper):
    mount_helper.fail("mount", stderr="can't resolve hostname")

    with pytest.raises(ConnectError) as e:
        await gateway.ensure_established()

    assert "can't resolve hostname" in str(e.value)
    assert not gateway.is_established

    # Master is reachable again
    mount_helper.clear_failures()
    await gateway.ensure_established()

    assert gateway.is_established
    assert len(mount_helper.calls_for("mount")) == 2


@pytest.mark.asyncio
async def test_timeout_is_reported_as_connect_error(gateway, mount_helper):
    mount_helper.fail("mount", timed_out=True)

    with pytest.raises(ConnectError) as e:
        await gateway.ensure_established()

    assert "timed out" in str(e.value)
    assert not gateway.is_established


@pytest.mark.asyncio
async def test_concurrent_first_calls_mount_once(gateway, mount_helper):
    mount_helper.delay = 0.05

    await asyncio.gather(*(gateway.ensure_established() for _ in range(10)))

    assert gateway.is_established
    assert len(mount_helper.calls_for("mount")) == 1


@pytest.mark.asyncio
async def test_concurrent_callers_share_the_same_failure(gateway, mount_helper):
    mount_helper.delay = 0.05
    mount_helper.fail("mount", stderr="connection refused")

    results = await asyncio.gather(
        *(gateway.ensure_established() for _ in range(5)), return_exceptions=True
    )

    assert len(mount_helper.calls_for("mount")) == 1
    assert all(isinstance(result, ConnectError) for result in results)
    assert all(result is results[0] for result in results)
    assert not gateway.is_established


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_abort_shared_attempt(gateway, mount_helper):
    mount_helper.delay = 0.05

    first = asyncio.create_task(gateway.ensure_established())
    second = asyncio.create_task(gateway.ensure_established())
    await asyncio.sleep(0.01)
    first.cancel()

    await second

    assert first.cancelled()
    assert gateway.is_established
    assert len(mount_helper.calls_for("mount")) == 1


@pytest.mark.asyncio
async def test_unmount_root_only_when_established(gateway, mount_helper, tmp_path):
    await gateway.unmount_root()
    assert mount_helper.calls_for("unmount") == []

    await gateway.ensure_established()
    await gateway.unmount_root()

    assert mount_helper.calls_for("unmount") == [("unmount", str(tmp_path / "moosefs"))]


@pytest.mark.asyncio
async def test_unmount_root_failure_raises(gateway, mount_helper):
    await gateway.ensure_established()
    mount_helper.fail("unmount", stderr="target is busy")

    with pytest.raises(UnmountError) as e:
        await gateway.unmount_root()

    assert "target is busy" in str(e.value)


@pytest.mark.asyncio
async def test_unmount_root_releases_gateway(gateway, mount_helper):
    await gateway.ensure_established()
    await gateway.unmount_root()

    assert not gateway.is_established

    # A second release is a no-op, a later call mounts again
    await gateway.unmount_root()
    assert len(mount_helper.calls_for("unmount")) == 1
    await gateway.ensure_established()
    assert len(mount_helper.calls_for("mount")) == 2


@pytest.mark.asyncio
async def test_failed_unmount_root_keeps_gateway_established(gateway, mount_helper):
    await gateway.ensure_established()
    mount_helper.fail("unmount", stderr="target is busy")

    with pytest.raises(UnmountError):
        await gateway.unmount_root()

    assert gateway.is_established
