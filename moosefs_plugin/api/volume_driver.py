"""
Docker volume plugin protocol.

Docker POSTs JSON to /Plugin.Activate and /VolumeDriver.* on the plugin
socket. Failures are answered with HTTP 200 and an ``Err`` message, which
is how Docker expects a plugin to report them.
"""

import logging

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.exceptions import VolumePluginError
from ..dependencies import get_volume_manager
from ..models import (
    ActivateResponse,
    CapabilitiesResponse,
    CreateVolumeRequest,
    GetVolumeResponse,
    ListVolumesResponse,
    MountVolumeRequest,
    MountpointResponse,
    PluginResponse,
    VolumeRequest,
)
from ..services.volume_manager import VolumeManager

plugin_router = APIRouter(tags=["plugin"])
router = APIRouter(tags=["volume-driver"])


async def get_ready_volume_manager(
    volume_manager: VolumeManager = Depends(get_volume_manager),
) -> VolumeManager:
    """Every VolumeDriver call needs the MooseFS remote root mounted first."""
    await volume_manager.ensure_ready()
    return volume_manager


@plugin_router.post("/Plugin.Activate", response_model=ActivateResponse)
async def activate() -> ActivateResponse:
    logging.debug("/Plugin.Activate")
    return ActivateResponse()


@router.post("/VolumeDriver.Create", response_model=PluginResponse, response_model_exclude_none=True)
async def create_volume(
    request: CreateVolumeRequest,
    volume_manager: VolumeManager = Depends(get_ready_volume_manager),
) -> PluginResponse:
    logging.info(f"/VolumeDriver.Create: {request.name}")
    await volume_manager.create(request.name, request.storage_class)
    return PluginResponse()


@router.post("/VolumeDriver.Remove", response_model=PluginResponse, response_model_exclude_none=True)
async def remove_volume(
    request: VolumeRequest,
    volume_manager: VolumeManager = Depends(get_ready_volume_manager),
) -> PluginResponse:
    logging.info(f"/VolumeDriver.Remove: {request.name}")
    await volume_manager.remove(request.name)
    return PluginResponse()


@router.post("/VolumeDriver.Mount", response_model=MountpointResponse, response_model_exclude_none=True)
async def mount_volume(
    request: MountVolumeRequest,
    volume_manager: VolumeManager = Depends(get_ready_volume_manager),
) -> MountpointResponse:
    logging.debug(f"/VolumeDriver.Mount: {request.name} (mount ID {request.id})")
    mountpoint = await volume_manager.mount(request.name, request.id)
    return MountpointResponse(mountpoint=mountpoint)


@router.post("/VolumeDriver.Unmount", response_model=PluginResponse, response_model_exclude_none=True)
async def unmount_volume(
    request: MountVolumeRequest,
    volume_manager: VolumeManager = Depends(get_ready_volume_manager),
) -> PluginResponse:
    logging.debug(f"/VolumeDriver.Unmount: {request.name} (mount ID {request.id})")
    await volume_manager.unmount(request.name, request.id)
    return PluginResponse()


@router.post("/VolumeDriver.Path", response_model=MountpointResponse, response_model_exclude_none=True)
async def volume_path(
    request: VolumeRequest,
    volume_manager: VolumeManager = Depends(get_ready_volume_manager),
) -> MountpointResponse:
    logging.debug(f"/VolumeDriver.Path: {request.name}")
    return MountpointResponse(mountpoint=volume_manager.path(request.name))


@router.post("/VolumeDriver.Get", response_model=GetVolumeResponse, response_model_exclude_none=True)
async def get_volume(
    request: VolumeRequest,
    volume_manager: VolumeManager = Depends(get_ready_volume_manager),
) -> GetVolumeResponse:
    logging.debug(f"/VolumeDriver.Get: {request.name}")
    return GetVolumeResponse(volume=await volume_manager.get(request.name))


@router.post("/VolumeDriver.List", response_model=ListVolumesResponse, response_model_exclude_none=True)
async def list_volumes(
    volume_manager: VolumeManager = Depends(get_ready_volume_manager),
) -> ListVolumesResponse:
    logging.debug("/VolumeDriver.List")
    return ListVolumesResponse(volumes=await volume_manager.list_volumes())


@router.post("/VolumeDriver.Capabilities", response_model=CapabilitiesResponse, response_model_exclude_none=True)
async def capabilities(
    volume_manager: VolumeManager = Depends(get_ready_volume_manager),
) -> CapabilitiesResponse:
    logging.debug("/VolumeDriver.Capabilities")
    return CapabilitiesResponse()


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=200, content={"Err": message})


async def _plugin_error_handler(request: Request, exc: VolumePluginError) -> JSONResponse:
    logging.warning(f"{request.url.path} failed: {exc}")
    return _error_response(str(exc))


async def _os_error_handler(request: Request, exc: OSError) -> JSONResponse:
    logging.error(f"{request.url.path} failed with filesystem error: {exc}")
    return _error_response(str(exc))


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logging.warning(f"{request.url.path} received an invalid request: {exc.errors()}")
    return _error_response(f"Invalid request: {exc.errors()}")


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logging.exception(f"{request.url.path} failed unexpectedly: {exc}")
    return _error_response(str(exc) or exc.__class__.__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(VolumePluginError, _plugin_error_handler)
    app.add_exception_handler(OSError, _os_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
