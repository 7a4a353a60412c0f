from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DockerModel(BaseModel):
    """
    Base for the Docker volume plugin wire format.

    Docker uses capitalised JSON keys (Name, ID, Mountpoint, Err ...); the
    Python side uses snake_case field names with the wire names as aliases.
    """

    model_config = ConfigDict(populate_by_name=True)


# --- Requests ---

class VolumeRequest(DockerModel):
    name: str = Field(..., alias="Name", description="Volume name")


class CreateVolumeRequest(VolumeRequest):
    opts: Optional[Dict[str, str]] = Field(
        default=None, alias="Opts", description="Driver options from `docker volume create -o`"
    )

    @property
    def storage_class(self) -> Optional[str]:
        return (self.opts or {}).get("StorageClass")


class MountVolumeRequest(VolumeRequest):
    id: str = Field(..., alias="ID", description="Unique ID of this mount request")


# --- Responses ---

class VolumeInfo(DockerModel):
    name: str = Field(..., alias="Name")
    mountpoint: Optional[str] = Field(default=None, alias="Mountpoint")


class PluginResponse(DockerModel):
    err: Optional[str] = Field(default=None, alias="Err")


class MountpointResponse(PluginResponse):
    mountpoint: Optional[str] = Field(default=None, alias="Mountpoint")


class GetVolumeResponse(PluginResponse):
    volume: Optional[VolumeInfo] = Field(default=None, alias="Volume")


class ListVolumesResponse(PluginResponse):
    volumes: List[VolumeInfo] = Field(default_factory=list, alias="Volumes")


class Capabilities(DockerModel):
    scope: str = Field(default="global", alias="Scope")


class CapabilitiesResponse(PluginResponse):
    capabilities: Capabilities = Field(default_factory=Capabilities, alias="Capabilities")


class ActivateResponse(DockerModel):
    implements: List[str] = Field(default_factory=lambda: ["VolumeDriver"], alias="Implements")
