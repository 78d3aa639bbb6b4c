from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_serializer, model_validator
from pydantic_core import PydanticSerializationError

from hue_bridge.errors import HueEncodingError


class _Resource(BaseModel):
    # Firmware adds fields over time; reads must not break on them.
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class _Command(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


def _ids_as_strings(ids: list[int] | None) -> list[str] | None:
    # The bridge addresses lights by string id in request bodies.
    if ids is None:
        return None
    return [str(i) for i in ids]


# LIGHTS


class LightState(_Resource):
    on: bool | None = None
    bri: int | None = None
    hue: int | None = None
    sat: int | None = None
    effect: str | None = None
    xy: list[float] | None = None
    ct: int | None = None
    alert: str | None = None
    colormode: str | None = None
    mode: str | None = None
    reachable: bool | None = None


class Light(_Resource):
    name: str
    state: LightState
    type: str | None = None
    modelid: str | None = None
    manufacturername: str | None = None
    productname: str | None = None
    uniqueid: str | None = None
    swversion: str | None = None


class NewLight(_Resource):
    name: str


class NewLights(BaseModel):
    """Result of ``GET lights/new``: the lights found by the last search."""

    lastscan: str
    lights: dict[int, NewLight] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _split_lastscan(cls, data: Any) -> Any:
        if isinstance(data, dict) and "lights" not in data:
            rest = {k: v for k, v in data.items() if k != "lastscan"}
            return {"lastscan": data.get("lastscan"), "lights": rest}
        return data


class LightCommand(_Command):
    """A set of light state fields to change. Unset fields are not sent.

    Builders return a new command, so a base command can be shared::

        cmd = LightCommand().on().with_bri(200).with_transition_time(4)
    """

    on_: bool | None = Field(default=None, alias="on")
    bri: int | None = Field(default=None, ge=0, le=254)
    hue: int | None = Field(default=None, ge=0, le=65535)
    sat: int | None = Field(default=None, ge=0, le=254)
    xy: tuple[float, float] | None = None
    ct: int | None = Field(default=None, ge=153, le=500)
    alert: str | None = None
    effect: str | None = None
    transitiontime: int | None = Field(default=None, ge=0)
    bri_inc: int | None = Field(default=None, ge=-254, le=254)
    sat_inc: int | None = Field(default=None, ge=-254, le=254)
    hue_inc: int | None = Field(default=None, ge=-65534, le=65534)
    ct_inc: int | None = Field(default=None, ge=-65534, le=65534)
    scene: str | None = None

    def _with(self, **changes: Any) -> "LightCommand":
        # Rebuild through validation so builders honour the field bounds.
        return type(self).model_validate({**self.model_dump(exclude_none=True), **changes})

    def on(self) -> "LightCommand":
        return self._with(on_=True)

    def off(self) -> "LightCommand":
        return self._with(on_=False)

    def with_bri(self, bri: int) -> "LightCommand":
        return self._with(bri=bri)

    def with_hue(self, hue: int) -> "LightCommand":
        return self._with(hue=hue)

    def with_sat(self, sat: int) -> "LightCommand":
        return self._with(sat=sat)

    def with_xy(self, x: float, y: float) -> "LightCommand":
        return self._with(xy=(x, y))

    def with_ct(self, ct: int) -> "LightCommand":
        return self._with(ct=ct)

    def with_alert(self, alert: str) -> "LightCommand":
        return self._with(alert=alert)

    def with_effect(self, effect: str) -> "LightCommand":
        return self._with(effect=effect)

    def with_transition_time(self, transitiontime: int) -> "LightCommand":
        return self._with(transitiontime=transitiontime)

    def with_bri_inc(self, inc: int) -> "LightCommand":
        return self._with(bri_inc=inc)

    def with_sat_inc(self, inc: int) -> "LightCommand":
        return self._with(sat_inc=inc)

    def with_hue_inc(self, inc: int) -> "LightCommand":
        return self._with(hue_inc=inc)

    def with_ct_inc(self, inc: int) -> "LightCommand":
        return self._with(ct_inc=inc)


# GROUPS


class GroupType(str, Enum):
    LIGHT_GROUP = "LightGroup"
    LUMINAIRE = "Luminaire"
    LIGHT_SOURCE = "Lightsource"
    ROOM = "Room"
    ENTERTAINMENT = "Entertainment"
    ZONE = "Zone"


# Room classes change with firmware ("Living room", "Kitchen", "Other", ...),
# so they stay plain strings.
RoomClass = str


class GroupState(_Resource):
    all_on: bool = False
    any_on: bool = False


class Group(_Resource):
    name: str
    lights: list[int] = Field(default_factory=list)
    group_type: GroupType | str = Field(default=GroupType.LIGHT_GROUP, alias="type", union_mode="left_to_right")
    room_class: RoomClass | None = Field(default=None, alias="class")
    state: GroupState | None = None
    action: LightState | None = None

    @field_serializer("lights")
    def _serialize_lights(self, lights: list[int]) -> list[str]:
        return _ids_as_strings(lights) or []


class GroupCommand(_Command):
    name: str | None = None
    lights: list[int] | None = None
    room_class: RoomClass | None = Field(default=None, alias="class")

    @field_serializer("lights")
    def _serialize_lights(self, lights: list[int] | None) -> list[str] | None:
        return _ids_as_strings(lights)


# SCENES


class AppData(_Resource):
    version: int
    data: str


class LightStateChange(_Command):
    on_: bool | None = Field(default=None, alias="on")
    bri: int | None = None
    hue: int | None = None
    sat: int | None = None
    xy: tuple[float, float] | None = None
    ct: int | None = None
    effect: str | None = None
    transitiontime: int | None = None


class Scene(_Resource):
    name: str
    lights: list[int] = Field(default_factory=list)
    type: str | None = None
    group: str | None = None
    owner: str | None = None
    recycle: bool = False
    locked: bool = False
    appdata: AppData | None = None
    picture: str | None = None
    lastupdated: str | None = None
    version: int | None = None
    lightstates: dict[int, LightState] | None = None


class SceneCreator(_Command):
    name: str
    lights: list[int]
    recycle: bool = False
    appdata: AppData | None = None
    picture: str | None = None
    transitiontime: int | None = None

    @field_serializer("lights")
    def _serialize_lights(self, lights: list[int]) -> list[str]:
        return _ids_as_strings(lights) or []


class SceneModifier(_Command):
    name: str | None = None
    lights: list[int] | None = None
    storelightstate: bool | None = None

    @field_serializer("lights")
    def _serialize_lights(self, lights: list[int] | None) -> list[str] | None:
        return _ids_as_strings(lights)


class SceneRecall(_Command):
    scene: str


# CONFIGURATION


class WhitelistEntry(_Resource):
    name: str
    last_use_date: str | None = Field(default=None, alias="last use date")
    create_date: str | None = Field(default=None, alias="create date")


class Configuration(_Resource):
    name: str
    bridgeid: str | None = None
    mac: str | None = None
    zigbeechannel: int | None = None
    dhcp: bool | None = None
    ipaddress: str | None = None
    netmask: str | None = None
    gateway: str | None = None
    proxyaddress: str | None = None
    proxyport: int | None = None
    utc: str | None = Field(default=None, alias="UTC")
    localtime: str | None = None
    timezone: str | None = None
    modelid: str | None = None
    datastoreversion: str | None = None
    swversion: str | None = None
    apiversion: str | None = None
    linkbutton: bool | None = None
    portalservices: bool | None = None
    whitelist: dict[str, WhitelistEntry] = Field(default_factory=dict)


class ConfigurationModifier(_Command):
    name: str | None = None
    proxyport: int | None = None
    proxyaddress: str | None = None
    ipaddress: str | None = None
    netmask: str | None = None
    gateway: str | None = None
    dhcp: bool | None = None
    portalservices: bool | None = None
    linkbutton: bool | None = None
    touchlink: bool | None = None
    zigbeechannel: int | None = None
    utc: str | None = Field(default=None, alias="UTC")
    timezone: str | None = None


class FullState(_Resource):
    lights: dict[int, Light] = Field(default_factory=dict)
    groups: dict[int, Group] = Field(default_factory=dict)
    config: Configuration
    scenes: dict[str, Scene] = Field(default_factory=dict)
    schedules: dict[str, Any] = Field(default_factory=dict)
    sensors: dict[str, Any] = Field(default_factory=dict)
    rules: dict[str, Any] = Field(default_factory=dict)
    resourcelinks: dict[str, Any] = Field(default_factory=dict)


# SMALL RESPONSE OBJECTS


class User(BaseModel):
    username: str


class GroupId(BaseModel):
    id: int


class SceneId(BaseModel):
    id: str


class Discovery(BaseModel):
    """One entry of the cloud discovery endpoint's response."""

    id: str
    internalipaddress: str
    macaddress: str | None = None
    name: str | None = None
    port: int | None = None

    def into_ip(self) -> str:
        return self.internalipaddress


_any_adapter: TypeAdapter[Any] = TypeAdapter(Any)


def encode_payload(payload: Any) -> bytes:
    try:
        if isinstance(payload, BaseModel):
            return payload.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
        return _any_adapter.dump_json(payload)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise HueEncodingError(f"Could not encode request body: {exc}") from exc
