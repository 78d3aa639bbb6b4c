from __future__ import annotations

import logging
from typing import Any

import httpx

from hue_bridge.endpoint import BridgeEndpoint
from hue_bridge.models import (
    Configuration,
    ConfigurationModifier,
    FullState,
    Group,
    GroupCommand,
    GroupId,
    GroupType,
    Light,
    LightCommand,
    LightStateChange,
    NewLights,
    RoomClass,
    Scene,
    SceneCreator,
    SceneId,
    SceneModifier,
    SceneRecall,
    encode_payload,
)
from hue_bridge.outcome import SuccessVec
from hue_bridge.reconcile import reconcile, reconcile_and_extract
from hue_bridge.transport import HueTransport

logger = logging.getLogger(__name__)


def _check_id(value: int, *, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{what} must be a non-negative integer")
    return value


def _check_name(value: str, *, what: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{what} must be a non-empty string")
    return value


class Bridge:
    """Async client for one bridge, addressed by IP/hostname and username.

    Every method performs exactly one HTTP request. Errors are raised as
    ``HueError`` subclasses; nothing is retried or cached.
    """

    def __init__(self, endpoint: BridgeEndpoint, *, transport: HueTransport | None = None) -> None:
        self._endpoint = endpoint
        # Only a transport created here is closed by close().
        self._owns_transport = transport is None
        self._transport = transport or HueTransport()

    @classmethod
    def connect(
        cls,
        address: str,
        username: str,
        *,
        http_transport: httpx.AsyncBaseTransport | None = None,
        timeout_seconds: float = 10.0,
    ) -> "Bridge":
        bridge = cls(
            BridgeEndpoint(address=address, username=username),
            transport=HueTransport(transport=http_transport, timeout_seconds=timeout_seconds),
        )
        bridge._owns_transport = True
        return bridge

    async def __aenter__(self) -> "Bridge":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_transport:
            await self._transport.close()

    @property
    def endpoint(self) -> BridgeEndpoint:
        return self._endpoint

    @property
    def ip(self) -> str:
        return self._endpoint.address

    @property
    def username(self) -> str:
        return self._endpoint.username

    async def _request(self, method: str, path: str, payload: Any | None) -> str:
        # Encode first so a bad payload never reaches the network.
        body = encode_payload(payload) if payload is not None else None
        url = self._endpoint.url(path)
        raw = await self._transport.execute(method, url, body=body)
        return self._transport.read_body_as_text(raw)

    async def _send(self, method: str, path: str, target_type: Any, payload: Any | None = None) -> Any:
        text = await self._request(method, path, payload)
        return reconcile(text, target_type)

    async def _send_and_extract(
        self, method: str, path: str, item_type: Any, payload: Any | None = None
    ) -> list[Any]:
        text = await self._request(method, path, payload)
        return reconcile_and_extract(text, item_type)

    # LIGHTS

    async def get_all_lights(self) -> dict[int, Light]:
        return await self._send("GET", "lights", dict[int, Light])

    async def get_light(self, id: int) -> Light:
        _check_id(id, what="light id")
        return await self._send("GET", f"lights/{id}", Light)

    async def get_new_lights(self) -> NewLights:
        """Lights found by the last ``search_for_new_lights`` call."""
        return await self._send("GET", "lights/new", NewLights)

    async def search_for_new_lights(self, device_ids: list[str] | None = None) -> SuccessVec:
        """Start a search for new lights and switches.

        Results are available from ``get_new_lights`` once the bridge has
        finished scanning (about a minute).
        """
        payload = {"deviceid": device_ids} if device_ids else None
        return await self._send_and_extract("POST", "lights", dict[str, Any], payload)

    async def set_light_state(self, id: int, command: LightCommand) -> SuccessVec:
        _check_id(id, what="light id")
        return await self._send_and_extract("PUT", f"lights/{id}/state", dict[str, Any], command)

    async def rename_light(self, id: int, name: str) -> SuccessVec:
        _check_id(id, what="light id")
        _check_name(name, what="name")
        return await self._send_and_extract("PUT", f"lights/{id}", dict[str, Any], {"name": name})

    async def delete_light(self, id: int) -> list[str]:
        _check_id(id, what="light id")
        return await self._send_and_extract("DELETE", f"lights/{id}", str)

    # GROUPS

    async def get_all_groups(self) -> dict[int, Group]:
        return await self._send("GET", "groups", dict[int, Group])

    async def create_group(
        self,
        name: str,
        lights: list[int],
        group_type: GroupType | str = GroupType.LIGHT_GROUP,
        room_class: RoomClass | None = None,
    ) -> int:
        """Create a group and return its id."""
        _check_name(name, what="group name")
        group = Group(name=name, lights=list(lights), group_type=group_type, room_class=room_class)
        created: GroupId = await self._send("POST", "groups", GroupId, group)
        logger.info("created group %s (%s)", created.id, name)
        return created.id

    async def get_group_attributes(self, id: int) -> Group:
        _check_id(id, what="group id")
        return await self._send("GET", f"groups/{id}", Group)

    async def set_group_attributes(self, id: int, command: GroupCommand) -> SuccessVec:
        _check_id(id, what="group id")
        return await self._send_and_extract("PUT", f"groups/{id}", dict[str, Any], command)

    async def set_group_state(self, id: int, command: LightCommand) -> SuccessVec:
        """Set the state of every light in the group.

        Group 0 is the special group containing all lights known to the bridge.
        """
        _check_id(id, what="group id")
        return await self._send_and_extract("PUT", f"groups/{id}/action", dict[str, Any], command)

    async def delete_group(self, id: int) -> list[str]:
        """Delete a group. Groups of type Luminaire and Lightsource cannot be deleted."""
        _check_id(id, what="group id")
        return await self._send_and_extract("DELETE", f"groups/{id}", str)

    # CONFIGURATION

    async def get_configuration(self) -> Configuration:
        return await self._send("GET", "config", Configuration)

    async def modify_configuration(self, command: ConfigurationModifier) -> SuccessVec:
        return await self._send_and_extract("PUT", "config", dict[str, Any], command)

    async def delete_user(self, username: str) -> list[str]:
        """Remove a username from the bridge whitelist."""
        _check_name(username, what="username")
        return await self._send_and_extract("DELETE", f"config/whitelist/{username}", str)

    async def get_full_state(self) -> FullState:
        """Fetch the whole datastore. This is expensive for the bridge; use sparingly."""
        return await self._send("GET", "", FullState)

    async def recall_scene_in_group(self, group_id: int, scene_id: str) -> SuccessVec:
        """Apply a scene to the lights that are both in the group and the scene.

        Group 0 recalls the scene on all of its lights.
        """
        _check_id(group_id, what="group id")
        _check_name(scene_id, what="scene id")
        return await self._send_and_extract(
            "PUT", f"groups/{group_id}/action", dict[str, Any], SceneRecall(scene=scene_id)
        )

    # SCENES

    async def get_all_scenes(self) -> dict[str, Scene]:
        return await self._send("GET", "scenes", dict[str, Scene])

    async def create_scene(self, scene: SceneCreator) -> str:
        """Create a scene and return its id."""
        created: SceneId = await self._send("POST", "scenes", SceneId, scene)
        logger.info("created scene %s (%s)", created.id, scene.name)
        return created.id

    async def modify_scene(self, id: str, scene: SceneModifier) -> SuccessVec:
        _check_name(id, what="scene id")
        return await self._send_and_extract("PUT", f"scenes/{id}", dict[str, Any], scene)

    async def set_light_state_in_scene(
        self, scene_id: str, light_id: int, state: LightStateChange
    ) -> SuccessVec:
        _check_name(scene_id, what="scene id")
        _check_id(light_id, what="light id")
        return await self._send_and_extract(
            "PUT", f"scenes/{scene_id}/lightstates/{light_id}", dict[str, Any], state
        )

    async def delete_scene(self, id: str) -> list[str]:
        _check_name(id, what="scene id")
        return await self._send_and_extract("DELETE", f"scenes/{id}", str)

    async def get_scene_with_states(self, id: str) -> Scene:
        _check_name(id, what="scene id")
        return await self._send("GET", f"scenes/{id}", Scene)
