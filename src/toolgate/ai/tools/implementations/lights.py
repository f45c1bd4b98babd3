"""Mock smart-light control plugin.

Three lights are held in memory by the plugin instance; nothing is shared
between instances. ``change_state`` mutates that state and is the call an
approval policy usually guards.

Example:
    >>> plugin = LightsPlugin()
    >>> plugin.get_state(3).is_on
    True
    >>> plugin.change_state(1, LightState(id=1, name="Table Lamp", is_on=True))
    LightState(id=1, name='Table Lamp', is_on=True, brightness=None, hex=None)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from langchain_core.tools import tool
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from langchain_core.tools import BaseTool

logger = logging.getLogger(__name__)


class LightState(BaseModel):
    """State of one light as exchanged with the model."""

    id: int = Field(description="The ID of the light")
    name: str = Field(description="Display name of the light")
    is_on: bool | None = Field(default=None, description="Whether the light is on")
    brightness: int | None = Field(
        default=None,
        ge=0,
        le=255,
        description="Brightness from 0 to 255",
    )
    hex: str | None = Field(default=None, description="Color as a hex string, e.g. FF0000")


class GetStateInput(BaseModel):
    id: int = Field(description="The ID of the light")


class ChangeStateInput(BaseModel):
    id: int = Field(description="The ID of the light")
    light: LightState = Field(description="The new state of the light")


def default_lights() -> list[LightState]:
    """The mock lights a fresh plugin starts with."""
    return [
        LightState(id=1, name="Table Lamp", is_on=False, brightness=100, hex="FF0000"),
        LightState(id=2, name="Porch light", is_on=False, brightness=50, hex="00FF00"),
        LightState(id=3, name="Chandelier", is_on=True, brightness=75, hex="0000FF"),
    ]


class LightsPlugin:
    """Owns the light state and exposes it as capabilities."""

    name = "Lights"

    def __init__(self, lights: list[LightState] | None = None) -> None:
        self._lights = {light.id: light for light in (lights or default_lights())}

    def get_lights(self) -> list[LightState]:
        return list(self._lights.values())

    def get_state(self, id: int) -> LightState | None:
        return self._lights.get(id)

    def change_state(self, id: int, light: LightState | dict[str, Any]) -> LightState | None:
        """Copy ``is_on``, ``brightness`` and ``hex`` onto the light with ``id``.

        Returns:
            The updated light, or None when no light has that id
        """
        current = self._lights.get(id)
        if current is None:
            logger.debug(f"change_state: no light with id {id}")
            return None

        update = LightState.model_validate(light)
        current.is_on = update.is_on
        current.brightness = update.brightness
        current.hex = update.hex
        logger.info(f"Light {id} ({current.name}) changed: on={current.is_on}")
        return current

    def as_tools(self) -> list[BaseTool]:
        @tool("get_lights")
        def get_lights() -> list[LightState]:
            """Gets a list of lights and their current state"""
            return self.get_lights()

        @tool("get_state", args_schema=GetStateInput)
        def get_state(id: int) -> LightState | None:
            """Gets the state of a particular light"""
            return self.get_state(id)

        @tool("change_state", args_schema=ChangeStateInput)
        def change_state(id: int, light: LightState) -> LightState | None:
            """Changes the state of the light"""
            return self.change_state(id, light)

        return [get_lights, get_state, change_state]
