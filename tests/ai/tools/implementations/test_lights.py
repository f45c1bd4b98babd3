"""Tests for LightsPlugin."""

import pytest

from toolgate.ai.tools import CapabilityRegistry, Executed, ToolInvoker
from toolgate.ai.tools.implementations import LightsPlugin, LightState
from toolgate.ai.tools.providers import AlwaysApproveProvider


@pytest.fixture
def plugin():
    return LightsPlugin()


class TestLightsPlugin:
    """Tests for the in-memory light state."""

    def test_initial_lights(self, plugin):
        """Test the three mock lights and their starting state."""
        lights = plugin.get_lights()

        assert [(light.id, light.name, light.is_on) for light in lights] == [
            (1, "Table Lamp", False),
            (2, "Porch light", False),
            (3, "Chandelier", True),
        ]
        assert lights[0].brightness == 100
        assert lights[0].hex == "FF0000"

    def test_get_state(self, plugin):
        """Test a light is returned by id."""
        assert plugin.get_state(3).name == "Chandelier"

    def test_get_state_unknown_id(self, plugin):
        """Test an unknown id returns None."""
        assert plugin.get_state(42) is None

    def test_change_state_updates_light(self, plugin):
        """Test on/off, brightness and color are copied."""
        updated = plugin.change_state(
            1, LightState(id=1, name="ignored", is_on=True, brightness=255, hex="FFFFFF")
        )

        assert updated.is_on is True
        assert updated.brightness == 255
        assert updated.hex == "FFFFFF"
        assert updated.name == "Table Lamp"
        assert plugin.get_state(1) == updated

    def test_change_state_accepts_mapping(self, plugin):
        """Test the new state may be a plain dict."""
        updated = plugin.change_state(2, {"id": 2, "name": "Porch light", "is_on": True})

        assert updated.is_on is True
        assert updated.brightness is None

    def test_change_state_unknown_id(self, plugin):
        """Test changing an unknown light returns None and changes nothing."""
        before = [light.model_copy() for light in plugin.get_lights()]

        assert plugin.change_state(9, {"id": 9, "name": "x", "is_on": True}) is None
        assert plugin.get_lights() == before

    def test_brightness_range(self):
        """Test brightness is limited to 0-255."""
        with pytest.raises(ValueError):
            LightState(id=1, name="Lamp", brightness=256)

    def test_instances_do_not_share_state(self):
        """Test each plugin owns its lights."""
        first, second = LightsPlugin(), LightsPlugin()

        first.change_state(1, {"id": 1, "name": "Table Lamp", "is_on": True})

        assert second.get_state(1).is_on is False


class TestLightsTools:
    """Tests for the capabilities exposed to the model."""

    def test_change_state_through_invoker(self, plugin):
        """Test a model-shaped call reaches the plugin state."""
        registry = CapabilityRegistry()
        registry.register_plugin(plugin)
        request = registry.create_request(
            "Lights-change_state",
            {"id": 3, "light": {"id": 3, "name": "Chandelier", "is_on": False}},
        )

        outcome = ToolInvoker(AlwaysApproveProvider()).invoke(request)

        assert isinstance(outcome, Executed)
        assert plugin.get_state(3).is_on is False

    def test_get_lights_result_text(self, plugin):
        """Test results are rendered as JSON for the model."""
        registry = CapabilityRegistry()
        registry.register_plugin(plugin)

        outcome = ToolInvoker(AlwaysApproveProvider()).invoke(
            registry.create_request("Lights-get_lights")
        )

        assert '"name": "Table Lamp"' in outcome.to_text()
