"""Software build simulation plugin.

Five stages, each of which prints what it is doing and returns a fixed
label. The stages take the labels of the earlier stages as arguments, so a
model has to call them in order; rejecting one stage leaves the later ones
without their inputs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_core.tools import tool
from rich.console import Console

if TYPE_CHECKING:
    from langchain_core.tools import BaseTool


class SoftwareBuilderPlugin:
    """Software Builder Plugin"""

    name = "SoftwareBuilder"

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)

    def _say(self, text: str) -> None:
        self.console.print(text, markup=False)

    def collect_requirements(self) -> str:
        self._say("Collecting requirements...")
        return "Requirements"

    def design(self, requirements: str) -> str:
        self._say(f"Designing based on: {requirements}")
        return "Design"

    def implement(self, requirements: str, design: str) -> str:
        self._say(f"Implementing based on {requirements} and {design}")
        return "Implementation"

    def test(self, requirements: str, design: str, implementation: str) -> str:
        self._say(f"Testing based on {requirements}, {design} and {implementation}")
        return "Test Results"

    def deploy(
        self,
        requirements: str,
        design: str,
        implementation: str,
        test_results: str,
    ) -> str:
        self._say(
            f"Deploying based on {requirements}, {design}, {implementation} and {test_results}"
        )
        return "Deployment"

    def as_tools(self) -> list[BaseTool]:
        @tool("collect_requirements")
        def collect_requirements() -> str:
            """Collects requirements for the software project."""
            return self.collect_requirements()

        @tool("design")
        def design(requirements: str) -> str:
            """Designs the software based on the requirements."""
            return self.design(requirements)

        @tool("implement")
        def implement(requirements: str, design: str) -> str:
            """Implements the software based on the requirements and design."""
            return self.implement(requirements, design)

        @tool("test")
        def test(requirements: str, design: str, implementation: str) -> str:
            """Tests the software based on the requirements, design, and implementation."""
            return self.test(requirements, design, implementation)

        @tool("deploy")
        def deploy(
            requirements: str, design: str, implementation: str, test_results: str
        ) -> str:
            """Deploys the software based on the requirements, design, implementation, and test results."""
            return self.deploy(requirements, design, implementation, test_results)

        return [collect_requirements, design, implement, test, deploy]
