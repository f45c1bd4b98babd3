"""Tests for ConsoleApprovalProvider."""

import os

import pytest

from toolgate.ai.tools.providers import ConsoleApprovalProvider
from toolgate.ai.tools.providers.cli import is_approval


@pytest.fixture
def add_descriptor(math_registry):
    return math_registry.find("Math-add")


def make_provider(console, answer, **kwargs):
    def read():
        if isinstance(answer, BaseException):
            raise answer
        return answer

    return ConsoleApprovalProvider(console=console, input_func=read, **kwargs)


class TestDecision:
    """Tests for how answers are interpreted."""

    @pytest.mark.parametrize("answer", ["yes", "Yes", "YES", " yes ", "yes\n"])
    def test_yes_approves(self, console_output, add_descriptor, answer):
        """Test only 'yes' approves, ignoring case and surrounding whitespace."""
        console, _ = console_output
        assert make_provider(console, answer).decide(add_descriptor, {"a": 2, "b": 3}) is True

    @pytest.mark.parametrize("answer", ["", "y", "no", "yes please", "approve", "ye s"])
    def test_anything_else_denies(self, console_output, add_descriptor, answer):
        """Test every other answer denies without re-prompting."""
        console, _ = console_output
        calls = []

        def read():
            calls.append(1)
            return answer

        provider = ConsoleApprovalProvider(console=console, input_func=read)

        assert provider.decide(add_descriptor, {"a": 2, "b": 3}) is False
        assert len(calls) == 1

    @pytest.mark.parametrize("error", [EOFError(), KeyboardInterrupt()])
    def test_closed_input_denies(self, console_output, add_descriptor, error):
        """Test EOF and Ctrl+C deny."""
        console, _ = console_output
        assert make_provider(console, error).decide(add_descriptor, {}) is False

    def test_is_approval(self):
        """Test the approval token check."""
        assert is_approval("  YeS ")
        assert not is_approval("yess")


class TestRendering:
    """Tests for the approval prompt text."""

    def test_prompt_with_arguments(self, console_output, add_descriptor):
        """Test function, plugin and each argument are shown in order."""
        console, buffer = console_output

        make_provider(console, "no").decide(add_descriptor, {"a": 2, "b": 3})

        assert buffer.getvalue().splitlines() == [
            "====================",
            "Function name: add",
            "Plugin name: Math",
            "",
            "Arguments:",
            "a: 2",
            "b: 3",
            "",
            "Approve invocation? (yes/no)",
        ]

    def test_prompt_without_arguments(self, console_output, add_descriptor):
        """Test an empty argument list is shown as N/A."""
        console, buffer = console_output

        make_provider(console, "no").decide(add_descriptor, {})

        assert "\nArguments: N/A\n" in buffer.getvalue()

    def test_emoji_codes_shown_verbatim(self, console_output, add_descriptor):
        """Test argument values are shown exactly as they will be passed."""
        console, buffer = console_output

        make_provider(console, "no").decide(add_descriptor, {"a": ":smile:", "b": "[red]x[/red]"})

        lines = buffer.getvalue().splitlines()
        assert "a: :smile:" in lines
        assert "b: [red]x[/red]" in lines

    def test_default_console_disables_emoji(self, add_descriptor):
        """Test the provider's own console does not replace emoji codes."""
        provider = ConsoleApprovalProvider(input_func=lambda: "no")

        with provider.console.capture() as capture:
            provider.decide(add_descriptor, {"a": ":x:", "b": 1})

        assert "a: :x:" in capture.get().splitlines()

    def test_global_capability_has_no_plugin(self, console_output):
        """Test capabilities without a namespace show N/A as plugin."""
        from langchain_core.tools import tool

        from toolgate.ai.tools import CapabilityRegistry

        @tool
        def ping() -> str:
            """Ping."""
            return "pong"

        registry = CapabilityRegistry()
        descriptor = registry.register(ping)
        console, buffer = console_output

        make_provider(console, "no").decide(descriptor, {})

        assert "Plugin name: N/A" in buffer.getvalue()

    def test_hidden_arguments(self, console_output, add_descriptor):
        """Test show_arguments=False hides values."""
        console, buffer = console_output

        make_provider(console, "no", show_arguments=False).decide(add_descriptor, {"a": 2})

        assert "a: 2" not in buffer.getvalue()
        assert "Arguments: N/A" in buffer.getvalue()


class TestTimeout:
    """Tests for the optional answer timeout."""

    @pytest.fixture
    def pipe(self):
        read_fd, write_fd = os.pipe()
        reader = os.fdopen(read_fd, "r")
        writer = os.fdopen(write_fd, "w")
        yield reader, writer
        reader.close()
        if not writer.closed:
            writer.close()

    def test_answer_within_timeout(self, console_output, add_descriptor, pipe):
        """Test an answer arriving in time is used."""
        reader, writer = pipe
        writer.write("YES\n")
        writer.flush()
        console, _ = console_output
        provider = ConsoleApprovalProvider(console=console, timeout=1.0, stream=reader)

        assert provider.decide(add_descriptor, {}) is True

    def test_no_answer_denies(self, console_output, add_descriptor, pipe):
        """Test silence until the timeout denies."""
        reader, _ = pipe
        console, buffer = console_output
        provider = ConsoleApprovalProvider(console=console, timeout=0.05, stream=reader)

        assert provider.decide(add_descriptor, {}) is False
        assert "No answer within 0.05s - denied" in buffer.getvalue()

    def test_eof_denies(self, console_output, add_descriptor, pipe):
        """Test a closed stream denies."""
        reader, writer = pipe
        writer.close()
        console, _ = console_output
        provider = ConsoleApprovalProvider(console=console, timeout=1.0, stream=reader)

        assert provider.decide(add_descriptor, {}) is False
