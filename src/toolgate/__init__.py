"""Toolgate - console LLM agent with a human approval gate for function calls.

Wires a LangChain chat model to a small set of plugins (mock lights, a
software-build simulation, Google Fitness and Google Keep fetchers) and routes
every function call the model proposes through an approval gate before it is
allowed to run.

Quick Start:
    $ toolgate chat
    $ toolgate build-demo
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"

__all__ = [
    "__license__",
    "__version__",
]
