"""
Agents module.

The Porpoise agent lives in porpsim.agents.porpoise; it is not imported
here because it depends on the movement package, which itself uses Agent.
"""

from porpsim.agents.base import Agent

__all__ = ["Agent"]
