"""
ai-agent - Tool-using conversational agent runtime for Ollama and Milvus.
"""

__version__ = "0.1.0"


def __getattr__(name):
    """Lazy imports for heavy modules to keep startup fast."""
    if name == "Agent":
        from ai_agent.agent.core import Agent
        return Agent
    if name == "AgentDouble":
        from ai_agent.agent.loop import AgentDouble
        return AgentDouble
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["__version__", "Agent", "AgentDouble"]
