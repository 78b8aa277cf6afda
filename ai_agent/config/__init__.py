"""Configuration module for ai-agent."""

from ai_agent.config.loader import load_config, get_config_path
from ai_agent.config.schema import AgentConfig, AgentMode, EvictionPolicy, HttpConfig

__all__ = ["AgentConfig", "AgentMode", "EvictionPolicy", "HttpConfig", "load_config", "get_config_path"]
