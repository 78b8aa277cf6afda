"""System prompt assembly.

A fresh session memory starts with these system entries, in order:

1. base agent persona
2. session persona
3. embedding model and vector collection disclosure
4. base agent skill catalogue (if any skills)
5. session skill catalogue (if any skills)
6. loop termination instruction (loop mode only)
"""

from __future__ import annotations

from ai_agent.agent.protocol import LOOP_END_MARKER, TOOL_CLOSE, TOOL_OPEN
from ai_agent.agent.registry import SkillRegistry

TOOL_CALL_GUIDE = f"""
When answering questions, if you need to call external tools or resources, please return the function call in JSON format embedded within your response. The JSON should strictly follow this structure:
{TOOL_OPEN}{{
  "function": "function_name",
  "context": {{
    "parameter1": "value1",
    "parameter2": "value2"
  }},
  "abort_on_error": true
}}
{TOOL_CLOSE}
The value of context might be JSON object or other data structure strictly according to the payload definition of specific function.
For example, if you need to call a 'search' function to look up information about the weather in New York, you should include this JSON in your response:
{TOOL_OPEN}
{{
  "function": "search",
  "context": {{
    "query": "weather in New York"
  }},
  "abort_on_error": true
}}
{TOOL_CLOSE}
Here is a list of supported functions (might also be called as skill or tool) you can call when needed:
"""

SESSION_CATALOGUE_HEADER = (
    "\nHere is a list of supported high priority functions "
    "(might also be called as skill or tool) you can call when needed:\n"
)

LOOP_INSTRUCTION = (
    "Determine if the conversation should continue strictly. "
    f"If not, include strictly {LOOP_END_MARKER} in your response. "
    "If you find too many duplicate content, please exit immediately."
)


def persona_prompt(character: str, role: str) -> str:
    return f"Personality: \nYou are {character}\nRole: \nYou are {role}"


def vector_disclosure(embedding_model: str, collection: str | None) -> list[str]:
    prompts = [f"The embedding model currently in use by the agent is: [{embedding_model}]."]
    if collection:
        prompts.append(f"The vector collection currently in use by the agent is: [{collection}].")
    return prompts


def base_catalogue(registry: SkillRegistry) -> str:
    return TOOL_CALL_GUIDE + registry.catalogue() + "\n"


def session_catalogue(registry: SkillRegistry) -> str:
    return SESSION_CATALOGUE_HEADER + registry.catalogue() + "\n"


def assemble_system_prompts(
    *,
    base_persona: str,
    session_persona: str,
    embedding_model: str,
    collection: str | None,
    base_skills: SkillRegistry,
    session_skills: SkillRegistry,
    loop_mode: bool,
) -> list[str]:
    """Return the system prompt texts that open a session, in order."""
    prompts = [base_persona, session_persona]
    prompts.extend(vector_disclosure(embedding_model, collection))
    if len(base_skills):
        prompts.append(base_catalogue(base_skills))
    if len(session_skills):
        prompts.append(session_catalogue(session_skills))
    if loop_mode:
        prompts.append(LOOP_INSTRUCTION)
    return prompts
