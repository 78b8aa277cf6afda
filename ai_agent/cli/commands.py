"""CLI commands for ai-agent."""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console

from ai_agent import __version__
from ai_agent.agent.core import Agent
from ai_agent.agent.loop import AgentDouble
from ai_agent.config.loader import load_config
from ai_agent.config.schema import AgentConfig, AgentMode
from ai_agent.errors import AgentError, MCPError
from ai_agent.mcp.client import MCPClient
from ai_agent.skills import (
    DirectoryReaderSkill,
    DirectoryRemoverSkill,
    DirectoryWriterSkill,
    EmbeddingSkill,
    FileReaderSkill,
    FileRemoverSkill,
    FileWriterSkill,
    HttpSkill,
    MCPSkill,
    SleepSkill,
    VectorInsertSkill,
    VectorSearchSkill,
)

app = typer.Typer(
    name="ai-agent",
    help="ai-agent - tool-using conversational agent",
    no_args_is_help=True,
)

console = Console()
EXIT_COMMANDS = {"exit", "quit", "/exit", "/quit", ":q"}
CLEAR_COMMANDS = {"clear", "/clear"}


def setup_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format="<dim>{time:HH:mm:ss}</dim> <level>{level: <7}</level> {message}")


async def build_session(config: AgentConfig, workspace: Path) -> AgentDouble:
    """Create an agent with the built-in skills and open a session on it."""
    agent = Agent.from_config(config)
    try:
        await _register_skills(agent, config, workspace)
    except Exception:
        await agent.close()
        raise
    return AgentDouble(agent)


async def _register_skills(agent: Agent, config: AgentConfig, workspace: Path) -> None:
    workspace.mkdir(parents=True, exist_ok=True)
    agent.learn_skill("filesystem_file_reader", FileReaderSkill(workspace))
    agent.learn_skill("filesystem_file_writer", FileWriterSkill(workspace))
    agent.learn_skill("filesystem_file_remover", FileRemoverSkill(workspace))
    agent.learn_skill("filesystem_directory_reader", DirectoryReaderSkill(workspace))
    agent.learn_skill("filesystem_directory_writer", DirectoryWriterSkill(workspace))
    agent.learn_skill("filesystem_directory_remover", DirectoryRemoverSkill(workspace))
    agent.learn_skill("http", HttpSkill(agent.http_client, config.http.allowed_urls))
    agent.learn_skill("time_sleep", SleepSkill())
    agent.learn_skill("ollama_embedding", EmbeddingSkill(agent.model_client))
    if agent.vector_store is not None:
        agent.learn_skill("milvus_insert", VectorInsertSkill(agent.vector_store))
        agent.learn_skill("milvus_search", VectorSearchSkill(agent.vector_store))

    if config.mcp is not None and config.mcp.enabled:
        client = MCPClient("mcp", config.mcp)
        try:
            await client.initialize()
        except MCPError:
            await client.close()
            raise
        agent.learn_skill("mcp", MCPSkill(client))


async def _print_chunk(chunk: str) -> None:
    console.print(chunk, end="", markup=False, highlight=False, soft_wrap=True)


@app.command()
def version():
    """Show version."""
    console.print(f"ai-agent v{__version__}")


@app.command()
def ask(
    message: str = typer.Argument(..., help="Message to send to the agent"),
    workspace: Path = typer.Option(Path("./workspace"), "--workspace", "-w", help="Root directory for filesystem skills"),
    loop: bool = typer.Option(False, "--loop/--chat", help="Run autonomously until the model ends the loop"),
):
    """Send one message and stream the answer."""
    config = load_config()
    setup_logging(config.log_level)
    if loop:
        config = config.model_copy(update={"agent_mode": AgentMode.LOOP})

    async def run_once():
        session = await build_session(config, workspace)
        try:
            result = await session.listen_and_watch(message, on_chunk=_print_chunk)
            console.print()
            logger.debug(f"Stopped after {result.turns} turn(s): {result.stop_reason.value}")
        finally:
            await session.agent.close()

    try:
        asyncio.run(run_once())
    except AgentError as e:
        console.print(f"\n[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def chat(
    workspace: Path = typer.Option(Path("./workspace"), "--workspace", "-w", help="Root directory for filesystem skills"),
    character: Optional[str] = typer.Option(None, "--character", help="Session character"),
    role: Optional[str] = typer.Option(None, "--role", help="Session role"),
):
    """Interactive chat. Type 'clear' to reset memory, 'exit' to quit."""
    config = load_config()
    setup_logging(config.log_level)

    async def run_interactive():
        session = await build_session(config, workspace)
        if character or role:
            session.set_character(character or session.character).set_role(role or session.role).reset_memory()

        console.print("Interactive mode (type [bold]exit[/bold] to quit, [bold]clear[/bold] to reset memory)\n")
        try:
            while True:
                try:
                    user_input = await asyncio.to_thread(console.input, "[bold blue]You:[/bold blue] ")
                except (KeyboardInterrupt, EOFError):
                    break

                command = user_input.strip()
                if not command:
                    continue
                if command.lower() in EXIT_COMMANDS:
                    break
                if command.lower() in CLEAR_COMMANDS:
                    session.reset_memory()
                    console.print("[dim]Memory cleared.[/dim]")
                    continue

                try:
                    await session.listen_and_watch(command, on_chunk=_print_chunk)
                except AgentError as e:
                    console.print(f"\n[red]Error:[/red] {e}")
                console.print()
        finally:
            await session.agent.close()
            console.print("Goodbye!")

    try:
        asyncio.run(run_interactive())
    except AgentError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
