from ai_agent.cli.commands import app

app()
