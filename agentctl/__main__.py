from agentctl.cli.main import app

app()
