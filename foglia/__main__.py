from foglia.cli import app

app()
