from .cli import app

app(prog_name="github-resolver")
