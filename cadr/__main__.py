from cadr.cli import app

app()
