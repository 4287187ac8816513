from studynotes.cli.app import app

app()
