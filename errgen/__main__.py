from errgen.cli import app

app(prog_name="errgen")
