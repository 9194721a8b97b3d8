from pepper.cli import run

run()
