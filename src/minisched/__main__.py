"""Allow ``python -m minisched``."""

from minisched.cli.app import app

app(prog_name="minisched")
