"""Entry point for `python -m termdesk`."""

from termdesk.cli.commands import app

if __name__ == "__main__":
    app()
