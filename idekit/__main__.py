"""Entry point for running idekit as a module: python -m idekit"""

from idekit.cli.commands import app

if __name__ == "__main__":
    app()
