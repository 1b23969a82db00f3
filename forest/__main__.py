"""Allow ``python -m forest``."""

from forest.cli.main import cli

if __name__ == "__main__":
    cli()
