"""
lstdocker - Main entry point

Delegates to cli.py so `python -m lstdocker` behaves like the console script.
"""

from .cli import cli

if __name__ == "__main__":
    cli()
