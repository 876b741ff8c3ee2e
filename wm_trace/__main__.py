"""Entry point for ``python -m wm_trace``."""

from .cli import cli

if __name__ == '__main__':
    cli()
