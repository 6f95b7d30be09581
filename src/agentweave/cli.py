"""agentweave CLI entrypoint."""

from __future__ import annotations

import click

from agentweave import __version__


@click.group()
@click.version_option(version=__version__, prog_name="agentweave")
def main() -> None:
    """agentweave — run and inspect composed agents."""


# Register subcommands
from agentweave.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
