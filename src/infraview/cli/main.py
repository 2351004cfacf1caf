"""
infraview CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import logging

import click

from .commands import blast_radius, stats, trace, view


@click.group()
@click.version_option(package_name="infraview")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """infraview: Infrastructure dependency graph explorer.

    Traverse, filter and highlight a Terraform / Helm / Kubernetes /
    Terragrunt dependency graph and measure the blast radius of a change.

    \b
    Quick Start:
      infraview stats -g graph.json
      infraview blast aws_db_instance.primary -g graph.json
      infraview trace vpc app -g graph.json
      infraview view -g graph.json --type terraform_resource --search db
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register commands
main.add_command(stats.stats)
main.add_command(blast_radius.blast_radius, name="blast")
main.add_command(trace.trace)
main.add_command(view.view)

if __name__ == "__main__":
    main()
