"""
Main CLI entry point for Pagesmith
"""

import logging

import click
from .page import page_group
from ..core.observability import setup_logfire


@click.group()
@click.version_option(version='0.1.0')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """
    Pagesmith - AI landing page generator

    Create landing pages from a title and source material, edit and
    preview them, then publish to WordPress or export static HTML.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    setup_logfire(service_name="pagesmith-cli")


# Register command groups
cli.add_command(page_group)


if __name__ == '__main__':
    cli()
