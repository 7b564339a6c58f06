from pathlib import Path

import click

from deployment.types import MinInt

config_filepath_option = click.option(
    "--config-filepath",
    "-c",
    help="Deployment config file; defaults to the config of the connected network.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=False,
)

autosign_option = click.option(
    "--autosign",
    help="Sign all transactions without asking for confirmation.",
    is_flag=True,
    default=False,
)

verify_option = click.option(
    "--verify",
    help="Publish the deployed contracts to the block explorer.",
    is_flag=True,
    default=False,
)

from_step_option = click.option(
    "--from",
    "-f",
    "start",
    help="Run steps from this index on, even if they already completed.",
    type=MinInt(1),
    required=False,
)

to_step_option = click.option(
    "--to",
    "-t",
    "stop",
    help="Index of the last step to run.",
    type=MinInt(1),
    required=False,
)

reset_option = click.option(
    "--reset",
    help="Ignore the recorded deployments and run every step from the beginning.",
    is_flag=True,
    default=False,
)
