#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from deployment.context import ExecutionContext
from deployment.migrations import MIGRATIONS, deployment_state
from deployment.options import (
    autosign_option,
    config_filepath_option,
    from_step_option,
    reset_option,
    to_step_option,
    verify_option,
)
from deployment.params import Deployer
from deployment.registry import DeploymentRegistry
from deployment.sequencer import Sequencer, new_deployments
from deployment.utils import config_filepath_from_network


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@config_filepath_option
@autosign_option
@verify_option
@from_step_option
@to_step_option
@reset_option
def cli(network, account, config_filepath, autosign, verify, start, stop, reset):
    """
    Deploys the BattleWagerToken, then the proxied BasicPriceOracle and Characters.

    Steps already recorded in the registry are skipped unless --from or --reset is given.

    ape run deploy_characters --network ethereum:local:test --autosign
    """
    if start is not None and stop is not None and start > stop:
        raise click.BadOptionUsage(
            option_name="--from",
            message=f"--from ({start}) cannot be greater than --to ({stop})",
        )

    context = ExecutionContext.from_provider(account)
    config_filepath = config_filepath or config_filepath_from_network(context.network)
    deployer = Deployer.from_yaml(
        filepath=config_filepath, verify=verify, account=account, autosign=autosign
    )

    if reset:
        registry = DeploymentRegistry(chain_id=context.chain_id)
    else:
        registry = DeploymentRegistry.load(deployer.registry_filepath, chain_id=context.chain_id)
    click.secho(f"\nStarting from state {deployment_state(registry).name}", fg="yellow")

    sequencer = Sequencer(
        steps=MIGRATIONS,
        registry_filepath=deployer.registry_filepath,
        describe_state=lambda r: deployment_state(r).name,
    )
    result = sequencer.run(deployer, context, registry, start=start, stop=stop)

    deployer.finalize(deployments=new_deployments(before=registry, after=result))
    click.secho(f"\nDeployment state: {deployment_state(result).name}", fg="green")


if __name__ == "__main__":
    cli()
