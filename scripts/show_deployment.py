#!/usr/bin/python3

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, network_option

from deployment.migrations import MIGRATIONS, deployment_state
from deployment.options import config_filepath_option
from deployment.registry import DeploymentRegistry
from deployment.utils import _load_yaml, config_filepath_from_network, get_artifact_filepath


def _display_registry(registry: DeploymentRegistry) -> None:
    click.secho(f"\nChain {registry.chain_id}", fg="yellow")
    for index, handle in enumerate(registry, start=1):
        click.secho(f"    {index}. {handle.name} {handle.address}", fg="cyan")
        if handle.is_proxy:
            click.echo(f"        implementation {handle.implementation}")
            click.echo(f"        initialized with {list(handle.init_args)}")


def _has_code(handle) -> bool:
    return bool(networks.provider.get_code(handle.address))


def _display_steps(registry: DeploymentRegistry) -> None:
    for step in MIGRATIONS:
        done = step.is_complete(registry, is_deployed=_has_code)
        click.secho(
            f"    [{'x' if done else ' '}] {step.index}. {step.name}",
            fg="green" if done else "red",
        )


@click.command(cls=ConnectedProviderCommand, name="show-deployment")
@network_option(required=True)
@config_filepath_option
def cli(network, config_filepath):
    """
    Show the recorded deployments and steps for the connected network.

    Only completed steps are recorded, so the state shown is never ORACLE_DEPLOYED:
    that state is reached and reported while the characters deployment step runs.
    A recorded contract with no code on the connected chain leaves its step unchecked.
    """
    provider_network = networks.provider.network
    config_filepath = config_filepath or config_filepath_from_network(provider_network.name)
    registry_filepath = get_artifact_filepath(config=_load_yaml(config_filepath))

    registry = DeploymentRegistry.load(registry_filepath, chain_id=provider_network.chain_id)
    _display_registry(registry)
    click.secho("\nSteps", fg="yellow")
    _display_steps(registry)
    click.secho(f"\nDeployment state: {deployment_state(registry).name}", fg="green")


if __name__ == "__main__":
    cli()
