from deployment.constants import (
    BASIC_PRICE_ORACLE,
    BATTLE_WAGER_TOKEN,
    CHARACTERS,
    INITIAL_BALANCE,
    DeploymentState,
)
from deployment.context import ExecutionContext
from deployment.registry import DeploymentRegistry
from deployment.sequencer import DeploymentStep

# contracts marking each deployment state, in order
STATE_MILESTONES = (
    (DeploymentState.TOKEN_DEPLOYED, BATTLE_WAGER_TOKEN),
    (DeploymentState.ORACLE_DEPLOYED, BASIC_PRICE_ORACLE),
    (DeploymentState.CHARACTERS_DEPLOYED, CHARACTERS),
)


def deployment_state(registry: DeploymentRegistry) -> DeploymentState:
    """Returns the last state reached; states are only reached in order."""
    state = DeploymentState.NOT_STARTED
    for milestone, contract_name in STATE_MILESTONES:
        if contract_name not in registry:
            break
        state = milestone
    return state


def deploy_token(deployer, context: ExecutionContext, registry: DeploymentRegistry):
    """Deploys the token and funds the first account with the initial balance."""
    if not context.accounts:
        raise ValueError(f"No accounts available on network '{context.network}'.")

    token = deployer.deploy(BATTLE_WAGER_TOKEN)

    # token setup for local dev; the token holds its own supply
    deployer.transact(
        token.instance.transferFrom,
        token.address,
        context.accounts[0],
        INITIAL_BALANCE,
    )

    return registry.register(token)


def deploy_characters(deployer, context: ExecutionContext, registry: DeploymentRegistry):
    """Deploys the price oracle and the characters contract, both proxied."""
    token = deployer.confirm(registry.require(BATTLE_WAGER_TOKEN))

    price_oracle = deployer.deploy_proxy(BASIC_PRICE_ORACLE, [])
    registry = registry.register(price_oracle)
    print(f"(i) Deployment state: {deployment_state(registry).name}")

    characters = deployer.deploy_proxy(CHARACTERS, [token.address, price_oracle.address])
    registry = registry.register(characters)

    deployer.confirm(registry.require(CHARACTERS))
    return registry


MIGRATIONS = (
    DeploymentStep(
        index=1,
        name="token deployment",
        run=deploy_token,
        provides=(BATTLE_WAGER_TOKEN,),
    ),
    DeploymentStep(
        index=2,
        name="characters deployment",
        run=deploy_characters,
        provides=(BASIC_PRICE_ORACLE, CHARACTERS),
        requires=(BATTLE_WAGER_TOKEN,),
    ),
)
