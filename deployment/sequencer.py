from pathlib import Path
from typing import Any, Callable, List, NamedTuple, Optional, Sequence, Tuple

from deployment.context import ExecutionContext
from deployment.registry import ContractHandle, ContractName, DeploymentRegistry

StepFunction = Callable[[Any, ExecutionContext, DeploymentRegistry], DeploymentRegistry]
DeployedCheck = Callable[[ContractHandle], bool]


class DeploymentStep(NamedTuple):
    """A single, ordered unit of the deployment sequence."""

    index: int
    name: str
    run: StepFunction
    provides: Tuple[ContractName, ...]
    requires: Tuple[ContractName, ...] = ()

    def is_complete(
        self, registry: DeploymentRegistry, is_deployed: Optional[DeployedCheck] = None
    ) -> bool:
        """
        A step is complete once every contract it provides is registered and,
        when `is_deployed` is given, has contract code on the connected chain.
        """
        for name in self.provides:
            handle = registry.get(name)
            if handle is None:
                return False
            if is_deployed is not None and not is_deployed(handle):
                return False
        return True


def validate_steps(steps: Sequence[DeploymentStep]) -> None:
    """Checks that steps are strictly ordered and only depend on earlier steps."""
    provided = set()
    previous_index = None
    for step in steps:
        if previous_index is not None and step.index <= previous_index:
            raise Sequencer.InvalidSequence(
                f"Step '{step.name}' has index {step.index}; "
                f"expected an index greater than {previous_index}."
            )
        missing = [name for name in step.requires if name not in provided]
        if missing:
            raise Sequencer.InvalidSequence(
                f"Step '{step.name}' requires {', '.join(missing)} "
                f"which no earlier step provides."
            )
        provided.update(step.provides)
        previous_index = step.index


class Sequencer:
    """
    Runs deployment steps one after the other, threading the registry
    returned by each step into the next one.

    The registry is persisted after every successful step, so a failed run
    leaves the last completed step on record and a later run only executes the rest.
    """

    class InvalidSequence(Exception):
        """Raised when the steps are not in a valid order"""

    class IncompleteStep(Exception):
        """Raised when a step does not register all the contracts it provides"""

    def __init__(
        self,
        steps: Sequence[DeploymentStep],
        registry_filepath: Optional[Path] = None,
        describe_state: Optional[Callable[[DeploymentRegistry], Any]] = None,
    ):
        validate_steps(steps)
        self.steps = list(steps)
        self.registry_filepath = registry_filepath
        self.describe_state = describe_state or (lambda registry: registry.names)

    def pending(
        self,
        registry: DeploymentRegistry,
        start: Optional[int] = None,
        stop: Optional[int] = None,
        is_deployed: Optional[DeployedCheck] = None,
    ) -> List[DeploymentStep]:
        """
        Returns the steps that still have to run.

        Without `start`, completed steps are skipped. With `start`, every step from that
        index on runs again, completed or not. `stop` is the index of the last step to run.
        A registered contract only counts as deployed if `is_deployed` accepts it,
        so a registry recorded on another chain does not skip any step.
        """
        steps = list()
        for step in self.steps:
            if stop is not None and step.index > stop:
                break
            if start is not None:
                if step.index < start:
                    continue
            elif step.is_complete(registry, is_deployed=is_deployed):
                continue
            steps.append(step)
        return steps

    def run(
        self,
        deployer,
        context: ExecutionContext,
        registry: DeploymentRegistry,
        start: Optional[int] = None,
        stop: Optional[int] = None,
    ) -> DeploymentRegistry:
        steps = self.pending(registry, start=start, stop=stop, is_deployed=deployer.is_deployed)
        if not steps:
            print("(i) All deployment steps are complete; nothing to do.")
            return registry

        for step in steps:
            print(f"\nRunning step {step.index}: {step.name}")
            try:
                registry = step.run(deployer, context, registry)
            except Exception:
                print(
                    f"\nStep {step.index} ({step.name}) failed; "
                    f"deployment halted at {self.describe_state(registry)}."
                )
                raise

            if not step.is_complete(registry):
                missing = [name for name in step.provides if name not in registry]
                raise self.IncompleteStep(
                    f"Step {step.index} ({step.name}) did not register {', '.join(missing)}."
                )

            if self.registry_filepath:
                registry.save(self.registry_filepath)
                print(f"(i) Step {step.index} recorded in {self.registry_filepath}.")

        return registry


def new_deployments(
    before: DeploymentRegistry, after: DeploymentRegistry
) -> List[ContractHandle]:
    """Returns the contracts in `after` that are not deployed at the same address in `before`."""
    deployments = list()
    for handle in after:
        previous = before.get(handle.name)
        if previous is None or previous.address != handle.address:
            deployments.append(handle)
    return deployments
