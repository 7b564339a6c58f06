from collections import OrderedDict

from ape.utils import ZERO_ADDRESS


def _abort_unless_confirmed(question: str) -> None:
    answer = input(f"{question} Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting deployment!")
        exit(-1)


def _confirm_deployment(contract_name: str) -> None:
    """Asks the user to confirm the deployment of a single contract."""
    _abort_unless_confirmed(f"Deploy {contract_name}")


def _continue() -> None:
    """Asks the user to continue."""
    _abort_unless_confirmed("Continue")


def _confirm_resolution(
    params: OrderedDict, contract_name: str, kind: str = "Constructor"
) -> None:
    """Shows the parameters a contract is deployed or initialized with and asks to confirm."""
    if len(params) == 0:
        print(f"\n(i) No {kind.lower()} parameters for {contract_name}")
        _confirm_deployment(contract_name)
        return

    print(f"\n{kind} parameters for {contract_name}")
    for name, value in params.items():
        print(f"\t{name}={value}")
    _confirm_deployment(contract_name)
    if ZERO_ADDRESS in params.values():
        _abort_unless_confirmed("Zero Address detected for deployment parameter; Continue?")
