import typing
from collections import OrderedDict
from pathlib import Path
from typing import Any, List

from ape import networks
from ape.api import AccountAPI, ReceiptAPI
from ape.cli.choices import select_account
from ape.contracts.base import ContractContainer, ContractInstance, ContractTransactionHandler
from eth_utils import to_checksum_address
from ethpm_types import MethodABI
from web3.auto import w3

from deployment.confirm import _confirm_resolution, _continue
from deployment.constants import PROXY_INITIALIZER, PROXY_NAME
from deployment.registry import ContractHandle
from deployment.utils import (
    _load_yaml,
    check_plugins,
    get_contract_container,
    get_oz_dependency,
    validate_config,
    verify_contracts,
)


def _validate_method_args(
    method_abis: List[MethodABI], args: typing.Sequence[Any]
) -> typing.Dict[str, Any]:
    """Validates the transaction arguments against the function ABI."""
    if len(method_abis) == 0:
        raise ValueError("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi.inputs):
            if not w3.is_encodable(abi_input.type, arg):
                break
            named_args[abi_input.name] = arg
        else:
            return named_args
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


def _get_abi(contract_instance: ContractInstance) -> List[dict]:
    """Returns the ABI of a contract instance."""
    contract_abi = list()
    for entry in contract_instance.contract_type.abi:
        contract_abi.append(entry.model_dump(mode="json", by_alias=True))
    return contract_abi


def _named_initializer_args(
    container: ContractContainer, init_args: typing.Sequence[Any]
) -> OrderedDict:
    method_abis = [abi for abi in container.contract_type.methods if abi.name == PROXY_INITIALIZER]
    if not method_abis:
        raise ValueError(
            f"{container.contract_type.name} has no '{PROXY_INITIALIZER}' method "
            f"to initialize a proxy with."
        )
    return OrderedDict(_validate_method_args(method_abis=method_abis, args=init_args))


class Transactor:
    """
    Represents an ape account plus validated/annotated transaction execution.
    """

    def __init__(self, account: typing.Optional[AccountAPI] = None, autosign: bool = False):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        self._account.set_autosign(autosign)

    def get_account(self) -> AccountAPI:
        """Returns the transactor account."""
        return self._account

    def transact(self, method: ContractTransactionHandler, *args) -> ReceiptAPI:
        named_args = _validate_method_args(method_abis=method.abis, args=args)
        base_message = (
            f"\nTransacting {method.contract.contract_type.name}"
            f"[{method.contract.address[:10]}].{method}"
        )
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self._autosign:
            _continue()

        return method(*args, sender=self._account)


class Deployer(Transactor):
    """
    Represents an ape account plus the deployment config of a network,
    and deploys contracts (optionally behind upgradeable proxies) on its behalf.
    """

    class NotDeployed(AssertionError):
        """Raised when there is no contract code at a registered address"""

    def __init__(
        self,
        config: typing.Dict,
        path: Path,
        verify: bool,
        account: typing.Optional[AccountAPI] = None,
        autosign: bool = False,
    ):
        super().__init__(account, autosign)

        check_plugins()
        self.path = path
        self.config = config
        self.registry_filepath = validate_config(config=self.config)
        self.verify = verify
        self._print_deployment_info()

        if not self._autosign:
            # Confirms the start of the deployment.
            _continue()

    @classmethod
    def from_yaml(cls, filepath: Path, *args, **kwargs) -> "Deployer":
        config = _load_yaml(filepath)
        return cls(config=config, path=filepath, *args, **kwargs)

    def _get_kwargs(self) -> typing.Dict[str, Any]:
        """Returns the deployment kwargs."""
        return {"publish": self.verify}

    def _deploy_contract(
        self, container: ContractContainer, params: OrderedDict
    ) -> ContractInstance:
        contract_name = container.contract_type.name
        if not self._autosign:
            _confirm_resolution(params, contract_name)
        return self.get_account().deploy(container, *params.values(), **self._get_kwargs())

    def _handle(
        self,
        name: str,
        instance: ContractInstance,
        deployment: ContractInstance,
        implementation: typing.Optional[ContractInstance] = None,
        init_args: typing.Sequence[Any] = (),
    ) -> ContractHandle:
        receipt = deployment.receipt
        return ContractHandle(
            name=name,
            address=to_checksum_address(instance.address),
            abi=_get_abi(instance),
            tx_hash=receipt.txn_hash,
            block_number=receipt.block_number,
            deployer=receipt.transaction.sender,
            implementation=(
                to_checksum_address(implementation.address) if implementation else None
            ),
            init_args=tuple(init_args),
            instance=instance,
        )

    def deploy(self, contract_name: str, *args) -> ContractHandle:
        """Deploys a contract with the given constructor arguments."""
        container = get_contract_container(contract_name)
        abi_inputs = container.constructor.abi.inputs
        if len(abi_inputs) != len(args):
            raise ValueError(
                f"Constructor parameters length mismatch - "
                f"{contract_name} ABI requires {len(abi_inputs)}, Got {len(args)}."
            )
        params = OrderedDict(
            (abi_input.name or f"arg{position}", arg)
            for position, (abi_input, arg) in enumerate(zip(abi_inputs, args))
        )
        instance = self._deploy_contract(container, params)
        return self._handle(contract_name, instance=instance, deployment=instance)

    def deploy_proxy(self, contract_name: str, init_args: typing.Sequence[Any]) -> ContractHandle:
        """
        Deploys a contract behind a transparent upgradeable proxy.

        The implementation is deployed first, then the proxy, which is
        initialized in its constructor by calling `initialize(*init_args)` on the
        implementation. The returned handle wraps the proxy address as the
        implementation's contract type.
        """
        container = get_contract_container(contract_name)
        named_init_args = _named_initializer_args(container, init_args)

        implementation = self._deploy_contract(container, OrderedDict())
        if not self._autosign:
            _confirm_resolution(named_init_args, contract_name, kind="Initializer")
        data = getattr(implementation, PROXY_INITIALIZER).encode_input(*init_args)

        proxy_container = getattr(get_oz_dependency(), PROXY_NAME)
        print(f"\nDeploying {PROXY_NAME} contract to proxy {contract_name}.")
        proxy_params = OrderedDict(
            {
                "_logic": implementation.address,
                "initialOwner": self.get_account().address,
                "_data": data,
            }
        )
        proxy = self._deploy_contract(proxy_container, proxy_params)
        print(
            f"\nWrapping {contract_name} into {PROXY_NAME} "
            f"(as type {container.contract_type.name}) at {proxy.address}."
        )
        instance = container.at(proxy.address)
        return self._handle(
            contract_name,
            instance=instance,
            deployment=proxy,
            implementation=implementation,
            init_args=init_args,
        )

    def is_deployed(self, handle: ContractHandle) -> bool:
        return bool(networks.provider.get_code(handle.address))

    def confirm(self, handle: ContractHandle) -> ContractHandle:
        """Checks that contract code exists at the address of a handle."""
        if not self.is_deployed(handle):
            raise self.NotDeployed(f"No contract code for {handle.name} at {handle.address}.")
        print(f"(i) {handle.name} deployed at {handle.address}.")
        return handle

    def finalize(self, deployments: List[ContractHandle]) -> None:
        """Publishes the contracts deployed in this run to the block explorer."""
        if not self.verify:
            return
        verify_contracts(contracts=[h.instance for h in deployments if h.instance is not None])

    def _print_deployment_info(self):
        print(
            f"Account: {self.get_account().address}",
            f"Config: {self.path}",
            f"Registry: {self.registry_filepath}",
            f"Verify: {self.verify}",
            f"Ecosystem: {networks.provider.network.ecosystem.name}",
            f"Network: {networks.provider.network.name}",
            f"Chain ID: {networks.provider.network.chain_id}",
            f"Gas Price: {networks.provider.gas_price}",
            sep="\n",
        )
