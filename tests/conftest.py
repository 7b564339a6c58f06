import pytest
from eth_utils import to_checksum_address

from deployment.context import ExecutionContext
from deployment.params import Deployer
from deployment.registry import ContractHandle, DeploymentRegistry

CHAIN_ID = 1337


def make_address(n: int) -> str:
    return to_checksum_address(f"0x{n:040x}")


class Reverted(Exception):
    pass


class FakeMethod:
    def __init__(self, contract, name):
        self.contract = contract
        self.name = name

    def __call__(self, *args):
        self.contract.calls.append((self.name, args))


class FakeContract:
    def __init__(self, name, address):
        self.name = name
        self.address = address
        self.calls = list()

    def __getattr__(self, method_name):
        return FakeMethod(self, method_name)


class FakeDeployer:
    """
    Deploys contracts to memory, recording every deployment and transaction.

    `chain` holds the addresses with contract code; deployers sharing it
    act on the same chain, a new one starts from an empty chain.
    """

    def __init__(self, fail_on=(), first_address=0x1000, chain=None):
        self.fail_on = set(fail_on)
        self.chain = chain if chain is not None else set()
        self.deployments = list()
        self.transactions = list()
        self.confirmed = list()
        self._next = first_address

    def _address(self):
        self._next += 1
        address = make_address(self._next)
        self.chain.add(address)
        return address

    def _check(self, contract_name):
        if contract_name in self.fail_on:
            raise Reverted(f"{contract_name} deployment reverted")

    def deploy(self, contract_name, *args):
        self._check(contract_name)
        address = self._address()
        self.deployments.append(("deploy", contract_name, args))
        return ContractHandle(
            name=contract_name,
            address=address,
            tx_hash=f"0x{self._next:064x}",
            block_number=self._next,
            instance=FakeContract(contract_name, address),
        )

    def deploy_proxy(self, contract_name, init_args):
        self._check(contract_name)
        implementation = self._address()
        address = self._address()
        self.deployments.append(("proxy", contract_name, tuple(init_args)))
        return ContractHandle(
            name=contract_name,
            address=address,
            tx_hash=f"0x{self._next:064x}",
            block_number=self._next,
            implementation=implementation,
            init_args=tuple(init_args),
            instance=FakeContract(contract_name, address),
        )

    def transact(self, method, *args):
        self.transactions.append((method.contract.name, method.name, args))
        return method(*args)

    def is_deployed(self, handle):
        return handle.address in self.chain

    def confirm(self, handle):
        if not self.is_deployed(handle):
            raise Deployer.NotDeployed(f"No contract code for {handle.name} at {handle.address}.")
        self.confirmed.append(handle.name)
        return handle

    @property
    def deployed_names(self):
        return [name for _, name, _ in self.deployments]


@pytest.fixture
def accounts():
    return [make_address(n) for n in range(1, 4)]


@pytest.fixture
def context(accounts):
    return ExecutionContext(network="local", chain_id=CHAIN_ID, accounts=accounts)


@pytest.fixture
def deployer():
    return FakeDeployer()


@pytest.fixture
def registry():
    return DeploymentRegistry(chain_id=CHAIN_ID)


@pytest.fixture
def registry_filepath(tmp_path):
    return tmp_path / "artifacts" / "registry.json"
