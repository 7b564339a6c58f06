from typing import List, NamedTuple

from ape import accounts, networks
from ape.api import AccountAPI
from eth_typing import ChecksumAddress

from deployment.networks import is_local_network


class ExecutionContext(NamedTuple):
    """The network a deployment runs against and the accounts available to it."""

    network: str
    chain_id: int
    accounts: List[ChecksumAddress]

    @classmethod
    def from_provider(cls, account: AccountAPI) -> "ExecutionContext":
        network = networks.provider.network
        if is_local_network(network.name):
            available = [test_account.address for test_account in accounts.test_accounts]
        else:
            available = [account.address]
        return cls(network=network.name, chain_id=network.chain_id, accounts=available)
