import json
from collections import OrderedDict, defaultdict
from pathlib import Path
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address
from eth_typing import ABI

from deployment.utils import _load_json

ChainId = int
ContractName = str


STANDARD_REGISTRY_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}


class RegistryEntry(NamedTuple):
    """Represents a single entry in a contract registry file."""

    chain_id: ChainId
    name: ContractName
    address: ChecksumAddress
    abi: ABI
    tx_hash: str
    block_number: int
    deployer: str
    implementation: Optional[ChecksumAddress] = None
    init_args: Optional[List[Any]] = None


class ContractHandle(NamedTuple):
    """
    A reference to a contract deployed on the current network.

    For proxied contracts, `address` is the proxy address, `implementation` the address
    of the logic contract and `init_args` the arguments the proxy was initialized with.
    `instance` is the live contract object; it only exists for contracts
    deployed (or attached) during the current run and is never persisted.
    """

    name: ContractName
    address: ChecksumAddress
    abi: ABI = ()
    tx_hash: str = ""
    block_number: int = 0
    deployer: str = ""
    implementation: Optional[ChecksumAddress] = None
    init_args: Tuple[Any, ...] = ()
    instance: Any = None

    @property
    def is_proxy(self) -> bool:
        return self.implementation is not None

    def to_entry(self, chain_id: ChainId) -> RegistryEntry:
        return RegistryEntry(
            chain_id=chain_id,
            name=self.name,
            address=to_checksum_address(self.address),
            abi=list(self.abi),
            tx_hash=self.tx_hash,
            block_number=self.block_number,
            deployer=self.deployer,
            implementation=self.implementation,
            init_args=list(self.init_args) if self.is_proxy else None,
        )

    @classmethod
    def from_entry(cls, entry: RegistryEntry) -> "ContractHandle":
        return cls(
            name=entry.name,
            address=entry.address,
            abi=entry.abi,
            tx_hash=entry.tx_hash,
            block_number=entry.block_number,
            deployer=entry.deployer,
            implementation=entry.implementation,
            init_args=tuple(entry.init_args or ()),
        )


class DeploymentRegistry:
    """
    The contracts deployed so far on a single chain, keyed by contract name.

    A registry is never mutated: `register` returns a new registry,
    so each deployment step receives the registry produced by the step before it.
    """

    class Missing(AssertionError):
        """Raised when a required contract has not been deployed"""

    def __init__(self, chain_id: ChainId, handles: Optional[List[ContractHandle]] = None):
        self.chain_id = chain_id
        self._handles = OrderedDict()
        for handle in handles or list():
            self._handles[handle.name] = handle

    def __contains__(self, name: ContractName) -> bool:
        return name in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[ContractHandle]:
        return iter(self._handles.values())

    def __repr__(self) -> str:
        return f"DeploymentRegistry(chain_id={self.chain_id}, names={self.names})"

    @property
    def names(self) -> List[ContractName]:
        return list(self._handles)

    def get(self, name: ContractName) -> Optional[ContractHandle]:
        return self._handles.get(name)

    def require(self, name: ContractName) -> ContractHandle:
        """Returns the handle of a deployed contract; fails loudly if it was never deployed."""
        handle = self._handles.get(name)
        if handle is None:
            raise self.Missing(f"Expected {name} to be set to a contract")
        return handle

    def register(self, handle: ContractHandle) -> "DeploymentRegistry":
        """Returns a new registry that includes the handle."""
        existing = self._handles.get(handle.name)
        if existing is not None:
            print(f"(i) Replacing {handle.name} at {existing.address} with {handle.address}.")
        handles = [h for h in self._handles.values() if h.name != handle.name]
        handles.append(handle)
        return DeploymentRegistry(chain_id=self.chain_id, handles=handles)

    @classmethod
    def load(cls, filepath: Path, chain_id: ChainId) -> "DeploymentRegistry":
        """Loads the registered contracts for a chain; a missing file is an empty registry."""
        if not filepath.exists():
            return cls(chain_id=chain_id)
        handles = list()
        for entry in read_registry(filepath=filepath):
            if entry.chain_id != chain_id:
                continue
            handles.append(ContractHandle.from_entry(entry))
        return cls(chain_id=chain_id, handles=handles)

    def save(self, filepath: Path) -> Path:
        entries = [handle.to_entry(self.chain_id) for handle in self]
        return write_registry(entries=entries, filepath=filepath, chain_id=self.chain_id)


def read_registry(filepath: Path) -> List[RegistryEntry]:
    data = _load_json(filepath)
    registry_entries = list()
    for chain_id, entries in data.items():
        for contract_name, artifacts in entries.items():
            registry_entry = RegistryEntry(
                chain_id=int(chain_id),
                name=contract_name,
                address=artifacts["address"],
                abi=artifacts["abi"],
                tx_hash=artifacts["tx_hash"],
                block_number=artifacts["block_number"],
                deployer=artifacts["deployer"],
                implementation=artifacts.get("implementation"),
                init_args=artifacts.get("init_args"),
            )
            registry_entries.append(registry_entry)
    return registry_entries


def _entry_data(entry: RegistryEntry) -> Dict[str, Any]:
    entry_abi = list(entry.abi)
    entry_abi.sort(key=lambda d: (d["type"], d.get("name", "")))

    data = {
        "address": entry.address,
        "abi": entry_abi,
        "tx_hash": entry.tx_hash,
        "block_number": int(entry.block_number),
        "deployer": entry.deployer,
    }
    if entry.implementation is not None:
        data["implementation"] = entry.implementation
        data["init_args"] = list(entry.init_args or [])
    return data


def write_registry(entries: List[RegistryEntry], filepath: Path, chain_id: ChainId) -> Path:
    """
    Writes the entries of a single chain to a registry file.
    Entries already recorded for other chains are kept as they are.
    """
    data = defaultdict(dict)
    if filepath.exists():
        data.update(_load_json(filepath))

    chain_data = dict()
    for entry in sorted(entries, key=lambda e: e.name):
        if entry.chain_id != chain_id:
            raise ValueError(
                f"Registry entry {entry.name} is for chain {entry.chain_id}, expected {chain_id}."
            )
        chain_data[entry.name] = _entry_data(entry)
    data[str(chain_id)] = chain_data

    # Create the parent directory if it does not exist
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w") as file:
        json.dump(dict(sorted(data.items())), file, **STANDARD_REGISTRY_JSON_FORMAT)

    return filepath
