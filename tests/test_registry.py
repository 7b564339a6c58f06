import json

import pytest
from conftest import CHAIN_ID, make_address

from deployment.registry import (
    ContractHandle,
    DeploymentRegistry,
    RegistryEntry,
    read_registry,
    write_registry,
)

TOKEN = ContractHandle(
    name="BattleWagerToken",
    address=make_address(10),
    abi=[{"type": "function", "name": "transferFrom"}, {"type": "constructor"}],
    tx_hash="0x" + "11" * 32,
    block_number=5,
    deployer=make_address(1),
)

CHARACTERS = ContractHandle(
    name="Characters",
    address=make_address(12),
    tx_hash="0x" + "22" * 32,
    block_number=9,
    deployer=make_address(1),
    implementation=make_address(11),
    init_args=(make_address(10), make_address(13)),
    instance=object(),
)


def test_register_returns_new_registry(registry):
    updated = registry.register(TOKEN)

    assert len(registry) == 0
    assert TOKEN.name not in registry
    assert updated.names == [TOKEN.name]
    assert updated.get(TOKEN.name) == TOKEN
    assert updated.chain_id == registry.chain_id


def test_register_replaces_existing_entry(registry):
    redeployed = TOKEN._replace(address=make_address(20))
    updated = registry.register(TOKEN).register(CHARACTERS).register(redeployed)

    assert len(updated) == 2
    assert updated.require(TOKEN.name).address == make_address(20)
    assert updated.names == [CHARACTERS.name, TOKEN.name]


def test_require_missing(registry):
    assert registry.get(TOKEN.name) is None
    with pytest.raises(DeploymentRegistry.Missing) as error:
        registry.require(TOKEN.name)
    assert isinstance(error.value, AssertionError)
    assert str(error.value) == "Expected BattleWagerToken to be set to a contract"


def test_load_missing_file(registry_filepath):
    registry = DeploymentRegistry.load(registry_filepath, chain_id=CHAIN_ID)
    assert len(registry) == 0
    assert registry.chain_id == CHAIN_ID


def test_save_and_load(registry, registry_filepath):
    registry.register(TOKEN).register(CHARACTERS).save(registry_filepath)

    with open(registry_filepath) as file:
        data = json.load(file)
    entries = data[str(CHAIN_ID)]
    assert sorted(entries) == ["BattleWagerToken", "Characters"]
    assert "implementation" not in entries["BattleWagerToken"]
    assert entries["Characters"]["implementation"] == CHARACTERS.implementation
    assert entries["Characters"]["init_args"] == list(CHARACTERS.init_args)
    # abi entries are sorted by type then name
    assert [e["type"] for e in entries["BattleWagerToken"]["abi"]] == ["constructor", "function"]

    loaded = DeploymentRegistry.load(registry_filepath, chain_id=CHAIN_ID)
    characters = loaded.require("Characters")
    assert characters.instance is None
    assert characters.is_proxy
    assert characters.init_args == CHARACTERS.init_args
    assert characters.address == CHARACTERS.address
    assert not loaded.require("BattleWagerToken").is_proxy


def test_save_keeps_other_chains(registry_filepath):
    DeploymentRegistry(chain_id=1).register(TOKEN).save(registry_filepath)
    DeploymentRegistry(chain_id=CHAIN_ID).register(CHARACTERS).save(registry_filepath)

    entries = read_registry(registry_filepath)
    assert sorted((e.chain_id, e.name) for e in entries) == [
        (1, "BattleWagerToken"),
        (CHAIN_ID, "Characters"),
    ]
    assert DeploymentRegistry.load(registry_filepath, chain_id=1).names == ["BattleWagerToken"]


def test_save_replaces_chain_entries(registry, registry_filepath):
    registry.register(TOKEN).register(CHARACTERS).save(registry_filepath)
    registry.register(TOKEN).save(registry_filepath)

    loaded = DeploymentRegistry.load(registry_filepath, chain_id=CHAIN_ID)
    assert loaded.names == ["BattleWagerToken"]


def test_write_registry_rejects_other_chain(registry_filepath):
    entry = TOKEN.to_entry(chain_id=1)
    assert isinstance(entry, RegistryEntry)
    with pytest.raises(ValueError, match="expected 1337"):
        write_registry(entries=[entry], filepath=registry_filepath, chain_id=CHAIN_ID)
    assert not registry_filepath.exists()
