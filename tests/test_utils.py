from pathlib import Path

import click
import pytest

from deployment.constants import ARTIFACTS_DIR, CONFIGS_DIR
from deployment.types import MinInt
from deployment.utils import (
    _load_yaml,
    config_filepath_from_network,
    get_artifact_filepath,
    validate_config,
)


def _config(chain_id=1337, filename="registry.json", **artifacts):
    return {
        "deployment": {"name": "test", "chain_id": chain_id},
        "artifacts": {"filename": filename, **artifacts},
    }


def test_network_configs_are_valid():
    for filepath in CONFIGS_DIR.glob("*.yml"):
        config = _load_yaml(filepath)
        chain_id = config["deployment"]["chain_id"]
        registry_filepath = validate_config(config, chain_id=chain_id, live=True)
        assert registry_filepath.suffix == ".json"


def test_config_filepath_from_network():
    assert config_filepath_from_network("local") == CONFIGS_DIR / "local.yml"
    with pytest.raises(ValueError, match="No deployment config found"):
        config_filepath_from_network("atlantis")


def test_artifact_filepath():
    assert get_artifact_filepath(_config()) == ARTIFACTS_DIR / "registry.json"
    custom_dir_config = _config(dir="/tmp/artifacts")
    assert get_artifact_filepath(custom_dir_config) == Path("/tmp/artifacts/registry.json")
    with pytest.raises(ValueError, match="artifact filename"):
        get_artifact_filepath(_config(filename=None))


def test_validate_config_missing_fields():
    with pytest.raises(ValueError, match="deployment is not set"):
        validate_config({"artifacts": {"filename": "x.json"}}, chain_id=1337, live=False)

    with pytest.raises(ValueError, match="chain_id is not set"):
        validate_config(_config(chain_id=None), chain_id=1337, live=False)

    with pytest.raises(ValueError, match="artifact filename"):
        validate_config(_config(filename=""), chain_id=1337, live=False)


def test_validate_config_chain_mismatch():
    config = _config(chain_id=11155111)

    # local networks may use any chain id
    assert validate_config(config, chain_id=1337, live=False) == ARTIFACTS_DIR / "registry.json"

    with pytest.raises(ValueError, match="does not match"):
        validate_config(config, chain_id=1, live=True)


def test_min_int():
    min_int = MinInt(1)
    assert min_int.convert("2", None, None) == 2
    assert min_int.convert(1, None, None) == 1
    with pytest.raises(click.BadParameter, match="minimum allowed value of 1"):
        min_int.convert("0", None, None)
    with pytest.raises(click.BadParameter, match="not a valid integer"):
        min_int.convert("two", None, None)
