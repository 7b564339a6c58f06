from enum import IntEnum
from pathlib import Path

from web3 import Web3

import deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(deployment.__file__).parent
CONFIGS_DIR = DEPLOYMENT_DIR / "configs"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"

#
# Networks
#

LOCAL_NETWORKS = ["local"]

#
# Contracts
#

BATTLE_WAGER_TOKEN = "BattleWagerToken"
BASIC_PRICE_ORACLE = "BasicPriceOracle"
CHARACTERS = "Characters"

OZ_DEPENDENCY_NAME = "openzeppelin"
OZ_DEPENDENCY_VERSION = "5.0.0"
PROXY_NAME = "TransparentUpgradeableProxy"
PROXY_INITIALIZER = "initialize"

#
# Token setup for local dev
#

INITIAL_BALANCE = Web3.to_wei(1, "kether")  # 1000 tokens

#
# Deployment states, in the order they are reached
#


class DeploymentState(IntEnum):
    NOT_STARTED = 0
    TOKEN_DEPLOYED = 1
    ORACLE_DEPLOYED = 2
    CHARACTERS_DEPLOYED = 3
