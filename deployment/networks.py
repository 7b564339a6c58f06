from typing import Optional

from ape import networks

from deployment.constants import LOCAL_NETWORKS


def is_local_network(network_name: Optional[str] = None) -> bool:
    """Returns True if the (connected) network is a local development network."""
    if network_name is None:
        network_name = networks.provider.network.name
    return network_name in LOCAL_NETWORKS
