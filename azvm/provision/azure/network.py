"""Virtual network and network interface creation."""
from typing import Any, List, Sequence, Tuple

from azvm import azvm_logging
from azvm.adaptors import azure
from azvm.provision.azure import sdk

logger = azvm_logging.init_logger(__name__)

VNET_ADDRESS_PREFIX = '10.10.0.0/16'
# (name, address prefix) of the subnets created in every virtual network.
DEFAULT_SUBNETS: Tuple[Tuple[str, str], ...] = (
    ('subnet1', '10.10.1.0/24'),
    ('subnet2', '10.10.2.0/24'),
)
_IP_CONFIG_NAME = 'default-config'


def create_virtual_network(
        network_client: Any,
        resource_group: str,
        vnet_name: str,
        location: str,
        address_prefix: str = VNET_ADDRESS_PREFIX,
        subnets: Sequence[Tuple[str, str]] = DEFAULT_SUBNETS) -> Any:
    """Creates a virtual network together with its subnets.

    The subnets of the returned handle carry the ids needed by
    create_network_interface, in the order given by 'subnets'.
    """
    network = azure.azure_mgmt_models('network')
    logger.info(f'Creating virtual network {vnet_name}...')
    subnet_models: List[Any] = [
        network.Subnet(name=name, address_prefix=prefix)
        for name, prefix in subnets
    ]
    vnet = sdk.invoke(network_client.virtual_networks,
                      'create_or_update',
                      resource_group_name=resource_group,
                      virtual_network_name=vnet_name,
                      parameters=network.VirtualNetwork(
                          location=location,
                          address_space=network.AddressSpace(
                              address_prefixes=[address_prefix]),
                          subnets=subnet_models))
    logger.info(f'Created a virtual network: {vnet.name}')
    return vnet


def create_network_interface(network_client: Any, resource_group: str,
                             nic_name: str, location: str,
                             subnet_id: str) -> Any:
    """Creates a network interface with a dynamic private IP in a subnet."""
    network = azure.azure_mgmt_models('network')
    logger.info(f'Creating network interface {nic_name}...')
    ip_config = network.NetworkInterfaceIPConfiguration(
        name=_IP_CONFIG_NAME,
        subnet=network.Subnet(id=subnet_id),
        private_ip_allocation_method=network.IPAllocationMethod.DYNAMIC)
    nic = sdk.invoke(network_client.network_interfaces,
                     'create_or_update',
                     resource_group_name=resource_group,
                     network_interface_name=nic_name,
                     parameters=network.NetworkInterface(
                         location=location, ip_configurations=[ip_config]))
    logger.info(f'Created network interface: {nic.name}')
    return nic
