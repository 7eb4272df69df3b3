"""Azure provisioning primitives."""

from azvm.provision.azure.disks import create_empty_disk
from azvm.provision.azure.instance import add_tags
from azvm.provision.azure.instance import attach_data_disk
from azvm.provision.azure.instance import create_vm
from azvm.provision.azure.instance import delete_vm
from azvm.provision.azure.instance import get_vm
from azvm.provision.azure.instance import list_vms
from azvm.provision.azure.network import create_network_interface
from azvm.provision.azure.network import create_virtual_network
from azvm.provision.azure.resource_group import create_resource_group
from azvm.provision.azure.resource_group import delete_resource_group
