"""Managed disk creation."""
from typing import Any

from azvm import azvm_logging
from azvm.adaptors import azure
from azvm.provision.azure import sdk

logger = azvm_logging.init_logger(__name__)

DEFAULT_STORAGE_ACCOUNT_TYPE = 'Standard_LRS'


def create_empty_disk(
        compute_client: Any,
        resource_group: str,
        disk_name: str,
        location: str,
        size_gb: int,
        storage_account_type: str = DEFAULT_STORAGE_ACCOUNT_TYPE) -> Any:
    """Creates an empty, unattached managed disk of 'size_gb' GB."""
    if size_gb <= 0:
        raise ValueError(f'Disk size must be positive, got {size_gb}.')
    compute = azure.azure_mgmt_models('compute')
    logger.info(f'Creating empty managed disk {disk_name} ({size_gb} GB)...')
    disk = sdk.invoke(compute_client.disks,
                      'create_or_update',
                      resource_group_name=resource_group,
                      disk_name=disk_name,
                      disk=compute.Disk(
                          location=location,
                          sku=compute.DiskSku(name=storage_account_type),
                          creation_data=compute.CreationData(
                              create_option=compute.DiskCreateOption.EMPTY),
                          disk_size_gb=size_gb))
    logger.info(f'Created managed disk: {disk.name}')
    return disk
