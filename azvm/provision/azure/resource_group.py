"""Resource group lifecycle."""
from typing import Any, Dict, Optional

from azvm import azvm_logging
from azvm import exceptions
from azvm.adaptors import azure
from azvm.provision.azure import sdk
from azvm.utils import common_utils

logger = azvm_logging.init_logger(__name__)

_RESOURCE_GROUP_NOT_FOUND_ERROR_MESSAGE = 'ResourceGroupNotFound'


def create_resource_group(resource_client: Any,
                          resource_group: str,
                          location: str,
                          tags: Optional[Dict[str, str]] = None) -> Any:
    """Creates (or updates) a resource group and returns its handle.

    Raises:
        NoResourceGroupCreatedError: if Azure rejects the credentials, in
            which case nothing was created.
    """
    params: Dict[str, Any] = {'location': location}
    if tags:
        params['tags'] = tags
    logger.info(f'Creating resource group {resource_group} in {location}...')
    try:
        handle = sdk.invoke(resource_client.resource_groups,
                            'create_or_update',
                            resource_group_name=resource_group,
                            parameters=params)
    except azure.exceptions().ClientAuthenticationError as e:
        message = (
            'Failed to authenticate with Azure. Please check your Azure '
            f'credentials. Error: {common_utils.format_exception(e)}').replace(
                '\n', ' ')
        logger.error(message)
        raise exceptions.NoResourceGroupCreatedError(message) from e
    logger.info(f'Created a resource group with name: {handle.name}')
    return handle


def delete_resource_group(resource_client: Any, resource_group: str) -> bool:
    """Deletes a resource group and everything in it.

    Returns:
        False if the resource group did not exist, True otherwise.
    """
    logger.info(f'Deleting resource group: {resource_group}')
    try:
        sdk.invoke(resource_client.resource_groups,
                   'delete',
                   resource_group_name=resource_group)
    except azure.exceptions().ResourceNotFoundError as e:
        if _RESOURCE_GROUP_NOT_FOUND_ERROR_MESSAGE in str(e):
            logger.warning(f'Resource group {resource_group} not found. Skip '
                           'deleting it.')
            return False
        raise
    logger.info(f'Deleted resource group: {resource_group}')
    return True
