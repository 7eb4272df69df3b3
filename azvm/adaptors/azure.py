"""Azure SDK adaptor"""

# pylint: disable=import-outside-toplevel
import functools
import logging
import os
from typing import Any, Dict, Optional

from azvm import azvm_config
from azvm import azvm_logging
from azvm import exceptions as azvm_exceptions
from azvm.adaptors import common

azure = common.LazyImport(
    'azure',
    import_error_message=('Failed to import dependencies for Azure. '
                          'Try pip install azvm'),
    set_loggers=lambda: logging.getLogger('azure.identity').setLevel(logging.
                                                                     ERROR))

Client = Any
logger = azvm_logging.init_logger(__name__)

_LAZY_MODULES = (azure,)

# Each credential field can be named either way; the AZURE_* names are the
# ones azure-identity's EnvironmentCredential reads.
_CREDENTIAL_ENV_VARS = {
    'client_id': ('AZURE_CLIENT_ID', 'CLIENT_ID'),
    'client_secret': ('AZURE_CLIENT_SECRET', 'CLIENT_SECRET'),
    'tenant_id': ('AZURE_TENANT_ID', 'TENANT_ID'),
}
_SUBSCRIPTION_ENV_VARS = ('AZURE_SUBSCRIPTION_ID', 'SUBSCRIPTION_ID')


def _first_env(names) -> Optional[str]:
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return None


def get_service_principal_credentials() -> Optional[Dict[str, str]]:
    """Reads service principal credentials from the environment.

    Returns:
        A dict with client_id, client_secret and tenant_id, or None if none
        of them is set.

    Raises:
        AzureCredentialsError: if only some of the three are set.
    """
    credentials = {
        key: _first_env(names) for key, names in _CREDENTIAL_ENV_VARS.items()
    }
    if not any(credentials.values()):
        return None
    missing = [
        '/'.join(_CREDENTIAL_ENV_VARS[key])
        for key, value in credentials.items()
        if not value
    ]
    if missing:
        raise azvm_exceptions.AzureCredentialsError(
            'Incomplete service principal credentials; missing '
            f'{", ".join(missing)}.')
    return credentials


def get_subscription_id() -> str:
    """Get the subscription id from config or the environment."""
    subscription_id = azvm_config.get_nested(('azure', 'subscription_id'),
                                             None)
    if subscription_id is None:
        subscription_id = _first_env(_SUBSCRIPTION_ENV_VARS)
    if not subscription_id:
        raise azvm_exceptions.AzureCredentialsError(
            'No Azure subscription id found. Set azure.subscription_id in the '
            f'azvm config or one of {", ".join(_SUBSCRIPTION_ENV_VARS)}.')
    return subscription_id


@common.load_lazy_modules(modules=_LAZY_MODULES)
def get_credential():
    """Returns a service principal credential, or the default chain."""
    from azure import identity
    credentials = get_service_principal_credentials()
    if credentials is None:
        logger.debug('No service principal in the environment; using '
                     'DefaultAzureCredential.')
        return identity.DefaultAzureCredential()
    logger.debug('Using service principal credential for client '
                 f'{credentials["client_id"]}.')
    return identity.ClientSecretCredential(
        tenant_id=credentials['tenant_id'],
        client_id=credentials['client_id'],
        client_secret=credentials['client_secret'])


@common.load_lazy_modules(modules=_LAZY_MODULES)
def exceptions():
    """Azure exceptions."""
    from azure.core import exceptions as azure_exceptions
    return azure_exceptions


@functools.lru_cache()
@common.load_lazy_modules(modules=_LAZY_MODULES)
def azure_mgmt_models(name: str):
    if name == 'compute':
        from azure.mgmt.compute import models
        return models
    elif name == 'network':
        from azure.mgmt.network import models
        return models
    raise ValueError(f'No models for {name!r}.')


# We should keep the order of the decorators having 'lru_cache' followed
# by 'load_lazy_modules' as we need to make sure a caller can call
# 'get_client.cache_clear', which is a function provided by 'lru_cache'
@functools.lru_cache()
@common.load_lazy_modules(modules=_LAZY_MODULES)
def get_client(name: str, subscription_id: str) -> Client:
    """Creates and returns an Azure management client.

    Args:
        name: One of 'compute', 'network' or 'resource'.
        subscription_id: The Azure subscription ID.

    Raises:
        ValueError: If an unsupported client type is specified.
    """
    credential = get_credential()
    if name == 'compute':
        from azure.mgmt import compute
        return compute.ComputeManagementClient(credential, subscription_id)
    elif name == 'network':
        from azure.mgmt import network
        return network.NetworkManagementClient(credential, subscription_id)
    elif name == 'resource':
        from azure.mgmt.resource import resources
        return resources.ResourceManagementClient(credential, subscription_id)
    raise ValueError(f'Client not supported: "{name}"')
