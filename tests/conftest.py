import pytest

from azvm import azvm_logging

# Initialize logger at the top level
logger = azvm_logging.init_logger(__name__)

# Import the shared fixtures here, so that every test module can use them.
from common_test_fixtures import fake_clients
from common_test_fixtures import fake_cloud
from common_test_fixtures import fixed_names
from common_test_fixtures import isolated_config

# Credentials of the developer running the tests must never reach Azure.
_AZURE_ENV_VARS = (
    'AZURE_CLIENT_ID',
    'AZURE_CLIENT_SECRET',
    'AZURE_TENANT_ID',
    'AZURE_SUBSCRIPTION_ID',
    'CLIENT_ID',
    'CLIENT_SECRET',
    'TENANT_ID',
    'SUBSCRIPTION_ID',
    'AZVM_ADMIN_PASSWORD',
)


@pytest.fixture(autouse=True)
def clean_azure_env(monkeypatch: pytest.MonkeyPatch, isolated_config):
    for name in _AZURE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
