"""In-memory stand-ins for the Azure management clients.

FakeAzureCloud keeps the remote state (resource groups and the resources in
them). The fake clients expose the same operation groups and method names as
the real SDK clients: long-running operations are `begin_*` methods returning
a poller, short ones are plain methods. Every call is recorded on
`cloud.calls` as (operation group, operation, resource name).
"""
import collections
import copy
import types
from typing import Any, Dict, List, Optional, Tuple

from azure.core import exceptions as azure_exceptions
import pytest

from azvm import workflow

_SUBSCRIPTION_ID = 'sub-0000'


class FakePoller:
    """A poller whose operation already finished."""

    def __init__(self, value: Any) -> None:
        self._value = value

    def done(self) -> bool:
        return True

    def result(self, timeout: Optional[float] = None) -> Any:
        del timeout  # Unused.
        return self._value


class FakeAzureCloud:
    """Remote state shared by the fake resource, network and compute clients.
    """

    def __init__(self) -> None:
        self.resource_groups: Dict[str, Any] = {}
        # resource group -> operation group -> name -> model
        self.resources: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.calls: List[Tuple[str, str, Optional[str]]] = []
        # (operation group, operation) -> [(resource name or None, error)]
        self._failures: Dict[Tuple[str, str], List[Any]] = (
            collections.defaultdict(list))

    def fail(self,
             group: str,
             operation: str,
             error: BaseException,
             name: Optional[str] = None) -> None:
        """Makes 'group.operation' raise 'error', only for 'name' if given."""
        self._failures[(group, operation)].append((name, error))

    def count(self, group: str, operation: str,
              name: Optional[str] = None) -> int:
        return sum(1 for call in self.calls
                   if call[:2] == (group, operation) and
                   (name is None or call[2] == name))

    def record(self, group: str, operation: str,
               name: Optional[str]) -> None:
        self.calls.append((group, operation, name))
        for fail_name, error in self._failures.get((group, operation), []):
            if fail_name is None or fail_name == name:
                raise error

    def resource_id(self, resource_group: str, provider: str, kind: str,
                    name: str) -> str:
        return (f'/subscriptions/{_SUBSCRIPTION_ID}/resourceGroups/'
                f'{resource_group}/providers/{provider}/{kind}/{name}')

    def group(self, resource_group: str, group: str) -> Dict[str, Any]:
        if resource_group not in self.resource_groups:
            raise azure_exceptions.ResourceNotFoundError(
                message=f'(ResourceGroupNotFound) Resource group '
                f'\'{resource_group}\' could not be found.')
        return self.resources[resource_group].setdefault(group, {})


class _FakeOperations:
    group_name = ''

    def __init__(self, cloud: FakeAzureCloud) -> None:
        self._cloud = cloud

    def _store(self, resource_group: str, name: str, model: Any,
               provider: str, kind: str) -> Any:
        model = copy.deepcopy(model)
        model.name = name
        model.id = self._cloud.resource_id(resource_group, provider, kind,
                                           name)
        self._cloud.group(resource_group, self.group_name)[name] = model
        return copy.deepcopy(model)


class FakeResourceGroupsOperations(_FakeOperations):
    group_name = 'resource_groups'

    def create_or_update(self, resource_group_name: str,
                         parameters: Dict[str, Any]) -> Any:
        self._cloud.record(self.group_name, 'create_or_update',
                           resource_group_name)
        handle = types.SimpleNamespace(
            id=f'/subscriptions/{_SUBSCRIPTION_ID}/resourceGroups/'
            f'{resource_group_name}',
            name=resource_group_name,
            location=parameters['location'],
            tags=parameters.get('tags'))
        self._cloud.resource_groups[resource_group_name] = handle
        self._cloud.resources.setdefault(resource_group_name, {})
        return copy.deepcopy(handle)

    def begin_delete(self, resource_group_name: str, **kwargs) -> FakePoller:
        del kwargs  # Unused.
        self._cloud.record(self.group_name, 'delete', resource_group_name)
        self._cloud.group(resource_group_name, self.group_name)
        del self._cloud.resource_groups[resource_group_name]
        del self._cloud.resources[resource_group_name]
        return FakePoller(None)


class FakeVirtualNetworksOperations(_FakeOperations):
    group_name = 'virtual_networks'

    def begin_create_or_update(self, resource_group_name: str,
                               virtual_network_name: str,
                               parameters: Any) -> FakePoller:
        self._cloud.record(self.group_name, 'create_or_update',
                           virtual_network_name)
        vnet = copy.deepcopy(parameters)
        vnet_id = self._cloud.resource_id(resource_group_name,
                                          'Microsoft.Network',
                                          'virtualNetworks',
                                          virtual_network_name)
        for subnet in vnet.subnets or []:
            subnet.id = f'{vnet_id}/subnets/{subnet.name}'
        return FakePoller(
            self._store(resource_group_name, virtual_network_name, vnet,
                        'Microsoft.Network', 'virtualNetworks'))


class FakeNetworkInterfacesOperations(_FakeOperations):
    group_name = 'network_interfaces'

    def begin_create_or_update(self, resource_group_name: str,
                               network_interface_name: str,
                               parameters: Any) -> FakePoller:
        self._cloud.record(self.group_name, 'create_or_update',
                           network_interface_name)
        return FakePoller(
            self._store(resource_group_name, network_interface_name,
                        parameters, 'Microsoft.Network', 'networkInterfaces'))


class FakeDisksOperations(_FakeOperations):
    group_name = 'disks'

    def begin_create_or_update(self, resource_group_name: str, disk_name: str,
                               disk: Any) -> FakePoller:
        self._cloud.record(self.group_name, 'create_or_update', disk_name)
        return FakePoller(
            self._store(resource_group_name, disk_name, disk,
                        'Microsoft.Compute', 'disks'))


class FakeVirtualMachinesOperations(_FakeOperations):
    group_name = 'virtual_machines'

    def _get_stored(self, resource_group_name: str, vm_name: str) -> Any:
        vms = self._cloud.group(resource_group_name, self.group_name)
        if vm_name not in vms:
            raise azure_exceptions.ResourceNotFoundError(
                message=f'(ResourceNotFound) The Resource '
                f'\'Microsoft.Compute/virtualMachines/{vm_name}\' was not '
                'found.')
        return vms[vm_name]

    def begin_create_or_update(self, resource_group_name: str, vm_name: str,
                               parameters: Any) -> FakePoller:
        self._cloud.record(self.group_name, 'create_or_update', vm_name)
        return FakePoller(
            self._store(resource_group_name, vm_name, parameters,
                        'Microsoft.Compute', 'virtualMachines'))

    def get(self, resource_group_name: str, vm_name: str) -> Any:
        self._cloud.record(self.group_name, 'get', vm_name)
        return copy.deepcopy(self._get_stored(resource_group_name, vm_name))

    def begin_update(self, resource_group_name: str, vm_name: str,
                     parameters: Any) -> FakePoller:
        self._cloud.record(self.group_name, 'update', vm_name)
        vm = self._get_stored(resource_group_name, vm_name)
        if parameters.tags is not None:
            vm.tags = dict(parameters.tags)
        return FakePoller(copy.deepcopy(vm))

    def list(self, resource_group_name: str):
        self._cloud.record(self.group_name, 'list', None)
        vms = self._cloud.group(resource_group_name, self.group_name)
        return iter([copy.deepcopy(vm) for vm in vms.values()])

    def begin_delete(self, resource_group_name: str,
                     vm_name: str) -> FakePoller:
        self._cloud.record(self.group_name, 'delete', vm_name)
        self._get_stored(resource_group_name, vm_name)
        del self._cloud.group(resource_group_name, self.group_name)[vm_name]
        return FakePoller(None)


class FakeResourceClient:

    def __init__(self, cloud: FakeAzureCloud) -> None:
        self.resource_groups = FakeResourceGroupsOperations(cloud)


class FakeNetworkClient:

    def __init__(self, cloud: FakeAzureCloud) -> None:
        self.virtual_networks = FakeVirtualNetworksOperations(cloud)
        self.network_interfaces = FakeNetworkInterfacesOperations(cloud)


class FakeComputeClient:

    def __init__(self, cloud: FakeAzureCloud) -> None:
        self.disks = FakeDisksOperations(cloud)
        self.virtual_machines = FakeVirtualMachinesOperations(cloud)


@pytest.fixture
def fake_cloud() -> FakeAzureCloud:
    return FakeAzureCloud()


@pytest.fixture
def fake_clients(fake_cloud: FakeAzureCloud) -> workflow.AzureClients:
    return workflow.AzureClients(subscription_id=_SUBSCRIPTION_ID,
                                 resource=FakeResourceClient(fake_cloud),
                                 network=FakeNetworkClient(fake_cloud),
                                 compute=FakeComputeClient(fake_cloud))


@pytest.fixture
def fixed_names() -> workflow.WorkflowNames:
    return workflow.WorkflowNames(resource_group='rg1',
                                  primary_vm='wVM',
                                  secondary_vm='lVM',
                                  virtual_network='vnet1',
                                  network_interfaces=('nic1', 'nic2'),
                                  data_disks=('disk1', 'disk2'),
                                  extra_data_disk='disk3')


@pytest.fixture
def isolated_config(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Points AZVM_CONFIG at a missing file, so every key uses its default."""
    from azvm import azvm_config
    missing_path = str(tmp_path / 'missing-config.yaml')
    monkeypatch.setenv(azvm_config.ENV_VAR_AZVM_CONFIG, missing_path)
    azvm_config.reload_config()
    yield
    # Tests may point AZVM_CONFIG at an invalid file; monkeypatch only undoes
    # that after this teardown.
    monkeypatch.setenv(azvm_config.ENV_VAR_AZVM_CONFIG, missing_path)
    azvm_config.reload_config()
