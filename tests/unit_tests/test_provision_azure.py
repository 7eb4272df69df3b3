"""Tests for the Azure provisioning primitives."""
from unittest import mock

from azure.core import exceptions as azure_exceptions
from common_test_fixtures import FakePoller
import pytest

from azvm import exceptions
from azvm.provision.azure import disks
from azvm.provision.azure import network
from azvm.provision.azure import resource_group
from azvm.provision.azure import sdk


class _PlainOperations:

    def get(self, **kwargs):
        return ('get', kwargs)


class _LongRunningOperations:

    def begin_delete(self, **kwargs):
        return FakePoller(('deleted', kwargs))


def test_invoke_plain_operation():
    assert sdk.invoke(_PlainOperations(), 'get', vm_name='a') == ('get', {
        'vm_name': 'a'
    })


def test_invoke_waits_for_poller():
    assert sdk.invoke(_LongRunningOperations(), 'delete',
                      vm_name='a') == ('deleted', {
                          'vm_name': 'a'
                      })


def test_invoke_prefers_plain_name():
    operations = mock.Mock(spec=['create_or_update', 'begin_create_or_update'])
    operations.create_or_update.return_value = 'sync'

    assert sdk.invoke(operations, 'create_or_update') == 'sync'
    operations.begin_create_or_update.assert_not_called()


def test_get_azure_sdk_function_missing():
    with pytest.raises(AttributeError):
        sdk.get_azure_sdk_function(_PlainOperations(), 'delete')
    with pytest.raises(AttributeError):
        sdk.invoke(_PlainOperations(), 'delete')


def test_create_resource_group(fake_cloud, fake_clients):
    handle = resource_group.create_resource_group(fake_clients.resource,
                                                  'rg1',
                                                  'eastus',
                                                  tags={'owner': 'alice'})

    assert handle.name == 'rg1'
    assert handle.location == 'eastus'
    assert handle.tags == {'owner': 'alice'}
    assert 'rg1' in fake_cloud.resource_groups


def test_create_resource_group_authentication_error(fake_cloud, fake_clients):
    fake_cloud.fail(
        'resource_groups', 'create_or_update',
        azure_exceptions.ClientAuthenticationError(message='expired\ntoken'))

    with pytest.raises(exceptions.NoResourceGroupCreatedError) as e:
        resource_group.create_resource_group(fake_clients.resource, 'rg1',
                                             'eastus')

    assert '\n' not in str(e.value)
    assert isinstance(e.value.__cause__,
                      azure_exceptions.ClientAuthenticationError)


def test_delete_resource_group(fake_cloud, fake_clients):
    resource_group.create_resource_group(fake_clients.resource, 'rg1',
                                         'eastus')

    assert resource_group.delete_resource_group(fake_clients.resource, 'rg1')
    assert fake_cloud.resource_groups == {}


def test_delete_missing_resource_group(fake_clients):
    assert not resource_group.delete_resource_group(fake_clients.resource,
                                                    'never-created')


def test_delete_resource_group_other_not_found_error(fake_cloud,
                                                     fake_clients):
    resource_group.create_resource_group(fake_clients.resource, 'rg1',
                                         'eastus')
    fake_cloud.fail(
        'resource_groups', 'delete',
        azure_exceptions.ResourceNotFoundError(message='SubscriptionNotFound'))

    with pytest.raises(azure_exceptions.ResourceNotFoundError):
        resource_group.delete_resource_group(fake_clients.resource, 'rg1')


def test_create_virtual_network_and_interfaces(fake_cloud, fake_clients):
    resource_group.create_resource_group(fake_clients.resource, 'rg1',
                                         'eastus')

    vnet = network.create_virtual_network(fake_clients.network, 'rg1',
                                          'vnet1', 'eastus')
    nic = network.create_network_interface(fake_clients.network, 'rg1',
                                           'nic2', 'eastus',
                                           vnet.subnets[1].id)

    assert vnet.name == 'vnet1'
    assert vnet.location == 'eastus'
    assert vnet.address_space.address_prefixes == ['10.10.0.0/16']
    assert [s.name for s in vnet.subnets] == ['subnet1', 'subnet2']
    assert nic.name == 'nic2'
    ip_config = nic.ip_configurations[0]
    assert ip_config.name == 'default-config'
    assert ip_config.private_ip_allocation_method == 'Dynamic'
    assert ip_config.subnet.id == vnet.subnets[1].id


def test_network_requires_resource_group(fake_clients):
    with pytest.raises(azure_exceptions.ResourceNotFoundError):
        network.create_virtual_network(fake_clients.network, 'missing',
                                       'vnet1', 'eastus')


def test_create_empty_disk(fake_clients):
    resource_group.create_resource_group(fake_clients.resource, 'rg1',
                                         'eastus')

    disk = disks.create_empty_disk(fake_clients.compute, 'rg1', 'disk1',
                                   'eastus', 100)

    assert disk.name == 'disk1'
    assert disk.disk_size_gb == 100
    assert disk.sku.name == 'Standard_LRS'
    assert disk.creation_data.create_option == 'Empty'
    assert disk.id.endswith('/disks/disk1')


def test_create_empty_disk_rejects_non_positive_size(fake_cloud,
                                                     fake_clients):
    with pytest.raises(ValueError):
        disks.create_empty_disk(fake_clients.compute, 'rg1', 'disk1',
                                'eastus', 0)
    assert fake_cloud.calls == []
