"""The VM provisioning workflow.

Runs a fixed, linear sequence of stages against Azure:

    authenticate -> create_resource_group -> create_network
    -> create_data_disks -> create_primary_vm -> create_secondary_vm
    -> tag_secondary_vm -> attach_data_disk -> list_vms -> delete_primary_vm
    -> teardown

Each stage stores the handles it creates on a WorkflowContext for later
stages. The first stage that raises aborts the rest, and teardown deletes the
resource group whenever one was created, so a run never leaks resources it
knows about. The outcome is returned as a WorkflowResult instead of being
raised.

Example:

    result = workflow.run_workflow()
    if result.status == workflow.WorkflowStatus.ABORTED:
        print(result.failed_stage, result.error)
"""
import dataclasses
import enum
import os
import random
import time
import typing
from typing import Any, Callable, Dict, List, Optional, Tuple

from azvm import azvm_config
from azvm import azvm_logging
from azvm.adaptors import azure
from azvm.provision.azure import disks as disks_lib
from azvm.provision.azure import instance as instance_lib
from azvm.provision.azure import network as network_lib
from azvm.provision.azure import resource_group as resource_group_lib
from azvm.utils import common_utils
from azvm.utils import schemas
from azvm.utils import ux_utils

logger = azvm_logging.init_logger(__name__)

ENV_VAR_ADMIN_PASSWORD = 'AZVM_ADMIN_PASSWORD'

DEFAULT_REGION = 'eastus'
DEFAULT_RESOURCE_GROUP_PREFIX = 'ComputeSampleRG'
DEFAULT_ADMIN_USERNAME = 'tirekicker'

# Sizes of the two disks attached to the primary VM at creation, in GB.
PRIMARY_DATA_DISK_SIZES_GB = (100, 50)
# Size of the disk attached to the primary VM after creation, in GB.
EXTRA_DATA_DISK_SIZE_GB = 50
SECONDARY_VM_TAGS = {'who-rocks-on-linux': 'java', 'where': 'on azure'}

DEFAULT_WINDOWS_PROFILE = instance_lib.VmProfile(
    vm_size='Standard_DS1_v2',
    image_id='MicrosoftWindowsDesktop:Windows-10:win10-21h2-ent:latest',
    os_type=instance_lib.OS_TYPE_WINDOWS,
    os_disk_name='windowsVMOSDisk',
    os_disk_caching='ReadOnly')
DEFAULT_LINUX_PROFILE = instance_lib.VmProfile(
    vm_size='Standard_F2',
    image_id='Canonical:UbuntuServer:16.04-LTS:latest',
    os_type=instance_lib.OS_TYPE_LINUX,
    os_disk_name='LinuxOSDisk',
    os_disk_caching='ReadWrite')


class WorkflowStage(enum.Enum):
    """Stages of the workflow, in the order they run."""
    AUTHENTICATE = 'authenticate'
    CREATE_RESOURCE_GROUP = 'create_resource_group'
    CREATE_NETWORK = 'create_network'
    CREATE_DATA_DISKS = 'create_data_disks'
    CREATE_PRIMARY_VM = 'create_primary_vm'
    CREATE_SECONDARY_VM = 'create_secondary_vm'
    TAG_SECONDARY_VM = 'tag_secondary_vm'
    ATTACH_DATA_DISK = 'attach_data_disk'
    LIST_VMS = 'list_vms'
    DELETE_PRIMARY_VM = 'delete_primary_vm'
    TEARDOWN = 'teardown'


class WorkflowStatus(enum.Enum):
    # Every provisioning stage ran.
    COMPLETED = 'completed'
    # A provisioning stage failed; the remaining ones were skipped.
    ABORTED = 'aborted'


class AzureClients(typing.NamedTuple):
    """Authenticated management clients for one subscription."""
    subscription_id: str
    resource: Any
    network: Any
    compute: Any

    @classmethod
    def from_env(cls) -> 'AzureClients':
        subscription_id = azure.get_subscription_id()
        return cls(subscription_id=subscription_id,
                   resource=azure.get_client('resource', subscription_id),
                   network=azure.get_client('network', subscription_id),
                   compute=azure.get_client('compute', subscription_id))


@dataclasses.dataclass
class WorkflowNames:
    """Names of everything a run creates."""
    resource_group: str
    primary_vm: str
    secondary_vm: str
    virtual_network: str
    network_interfaces: Tuple[str, str]
    data_disks: Tuple[str, str]
    extra_data_disk: str

    @classmethod
    def generate(cls,
                 resource_group_prefix: str = DEFAULT_RESOURCE_GROUP_PREFIX,
                 rng: Optional[random.Random] = None) -> 'WorkflowNames':

        def name(prefix: str) -> str:
            return common_utils.make_random_name(prefix, rng)

        return cls(resource_group=name(resource_group_prefix),
                   primary_vm=name('wVM'),
                   secondary_vm=name('lVM'),
                   virtual_network=name('vnet'),
                   network_interfaces=(name('nic1-'), name('nic2-')),
                   data_disks=(name('disk1-'), name('disk2-')),
                   extra_data_disk=name('disk3-'))


@dataclasses.dataclass
class WorkflowContext:
    """State threaded through the stages of one run."""
    names: WorkflowNames
    region: str
    admin_username: str
    admin_password: str
    windows_profile: instance_lib.VmProfile
    linux_profile: instance_lib.VmProfile
    storage_account_type: str = 'Standard_LRS'
    resource_group_tags: Dict[str, str] = dataclasses.field(
        default_factory=dict)
    clients: Optional[AzureClients] = None
    # Set as soon as the resource group exists; teardown deletes it.
    resource_group: Optional[Any] = None
    virtual_network: Optional[Any] = None
    network_interfaces: List[Any] = dataclasses.field(default_factory=list)
    data_disks: List[Any] = dataclasses.field(default_factory=list)
    primary_vm: Optional[Any] = None
    secondary_vm: Optional[Any] = None
    vm_summaries: List[instance_lib.VmSummary] = dataclasses.field(
        default_factory=list)
    completed_stages: List[WorkflowStage] = dataclasses.field(
        default_factory=list)

    @property
    def resource_group_name(self) -> str:
        return self.names.resource_group


@dataclasses.dataclass
class WorkflowResult:
    """What a run did, returned instead of raised."""
    status: WorkflowStatus
    completed_stages: List[WorkflowStage]
    # The resource group still left in Azure: None once teardown deleted it,
    # or if none was created.
    resource_group: Optional[Any] = None
    failed_stage: Optional[WorkflowStage] = None
    error: Optional[Exception] = None
    teardown_error: Optional[Exception] = None
    vm_summaries: List[instance_lib.VmSummary] = dataclasses.field(
        default_factory=list)

    @property
    def succeeded(self) -> bool:
        return (self.status == WorkflowStatus.COMPLETED and
                self.teardown_error is None)


def _authenticate(ctx: WorkflowContext) -> None:
    if ctx.clients is not None:
        logger.debug('Using the provided Azure clients.')
        return
    ctx.clients = AzureClients.from_env()
    logger.info(
        f'Authenticated to subscription {ctx.clients.subscription_id}.')


def _create_resource_group(ctx: WorkflowContext) -> None:
    assert ctx.clients is not None
    ctx.resource_group = resource_group_lib.create_resource_group(
        ctx.clients.resource,
        ctx.resource_group_name,
        ctx.region,
        tags=ctx.resource_group_tags)


def _create_network(ctx: WorkflowContext) -> None:
    assert ctx.clients is not None
    ctx.virtual_network = network_lib.create_virtual_network(
        ctx.clients.network, ctx.resource_group_name,
        ctx.names.virtual_network, ctx.region)
    subnets = ctx.virtual_network.subnets
    nic_names = ctx.names.network_interfaces
    if len(subnets) < len(nic_names):
        raise RuntimeError(
            f'Virtual network {ctx.virtual_network.name} has '
            f'{len(subnets)} subnet(s), expected {len(nic_names)}.')
    # One network interface per subnet, in subnet order.
    for nic_name, subnet in zip(nic_names, subnets):
        ctx.network_interfaces.append(
            network_lib.create_network_interface(ctx.clients.network,
                                                 ctx.resource_group_name,
                                                 nic_name, ctx.region,
                                                 subnet.id))


def _create_data_disks(ctx: WorkflowContext) -> None:
    assert ctx.clients is not None
    for disk_name, size_gb in zip(ctx.names.data_disks,
                                  PRIMARY_DATA_DISK_SIZES_GB):
        ctx.data_disks.append(
            disks_lib.create_empty_disk(ctx.clients.compute,
                                        ctx.resource_group_name,
                                        disk_name,
                                        ctx.region,
                                        size_gb,
                                        storage_account_type=ctx.
                                        storage_account_type))


def _create_vm(ctx: WorkflowContext, vm_name: str,
               profile: instance_lib.VmProfile, nic: Any,
               data_disks: List[Any]) -> Any:
    assert ctx.clients is not None
    parameters = instance_lib.build_vm_parameters(
        profile,
        computer_name=vm_name,
        location=ctx.region,
        network_interface_id=nic.id,
        admin_username=ctx.admin_username,
        admin_password=ctx.admin_password,
        data_disks=data_disks)
    start = time.time()
    vm = instance_lib.create_vm(ctx.clients.compute, ctx.resource_group_name,
                                vm_name, parameters)
    logger.debug(f'Creating {vm_name} took {time.time() - start:.1f}s.')
    instance_lib.log_vm_summary(instance_lib.summarize_vm(vm))
    return vm


def _create_primary_vm(ctx: WorkflowContext) -> None:
    # LUNs 1 and 2, in creation order.
    data_disks = [
        instance_lib.build_data_disk(disk, lun)
        for lun, disk in enumerate(ctx.data_disks, start=1)
    ]
    ctx.primary_vm = _create_vm(ctx, ctx.names.primary_vm,
                                ctx.windows_profile,
                                ctx.network_interfaces[0], data_disks)


def _create_secondary_vm(ctx: WorkflowContext) -> None:
    ctx.secondary_vm = _create_vm(ctx, ctx.names.secondary_vm,
                                  ctx.linux_profile, ctx.network_interfaces[1],
                                  [])


def _tag_secondary_vm(ctx: WorkflowContext) -> None:
    assert ctx.clients is not None
    for key, value in SECONDARY_VM_TAGS.items():
        ctx.secondary_vm = instance_lib.add_tags(ctx.clients.compute,
                                                 ctx.resource_group_name,
                                                 ctx.names.secondary_vm,
                                                 {key: value})


def _attach_data_disk(ctx: WorkflowContext) -> None:
    assert ctx.clients is not None
    disk = disks_lib.create_empty_disk(
        ctx.clients.compute,
        ctx.resource_group_name,
        ctx.names.extra_data_disk,
        ctx.region,
        EXTRA_DATA_DISK_SIZE_GB,
        storage_account_type=ctx.storage_account_type)
    ctx.data_disks.append(disk)
    ctx.primary_vm = instance_lib.attach_data_disk(ctx.clients.compute,
                                                   ctx.resource_group_name,
                                                   ctx.names.primary_vm, disk)


def _list_vms(ctx: WorkflowContext) -> None:
    assert ctx.clients is not None
    vms = instance_lib.list_vms(ctx.clients.compute, ctx.resource_group_name)
    logger.info(f'Found {len(vms)} VM(s) in {ctx.resource_group_name}.')
    for vm in vms:
        summary = instance_lib.summarize_vm(vm)
        instance_lib.log_vm_summary(summary)
        ctx.vm_summaries.append(summary)


def _delete_primary_vm(ctx: WorkflowContext) -> None:
    assert ctx.clients is not None
    assert ctx.primary_vm is not None
    instance_lib.delete_vm(ctx.clients.compute, ctx.resource_group_name,
                           ctx.primary_vm.name)


_STAGES: List[Tuple[WorkflowStage, Callable[[WorkflowContext], None]]] = [
    (WorkflowStage.AUTHENTICATE, _authenticate),
    (WorkflowStage.CREATE_RESOURCE_GROUP, _create_resource_group),
    (WorkflowStage.CREATE_NETWORK, _create_network),
    (WorkflowStage.CREATE_DATA_DISKS, _create_data_disks),
    (WorkflowStage.CREATE_PRIMARY_VM, _create_primary_vm),
    (WorkflowStage.CREATE_SECONDARY_VM, _create_secondary_vm),
    (WorkflowStage.TAG_SECONDARY_VM, _tag_secondary_vm),
    (WorkflowStage.ATTACH_DATA_DISK, _attach_data_disk),
    (WorkflowStage.LIST_VMS, _list_vms),
    (WorkflowStage.DELETE_PRIMARY_VM, _delete_primary_vm),
]


def teardown(resource_client: Optional[Any],
             resource_group: Optional[Any]) -> Optional[Exception]:
    """Deletes 'resource_group', logging instead of raising on failure.

    Args:
        resource_client: The resource management client. May be None only
            when 'resource_group' is None.
        resource_group: The handle returned when the resource group was
            created, or None if it never was.

    Returns:
        The exception that made the deletion fail, or None.
    """
    if resource_group is None:
        logger.info('Did not create any resources in Azure. No clean up is '
                    'necessary.')
        return None
    assert resource_client is not None
    try:
        resource_group_lib.delete_resource_group(resource_client,
                                                 resource_group.name)
    except Exception as e:  # pylint: disable=broad-except
        logger.error(
            ux_utils.error_message(
                f'Failed to delete resource group {resource_group.name}: '
                f'{common_utils.format_exception(e)}. Delete it with: '
                f'azvm teardown {resource_group.name}'))
        return e
    return None


def _storage_account_type() -> str:
    value = azvm_config.get_nested(('disks', 'storage_account_type'),
                                   disks_lib.DEFAULT_STORAGE_ACCOUNT_TYPE)
    # The schema accepts any casing; Azure wants the canonical one.
    for canonical in schemas.STORAGE_ACCOUNT_TYPES:
        if canonical.lower() == value.lower():
            return canonical
    return value


def _vm_profile(os_key: str,
                default: instance_lib.VmProfile,
                storage_account_type: str) -> instance_lib.VmProfile:
    overrides = azvm_config.get_nested(('vms', os_key), {})
    return dataclasses.replace(default,
                               storage_account_type=storage_account_type,
                               **overrides)


def make_context(names: Optional[WorkflowNames] = None,
                 region: Optional[str] = None,
                 clients: Optional[AzureClients] = None,
                 admin_password: Optional[str] = None) -> WorkflowContext:
    """Builds the context of a run from the arguments and the azvm config."""
    if names is None:
        names = WorkflowNames.generate(
            azvm_config.get_nested(('resource_group', 'prefix'),
                                   DEFAULT_RESOURCE_GROUP_PREFIX))
    if region is None:
        region = azvm_config.get_nested(('azure', 'region'), DEFAULT_REGION)
    if admin_password is None:
        admin_password = (os.environ.get(ENV_VAR_ADMIN_PASSWORD) or
                          common_utils.generate_admin_password())
    storage_account_type = _storage_account_type()
    return WorkflowContext(
        names=names,
        region=region,
        admin_username=azvm_config.get_nested(('admin', 'username'),
                                              DEFAULT_ADMIN_USERNAME),
        admin_password=admin_password,
        windows_profile=_vm_profile('windows', DEFAULT_WINDOWS_PROFILE,
                                    storage_account_type),
        linux_profile=_vm_profile('linux', DEFAULT_LINUX_PROFILE,
                                  storage_account_type),
        storage_account_type=storage_account_type,
        resource_group_tags=dict(
            azvm_config.get_nested(('resource_group', 'tags'), {})),
        clients=clients)


def _teardown(ctx: WorkflowContext) -> Optional[Exception]:
    resource_client = ctx.clients.resource if ctx.clients else None
    return teardown(resource_client, ctx.resource_group)


def run_workflow(names: Optional[WorkflowNames] = None,
                 region: Optional[str] = None,
                 clients: Optional[AzureClients] = None,
                 admin_password: Optional[str] = None) -> WorkflowResult:
    """Runs every stage, then tears down the resource group.

    Args:
        names: Names of the resources to create. Generated with random
            suffixes by default.
        region: Azure region. Defaults to azure.region from the config, or
            eastus.
        clients: Authenticated clients. Built from the environment by the
            authenticate stage by default.
        admin_password: Password of the VMs' admin user. Defaults to
            $AZVM_ADMIN_PASSWORD, or a random password.

    Returns:
        The outcome of the run. Failures of provisioning stages and of
        teardown are reported on the result, not raised.
    """
    ctx = make_context(names=names,
                       region=region,
                       clients=clients,
                       admin_password=admin_password)
    failed_stage: Optional[WorkflowStage] = None
    error: Optional[Exception] = None
    try:
        for stage, run_stage in _STAGES:
            failed_stage = stage
            logger.debug(f'Stage {stage.value} started.')
            run_stage(ctx)
            ctx.completed_stages.append(stage)
        failed_stage = None
    except Exception as e:  # pylint: disable=broad-except
        error = e
        logger.error(
            ux_utils.error_message(f'Stage {failed_stage.value} failed: '
                                   f'{common_utils.format_exception(e)}'))
    except BaseException:
        # Interrupted, e.g. by Ctrl-C: still clean up before propagating.
        _teardown(ctx)
        raise

    teardown_error = _teardown(ctx)
    if teardown_error is None:
        ctx.completed_stages.append(WorkflowStage.TEARDOWN)
        ctx.resource_group = None

    status = (WorkflowStatus.COMPLETED
              if error is None else WorkflowStatus.ABORTED)
    return WorkflowResult(status=status,
                          completed_stages=list(ctx.completed_stages),
                          resource_group=ctx.resource_group,
                          failed_stage=failed_stage,
                          error=error,
                          teardown_error=teardown_error,
                          vm_summaries=list(ctx.vm_summaries))
