"""Azure virtual machine provisioning."""
import dataclasses
import typing
from typing import Any, Dict, List, Optional, Sequence, Tuple

from azvm import azvm_logging
from azvm import exceptions
from azvm.adaptors import azure
from azvm.provision.azure import sdk
from azvm.utils import ux_utils

if typing.TYPE_CHECKING:
    from azure.mgmt.compute import models as azure_compute_models

logger = azvm_logging.init_logger(__name__)

Client = Any

# Azure allows LUNs 0-63 for data disks.
_MAX_LUN = 63
_FIRST_LUN = 1

OS_TYPE_WINDOWS = 'Windows'
OS_TYPE_LINUX = 'Linux'


class ImageSpec(typing.NamedTuple):
    """A marketplace image, <publisher>:<offer>:<sku>:<version>."""
    publisher: str
    offer: str
    sku: str
    version: str


@dataclasses.dataclass
class VmProfile:
    """What to create for one virtual machine, apart from its name."""
    vm_size: str
    image_id: str
    os_type: str
    os_disk_name: str
    # 'ReadOnly', 'ReadWrite' or 'None'.
    os_disk_caching: str
    storage_account_type: str = 'Standard_LRS'


@dataclasses.dataclass
class DataDiskSummary:
    lun: int
    name: str
    size_gb: Optional[int]


@dataclasses.dataclass
class VmSummary:
    """The fields of a VM worth printing after it is created or listed."""
    name: str
    image_publisher: Optional[str]
    image_offer: Optional[str]
    image_sku: Optional[str]
    network_interface: Optional[str]
    os_disk_name: Optional[str]
    data_disks: List[DataDiskSummary]
    tag_count: int


def parse_image_id(image_id: str) -> ImageSpec:
    """Splits a marketplace image id into its four parts.

    Raises:
        ValueError: If the image ID is invalid.
    """
    parts = image_id.split(':')
    if len(parts) != 4 or not all(parts):
        with ux_utils.print_exception_no_traceback():
            raise ValueError(
                f'Invalid image id for Azure: {image_id}. Expected format: '
                '<publisher>:<offer>:<sku>:<version>')
    return ImageSpec(*parts)


def _resource_name(resource_id: Optional[str]) -> Optional[str]:
    if not resource_id:
        return None
    return resource_id.rstrip('/').split('/')[-1]


def build_data_disk(disk: Any,
                    lun: int,
                    caching: str = 'ReadOnly'
                   ) -> 'azure_compute_models.DataDisk':
    """Returns the data disk entry that attaches managed 'disk' at 'lun'."""
    compute = azure.azure_mgmt_models('compute')
    return compute.DataDisk(
        lun=lun,
        name=disk.name,
        create_option=compute.DiskCreateOptionTypes.ATTACH,
        caching=caching,
        disk_size_gb=disk.disk_size_gb,
        managed_disk=compute.ManagedDiskParameters(id=disk.id))


def build_vm_parameters(
        profile: VmProfile,
        computer_name: str,
        location: str,
        network_interface_id: str,
        admin_username: str,
        admin_password: str,
        data_disks: Sequence[Any] = (),
        tags: Optional[Dict[str, str]] = None
) -> 'azure_compute_models.VirtualMachine':
    compute = azure.azure_mgmt_models('compute')
    image = parse_image_id(profile.image_id)
    storage_profile = compute.StorageProfile(
        image_reference=compute.ImageReference(publisher=image.publisher,
                                               offer=image.offer,
                                               sku=image.sku,
                                               version=image.version),
        os_disk=compute.OSDisk(
            name=profile.os_disk_name,
            os_type=profile.os_type,
            caching=profile.os_disk_caching,
            create_option=compute.DiskCreateOptionTypes.FROM_IMAGE,
            managed_disk=compute.ManagedDiskParameters(
                storage_account_type=profile.storage_account_type)),
        data_disks=list(data_disks))
    return compute.VirtualMachine(
        location=location,
        tags=tags,
        hardware_profile=compute.HardwareProfile(vm_size=profile.vm_size),
        storage_profile=storage_profile,
        os_profile=compute.OSProfile(computer_name=computer_name,
                                     admin_username=admin_username,
                                     admin_password=admin_password),
        network_profile=compute.NetworkProfile(network_interfaces=[
            compute.NetworkInterfaceReference(id=network_interface_id,
                                              primary=True)
        ]))


def create_vm(compute_client: Client, resource_group: str, vm_name: str,
              parameters: 'azure_compute_models.VirtualMachine') -> Any:
    logger.info(f'Creating {parameters.storage_profile.os_disk.os_type} VM '
                f'{vm_name}...')
    vm = sdk.invoke(compute_client.virtual_machines,
                    'create_or_update',
                    resource_group_name=resource_group,
                    vm_name=vm_name,
                    parameters=parameters)
    logger.info(f'Created VM: {vm.name}')
    return vm


def get_vm(compute_client: Client, resource_group: str, vm_name: str) -> Any:
    return sdk.invoke(compute_client.virtual_machines,
                      'get',
                      resource_group_name=resource_group,
                      vm_name=vm_name)


def add_tags(compute_client: Client, resource_group: str, vm_name: str,
             tags: Dict[str, str]) -> Any:
    """Merges 'tags' into the VM's current tags.

    Existing keys not in 'tags' are kept; keys in both take the new value.
    """
    compute = azure.azure_mgmt_models('compute')
    vm = get_vm(compute_client, resource_group, vm_name)
    merged = dict(vm.tags or {})
    merged.update(tags)
    vm = sdk.invoke(compute_client.virtual_machines,
                    'update',
                    resource_group_name=resource_group,
                    vm_name=vm_name,
                    parameters=compute.VirtualMachineUpdate(tags=merged))
    logger.info(f'Tagged VM {vm_name}: {merged}')
    return vm


def _next_free_lun(used_luns) -> int:
    if not used_luns:
        return _FIRST_LUN
    if max(used_luns) < _MAX_LUN:
        return max(used_luns) + 1
    # The top LUN is taken; reuse the lowest gap below it.
    for lun in range(_FIRST_LUN, _MAX_LUN + 1):
        if lun not in used_luns:
            return lun
    raise exceptions.DataDiskAttachError(
        f'All LUNs {_FIRST_LUN}-{_MAX_LUN} are in use.')


def attach_data_disk(compute_client: Client,
                     resource_group: str,
                     vm_name: str,
                     disk: Any,
                     lun: Optional[int] = None,
                     caching: str = 'ReadOnly') -> Any:
    """Appends managed 'disk' to the VM's data disks and resubmits the VM.

    The VM is re-read first, so disks attached since its creation are kept
    with their LUNs and sizes.

    Args:
        lun: The LUN to attach at. Defaults to one past the highest LUN in
            use (1 for a VM without data disks), or to the lowest free LUN
            once LUN 63 is taken.

    Raises:
        DataDiskAttachError: if the LUN is in use or out of range, no LUN is
            free, or the disk is already attached to the VM.
    """
    vm = get_vm(compute_client, resource_group, vm_name)
    data_disks = list(vm.storage_profile.data_disks or [])
    used_luns = {data_disk.lun for data_disk in data_disks}
    if lun is None:
        lun = _next_free_lun(used_luns)
    if lun in used_luns:
        raise exceptions.DataDiskAttachError(
            f'LUN {lun} of VM {vm_name} is already in use.', lun=lun)
    if not 0 <= lun <= _MAX_LUN:
        raise exceptions.DataDiskAttachError(
            f'LUN {lun} is out of range [0, {_MAX_LUN}].', lun=lun)
    attached_ids = {
        data_disk.managed_disk.id.lower()
        for data_disk in data_disks
        if data_disk.managed_disk is not None and data_disk.managed_disk.id
    }
    if disk.id and disk.id.lower() in attached_ids:
        raise exceptions.DataDiskAttachError(
            f'Disk {disk.name} is already attached to VM {vm_name}.', lun=lun)

    data_disks.append(build_data_disk(disk, lun, caching=caching))
    vm.storage_profile.data_disks = data_disks
    logger.info(f'Attaching disk {disk.name} to VM {vm_name} at LUN {lun}...')
    vm = sdk.invoke(compute_client.virtual_machines,
                    'create_or_update',
                    resource_group_name=resource_group,
                    vm_name=vm_name,
                    parameters=vm)
    logger.info(f'Expanded VM {vm.name}\'s data disks.')
    return vm


def list_vms(compute_client: Client, resource_group: str) -> List[Any]:
    return list(
        sdk.invoke(compute_client.virtual_machines,
                   'list',
                   resource_group_name=resource_group))


def delete_vm(compute_client: Client, resource_group: str,
              vm_name: str) -> None:
    logger.info(f'Deleting VM: {vm_name}')
    sdk.invoke(compute_client.virtual_machines,
               'delete',
               resource_group_name=resource_group,
               vm_name=vm_name)
    logger.info(f'Deleted VM: {vm_name}')


def summarize_vm(vm: Any) -> VmSummary:
    storage_profile = vm.storage_profile
    image = storage_profile.image_reference if storage_profile else None
    os_disk = storage_profile.os_disk if storage_profile else None
    nics = (vm.network_profile.network_interfaces
            if vm.network_profile is not None else None)
    data_disks = [
        DataDiskSummary(lun=data_disk.lun,
                        name=data_disk.name,
                        size_gb=data_disk.disk_size_gb)
        for data_disk in (storage_profile.data_disks or [])
    ] if storage_profile else []
    return VmSummary(
        name=vm.name,
        image_publisher=image.publisher if image else None,
        image_offer=image.offer if image else None,
        image_sku=image.sku if image else None,
        network_interface=_resource_name(nics[0].id) if nics else None,
        os_disk_name=os_disk.name if os_disk else None,
        data_disks=data_disks,
        tag_count=len(vm.tags or {}))


def _format_summary(summary: VmSummary) -> Tuple[str, List[str]]:
    header = f'VM name: {summary.name}'
    lines = [
        f'Image: {summary.image_publisher}:{summary.image_offer}:'
        f'{summary.image_sku}',
        f'Network interface name: {summary.network_interface}',
        f'OS disk name: {summary.os_disk_name}',
        f'Data disk count: {len(summary.data_disks)}',
    ]
    lines += [
        f'  LUN: {d.lun}  Name: {d.name}  Size: {d.size_gb}GB'
        for d in summary.data_disks
    ]
    lines.append(f'Tag count: {summary.tag_count}')
    return header, lines


def log_vm_summary(summary: VmSummary) -> None:
    header, lines = _format_summary(summary)
    logger.info('\n'.join([header] + ux_utils.indented_lines(lines)))
