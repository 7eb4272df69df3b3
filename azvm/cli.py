"""azvm CLI."""
import os
import sys
from typing import Optional

import click
import colorama

import azvm
from azvm import azvm_config
from azvm import azvm_logging
from azvm import workflow
from azvm.adaptors import azure
from azvm.provision.azure import resource_group as resource_group_lib
from azvm.utils import common_utils
from azvm.utils import env_options
from azvm.utils import ux_utils

logger = azvm_logging.init_logger(__name__)


class _NaturalOrderGroup(click.Group):
    """Lists commands in the order defined in the script. """

    def list_commands(self, ctx):
        return self.commands.keys()


def _log_result(result: workflow.WorkflowResult) -> None:
    stages = ', '.join(stage.value for stage in result.completed_stages)
    logger.info(f'Completed stages: {stages or "none"}')
    if result.status == workflow.WorkflowStatus.COMPLETED:
        logger.info(ux_utils.finishing_message('Workflow completed.'))
    else:
        assert result.failed_stage is not None
        logger.info(
            ux_utils.error_message(
                f'Workflow aborted at stage {result.failed_stage.value}: '
                f'{common_utils.format_exception(result.error)}'))
    if result.resource_group is not None:
        logger.warning(f'{colorama.Fore.YELLOW}Resource group '
                       f'{result.resource_group.name} was not deleted.'
                       f'{colorama.Style.RESET_ALL}')


@click.group(cls=_NaturalOrderGroup)
@click.version_option(azvm.__version__, prog_name='azvm')
@click.option(
    '--debug',
    default=env_options.Options.SHOW_DEBUG_INFO.get(),
    is_flag=True,
    help='Show debug info.',
)
def cli(debug: bool):
    """azvm: provision, update, list and tear down Azure VMs."""
    if debug:
        os.environ[env_options.Options.SHOW_DEBUG_INFO.env_var] = '1'
        azvm_logging.reload_logger()


@cli.command()
@click.option('--region',
              '-r',
              default=None,
              type=str,
              help='Azure region to create resources in. Defaults to '
              'azure.region in ~/.azvm/config.yaml, or eastus.')
def run(region: Optional[str]):
    """Run the provisioning workflow end to end.

    Creates a resource group, a network, two VMs and their disks, updates
    and lists them, then deletes the resource group. The exit code is 0
    whenever the workflow ran, even if a stage failed.

    Examples:
        azvm run
        azvm run --region westus2
    """
    config_path = azvm_config.loaded_config_path()
    if config_path is not None:
        logger.info(f'Using config file {config_path}.')
    try:
        result = workflow.run_workflow(region=region)
    except Exception as e:  # pylint: disable=broad-except
        logger.error(ux_utils.error_message(common_utils.format_exception(e)))
        sys.exit(1)
    _log_result(result)


@cli.command()
@click.argument('resource_group', required=True, type=str)
def teardown(resource_group: str):
    """Delete a resource group left behind by a failed run.

    Examples:
        azvm teardown ComputeSampleRG1234
    """
    try:
        subscription_id = azure.get_subscription_id()
        resource_client = azure.get_client('resource', subscription_id)
        resource_group_lib.delete_resource_group(resource_client,
                                                 resource_group)
    except Exception as e:  # pylint: disable=broad-except
        logger.error(ux_utils.error_message(common_utils.format_exception(e)))
        sys.exit(1)


if __name__ == '__main__':
    cli()
