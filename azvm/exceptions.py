"""Exceptions."""
from typing import Optional


class InvalidAzvmConfigError(ValueError):
    """Raised when the azvm config is invalid."""
    pass


class AzureCredentialsError(Exception):
    """Raised when Azure credentials cannot be resolved from the environment."""
    pass


class NoResourceGroupCreatedError(Exception):
    """No resource group was created, so teardown can be skipped."""
    pass


class DataDiskAttachError(Exception):
    """Raised when a data disk cannot be attached to a virtual machine."""

    def __init__(self, message: str, lun: Optional[int] = None) -> None:
        super().__init__(message)
        self.lun = lun
