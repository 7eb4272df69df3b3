"""This module contains schemas used to validate objects.

Schemas conform to the JSON Schema specification as defined at
https://json-schema.org/
"""
from typing import Any, Dict

# Storage tiers accepted for managed disks and OS disks.
STORAGE_ACCOUNT_TYPES = [
    'Standard_LRS',
    'Premium_LRS',
    'StandardSSD_LRS',
    'UltraSSD_LRS',
    'Premium_ZRS',
    'StandardSSD_ZRS',
]

# <publisher>:<offer>:<sku>:<version>
_MARKETPLACE_IMAGE_ID_PATTERN = r'^[^:]+:[^:]+:[^:]+:[^:]+$'


def _get_vm_profile_schema() -> Dict[str, Any]:
    return {
        'type': 'object',
        'required': [],
        'additionalProperties': False,
        'properties': {
            'vm_size': {
                'type': 'string',
            },
            'image_id': {
                'type': 'string',
                'pattern': _MARKETPLACE_IMAGE_ID_PATTERN,
            },
            'os_disk_name': {
                'type': 'string',
            },
        },
    }


def get_config_schema() -> Dict[str, Any]:
    return {
        'type': 'object',
        'required': [],
        'additionalProperties': False,
        'properties': {
            'azure': {
                'type': 'object',
                'required': [],
                'additionalProperties': False,
                'properties': {
                    'region': {
                        'type': 'string',
                    },
                    'subscription_id': {
                        'type': 'string',
                    },
                },
            },
            'admin': {
                'type': 'object',
                'required': [],
                'additionalProperties': False,
                'properties': {
                    'username': {
                        'type': 'string',
                    },
                },
            },
            'resource_group': {
                'type': 'object',
                'required': [],
                'additionalProperties': False,
                'properties': {
                    'prefix': {
                        'type': 'string',
                    },
                    'tags': {
                        'type': 'object',
                        'additionalProperties': {
                            'type': 'string',
                        },
                    },
                },
            },
            'vms': {
                'type': 'object',
                'required': [],
                'additionalProperties': False,
                'properties': {
                    'windows': _get_vm_profile_schema(),
                    'linux': _get_vm_profile_schema(),
                },
            },
            'disks': {
                'type': 'object',
                'required': [],
                'additionalProperties': False,
                'properties': {
                    'storage_account_type': {
                        'type': 'string',
                        'case_insensitive_enum': STORAGE_ACCOUNT_TYPES,
                    },
                },
            },
        },
    }
