"""Requirements of azvm, read by setup.py through runpy.

Nothing here may import azvm or any third-party package: setup.py runs this
file before the requirements are installed.
"""
from typing import Dict, List

install_requires = [
    # Argument parsing regressed in click 8.2.0
    # (https://github.com/pallets/click/issues/2894).
    'click >= 7.0, < 8.2.0',
    'colorama',
    'jsonschema',
    # PyYAML 5.4.* fails to build under Cython 3.0
    # (https://github.com/yaml/pyyaml/issues/601).
    'pyyaml > 3.13, != 5.4.*',
]

# provision/azure/sdk.py expects every long-running operation under its
# begin_* name, which these releases guarantee.
azure_dependencies = [
    'azure-core>=1.31.0',
    'azure-identity>=1.19.0',
    'azure-mgmt-compute>=33.0.0',
    'azure-mgmt-network>=27.0.0',
    'azure-mgmt-resource>=23.0.0',
]

install_requires += azure_dependencies

extras_require: Dict[str, List[str]] = {
    'test': ['pytest'],
}
