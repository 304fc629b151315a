"""
Utilities Package
Fee calculation, configuration loading, artifacts and logging setup
"""

from .gas_calculator import GasCalculator, GasPrice, Fee, calculate_fee
from .config import ChainConfig, load_chain_config, load_instantiate_msg
from .artifacts import ArtifactStore
from .log_config import configure_logging

__all__ = [
    'GasCalculator',
    'GasPrice',
    'Fee',
    'calculate_fee',
    'ChainConfig',
    'load_chain_config',
    'load_instantiate_msg',
    'ArtifactStore',
    'configure_logging'
]
