"""
Blockchain Interaction Package
Chain client, deployment orchestration and per-account sequencing
"""

from .errors import (
    ContractSetupError,
    ConfigError,
    ChainClientError,
    TransportFailure,
    SignatureFailure,
    ChainRejection,
    ContractRejected,
    InvalidResponse,
    StepFailure,
    StoreFailure,
    InstantiateFailure,
    ExecuteFailure,
    QueryFailure
)
from .types import (
    Coin,
    StoreCodeResult,
    InstantiateResult,
    ExecuteResult,
    DeploymentResult,
    DeploymentStage
)

__all__ = [
    'ContractSetupError',
    'ConfigError',
    'ChainClientError',
    'TransportFailure',
    'SignatureFailure',
    'ChainRejection',
    'ContractRejected',
    'InvalidResponse',
    'StepFailure',
    'StoreFailure',
    'InstantiateFailure',
    'ExecuteFailure',
    'QueryFailure',
    'Coin',
    'StoreCodeResult',
    'InstantiateResult',
    'ExecuteResult',
    'DeploymentResult',
    'DeploymentStage'
]
