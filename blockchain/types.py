"""
Contract Setup Types
Coins, transaction results and pipeline stages shared by the orchestrator
and chain clients
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

# Contract-defined message bodies (instantiate, execute, query)
JSONValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


@dataclass(frozen=True)
class Coin:
    """A native token amount in its smallest unit"""

    amount: int
    denom: str

    def __post_init__(self):
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise ValueError(f"Coin amount must be an integer, got {self.amount!r}")
        if self.amount < 0:
            raise ValueError(f"Coin amount must not be negative, got {self.amount}")
        if not self.denom:
            raise ValueError("Coin denom must not be empty")

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


def native_funds(amount: int, denom: str) -> Optional[Coin]:
    """
    Build the funds attached to an execute message

    Args:
        amount: Native token amount (0 means no funds)
        denom: Token denomination

    Returns:
        A single coin, or None when nothing is attached
    """
    if amount < 0:
        raise ValueError(f"Native amount must not be negative, got {amount}")
    if amount == 0:
        return None
    return Coin(amount=amount, denom=denom)


@dataclass(frozen=True)
class StoreCodeResult:
    transaction_hash: str
    code_id: Any
    gas_wanted: int = 0
    gas_used: int = 0


@dataclass(frozen=True)
class InstantiateResult:
    transaction_hash: str
    contract_address: Optional[str]
    gas_wanted: int = 0
    gas_used: int = 0
    code_id: Optional[int] = None


@dataclass(frozen=True)
class ExecuteResult:
    transaction_hash: str
    gas_wanted: int = 0
    gas_used: int = 0
    height: Optional[int] = None
    raw_log: str = ""


class DeploymentStage(Enum):
    IDLE = "idle"
    IDENTITIES_ESTABLISHED = "identities_established"
    CODE_STORED = "code_stored"
    INSTANTIATED = "instantiated"


@dataclass(frozen=True)
class DeploymentResult:
    """Outcome of a full store + instantiate run"""

    store: StoreCodeResult
    instantiate: InstantiateResult
    stage: DeploymentStage = DeploymentStage.INSTANTIATED

    @property
    def code_id(self) -> int:
        return self.store.code_id

    @property
    def contract_address(self) -> str:
        return self.instantiate.contract_address
