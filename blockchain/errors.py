"""
Error Types
Failure taxonomy for contract setup: configuration, client-level causes and
step-level failures raised by the deployment orchestrator
"""

import json
import re
from typing import Any, Dict, List, Mapping, Optional

from .types import DeploymentStage


class ContractSetupError(Exception):
    """Base class for contract setup errors"""

    def __init__(
        self,
        message: str = "",
        *,
        operation: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None
    ):
        self.message = message or self.__class__.__name__
        self.operation = operation
        self.context = dict(context or {})
        # Last pipeline stage completed before the failure, set by the orchestrator
        self.stage: Optional[DeploymentStage] = None
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        """Taxonomy name of this error"""
        return self.__class__.__name__

    def report_lines(self) -> List[str]:
        """
        Render the error as log lines

        Returns:
            Lines describing operation, error kind, message and context
        """
        lines = []
        if self.operation:
            lines.append(f"Step failed: {self.operation}")
        lines.append(f"  Error: {self.kind}")
        lines.append(f"  Message: {self.message}")
        for key, value in self.context.items():
            lines.append(f"  {key}: {_compact(value)}")
        return lines


class ConfigError(ContractSetupError):
    """Bad or missing chain configuration"""


class ChainClientError(ContractSetupError):
    """Failure reported by the chain client"""


class TransportFailure(ChainClientError):
    """Network or RPC-level failure reaching the chain"""


class SignatureFailure(ChainClientError):
    """Wallet or signing failure"""


class ChainRejection(ChainClientError):
    """Transaction reverted after inclusion or rejected before it"""

    def __init__(self, message: str = "", *, tx_hash: Optional[str] = None, **kwargs):
        self.tx_hash = tx_hash
        super().__init__(message, **kwargs)


class ContractRejected(ChainRejection):
    """The contract's own validation rejected the message"""

    def __init__(self, error_message: str, **kwargs):
        self.error_message = error_message
        super().__init__(error_message, **kwargs)


class InvalidResponse(ContractSetupError):
    """Client reported success but omitted an expected identifier"""


class StepFailure(ContractSetupError):
    """
    A pipeline step failed

    The underlying client error is kept as `cause` and the step is named
    in `operation`.
    """

    step = "step"

    def __init__(
        self,
        cause: ContractSetupError,
        *,
        context: Optional[Mapping[str, Any]] = None
    ):
        self.cause = cause
        merged = dict(cause.context)
        merged.update(context or {})
        super().__init__(cause.message, operation=self.step, context=merged)

    @property
    def kind(self) -> str:
        return f"{self.__class__.__name__}({self.cause.kind})"


class StoreFailure(StepFailure):
    step = "store_code"


class InstantiateFailure(StepFailure):
    step = "instantiate"


class ExecuteFailure(StepFailure):
    step = "execute"

    @property
    def rejected(self) -> bool:
        """True when the contract refused the message"""
        return isinstance(self.cause, ContractRejected)


class QueryFailure(StepFailure):
    step = "query"


_WASM_FAILURE = re.compile(
    r"message index: \d+: (?P<error>.*?):? (?:execute|instantiate|query) wasm contract failed",
    re.DOTALL
)


def extract_contract_error(raw_log: str) -> str:
    """
    Pull the contract's own error message out of a CosmWasm failure log

    Args:
        raw_log: Raw log or error details reported by the chain

    Returns:
        The contract error message, or the stripped log when no wasm
        failure marker is present
    """
    match = _WASM_FAILURE.search(raw_log or "")
    if match:
        return match.group("error").strip()
    return (raw_log or "").strip()


def _compact(value: Any) -> str:
    if isinstance(value, (dict, list)):
        try:
            return json.dumps(value, sort_keys=True, separators=(",", ":"))
        except (TypeError, ValueError):
            return str(value)
    return str(value)


def failure_summary(error: ContractSetupError) -> Dict[str, Any]:
    """Flatten an error for structured logging"""
    summary = {
        "kind": error.kind,
        "operation": error.operation,
        "message": error.message,
    }
    summary.update(error.context)
    return summary
