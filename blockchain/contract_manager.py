"""
Contract Manager
Sequences contract setup: store code, instantiate, execute and query
"""

from typing import Any, Optional
from loguru import logger

from wallet.session import Session
from wallet.wallet_manager import Account
from .chain_client import ChainClient
from .errors import (
    ChainClientError,
    ChainRejection,
    ContractRejected,
    ContractSetupError,
    ExecuteFailure,
    InstantiateFailure,
    InvalidResponse,
    QueryFailure,
    StoreFailure
)
from .sequence_manager import SequenceManager
from .types import (
    DeploymentResult,
    DeploymentStage,
    ExecuteResult,
    InstantiateResult,
    JSONValue,
    StoreCodeResult,
    native_funds
)

UPLOAD_MEMO = "Upload contract code"
EXECUTE_MEMO = "execute a message"
DEFAULT_LABEL = "instantiation contract"


class DeploymentOrchestrator:
    """
    Drives a contract through its lifecycle

    Each step checks the identifier the previous step produced before
    anything is sent. Nothing is retried: a failed step raises and the
    chain remains the only record of partial progress.
    """

    def __init__(self, session: Session, sequence_manager: Optional[SequenceManager] = None):
        """
        Initialize Deployment Orchestrator

        Args:
            session: Accounts, config and fee settings for this run
            sequence_manager: Per-account transaction serialization
        """
        self.session = session
        self.gas_calculator = session.gas_calculator
        self.sequence_manager = sequence_manager or SequenceManager()

    async def store_code(
        self,
        bytecode: bytes,
        account: Optional[Account] = None,
        memo: str = UPLOAD_MEMO
    ) -> StoreCodeResult:
        """
        Upload contract bytecode

        Args:
            bytecode: Raw wasm bytes
            account: Uploading account (default: deployer)
            memo: Transaction memo

        Returns:
            StoreCodeResult with a validated code id
        """
        account = account or self.session.deployer
        fee = self.gas_calculator.upload_fee()

        logger.info("Uploading contract code...")

        try:
            async with self.sequence_manager.reserve(account.address, 'store_code'):
                response = await account.client.upload(account.address, bytecode, fee, memo)
        except ChainClientError as e:
            raise StoreFailure(
                e,
                context={'sender': account.address, 'bytecode_size': len(bytecode)}
            ) from e

        code_id = _validate_code_id(response)
        result = StoreCodeResult(
            transaction_hash=response.transaction_hash,
            code_id=code_id,
            gas_wanted=response.gas_wanted,
            gas_used=response.gas_used
        )

        logger.info(f"  transactionHash: {result.transaction_hash}")
        logger.info(f"  codeId: {result.code_id}")
        logger.info(f"  gasWanted / gasUsed: {result.gas_wanted} / {result.gas_used}")

        return result

    async def instantiate(
        self,
        code_id: int,
        init_msg: JSONValue,
        label: str = DEFAULT_LABEL,
        account: Optional[Account] = None,
        admin: Optional[str] = None
    ) -> InstantiateResult:
        """
        Instantiate stored code

        Args:
            code_id: Positive code id returned by store_code
            init_msg: Contract-defined instantiate message
            label: Human-readable contract label
            account: Instantiating account (default: deployer)
            admin: Optional contract admin address

        Returns:
            InstantiateResult with a validated contract address
        """
        if isinstance(code_id, bool) or not isinstance(code_id, int) or code_id <= 0:
            raise ValueError(f"code_id must be a positive integer, got {code_id!r}")

        account = account or self.session.deployer

        logger.info("Instantiating contract...")

        try:
            async with self.sequence_manager.reserve(account.address, 'instantiate'):
                response = await account.client.instantiate(
                    account.address,
                    code_id,
                    init_msg,
                    label,
                    self.gas_calculator.auto,
                    admin=admin
                )
        except ChainClientError as e:
            raise InstantiateFailure(
                e,
                context={'sender': account.address, 'code_id': code_id, 'label': label}
            ) from e

        if not response.contract_address:
            raise InvalidResponse(
                "Instantiate receipt has no contract address",
                operation='instantiate',
                context={'transaction_hash': response.transaction_hash, 'code_id': code_id}
            )

        result = InstantiateResult(
            transaction_hash=response.transaction_hash,
            contract_address=str(response.contract_address),
            gas_wanted=response.gas_wanted,
            gas_used=response.gas_used,
            code_id=code_id
        )

        logger.info(f"  transactionHash: {result.transaction_hash}")
        logger.info(f"  contractAddress: {result.contract_address}")
        logger.info(f"  gasWanted / gasUsed: {result.gas_wanted} / {result.gas_used}")

        return result

    async def execute(
        self,
        account: Account,
        contract_address: str,
        msg: JSONValue,
        native_amount: int = 0,
        native_denom: Optional[str] = None,
        memo: str = EXECUTE_MEMO
    ) -> ExecuteResult:
        """
        Execute a message on a contract

        Args:
            account: Acting account (any account, not only the deployer)
            contract_address: Target contract
            msg: Contract-defined execute message
            native_amount: Native tokens to attach (0 attaches nothing)
            native_denom: Denomination of the attached tokens (default: chain denom)
            memo: Transaction memo

        Returns:
            Transaction receipt
        """
        coin = native_funds(native_amount, native_denom or self.session.native_denom)
        funds = [coin] if coin is not None else []

        logger.info("Executing message to contract...")
        if coin is not None:
            logger.info(f"  attaching funds: {coin}")

        try:
            async with self.sequence_manager.reserve(account.address, 'execute'):
                response = await account.client.execute(
                    account.address,
                    contract_address,
                    msg,
                    self.gas_calculator.auto,
                    memo,
                    funds
                )
        except ChainClientError as e:
            raise ExecuteFailure(
                _as_contract_rejection(e),
                context={'sender': account.address, 'contract_address': contract_address}
            ) from e

        logger.info(f"  transactionHash: {response.transaction_hash}")
        logger.info(f"  gasWanted / gasUsed: {response.gas_wanted} / {response.gas_used}")

        return response

    async def query(self, client: ChainClient, contract_address: str, msg: JSONValue) -> Any:
        """Query a contract; takes no account lock and pays no fee"""
        return await run_query(client, contract_address, msg)

    async def deploy(
        self,
        bytecode: bytes,
        init_msg: JSONValue,
        label: str = DEFAULT_LABEL
    ) -> DeploymentResult:
        """
        Store code and instantiate it with the deployer account

        Args:
            bytecode: Raw wasm bytes
            init_msg: Contract-defined instantiate message
            label: Human-readable contract label

        Returns:
            DeploymentResult for both steps

        Raises:
            ContractSetupError: with `stage` set to the last stage completed
        """
        logger.info("1. Storing source code...")
        try:
            store_result = await self.store_code(bytecode)
        except ContractSetupError as e:
            e.stage = DeploymentStage.IDENTITIES_ESTABLISHED
            raise

        logger.info("2. Instantiating contract...")
        try:
            instantiate_result = await self.instantiate(store_result.code_id, init_msg, label)
        except ContractSetupError as e:
            e.stage = DeploymentStage.CODE_STORED
            raise

        logger.success("Contract setup completed!")

        return DeploymentResult(
            store=store_result,
            instantiate=instantiate_result,
            stage=DeploymentStage.INSTANTIATED
        )


def _validate_code_id(response: StoreCodeResult) -> int:
    """Return the receipt's code id as a positive int or raise InvalidResponse"""
    raw = response.code_id
    code_id = None

    if isinstance(raw, int) and not isinstance(raw, bool):
        code_id = raw
    elif isinstance(raw, str) and raw.strip().isdecimal():
        code_id = int(raw.strip())

    if code_id is None or code_id <= 0:
        raise InvalidResponse(
            f"Store receipt has no valid code id (got {raw!r})",
            operation='store_code',
            context={'transaction_hash': response.transaction_hash}
        )

    return code_id


def _as_contract_rejection(error: ChainClientError) -> ChainClientError:
    """Execute rejections from the chain are reported as the contract's own refusal"""
    if isinstance(error, ChainRejection) and not isinstance(error, ContractRejected):
        return ContractRejected(
            error.message,
            operation=error.operation,
            context=error.context,
            tx_hash=error.tx_hash
        )
    return error


async def run_query(client: ChainClient, contract_address: str, msg: JSONValue) -> Any:
    """
    Query a contract

    Args:
        client: Any client; no signer is needed
        contract_address: Target contract
        msg: Contract-defined query message

    Returns:
        The contract's response, unchanged
    """
    logger.info("Querying contract...")

    try:
        response = await client.query(contract_address, msg)
    except ChainClientError as e:
        raise QueryFailure(e, context={'contract_address': contract_address}) from e

    logger.info("  Querying successful")
    return response
