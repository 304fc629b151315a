"""
Chain Client
Signs, broadcasts and queries CosmWasm transactions on a remote network
"""

import asyncio
import gzip
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

import grpc
from cosmpy.aerial.client import LedgerClient, NetworkConfig
from cosmpy.aerial.client.utils import prepare_and_broadcast_basic_transaction
from cosmpy.aerial.contract.cosmwasm import (
    create_cosmwasm_execute_msg,
    create_cosmwasm_instantiate_msg
)
from cosmpy.aerial.exceptions import BroadcastError, QueryError, QueryTimeoutError
from cosmpy.aerial.tx import SigningCfg, Transaction
from cosmpy.aerial.wallet import LocalWallet
from cosmpy.crypto.address import Address
from cosmpy.protos.cosmwasm.wasm.v1.query_pb2 import QuerySmartContractStateRequest
from cosmpy.protos.cosmwasm.wasm.v1.tx_pb2 import MsgStoreCode
from loguru import logger

from blockchain.errors import (
    ChainClientError,
    ChainRejection,
    ContractRejected,
    SignatureFailure,
    TransportFailure,
    extract_contract_error
)
from blockchain.types import Coin, ExecuteResult, InstantiateResult, JSONValue, StoreCodeResult
from utils.config import ChainConfig
from utils.gas_calculator import AUTO, Fee

FeeMode = Union[Fee, str]

_TRANSPORT_CODES = (
    grpc.StatusCode.UNAVAILABLE,
    grpc.StatusCode.DEADLINE_EXCEEDED,
    grpc.StatusCode.CANCELLED,
    grpc.StatusCode.RESOURCE_EXHAUSTED
)

_GZIP_MAGIC = b"\x1f\x8b"


class ChainClient(ABC):
    """
    Interface the deployment orchestrator drives

    Signing operations act for `signer_address`; a client without a
    signer can still query.
    """

    signer_address: Optional[str] = None

    @abstractmethod
    async def upload(
        self,
        sender_address: str,
        bytecode: bytes,
        fee: Fee,
        memo: str = ""
    ) -> StoreCodeResult:
        """Upload contract bytecode"""

    @abstractmethod
    async def instantiate(
        self,
        sender_address: str,
        code_id: int,
        init_msg: JSONValue,
        label: str,
        fee_mode: FeeMode = AUTO,
        admin: Optional[str] = None
    ) -> InstantiateResult:
        """Create a contract instance from stored code"""

    @abstractmethod
    async def execute(
        self,
        sender_address: str,
        contract_address: str,
        msg: JSONValue,
        fee_mode: FeeMode = AUTO,
        memo: str = "",
        funds: Optional[List[Coin]] = None
    ) -> ExecuteResult:
        """Send a state-changing message to a contract"""

    @abstractmethod
    async def query(self, contract_address: str, msg: JSONValue) -> JSONValue:
        """Run a read-only smart query"""


class CosmWasmChainClient(ChainClient):
    """
    ChainClient backed by cosmpy's LedgerClient

    Library calls block, so each one runs in a worker thread.
    """

    def __init__(self, ledger: LedgerClient, wallet: Optional[LocalWallet] = None):
        """
        Initialize CosmWasm chain client

        Args:
            ledger: Connected cosmpy LedgerClient
            wallet: Signing wallet (None for a query-only client)
        """
        self.ledger = ledger
        self.wallet = wallet
        self.signer_address = str(wallet.address()) if wallet is not None else None

    @classmethod
    def connect(cls, config: ChainConfig, wallet: Optional[LocalWallet] = None) -> "CosmWasmChainClient":
        """
        Connect to the configured chain

        Args:
            config: Chain configuration
            wallet: Signing wallet (None for a query-only client)

        Returns:
            CosmWasmChainClient instance
        """
        network = NetworkConfig(
            chain_id=config.chain_id,
            url=config.rpc_endpoint,
            fee_minimum_gas_price=float(config.gas_price.amount),
            fee_denomination=config.gas_price.denom,
            staking_denomination=config.denom
        )

        try:
            ledger = LedgerClient(network)
        except (grpc.RpcError, OSError) as e:
            raise TransportFailure(
                f"Could not connect to {config.rpc_endpoint}: {e}",
                operation="connect",
                context={'rpc_endpoint': config.rpc_endpoint}
            ) from e

        return cls(ledger, wallet)

    async def upload(
        self,
        sender_address: str,
        bytecode: bytes,
        fee: Fee,
        memo: str = ""
    ) -> StoreCodeResult:
        return await asyncio.to_thread(self._upload, sender_address, bytecode, fee, memo)

    async def instantiate(
        self,
        sender_address: str,
        code_id: int,
        init_msg: JSONValue,
        label: str,
        fee_mode: FeeMode = AUTO,
        admin: Optional[str] = None
    ) -> InstantiateResult:
        return await asyncio.to_thread(
            self._instantiate, sender_address, code_id, init_msg, label, fee_mode, admin
        )

    async def execute(
        self,
        sender_address: str,
        contract_address: str,
        msg: JSONValue,
        fee_mode: FeeMode = AUTO,
        memo: str = "",
        funds: Optional[List[Coin]] = None
    ) -> ExecuteResult:
        return await asyncio.to_thread(
            self._execute, sender_address, contract_address, msg, fee_mode, memo, funds or []
        )

    async def query(self, contract_address: str, msg: JSONValue) -> JSONValue:
        return await asyncio.to_thread(self._query, contract_address, msg)

    async def balance(self, address: str, denom: str) -> int:
        """Native token balance of an address"""
        return await asyncio.to_thread(self._balance, address, denom)

    def _upload(self, sender_address: str, bytecode: bytes, fee: Fee, memo: str) -> StoreCodeResult:
        if not bytecode.startswith(_GZIP_MAGIC):
            bytecode = gzip.compress(bytecode, 9)

        msg = MsgStoreCode(sender=sender_address, wasm_byte_code=bytecode)
        submitted = self._broadcast('store_code', sender_address, msg, fee, memo)

        return StoreCodeResult(
            transaction_hash=submitted.tx_hash,
            code_id=submitted.contract_code_id,
            gas_wanted=submitted.response.gas_wanted,
            gas_used=submitted.response.gas_used
        )

    def _instantiate(
        self,
        sender_address: str,
        code_id: int,
        init_msg: JSONValue,
        label: str,
        fee_mode: FeeMode,
        admin: Optional[str]
    ) -> InstantiateResult:
        msg = create_cosmwasm_instantiate_msg(
            code_id=code_id,
            args=init_msg,
            label=label,
            sender_address=Address(sender_address),
            admin_address=Address(admin) if admin else None
        )
        submitted = self._broadcast('instantiate', sender_address, msg, fee_mode, "")
        contract_address = submitted.contract_address

        return InstantiateResult(
            transaction_hash=submitted.tx_hash,
            contract_address=str(contract_address) if contract_address is not None else None,
            gas_wanted=submitted.response.gas_wanted,
            gas_used=submitted.response.gas_used,
            code_id=code_id
        )

    def _execute(
        self,
        sender_address: str,
        contract_address: str,
        msg: JSONValue,
        fee_mode: FeeMode,
        memo: str,
        funds: List[Coin]
    ) -> ExecuteResult:
        execute_msg = create_cosmwasm_execute_msg(
            sender_address=Address(sender_address),
            contract_address=Address(contract_address),
            args=msg,
            funds=",".join(str(coin) for coin in funds) if funds else None
        )
        submitted = self._broadcast('execute', sender_address, execute_msg, fee_mode, memo)
        response = submitted.response

        return ExecuteResult(
            transaction_hash=submitted.tx_hash,
            gas_wanted=response.gas_wanted,
            gas_used=response.gas_used,
            height=response.height,
            raw_log=response.raw_log or ""
        )

    def _query(self, contract_address: str, msg: JSONValue) -> JSONValue:
        request = QuerySmartContractStateRequest(
            address=contract_address,
            query_data=json.dumps(msg).encode("utf-8")
        )

        context = {'contract_address': contract_address}
        try:
            response = self.ledger.wasm.SmartContractState(request)
            return json.loads(response.data)
        except (grpc.RpcError, QueryError, RuntimeError, OSError) as e:
            raise _classify(e, 'query', context) from e
        except ValueError as e:
            raise ChainClientError(
                f"Contract returned a non-JSON response: {e}",
                operation='query',
                context=context
            ) from e

    def _balance(self, address: str, denom: str) -> int:
        try:
            return self.ledger.query_bank_balance(Address(address), denom)
        except (grpc.RpcError, QueryError, RuntimeError, OSError) as e:
            raise _classify(e, 'balance', {'address': address}) from e

    def _broadcast(self, operation: str, sender_address: str, msg: Any, fee_mode: FeeMode, memo: str):
        """Sign, broadcast and wait for inclusion of a single-message transaction"""
        if self.wallet is None:
            raise SignatureFailure("Client has no signer", operation=operation)

        if sender_address != self.signer_address:
            raise SignatureFailure(
                f"Client signs for {self.signer_address}, not {sender_address}",
                operation=operation
            )

        tx = Transaction()
        tx.add_message(msg)

        context = {'sender': sender_address}
        try:
            if isinstance(fee_mode, Fee):
                submitted = self._broadcast_with_fee(tx, fee_mode, memo)
            else:
                submitted = prepare_and_broadcast_basic_transaction(
                    self.ledger,
                    tx,
                    self.wallet,
                    gas_limit=None,
                    memo=memo or None
                )
            logger.debug(f"{operation} broadcast: {submitted.tx_hash}")
            submitted.wait_to_complete()
        except BroadcastError as e:
            context['transaction_hash'] = getattr(e, 'tx_hash', None)
            raise _rejection(getattr(e, 'message', None) or str(e), operation, context) from e
        except QueryTimeoutError as e:
            context['hint'] = "Check chain state before resubmitting"
            raise TransportFailure(
                f"Timed out waiting for inclusion: {e}",
                operation=operation,
                context=context
            ) from e
        except (grpc.RpcError, QueryError, RuntimeError, OSError) as e:
            raise _classify(e, operation, context) from e

        return submitted

    def _broadcast_with_fee(self, tx: Transaction, fee: Fee, memo: str):
        """Seal with exactly the given fee; no simulation, no re-estimated amount"""
        account = self.ledger.query_account(self.wallet.address())

        tx.seal(
            SigningCfg.direct(self.wallet.public_key(), account.sequence),
            fee=str(fee.amount),
            gas_limit=fee.gas_limit,
            memo=memo or None
        )
        tx.sign(self.wallet.signer(), self.ledger.network_config.chain_id, account.number)
        tx.complete()

        return self.ledger.broadcast_tx(tx)


def _classify(error: Exception, operation: str, context: Dict[str, Any]) -> ChainClientError:
    """Map a library exception onto the client error taxonomy"""
    if isinstance(error, grpc.RpcError):
        code = error.code() if hasattr(error, 'code') else None
        details = error.details() if hasattr(error, 'details') else str(error)
        if code in _TRANSPORT_CODES:
            return TransportFailure(details or str(code), operation=operation, context=context)
        return _rejection(details or str(error), operation, context)

    if isinstance(error, OSError):
        return TransportFailure(str(error), operation=operation, context=context)

    return _rejection(str(error), operation, context)


def _rejection(message: str, operation: str, context: Dict[str, Any]) -> ChainRejection:
    """Refine a chain rejection into ContractRejected when the contract itself failed"""
    if "wasm contract failed" in message:
        return ContractRejected(
            extract_contract_error(message),
            operation=operation,
            context=context,
            tx_hash=context.get('transaction_hash')
        )
    return ChainRejection(
        message,
        operation=operation,
        context=context,
        tx_hash=context.get('transaction_hash')
    )
