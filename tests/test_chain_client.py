"""
Tests for the cosmpy-backed chain client, with the ledger mocked out
"""

import gzip
import json
from decimal import Decimal

import grpc
import pytest
from unittest.mock import Mock, patch

from cosmpy.aerial.exceptions import BroadcastError, QueryTimeoutError

from blockchain.chain_client import CosmWasmChainClient
from blockchain.errors import (
    ChainClientError,
    ChainRejection,
    ContractRejected,
    SignatureFailure,
    TransportFailure
)
from blockchain.types import Coin
from utils.gas_calculator import AUTO, GasCalculator, GasPrice

SIGNER = "aura1signer"


class FakeRpcError(grpc.RpcError):

    def __init__(self, code, details):
        self._code = code
        self._details = details

    def code(self):
        return self._code

    def details(self):
        return self._details


def submitted_tx(code_id=None, contract_address=None):
    submitted = Mock()
    submitted.tx_hash = "HASH"
    submitted.contract_code_id = code_id
    submitted.contract_address = contract_address
    submitted.response = Mock(gas_wanted=200000, gas_used=150000, height=77, raw_log="[]")
    submitted.wait_to_complete.return_value = submitted
    return submitted


@pytest.fixture
def wallet():
    wallet = Mock()
    wallet.address.return_value = SIGNER
    return wallet


@pytest.fixture
def client(wallet):
    return CosmWasmChainClient(Mock(), wallet)


@pytest.fixture
def upload_fee():
    return GasCalculator(GasPrice.from_string("0.025uaura")).upload_fee()


class TestSigning:

    @pytest.mark.asyncio
    async def test_query_only_client_cannot_sign(self, upload_fee):
        client = CosmWasmChainClient(Mock())

        assert client.signer_address is None
        with pytest.raises(SignatureFailure):
            await client.upload(SIGNER, b"\x00asm", upload_fee)

    @pytest.mark.asyncio
    async def test_sender_must_match_wallet(self, client, upload_fee):
        with pytest.raises(SignatureFailure):
            await client.upload("aura1someoneelse", b"\x00asm", upload_fee)


@pytest.fixture
def cosmpy_stubs():
    """Stub out message construction so fake addresses pass through"""
    with patch("blockchain.chain_client.Address", side_effect=lambda value: value), \
            patch("blockchain.chain_client.Transaction") as transaction, \
            patch("blockchain.chain_client.SigningCfg"), \
            patch("blockchain.chain_client.MsgStoreCode") as store_msg, \
            patch("blockchain.chain_client.create_cosmwasm_instantiate_msg") as instantiate_msg, \
            patch("blockchain.chain_client.create_cosmwasm_execute_msg") as execute_msg:
        yield {
            "transaction": transaction,
            "store": store_msg,
            "instantiate": instantiate_msg,
            "execute": execute_msg
        }


@pytest.mark.usefixtures("cosmpy_stubs")
class TestBroadcast:

    @pytest.mark.asyncio
    async def test_upload(self, client, upload_fee, cosmpy_stubs):
        client.ledger.broadcast_tx.return_value = submitted_tx(code_id=7)
        with patch("blockchain.chain_client.prepare_and_broadcast_basic_transaction") as auto_broadcast:
            result = await client.upload(SIGNER, b"\x00asm", upload_fee, "Upload contract code")

        assert result.code_id == 7
        assert result.transaction_hash == "HASH"
        assert result.gas_wanted == 200000
        auto_broadcast.assert_not_called()

        tx = cosmpy_stubs["transaction"].return_value
        seal_kwargs = tx.seal.call_args.kwargs
        assert seal_kwargs["fee"] == "75000uaura"
        assert seal_kwargs["gas_limit"] == 3_000_000
        assert seal_kwargs["memo"] == "Upload contract code"
        tx.sign.assert_called_once()
        client.ledger.broadcast_tx.assert_called_once_with(tx)

        store_kwargs = cosmpy_stubs["store"].call_args.kwargs
        assert store_kwargs["sender"] == SIGNER
        assert gzip.decompress(store_kwargs["wasm_byte_code"]) == b"\x00asm"
        tx.add_message.assert_called_once_with(cosmpy_stubs["store"].return_value)

    @pytest.mark.asyncio
    async def test_upload_sends_calculated_fee_exactly(self, client, cosmpy_stubs):
        """The rounded-up fee is sent as is, never re-estimated from a float price"""
        fee = GasCalculator(GasPrice(Decimal("0.00001"), "uaura")).upload_fee()
        client.ledger.broadcast_tx.return_value = submitted_tx(code_id=7)

        await client.upload(SIGNER, b"\x00asm", fee)

        tx = cosmpy_stubs["transaction"].return_value
        assert tx.seal.call_args.kwargs["fee"] == "30uaura"

    @pytest.mark.asyncio
    async def test_instantiate_auto_fee(self, client):
        with patch("blockchain.chain_client.prepare_and_broadcast_basic_transaction",
                   return_value=submitted_tx(contract_address="aura1contract")) as broadcast:
            result = await client.instantiate(SIGNER, 7, {"count": 0}, "counter", AUTO)

        assert result.contract_address == "aura1contract"
        assert result.code_id == 7
        assert broadcast.call_args.kwargs["gas_limit"] is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("funds, expected", [
        ([], None),
        ([Coin(500, "uaura")], "500uaura"),
    ])
    async def test_execute_funds(self, client, funds, expected, cosmpy_stubs):
        create_msg = cosmpy_stubs["execute"]
        with patch("blockchain.chain_client.prepare_and_broadcast_basic_transaction",
                   return_value=submitted_tx()):
            result = await client.execute(SIGNER, "aura1contract", {"increment": {}}, AUTO, "memo", funds)

        assert create_msg.call_args.kwargs["funds"] == expected
        assert result.height == 77

    @pytest.mark.asyncio
    async def test_contract_failure_is_contract_rejected(self, client):
        error = BroadcastError(
            "HASH",
            "failed to execute message; message index: 0: Unauthorized: execute wasm contract failed"
        )
        with patch("blockchain.chain_client.prepare_and_broadcast_basic_transaction", side_effect=error):
            with pytest.raises(ContractRejected) as exc_info:
                await client.execute(SIGNER, "aura1contract", {"withdraw": {}})

        assert exc_info.value.error_message == "Unauthorized"
        assert exc_info.value.operation == "execute"

    @pytest.mark.asyncio
    async def test_simulation_rejection(self, client):
        error = FakeRpcError(grpc.StatusCode.INVALID_ARGUMENT, "insufficient fees")
        with patch("blockchain.chain_client.prepare_and_broadcast_basic_transaction", side_effect=error):
            with pytest.raises(ChainRejection) as exc_info:
                await client.instantiate(SIGNER, 7, {}, "label")

        assert not isinstance(exc_info.value, ContractRejected)
        assert exc_info.value.message == "insufficient fees"

    @pytest.mark.asyncio
    async def test_unavailable_node_is_transport_failure(self, client):
        error = FakeRpcError(grpc.StatusCode.UNAVAILABLE, "failed to connect to all addresses")
        with patch("blockchain.chain_client.prepare_and_broadcast_basic_transaction", side_effect=error):
            with pytest.raises(TransportFailure):
                await client.instantiate(SIGNER, 7, {}, "label")

    @pytest.mark.asyncio
    async def test_confirmation_timeout_is_transport_failure(self, client, upload_fee):
        submitted = submitted_tx()
        submitted.wait_to_complete.side_effect = QueryTimeoutError()
        client.ledger.broadcast_tx.return_value = submitted

        with pytest.raises(TransportFailure) as exc_info:
            await client.upload(SIGNER, b"\x00asm", upload_fee)

        assert "hint" in exc_info.value.context


class TestQuery:

    @pytest.mark.asyncio
    async def test_query_without_wallet(self):
        ledger = Mock()
        ledger.wasm.SmartContractState.return_value = Mock(data=b'{"count": 3}')
        client = CosmWasmChainClient(ledger)

        response = await client.query("aura1contract", {"get_count": {}})

        assert response == {"count": 3}
        request = ledger.wasm.SmartContractState.call_args.args[0]
        assert request.address == "aura1contract"
        assert json.loads(request.query_data) == {"get_count": {}}

    @pytest.mark.asyncio
    async def test_missing_contract(self):
        ledger = Mock()
        ledger.wasm.SmartContractState.side_effect = FakeRpcError(
            grpc.StatusCode.NOT_FOUND, "no such contract"
        )

        with pytest.raises(ChainRejection):
            await CosmWasmChainClient(ledger).query("aura1missing", {})

    @pytest.mark.asyncio
    async def test_non_json_response(self):
        ledger = Mock()
        ledger.wasm.SmartContractState.return_value = Mock(data=b"<html>bad gateway</html>")

        with pytest.raises(ChainClientError) as exc_info:
            await CosmWasmChainClient(ledger).query("aura1contract", {"get_count": {}})

        assert exc_info.value.operation == "query"
        assert exc_info.value.context["contract_address"] == "aura1contract"
