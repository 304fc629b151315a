"""
Shared fixtures: chain config, chain client doubles and a ready session
"""

from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import pytest
from loguru import logger

from blockchain.chain_client import ChainClient
from blockchain.contract_manager import DeploymentOrchestrator
from blockchain.types import ExecuteResult, InstantiateResult, StoreCodeResult
from utils.config import ChainConfig
from utils.gas_calculator import GasCalculator, GasPrice
from wallet.session import Session
from wallet.wallet_manager import Account

DEPLOYER_ADDRESS = "aura1deployer0000000000000000000000000000"
TESTER_ADDRESS = "aura1tester00000000000000000000000000000"


def make_client(address=None):
    """Chain client double with successful default responses"""
    client = Mock(spec=ChainClient)
    client.signer_address = address
    client.upload = AsyncMock(return_value=StoreCodeResult("H1", 42, 1500000, 1200000))
    client.instantiate = AsyncMock(return_value=InstantiateResult("H2", "addr1", 250000, 210000))
    client.execute = AsyncMock(return_value=ExecuteResult("H3", 180000, 150000, 1024))
    client.query = AsyncMock(return_value={"count": 1})
    return client


@pytest.fixture
def chain_config(tmp_path):
    """Local chain configuration"""
    return ChainConfig(
        name="local",
        chain_id="aura-testnet",
        rpc_endpoint="grpc+http://127.0.0.1:9090",
        prefix="aura",
        denom="uaura",
        gas_price=GasPrice(amount=Decimal("0.025"), denom="uaura"),
        deployer_mnemonic="deployer mnemonic words",
        tester_mnemonic="tester mnemonic words",
        artifacts_folder=str(tmp_path / "artifacts")
    )


@pytest.fixture
def deployer_client():
    return make_client(DEPLOYER_ADDRESS)


@pytest.fixture
def tester_client():
    return make_client(TESTER_ADDRESS)


@pytest.fixture
def session(chain_config, deployer_client, tester_client):
    """Session with both accounts backed by client doubles"""
    return Session(
        config=chain_config,
        gas_calculator=GasCalculator(chain_config.gas_price),
        deployer=Account(role="deployer", address=DEPLOYER_ADDRESS, client=deployer_client),
        tester=Account(role="tester", address=TESTER_ADDRESS, client=tester_client)
    )


@pytest.fixture
def orchestrator(session):
    return DeploymentOrchestrator(session)


@pytest.fixture
def log_messages():
    """Capture loguru output"""
    messages = []
    handler_id = logger.add(messages.append, format="{message}", level="DEBUG")
    yield messages
    logger.remove(handler_id)
