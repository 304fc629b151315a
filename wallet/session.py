"""
Session
Context built once at startup and passed to every pipeline step
"""

from dataclasses import dataclass
from typing import Optional
from loguru import logger

from utils.config import ChainConfig
from utils.gas_calculator import GasCalculator
from .wallet_manager import DEPLOYER, TESTER, Account, WalletManager


@dataclass(frozen=True)
class Session:
    config: ChainConfig
    gas_calculator: GasCalculator
    deployer: Account
    tester: Account

    @property
    def native_denom(self) -> str:
        return self.config.denom


def open_session(config: ChainConfig, wallet_manager: Optional[WalletManager] = None) -> Session:
    """
    Establish both identities for a run

    Args:
        config: Chain configuration
        wallet_manager: Account builder (default: cosmpy-backed)

    Returns:
        Session instance
    """
    wallet_manager = wallet_manager or WalletManager(config)

    deployer = wallet_manager.open_account(DEPLOYER)
    tester = wallet_manager.open_account(TESTER)

    logger.info(f"Session opened on {config.chain_id} (gas price {config.gas_price})")

    return Session(
        config=config,
        gas_calculator=GasCalculator(config.gas_price),
        deployer=deployer,
        tester=tester
    )
