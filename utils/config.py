"""
Chain Configuration
Loads the chain profile from config/chain_config.json and secrets from .env
"""

import os
import json
from dataclasses import dataclass
from typing import Dict, Optional
from loguru import logger
from dotenv import load_dotenv

from blockchain.errors import ConfigError
from blockchain.types import JSONValue
from utils.gas_calculator import GasPrice

load_dotenv()

DEFAULT_CONFIG_PATH = "config/chain_config.json"
DEFAULT_INSTANTIATE_MSGS_PATH = "config/instantiate_msgs.json"
DEFAULT_GAS_PRICE_AMOUNT = "0.025"

REQUIRED_CHAIN_FIELDS = ('chain_id', 'rpc_endpoint', 'prefix', 'denom')


@dataclass(frozen=True)
class ChainConfig:
    """Immutable chain settings, loaded once at startup"""

    name: str
    chain_id: str
    rpc_endpoint: str
    prefix: str
    denom: str
    gas_price: GasPrice
    deployer_mnemonic: str
    tester_mnemonic: str
    artifacts_folder: str = "artifacts"

    def __repr__(self) -> str:
        # Mnemonics stay out of logs
        return (
            f"ChainConfig(name={self.name!r}, chain_id={self.chain_id!r}, "
            f"rpc_endpoint={self.rpc_endpoint!r}, prefix={self.prefix!r}, "
            f"denom={self.denom!r}, gas_price='{self.gas_price}')"
        )


def _read_json(path: str) -> Dict:
    if not os.path.exists(path):
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, 'r') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}")


def load_chain_config(
    config_path: Optional[str] = None,
    chain_name: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
    require_mnemonics: bool = True
) -> ChainConfig:
    """
    Load chain configuration

    Args:
        config_path: Path to chain config JSON (default: CHAIN_CONFIG_PATH or config/chain_config.json)
        chain_name: Chain profile to use (default: CHAIN_NAME or the file's default_chain)
        env: Environment mapping (default: os.environ)
        require_mnemonics: Fail when DEPLOYER_MNEMONIC or TESTER_MNEMONIC is unset

    Returns:
        ChainConfig instance
    """
    env = os.environ if env is None else env

    config_path = config_path or env.get('CHAIN_CONFIG_PATH') or DEFAULT_CONFIG_PATH
    data = _read_json(config_path)

    chains = data.get('chains') or {}
    chain_name = chain_name or env.get('CHAIN_NAME') or data.get('default_chain')

    if not chain_name:
        raise ConfigError("No chain selected: set CHAIN_NAME or default_chain")

    if chain_name not in chains:
        raise ConfigError(
            f"Unknown chain '{chain_name}'. Available: {', '.join(sorted(chains)) or 'none'}"
        )

    chain = chains[chain_name]

    missing = [field for field in REQUIRED_CHAIN_FIELDS if not chain.get(field)]
    if missing:
        raise ConfigError(f"Chain '{chain_name}' is missing: {', '.join(missing)}")

    raw_gas_price = chain.get('gas_price')
    if not raw_gas_price:
        raw_gas_price = f"{DEFAULT_GAS_PRICE_AMOUNT}{chain['denom']}"
        logger.warning(f"No gas_price for '{chain_name}', using {raw_gas_price}")
    gas_price = GasPrice.from_string(raw_gas_price)

    deployer_mnemonic = env.get('DEPLOYER_MNEMONIC')
    tester_mnemonic = env.get('TESTER_MNEMONIC')

    missing_secrets = [
        name for name, value in (
            ('DEPLOYER_MNEMONIC', deployer_mnemonic),
            ('TESTER_MNEMONIC', tester_mnemonic)
        )
        if not value
    ]
    if missing_secrets and require_mnemonics:
        raise ConfigError(f"{' and '.join(missing_secrets)} must be set in .env")

    config = ChainConfig(
        name=chain_name,
        chain_id=chain['chain_id'],
        rpc_endpoint=chain['rpc_endpoint'],
        prefix=chain['prefix'],
        denom=chain['denom'],
        gas_price=gas_price,
        deployer_mnemonic=(deployer_mnemonic or "").strip(),
        tester_mnemonic=(tester_mnemonic or "").strip(),
        artifacts_folder=env.get('ARTIFACTS_FOLDER') or data.get('artifacts_folder', 'artifacts')
    )

    logger.info(f"Loaded chain '{config.name}' ({config.chain_id}) at {config.rpc_endpoint}")
    return config


def load_instantiate_msg(
    contract_name: str,
    path: str = DEFAULT_INSTANTIATE_MSGS_PATH
) -> JSONValue:
    """
    Load the instantiate message for a contract

    Args:
        contract_name: Contract artifact name
        path: JSON file mapping contract names to instantiate messages

    Returns:
        The instantiate message (empty object when none is configured)
    """
    if not os.path.exists(path):
        logger.warning(f"{path} not found - instantiating '{contract_name}' with {{}}")
        return {}

    messages = _read_json(path)

    if contract_name not in messages:
        logger.warning(f"No instantiate message for '{contract_name}' - using {{}}")
        return {}

    return messages[contract_name]
