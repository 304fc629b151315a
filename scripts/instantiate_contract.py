"""
Instantiate Script
Instantiates already-stored code, for resuming a setup whose instantiate step failed

Usage: python -m scripts.instantiate_contract <wasm_contract_name> <code_id>
"""

import argparse
import asyncio
import sys
from loguru import logger

from blockchain.contract_manager import DeploymentOrchestrator
from blockchain.errors import ContractSetupError
from utils.config import load_chain_config, load_instantiate_msg
from utils.log_config import configure_logging
from wallet.session import open_session


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


async def instantiate_contract(contract_name: str, code_id: int) -> int:
    """Instantiate a known code id with the configured instantiate message"""
    try:
        config = load_chain_config()
        session = open_session(config)
        orchestrator = DeploymentOrchestrator(session)

        result = await orchestrator.instantiate(
            code_id,
            load_instantiate_msg(contract_name),
            label=f"{contract_name} instantiation"
        )
    except ContractSetupError as e:
        for line in e.report_lines():
            logger.error(line)
        return 1

    logger.success(f"Contract address: {result.contract_address}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="instantiate_contract",
        description="Instantiate stored CosmWasm code"
    )
    parser.add_argument('contract_name', help="name used to look up the instantiate message")
    parser.add_argument('code_id', type=positive_int, help="code id returned by a previous upload")
    args = parser.parse_args(argv)

    configure_logging()
    return asyncio.run(instantiate_contract(args.contract_name, args.code_id))


if __name__ == "__main__":
    sys.exit(main())
