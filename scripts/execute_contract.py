"""
Execute Script
Sends an execute message to a live contract as the deployer or tester account

Usage: python -m scripts.execute_contract <contract_address> '<json_msg>' [--as tester] [--amount N] [--denom D]
"""

import argparse
import asyncio
import json
import sys
from loguru import logger

from blockchain.contract_manager import DeploymentOrchestrator
from blockchain.errors import ContractSetupError, ExecuteFailure
from utils.config import load_chain_config
from utils.log_config import configure_logging
from wallet.session import open_session
from wallet.wallet_manager import DEPLOYER, TESTER


def json_message(value: str):
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON message: {e}")


def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return number


async def execute_contract(args: argparse.Namespace) -> int:
    try:
        session = open_session(load_chain_config())
        orchestrator = DeploymentOrchestrator(session)
        account = session.tester if args.role == TESTER else session.deployer

        receipt = await orchestrator.execute(
            account,
            args.contract_address,
            args.msg,
            native_amount=args.amount,
            native_denom=args.denom
        )
    except ExecuteFailure as e:
        if e.rejected:
            logger.error(f"Contract rejected the message: {e.cause.message}")
        for line in e.report_lines():
            logger.error(line)
        return 1
    except ContractSetupError as e:
        for line in e.report_lines():
            logger.error(line)
        return 1

    logger.success(f"Executed in {receipt.transaction_hash} (height {receipt.height})")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="execute_contract",
        description="Execute a message on a CosmWasm contract"
    )
    parser.add_argument('contract_address')
    parser.add_argument('msg', type=json_message, help="execute message as JSON")
    parser.add_argument('--as', dest='role', choices=[DEPLOYER, TESTER], default=TESTER)
    parser.add_argument('--amount', type=non_negative_int, default=0, help="native tokens to attach")
    parser.add_argument('--denom', default=None, help="denomination of attached tokens")
    args = parser.parse_args(argv)

    configure_logging()
    return asyncio.run(execute_contract(args))


if __name__ == "__main__":
    sys.exit(main())
