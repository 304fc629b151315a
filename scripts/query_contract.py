"""
Query Script
Runs a read-only smart query; no mnemonic is needed

Usage: python -m scripts.query_contract <contract_address> '<json_msg>'
"""

import argparse
import asyncio
import json
import sys
from loguru import logger

from blockchain.contract_manager import run_query
from blockchain.errors import ContractSetupError
from utils.config import load_chain_config
from utils.log_config import configure_logging
from wallet.wallet_manager import WalletManager
from .execute_contract import json_message


async def query_contract(contract_address: str, msg) -> int:
    try:
        config = load_chain_config(require_mnemonics=False)
        client = WalletManager(config).query_client()

        response = await run_query(client, contract_address, msg)
    except ContractSetupError as e:
        for line in e.report_lines():
            logger.error(line)
        return 1

    print(json.dumps(response, indent=2, sort_keys=True))
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="query_contract",
        description="Query a CosmWasm contract"
    )
    parser.add_argument('contract_address')
    parser.add_argument('msg', type=json_message, help="query message as JSON")
    args = parser.parse_args(argv)

    configure_logging()
    return asyncio.run(query_contract(args.contract_address, args.msg))


if __name__ == "__main__":
    sys.exit(main())
