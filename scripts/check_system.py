"""
System Check Script
Verifies configuration, wallets and chain connectivity before a contract setup run

Usage: python -m scripts.check_system [wasm_contract_name]
"""

import asyncio
import os
import sys
from loguru import logger

from blockchain.errors import ContractSetupError
from utils.artifacts import ArtifactStore
from utils.config import load_chain_config
from utils.log_config import configure_logging
from wallet.session import open_session


def check_environment_variables():
    """Check if the mnemonics are set"""
    logger.info("Checking environment variables...")

    missing = [var for var in ('DEPLOYER_MNEMONIC', 'TESTER_MNEMONIC') if not os.getenv(var)]

    if missing:
        logger.error(f"Missing environment variables: {', '.join(missing)}")
        return False

    logger.success("✓ All environment variables set")
    return True


def check_chain_config():
    """Check that the selected chain profile loads"""
    logger.info("Checking chain configuration...")

    try:
        config = load_chain_config(require_mnemonics=False)
    except ContractSetupError as e:
        logger.error(f"  ✗ {e.message}")
        return False

    logger.success(f"  ✓ {config.name}: {config.chain_id}, gas price {config.gas_price}")
    return True


def check_artifact(contract_name):
    """Check that the contract artifact exists"""
    logger.info("Checking contract artifact...")

    if not contract_name:
        logger.info("  No contract name given - skipping")
        return True

    try:
        store = ArtifactStore(load_chain_config(require_mnemonics=False).artifacts_folder)
    except ContractSetupError as e:
        logger.error(f"  ✗ {e.message}")
        return False

    if not store.exists(contract_name):
        logger.error(f"  ✗ {store.path_for(contract_name)} not found")
        return False

    logger.success(f"  ✓ {store.path_for(contract_name)}")
    return True


async def check_wallet_balances():
    """Derive both accounts and check their native balances"""
    logger.info("Checking wallet balances...")

    try:
        config = load_chain_config()
        session = open_session(config)
    except ContractSetupError as e:
        logger.error(f"  ✗ {e.message}")
        return False

    ok = True
    for account in (session.deployer, session.tester):
        try:
            balance = await account.client.balance(account.address, config.denom)
        except ContractSetupError as e:
            logger.error(f"  ✗ {account.role}: {e.message}")
            ok = False
            continue

        logger.info(f"  {account.role.capitalize()}: {balance} {config.denom}")

        if balance <= 0:
            logger.warning(f"  ⚠ {account.role.capitalize()} has no funds for fees")

    return ok


def main():
    """Run all system checks"""
    configure_logging(log_file=None)
    contract_name = sys.argv[1] if len(sys.argv) > 1 else None

    logger.info("=" * 70)
    logger.info("Contract Setup System Check")
    logger.info("=" * 70)

    checks = [
        ("Environment Variables", check_environment_variables),
        ("Chain Configuration", check_chain_config),
        ("Contract Artifact", lambda: check_artifact(contract_name)),
        ("Wallet Balances", lambda: asyncio.run(check_wallet_balances()))
    ]

    results = []

    for name, check_func in checks:
        logger.info("")
        try:
            result = check_func()
            results.append((name, result))
        except Exception as e:
            logger.error(f"Error in {name}: {e}")
            results.append((name, False))

    # Summary
    logger.info("")
    logger.info("=" * 70)
    logger.info("Summary")
    logger.info("=" * 70)

    passed = sum(1 for _, result in results if result)
    total = len(results)

    for name, result in results:
        status = "✓ PASS" if result else "✗ FAIL"
        logger.info(f"  {status}: {name}")

    logger.info("")
    logger.info(f"Total: {passed}/{total} checks passed")

    if passed == total:
        logger.success("=" * 70)
        logger.success("✅ Ready for contract setup")
        logger.success("=" * 70)
        logger.info("Deploy: python main.py <wasm_contract_name>")
        return 0
    else:
        logger.error("=" * 70)
        logger.error("❌ Not ready - fix issues above")
        logger.error("=" * 70)
        return 1


if __name__ == "__main__":
    sys.exit(main())
