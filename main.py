"""
Contract Setup - Main Entry Point
Stores a compiled CosmWasm contract and instantiates it

Usage: python main.py <wasm_contract_name>
"""

import argparse
import asyncio
import sys
from typing import List, Optional
from loguru import logger

from blockchain.contract_manager import DeploymentOrchestrator
from blockchain.errors import ContractSetupError, InstantiateFailure, InvalidResponse, failure_summary
from blockchain.types import DeploymentResult, DeploymentStage
from utils.artifacts import ArtifactStore
from utils.config import load_chain_config, load_instantiate_msg
from utils.log_config import configure_logging
from wallet.session import open_session


class ContractSetupRunner:
    """Runs the store + instantiate pipeline for one contract artifact"""

    def __init__(self, contract_name: str, session_factory=open_session, config_loader=load_chain_config):
        """
        Initialize runner

        Args:
            contract_name: Artifact name under the artifacts folder
            session_factory: Builds the Session from a ChainConfig
            config_loader: Loads the ChainConfig
        """
        self.contract_name = contract_name
        self.session_factory = session_factory
        self.config_loader = config_loader
        self.result: Optional[DeploymentResult] = None
        self.stage = DeploymentStage.IDLE

    async def start(self) -> int:
        """
        Run the pipeline

        Returns:
            Process exit status
        """
        logger.info("=" * 70)
        logger.info(f"Contract setup: {self.contract_name}")
        logger.info("=" * 70)

        try:
            config = self.config_loader()
            bytecode = ArtifactStore(config.artifacts_folder).read(self.contract_name)
            init_msg = load_instantiate_msg(self.contract_name)

            session = self.session_factory(config)
            self.stage = DeploymentStage.IDENTITIES_ESTABLISHED
            orchestrator = DeploymentOrchestrator(session)

            self.result = await orchestrator.deploy(
                bytecode,
                init_msg,
                label=f"{self.contract_name} instantiation"
            )
            self.stage = self.result.stage

        except ContractSetupError as e:
            if e.stage is not None:
                self.stage = e.stage
            self._report_failure(e)
            return 1
        except Exception as e:
            logger.opt(exception=True).error(f"Fatal error: {e}")
            return 1

        logger.info("=" * 70)
        logger.success(f"Code id: {self.result.code_id}")
        logger.success(f"Contract address: {self.result.contract_address}")
        logger.info("=" * 70)
        return 0

    def _report_failure(self, error: ContractSetupError):
        """Log which step failed and how to resume"""
        logger.error("=" * 70)
        for line in error.report_lines():
            logger.error(line)
        logger.error(f"Pipeline halted at stage: {self.stage.value}")

        code_id = error.context.get('code_id')
        if isinstance(error, (InstantiateFailure, InvalidResponse)) and code_id:
            logger.warning(
                f"Code {code_id} is stored on chain. Resume with: "
                f"python -m scripts.instantiate_contract {self.contract_name} {code_id}"
            )

        logger.debug(f"Failure detail: {failure_summary(error)}")
        logger.error("=" * 70)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="main.py",
        description="Store and instantiate a CosmWasm contract"
    )
    parser.add_argument('contract_name', help="wasm artifact name without the .wasm suffix")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = parse_args(argv)
    configure_logging()

    runner = ContractSetupRunner(args.contract_name)
    return asyncio.run(runner.start())


if __name__ == "__main__":
    sys.exit(main())
