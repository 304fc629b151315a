"""
Artifact Store
Resolves compiled contract names to wasm bytecode
"""

import os
from loguru import logger

from blockchain.errors import ConfigError


class ArtifactStore:
    """Reads <folder>/<name>.wasm files produced by the contract build"""

    def __init__(self, folder: str = "artifacts"):
        self.folder = folder

    def path_for(self, contract_name: str) -> str:
        return os.path.join(self.folder, f"{contract_name}.wasm")

    def exists(self, contract_name: str) -> bool:
        return os.path.isfile(self.path_for(contract_name))

    def read(self, contract_name: str) -> bytes:
        """
        Read contract bytecode

        Args:
            contract_name: Artifact name without the .wasm suffix

        Returns:
            Raw wasm bytes
        """
        path = self.path_for(contract_name)

        if not os.path.isfile(path):
            raise ConfigError(
                f"Contract artifact not found: {path}",
                context={'hint': "Run the contract optimizer build first"}
            )

        with open(path, 'rb') as f:
            bytecode = f.read()

        logger.debug(f"Read {len(bytecode)} bytes from {path}")
        return bytecode
