"""
Wallet Manager
Handles the dual account system (deployer + tester)
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple
from loguru import logger
from cosmpy.aerial.wallet import LocalWallet

from blockchain.chain_client import ChainClient, CosmWasmChainClient
from blockchain.errors import SignatureFailure
from utils.config import ChainConfig

DEPLOYER = 'deployer'
TESTER = 'tester'


class SignerProvider:
    """Derives signing wallets from mnemonics"""

    def from_secret(self, secret: str, prefix: str) -> Tuple[LocalWallet, str]:
        """
        Derive a wallet and its address

        Args:
            secret: BIP-39 mnemonic
            prefix: Bech32 address prefix of the chain

        Returns:
            (wallet, address) - the same secret always yields the same address
        """
        try:
            wallet = LocalWallet.from_mnemonic(secret, prefix=prefix)
        except Exception as e:
            raise SignatureFailure(f"Could not derive wallet: {e}", operation="wallet") from e

        return wallet, str(wallet.address())


@dataclass(frozen=True)
class Account:
    """A signing identity paired with the client that signs for it"""

    role: str
    address: str
    client: ChainClient = field(repr=False, compare=False)
    signer: Any = field(default=None, repr=False, compare=False)


ClientFactory = Callable[[ChainConfig, Any], ChainClient]


class WalletManager:
    """
    Builds the two accounts used for contract setup:
    - Deployer: stores code and instantiates contracts
    - Tester: executes and queries as a separate user
    """

    def __init__(
        self,
        config: ChainConfig,
        signer_provider: Optional[SignerProvider] = None,
        client_factory: Optional[ClientFactory] = None
    ):
        """
        Initialize wallet manager

        Args:
            config: Chain configuration holding both mnemonics
            signer_provider: Wallet derivation (default: cosmpy LocalWallet)
            client_factory: Builds a signing client for a wallet
        """
        self.config = config
        self.signer_provider = signer_provider or SignerProvider()
        self.client_factory = client_factory or CosmWasmChainClient.connect

    def open_account(self, role: str) -> Account:
        """
        Derive an account and connect its client

        Args:
            role: 'deployer' or 'tester'

        Returns:
            Account instance
        """
        if role == DEPLOYER:
            mnemonic = self.config.deployer_mnemonic
        elif role == TESTER:
            mnemonic = self.config.tester_mnemonic
        else:
            raise ValueError(f"Invalid account role: {role}")

        signer, address = self.signer_provider.from_secret(mnemonic, self.config.prefix)
        client = self.client_factory(self.config, signer)

        logger.info(f"{role.capitalize()} account: {address}")
        return Account(role=role, address=address, client=client, signer=signer)

    def query_client(self) -> ChainClient:
        """Client without a signer, for read-only queries"""
        return self.client_factory(self.config, None)
