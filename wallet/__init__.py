"""
Wallet Package
Account derivation and the per-run session context
"""

from .wallet_manager import Account, SignerProvider, WalletManager
from .session import Session, open_session

__all__ = ['Account', 'SignerProvider', 'WalletManager', 'Session', 'open_session']
