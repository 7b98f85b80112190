"""wallet-core: transactional payment transfers between ledger accounts."""

__version__ = "0.1.0"
