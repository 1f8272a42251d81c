"""solctl — interactive wallet, stake, and vote account control for Solana."""

__version__ = "0.3.0"
