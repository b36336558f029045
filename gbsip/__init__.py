"""SIP messages, headers, transactions, digest auth and media-server helpers for GB/T 28181."""

__version__ = "0.1.0"