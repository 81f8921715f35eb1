"""
DePIN ledger: device registry, telemetry submissions and rewards
"""
__version__ = "0.1.0"
