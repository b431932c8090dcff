"""
Flash-loan arbitrage engine for Futarchy conditional markets.

Reads a proposal's four outcome tokens and the pools that price them,
decides whether a SPOT_SPLIT or MERGE_SPOT cycle is profitable and runs it
atomically against either simulated venues or the deployed arbitrage contract.
"""

__version__ = "0.1.0"
