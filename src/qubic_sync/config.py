"""
Global configuration for the node sync tooling.

This module contains environment-specific settings that apply across all components.
"""

import os

_SUPPORTED_NETWORKS: list[str] = ["mainnet", "testnet"]

QUBIC_NETWORK = os.environ.get("QUBIC_NETWORK", "mainnet").lower()
"""The network flag ('mainnet' or 'testnet'). Testnet nodes run without epoch snapshots."""

if QUBIC_NETWORK not in _SUPPORTED_NETWORKS:
    raise ValueError(
        f"Invalid QUBIC_NETWORK environment variable: '{QUBIC_NETWORK}'. "
        f"Supported values: {_SUPPORTED_NETWORKS}"
    )
