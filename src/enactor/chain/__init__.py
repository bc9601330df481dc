"""
Chain - On-chain interaction layer for Enactor.

Provides the JSON-RPC client, ABI helpers, and the transactor (signing
handle) that contract-interaction code sends its transactions through.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
