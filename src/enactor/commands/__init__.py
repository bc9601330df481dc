"""
Commands - top-level CLI commands for Enactor.

- run:   Capture a changeset file and enact it (send or propose)
- nonce: Show the deployer's pending nonce on a network
"""
