"""
Signing - local keys and the signers handed to transactors.
"""
