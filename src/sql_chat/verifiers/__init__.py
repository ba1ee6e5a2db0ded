"""
Verifiers Module
================

Last-mile verification chain gating statements before execution.
"""

from sql_chat.verifiers.base import Verifier, VerificationChain
from sql_chat.verifiers.read_only import ReadOnlyVerifier
from sql_chat.verifiers.statement import SingleStatementVerifier

__all__ = [
    "Verifier",
    "VerificationChain",
    "ReadOnlyVerifier",
    "SingleStatementVerifier",
]
