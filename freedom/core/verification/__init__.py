# freedom/core/verification/__init__.py
"""
Домен верификации исполнителей.
"""

from freedom.core.verification.models import VerificationRequest, VerificationStatus
from freedom.core.verification.queue import VerificationQueue

__all__ = [
    "VerificationRequest",
    "VerificationStatus",
    "VerificationQueue",
]
