"""
Claim Status Definitions

Defines the closed set of statuses a claim can hold.
"""
from enum import Enum


class ClaimStatus(str, Enum):
    """
    Enum representing the possible statuses of a claim.

    Flow: PENDING -> APPROVED | REJECTED
    Deletion is modeled as the record disappearing, not as a status.
    """
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
