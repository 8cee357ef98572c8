# hathor_bot/enums.py
from enum import Enum


class Intent(str, Enum):
    DOWNLOAD = "download"
    INVENTORY = "inventory"
    FOLLOW_UP = "follow_up"
    GENERAL = "general"


class ResponseKind(str, Enum):
    """Type of the last reply stored in a conversation context."""
    INVENTORY = "inventory"
    FOLLOW_UP = "follow_up"
    GENERAL = "general"
    FALLBACK = "fallback"
    DOWNLOAD = "download"  # chat acknowledgement only, never stored


class ProductCategory(str, Enum):
    CARRIER = "Carrier Oils"
    ESSENTIAL = "Essential Oils"
    SPECIAL = "Special Oils"


class CompletionErrorKind(str, Enum):
    QUOTA_EXCEEDED = "quota_exceeded"
    INVALID_KEY = "invalid_key"
    RATE_LIMITED = "rate_limited"
    MALFORMED_RESPONSE = "malformed_response"
    NETWORK = "network"
    MODEL_NOT_FOUND = "model_not_found"
    UNKNOWN = "unknown"


class ErrorAction(str, Enum):
    """What the response generator does with a failed completion."""
    RETRY = "retry"
    FALLBACK = "fallback"
    PROPAGATE = "propagate"
