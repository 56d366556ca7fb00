"""External integration adapters."""

from .cromwell import CromwellClient
from .storage import GoogleStorage, ResultLocation

__all__ = [
    "CromwellClient",
    "GoogleStorage",
    "ResultLocation",
]
