"""
API Routes Package
"""
from . import (
    health,
    auth,
    algorithms,
    compute,
    workflows,
    results,
)
