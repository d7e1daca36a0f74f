"""
Linear Adapter - Integration with Linear's GraphQL API.
"""

from teamtack.adapters.linear.adapter import LinearAdapter
from teamtack.adapters.linear.client import LinearApiClient


__all__ = ["LinearAdapter", "LinearApiClient"]
