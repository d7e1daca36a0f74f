"""
Trello Adapter - Integration with Trello boards.
"""

from teamtack.adapters.trello.adapter import TrelloAdapter
from teamtack.adapters.trello.client import TrelloApiClient


__all__ = ["TrelloAdapter", "TrelloApiClient"]
