"""
CLI Module - Command line interface for teamtack.
"""

from .app import create_parser, main, run


__all__ = ["create_parser", "main", "run"]
