"""
teamtack - Keep a local task cache in step with Linear or Trello.

Pulls the active work items of a team into a local YAML cache, pushes local
progress back to the remote tracker, and drives completion workflows
(review hand-offs, parent cascades) through a single status vocabulary.
"""

__version__ = "0.4.0"
