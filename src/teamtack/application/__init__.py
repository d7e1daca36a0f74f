"""
Application layer - sync, completion and task workflows over the ports.
"""
