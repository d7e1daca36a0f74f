"""
Core - domain model, ports and the error taxonomy.

Nothing in here performs I/O; adapters and the application layer depend on
this package, never the other way around.
"""
