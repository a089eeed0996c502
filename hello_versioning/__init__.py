"""
Versioned Hello Client.

- client/: Declarative client tables and the invoker that runs them
- core/: Configuration, logging, exceptions, version signal
- backend/: Reference hello service with version-routed endpoints
"""
