"""
Infrastructure Package
======================

Provides abstraction layers for external dependencies following the Dependency Inversion Principle.

Modules:
    - container: Lazy, cached wiring of the order engine's collaborators
    - events: Domain event bus abstraction (Redis pub/sub, in-memory)
    - observability: OpenTelemetry tracing setup

This package enables:
    - Easy testing with in-memory implementations
    - Switching event bus backends without code changes
"""
