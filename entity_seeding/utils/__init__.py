"""
Utilities package for the seeding library.

Cross-cutting concerns used by the factory pipeline:
- config: environment-driven configuration
- error_handling: exception hierarchy
- logging: structlog configuration and operation logging
- context, overrides, awaitables, attributes, resolve_factory: pipeline helpers
"""
