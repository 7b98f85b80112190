"""Domain layer - Core business logic, entities, and rules.

This layer contains:
- Entities: Objects with identity and lifecycle (Account, Payment)
- Value Objects: Immutable objects defined by their attributes (Money)
- Validation: Pure checks run before any balance is touched
- Domain Exceptions: Business rule violations and storage failures

The domain layer has NO dependencies on external frameworks or infrastructure.
"""
