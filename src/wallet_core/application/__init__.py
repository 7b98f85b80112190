"""Application layer - Use cases, services and port definitions.

This layer contains:
- Use Cases: The transfer workflow and the account/payment lookups
- Service: The WalletService interface, its default implementation and
  decorators (logging) that wrap it without changing its contract
- Ports: Abstract interfaces for the store and the clock
- Cancellation: The caller-supplied signal carried into store calls

The application layer depends only on the domain layer.
Infrastructure implementations are injected via ports.
"""
