"""
Abstract interfaces for the Echo Brain system.

These interfaces define the contracts that concrete implementations
must adhere to, following the Dependency Inversion Principle.

This package contains:
- Repository interfaces for memory, answer and user persistence
- Provider interfaces for external service adapters
- Service interfaces for the memory pipeline
"""
