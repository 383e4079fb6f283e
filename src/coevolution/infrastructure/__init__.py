"""
coevolution.infrastructure - Storage Layer
============================================

The versioned artifact store the propagation engine reads from and commits
into.

Architecture:
    ┌─────────────── ORCHESTRATION LAYER ─────────────────┐
    │  PropagationEngine, ConsumerGate, generators         │
    └─────────────────────┬───────────────────────────────┘
                          │ queries + nested commits
                          ▼
    ┌─────────────── INFRASTRUCTURE LAYER ────────────────┐
    │  Repository (ABC)                                    │
    │    └── InMemoryRepository                            │
    └──────────────────────────────────────────────────────┘

Usage:
    from coevolution.infrastructure import InMemoryRepository
"""

from coevolution.infrastructure.repository import InMemoryRepository, Repository

__all__ = [
    "Repository",
    "InMemoryRepository",
]
