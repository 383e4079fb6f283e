"""
Co-Evolution Simulator Test Suite
=================================

Test organization mirrors the source code structure:
    tests/
    ├── test_core/           → coevolution.core (versions, artifacts, builder, config)
    ├── test_infrastructure/ → coevolution.infrastructure (repository)
    ├── test_orchestration/  → coevolution.orchestration (gate, engine, generators)
    ├── test_integration/    → The five example scenarios end to end
    ├── test_ecosystem.py    → The Ecosystem facade
    ├── test_cli.py          → The click command line
    ├── test_observability.py → Logging setup
    └── conftest.py          → Shared pytest fixtures

Running Tests:
    pytest                           # Run all tests
    pytest tests/test_core/          # Run only core tests
    pytest tests/test_integration/   # Run only the scenario tests
"""
