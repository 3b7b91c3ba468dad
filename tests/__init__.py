"""
zkmail Test Suite
=================

Test organization:
- tests/unit/          - Unit tests (mock backend, no external tools)
- tests/integration/   - Integration tests (require snarkjs and circuit artifacts)

Run tests:
    pytest                          # All tests
    pytest tests/unit               # Unit tests only
    pytest -m "not integration"     # Skip integration tests
"""
