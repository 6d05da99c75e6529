"""
Test suite for the dispatcher.

Test structure:
- unit/ - Unit tests (fast, isolated)
- integration/ - Dispatcher end to end, with call logs on disk
- fixtures/ - Service classes shared by the tests

Run tests:
    pytest                    # All tests
    pytest tests/unit         # Unit tests only
    pytest tests/integration  # Integration tests only
    pytest -k "variadic"      # Tests matching name
"""
