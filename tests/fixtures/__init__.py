"""
Test fixtures for the dispatcher

This package contains fixtures used for testing:
- Sample services (calculator.py, mock_service.py)
"""
