"""
Integration Tests
=================

Whole-engine query scenarios driven through QuerySessionController.

Run with: python -m pytest tests/integration/ -v
"""
