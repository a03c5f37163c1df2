"""
Product Tracker Test Suite

Tests are organized into:
- unit/: Unit tests for security, repositories, storage and services
- integration/: HTTP tests against the FastAPI application
"""
