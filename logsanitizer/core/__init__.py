# logsanitizer/core/__init__.py

"""Core domain models and utilities used across the log sanitizer.

This package provides the policy and result types, exceptions, and the
address pattern loader shared by the rest of the application.
"""
