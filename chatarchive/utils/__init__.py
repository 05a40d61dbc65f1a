"""
Shared utilities: result types and structured logging.
"""
