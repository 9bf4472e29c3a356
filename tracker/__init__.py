"""
Progress tracker backend.

This package provides a FastAPI application that persists one progress
document per tenant behind interchangeable storage backends (memory, local
file, SQL table, S3-compatible object storage) and derives a statistics
summary from it.
"""
