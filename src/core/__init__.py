"""
Core business logic for image hosting.

This module is framework-agnostic - it doesn't import FastAPI, boto3 or
Pillow. Storage and encoding are reached through protocols so the logic
can be tested against in-memory fakes.
"""
