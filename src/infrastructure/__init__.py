"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- storage: Object storage (R2/S3) via boto3
- imaging: WebP encoding via Pillow

These wrappers translate between external formats and our domain models.
"""
