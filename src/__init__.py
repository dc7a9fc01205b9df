"""
R2 Image Host - upload, compress and manage images in an R2 bucket.

This package contains the complete application:
- core: Framework-agnostic upload, naming and session logic
- infrastructure: Object storage and image codec integrations
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
