"""
TrainerDesk - client and session bookkeeping for personal trainers.

This package contains the complete application:
- core: Framework-agnostic business logic
- infrastructure: Database persistence
- api: FastAPI routes, schemas and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
