"""
Domain modules for the MedBook API

Each domain follows the same structure:
- router.py: FastAPI endpoints
- service.py: business logic
- repository.py: database queries
- schemas.py: Pydantic request/response models
"""
