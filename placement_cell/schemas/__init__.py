"""
Schemas module - Request/Response schemas for API endpoints.

Difference from models:
- Models: Domain records the services work with
- Schemas: API contract (what client sends/receives)
"""
