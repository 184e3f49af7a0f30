"""HTTP API layer of the credit query service.

Key components:
- **main**: Application factory, lifespan and ambient endpoints
- **routes**: The read-only ``/creditos`` endpoints
- **middleware**: Correlation IDs, request logging, the audit trail and
  centralized error handling
- **schemas**: The error envelope
- **utils**: orjson responses and client identification helpers
"""
