"""
Settings for SeatLicensingService, split per environment:

- base.py: shared settings, licensing and billing configuration
- dev.py: local development
- test.py: pytest runs (in-memory SQLite, eager Celery)
- prod.py: production
- logging.py: JSON logging configuration factory
"""
