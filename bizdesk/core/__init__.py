"""BizDesk Core Platform Module.

Shared infrastructure used by every BizDesk section:
- Base repository over the database connection pool
- Authentication (Flask-Login user model and loader repository)
- API helpers and structured logging
"""
