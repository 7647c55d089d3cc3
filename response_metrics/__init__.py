"""
Response Metrics Package.

Read-only analytics layer for the email first-response dashboard. Loads daily
first-responder metrics from the managed Postgres database, rolls them up into
team, employee, daily and heatmap views, and serializes those views to CSV.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, exceptions, database, and dependencies
    - models: Pydantic schemas and enums
    - services: Range resolution, filtering, aggregation, formatting, export
    - sql: Parameterized SQL queries
"""

__version__ = "1.0.0"
