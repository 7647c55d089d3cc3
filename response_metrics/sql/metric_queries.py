"""
Metric Queries Module for the Response Metrics service.

Provides parameterized PostgreSQL queries against the Supabase tables that
feed the dashboard:

- daily_first_responder_metrics: one row per (date, employee_email)
- employees: staff directory, filtered to client-facing staff
- tracked_emails: individual inbound emails and their first responses

All queries are read-only and use asyncpg $n placeholders.
"""


# =============================================================================
# DAILY METRICS
# =============================================================================

# $1 = start date (inclusive), $2 = end date (inclusive)
DAILY_METRICS_QUERY: str = """
    SELECT
        date,
        employee_email,
        COALESCE(total_first_responses, 0) AS total_first_responses,
        avg_response_minutes,
        COALESCE(sla_breaches, 0) AS sla_breaches
    FROM daily_first_responder_metrics
    WHERE date >= $1
      AND date <= $2
    ORDER BY date ASC, employee_email ASC
"""

LATEST_METRIC_DATE_QUERY: str = """
    SELECT MAX(date) AS latest
    FROM daily_first_responder_metrics
"""


# =============================================================================
# EMPLOYEES
# =============================================================================

CLIENT_FACING_EMPLOYEES_QUERY: str = """
    SELECT email, name, department
    FROM employees
    WHERE is_client_facing = TRUE
    ORDER BY email ASC
"""


# =============================================================================
# TRACKED EMAILS
# =============================================================================

# $1 = received_at lower bound (inclusive), $2 = upper bound (exclusive, NULL for none)
ANSWERED_EMAILS_QUERY: str = """
    SELECT
        id::text AS id,
        employee_email,
        received_at,
        first_response_at,
        response_time_minutes,
        sla_breached
    FROM tracked_emails
    WHERE is_incoming = TRUE
      AND has_response = TRUE
      AND received_at >= $1
      AND ($2::timestamptz IS NULL OR received_at < $2)
"""

# Calendar day (UTC) of the newest answered inbound email
LATEST_ANSWERED_EMAIL_DATE_QUERY: str = """
    SELECT (MAX(received_at) AT TIME ZONE 'UTC')::date AS latest
    FROM tracked_emails
    WHERE is_incoming = TRUE
      AND has_response = TRUE
"""

# $1 = row limit
UNANSWERED_EMAILS_QUERY: str = """
    SELECT
        id::text AS id,
        subject,
        client_email,
        employee_email,
        received_at,
        graph_message_id
    FROM tracked_emails
    WHERE is_incoming = TRUE
      AND has_response = FALSE
    ORDER BY received_at ASC
    LIMIT $1
"""
