from docexplain.database.connection import get_connection
from docexplain.database.models import UsageCheck

SUMMARY_ACTION = "summary"


class UsageRepository:
    """Daily per-user action counters stored in the usage_events table."""

    def check_limit(self, user_id: str, action_type: str, daily_limit: int) -> UsageCheck:
        """Count actions of this type since UTC midnight and compare against the limit."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT COUNT(*)
                    FROM usage_events
                    WHERE user_id = %s
                      AND action_type = %s
                      AND created_at >= date_trunc('day', now() AT TIME ZONE 'UTC') AT TIME ZONE 'UTC'
                    """,
                    (user_id, action_type),
                )
                row = cur.fetchone()

        used = int(row[0]) if row is not None else 0
        return UsageCheck(allowed=used < daily_limit, used=used, limit=daily_limit)

    def record(self, user_id: str, action_type: str) -> None:
        """Record one completed action for the user."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "INSERT INTO usage_events (user_id, action_type) VALUES (%s, %s)",
                    (user_id, action_type),
                )
            conn.commit()
