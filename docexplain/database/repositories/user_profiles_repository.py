from psycopg.rows import dict_row

from docexplain.database.connection import get_connection
from docexplain.database.models import UserProfileRecord


class UserProfilesRepository:
    """Read access to the personalisation columns of user_profiles."""

    def find_by_user_id(self, user_id: str) -> UserProfileRecord | None:
        """Return the user's profile, or None if they have not created one."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, onboarding_completed, neurodivergence_type, academic_level,
                           learning_preferences, subject_interests, custom_fields
                    FROM user_profiles
                    WHERE id = %s
                    """,
                    (user_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return UserProfileRecord(
            id=str(row["id"]),
            onboarding_completed=bool(row["onboarding_completed"]),
            neurodivergence_type=row["neurodivergence_type"],
            academic_level=row["academic_level"],
            learning_preferences=row["learning_preferences"] or {},
            subject_interests=list(row["subject_interests"] or []),
            custom_fields=row["custom_fields"] or {},
        )
