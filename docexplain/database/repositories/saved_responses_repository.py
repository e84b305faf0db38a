from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from docexplain.database.connection import get_connection
from docexplain.database.exceptions import SavedResponseNotFoundError
from docexplain.database.models import SavedResponseRecord

_COLUMNS = """
    id, user_id, title, markdown_content, task_type, original_filename,
    instructions_used, neurodivergence_type_used, metadata, created_at, updated_at
"""


class SavedResponsesRepository:
    """Database operations for the saved_responses table.

    Every query is scoped by user_id so one user can never read or delete
    another user's responses.
    """

    def insert(
        self,
        user_id: str,
        *,
        title: str,
        markdown_content: str,
        task_type: str,
        original_filename: str | None = None,
        instructions_used: str | None = None,
        neurodivergence_type_used: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> SavedResponseRecord:
        """Persist a generated response and return the stored row."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO saved_responses (
                        user_id, title, markdown_content, task_type, original_filename,
                        instructions_used, neurodivergence_type_used, metadata
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_COLUMNS}
                    """,
                    (
                        user_id,
                        title,
                        markdown_content,
                        task_type,
                        original_filename,
                        instructions_used,
                        neurodivergence_type_used,
                        Jsonb(metadata or {}),
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError("INSERT ... RETURNING produced no row")
        return _to_record(row)

    def find_for_user(self, response_id: str, user_id: str) -> SavedResponseRecord:
        """Fetch one saved response.

        Raises:
            SavedResponseNotFoundError: if the row does not exist for this user.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM saved_responses
                    WHERE id = %s AND user_id = %s
                    """,
                    (response_id, user_id),
                )
                row = cur.fetchone()

        if row is None:
            raise SavedResponseNotFoundError(f"Response {response_id} not found")
        return _to_record(row)

    def list_for_user(self, user_id: str) -> list[SavedResponseRecord]:
        """Return the user's saved responses, newest first."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM saved_responses
                    WHERE user_id = %s
                    ORDER BY created_at DESC
                    """,
                    (user_id,),
                )
                rows = cur.fetchall()
        return [_to_record(row) for row in rows]

    def delete_for_user(self, response_id: str, user_id: str) -> None:
        """Delete one saved response.

        Raises:
            SavedResponseNotFoundError: if the row does not exist for this user.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM saved_responses WHERE id = %s AND user_id = %s",
                    (response_id, user_id),
                )
                if cur.rowcount == 0:
                    raise SavedResponseNotFoundError(f"Response {response_id} not found")
            conn.commit()


def _to_record(row: dict[str, Any]) -> SavedResponseRecord:
    return SavedResponseRecord(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        title=row["title"],
        markdown_content=row["markdown_content"],
        task_type=row["task_type"],
        original_filename=row.get("original_filename"),
        instructions_used=row.get("instructions_used"),
        neurodivergence_type_used=row.get("neurodivergence_type_used"),
        metadata=row.get("metadata") or {},
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )
