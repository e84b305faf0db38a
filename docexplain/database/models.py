from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class SavedResponseRecord:
    """Represents a row from the saved_responses table."""

    id: str
    user_id: str
    title: str
    markdown_content: str
    task_type: str
    original_filename: str | None = None
    instructions_used: str | None = None
    neurodivergence_type_used: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class UserProfileRecord:
    """Represents the personalisation columns of the user_profiles table."""

    id: str
    onboarding_completed: bool = False
    neurodivergence_type: str | None = None
    academic_level: str | None = None
    learning_preferences: dict[str, Any] = field(default_factory=dict)
    subject_interests: list[str] = field(default_factory=list)
    custom_fields: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UsageCheck:
    """Result of a daily usage-limit lookup."""

    allowed: bool
    used: int
    limit: int

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.used)
