"""Learner-specific prompt additions: neurodivergence modifiers and profile context."""

from docexplain.database.models import UserProfileRecord

NEURODIVERGENCE_MODIFIERS: dict[str, str] = {
    "adhd": """CRITICAL: Optimize content for ADHD learners:
- Use SHORT, CONCISE sentences (max 15-20 words per sentence)
- Break complex ideas into BULLET POINTS or numbered lists
- Use CLEAR HEADINGS and subheadings to create visual breaks
- Add ACTIONABLE summaries at the end of each section
- Use BOLD and emphasis strategically to highlight key points
- Avoid long paragraphs - split into 2-3 sentence chunks
- Include "Key Takeaway" boxes for important concepts
- Use active voice and direct language
- Add visual structure with symbols where appropriate
- Create clear transitions between topics
- Focus on practical applications and real-world examples
- Minimize abstract concepts without context""",
    "dyslexia": """CRITICAL: Optimize content for dyslexic learners:
- Use SIMPLE, CLEAR language - avoid jargon and complex vocabulary
- Break down complex words and explain technical terms
- Use SHORT sentences (10-15 words maximum)
- Structure content with CLEAR visual hierarchy (headings, lists, spacing)
- Use BULLET POINTS and numbered lists instead of long paragraphs
- Provide CONTEXT and examples for abstract concepts
- Use CONCRETE examples and analogies
- Repeat key concepts in different ways
- Use BOLD for important terms (but sparingly)
- Avoid homophones and ambiguous words
- Use active voice throughout
- Break complex topics into smaller, digestible sections
- Include pronunciation guides for difficult terms if needed""",
    "autism": """CRITICAL: Optimize content for autistic learners:
- Use CLEAR, LITERAL language - avoid idioms, metaphors, and figurative speech
- Provide EXPLICIT, STEP-BY-STEP explanations
- Use STRUCTURED, CONSISTENT formatting throughout
- Define ALL technical terms and acronyms clearly
- Use LOGICAL organization with clear hierarchies
- Provide CONTEXT and background information
- Use CONCRETE examples and avoid abstract concepts without explanation
- Be PRECISE and specific - avoid vague language
- Use CONSISTENT terminology (don't use synonyms for the same concept)
- Break complex processes into numbered steps
- Include clear cause-and-effect relationships
- Use visual structure (headings, lists, tables) to organize information
- Avoid implied meanings or assumptions""",
    "audhd": """CRITICAL: Optimize content for AUDHD learners (combines ADHD and Autism needs):
- Use SHORT, CLEAR, LITERAL sentences (10-15 words max)
- Break everything into BULLET POINTS or numbered lists
- Use CLEAR HEADINGS and visual breaks frequently
- Provide EXPLICIT, STEP-BY-STEP explanations
- Define ALL technical terms immediately
- Use CONCRETE examples and avoid abstract concepts
- Add ACTIONABLE summaries after each section
- Use CONSISTENT terminology throughout
- Create CLEAR visual hierarchy with spacing and formatting
- Use BOLD strategically for key points (but not overuse)
- Include "Key Takeaway" boxes for important concepts
- Minimize distractions - focus on essential information
- Use active voice and direct language
- Provide context and background for all concepts
- Structure content predictably and consistently""",
}

_ACADEMIC_LEVELS: dict[str, str] = {
    "high_school": "high school level",
    "undergraduate": "undergraduate/college level",
    "graduate": "graduate/postgraduate level",
    "professional": "professional level",
    "other": "general level",
}


def neurodivergence_modifier(neurodivergence_type: str | None) -> str:
    """Return the prompt modifier for a neurodivergence type, or "" if none applies."""
    if not neurodivergence_type:
        return ""
    return NEURODIVERGENCE_MODIFIERS.get(neurodivergence_type.strip().lower(), "")


def build_personalized_prompt(profile: UserProfileRecord | None) -> str:
    """Render the user's profile as a PERSONALIZATION CONTEXT block.

    Returns "" when there is no profile, onboarding is not finished, or the
    profile carries nothing worth telling the model.
    """
    if profile is None or not profile.onboarding_completed:
        return ""

    parts: list[str] = []

    if profile.neurodivergence_type and profile.neurodivergence_type != "none":
        parts.append(f"The user has indicated they have {profile.neurodivergence_type}.")

    if profile.academic_level:
        level = _ACADEMIC_LEVELS.get(profile.academic_level, profile.academic_level)
        parts.append(f"The user is at {level} academically.")

    prefs = profile.learning_preferences or {}
    if prefs.get("preferred_format"):
        parts.append(f"The user prefers {prefs['preferred_format']} learning format.")
    if prefs.get("reading_speed"):
        parts.append(f"The user reads at {prefs['reading_speed']} speed.")
    if prefs.get("complexity_level"):
        parts.append(f"The user prefers {prefs['complexity_level']} complexity level.")

    if profile.subject_interests:
        parts.append(
            f"The user is particularly interested in: {', '.join(profile.subject_interests)}."
        )

    if profile.custom_fields:
        custom = ", ".join(f"{key}: {value}" for key, value in profile.custom_fields.items())
        parts.append(f"Additional user context: {custom}.")

    if not parts:
        return ""

    return (
        "PERSONALIZATION CONTEXT:\n"
        f"{' '.join(parts)}\n"
        "Use this information to tailor your response to the user's learning style, "
        "academic level, and interests. Adjust complexity, examples, and explanations "
        "accordingly."
    )
