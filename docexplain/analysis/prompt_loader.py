from pathlib import Path

from docexplain.analysis.exceptions import PromptTemplateError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"

PROMPT_NAMES = ("single_pass_system", "extended_system", "outline_system", "detail_system")


def load_prompt_template(name: str, prompt_dir: Path | None = None) -> str:
    """Load one system prompt template by name.

    Args:
        name: Template name without extension, e.g. ``"outline_system"``.
        prompt_dir: Directory holding ``<name>.txt``.
                    Defaults to the bundled prompts directory.

    Returns:
        The template text with trailing whitespace removed.

    Raises:
        PromptTemplateError: if the file cannot be read.
    """
    directory = prompt_dir if prompt_dir is not None else _DEFAULT_PROMPT_DIR
    path = directory / f"{name}.txt"
    try:
        return path.read_text(encoding="utf-8").rstrip()
    except OSError as exc:
        raise PromptTemplateError(f"Failed to load prompt template '{name}': {exc}") from exc


def load_prompt_templates(prompt_dir: Path | None = None) -> dict[str, str]:
    """Load every template the prompt builder needs."""
    return {name: load_prompt_template(name, prompt_dir) for name in PROMPT_NAMES}
