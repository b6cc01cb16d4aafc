"""Configuration errors."""

from typing import List, Optional


class ConfigurationError(Exception):
    """Raised when the YAML file or environment variables are invalid.

    Carries every validation error found, plus hints for fixing them, so the
    CLI can print one complete report instead of failing on the first issue.

    Attributes:
        message: Summary line
        errors: Individual validation errors
        suggestions: Hints shown after the errors
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.errors = list(errors or [])
        self.suggestions = list(suggestions or [])
        super().__init__(self.render())

    def render(self) -> str:
        """Summary line, numbered errors, then bulleted suggestions."""
        lines = [self.message]
        if self.errors:
            lines.append("\nValidation Errors:")
            lines.extend(f"  {number}. {error}" for number, error in enumerate(self.errors, 1))
        if self.suggestions:
            lines.append("\nSuggestions:")
            lines.extend(f"  - {suggestion}" for suggestion in self.suggestions)
        return "\n".join(lines)
