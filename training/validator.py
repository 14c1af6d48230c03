"""Advisory quality checks for training pairs."""

from typing import Any, Dict, List
import logging

from .schemas import PairInput

logger = logging.getLogger(__name__)


class PairValidationReport:
    """Outcome of checking one pair.

    Issues make the pair invalid; suggestions are advice only.
    """

    def __init__(self):
        self.issues: List[str] = []
        self.suggestions: List[str] = []

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def add_issue(self, message: str, suggestion: str = "") -> None:
        self.issues.append(message)
        if suggestion:
            self.suggestions.append(suggestion)

    def add_suggestion(self, message: str) -> None:
        self.suggestions.append(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"isValid": self.is_valid, "issues": list(self.issues), "suggestions": list(self.suggestions)}

    def __str__(self) -> str:
        result = f"Validation {'PASSED' if self.is_valid else 'FAILED'}\n"

        if self.issues:
            result += f"\nIssues ({len(self.issues)}):\n"
            for i, issue in enumerate(self.issues, 1):
                result += f"  {i}. {issue}\n"

        if self.suggestions:
            result += f"\nSuggestions ({len(self.suggestions)}):\n"
            for i, suggestion in enumerate(self.suggestions, 1):
                result += f"  {i}. {suggestion}\n"

        return result


class PairValidator:
    """Length and rating heuristics for prompt/response pairs."""

    def __init__(self):
        self.min_prompt_length = 10
        self.max_prompt_length = 10000
        self.min_response_length = 10
        self.suggested_min_quality = 3

    def validate(self, pair: PairInput) -> PairValidationReport:
        report = PairValidationReport()

        if len(pair.prompt) < self.min_prompt_length:
            report.add_issue(
                "Prompt is too short",
                f"Provide more context in the prompt (at least {self.min_prompt_length} characters)",
            )

        if len(pair.prompt) > self.max_prompt_length:
            report.add_issue("Prompt is too long", "Consider breaking down into smaller prompts")

        if len(pair.response) < self.min_response_length:
            report.add_issue(
                "Response is too short",
                f"Responses should be substantive (at least {self.min_response_length} characters)",
            )

        if pair.quality_score is not None and pair.quality_score < self.suggested_min_quality:
            report.add_suggestion(
                f"Consider only including pairs with quality score >= {self.suggested_min_quality}"
            )

        if not report.is_valid:
            logger.debug(f"Training pair failed validation: {report.issues}")
        return report


def validate_training_pair(pair: PairInput) -> PairValidationReport:
    return PairValidator().validate(pair)
