"""Repository review instructions from ``.reviewthor.md``.

The instruction file is plain markdown. Sections start with ``## `` headings
and are recognised by substring, case-insensitively::

    ## Focus Areas
    - Accessibility
    ## Custom Rules
    1. Prefer async/await over raw promises
    ## Ignore Patterns
    - test/**
    ## Severity
    error

Anything the processor does not recognise is ignored.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from reviewthor.models.config import CustomInstructions, ReviewConfig, ValidationResult
from reviewthor.models.finding import VALID_SEVERITIES, Severity
from reviewthor.tools.github import get_file_content
from reviewthor.utils.logging import get_logger

if TYPE_CHECKING:
    from github import Github

logger = get_logger("rules.instructions")

INSTRUCTIONS_FILE = ".reviewthor.md"
DEFAULT_REF = "HEAD"
MAX_RULE_LENGTH = 200

SECTION_PATTERN = re.compile(r"^##\s+", re.MULTILINE)
LIST_ITEM_PATTERN = re.compile(r"^[-*]\s+(.+)$|^\d+\.\s+(.+)$")
GLOB_CHARS_PATTERN = re.compile(r"^[a-zA-Z0-9\-_.*/?\[\]!{}]+$")


def is_valid_glob_pattern(pattern: Any) -> bool:
    """Check an ignore pattern for well-formed syntax.

    Brackets must balance without ever closing more than were opened, and
    only characters from a conservative set are allowed. This accepts
    well-formed globs, not necessarily sensible ones.

    Args:
        pattern: Candidate glob pattern.

    Returns:
        True if the pattern is well formed.
    """
    if not isinstance(pattern, str):
        return False

    depth = 0
    for char in pattern:
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        if depth < 0:
            return False
    if depth != 0:
        return False

    return GLOB_CHARS_PATTERN.match(pattern) is not None


def _parse_list_section(lines: list[str]) -> list[str]:
    items: list[str] = []
    for line in lines:
        match = LIST_ITEM_PATTERN.match(line.strip())
        if match:
            item = (match.group(1) or match.group(2) or "").strip()
            if item:
                items.append(item)
    return items


class InstructionProcessor:
    """Loads, validates and merges repository review instructions."""

    def __init__(self, client: Github | None = None) -> None:
        """Initialize the processor.

        Args:
            client: Authenticated GitHub client, needed only for fetching.
        """
        self.client = client

    def fetch_custom_instructions(self, owner: str, repo: str) -> CustomInstructions | None:
        """Fetch and parse ``.reviewthor.md`` from a repository.

        Args:
            owner: Repository owner.
            repo: Repository name.

        Returns:
            Parsed instructions, or None if the repository has no file.

        Raises:
            ValueError: If no GitHub client was provided.
            GitHubToolError: If the file cannot be fetched.
        """
        if self.client is None:
            raise ValueError("A GitHub client is required to fetch instructions")

        content = get_file_content(self.client, owner, repo, INSTRUCTIONS_FILE, DEFAULT_REF)
        if not content:
            logger.debug(
                "No instruction file",
                extra={"repository": f"{owner}/{repo}", "path": INSTRUCTIONS_FILE},
            )
            return None

        return self.parse_instruction_file(content)

    def parse_instruction_file(self, content: str) -> CustomInstructions:
        """Parse instruction file content.

        Args:
            content: Raw markdown content.

        Returns:
            Parsed instructions.
        """
        instructions = CustomInstructions(raw_content=content)

        for section in SECTION_PATTERN.split(content):
            lines = section.strip().split("\n")
            title = lines[0].lower()
            body = lines[1:]

            if "focus areas" in title:
                instructions.focus_areas = _parse_list_section(body)
            elif "custom rules" in title:
                instructions.custom_rules = _parse_list_section(body)
            elif "ignore patterns" in title:
                instructions.ignore_patterns = _parse_list_section(body)
            elif "severity" in title:
                value = next((line.strip().lower() for line in body if line.strip()), "")
                if value in VALID_SEVERITIES:
                    instructions.severity = Severity(value)

        return instructions

    def merge_with_defaults(
        self,
        custom: CustomInstructions,
        defaults: ReviewConfig | None = None,
    ) -> ReviewConfig:
        """Merge custom instructions over the default configuration.

        Focus areas form an ordered set; rules and ignore patterns are
        concatenated as given. The comment limit and enabled checks always
        come from the defaults.

        Args:
            custom: Parsed instructions.
            defaults: Base configuration, the built-in defaults if omitted.

        Returns:
            The effective review configuration.
        """
        base = defaults or self.get_default_config()

        return ReviewConfig(
            focus_areas=list(dict.fromkeys([*base.focus_areas, *custom.focus_areas])),
            custom_rules=[*base.custom_rules, *custom.custom_rules],
            ignore_patterns=[*base.ignore_patterns, *custom.ignore_patterns],
            severity=custom.severity or base.severity,
            max_comments_per_pr=base.max_comments_per_pr,
            enabled_checks=list(base.enabled_checks),
        )

    def validate_instructions(self, instructions: CustomInstructions) -> ValidationResult:
        """Validate parsed instructions.

        Args:
            instructions: Instructions to validate.

        Returns:
            Validation result listing every problem found.
        """
        errors: list[str] = []

        for area in instructions.focus_areas:
            if not isinstance(area, str) or len(area) > MAX_RULE_LENGTH:
                errors.append(f"Focus area too long (max {MAX_RULE_LENGTH} characters)")

        for rule in instructions.custom_rules:
            if not isinstance(rule, str) or len(rule) > MAX_RULE_LENGTH:
                errors.append(f"Custom rule too long (max {MAX_RULE_LENGTH} characters)")

        for pattern in instructions.ignore_patterns:
            if not is_valid_glob_pattern(pattern):
                errors.append(f"Invalid ignore pattern: {pattern}")

        return ValidationResult(is_valid=not errors, errors=errors)

    def get_default_config(self) -> ReviewConfig:
        """Get the built-in review configuration."""
        return ReviewConfig(
            focus_areas=[
                "Code quality",
                "Bug detection",
                "Security issues",
                "Performance",
                "Best practices",
            ],
            custom_rules=[
                "Use const/let instead of var",
                "Handle errors properly",
                "Add appropriate TypeScript types",
                "Follow consistent naming conventions",
            ],
            ignore_patterns=[
                "node_modules/**",
                "dist/**",
                "build/**",
                "*.min.js",
                "*.bundle.js",
            ],
            severity=Severity.WARNING,
            max_comments_per_pr=20,
            enabled_checks=[
                "syntax",
                "security",
                "performance",
                "best-practices",
                "type-safety",
            ],
        )

    def load_review_config(self, owner: str, repo: str) -> ReviewConfig:
        """Fetch, validate and merge a repository's instructions.

        Invalid or missing instructions fall back to the defaults.

        Args:
            owner: Repository owner.
            repo: Repository name.

        Returns:
            The effective review configuration.
        """
        custom = self.fetch_custom_instructions(owner, repo)
        if custom is None:
            return self.get_default_config()

        result = self.validate_instructions(custom)
        if not result.is_valid:
            logger.warning(
                "Ignoring invalid instruction file",
                extra={"repository": f"{owner}/{repo}", "errors": result.errors},
            )
            return self.get_default_config()

        logger.info(
            "Loaded custom instructions",
            extra={
                "repository": f"{owner}/{repo}",
                "focus_areas": len(custom.focus_areas),
                "custom_rules": len(custom.custom_rules),
                "ignore_patterns": len(custom.ignore_patterns),
            },
        )
        return self.merge_with_defaults(custom)
