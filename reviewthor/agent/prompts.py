"""Prompt templates and comment formatting for the reviewer."""

from reviewthor.agent.context import detect_language
from reviewthor.models.config import ReviewConfig
from reviewthor.models.context import FileContext, ReviewRequest
from reviewthor.models.finding import Finding, Severity

REVIEW_PROMPT_TEMPLATE = """\
<thinking>
You are reviewing a pull request for a JavaScript/TypeScript project.
Analyze the code changes carefully for:
- Bugs and potential runtime errors
- Security vulnerabilities
- Performance issues
- Code quality and best practices
- TypeScript type safety issues

Consider the PR description for context about the intended changes.
</thinking>

Please review the following code changes:

Repository: {repository}
PR Description: {pr_description}
{instructions_section}
Files:
{files_section}

Provide your analysis in the following JSON format:
{{
  "issues": [
    {{
      "file": "path/to/file.js",
      "line": 10,
      "severity": "error|warning|info",
      "message": "Clear description of the issue",
      "category": "bug|security|performance|code-quality|type-safety",
      "suggestion": "Optional code suggestion to fix the issue"
    }}
  ],
  "summary": "Brief summary of the review",
  "stats": {{
    "total": 0,
    "byCategory": {{}},
    "bySeverity": {{}}
  }}
}}

Use line numbers from the new version of each file.
Respond with the JSON object only. Be constructive and helpful.
"""

FILE_SECTION_TEMPLATE = """\
File: {path}
Diff:
```diff
{diff}
```
"""

INSTRUCTIONS_SECTION_TEMPLATE = """\

Additional Instructions:
{instructions}
"""

EXPLAIN_PROMPT_TEMPLATE = """\
Please explain why this is an issue:

File: {file}
Line: {line}
Issue: {message}
Category: {category}
Severity: {severity}

Provide a detailed explanation that helps the developer understand:
1. Why this is a problem
2. What could go wrong
3. How to fix it properly"""

SEVERITY_ICONS: dict[Severity, str] = {
    Severity.ERROR: "❌",
    Severity.WARNING: "⚠️",
    Severity.INFO: "ℹ️",
}

CATEGORY_LABELS: dict[str, str] = {
    "bug": "Bug",
    "security": "Security",
    "performance": "Performance",
    "code-quality": "Code Quality",
    "type-safety": "Type Safety",
    "documentation": "Documentation",
}


def build_instructions(config: ReviewConfig | None) -> str | None:
    """Render a review configuration as prompt instructions.

    Args:
        config: Effective review configuration, or None.

    Returns:
        Instruction text, or None if there is nothing to add.
    """
    if config is None:
        return None

    sections = []
    if config.focus_areas:
        sections.append("Focus areas:\n" + "\n".join(f"- {a}" for a in config.focus_areas))
    if config.custom_rules:
        sections.append("Rules:\n" + "\n".join(f"- {r}" for r in config.custom_rules))

    return "\n\n".join(sections) or None


def _build_files_section(files: list[FileContext]) -> str:
    return "\n".join(FILE_SECTION_TEMPLATE.format(path=f.path, diff=f.diff) for f in files)


def build_review_prompt(request: ReviewRequest) -> str:
    """Build the structured-output review prompt for a request.

    Args:
        request: The packed review request.

    Returns:
        Complete review prompt.
    """
    instructions_section = ""
    if request.instructions:
        instructions_section = INSTRUCTIONS_SECTION_TEMPLATE.format(
            instructions=request.instructions
        )

    return REVIEW_PROMPT_TEMPLATE.format(
        repository=request.repository,
        pr_description=request.pr_description or "(No description provided)",
        instructions_section=instructions_section,
        files_section=_build_files_section(request.files),
    )


def build_explain_prompt(finding: Finding) -> str:
    """Build the prompt asking for a longer rationale for one finding."""
    return EXPLAIN_PROMPT_TEMPLATE.format(
        file=finding.file,
        line=finding.line,
        message=finding.message,
        category=finding.category,
        severity=finding.severity.value,
    )


def format_comment(finding: Finding) -> str:
    """Format a finding as a GitHub comment body.

    Args:
        finding: The finding to format.

    Returns:
        Markdown comment body.
    """
    icon = SEVERITY_ICONS[finding.severity]
    label = CATEGORY_LABELS.get(finding.category, finding.category)

    body = f"{icon} **{label}**: {finding.message}"

    if finding.suggestion:
        language = detect_language(finding.file)
        fence_language = "" if language == "unknown" else language
        body += f"\n\n**Suggestion:**\n```{fence_language}\n{finding.suggestion}\n```"

    return body
