"""Review context assembly under a token budget.

Token counts here are an estimate, not a tokenizer: every character of the
PR metadata and of each file is counted, fixed allowances are added for
metadata, and the total is divided by an average of four characters per
token, rounded up.
"""

import math
import re
from collections.abc import Sequence
from dataclasses import replace
from typing import Any

from reviewthor.models.context import FileContext, PackedContext, PRContext, RelatedFiles
from reviewthor.utils.logging import get_logger

logger = get_logger("agent.context")

DEFAULT_TOKEN_BUDGET = 150_000
AVG_CHARS_PER_TOKEN = 4
PR_METADATA_CHARS = 100
FILE_METADATA_CHARS = 50
TRUNCATION_MARKER = "\n... (truncated)"

LANGUAGE_BY_EXTENSION: dict[str, str] = {
    "js": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
}

ES_IMPORT_PATTERN = re.compile(r"import\s+.*?\s+from\s+['\"](.+?)['\"]")
ES_SIDE_EFFECT_IMPORT_PATTERN = re.compile(r"import\s+['\"](.+?)['\"]")
REQUIRE_PATTERN = re.compile(r"require\s*\(['\"](.+?)['\"]\)")
NAMED_EXPORT_PATTERN = re.compile(r"export\s+(?:const|let|var|function|class)\s+(\w+)")
SOURCE_SUFFIX_PATTERN = re.compile(r"\.(js|jsx|ts|tsx)$")


def detect_language(path: str) -> str:
    """Map a file path to a language name by extension."""
    extension = path.rsplit(".", 1)[-1].lower() if "." in path else ""
    return LANGUAGE_BY_EXTENSION.get(extension, "unknown")


class ContextAssembler:
    """Builds the file and PR context sent to the review service."""

    def __init__(self, token_budget: int = DEFAULT_TOKEN_BUDGET) -> None:
        """Initialize the assembler.

        Args:
            token_budget: Maximum estimated tokens for a packed context.
        """
        if token_budget <= 0:
            raise ValueError(f"token_budget must be positive, got {token_budget}")
        self.token_budget = token_budget

    def build_file_context(self, path: str, diff: str, content: str | None = None) -> FileContext:
        """Build the context for one changed file.

        Args:
            path: Repository-relative path.
            diff: Unified diff for the file.
            content: Optional full file content.

        Returns:
            FileContext instance.
        """
        return FileContext(
            path=path,
            content=content or "",
            diff=diff,
            language=detect_language(path),
        )

    def build_pr_context(self, pr: dict[str, Any]) -> PRContext:
        """Build PR metadata from a ``pull_request`` payload object."""
        return PRContext(
            title=pr.get("title") or "",
            description=pr.get("body") or "",
            author=(pr.get("user") or {}).get("login") or "unknown",
            target_branch=(pr.get("base") or {}).get("ref") or "main",
            source_branch=(pr.get("head") or {}).get("ref") or "feature",
        )

    def include_related_files(self, path: str, content: str | None) -> RelatedFiles:
        """Discover imports, exports and likely test files for a file.

        This is a best-effort text scan; unreadable content yields empty lists.

        Args:
            path: Repository-relative path.
            content: Source text, may be None.

        Returns:
            RelatedFiles instance.
        """
        text = content if isinstance(content, str) else ""
        return RelatedFiles(
            imports=self._extract_imports(text),
            exports=self._extract_exports(text),
            tests=self._find_test_files(path) if path else [],
        )

    def estimate_file_tokens(self, file: FileContext) -> int:
        """Estimate the tokens one file contributes."""
        return math.ceil(self._estimate_file_chars(file) / AVG_CHARS_PER_TOKEN)

    def estimate_tokens(self, files: Sequence[FileContext], pr: PRContext) -> int:
        """Estimate the tokens of the PR metadata plus all files."""
        total_chars = len(pr.title) + len(pr.description) + PR_METADATA_CHARS
        total_chars += sum(self._estimate_file_chars(f) for f in files)
        return math.ceil(total_chars / AVG_CHARS_PER_TOKEN)

    def optimize_for_token_limit(
        self,
        files: Sequence[FileContext],
        pr: PRContext,
        budget: int | None = None,
    ) -> PackedContext:
        """Fit file contexts into the token budget.

        Files are kept whole, in order, while they fit. The first file that
        would overflow loses its content, and its diff is clipped if it still
        does not fit; no later file is included. When anything was cut the
        reported token count is the budget itself.

        Args:
            files: File contexts in review order.
            pr: PR metadata.
            budget: Token budget, the assembler's default if omitted.

        Returns:
            PackedContext instance. Input file contexts are never modified.
        """
        budget = self.token_budget if budget is None else budget

        estimated = self.estimate_tokens(files, pr)
        if estimated <= budget:
            return PackedContext(files=list(files), pr=pr, truncated=False, token_count=estimated)

        packed: list[FileContext] = []
        current = self.estimate_tokens([], pr)

        for file in files:
            file_tokens = self.estimate_file_tokens(file)

            if current + file_tokens <= budget:
                packed.append(file)
                current += file_tokens
                continue

            packed.append(self._truncate_file(file, budget - current))
            break

        logger.info(
            "Context truncated to fit token budget",
            extra={
                "estimated_tokens": estimated,
                "token_budget": budget,
                "files_in": len(files),
                "files_out": len(packed),
            },
        )

        return PackedContext(files=packed, pr=pr, truncated=True, token_count=budget)

    def _estimate_file_chars(self, file: FileContext) -> int:
        return len(file.path) + len(file.content) + len(file.diff) + FILE_METADATA_CHARS

    def _truncate_file(self, file: FileContext, max_tokens: int) -> FileContext:
        available = max_tokens * AVG_CHARS_PER_TOKEN - (len(file.path) + FILE_METADATA_CHARS)

        # The diff is worth more than the full content, so content goes first
        if len(file.diff) <= available:
            return replace(file, content="")

        return replace(file, content="", diff=file.diff[: max(available, 0)] + TRUNCATION_MARKER)

    def _extract_imports(self, content: str) -> list[str]:
        imports = [
            *ES_IMPORT_PATTERN.findall(content),
            *ES_SIDE_EFFECT_IMPORT_PATTERN.findall(content),
            *REQUIRE_PATTERN.findall(content),
        ]
        return list(dict.fromkeys(i for i in imports if i))

    def _extract_exports(self, content: str) -> list[str]:
        exports = NAMED_EXPORT_PATTERN.findall(content)
        if "export default" in content:
            exports.append("default")
        return exports

    def _find_test_files(self, path: str) -> list[str]:
        base = SOURCE_SUFFIX_PATTERN.sub("", path)
        return [
            f"{base}.test.js",
            f"{base}.test.ts",
            f"{base}.spec.js",
            f"{base}.spec.ts",
            f"__tests__/{base}.js",
            f"__tests__/{base}.ts",
        ]
