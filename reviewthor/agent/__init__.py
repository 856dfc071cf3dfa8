"""Review agent: context assembly, prompts, and the review service."""
