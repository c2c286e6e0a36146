"""Prompt wording shared by all providers."""

from __future__ import annotations

_BRANCH = """Generate a short git branch name suffix from these staged changes:

{context}

Requirements:
- Output ONLY the branch suffix (no prefix like "dev#" or "feat/")
- Use kebab-case (lowercase-with-hyphens)
- 15-40 characters, descriptive, never cut a word or number in half
- Focus on the main action and what is being changed

Good: "add-user-authentication", "fix-booking-validation", "update-navbar-responsive"
Bad: "update-datab" (cut word), "fix-bug" (too vague), "add-login-and" (unfinished)

Output ONLY the branch suffix, nothing else. No quotes, no explanation."""

_COMMIT = """Generate a conventional commit message from this git diff:

{diff}

Requirements:
- Format: type(scope): description
- Types: feat, fix, docs, style, refactor, test, chore, perf, ci, build, revert
- Scope is optional; use the component or module name when it is clear
- Description in imperative mood, lowercase start, at most 72 characters
- If there are several changes, describe the main one

Examples:
feat(auth): add user login functionality
fix(api): resolve null pointer in user validation

Output ONLY the commit message, nothing else."""

_RELEASE_NOTES = """Write concise release notes in Markdown from these commits:

{log}

Group entries under "Features", "Fixes" and "Other" (omit empty groups).
One bullet per change, no commit hashes. Output only the Markdown."""


def _with_correction(prompt: str, correction: str | None, what: str) -> str:
    if not correction:
        return prompt
    return (
        f'{prompt}\n\nUser wants this adjustment: "{correction}"\n'
        f"Generate a new {what} based on this feedback."
    )


def branch_prompt(context: str, correction: str | None = None) -> str:
    return _with_correction(_BRANCH.format(context=context), correction, "branch name")


def commit_prompt(diff: str, correction: str | None = None) -> str:
    return _with_correction(_COMMIT.format(diff=diff), correction, "commit message")


def release_notes_prompt(log: str, correction: str | None = None) -> str:
    return _with_correction(_RELEASE_NOTES.format(log=log), correction, "set of release notes")
