"""
Unit tests for the tailoring prompt.
"""

from shared.ai.prompts import build_prompt


class TestBuildPrompt:
    """Tests for prompt section content and ordering."""

    def test_sections_in_order(self):
        prompt = build_prompt("BASE-LATEX", "THE-JD")
        jd_at = prompt.index("## Job Description")
        base_at = prompt.index("## Current LaTeX resume")
        assert prompt.index("## Core Instructions") < jd_at < prompt.index("THE-JD") < base_at
        assert prompt.rstrip().endswith("BASE-LATEX")

    def test_guardrails_present(self):
        prompt = build_prompt("base", "jd")
        assert "Do NOT add new packages" in prompt
        assert "1-page limit" in prompt
        assert "Output ONLY the raw, complete .tex document" in prompt
        assert "Ethical Skill Matching" in prompt

    def test_invisible_keywords_optional(self):
        assert "\\invisible{" in build_prompt("base", "jd")
        assert "\\invisible{" not in build_prompt("base", "jd", invisible_keywords=False)

    def test_experience_context_between_jd_and_base(self):
        prompt = build_prompt("BASE", "JD", experience_context="I scaled the payments service.")
        story_at = prompt.index("## Experience Context")
        assert prompt.index("## Job Description") < story_at < prompt.index("## Current LaTeX resume")
        assert "I scaled the payments service." in prompt
        assert "source of truth" in prompt

    def test_blank_context_is_ignored(self):
        assert "## Experience Context" not in build_prompt("base", "jd", experience_context="   ")
