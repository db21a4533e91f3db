"""
Unit tests for engine inference and AI output cleanup.
"""

from shared.latex.engines import (
    engine_trial_order,
    has_documentclass,
    infer_engine,
    strip_code_fences,
)


# ============================================================================
# Engine Inference Tests
# ============================================================================

class TestInferEngine:
    """Tests for picking a compiler from the preamble."""

    def test_directlua_selects_lualatex(self):
        tex = "\\documentclass{article}\\begin{document}\\directlua{tex.print('hi')}\\end{document}"
        assert infer_engine(tex) == "lualatex"

    def test_fontspec_selects_xelatex(self):
        tex = "\\documentclass{article}\\usepackage{fontspec}\\begin{document}x\\end{document}"
        assert infer_engine(tex) == "xelatex"

    def test_setmainfont_selects_xelatex(self):
        assert infer_engine("\\documentclass{article}\\setmainfont{Arial}") == "xelatex"

    def test_polyglossia_and_xecjk_select_xelatex(self):
        assert infer_engine("\\usepackage{polyglossia}") == "xelatex"
        assert infer_engine("\\usepackage{xeCJK}") == "xelatex"

    def test_matching_is_case_insensitive(self):
        assert infer_engine("\\usepackage{FontSpec}") == "xelatex"

    def test_plain_article_selects_pdflatex(self):
        assert infer_engine("\\documentclass{article}\\begin{document}x\\end{document}") == "pdflatex"

    def test_lua_wins_over_fonts(self):
        assert infer_engine("\\usepackage{fontspec}\\directlua{x}") == "lualatex"


class TestEngineTrialOrder:
    """Tests for the engine fallback order."""

    def test_pdflatex_first(self):
        assert engine_trial_order("pdflatex") == ["pdflatex", "xelatex", "lualatex"]

    def test_xelatex_first_is_not_repeated(self):
        assert engine_trial_order("xelatex") == ["xelatex", "lualatex", "pdflatex"]

    def test_lualatex_first(self):
        assert engine_trial_order("lualatex") == ["lualatex", "xelatex", "pdflatex"]


# ============================================================================
# Document Checks
# ============================================================================

class TestDocumentChecks:
    """Tests for \\documentclass detection and fence stripping."""

    def test_has_documentclass(self):
        assert has_documentclass("\\documentclass{article}")
        assert not has_documentclass("Hello world")
        assert not has_documentclass("")
        assert not has_documentclass(None)

    def test_strip_latex_fence(self):
        text = "```latex\n\\documentclass{article}\n\\end{document}\n```"
        assert strip_code_fences(text).strip() == "\\documentclass{article}\n\\end{document}"

    def test_strip_tex_and_bare_fences(self):
        assert strip_code_fences("```tex\nA\n```").strip() == "A"
        assert strip_code_fences("```\nA\n```\n").strip() == "A"

    def test_unfenced_text_is_unchanged(self):
        assert strip_code_fences("\\documentclass{article}") == "\\documentclass{article}"
