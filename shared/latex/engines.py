import re
from typing import List, Literal, Optional

EngineName = Literal["pdflatex", "xelatex", "lualatex"]

PLAIN_ENGINE: EngineName = "pdflatex"
UNICODE_ENGINE: EngineName = "xelatex"
SCRIPT_ENGINE: EngineName = "lualatex"

_DOCUMENTCLASS_RE = re.compile(r"\\documentclass")
_LUA_RE = re.compile(r"\\directlua\b", re.IGNORECASE)
_FONT_RE = re.compile(r"\\usepackage\{\s*fontspec\s*\}|\\setmainfont\b|polyglossia|xeCJK", re.IGNORECASE)
_FENCE_START_RE = re.compile(r"^\s*```(?:latex|tex)?\s*", re.IGNORECASE)
_FENCE_END_RE = re.compile(r"\s*```\s*$", re.IGNORECASE)


def has_documentclass(tex: Optional[str]) -> bool:
    """True when the source declares a document class."""
    return bool(tex) and _DOCUMENTCLASS_RE.search(tex) is not None


def infer_engine(tex: str) -> EngineName:
    """
    Pick a compiler from preamble directives.

    Lua code needs lualatex; font selection and multilingual packages
    need xelatex; everything else compiles with pdflatex.
    """
    if _LUA_RE.search(tex):
        return SCRIPT_ENGINE
    if _FONT_RE.search(tex):
        return UNICODE_ENGINE
    return PLAIN_ENGINE


def engine_trial_order(initial: EngineName) -> List[EngineName]:
    """Initial engine first, then xelatex, lualatex, pdflatex, without repeats."""
    order: List[EngineName] = []
    for engine in (initial, UNICODE_ENGINE, SCRIPT_ENGINE, PLAIN_ENGINE):
        if engine not in order:
            order.append(engine)
    return order


def strip_code_fences(text: str) -> str:
    """Remove a leading ```latex / ```tex / ``` fence and a trailing ``` fence."""
    return _FENCE_END_RE.sub("", _FENCE_START_RE.sub("", text, count=1), count=1)
