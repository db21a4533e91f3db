from .app import app, create_app
from .latex_compiler import LatexCompiler

__all__ = [
    "app",
    "create_app",
    "LatexCompiler",
]
