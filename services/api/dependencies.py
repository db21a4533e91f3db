"""FastAPI dependencies shared by the routers."""
from fastapi import Request

from shared.ai.resume_tailor import ResumeTailor

from .config import APIConfig
from .latex_compiler import LatexCompiler


def client_ip(request: Request) -> str:
    """First X-Forwarded-For entry, else the socket peer, else 'unknown'."""
    forwarded = request.headers.get("x-forwarded-for", "")
    ip = forwarded.split(",")[0].strip()
    if ip:
        return ip
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_api_config(request: Request) -> APIConfig:
    return request.app.state.config


def get_resume_tailor(request: Request) -> ResumeTailor:
    return request.app.state.resume_tailor


def get_latex_compiler(request: Request) -> LatexCompiler:
    return request.app.state.latex_compiler
