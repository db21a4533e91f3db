"""
Tar/bzip2 packing for the compilation service's archive endpoint.

The service compiles the entry point named by its ``target`` parameter,
so single-document archives always carry the source as ``main.tex``.
"""
import io
import re
import tarfile
import time
from pathlib import Path
from typing import Dict, List, Mapping, Union

ENTRY_POINT = "main.tex"
ARCHIVE_NAME = "archive.tar.bz2"

ALLOWED_UPLOAD_SUFFIXES = (".tex", ".tar", ".tar.bz2", ".tbz2", ".tar.bz")
ARCHIVE_SUFFIXES = (".tar", ".tar.bz2", ".tbz2", ".tar.bz")
SOURCE_SUFFIXES = (".tex", ".sty", ".cls")

_MISSING_STY_RE = re.compile(r"File `([^']+)\.sty' not found")


def pack_sources(files: Mapping[str, Union[str, bytes]]) -> bytes:
    """
    Build a bzip2-compressed tar archive in memory.

    Args:
        files: Archive member name -> text or raw bytes

    Returns:
        The archive bytes
    """
    buffer = io.BytesIO()
    now = int(time.time())
    with tarfile.open(fileobj=buffer, mode="w:bz2") as tar:
        for name, data in files.items():
            payload = data.encode("utf-8") if isinstance(data, str) else data
            info = tarfile.TarInfo(name=name)
            info.size = len(payload)
            info.mtime = now
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(payload))
    return buffer.getvalue()


def pack_document(tex: Union[str, bytes]) -> bytes:
    """Archive a single LaTeX document as ``main.tex``."""
    return pack_sources({ENTRY_POINT: tex})


def read_sources(workdir: Path) -> Dict[str, bytes]:
    """Collect the entry point and any fetched style/class files from a working directory."""
    files: Dict[str, bytes] = {}
    entry = workdir / ENTRY_POINT
    if entry.exists():
        files[ENTRY_POINT] = entry.read_bytes()
    for path in sorted(workdir.iterdir()):
        if path.is_file() and path.name != ENTRY_POINT and path.suffix in SOURCE_SUFFIXES:
            files[path.name] = path.read_bytes()
    return files


def find_missing_packages(log_text: str) -> List[str]:
    """Names of ``.sty`` files the compiler reported as missing, first occurrence order."""
    names: List[str] = []
    for match in _MISSING_STY_RE.finditer(log_text):
        name = match.group(1)
        if name and name not in names:
            names.append(name)
    return names


def is_allowed_upload(filename: str) -> bool:
    return filename.lower().endswith(ALLOWED_UPLOAD_SUFFIXES)


def is_archive_upload(filename: str) -> bool:
    return filename.lower().endswith(ARCHIVE_SUFFIXES)


def archive_content_type(filename: str) -> str:
    lower = filename.lower()
    if ".bz" in lower or ".tbz" in lower:
        return "application/x-bzip2"
    return "application/x-tar"
