"""
LaTeX to PDF compilation through the hosted latexonline.cc service.

Text sources are first sent directly to ``/compile`` for every candidate
engine (POST, then GET). When all of those fail, the source is packed into
a tar/bzip2 archive and uploaded to ``/data``. Archives built here can be
repaired once: style files the log reports as missing are fetched from
CTAN, added next to ``main.tex`` and the archive is uploaded again.

Caller supplied archives are forwarded untouched and never rewritten.
"""
import logging
import re
import tarfile
import tempfile
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import List, Optional, Tuple
from urllib.parse import quote

import httpx

from shared.errors import PayloadTooLarge, RateLimited, UpstreamExhausted, ValidationError
from shared.latex.archive import (
    ARCHIVE_NAME,
    ENTRY_POINT,
    archive_content_type,
    find_missing_packages,
    is_allowed_upload,
    is_archive_upload,
    pack_document,
    pack_sources,
    read_sources,
)
from shared.latex.engines import (
    PLAIN_ENGINE,
    EngineName,
    engine_trial_order,
    has_documentclass,
    infer_engine,
)
from shared.schemas.compile import CompileResult, EngineAttempt, UploadedSource
from shared.utils.http import UpstreamResponse, describe_http_error, send_request
from shared.utils.rate_limit import NoRateLimit, RateLimiter

logger = logging.getLogger(__name__)

LATEX_SERVICE_URL = "https://latexonline.cc"
CTAN_MIRROR_URL = "https://mirrors.ctan.org/macros/latex/contrib"
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024

ARCHIVE_ATTEMPT_LABEL = "tar-bz2"
RETRY_ARCHIVE_NAME = "archive_retry.tar.bz2"

_SAFE_PACKAGE_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.-]*")


class ArchivePhase(Enum):
    """Steps of an archive compilation. FETCH_AND_RETRY always ends in FINAL, so there is one retry at most."""
    ATTEMPT = "attempt"
    DETECT_MISSING = "detect_missing"
    FETCH_AND_RETRY = "fetch_and_retry"
    FINAL = "final"


def safe_filename(filename: Optional[str]) -> str:
    """Basename of a client supplied file name."""
    name = PurePosixPath((filename or "").replace("\\", "/")).name
    return name or "upload"


class LatexCompiler:
    """Compiles LaTeX text or uploads into PDF bytes."""

    def __init__(
        self,
        *,
        service_url: str = LATEX_SERVICE_URL,
        mirror_url: str = CTAN_MIRROR_URL,
        direct_timeout: float = 40.0,
        archive_timeout: float = 120.0,
        mirror_timeout: float = 30.0,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        upload_rate_limiter: Optional[RateLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        temp_dir: Optional[str] = None,
    ):
        self.service_url = service_url.rstrip("/")
        self.mirror_url = mirror_url.rstrip("/")
        self.direct_timeout = direct_timeout
        self.archive_timeout = archive_timeout
        self.mirror_timeout = mirror_timeout
        self.max_upload_bytes = max_upload_bytes
        self.upload_rate_limiter = upload_rate_limiter or NoRateLimit()
        self._transport = transport
        self.temp_dir = temp_dir

    def _client(self) -> httpx.AsyncClient:
        # CTAN's mirror URL redirects to a concrete mirror
        return httpx.AsyncClient(transport=self._transport, follow_redirects=True)

    # ------------------------------------------------------------------
    # Text path
    # ------------------------------------------------------------------

    async def compile_text(self, latex: str, engine: Optional[EngineName] = None) -> CompileResult:
        """
        Compile a LaTeX document.

        Args:
            latex: Complete document source
            engine: Engine to try first; inferred from the preamble when omitted

        Returns:
            CompileResult with the PDF bytes

        Raises:
            ValidationError: the source has no \\documentclass
            UpstreamExhausted: every engine and the archive endpoint failed
        """
        if not has_documentclass(latex):
            raise ValidationError("Invalid or missing LaTeX document")

        initial = engine or infer_engine(latex)
        attempts: List[EngineAttempt] = []
        logger.info(f"Compiling {len(latex)} chars of LaTeX, starting with {initial}")

        async with self._client() as client:
            for eng in engine_trial_order(initial):
                for method in ("POST", "GET"):
                    pdf = await self._direct_attempt(client, method, eng, latex, attempts)
                    if pdf is not None:
                        logger.info(f"Compiled with {eng} ({method})")
                        return CompileResult(pdf=pdf, engine=eng, attempts=attempts)

            logger.warning(f"Direct compilation failed for all engines ({len(attempts)} attempts), trying archive upload")
            return await self._compile_in_workdir(client, latex.encode("utf-8"), attempts)

    async def _direct_attempt(
        self,
        client: httpx.AsyncClient,
        method: str,
        engine: str,
        latex: str,
        attempts: List[EngineAttempt],
    ) -> Optional[bytes]:
        url = f"{self.service_url}/compile"
        if method == "POST":
            kwargs = {"params": {"command": engine}, "data": {"text": latex}}
        else:
            kwargs = {"params": {"command": engine, "force": "true", "text": latex}}

        try:
            response = await send_request(client, method, url, timeout=self.direct_timeout, **kwargs)
        except httpx.HTTPError as e:
            attempts.append(EngineAttempt(engine=engine, error=describe_http_error(e)))
            return None

        if response.succeeded:
            return response.content
        attempts.append(EngineAttempt(engine=engine, status=response.status_code, error=response.snippet()))
        return None

    # ------------------------------------------------------------------
    # Upload path
    # ------------------------------------------------------------------

    def validate_upload(self, upload: UploadedSource, client_id: str = "unknown") -> str:
        """Rate limit and check an upload; returns the sanitized file name."""
        if not self.upload_rate_limiter.check_and_increment(client_id):
            logger.warning(f"Upload rate limit exceeded for {client_id}")
            raise RateLimited()

        name = safe_filename(upload.filename)
        if not is_allowed_upload(name):
            raise ValidationError("Unsupported file type")
        if len(upload.content) > self.max_upload_bytes:
            raise PayloadTooLarge("Uploaded file is too large")
        return name

    def build_upload_archive(self, upload: UploadedSource, client_id: str = "unknown") -> Tuple[str, bytes, str]:
        """
        Archive that would be sent for an upload, without compiling it.

        Returns:
            (file name, archive bytes, content type)
        """
        name = self.validate_upload(upload, client_id)
        if is_archive_upload(name):
            return name, upload.content, archive_content_type(name)
        archive = pack_document(upload.content)
        return ARCHIVE_NAME, archive, archive_content_type(ARCHIVE_NAME)

    async def compile_upload(self, upload: UploadedSource, client_id: str = "unknown") -> CompileResult:
        """
        Compile an uploaded ``.tex`` file or tar archive through the archive endpoint.

        ``.tex`` uploads are packed as ``main.tex`` and may be repaired with
        packages from CTAN; archives are forwarded as-is.

        Raises:
            RateLimited, ValidationError, PayloadTooLarge: upload rejected
            UpstreamExhausted: compilation failed; carries the service log and status
        """
        name = self.validate_upload(upload, client_id)
        attempts: List[EngineAttempt] = []

        async with self._client() as client:
            if is_archive_upload(name):
                logger.info(f"Forwarding uploaded archive {name} ({len(upload.content)} bytes)")
                return await self._compile_archive(client, upload.content, name, None, attempts)
            logger.info(f"Packing uploaded {name} as {ENTRY_POINT}")
            return await self._compile_in_workdir(client, upload.content, attempts)

    # ------------------------------------------------------------------
    # Archive endpoint
    # ------------------------------------------------------------------

    async def _compile_in_workdir(
        self, client: httpx.AsyncClient, tex: bytes, attempts: List[EngineAttempt]
    ) -> CompileResult:
        # The temporary directory is removed on every exit path, exceptions included
        with tempfile.TemporaryDirectory(prefix="latex-", dir=self.temp_dir) as tmp:
            workdir = Path(tmp)
            try:
                (workdir / ENTRY_POINT).write_bytes(tex)
                archive = pack_sources(read_sources(workdir))
            except (OSError, tarfile.TarError) as e:
                attempts.append(EngineAttempt(engine=ARCHIVE_ATTEMPT_LABEL, error=f"tar creation failed: {e}"))
                raise UpstreamExhausted("Compilation failed across engines.", tried=attempts) from e
            return await self._compile_archive(client, archive, ARCHIVE_NAME, workdir, attempts)

    async def _compile_archive(
        self,
        client: httpx.AsyncClient,
        archive: bytes,
        filename: str,
        workdir: Optional[Path],
        attempts: List[EngineAttempt],
    ) -> CompileResult:
        """
        Upload an archive, repairing missing packages once when ``workdir`` is given.

        ``workdir`` is only set for archives built here; it holds ``main.tex``
        and receives any fetched ``.sty`` files.
        """
        phase = ArchivePhase.ATTEMPT
        response: Optional[UpstreamResponse] = None
        missing: List[str] = []

        while phase is not ArchivePhase.FINAL:
            if phase is ArchivePhase.ATTEMPT:
                response = await self._upload_archive(client, filename, archive, attempts)
                if response is not None and response.succeeded:
                    return CompileResult(pdf=response.content, engine=ARCHIVE_ATTEMPT_LABEL, attempts=attempts)
                recoverable = workdir is not None and response is not None
                phase = ArchivePhase.DETECT_MISSING if recoverable else ArchivePhase.FINAL

            elif phase is ArchivePhase.DETECT_MISSING:
                missing = find_missing_packages(response.text)
                if missing:
                    logger.info(f"Compilation log reports missing packages: {missing}")
                phase = ArchivePhase.FETCH_AND_RETRY if missing else ArchivePhase.FINAL

            elif phase is ArchivePhase.FETCH_AND_RETRY:
                fetched = await self._fetch_packages(client, missing, workdir)
                if fetched:
                    try:
                        retry_archive = pack_sources(read_sources(workdir))
                    except (OSError, tarfile.TarError) as e:
                        logger.warning(f"Could not rebuild archive with fetched packages: {e}")
                        retry_archive = None
                    if retry_archive is not None:
                        retry = await self._upload_archive(client, RETRY_ARCHIVE_NAME, retry_archive, attempts)
                        if retry is not None and retry.succeeded:
                            logger.info(f"Compiled after fetching {fetched}")
                            return CompileResult(pdf=retry.content, engine=ARCHIVE_ATTEMPT_LABEL, attempts=attempts)
                        if retry is not None:
                            response = retry
                phase = ArchivePhase.FINAL

        raise UpstreamExhausted(
            "Compilation failed across engines.",
            tried=attempts,
            log=response.text if response is not None else None,
            status=response.status_code if response is not None else None,
        )

    async def _upload_archive(
        self,
        client: httpx.AsyncClient,
        filename: str,
        archive: bytes,
        attempts: List[EngineAttempt],
    ) -> Optional[UpstreamResponse]:
        try:
            response = await send_request(
                client,
                "POST",
                f"{self.service_url}/data",
                timeout=self.archive_timeout,
                params={"target": ENTRY_POINT, "force": "true", "command": PLAIN_ENGINE},
                files={"file": (filename, archive, archive_content_type(filename))},
            )
        except httpx.HTTPError as e:
            attempts.append(EngineAttempt(engine=ARCHIVE_ATTEMPT_LABEL, error=describe_http_error(e)))
            return None

        if not response.succeeded:
            attempts.append(
                EngineAttempt(engine=ARCHIVE_ATTEMPT_LABEL, status=response.status_code, error=response.snippet())
            )
        return response

    async def _fetch_packages(self, client: httpx.AsyncClient, names: List[str], workdir: Path) -> List[str]:
        """Download ``<name>.sty`` files from the mirror into ``workdir``; returns the names fetched."""
        fetched: List[str] = []
        for name in names:
            if not _SAFE_PACKAGE_RE.fullmatch(name):
                logger.warning(f"Skipping suspicious package name {name!r}")
                continue
            url = f"{self.mirror_url}/{quote(name)}/{quote(name)}.sty"
            try:
                response = await send_request(client, "GET", url, timeout=self.mirror_timeout)
            except httpx.HTTPError as e:
                logger.warning(f"Fetching {name}.sty failed: {describe_http_error(e)}")
                continue
            if not response.ok:
                logger.warning(f"Fetching {name}.sty failed with status {response.status_code}")
                continue
            (workdir / f"{name}.sty").write_bytes(response.content)
            fetched.append(name)
        return fetched
