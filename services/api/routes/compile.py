import logging
from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from shared.errors import PayloadTooLarge, UpstreamExhausted, ValidationError
from shared.schemas.compile import CompileRequest, UploadedSource
from ..dependencies import client_ip, get_latex_compiler
from ..latex_compiler import LatexCompiler, safe_filename

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/compile", tags=["compile"])


def _pdf_response(pdf: bytes) -> Response:
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Cache-Control": "no-cache"},
    )


@router.post("")
async def compile_latex(
    request: CompileRequest,
    compiler: LatexCompiler = Depends(get_latex_compiler),
):
    """
    Compile a LaTeX document (JSON body {latex, engine?}) into a PDF.

    Returns the PDF, or 502 with every attempt when all engines fail.
    """
    try:
        result = await compiler.compile_text(request.latex, request.engine)
    except UpstreamExhausted as e:
        logger.error(f"Compilation failed after {len(e.tried)} attempts")
        return JSONResponse(status_code=e.status_code, content=e.to_dict())
    return _pdf_response(result.pdf)


@router.post("/upload")
async def compile_upload(
    file: UploadFile = File(None, description=".tex file or .tar/.tar.bz2 archive"),
    only_archive: bool = Query(False, alias="onlyArchive", description="Return the archive instead of compiling"),
    compiler: LatexCompiler = Depends(get_latex_compiler),
    ip: str = Depends(client_ip),
):
    """
    Compile an uploaded .tex file or archive.

    On failure the service log is returned as text with the upstream status.
    """
    if file is None:
        raise ValidationError("Missing file field")
    if file.size is not None and file.size > compiler.max_upload_bytes:
        raise PayloadTooLarge("Uploaded file is too large")

    # one byte past the ceiling is enough for validate_upload to reject it
    content = await file.read(compiler.max_upload_bytes + 1)
    upload = UploadedSource(filename=safe_filename(file.filename), content=content)

    if only_archive:
        name, archive, content_type = compiler.build_upload_archive(upload, client_id=ip)
        return Response(
            content=archive,
            media_type=content_type,
            headers={"Content-Disposition": f'attachment; filename="{name}"'},
        )

    try:
        result = await compiler.compile_upload(upload, client_id=ip)
    except UpstreamExhausted as e:
        logger.error(f"Upload compilation failed (status={e.status})")
        if e.log is not None:
            return PlainTextResponse(e.log, status_code=e.status or e.status_code)
        return JSONResponse(status_code=e.status_code, content=e.to_dict())
    return _pdf_response(result.pdf)
