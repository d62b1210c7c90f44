"""Export endpoint.

GET /api/products/{product_id}/export/{format} returns the rendered file as
an attachment. ``pdf`` is captured server-side from the print view with
WeasyPrint. After every attempt the product is marked completed on a best
effort basis, as the download follow-up does.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import Response

from product_studio.api.dependencies import SessionDep
from product_studio.errors import ExportError
from product_studio.models import ExportFormat
from product_studio.services.download import finalize_download
from product_studio.services.pdf_generator import PDF_MEDIA_TYPE, capture_pdf

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products/{product_id}/export", tags=["Export"])


@router.get("/{format}")
async def export_product(session: SessionDep, format: ExportFormat) -> Response:
    """Render the product in one format and return it as a download.

    Raises:
        ExportError: If rendering or PDF capture fails (mapped to 500).
    """
    outcome = session.render_export(format)
    delivered = False
    try:
        if not outcome.ok:
            raise ExportError(format.value, outcome.error_message or "export failed")

        artifact = outcome.artifact
        content, media_type = artifact.content, artifact.media_type
        if format == ExportFormat.pdf:
            content = await capture_pdf(artifact.content.decode("utf-8"))
            media_type = PDF_MEDIA_TYPE
        delivered = True
    finally:
        notifications = await finalize_download(delivered, session, session.product_id)
        for notification in notifications:
            logger.info(f"Export {session.product_id} [{notification.level.value}] {notification.message}")

    return Response(
        content=content,
        media_type=media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{artifact.filename}"',
            "X-Product-Status": session.product.status.value,
        },
    )
