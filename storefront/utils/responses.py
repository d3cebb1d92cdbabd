from urllib.parse import quote

from fastapi import Response

from storefront.services.download_service import FilePayload


def attachment_response(payload: FilePayload) -> Response:
    filename = payload.filename
    try:
        filename.encode("latin-1")
        disposition = f'attachment; filename="{filename}"'
    except UnicodeEncodeError:
        disposition = f"attachment; filename*=UTF-8''{quote(filename)}"

    return Response(
        content=payload.content,
        media_type="application/octet-stream",
        headers={
            "Content-Disposition": disposition,
            "Content-Length": str(payload.size),
        },
    )
