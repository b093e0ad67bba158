"""File upload, detail, download, rename and delete routes."""

from typing import Optional

from fastapi import APIRouter, Depends, File as FastAPIFile, Form, Request, UploadFile, status
from fastapi.responses import HTMLResponse, RedirectResponse, StreamingResponse

from drive.auth import get_current_user
from drive.exceptions import InvalidIdError
from drive.repositories.user_repository import User
from drive.services.file_service import FileService
from drive.templating import templates
from drive.utils import content_disposition, is_valid_id, safe_redirect_target

router = APIRouter(tags=["Files"])


def _require_file_id(file_id: str) -> str:
    if not is_valid_id(file_id):
        raise InvalidIdError("Invalid file id")
    return file_id


@router.get("/files/{file_id}", response_class=HTMLResponse)
def file_details(file_id: str, request: Request, current_user: User = Depends(get_current_user)):
    file = FileService().get_details(_require_file_id(file_id), current_user.user_id)
    return templates.TemplateResponse(
        request,
        "file_detail.html",
        {"user": current_user, "file": file},
    )


@router.get("/files/{file_id}/download")
def download_file(file_id: str, current_user: User = Depends(get_current_user)):
    """
    Stream a file back as an attachment named after its original filename.

    Raises:
        - 404: File not found, or its blob is missing on disk
    """
    download = FileService().open_download(_require_file_id(file_id), current_user.user_id)

    return StreamingResponse(
        download.content,
        media_type=download.mime_type,
        headers={
            "Content-Disposition": content_disposition(download.meta.original_name),
            "Content-Length": str(download.size_bytes),
        }
    )


@router.post("/upload")
def upload_file(
    folder_id: str = Form("", alias="folderId"),
    uploaded_file: Optional[UploadFile] = FastAPIFile(None),
    current_user: User = Depends(get_current_user),
):
    """
    Upload one file (multipart/form-data) into a folder.

    Raises:
        - 400: Missing folderId or file, or a file with that name already in the folder
        - 404: Folder not found
        - 413: File too large
    """
    if folder_id and not is_valid_id(folder_id):
        raise InvalidIdError("Invalid folder id")

    FileService().upload_file(
        owner_id=current_user.user_id,
        folder_id=folder_id,
        original_name=uploaded_file.filename if uploaded_file else None,
        content_type=uploaded_file.content_type if uploaded_file else None,
        file_data=uploaded_file.file if uploaded_file else None,
    )

    return RedirectResponse(url=f"/drive/{folder_id}", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/files/{file_id}/rename")
def rename_file(
    file_id: str,
    request: Request,
    name: str = Form(""),
    return_to: Optional[str] = Form(None, alias="returnTo"),
    current_user: User = Depends(get_current_user),
):
    FileService().rename_file(_require_file_id(file_id), current_user.user_id, name)
    target = safe_redirect_target(return_to, request.headers.get("referer"), request.url.netloc, "/drive")
    return RedirectResponse(url=target, status_code=status.HTTP_303_SEE_OTHER)


@router.post("/files/{file_id}/delete")
def delete_file(
    file_id: str,
    request: Request,
    return_to: Optional[str] = Form(None, alias="returnTo"),
    current_user: User = Depends(get_current_user),
):
    """
    Delete a file from disk, then its record.

    Raises:
        - 404: File not found
        - 500: The blob exists but could not be removed (record kept)
    """
    meta = FileService().delete_file(_require_file_id(file_id), current_user.user_id)
    target = safe_redirect_target(
        return_to,
        request.headers.get("referer"),
        request.url.netloc,
        f"/drive/{meta.folder_id}",
    )
    return RedirectResponse(url=target, status_code=status.HTTP_303_SEE_OTHER)
