"""Folder browsing and folder management routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from drive.auth import get_current_user
from drive.exceptions import InvalidIdError
from drive.repositories.user_repository import User
from drive.services.drive_service import DriveService
from drive.templating import templates
from drive.utils import is_valid_id, safe_redirect_target

router = APIRouter(tags=["Drive"])


def _require_folder_id(folder_id: str) -> str:
    if not is_valid_id(folder_id):
        raise InvalidIdError("Invalid folder id")
    return folder_id


def _redirect_back(request: Request, return_to: Optional[str], default: str) -> RedirectResponse:
    target = safe_redirect_target(
        return_to,
        request.headers.get("referer"),
        request.url.netloc,
        default,
    )
    return RedirectResponse(url=target, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/drive", response_class=HTMLResponse)
def drive_root(request: Request, current_user: User = Depends(get_current_user)):
    """
    List the current user's root folders. Files only live inside folders.
    """
    listing = DriveService().root_listing(current_user.user_id)
    return templates.TemplateResponse(
        request,
        "drive.html",
        {"user": current_user, "listing": listing},
    )


@router.get("/drive/{folder_id}", response_class=HTMLResponse)
def drive_folder(folder_id: str, request: Request, current_user: User = Depends(get_current_user)):
    """
    List the subfolders and files of one folder, with its breadcrumb.

    Raises:
        - 400: Malformed folder id
        - 404: Folder not found (or owned by someone else)
    """
    listing = DriveService().folder_listing(_require_folder_id(folder_id), current_user.user_id)
    return templates.TemplateResponse(
        request,
        "drive.html",
        {"user": current_user, "listing": listing},
    )


@router.post("/folders")
def create_folder(
    name: str = Form(""),
    parent_id: Optional[str] = Form(None, alias="parentId"),
    current_user: User = Depends(get_current_user),
):
    """
    Create a folder at the root or under parentId, then show the parent.

    Raises:
        - 400: Empty name, malformed parentId, or a sibling with the same name
        - 404: Parent folder not found
    """
    parent_id = parent_id or None
    if parent_id is not None:
        _require_folder_id(parent_id)

    DriveService().create_folder(name, current_user.user_id, parent_id)

    target = f"/drive/{parent_id}" if parent_id else "/drive"
    return RedirectResponse(url=target, status_code=status.HTTP_303_SEE_OTHER)


@router.post("/folders/{folder_id}/rename")
def rename_folder(
    folder_id: str,
    request: Request,
    name: str = Form(""),
    return_to: Optional[str] = Form(None, alias="returnTo"),
    current_user: User = Depends(get_current_user),
):
    DriveService().rename_folder(_require_folder_id(folder_id), current_user.user_id, name)
    return _redirect_back(request, return_to, "/drive")


@router.post("/folders/{folder_id}/delete")
def delete_folder(
    folder_id: str,
    request: Request,
    return_to: Optional[str] = Form(None, alias="returnTo"),
    current_user: User = Depends(get_current_user),
):
    """
    Delete a folder and the files directly inside it.

    Raises:
        - 404: Folder not found
        - 409: Folder still has subfolders
    """
    parent_id = DriveService().delete_folder(_require_folder_id(folder_id), current_user.user_id)
    default = f"/drive/{parent_id}" if parent_id else "/drive"
    return _redirect_back(request, return_to, default)
