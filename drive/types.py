"""Drive-specific data type definitions."""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from drive.repositories.file_repository import File, FileMeta
from drive.repositories.folder_repository import Folder


@dataclass(frozen=True)
class FolderListing:
    """
    Everything the drive page shows for one level of the tree.

    current_folder is None at the root, where parent_chain and files are empty
    (files always live inside a folder).
    """
    current_folder: Optional[Folder]
    parent_chain: List[Folder] = field(default_factory=list)
    folders: List[Folder] = field(default_factory=list)
    files: List[File] = field(default_factory=list)


@dataclass(frozen=True)
class Download:
    """
    An owned file ready to be streamed back to the browser.
    """
    meta: FileMeta
    mime_type: str
    size_bytes: int
    content: Iterator[bytes]
