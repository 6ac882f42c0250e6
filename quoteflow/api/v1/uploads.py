from __future__ import annotations

from typing import List, Optional

from fastapi import UploadFile

from quoteflow.services.object_store import ImageUpload


def read_uploads(files: List[UploadFile], descriptions: Optional[List[str]]) -> List[ImageUpload]:
    """descriptions[i] belongs to files[i]; empty files are skipped."""
    out: List[ImageUpload] = []
    for i, f in enumerate(files):
        data = f.file.read()
        if not data:
            continue
        desc = descriptions[i] if descriptions and i < len(descriptions) else None
        out.append(
            ImageUpload(
                data=data,
                filename=f.filename or "image",
                content_type=f.content_type or "application/octet-stream",
                description=desc or None,
            )
        )
    return out
