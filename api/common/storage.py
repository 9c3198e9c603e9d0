"""
Utility module for product image storage.
Images live in Cloudinary; documents only keep their secure URLs.
"""
import os
import uuid
from datetime import datetime
from typing import List, Optional

import cloudinary
import cloudinary.uploader
from fastapi import HTTPException, UploadFile
from starlette import status

ALLOWED_FORMATS = ["jpg", "jpeg", "png", "webp"]
MAX_IMAGE_WIDTH = 1200


def configure_cloudinary():
    """Configure Cloudinary with environment variables."""
    try:
        cloudinary.config(
            cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME"),
            api_key=os.getenv("CLOUDINARY_API_KEY"),
            api_secret=os.getenv("CLOUDINARY_API_SECRET"),
            secure=True
        )
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to configure Cloudinary: {str(e)}"
        )


def get_upload_folder() -> str:
    return os.getenv("CLOUDINARY_FOLDER", "bv-celular")


async def upload_image(file: UploadFile, folder: Optional[str] = None) -> str:
    """
    Upload an image file to Cloudinary.

    Args:
        file: The file to upload
        folder: The Cloudinary folder (defaults to CLOUDINARY_FOLDER)

    Returns:
        The secure URL of the uploaded file

    Raises:
        HTTPException: If the file is not an image or the upload fails
    """
    if not file:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file provided"
        )

    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File must be an image, got {content_type}"
        )

    try:
        configure_cloudinary()

        contents = await file.read()

        # Keep the original name readable in the public id, like "<uuid>-photo"
        base_name = os.path.splitext(file.filename or "")[0] or "image"
        public_id = f"{uuid.uuid4()}-{base_name}"

        result = cloudinary.uploader.upload(
            contents,
            public_id=public_id,
            folder=folder or get_upload_folder(),
            resource_type="image",
            allowed_formats=ALLOWED_FORMATS,
            transformation=[{"width": MAX_IMAGE_WIDTH, "crop": "limit"}],
            tags=[f"uploaded_{datetime.now().strftime('%Y%m%d%H%M%S')}"],
        )

        return result.get("secure_url")

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to upload image: {str(e)}"
        )
    finally:
        await file.seek(0)


async def upload_images(files: List[UploadFile], folder: Optional[str] = None) -> List[str]:
    """
    Upload files one after another and return their URLs in upload order.
    The first failure aborts the batch and removes the images already uploaded.
    """
    urls = []
    try:
        for file in files or []:
            urls.append(await upload_image(file, folder=folder))
    except Exception:
        if urls:
            await delete_images(urls)
        raise
    return urls


def extract_public_id(url: str) -> Optional[str]:
    """
    Extract the Cloudinary public id from a delivery URL.

    URL format: https://res.cloudinary.com/CLOUD_NAME/image/upload/v1234567890/folder/file_id.ext

    Returns:
        The public id (folder/file_id) or None when the URL is not a Cloudinary URL
    """
    if not url or "cloudinary.com" not in url:
        return None

    url_parts = url.split("/")
    version_index = -1
    for i, part in enumerate(url_parts):
        if part.startswith("v") and part[1:].isdigit():
            version_index = i
            break

    if version_index == -1 or version_index == len(url_parts) - 1:
        return None

    public_id_with_ext = "/".join(url_parts[version_index + 1:])
    return os.path.splitext(public_id_with_ext)[0]


async def delete_image_by_url(url: str) -> bool:
    """
    Delete an image from Cloudinary using its public URL.

    Returns:
        True if deletion was successful, False otherwise
    """
    public_id = extract_public_id(url)
    if not public_id:
        return False

    try:
        configure_cloudinary()
        result = cloudinary.uploader.destroy(public_id)
        return result.get("result") == "ok"
    except Exception as e:
        print(f"Warning: Error deleting image {public_id}: {str(e)}")
        return False


async def delete_images(urls: List[str]) -> int:
    """Delete several images; returns how many were actually removed."""
    deleted = 0
    for url in urls or []:
        if await delete_image_by_url(url):
            deleted += 1
    return deleted
