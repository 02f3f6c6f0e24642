"""
Map a client-requested image name to a file inside the image directory.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from core.errors import InvalidRequest

from .ingest import DEFAULT_IMAGE_NAME, IMAGE_EXTENSION

logger = logging.getLogger(__name__)


def default_image_path(images_dir: Path) -> Path:
    return images_dir / DEFAULT_IMAGE_NAME


def _safe_join(base_dir: Path, requested_name: str) -> Path:
    # Lexical only: no filesystem access until the name is known to be safe.
    root = os.path.normpath(os.path.abspath(base_dir))
    candidate = os.path.normpath(os.path.join(root, requested_name))
    if os.path.commonpath([root, candidate]) != root or candidate == root:
        raise InvalidRequest("Image path escapes its directory.")
    return Path(candidate)


def safe_image_path(base_dir: Path, requested_name: str) -> Path:
    """
    Join `requested_name` onto `base_dir`, rejecting anything that is not a
    `.jpg` inside that directory. Purely lexical.
    """
    if not requested_name or "\x00" in requested_name:
        raise InvalidRequest("Image filename is required.")
    if not requested_name.endswith(IMAGE_EXTENSION):
        raise InvalidRequest(f"Image path does not end with {IMAGE_EXTENSION}")
    return _safe_join(base_dir, requested_name.replace("\\", "/"))


def resolve(requested_name: str, *, images_dir: Path) -> Path:
    """
    Return the on-disk path for `requested_name`.

    Names that do not end with `.jpg` or that traverse out of `images_dir`
    are rejected with InvalidRequest. A missing file is not an error: the
    default image path is returned instead.
    """
    path = safe_image_path(images_dir, requested_name)
    if not path.is_file():
        logger.debug("image_not_found requested=%s", requested_name)
        return Path(os.path.abspath(default_image_path(images_dir)))
    return path
