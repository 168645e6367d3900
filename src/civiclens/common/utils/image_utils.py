# File: common/utils/image_utils.py
import base64
import binascii
import re
from typing import Tuple

from civiclens.common.exceptions.base_exception import BadRequestException
from civiclens.common.translations.messages import get_message

DATA_URI_REGEX = re.compile(r"^data:(?P<mime>image/[a-zA-Z0-9.+-]+);base64,(?P<data>[A-Za-z0-9+/=\s]+)$")


def parse_image_data_uri(data_uri: str) -> Tuple[str, int]:
    """
    Validate a `data:<mimetype>;base64,<payload>` photo.

    Returns:
        (mime_type, decoded_size_in_bytes)

    Raises:
        ValueError: If the value is not a base64 image data URI.
    """
    match = DATA_URI_REGEX.match(data_uri.strip()) if data_uri else None
    if not match:
        raise ValueError("Not a base64 image data URI")
    try:
        decoded = base64.b64decode(match.group("data"), validate=False)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 payload: {e}")
    if not decoded:
        raise ValueError("Empty image payload")
    return match.group("mime").lower(), len(decoded)


def validate_photo(data_uri: str, max_bytes: int) -> str:
    """
    Reject anything that is not an image data URI within the size limit.

    Returns:
        The MIME type of the photo.

    Raises:
        BadRequestException: With a user-facing message.
    """
    try:
        mime, size = parse_image_data_uri(data_uri)
    except ValueError:
        raise BadRequestException(get_message("submission.invalid_image"))
    if size > max_bytes:
        raise BadRequestException(get_message("submission.image_too_large"))
    return mime
