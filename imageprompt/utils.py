import base64
import binascii
import re
from typing import Any, List, Optional, Tuple

DEFAULT_MEDIA_TYPE = "image/jpeg"
DEFAULT_EXTENSION = "jpg"

_DATA_URL_RE = re.compile(r"^data:(image/[\w.+-]+);base64,", re.IGNORECASE)
_ANY_DATA_PREFIX_RE = re.compile(r"^data:[^,]*,", re.IGNORECASE)


def to_data_url(payload: str) -> str:
    """
    Turn a raw base64 payload into a displayable ``data:image/...`` reference.

    Well-formed image data URLs are returned untouched. Anything else has a
    leftover ``data:...,`` prefix removed before the JPEG marker is prepended.
    """
    if _DATA_URL_RE.match(payload):
        return payload
    raw = _ANY_DATA_PREFIX_RE.sub("", payload, count=1)
    return f"data:{DEFAULT_MEDIA_TYPE};base64,{raw}"


def normalize_response_to_data_urls(data: Any) -> List[str]:
    """
    Normalize a relay response body into a list of data URLs.

    Precedence: a non-empty ``images`` list, then a scalar ``images`` value,
    then a scalar ``image`` value. Empty and non-string entries are dropped.

    Args:
        data: Decoded JSON body returned by the relay (may be None).

    Returns:
        List[str]: Data URLs, in the order the relay returned them.
    """
    if not isinstance(data, dict):
        return []

    images = data.get("images")
    single = data.get("image")
    if isinstance(images, list) and images:
        candidates = images
    elif images and not isinstance(images, list):
        candidates = [images]
    elif single:
        candidates = [single]
    else:
        candidates = []

    return [to_data_url(item) for item in candidates if isinstance(item, str) and item]


def media_type_of(data_url: str) -> Optional[str]:
    match = _DATA_URL_RE.match(data_url)
    return match.group(1).lower() if match else None


def infer_extension(data_url: str) -> str:
    """Pick a file extension from the data URL's media type, ``jpg`` when unknown."""
    media_type = media_type_of(data_url)
    if not media_type:
        return DEFAULT_EXTENSION
    subtype = media_type.split("/", 1)[1]
    if subtype == "jpeg":
        return "jpg"
    return subtype or DEFAULT_EXTENSION


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """Split a data URL into its media type and decoded bytes.

    Raises:
        ValueError: if the payload is not valid base64.
    """
    media_type = media_type_of(data_url) or DEFAULT_MEDIA_TYPE
    payload = _ANY_DATA_PREFIX_RE.sub("", data_url, count=1)
    try:
        return media_type, base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Image payload is not valid base64: {exc}") from exc
