"""Photo payload helpers used by the save pipeline."""
import base64
import binascii
import io
import re

from PIL import Image, UnidentifiedImageError

# "data:image/png;base64," header produced by canvas.toDataURL()
_DATA_URI_HEADER = re.compile(r"^data:image/[\w.+-]+;base64,")


class InvalidImageError(ValueError):
    pass


def strip_data_uri(payload: str) -> str:
    return _DATA_URI_HEADER.sub("", payload.strip(), count=1)


def decode_payload(payload: str) -> bytes:
    """
    Decode a raw base64 or data-URI photo payload and check it is an image.

    The decoded bytes are returned untouched (no re-encoding); Pillow is only
    used to verify them. Raises InvalidImageError on bad base64 or non-image data.
    """
    b64 = "".join(strip_data_uri(payload).split())
    try:
        data = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError(f"not valid base64 ({e})") from e
    if not data:
        raise InvalidImageError("empty image data")

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()  # raises on corrupt / non-image data
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise InvalidImageError("not a readable image") from e
    return data
