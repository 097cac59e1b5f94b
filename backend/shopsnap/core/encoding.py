import base64
from typing import Optional

# Bytes read per encoding step for uploaded images
CHUNK_SIZE = 8192


def b64encode_chunked(data: bytes, chunk_size: int = CHUNK_SIZE) -> str:
    """
    Base64-encode arbitrarily large uploads piece by piece.

    Base64 maps every 3 input bytes to 4 output chars, so the step is aligned
    down to a multiple of 3; with that, concatenating the encoded pieces gives
    exactly what a single b64encode() of the whole buffer gives.
    """
    step = chunk_size - (chunk_size % 3)
    if step <= 0:
        raise ValueError(f"chunk_size must be at least 3, got {chunk_size}")

    view = memoryview(data)
    parts = [
        base64.b64encode(view[i:i + step]).decode("ascii")
        for i in range(0, len(view), step)
    ]
    return "".join(parts)


def sniff_image_mime(data: bytes) -> str:
    # Magic bytes; anything unrecognised is sent as JPEG
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if data[:4] == b"GIF8":
        return "image/gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def resolve_mime_type(declared: Optional[str], data: bytes) -> str:
    """
    Use the MIME type the client declared for the upload when it names an
    image; otherwise fall back to sniffing the bytes.
    """
    if declared and declared.strip().lower().startswith("image/"):
        return declared.strip()
    return sniff_image_mime(data)
