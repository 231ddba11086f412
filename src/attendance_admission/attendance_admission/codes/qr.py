from __future__ import annotations

import io
from typing import List

import qrcode
from PIL import Image

from ..core.exceptions import ValidationError


def render_qr_png(data: str) -> bytes:
    """Render `data` as a PNG QR image."""

    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_qr_image(raw: bytes) -> List[str]:
    """Decode every QR payload found in an uploaded image."""

    # pyzbar loads the native zbar library at import time
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (OSError, ValueError) as e:
        raise ValidationError("Uploaded file is not a readable image") from e

    return [d.data.decode("utf-8", errors="replace").strip() for d in pyzbar_decode(image)]
