from __future__ import annotations

import io
from typing import BinaryIO

import qrcode
from PIL import Image

from ..core.exceptions import ValidationError


def badge_png(data: str) -> io.BytesIO:
    """Render ``data`` as a QR code PNG, ready for ``send_file``."""

    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    buf = io.BytesIO()
    qr.make_image(fill_color="black", back_color="white").save(buf, format="PNG")
    buf.seek(0)
    return buf


def decode_qr_image(stream: BinaryIO) -> str:
    """Text of the first QR code found in an uploaded image."""

    # pyzbar loads the zbar shared library on import.
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except (OSError, ValueError):
        raise ValidationError("Uploaded file is not a readable image")

    decoded = pyzbar_decode(img)
    if not decoded:
        raise ValidationError("No QR code found in the image")
    return decoded[0].data.decode("utf-8").strip()
