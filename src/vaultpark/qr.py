"""QR image rendering for tokens.

The image is a lossless carrier: the encoded payload is the token string
exactly as produced by the encoder, with no trimming or substitution.
"""

from __future__ import annotations

import io

import qrcode
from qrcode.image.pure import PyPNGImage

DEFAULT_BOX_SIZE = 10
DEFAULT_BORDER = 1


def _build(token: str, *, box_size: int, border: int) -> qrcode.QRCode:
    if not isinstance(token, str) or not token:
        raise ValueError("token must be a non-empty string")
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=box_size,
        border=border,
    )
    qr.add_data(token)
    qr.make(fit=True)
    return qr


def render_qr_png(token: str, *, box_size: int = DEFAULT_BOX_SIZE, border: int = DEFAULT_BORDER) -> bytes:
    """Render *token* as a PNG image at error-correction level H."""
    qr = _build(token, box_size=box_size, border=border)
    img = qr.make_image(image_factory=PyPNGImage)
    buffer = io.BytesIO()
    img.save(buffer)
    return buffer.getvalue()


def qr_matrix(token: str, *, border: int = DEFAULT_BORDER) -> list[list[bool]]:
    """Module matrix of the QR symbol for *token*, border included."""
    return _build(token, box_size=1, border=border).get_matrix()
