"""QR code rendering for the pairing page."""

from __future__ import annotations

import base64

import qrcode


def qr_svg(qr_text: str) -> str:
    qr = qrcode.QRCode(border=1)
    qr.add_data(qr_text)
    qr.make(fit=True)
    matrix = qr.get_matrix()
    size = len(matrix)
    cells: list[str] = []
    for y, row in enumerate(matrix):
        for x, is_dark in enumerate(row):
            if is_dark:
                cells.append(f"<rect x='{x}' y='{y}' width='1' height='1'/>")
    return (
        f"<svg xmlns='http://www.w3.org/2000/svg' viewBox='0 0 {size} {size}' shape-rendering='crispEdges'>"
        "<rect width='100%' height='100%' fill='white'/>"
        "<g fill='black'>"
        + "".join(cells)
        + "</g></svg>"
    )


def qr_data_url(qr_text: str) -> str:
    """Encode ``qr_text`` as a QR code and return it as an SVG ``data:`` URL."""

    encoded = base64.b64encode(qr_svg(qr_text).encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"
