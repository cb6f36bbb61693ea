# app/utils/qrcode_gen.py
import base64
from io import BytesIO

import qrcode


def generate_qr_data_url(payload: str, box_size: int = 10, border: int = 2) -> str:
    qr = qrcode.QRCode(box_size=box_size, border=border)
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = BytesIO()
    img.save(buf, format="PNG")
    encoded = base64.b64encode(buf.getvalue()).decode("utf-8")
    return f"data:image/png;base64,{encoded}"
