"""QR code generation for session check-in links."""
import qrcode
import io
import base64
from urllib.parse import urlencode

class QRService:
    """Service for QR code operations."""

    @staticmethod
    def checkin_url(base_url: str, public_token: str) -> str:
        """Public check-in link carrying the session token."""
        return f"{base_url.rstrip('/')}?{urlencode({'s': public_token})}"

    @staticmethod
    def generate_qr_image(data: str) -> str:
        """Render ``data`` as a PNG data URL."""
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(data)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()

        return f"data:image/png;base64,{img_str}"
