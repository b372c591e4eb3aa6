"""Storage for captured evidence blobs (photos and signatures)."""
import base64
import binascii
import logging
import os
import uuid
from checkin.utils.errors import EvidenceStorageFailed

logger = logging.getLogger(__name__)

EXTENSIONS = {
    'image/png': 'png',
    'image/jpeg': 'jpg',
    'image/webp': 'webp',
}

def decode_blob(payload: str) -> tuple:
    """Decode a ``data:`` URL or bare base64 string into ``(bytes, extension)``.

    Raises ValueError when the payload is not decodable.
    """
    if not isinstance(payload, str) or not payload.strip():
        raise ValueError("empty evidence payload")

    extension = 'png'
    data = payload.strip()
    if data.startswith('data:'):
        header, _, data = data.partition(',')
        mime = header[5:].split(';')[0]
        extension = EXTENSIONS.get(mime, 'bin')

    try:
        blob = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("evidence payload is not valid base64") from e

    if not blob:
        raise ValueError("empty evidence payload")
    return blob, extension

class EvidenceStorage:
    """Writes evidence under an upload folder and returns a relative reference."""

    def __init__(self, root: str):
        self.root = root

    def store(self, blob: bytes, kind: str, extension: str = 'png') -> str:
        """Persist ``blob`` and return its storage reference (``kind/name.ext``)."""
        name = f"{uuid.uuid4().hex}.{extension}"
        ref = f"{kind}/{name}"
        path = os.path.join(self.root, kind, name)

        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, 'wb') as fh:
                fh.write(blob)
        except OSError as e:
            logger.error("Failed to store %s evidence: %s", kind, e)
            raise EvidenceStorageFailed(field=kind) from e

        logger.debug("Stored %s evidence at %s", kind, ref)
        return ref
