"""
QR binding service - one QR artifact per code value.

The QR payload is exactly the code value, encoded at error correction
level H so a label survives scuffing. Artifacts live in Django's default
storage under ``qr_codes/<value>.png``; the path is a pure function of the
value, so rebinding a code overwrites the same artifact.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from io import BytesIO
from typing import Iterable, Optional
from uuid import UUID

import qrcode
from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from apps.codes.models import Code

from .exceptions import QRArtifactError, InvalidQRPayloadError

logger = logging.getLogger(__name__)

QR_DIRECTORY = 'qr_codes'

# Storage writes are blocking I/O; a small pool bounds them with a timeout
_writer_pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix='qr-writer')


@dataclass(frozen=True)
class QRArtifact:
    path: str
    url: str


def artifact_path_for(code_value: str) -> str:
    return f"{QR_DIRECTORY}/{code_value}.png"


def build_qr(code_value: str) -> qrcode.QRCode:
    """Build the QR matrix whose only payload is ``code_value``."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=4,
    )
    qr.add_data(code_value)
    qr.make(fit=True)
    return qr


def render_qr_png(code_value: str) -> bytes:
    """Render the QR for ``code_value`` as PNG bytes (same value, same bytes)."""
    img = build_qr(code_value).make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


def _write_artifact(path: str, content: bytes) -> str:
    if default_storage.exists(path):
        default_storage.delete(path)
    return default_storage.save(path, ContentFile(content))


def _discard_late_write(future) -> None:
    """Remove an artifact whose write finished after its caller gave up."""
    if future.cancelled() or future.exception() is not None:
        return
    remove_artifacts([future.result()])


def bind_qr(code_value: str) -> QRArtifact:
    """
    Render and store the QR artifact for a code value.

    Args:
        code_value: Issued code value (already normalized)

    Returns:
        QRArtifact with the storage path and its public URL

    Raises:
        QRArtifactError: If rendering or the storage write failed or did
            not finish within QR_WRITE_TIMEOUT_SECONDS
    """
    path = artifact_path_for(code_value)

    try:
        content = render_qr_png(code_value)
        future = _writer_pool.submit(_write_artifact, path, content)
        saved_path = future.result(timeout=settings.QR_WRITE_TIMEOUT_SECONDS)
    except FutureTimeoutError as exc:
        logger.error("QR write timed out for %s", code_value)
        if not future.cancel():
            future.add_done_callback(_discard_late_write)
        raise QRArtifactError() from exc
    except (OSError, ValueError) as exc:
        logger.error("QR write failed for %s", code_value, exc_info=True)
        raise QRArtifactError() from exc

    if saved_path != path:
        # Storage picked another name, so the artifact is no longer derivable from the value
        default_storage.delete(saved_path)
        logger.error("QR artifact for %s stored as %s instead of %s", code_value, saved_path, path)
        raise QRArtifactError()

    return QRArtifact(path=path, url=default_storage.url(path))


def remove_artifacts(paths: Iterable[str]) -> None:
    """Delete artifacts written by an issuance that was rolled back."""
    for path in paths:
        try:
            default_storage.delete(path)
        except OSError:
            logger.warning("Could not remove orphaned QR artifact %s", path, exc_info=True)


def decode_qr_payload(payload) -> str:
    """
    Extract the code value from a scanned QR payload.

    Only payloads carrying the product prefix are accepted; anything else
    was not printed by this system.

    Raises:
        InvalidQRPayloadError: If the payload is not one of our code values
    """
    if not isinstance(payload, str):
        raise InvalidQRPayloadError()

    value = payload.strip().upper()
    if not value.startswith(settings.CODE_PREFIX) or len(value) == len(settings.CODE_PREFIX):
        raise InvalidQRPayloadError()

    return value


def regenerate_qr_artifacts(batch_id: Optional[UUID] = None) -> dict:
    """
    Recreate QR artifacts for existing codes, e.g. after losing media storage.

    Codes themselves are untouched apart from ``qr_image_path`` being
    re-pointed at the deterministic path when it drifted.

    Args:
        batch_id: Limit regeneration to one batch (all codes if None)

    Returns:
        Dict with 'total', 'regenerated' and 'failed' counts
    """
    codes = Code.objects.all()
    if batch_id is not None:
        codes = codes.filter(batch_id=batch_id)

    result = {'total': 0, 'regenerated': 0, 'failed': 0}

    for code in codes.only('id', 'value', 'qr_image_path').iterator():
        result['total'] += 1
        try:
            artifact = bind_qr(code.value)
        except QRArtifactError:
            result['failed'] += 1
            continue

        if code.qr_image_path != artifact.path:
            Code.objects.filter(id=code.id).update(qr_image_path=artifact.path)
        result['regenerated'] += 1

    logger.info(
        "Regenerated %d/%d QR artifacts (%d failed)",
        result['regenerated'], result['total'], result['failed']
    )
    return result
