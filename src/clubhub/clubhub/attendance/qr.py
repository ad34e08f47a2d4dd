from __future__ import annotations

import hashlib
import hmac
import io
import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

import qrcode

from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_QR_VALIDITY_HOURS, QR_CODE_TYPE_ATTENDANCE

_EPOCH = datetime(1970, 1, 1)
_MS = 1000


@dataclass(frozen=True)
class QRValidation:
    is_valid: bool
    event_id: Optional[str] = None
    timestamp: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        data: dict = {"is_valid": self.is_valid}
        if self.event_id:
            data["event_id"] = self.event_id
        if self.error:
            data["error"] = self.error
        return data


class QRCodeSigner:
    """Sign and validate attendance QR payloads.

    Payload: JSON ``{event_id, timestamp, type, signature}`` where
    ``timestamp`` is epoch milliseconds and ``signature`` is the hex
    HMAC-SHA256 of ``"{event_id}:{timestamp}:{type}"``.
    """

    def __init__(
        self,
        secret: str,
        *,
        validity_hours: int = DEFAULT_QR_VALIDITY_HOURS,
        clock: Optional[Callable] = None,
    ):
        self._secret = secret.encode("utf-8")
        self._validity = timedelta(hours=int(validity_hours))
        self._clock = clock or now_utc

    def _now_ms(self) -> int:
        return int((self._clock() - _EPOCH).total_seconds() * _MS)

    def _sign(self, event_id: str, timestamp: int, type_: str) -> str:
        message = f"{event_id}:{timestamp}:{type_}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    def generate(self, event_id: str, *, type_: str = QR_CODE_TYPE_ATTENDANCE) -> str:
        timestamp = self._now_ms()
        return json.dumps(
            {
                "event_id": event_id,
                "timestamp": timestamp,
                "type": type_,
                "signature": self._sign(event_id, timestamp, type_),
            },
            separators=(",", ":"),
        )

    def validate(self, qr_code_data: str, *, expected_type: str = QR_CODE_TYPE_ATTENDANCE) -> QRValidation:
        try:
            payload = json.loads(qr_code_data)
            event_id = str(payload["event_id"])
            timestamp = int(payload["timestamp"])
            type_ = str(payload["type"])
            signature = str(payload["signature"])
        except (TypeError, ValueError, KeyError):
            return QRValidation(is_valid=False, error="Invalid QR code format")

        if not hmac.compare_digest(signature, self._sign(event_id, timestamp, type_)):
            return QRValidation(is_valid=False, error="Invalid QR code signature")
        if type_ != expected_type:
            return QRValidation(is_valid=False, error="Invalid QR code type")

        age_ms = self._now_ms() - timestamp
        if age_ms > self._validity.total_seconds() * _MS:
            return QRValidation(is_valid=False, event_id=event_id, error="QR code has expired")

        return QRValidation(is_valid=True, event_id=event_id, timestamp=timestamp)


def render_png(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
