"""
One-time password bookkeeping for registration and password reset.

Entries live in process memory keyed by phone number. They expire after a
fixed time-to-live, are single-use and are dropped after too many wrong
guesses. Expired entries are purged lazily whenever the store is touched.
"""
import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ..config.settings import get_settings

logger = logging.getLogger(__name__)


def generate_otp() -> str:
    """6-digit code in the range 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


@dataclass
class OtpEntry:
    otp: str
    payload: Dict[str, Any]
    expires_at: float
    attempts: int = 0


@dataclass
class OtpResult:
    valid: bool
    message: str = ""
    payload: Optional[Dict[str, Any]] = None


@dataclass
class _VerifiedMarker:
    payload: Dict[str, Any]
    expires_at: float


@dataclass
class OtpStore:
    ttl_seconds: int = 300
    max_attempts: int = 3
    verified_ttl_seconds: int = 600
    clock: Callable[[], float] = time.monotonic
    _entries: Dict[str, OtpEntry] = field(default_factory=dict, repr=False)
    _verified: Dict[str, _VerifiedMarker] = field(default_factory=dict, repr=False)

    def store(self, phone: str, otp: str, payload: Dict[str, Any]) -> None:
        """Remember an OTP for a phone, replacing any earlier one."""
        self.purge_expired()
        self._entries[phone] = OtpEntry(
            otp=otp,
            payload=dict(payload),
            expires_at=self.clock() + self.ttl_seconds,
        )

    def verify(self, phone: str, otp: str) -> OtpResult:
        entry = self._entries.get(phone)
        if entry is None:
            return OtpResult(False, "OTP expired or not found")

        if self.clock() > entry.expires_at:
            del self._entries[phone]
            return OtpResult(False, "OTP has expired")

        if entry.attempts >= self.max_attempts:
            del self._entries[phone]
            logger.info(f"OTP for {phone} discarded after {entry.attempts} failed attempts")
            return OtpResult(False, "Too many attempts. Please request new OTP")

        entry.attempts += 1
        if secrets.compare_digest(entry.otp, otp):
            del self._entries[phone]
            return OtpResult(True, "OTP verified", entry.payload)

        return OtpResult(False, "Invalid OTP")

    def get_payload(self, phone: str) -> Optional[Dict[str, Any]]:
        entry = self._entries.get(phone)
        if entry is None or self.clock() > entry.expires_at:
            return None
        return entry.payload

    def discard(self, phone: str) -> None:
        self._entries.pop(phone, None)
        self._verified.pop(phone, None)

    def mark_verified(self, phone: str, payload: Dict[str, Any]) -> None:
        """Record that the phone passed OTP verification (password reset)."""
        self._verified[phone] = _VerifiedMarker(dict(payload), self.clock() + self.verified_ttl_seconds)

    def consume_verified(self, phone: str) -> Optional[Dict[str, Any]]:
        marker = self._verified.pop(phone, None)
        if marker is None or self.clock() > marker.expires_at:
            return None
        return marker.payload

    def purge_expired(self) -> int:
        now = self.clock()
        expired = [phone for phone, entry in self._entries.items() if now > entry.expires_at]
        for phone in expired:
            del self._entries[phone]
        for phone in [p for p, m in self._verified.items() if now > m.expires_at]:
            del self._verified[phone]
        return len(expired)


_otp_store: Optional[OtpStore] = None


def get_otp_store() -> OtpStore:
    """FastAPI dependency returning the process-wide OTP store."""
    global _otp_store
    if _otp_store is None:
        settings = get_settings()
        _otp_store = OtpStore(
            ttl_seconds=settings.otp_ttl_seconds,
            max_attempts=settings.otp_max_attempts,
            verified_ttl_seconds=settings.otp_reset_window_seconds,
        )
    return _otp_store
