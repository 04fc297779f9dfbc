"""Decode and verify Slack Events API webhook requests."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

from slack_sdk.signature import SignatureVerifier

from .errors import InvalidPayloadError, InvalidSignatureError
from .models import EnvelopeType, EventEnvelope, InnerEvent

LOGGER = logging.getLogger(__name__)


def build_verifier(signing_secret: str | None) -> Optional[SignatureVerifier]:
    """Return a verifier for the signing secret, or None when there is none."""
    if not signing_secret:
        return None
    return SignatureVerifier(signing_secret=signing_secret)


def verify_request(
    raw_body: bytes,
    headers: Mapping[str, str],
    verifier: SignatureVerifier,
) -> None:
    """Check the X-Slack-Signature header against the raw body.

    Raises:
        InvalidSignatureError: if the signature is missing, stale or wrong.
    """
    normalized = {k.lower(): v for k, v in headers.items()}
    if not normalized.get("x-slack-signature") or not normalized.get("x-slack-request-timestamp"):
        raise InvalidSignatureError("missing_signature_headers")
    if not verifier.is_valid_request(raw_body, normalized):
        raise InvalidSignatureError("signature_mismatch")


def parse_event(
    raw_body: bytes,
    headers: Mapping[str, str] | None = None,
    verifier: SignatureVerifier | None = None,
) -> EventEnvelope:
    """Verify (when a verifier is given) and decode a webhook body.

    Raises:
        InvalidSignatureError: if verification is enabled and fails.
        InvalidPayloadError: if the body is not a JSON object with a ``type``.
    """
    if verifier is not None:
        verify_request(raw_body, headers or {}, verifier)

    try:
        payload = json.loads(raw_body or b"")
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidPayloadError("invalid_json") from exc

    if not isinstance(payload, dict):
        raise InvalidPayloadError("payload_not_object")

    raw_type = payload.get("type")
    if not isinstance(raw_type, str) or not raw_type:
        raise InvalidPayloadError("missing_type")

    return _build_envelope(raw_type, payload)


def _build_envelope(raw_type: str, payload: Dict[str, Any]) -> EventEnvelope:
    try:
        envelope_type = EnvelopeType(raw_type)
    except ValueError:
        envelope_type = EnvelopeType.UNKNOWN

    if envelope_type is EnvelopeType.URL_VERIFICATION:
        challenge = payload.get("challenge")
        return EventEnvelope(
            type=envelope_type,
            raw_type=raw_type,
            challenge=challenge if isinstance(challenge, str) else None,
        )

    if envelope_type is EnvelopeType.CALLBACK_EVENT:
        event = payload.get("event")
        if not isinstance(event, dict) or not isinstance(event.get("type"), str):
            raise InvalidPayloadError("callback_without_event")
        return EventEnvelope(
            type=envelope_type,
            raw_type=raw_type,
            inner_event=InnerEvent(type=event["type"], data=event),
            team_id=payload.get("team_id"),
            event_id=payload.get("event_id"),
        )

    return EventEnvelope(
        type=envelope_type,
        raw_type=raw_type,
        team_id=payload.get("team_id"),
    )
