"""Construction of new attestation documents.

Attestations are built once and never edited.  A renewal is a new
attestation whose ``renews`` field names the id it supersedes.
"""

from __future__ import annotations

import uuid
from typing import Any

from constants import ARR_VERSION
from errors import ArrError, ErrorCodes
from models import Attestation
from utils import parse_timestamp, utc_now_iso
from validation import parse_attestation


def build_attestation(
    creator: str,
    *,
    intent: str | None = None,
    tool: str | None = None,
    upstream: list[str] | None = None,
    content_hash: str | None = None,
    expires: str | None = None,
    revocable: bool = True,
    license: str | None = None,
    renews: str | None = None,
    extensions: dict[str, Any] | None = None,
    id: str | None = None,
    created: str | None = None,
) -> Attestation:
    """
    Build a new attestation, omitting unset optional fields.

    Args:
        creator: Creator identifier.
        intent: Creative intent.
        tool: Tool marker such as ``name/version``.
        upstream: Ids of prior attestations this work derives from.
        content_hash: Hash of the attested content.
        expires: Expiry date (ISO 8601).
        revocable: Whether the creator may revoke it later.
        license: License identifier.
        renews: Id of the attestation this one supersedes.
        extensions: Free-form extension record.
        id: Attestation id; a random UUID when omitted.
        created: Creation timestamp; the current UTC time when omitted.

    Returns:
        The attestation document.

    Raises:
        ArrError: ``invalid_expires`` if ``expires`` is not a valid date,
            ``malformed`` if a field has the wrong type.
    """
    if expires is not None:
        try:
            parse_timestamp(expires)
        except ValueError as exc:
            raise ArrError(
                ErrorCodes.INVALID_EXPIRES,
                "expires must be a valid ISO-8601 date.",
                {"expires": expires},
            ) from exc

    fields: dict[str, Any] = {
        "version": ARR_VERSION,
        "id": id or str(uuid.uuid4()),
        "created": created or utc_now_iso(),
        "creator": creator,
        "intent": intent,
        "tool": tool,
        "upstream": list(upstream) if upstream is not None else None,
        "content_hash": content_hash,
        "expires": expires,
        "revocable": revocable,
        "license": license,
        "renews": renews,
        "extensions": extensions,
    }
    return parse_attestation({key: value for key, value in fields.items() if value is not None})


def renew_attestation(previous_id: str, creator: str, **fields: Any) -> Attestation:
    """Build a fresh attestation that supersedes ``previous_id``."""
    fields["renews"] = previous_id
    return build_attestation(creator, **fields)
