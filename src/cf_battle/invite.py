"""
cf_battle.invite — Shareable match invites
==========================================

An invite code carries the whole MatchConfig, so a match can be joined
without any server lookup:

    v1.<url-safe base64 of the camelCase JSON config, unpadded>

``decode_invite`` also accepts a full invite link (anything containing
``invite=<code>``) and tolerates surrounding whitespace and padding.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from typing import Any
from urllib.parse import unquote

from .errors import InvalidInviteError, InvalidMatchConfigError
from .models import MatchConfig, load_match_config

INVITE_VERSION = "v1"

_INVITE_PARAM = re.compile(r"invite=([^&#\s]+)")


def encode_invite(config: MatchConfig) -> str:
    """Encode a config as a ``v1.`` invite code."""
    payload = json.dumps(config.to_dict(), separators=(",", ":"), sort_keys=True)
    encoded = base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")
    return f"{INVITE_VERSION}.{encoded.rstrip('=')}"


def invite_link(config: MatchConfig, base_url: str) -> str:
    """Build a join link, e.g. ``https://host/#/?invite=v1.eyJ...``."""
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}invite={encode_invite(config)}"


def decode_invite(code: str) -> MatchConfig:
    """
    Decode an invite code or invite link back into a MatchConfig.

    Raises:
        InvalidInviteError: If the code is not a readable invite or its
            config does not validate
    """
    if not isinstance(code, str) or not code.strip():
        raise InvalidInviteError("empty invite code")

    code = code.strip()
    found = _INVITE_PARAM.search(code)
    if found:
        code = unquote(found.group(1))

    version, sep, body = code.partition(".")
    if not sep:
        raise InvalidInviteError("invite code has no version prefix")
    if version != INVITE_VERSION:
        raise InvalidInviteError(f"unsupported invite version '{version}'")

    data = _decode_body(body)
    try:
        return load_match_config(data)
    except InvalidMatchConfigError as e:
        raise InvalidInviteError(f"invite carries an invalid match config: {e.errors}") from e


def _decode_body(body: str) -> Any:
    padded = body + "=" * (-len(body) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        return json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise InvalidInviteError(f"invite code is not readable: {e}") from e
