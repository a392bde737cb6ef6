"""
Decode scanned QR payloads into the code used for lookups.

A label may carry the bare code, a tracking URL, a JSON document or any of
those base64-encoded.
"""
import base64
import binascii
import json
import re
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import parse_qs, unquote, urlparse

BASE64_RE = re.compile(r'^[A-Za-z0-9+/=]+$')
URL_QUERY_KEYS = ('qr', 'code', 'tracking')
JSON_KEYS = ('qr_code', 'qr', 'code', 'package_qr', 'tracking', 'order_number', 'package_id')


@dataclass
class DecodedPayload:
    raw: str
    decoded: str
    qr_code: Optional[str]
    metadata: dict = field(default_factory=dict)

    def as_dict(self):
        return {'raw': self.raw, 'decoded': self.decoded, 'qr_code': self.qr_code, 'metadata': self.metadata}


def try_decode_base64(value):
    if not BASE64_RE.match(value) or len(value) % 4 != 0:
        return None
    try:
        decoded = base64.b64decode(value, validate=True).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError):
        return None
    # Plain codes are often valid base64 too; only keep readable text
    if not decoded or not decoded.isprintable():
        return None
    return decoded


def _code_from_url(value, metadata):
    parsed = urlparse(value)
    if not parsed.netloc:
        return None
    metadata['source'] = parsed.netloc
    query = parse_qs(parsed.query)
    for key in URL_QUERY_KEYS:
        if query.get(key) and query[key][0]:
            return query[key][0]
    segments = [s for s in parsed.path.split('/') if s]
    return segments[-1] if segments else None


def _code_from_json(value, metadata):
    try:
        document = json.loads(value)
    except ValueError:
        return None
    if not isinstance(document, dict):
        return None
    metadata['format'] = 'json'
    for key in JSON_KEYS:
        if document.get(key) not in (None, ''):
            return str(document[key])
    return None


def decode_payload(raw) -> DecodedPayload:
    raw = raw or ''
    metadata = {}
    working = raw.strip()
    if not working:
        return DecodedPayload(raw=raw, decoded='', qr_code=None, metadata=metadata)

    working = unquote(working)

    base64_decoded = try_decode_base64(working)
    if base64_decoded:
        metadata['encoding'] = 'base64'
        working = base64_decoded

    qr_code = None
    if working.lower().startswith('http'):
        qr_code = _code_from_url(working, metadata)
    if not qr_code:
        qr_code = _code_from_json(working, metadata)
    if not qr_code:
        qr_code = working

    return DecodedPayload(raw=raw, decoded=working, qr_code=qr_code, metadata=metadata)
