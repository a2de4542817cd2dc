"""
Share links - stateless transfer of an invoice through a URL.

Token format:
1. Invoice serialized as compact camelCase JSON
2. UTF-8 bytes encoded as standard base64
3. Made URL safe: '+' → '-', '/' → '_', padding stripped

Decoding is total: anything that does not come back as a structurally
valid invoice yields None.
"""

import base64
import logging
from typing import Optional
from urllib.parse import parse_qs

from pydantic import ValidationError

from invoiceflow.models.invoice import Invoice

logger = logging.getLogger(__name__)

PAY_PATH = "/pay"
DATA_PARAM = "data"

_TO_URL_SAFE = str.maketrans({"+": "-", "/": "_"})
_FROM_URL_SAFE = str.maketrans({"-": "+", "_": "/"})


def encode_invoice(invoice: Invoice) -> str:
    """Encode an invoice into a URL-safe share token."""
    text = invoice.model_dump_json(by_alias=True)
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return encoded.translate(_TO_URL_SAFE).rstrip("=")


def decode_invoice(token: str) -> Optional[Invoice]:
    """Decode a share token, or None if it is not a valid invoice."""
    standard = token.translate(_FROM_URL_SAFE)
    padded = standard + "=" * (-len(standard) % 4)
    try:
        raw = base64.b64decode(padded, validate=True)
        text = raw.decode("utf-8")
        return Invoice.model_validate_json(text, by_alias=True, by_name=False)
    except ValidationError:
        logger.info("Share token decoded to a malformed invoice")
        return None
    except ValueError:
        # binascii.Error and UnicodeDecodeError are both ValueErrors
        logger.info("Share token is not valid base64 or UTF-8")
        return None


def build_pay_path(token: str) -> str:
    return f"{PAY_PATH}?{DATA_PARAM}={token}"


def build_share_link(token: str, origin: str) -> str:
    return f"{origin.rstrip('/')}/#{build_pay_path(token)}"


def extract_share_token(fragment: str) -> Optional[str]:
    """Return the share token from a '#/pay?data=...' fragment, else None."""
    if not fragment.startswith("#"):
        return None
    normalized = fragment[1:]

    path, sep, query = normalized.partition("?")
    if not sep or path != PAY_PATH:
        return None

    values = parse_qs(query, keep_blank_values=True).get(DATA_PARAM)
    if not values:
        return None
    return values[0]


def generate_pay_path(invoice: Invoice) -> str:
    return build_pay_path(encode_invoice(invoice))


def generate_share_link(invoice: Invoice, origin: str) -> str:
    return build_share_link(encode_invoice(invoice), origin)
