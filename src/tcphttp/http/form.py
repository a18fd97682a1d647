"""
URL-encoded form body decoding.

    name=FirstName%20LastName&email=bsmth%40example.com
        → {"name": "FirstName LastName", "email": "bsmth@example.com"}

The router never calls this on its own; handlers that expect form posts call
parse_body(request.body) themselves. No Content-Type check is made.
"""

from typing import Dict
from urllib.parse import unquote


PAIR_SEPARATOR = "&"
KEY_VALUE_SEPARATOR = "="


def parse_body(body: str) -> Dict[str, str]:
    """
    Decode an application/x-www-form-urlencoded body into a flat dict.

    Splits on "&", then each pair on the first "=". Keys and values are
    percent-decoded; "+" is left as-is. A pair without "=" gets an empty
    value, empty pairs are ignored, and a repeated key keeps its last value.

    Args:
        body: Raw request body.

    Returns:
        Mapping of decoded keys to decoded values.
    """
    fields: Dict[str, str] = {}

    for pair in body.split(PAIR_SEPARATOR):
        if not pair:
            continue
        key, _, value = pair.partition(KEY_VALUE_SEPARATOR)
        fields[unquote(key)] = unquote(value)

    return fields
