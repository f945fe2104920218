"""
Conversion between MongoDB ObjectIds and their transport string form.
"""

from typing import Iterable, List

from bson import ObjectId
from bson.errors import InvalidId

from inventory.errors import InvalidIdentifier


def parse_identifier(raw: str) -> ObjectId:
    """
    Parse a client-supplied identifier string.

    Args:
        raw: 24-character hexadecimal string

    Returns:
        The corresponding ObjectId

    Raises:
        InvalidIdentifier: if raw is not a well-formed ObjectId string
    """
    # ObjectId() also accepts 12-byte values and ObjectId instances
    if not isinstance(raw, str) or len(raw) != 24:
        raise InvalidIdentifier(raw)
    try:
        return ObjectId(raw)
    except (InvalidId, TypeError):
        raise InvalidIdentifier(raw)


def parse_identifiers(raws: Iterable[str]) -> List[ObjectId]:
    """Parse a sequence of identifier strings, preserving order."""
    return [parse_identifier(raw) for raw in raws]


def identifier_to_string(oid: ObjectId) -> str:
    return str(oid)
