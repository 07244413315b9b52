"""Helpers for Rally object references (refs).

A ref addresses a remote object or one of its collections, e.g.
``/defect/1234``, ``/portfolioitem/feature/1234/children`` or
``https://rally1.rallydev.com/slm/webservice/v2.0/defect/1234.js``.
Anything in front of the object path (scheme, host, webservice version) is
ignored.

A version segment made only of word characters, such as ``v2``, reads as the
first half of a dynamic type, so ``.../slm/webservice/v2/defect/1234``
resolves to ``/v2/defect/1234``. Dotted versions like ``v2.0`` are skipped.
"""

import re
from typing import Any, Optional

#             oid  |  -oid  |  uuid  |  compact uuid
_IDENTITY = (
    r"[0-9]+|-?[0-9]+"
    r"|[a-fA-F0-9]{8}-[a-fA-F0-9]{4}-[a-fA-F0-9]{4}-[a-fA-F0-9]{4}-[a-fA-F0-9]{12}"
    r"|[a-fA-F0-9]{32}"
)
_ID = f"({_IDENTITY})"
_TYPE = r"(\w+)"
_DYNATYPE = r"(\w{2,}/\w+)"
_PERMISSION_ID = f"((?:{_IDENTITY})u(?:{_IDENTITY})[pw](?:{_IDENTITY}))"
_EXT = r"(?:\.js\??.*)?\Z"

# Most specific first; the first pattern that matches wins
REF_PATTERNS = [
    # dynatype collection: /portfolioitem/feature/1234/children
    re.compile(rf".*?/{_DYNATYPE}/{_ID}/{_TYPE}{_EXT}", re.ASCII),
    # dynatype: /portfolioitem/feature/1234
    re.compile(rf".*?/{_DYNATYPE}/{_ID}{_EXT}", re.ASCII),
    # collection: /defect/1234/tasks
    re.compile(rf".*?/{_TYPE}/{_ID}/{_TYPE}{_EXT}", re.ASCII),
    # basic: /defect/1234
    re.compile(rf".*?/{_TYPE}/{_ID}{_EXT}", re.ASCII),
    # permission: /workspacepermission/123u456w1
    re.compile(rf".*?/{_TYPE}/{_PERMISSION_ID}{_EXT}", re.ASCII),
]


def _ref_string(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        value = value.get("_ref")
    elif not isinstance(value, str):
        value = getattr(value, "_ref", None)
    return value if isinstance(value, str) and value else None


def _match(value: Any) -> Optional[re.Match]:
    ref = _ref_string(value)
    if ref is None:
        return None
    for pattern in REF_PATTERNS:
        match = pattern.match(ref)
        if match:
            return match
    return None


def is_ref(value: Any) -> bool:
    """Whether value is a ref string or an object carrying a ``_ref``."""
    return _match(value) is not None


def get_relative(value: Any) -> Optional[str]:
    """Canonical relative form of a ref, e.g. ``/defect/1234``.

    Returns:
        The relative ref, or None if value is not a ref
    """
    match = _match(value)
    if match is None:
        return None
    return "/" + "/".join(match.groups())


def get_type(value: Any) -> Optional[str]:
    """Type of the referenced object, e.g. ``defect`` or ``portfolioitem/feature``."""
    match = _match(value)
    return match.group(1) if match else None


def get_id(value: Any) -> Optional[str]:
    """Identity segment of a ref, e.g. ``1234``."""
    match = _match(value)
    return match.group(2) if match else None
