"""Account sizes for order-book open-orders accounts."""

from __future__ import annotations

from types import MappingProxyType

PROGRAM_LAYOUT_VERSIONS = MappingProxyType(
    {
        "4ckmDgGdxQoPDLUkDT3vHgSAkzA3QRdNq5ywwY4sUSJn": 1,
        "BJ3jrUzddfuSrZHXSCxMUUQsjKEyLmuuyZebkcaFp2fg": 1,
        "EUqojwWA2rd19FZrzeBncJsm38Jm1hEhE3zsmX3bRc2o": 2,
        "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin": 3,
    }
)

LAYOUT_V1_SPAN = 3220
LAYOUT_V2_SPAN = 3228


def layout_version(program_id) -> int:
    """Account layout version used by a dex program; KeyError for unknown programs."""
    key = str(program_id)
    try:
        return PROGRAM_LAYOUT_VERSIONS[key]
    except KeyError:
        raise KeyError(f"unknown dex program {key}") from None


def open_orders_space(program_id) -> int:
    """Bytes to allocate for an open-orders account of the given dex program."""
    return LAYOUT_V1_SPAN if layout_version(program_id) == 1 else LAYOUT_V2_SPAN