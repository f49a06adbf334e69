"""Wire schemas (pydantic).

Usage:
    from stripro.schemas import Envelope, ErrorPayload
"""

from stripro.schemas.envelope import Envelope, ErrorPayload, PaginationMeta

__all__ = ["Envelope", "ErrorPayload", "PaginationMeta"]
