"""Domain protocols (ports).

Usage:
    from stripro.domain.protocols import LoggerProtocol, TransportProtocol
"""

from stripro.domain.protocols.logger_protocol import LoggerProtocol
from stripro.domain.protocols.transport_protocol import TransportProtocol

__all__ = ["LoggerProtocol", "TransportProtocol"]
