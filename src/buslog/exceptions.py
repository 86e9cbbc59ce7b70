"""
Error taxonomy for buslog.

Only configuration and transport registration problems surface as
exceptions. Nothing on the forwarding or publishing path raises.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class BusLogError(Exception):
    """Root of all buslog exceptions."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


class ConfigurationError(BusLogError):
    """Raised for malformed configuration values, e.g. a bad syslog address."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR", details=details)


class TransportError(BusLogError):
    """Raised when an output transport cannot be set up."""

    def __init__(
        self,
        message: str,
        *,
        transport: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code="TRANSPORT_ERROR", details={"transport": transport, **(details or {})})
        self.transport = transport
