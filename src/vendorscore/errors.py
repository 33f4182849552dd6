"""Exceptions raised at the ingestion and storage boundaries."""

from __future__ import annotations


class VendorScoreError(Exception):
    """Base class for errors reported to the user."""


class IngestError(VendorScoreError):
    """A vendor export could not be read or failed validation."""

    def __init__(self, message: str, index: int | None = None) -> None:
        self.index = index
        if index is not None:
            message = f"vendor #{index}: {message}"
        super().__init__(message)


class VendorNotFoundError(VendorScoreError):
    def __init__(self, vendor_id: str) -> None:
        self.vendor_id = vendor_id
        super().__init__(f"Vendor '{vendor_id}' not found")


class DuplicateVendorError(VendorScoreError):
    def __init__(self, vendor_id: str) -> None:
        self.vendor_id = vendor_id
        super().__init__(f"Vendor '{vendor_id}' already exists")


class RecordNotFoundError(VendorScoreError):
    """A contract, incident or other owned record id is unknown on a vendor."""

    def __init__(self, kind: str, record_id: str, vendor_id: str) -> None:
        self.kind = kind
        self.record_id = record_id
        self.vendor_id = vendor_id
        super().__init__(f"{kind} '{record_id}' not found on vendor '{vendor_id}'")
