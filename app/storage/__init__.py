"""Storage package: object storage for uploads and summary artifacts."""

from app.storage.archive import ContractArchive, StorageError, upload_key

__all__ = ["ContractArchive", "StorageError", "upload_key"]
