from . import classification, retention, storage, storage_config

__all__ = ["classification", "retention", "storage", "storage_config"]
