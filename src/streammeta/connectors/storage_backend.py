"""Storage backend capability implementations."""

from ..core.config import StorageConfig


class ConfiguredStorageBackend:
    """Answers the backend query from the deployment configuration."""

    def __init__(self, storage_config: StorageConfig):
        self.storage_config = storage_config

    def is_local_disk_backend(self) -> bool:
        return self.storage_config.is_local_disk()


class StaticStorageBackend:
    """Fixed answer, for embedding and tests."""

    def __init__(self, local_disk: bool = True):
        self.local_disk = local_disk

    def is_local_disk_backend(self) -> bool:
        return self.local_disk
