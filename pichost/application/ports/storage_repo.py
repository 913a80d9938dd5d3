from typing import Protocol


class StorageRepository(Protocol):
    def save_bytes(self, subdir: str, extension: str, data: bytes) -> str:
        ...

    def delete(self, key: str) -> bool:
        ...

    def url_for(self, key: str) -> str:
        ...
