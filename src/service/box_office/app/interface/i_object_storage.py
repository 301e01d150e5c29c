from abc import ABC, abstractmethod


class IObjectStorage(ABC):
    @abstractmethod
    async def upload(self, *, bucket: str, path: str, data: bytes, content_type: str) -> str:
        """
        Store (overwrite) an object.

        Returns:
            Public URL of the stored object
        """
        pass

    @abstractmethod
    async def download(self, *, bucket: str, path: str) -> bytes:
        pass
