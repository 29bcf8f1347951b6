"""Existence check for stored objects.

Lists the object's folder with the file name as a search prefix and looks
for an exact name match. Metadata rows can outlive their objects, so the
download path asks here before requesting a signed URL.
"""

import logging

from dealroom.application.interfaces.storage import IStorageService
from dealroom.shared.utils.files import split_object_key

logger = logging.getLogger(__name__)

LIST_LIMIT = 100


class ExistenceVerifier:
    def __init__(self, storage: IStorageService) -> None:
        self.storage = storage

    async def exists(self, object_key: str) -> bool:
        """Return True only when the folder listing contains the exact file name.

        Keys with fewer than two segments and listing errors count as missing.
        """
        parts = split_object_key(object_key)
        if parts is None:
            return False
        folder, filename = parts
        try:
            names = await self.storage.list_folder(folder, search=filename, limit=LIST_LIMIT)
        except Exception as e:
            logger.warning("Listing %s failed; treating %s as missing: %s", folder, filename, e)
            return False
        return filename in names
