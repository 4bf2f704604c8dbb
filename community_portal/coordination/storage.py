import os

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.utils import timezone


class DefaultStorageObjectStore:
    """Object store backed by Django's configured file storage.

    Returns the storage URL for each upload; callers keep it verbatim.
    """

    def __init__(self, storage=None, prefix="uploads"):
        self.storage = storage or default_storage
        self.prefix = prefix

    def upload(self, data, filename) -> str:
        if isinstance(data, bytes):
            data = ContentFile(data)
        path = os.path.join(self.prefix, timezone.now().strftime("%Y/%m/%d"), os.path.basename(filename))
        stored_name = self.storage.save(path, data)
        return self.storage.url(stored_name)
