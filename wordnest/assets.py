"""
Storage for uploaded images and the file side of the file/row lifecycle.

A stored asset is referenced from a database row by its URL
(``/uploads/<name>``). There is no transaction spanning the file system
and the database, so callers order their steps:

1. validate the upload before anything is written,
2. store the new file (``staged``) and write the row inside the block,
3. delete the replaced file only after the row write committed.

If anything fails inside ``staged`` the freshly stored file is removed
before the error propagates.
"""
import logging
import os
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from wordnest.errors import InvalidInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredAsset:
    path: Path
    url: str


class AssetStore:
    """Saves, resolves and deletes uploaded image files."""

    def __init__(self, upload_folder, url_prefix: str = '/uploads',
                 allowed_extensions: Iterable[str] = ('png', 'jpg', 'jpeg', 'gif', 'webp')):
        self.root = Path(upload_folder).resolve()
        self.url_prefix = '/' + url_prefix.strip('/')
        self.allowed_extensions = {ext.lower().lstrip('.') for ext in allowed_extensions}
        self.root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def is_provided(upload: Optional[FileStorage]) -> bool:
        return upload is not None and bool(upload.filename)

    def validate(self, upload: FileStorage) -> str:
        """Check that ``upload`` looks like an image; returns its extension."""
        filename = secure_filename(upload.filename or '')
        extension = Path(filename).suffix.lower().lstrip('.')
        if extension not in self.allowed_extensions:
            allowed = ', '.join(sorted(self.allowed_extensions))
            raise InvalidInput(f"Only image files are allowed ({allowed})")
        if upload.mimetype and not upload.mimetype.startswith('image/'):
            raise InvalidInput("Only image files are allowed")
        return extension

    def save(self, upload: FileStorage, kind: str = 'image') -> StoredAsset:
        extension = self.validate(upload)
        name = f"{kind}-{uuid.uuid4().hex}.{extension}"
        path = self.root / name
        upload.save(str(path))
        logger.info(f"Stored asset {name}")
        return StoredAsset(path=path, url=f"{self.url_prefix}/{name}")

    def resolve(self, url: Optional[str]) -> Optional[Path]:
        """
        Map an asset URL back to its file. Returns None for references
        that do not point inside the upload folder.
        """
        if not url or not url.startswith(self.url_prefix + '/'):
            return None
        name = url[len(self.url_prefix) + 1:]
        if not name or name != os.path.basename(name):
            return None
        path = (self.root / name).resolve()
        if path.parent != self.root:
            return None
        return path

    def exists(self, url: Optional[str]) -> bool:
        path = self.resolve(url)
        return path is not None and path.is_file()

    def discard(self, url: Optional[str]) -> bool:
        """
        Best-effort removal of the file behind ``url``. Failures are logged
        and swallowed; returns True only if a file was removed.
        """
        path = self.resolve(url)
        if path is None:
            if url:
                logger.warning(f"Not deleting asset outside upload folder: {url}")
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Could not delete asset {path.name}: {e}")
            return False
        logger.info(f"Deleted asset {path.name}")
        return True

    @contextmanager
    def staged(self, upload: Optional[FileStorage], kind: str = 'image'):
        """
        Store ``upload`` and yield the StoredAsset (or None when there is
        no upload). The file is removed again if the block raises.
        """
        if not self.is_provided(upload):
            yield None
            return
        asset = self.save(upload, kind=kind)
        try:
            yield asset
        except BaseException:
            self.discard(asset.url)
            raise
