import logging
import secrets
import time
from collections.abc import Collection
from io import BytesIO
from typing import BinaryIO

from anyio import Path
from sentry_sdk import trace

from exceptions import PayloadTooLargeError, UnsupportedMediaTypeError, ValidationError

_CHUNK_SIZE = 1024 * 1024


class ImageStore:
    """
    Pothole photos stored as files under a content root.

    References are URL-like paths (``<url_prefix>/<filename>``) so clients can
    resolve them against the static file base.
    """

    def __init__(
        self,
        root: Path | str,
        url_prefix: str,
        *,
        content_types: Collection[str],
        extensions: Collection[str],
        max_file_size: int,
    ) -> None:
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip('/')
        self.content_types = frozenset(content_types)
        self.extensions = frozenset(extensions)
        self.max_file_size = max_file_size

    async def ensure_root(self) -> None:
        await self.root.mkdir(parents=True, exist_ok=True)

    @trace
    async def store(self, file: BinaryIO | bytes, filename: str | None, content_type: str | None) -> str:
        ext = _extension(filename)
        mime = (content_type or '').split(';', 1)[0].strip().lower()
        if mime not in self.content_types or ext not in self.extensions:
            raise UnsupportedMediaTypeError('Only image files are allowed!')

        data = self._read_limited(BytesIO(file) if isinstance(file, bytes) else file)

        while True:
            name = f'pothole-{time.time_ns() // 1_000_000}-{secrets.randbelow(10**9)}{ext}'
            path = self.root / name
            try:
                async with await path.open('xb') as f:
                    await f.write(data)
            except FileExistsError:
                continue
            break

        logging.debug('Stored image %s (%d bytes)', name, len(data))
        return f'{self.url_prefix}/{name}'

    @trace
    async def delete(self, ref: str) -> None:
        try:
            path = self.path_of(ref)
        except ValidationError:
            logging.debug('Image %s is not in this store, nothing to delete', ref)
            return

        if not await path.is_file():
            logging.debug('Image %s already gone', ref)
            return
        await path.unlink(missing_ok=True)
        logging.debug('Deleted image %s', ref)

    async def exists(self, ref: str) -> bool:
        return await self.path_of(ref).is_file()

    def path_of(self, ref: str) -> Path:
        prefix = self.url_prefix + '/'
        if not ref.startswith(prefix):
            raise ValidationError(f'Image reference {ref!r} is outside {prefix!r}')

        name = ref.removeprefix(prefix)
        if not name or name in ('.', '..') or '/' in name or '\\' in name:
            raise ValidationError(f'Invalid image reference {ref!r}')

        return self.root / name

    def _read_limited(self, file: BinaryIO) -> bytes:
        with BytesIO() as buffer:
            while chunk := file.read(_CHUNK_SIZE):
                buffer.write(chunk)
                if buffer.tell() > self.max_file_size:
                    raise PayloadTooLargeError(
                        f'File is too large, max allowed size is {self.max_file_size} bytes'
                    )
            return buffer.getvalue()


def _extension(filename: str | None) -> str:
    if not filename or '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()
