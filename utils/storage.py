"""Local-disk blob store for venue images.

Blobs are addressed by the public path they are served under
(``/uploads/venue-images/venue-<ts>-<rand>.<ext>``); the database only ever
keeps that path.
"""

import os
import secrets
import time

from flask import current_app

CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
}


class LocalBlobStore:
    def __init__(self, root: str, url_prefix: str):
        self.root = root
        self.url_prefix = "/" + url_prefix.strip("/")

    def _file_for(self, path: str):
        if not path or not path.startswith(self.url_prefix + "/"):
            return None
        name = os.path.basename(path[len(self.url_prefix) + 1:])
        if not name or name in (".", ".."):
            return None
        return os.path.join(self.root, name)

    def store(self, data: bytes, content_type: str) -> str:
        ext = CONTENT_TYPE_EXTENSIONS.get((content_type or "").lower())
        if ext is None:
            raise ValueError(f"Unsupported content type: {content_type}")

        os.makedirs(self.root, exist_ok=True)
        name = f"venue-{int(time.time() * 1000)}-{secrets.token_hex(6)}.{ext}"
        with open(os.path.join(self.root, name), "wb") as fh:
            fh.write(data)
        return f"{self.url_prefix}/{name}"

    def exists(self, path: str) -> bool:
        target = self._file_for(path)
        return target is not None and os.path.isfile(target)

    def delete(self, path: str) -> None:
        target = self._file_for(path)
        if target is None:
            return
        try:
            os.remove(target)
        except FileNotFoundError:
            pass


def init_blob_store(app):
    app.extensions["blob_store"] = LocalBlobStore(
        app.config["UPLOAD_FOLDER"],
        app.config.get("UPLOAD_URL_PREFIX", "/uploads/venue-images"),
    )


def get_blob_store():
    return current_app.extensions["blob_store"]
