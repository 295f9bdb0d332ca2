from __future__ import annotations

from dataclasses import dataclass

from werkzeug.utils import secure_filename


@dataclass(frozen=True)
class Upload:
    """A file received from a client, already read into memory."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_file_storage(cls, fs) -> "Upload":
        """Build from a werkzeug `FileStorage` (request.files[...])."""
        return cls(
            filename=secure_filename(fs.filename or ""),
            content=fs.read(),
            content_type=fs.mimetype or "application/octet-stream",
        )
