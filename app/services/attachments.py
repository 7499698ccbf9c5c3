"""
Attachment reading and encoding for outgoing messages.

Files are read from local paths and base64-encoded into hosted contents
that Graph embeds alongside the message body.
"""

import base64
import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Union

from app.errors import AttachmentError
from app.integrations.graph.models import HostedContent

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class EncodedAttachments:
    """Result of encoding a batch of files."""

    contents: List[HostedContent] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


class AttachmentReader:
    """Reads local files into base64 hosted contents."""

    def read(self, path: PathLike, temporary_id: str) -> HostedContent:
        """
        Read and encode one file.

        Raises:
            AttachmentError: The file is missing or unreadable
        """
        file_path = Path(path)
        try:
            raw = file_path.read_bytes()
        except OSError as e:
            raise AttachmentError(f"Cannot read attachment '{file_path}': {e}") from e

        content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        return HostedContent(
            temporary_id=temporary_id,
            name=file_path.name,
            content_type=content_type,
            content_bytes=base64.b64encode(raw).decode("ascii"),
        )

    def read_all(self, paths: Sequence[PathLike], required: bool = False) -> EncodedAttachments:
        """
        Encode every file in order, numbering temporary ids from 1.

        Unreadable files are skipped and logged, unless `required` is set, in
        which case the first failure is raised.
        """
        result = EncodedAttachments()
        for path in paths:
            try:
                content = self.read(path, str(len(result.contents) + 1))
            except AttachmentError as e:
                if required:
                    raise
                logger.warning(f"Skipping attachment: {e}")
                result.skipped.append(str(path))
                continue
            result.contents.append(content)
        return result


def embed_hosted_contents(html: str, contents: Sequence[HostedContent]) -> str:
    """Append references to hosted contents so they render with the message."""
    if not contents:
        return html

    parts = [html]
    for item in contents:
        src = f"../hostedContents/{item.temporary_id}/$value"
        if item.content_type.startswith("image/"):
            parts.append(f'<img src="{src}" alt="{item.name}">')
        else:
            parts.append(f'<a href="{src}">{item.name}</a>')
    return "".join(parts)
