"""Key encoding utility for file-based storage.

Entity keys are arbitrary strings, but file names are not. This module maps
keys to safe file names and back. This is an infrastructure concern, not a
domain concern.
"""

from typing import ClassVar
from urllib.parse import quote, unquote


class KeySanitizer:
    """Reversible encoding of entity keys into file names.

    Every character outside ``[A-Za-z0-9_-]`` is percent-encoded, so keys
    containing path separators, dots or spaces cannot escape the entity
    directory or collide with temporary files.
    """

    SAFE_CHARS: ClassVar[str] = "_-"

    @classmethod
    def to_filename(cls, key: str) -> str:
        """Encode a key as a file name stem.

        Args:
            key: The entity key

        Returns:
            The encoded stem (no extension)

        Raises:
            ValueError: If the key is empty or only whitespace
        """
        if not key.strip():
            raise ValueError("Key cannot be empty or contain only whitespace")
        # quote() never escapes "." or "~"
        return quote(key, safe=cls.SAFE_CHARS).replace(".", "%2E").replace("~", "%7E")

    @classmethod
    def from_filename(cls, stem: str) -> str:
        """Decode a file name stem produced by to_filename.

        Args:
            stem: The encoded stem (no extension)

        Returns:
            The original key
        """
        return unquote(stem)
