"""Documentation stores that supply source references to the coverage engine.

The bundled store reads Markdown notes whose YAML front matter lists the
source files they document:

```markdown
---
id: 2f6c0a
title: Session handling
sources:
  - src/auth/session.ts:10-42
  - src/auth/token.ts
---
Notes body...
```
"""

import logging
import re
from pathlib import Path
from typing import Any, Protocol

import yaml

from doccov.errors import DocumentationStoreError
from doccov.models import ReferenceOwner

logger = logging.getLogger(__name__)

_FRONT_MATTER = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*\r?$", re.DOTALL | re.MULTILINE)


class DocumentationStore(Protocol):
    """Anything that can list documentation entries and their source strings."""

    def get_all_reference_owners(self) -> list[ReferenceOwner]:
        """Return every entry that may reference source files.

        Raises:
            Exception: Any error means the store is unreachable.
        """
        ...


def parse_front_matter(text: str) -> dict[str, Any]:
    """Parse the YAML front matter of a Markdown document.

    Returns:
        The front matter mapping, or an empty dict if the document has none.

    Raises:
        yaml.YAMLError: If the front matter is not valid YAML.
        ValueError: If the front matter is not a mapping.
    """
    match = _FRONT_MATTER.match(text)
    if not match:
        return {}

    data = yaml.safe_load(match.group(1))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("front matter must be a mapping")
    return data


def _source_strings(value: Any, note_path: Path) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(item) for item in value if item is not None]

    logger.warning(f"Ignoring non-list 'sources' in {note_path}")
    return []


class MarkdownDocumentationStore:
    """Read-only store over a directory of Markdown notes."""

    def __init__(self, notes_dir: Path):
        self.notes_dir = Path(notes_dir)

    def get_all_reference_owners(self) -> list[ReferenceOwner]:
        """Load every ``*.md`` note below the notes directory.

        Notes that cannot be read or whose front matter is malformed are
        skipped with a warning.

        Raises:
            DocumentationStoreError: If the notes directory is missing or
                cannot be listed.
        """
        if not self.notes_dir.is_dir():
            raise DocumentationStoreError(f"Notes directory not found: {self.notes_dir}")

        try:
            note_paths = sorted(self.notes_dir.rglob("*.md"))
        except OSError as e:
            raise DocumentationStoreError(f"Cannot list notes in {self.notes_dir}: {e}") from e

        owners = []
        for note_path in note_paths:
            owner = self._read_note(note_path)
            if owner is not None:
                owners.append(owner)

        return owners

    def _read_note(self, note_path: Path) -> ReferenceOwner | None:
        try:
            text = note_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping unreadable note {note_path}: {e}")
            return None

        try:
            front_matter = parse_front_matter(text)
        except (yaml.YAMLError, ValueError) as e:
            logger.warning(f"Skipping note with malformed front matter {note_path}: {e}")
            return None

        return ReferenceOwner(
            owner_id=str(front_matter.get("id") or note_path.stem),
            title=str(front_matter.get("title") or note_path.stem),
            source_strings=_source_strings(front_matter.get("sources"), note_path),
        )
