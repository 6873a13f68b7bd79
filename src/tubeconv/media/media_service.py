"""Working directory handling for produced artifacts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..conversion.conversion_models import OutputArtifact
from ..exceptions import ArtifactMissingError, InvalidInputError

logger = logging.getLogger(__name__)

_FORBIDDEN_FRAGMENTS = ("/", "\\", "..", "\x00")


def is_safe_filename(filename: str) -> bool:
    """Return ``True`` when ``filename`` cannot escape the working directory."""
    return bool(filename) and not any(fragment in filename for fragment in _FORBIDDEN_FRAGMENTS)


@dataclass(slots=True)
class ArtifactStore:
    """Manage artifacts in the shared working directory.

    Filenames are opaque tokens; the store never assumes exclusive access to
    the directory, so every removal tolerates a file that is already gone.
    """

    root: Path
    log: logging.Logger = field(default_factory=lambda: logger)

    def ensure_structure(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def candidates(self, job_id: str) -> list[Path]:
        """Return files whose name starts with ``job_id``, sorted by name."""
        if not self.root.is_dir():
            return []
        return sorted(
            (entry for entry in self.root.iterdir() if entry.name.startswith(job_id) and entry.is_file()),
            key=lambda entry: entry.name,
        )

    def resolve(self, job_id: str) -> OutputArtifact:
        """Return the artifact produced for ``job_id``.

        When several files share the prefix (a stray partial file next to the
        real output) the first one in lexicographic order wins. That pick is
        not guaranteed to be the complete file; the other names are logged.
        """
        matches = self.candidates(job_id)
        if not matches:
            self.log.error("media.artifact.missing", extra={"job_id": job_id, "root": str(self.root)})
            raise ArtifactMissingError(f"no file with prefix {job_id} in {self.root}")

        chosen = matches[0]
        if len(matches) > 1:
            self.log.warning(
                "media.artifact.ambiguous",
                extra={"job_id": job_id, "chosen": chosen.name, "candidates": [m.name for m in matches]},
            )
        try:
            size = chosen.stat().st_size
        except FileNotFoundError as exc:
            raise ArtifactMissingError(f"{chosen} vanished before it could be measured") from exc
        return OutputArtifact(filename=chosen.name, size_bytes=size, path=chosen)

    def path_for(self, filename: str) -> Path:
        """Join ``filename`` to the working directory after rejecting traversal."""
        if not is_safe_filename(filename):
            raise InvalidInputError(f"unsafe filename {filename!r}", user_message="Invalid filename")
        return self.root / filename

    def remove(self, path: Path) -> bool:
        """Delete ``path``; returns ``False`` when it was already gone."""
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    def discard(self, job_id: str) -> int:
        """Remove every leftover file of a failed job."""
        removed = 0
        for path in self.candidates(job_id):
            try:
                if self.remove(path):
                    removed += 1
            except OSError as exc:
                self.log.warning(
                    "media.artifact.discard_failed",
                    extra={"job_id": job_id, "path": str(path), "error": str(exc)},
                )
        if removed:
            self.log.info("media.artifact.discarded", extra={"job_id": job_id, "removed": removed})
        return removed
