"""Abstract extraction invoker definition."""

from abc import ABC, abstractmethod
from pathlib import Path

from ..conversion.conversion_models import TargetFormat


class ExtractionInvoker(ABC):
    """Base interface for tools that turn a source URL into a media file."""

    @abstractmethod
    async def invoke(
        self,
        source_url: str,
        target_format: TargetFormat,
        output_template: Path,
    ) -> None:
        """Run the tool to completion or raise an ``ExtractionError``."""
