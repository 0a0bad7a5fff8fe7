"""
Export sinks for finished composites.

A sink receives a fully rendered CompositeResult and turns it into a
downloadable artifact. The filename follows the campaign title:
"Summer Meetup 2024" becomes "Summer_Meetup_2024_poster.png".

Classes:
    ExportSinkConfig: Output format, quality and file handling options
    ExportSink: Base class; encodes and delivers a composite
    FileExportSink: Saves the encoded composite into a directory
    UploadExportSink: Hands the encoded bytes to a storage callable that
                      returns a URL

Functions:
    poster_filename: Build the download filename for a campaign title
"""

import logging
import os
import re
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from BF_Libs.constants import (
    DEFAULT_JPEG_QUALITY,
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_POSTER_TITLE,
    FILENAME_REPLACEMENT_CHAR,
    POSTER_FILE_SUFFIX,
)
from BF_Libs.CompositingLib.compositor import CompositeResult, get_save_kwargs

logger = logging.getLogger(__name__)

UploadFunction = Callable[[bytes, str], str]

FORMAT_EXTENSIONS = {
    "PNG": ".png",
    "JPEG": ".jpg",
    "WEBP": ".webp",
    "BMP": ".bmp",
}


def poster_filename(title: Optional[str], save_format: str = DEFAULT_OUTPUT_FORMAT) -> str:
    """
    Build the download filename for a campaign title.

    Whitespace runs become underscores and path separators are replaced so
    the name can never point outside the export directory.
    """
    name = (title or "").strip() or DEFAULT_POSTER_TITLE
    name = re.sub(r"\s+", FILENAME_REPLACEMENT_CHAR, name)
    name = re.sub(r"[\\/:*?\"<>|]", FILENAME_REPLACEMENT_CHAR, name)
    if name.strip(".") == "":
        name = DEFAULT_POSTER_TITLE

    save_format = get_save_kwargs(save_format)["format"]
    extension = FORMAT_EXTENSIONS.get(save_format, f".{save_format.lower()}")
    return f"{name}{POSTER_FILE_SUFFIX}{extension}"


@dataclass
class ExportSinkConfig:
    """Configuration for exporting composites.

    Attributes:
        save_format: Image format to encode (PNG, JPG, ...; default: PNG)
        quality: JPEG quality 1-100 (default: 95, only for JPG)
        output_directory: Directory for FileExportSink (default: current dir)
        create_directories: Create the output directory if missing (default: True)
        overwrite: Replace an existing file with the same name (default: False)
    """
    save_format: str = DEFAULT_OUTPUT_FORMAT
    quality: int = DEFAULT_JPEG_QUALITY
    output_directory: str = "."
    create_directories: bool = True
    overwrite: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExportSinkConfig":
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)


class ExportSink:
    """Base sink: encodes a composite and delivers it somewhere."""

    def __init__(self, config: Optional[ExportSinkConfig] = None):
        self.config = config or ExportSinkConfig()

    def export(self, result: CompositeResult, title: Optional[str] = None) -> Any:
        """
        Encode and deliver a composite.

        Args:
            result: Fully rendered composite
            title: Campaign title used for the filename

        Returns:
            Sink-specific location of the artifact (path, URL, ...)
        """
        if not isinstance(result, CompositeResult):
            raise TypeError(f"Expected CompositeResult, got {type(result)}")

        data = result.encode(self.config.save_format, self.config.quality)
        filename = poster_filename(title, self.config.save_format)
        location = self.deliver(data, filename)
        logger.info(f"Exported {result.size[0]}x{result.size[1]} composite to {location}")
        return location

    def deliver(self, data: bytes, filename: str) -> Any:
        raise NotImplementedError


class FileExportSink(ExportSink):
    """Saves composites into `config.output_directory`."""

    def deliver(self, data: bytes, filename: str) -> Path:
        """
        Write encoded bytes to the export directory.

        Raises:
            ValueError: If the file exists and overwrite=False, or the name
                        resolves outside the export directory
            OSError: If the file cannot be written; an existing file is left
                     untouched and no partial file remains
        """
        directory = Path(self.config.output_directory).resolve()
        if self.config.create_directories:
            directory.mkdir(parents=True, exist_ok=True)

        output_file = (directory / filename).resolve()
        try:
            output_file.relative_to(directory)
        except ValueError:
            raise ValueError(
                f"Security: export filename '{filename}' resolves to '{output_file}' "
                f"which is outside the export directory '{directory}'"
            )

        if output_file.exists() and not self.config.overwrite:
            raise ValueError(
                f"Output file already exists: {output_file}. "
                f"Set overwrite=True to replace."
            )

        # Write beside the target, then swap it in so readers never see a partial file
        temp_file = None
        try:
            fd, temp_name = tempfile.mkstemp(
                dir=directory, prefix=f".{output_file.name}.", suffix=".tmp"
            )
            temp_file = Path(temp_name)
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(temp_file, output_file)
        except OSError as e:
            raise OSError(f"Failed to save composite to {output_file}: {str(e)}") from e
        finally:
            if temp_file is not None and temp_file.exists():
                temp_file.unlink()

        return output_file


class UploadExportSink(ExportSink):
    """Passes encoded composites to a storage callable.

    The callable receives (data, filename) and returns the public URL.
    """

    def __init__(self, upload: UploadFunction, config: Optional[ExportSinkConfig] = None):
        super().__init__(config)
        if not callable(upload):
            raise ValueError(f"upload must be callable, got {type(upload)}")
        self.upload = upload

    def deliver(self, data: bytes, filename: str) -> str:
        url = self.upload(data, filename)
        if not url:
            raise OSError(f"Storage returned no URL for {filename}")
        return str(url)
