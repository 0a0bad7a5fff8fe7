"""
Tests for export sinks.

Tests cover:
- Download filenames built from campaign titles
- Sink configuration round trip
- Saving composites to disk (formats, overwrite, directory creation)
- Path traversal protection
- Failed writes leaving no partial file behind
- Upload sinks returning URLs
"""

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from PIL import Image

from BF_Libs.CompositingLib.compositor import PlaceholderCompositor
from BF_Libs.CompositingLib.export_sink import (
    ExportSink,
    ExportSinkConfig,
    FileExportSink,
    UploadExportSink,
    poster_filename,
)
from BF_Libs.GeometryLib.placeholder_region import PlaceholderRegion


def make_result():
    banner = Image.new("RGBA", (300, 200), (128, 128, 128, 255))
    photo = Image.new("RGBA", (50, 50), (0, 0, 255, 255))
    return PlaceholderCompositor.render(banner, PlaceholderRegion(100, 50, 100, 100), photo)


class TestPosterFilename(unittest.TestCase):
    """Test poster_filename."""

    def test_spaces_become_underscores(self):
        self.assertEqual(poster_filename("Summer Meetup 2024"), "Summer_Meetup_2024_poster.png")

    def test_whitespace_runs_collapse(self):
        self.assertEqual(poster_filename("  Dev \t Day  "), "Dev_Day_poster.png")

    def test_path_separators_replaced(self):
        name = poster_filename("../../etc/passwd")

        self.assertNotIn("/", name)
        self.assertTrue(name.endswith("_poster.png"))

    def test_empty_title_uses_default(self):
        self.assertEqual(poster_filename(None), "banner_poster.png")
        self.assertEqual(poster_filename("   "), "banner_poster.png")
        self.assertEqual(poster_filename(".."), "banner_poster.png")

    def test_jpeg_extension(self):
        self.assertEqual(poster_filename("Launch", "jpg"), "Launch_poster.jpg")
        self.assertEqual(poster_filename("Launch", "JPEG"), "Launch_poster.jpg")


class TestExportSinkConfig(unittest.TestCase):
    """Test ExportSinkConfig."""

    def test_defaults(self):
        config = ExportSinkConfig()

        self.assertEqual(config.save_format, "PNG")
        self.assertEqual(config.quality, 95)
        self.assertFalse(config.overwrite)

    def test_dict_round_trip_ignores_unknown_keys(self):
        data = ExportSinkConfig(save_format="JPG", quality=80).to_dict()
        data["unknown"] = True

        config = ExportSinkConfig.from_dict(data)

        self.assertEqual(config.save_format, "JPG")
        self.assertEqual(config.quality, 80)


class TestFileExportSink(unittest.TestCase):
    """Test saving composites to disk."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.temp_path = Path(self.temp_dir.name)
        self.result = make_result()

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_save_png(self):
        sink = FileExportSink(ExportSinkConfig(output_directory=str(self.temp_path)))

        path = sink.export(self.result, "Summer Meetup")

        self.assertEqual(path.name, "Summer_Meetup_poster.png")
        with Image.open(path) as saved:
            self.assertEqual(saved.size, (300, 200))
            self.assertEqual(saved.getpixel((150, 100)), (0, 0, 255, 255))

    def test_save_jpeg(self):
        config = ExportSinkConfig(save_format="JPG", quality=90, output_directory=str(self.temp_path))

        path = FileExportSink(config).export(self.result, "Launch")

        self.assertEqual(path.suffix, ".jpg")
        with Image.open(path) as saved:
            self.assertEqual(saved.format, "JPEG")

    def test_creates_directories(self):
        target = self.temp_path / "nested" / "posters"
        sink = FileExportSink(ExportSinkConfig(output_directory=str(target)))

        path = sink.export(self.result, "Launch")

        self.assertTrue(path.exists())
        self.assertEqual(path.parent, target.resolve())

    def test_existing_file_not_overwritten(self):
        sink = FileExportSink(ExportSinkConfig(output_directory=str(self.temp_path)))
        sink.export(self.result, "Launch")

        with self.assertRaises(ValueError):
            sink.export(self.result, "Launch")

    def test_overwrite_allowed(self):
        config = ExportSinkConfig(output_directory=str(self.temp_path), overwrite=True)
        sink = FileExportSink(config)
        sink.export(self.result, "Launch")

        path = sink.export(self.result, "Launch")

        self.assertTrue(path.exists())

    def test_failed_write_leaves_no_partial_file(self):
        """Test a write that fails midway leaves the directory empty."""
        sink = FileExportSink(ExportSinkConfig(output_directory=str(self.temp_path)))

        with mock.patch(
            "BF_Libs.CompositingLib.export_sink.os.replace",
            side_effect=OSError("disk full"),
        ):
            with self.assertRaises(OSError) as ctx:
                sink.deliver(b"encoded poster", "Launch_poster.png")

        self.assertIn("disk full", str(ctx.exception))
        self.assertEqual(list(self.temp_path.iterdir()), [])

    def test_failed_overwrite_keeps_previous_file(self):
        config = ExportSinkConfig(output_directory=str(self.temp_path), overwrite=True)
        sink = FileExportSink(config)
        path = sink.deliver(b"first poster", "Launch_poster.png")

        with mock.patch(
            "BF_Libs.CompositingLib.export_sink.os.replace",
            side_effect=OSError("disk full"),
        ):
            with self.assertRaises(OSError):
                sink.deliver(b"second poster", "Launch_poster.png")

        self.assertEqual(path.read_bytes(), b"first poster")
        self.assertEqual([p.name for p in self.temp_path.iterdir()], ["Launch_poster.png"])

    def test_traversal_rejected(self):
        sink = FileExportSink(ExportSinkConfig(output_directory=str(self.temp_path / "out")))

        with self.assertRaises(ValueError):
            sink.deliver(b"data", "../escape.png")

        self.assertFalse((self.temp_path / "escape.png").exists())

    def test_rejects_non_result(self):
        sink = FileExportSink(ExportSinkConfig(output_directory=str(self.temp_path)))

        with self.assertRaises(TypeError):
            sink.export(Image.new("RGBA", (10, 10)), "Launch")

    def test_base_sink_has_no_destination(self):
        with self.assertRaises(NotImplementedError):
            ExportSink().export(self.result, "Launch")


class TestUploadExportSink(unittest.TestCase):
    """Test handing composites to a storage callable."""

    def setUp(self):
        self.result = make_result()
        self.uploads = []

    def upload(self, data, filename):
        self.uploads.append((data, filename))
        return f"https://storage.example/{filename}"

    def test_upload_returns_url(self):
        url = UploadExportSink(self.upload).export(self.result, "Team Offsite")

        self.assertEqual(url, "https://storage.example/Team_Offsite_poster.png")
        data, filename = self.uploads[0]
        self.assertTrue(data.startswith(b"\x89PNG"))
        self.assertEqual(filename, "Team_Offsite_poster.png")

    def test_empty_url_is_error(self):
        sink = UploadExportSink(lambda data, filename: "")

        with self.assertRaises(OSError):
            sink.export(self.result, "Launch")

    def test_upload_must_be_callable(self):
        with self.assertRaises(ValueError):
            UploadExportSink("not callable")
