"""Tests for exifmv.properties."""

from datetime import datetime
from unittest.mock import Mock

import pytest

from exifmv.errors import ExtractionError
from exifmv.properties import PropertyBagBuilder
from exifmv.values import Bytes, Rational, Text, Timestamp


@pytest.fixture
def sample_file(tmp_path):
    f = tmp_path / "holiday pics" / "IMG 0001.jpg"
    f.parent.mkdir()
    f.write_bytes(b"fake image data")
    return f


def fake_exif(path):
    return {
        "Model": Text("EOS 5D/Mark II"),
        "ExposureTime": Rational(1, 250),
        "DateTimeOriginal": Timestamp(datetime(2024, 1, 1, 12, 0, 0)),
        "MakerNote": Bytes(b"\xde\xad\xbe\xef"),
        "TnCompression": Text("6"),
    }


class TestPropertyBagBuilder:
    """Assembly, ordering and sanitization of the property bag."""

    def test_group_order_and_alphabetical_within(self, formatter, sample_file):
        bag = PropertyBagBuilder(formatter, exif_reader=fake_exif).build(sample_file)
        keys = list(bag)
        sys_keys = [k for k in keys if k.startswith("Sys")]
        exif_keys = [k for k in keys if k.startswith("Exif") and not k.startswith("ExifTn")]
        tn_keys = [k for k in keys if k.startswith("ExifTn")]
        assert keys == sys_keys + exif_keys + tn_keys
        assert sys_keys == sorted(sys_keys)
        assert exif_keys == ["ExifDateTimeOriginal", "ExifExposureTime", "ExifMakerNote", "ExifModel"]
        assert tn_keys == ["ExifTnCompression"]

    def test_values_rendered_and_sanitized(self, formatter, sample_file):
        bag = PropertyBagBuilder(formatter, exif_reader=fake_exif).build(sample_file)
        assert bag["ExifModel"] == "EOS_5D_Mark_II"
        assert bag["ExifExposureTime"] == "1_250"
        assert bag["ExifDateTimeOriginal"] == "20240101_120000"
        assert bag["ExifMakerNote"] == "deadbeef"
        assert bag["SysSize"] == str(len(b"fake image data"))

    def test_raw_values_not_sanitized(self, formatter, sample_file):
        bag = PropertyBagBuilder(formatter, exif_reader=fake_exif).build(sample_file)
        assert bag.raw["ExifModel"] == "EOS 5D/Mark II"

    def test_path_values_keep_separators(self, formatter, sample_file):
        bag = PropertyBagBuilder(formatter, exif_reader=fake_exif).build(sample_file)
        assert bag["SysName"] == "IMG 0001"
        assert bag["SysDotExt"] == ".jpg"
        assert bag["SysPath"] == str(sample_file.parent)

    def test_all_sys_properties_present(self, formatter, sample_file):
        bag = PropertyBagBuilder(formatter, exif_reader=fake_exif).build(sample_file)
        for name in (
            "SysCwd", "SysDateTimeAccessed", "SysDateTimeCreated", "SysDateTimeModified",
            "SysDateTimeNow", "SysDotExt", "SysExt", "SysFullName", "SysName", "SysPath",
            "SysPathAncestor0", "SysPathElem0", "SysPathHead0", "SysPathTail0",
            "SysSha1", "SysSize", "SysUuid",
        ):
            assert name in bag, name
        assert "SysIdx" not in bag

    def test_disabled_hash_is_not_computed(self, formatter, sample_file):
        hasher = Mock(return_value="abc")
        bag = PropertyBagBuilder(formatter, use_hash=False, hasher=hasher,
                                 exif_reader=fake_exif).build(sample_file)
        assert "SysSha1" not in bag
        hasher.assert_not_called()

    def test_disabled_exif_is_not_read(self, formatter, sample_file):
        reader = Mock(side_effect=fake_exif)
        bag = PropertyBagBuilder(formatter, use_exif=False, exif_reader=reader).build(sample_file)
        assert not [k for k in bag if k.startswith("Exif")]
        reader.assert_not_called()

    def test_injected_hasher_used(self, formatter, sample_file):
        bag = PropertyBagBuilder(formatter, hasher=lambda p: "f00d",
                                 exif_reader=fake_exif).build(sample_file)
        assert bag["SysSha1"] == "f00d"

    def test_non_image_has_only_sys_properties(self, formatter, sample_file):
        bag = PropertyBagBuilder(formatter).build(sample_file)
        assert all(k.startswith("Sys") for k in bag)

    def test_missing_file_raises_extraction_error(self, formatter, tmp_path):
        with pytest.raises(ExtractionError):
            PropertyBagBuilder(formatter, exif_reader=fake_exif).build(tmp_path / "gone.jpg")
