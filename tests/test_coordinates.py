#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ReadWeaver v0.1.0

Tests for coordinate resolution and region extraction.

Author: ReadWeaver Development Team
License: Dual License (Academic/Commercial)
"""

import gzip
import io

import pytest
from readweaver.simulation.coordinates import RegionExtractor, byte_offset
from readweaver.simulation.models import (
    ArchiveReadError,
    ConfigurationError,
    IndexRecord,
)


SEQ = "ACGTACGTAC" * 12  # 120 bp


def wrapped_archive(seq, width=60, newline=b'\n'):
    body = b''.join(seq[i:i + width].encode() + newline for i in range(0, len(seq), width))
    return b'>chr1 test\n' + body


class TestByteOffset:
    """Test base position to byte offset translation."""

    def test_first_line(self):
        rec = IndexRecord('chr1', 120, 11, 60, 61)
        assert byte_offset(0, rec) == 11
        assert byte_offset(59, rec) == 70

    def test_skips_line_terminators(self):
        rec = IndexRecord('chr1', 120, 11, 60, 61)
        assert byte_offset(60, rec) == 72
        assert byte_offset(119, rec) == 131

    def test_end_exclusive_position(self):
        rec = IndexRecord('chr1', 120, 11, 60, 61)
        assert byte_offset(120, rec) == 11 + 120 + 2

    def test_crlf_geometry(self):
        rec = IndexRecord('chr1', 120, 11, 60, 62)
        assert byte_offset(60, rec) == 11 + 60 + 2


class TestRegionExtractor:
    """Test random-access extraction."""

    def test_extract_within_line(self):
        extractor = RegionExtractor(io.BytesIO(wrapped_archive(SEQ)))
        rec = IndexRecord('chr1', 120, 11, 60, 61)
        assert extractor.extract_bases(rec, 5, 25) == SEQ[5:25]

    def test_extract_across_lines(self):
        extractor = RegionExtractor(io.BytesIO(wrapped_archive(SEQ)))
        rec = IndexRecord('chr1', 120, 11, 60, 61)
        assert extractor.extract_bases(rec, 50, 70) == SEQ[50:70]
        assert extractor.extract_bases(rec, 0, 120) == SEQ

    def test_extract_crlf(self):
        extractor = RegionExtractor(io.BytesIO(wrapped_archive(SEQ, newline=b'\r\n')))
        rec = IndexRecord('chr1', 120, 11, 60, 62)
        assert extractor.extract_bases(rec, 55, 65) == SEQ[55:65]

    def test_truncated_archive(self):
        data = wrapped_archive(SEQ)[:-30]
        extractor = RegionExtractor(io.BytesIO(data))
        rec = IndexRecord('chr1', 120, 11, 60, 61)
        with pytest.raises(ArchiveReadError):
            extractor.extract_bases(rec, 100, 120)

    def test_non_ascii_byte(self):
        data = bytearray(wrapped_archive(SEQ))
        data[11 + 30] = 0xE9
        extractor = RegionExtractor(io.BytesIO(bytes(data)))
        rec = IndexRecord('chr1', 120, 11, 60, 61)
        with pytest.raises(ArchiveReadError, match="non-ASCII"):
            extractor.extract_bases(rec, 20, 40)
        assert extractor.extract_bases(rec, 40, 60) == SEQ[40:60]

    def test_check_region(self):
        extractor = RegionExtractor(io.BytesIO(wrapped_archive(SEQ)))
        extractor.check_region(IndexRecord('chr1', 120, 11, 60, 61), 0, 120)

    def test_check_region_past_end(self):
        """An index that claims more bases than the archive holds is caught up front."""
        extractor = RegionExtractor(io.BytesIO(wrapped_archive(SEQ)))
        stale = IndexRecord('chr1', 500, 11, 60, 61)
        with pytest.raises(ArchiveReadError):
            extractor.check_region(stale, 0, 500)

    def test_open_file(self, temp_output_dir):
        path = temp_output_dir / "ref.fa"
        path.write_bytes(wrapped_archive(SEQ))
        rec = IndexRecord('chr1', 120, 11, 60, 61)
        with RegionExtractor.open(path) as extractor:
            assert extractor.archive_size() == len(wrapped_archive(SEQ))
            assert extractor.extract_bases(rec, 10, 20) == SEQ[10:20]

    def test_open_rejects_gzip(self, temp_output_dir):
        path = temp_output_dir / "ref.fa.gz"
        with gzip.open(path, 'wb') as f:
            f.write(wrapped_archive(SEQ))
        with pytest.raises(ConfigurationError):
            with RegionExtractor.open(path):
                pass

# ReadWeaver v0.1.0
# Any usage is subject to this software's license.
