from __future__ import annotations

import asyncio
import io

import pytest

from src.event_roster.event_roster.core.exceptions import ReadError
from src.event_roster.event_roster.importing.ingestor import is_delimited_text, read_upload


class BrokenStream:
    def read(self, size=-1):
        raise OSError("disk gone")


def test_reads_text_and_reports_monotonic_progress():
    data = "name,organization,category\nAda,Org1,Committee1\n".encode("utf-8")
    seen = []

    text = asyncio.run(
        read_upload(io.BytesIO(data), filename="p.csv", media_type="text/csv", total_bytes=len(data), on_progress=seen.append, chunk_size=10)
    )

    assert text.startswith("name,organization")
    assert seen == sorted(seen)
    assert seen[-1] == 1.0
    assert all(0.0 <= f <= 1.0 for f in seen)
    assert len(seen) > 2


def test_byte_order_mark_is_dropped():
    text = asyncio.run(read_upload(io.BytesIO("\ufeffname\n".encode("utf-8")), filename="p.csv", media_type="text/csv"))

    assert text == "name\n"


def test_progress_without_known_size_only_reports_completion():
    seen = []
    asyncio.run(read_upload(io.BytesIO(b"a,b\n"), media_type="text/csv", on_progress=seen.append))

    assert seen == [1.0]


def test_oversized_total_is_capped_at_one():
    seen = []
    asyncio.run(read_upload(io.BytesIO(b"a,b\n" * 10), media_type="text/csv", total_bytes=4, on_progress=seen.append, chunk_size=4))

    assert max(seen) == 1.0


@pytest.mark.parametrize(
    "media_type,filename,expected",
    [
        ("text/csv", "x.txt", True),
        ("text/csv; charset=utf-8", None, True),
        ("application/vnd.ms-excel", "x.csv", True),
        ("application/octet-stream", "roster.CSV", True),
        ("application/octet-stream", "roster.xlsx", False),
        ("application/pdf", "roster.csv", False),
        (None, None, False),
    ],
)
def test_delimited_text_detection(media_type, filename, expected):
    assert is_delimited_text(media_type, filename) is expected


def test_wrong_media_type_is_a_read_error():
    with pytest.raises(ReadError):
        asyncio.run(read_upload(io.BytesIO(b"%PDF"), filename="x.pdf", media_type="application/pdf"))


def test_failing_stream_is_a_read_error():
    with pytest.raises(ReadError):
        asyncio.run(read_upload(BrokenStream(), filename="p.csv", media_type="text/csv"))


def test_non_utf8_content_is_a_read_error():
    with pytest.raises(ReadError):
        asyncio.run(read_upload(io.BytesIO("name\nJosé\n".encode("latin-1")), media_type="text/csv"))


def test_upload_limit_is_enforced():
    with pytest.raises(ReadError):
        asyncio.run(read_upload(io.BytesIO(b"x" * 100), media_type="text/csv", chunk_size=10, max_bytes=50))
