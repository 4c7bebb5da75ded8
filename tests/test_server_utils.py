"""Tests for server helper functions."""

from server.utils import content_disposition, guess_media_type


def test_content_disposition_plain_name():
    assert content_disposition('a.txt') == 'attachment; filename="a.txt"'


def test_content_disposition_non_ascii_name():
    header = content_disposition('résumé.pdf')

    assert header.startswith('attachment; filename="rsum.pdf"')
    assert "filename*=UTF-8''r%C3%A9sum%C3%A9.pdf" in header


def test_content_disposition_drops_control_characters():
    header = content_disposition('evil\r\nSet-Cookie: a=1\x00\x1f\x7f.txt')

    assert '\r' not in header
    assert '\n' not in header
    assert not any(ord(ch) < 0x20 or ord(ch) == 0x7f for ch in header)
    assert 'filename="evilSet-Cookie: a=1.txt"' in header
    assert "filename*=UTF-8''evil%0D%0ASet-Cookie" in header


def test_content_disposition_strips_quotes_and_backslashes():
    header = content_disposition('a"b\\c.txt')

    assert 'filename="abc.txt"' in header


def test_content_disposition_empty_fallback():
    assert content_disposition('\r\n').startswith('attachment; filename="download"')


def test_guess_media_type():
    assert guess_media_type('report.pdf') == 'application/pdf'
    assert guess_media_type('blob.unknownext') == 'application/octet-stream'
