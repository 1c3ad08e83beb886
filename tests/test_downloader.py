"""
Tests for Content-Disposition parsing and the streaming downloader.
"""

import asyncio

import pytest
from aiohttp import web

from tow.exceptions import (
    DestinationNotADirectoryError,
    FilenameUnavailableError,
    FilenameUnparsableError,
    HeaderMissingError,
    NetworkError,
)
from tow.media.downloader import (
    Downloader,
    get_content_length,
    get_filename,
    parse_filename_from_content_disposition,
)


class TestContentDispositionParsing:
    """Test filename extraction from Content-Disposition headers"""

    @pytest.mark.parametrize(
        "header, expected",
        [
            ("attachment; filename=content.txt", "content.txt"),
            (
                "attachment; filename=\"EURO rates\"; filename*=utf-8''%e2%82%ac%20rates",
                "EURO rates",
            ),
            ("attachment; filename=omáèka.jpg", "omáèka.jpg"),
            (
                "attachment; filename=EXAMPLE- I'm ößä.dat; "
                "filename*=iso-8859-1''EXAMPLE-%20I%27m%20%F6%DF%E4.dat",
                "EXAMPLE- I'm ößä.dat",
            ),
            ("attachment: filename=hello.txt", "hello.txt"),
        ],
    )
    def test_known_headers(self, header, expected):
        assert parse_filename_from_content_disposition(header) == expected

    def test_no_filename_token(self):
        with pytest.raises(FilenameUnparsableError, match="cannot get filename"):
            parse_filename_from_content_disposition("attachment")

    def test_extended_parameter_alone_is_not_decoded(self):
        with pytest.raises(FilenameUnparsableError):
            parse_filename_from_content_disposition(
                "attachment; filename*=utf-8''%e2%82%ac%20rates"
            )

    def test_unmatched_quote_is_kept(self):
        header = 'attachment; filename="unterminated.tar.gz'
        assert parse_filename_from_content_disposition(header) == '"unterminated.tar.gz'

    def test_filename_errors_share_a_base_class(self):
        assert issubclass(HeaderMissingError, FilenameUnavailableError)
        assert issubclass(FilenameUnparsableError, FilenameUnavailableError)


class TestHeaderHelpers:
    """Test header helpers used by the downloader"""

    def test_missing_content_disposition(self):
        with pytest.raises(HeaderMissingError):
            get_filename({"Content-Type": "application/octet-stream"})

    def test_path_components_are_stripped(self):
        filename = get_filename({"Content-Disposition": "attachment; filename=../../evil"})
        assert "/" not in filename
        assert filename

    @pytest.mark.parametrize("value", ["", ".", "..", '""'])
    def test_empty_or_relative_filename(self, value):
        with pytest.raises(FilenameUnparsableError):
            get_filename({"Content-Disposition": f"attachment; filename={value}"})

    @pytest.mark.parametrize(
        "value", ['"unterminated.tar.gz', "con", "aux", "tool v1.0 (x86_64)"]
    )
    def test_valid_host_filenames_are_kept(self, value):
        assert get_filename({"Content-Disposition": f"attachment; filename={value}"}) == value

    def test_content_length(self):
        assert get_content_length({"Content-Length": "12"}) == 12

    def test_missing_content_length_is_zero(self, caplog):
        assert get_content_length({}) == 0
        assert "content-length" in caplog.text

    def test_invalid_content_length_is_zero(self):
        assert get_content_length({"Content-Length": "twelve"}) == 0


class TestDownloader:
    """Test downloads against a local HTTP server"""

    def test_download_file(self, tmp_path, http_server, attachment):
        body = b"Hello world!"

        async def run():
            async with http_server(
                {"/helloworld": attachment(body, "hello.txt")}
            ) as server:
                return await Downloader().download(
                    str(server.make_url("/helloworld")), tmp_path
                )

        path = asyncio.run(run())

        assert path == tmp_path / "hello.txt"
        assert path.read_bytes() == body

    def test_destination_must_be_a_directory(self, tmp_path):
        not_a_dir = tmp_path / "file.txt"
        not_a_dir.write_text("x")

        with pytest.raises(DestinationNotADirectoryError, match="not a directory"):
            asyncio.run(Downloader().download("http://localhost/x", not_a_dir))

    def test_missing_destination(self, tmp_path):
        with pytest.raises(DestinationNotADirectoryError):
            asyncio.run(Downloader().download("http://localhost/x", tmp_path / "nope"))

    def test_missing_content_disposition(self, tmp_path, http_server):
        async def handler(request):
            return web.Response(body=b"data")

        async def run():
            async with http_server({"/file": handler}) as server:
                await Downloader().download(str(server.make_url("/file")), tmp_path)

        with pytest.raises(HeaderMissingError):
            asyncio.run(run())
        assert list(tmp_path.iterdir()) == []

    def test_http_error_status(self, tmp_path, http_server):
        async def run():
            async with http_server({}) as server:
                await Downloader().download(str(server.make_url("/missing")), tmp_path)

        with pytest.raises(NetworkError, match="404"):
            asyncio.run(run())

    def test_connection_refused(self, tmp_path, http_server):
        async def run():
            async with http_server({}) as server:
                url = str(server.make_url("/gone"))
            await Downloader(connect_timeout=2).download(url, tmp_path)

        with pytest.raises(NetworkError):
            asyncio.run(run())

    def test_unknown_content_length(self, tmp_path, http_server):
        progress = []

        async def handler(request):
            response = web.StreamResponse(
                headers={"Content-Disposition": 'attachment; filename="tool"'}
            )
            response.enable_chunked_encoding()
            await response.prepare(request)
            await response.write(b"first ")
            await response.write(b"second")
            await response.write_eof()
            return response

        async def run():
            async with http_server({"/tool": handler}) as server:
                return await Downloader().download(
                    str(server.make_url("/tool")),
                    tmp_path,
                    lambda completed, total: progress.append((completed, total)),
                )

        path = asyncio.run(run())

        assert path.read_bytes() == b"first second"
        assert progress
        assert all(completed == 0 and total == 0 for completed, total in progress)

    def test_progress_is_clamped_to_total(self, tmp_path, http_server, attachment):
        body = bytes(range(256)) * 2048
        progress = []

        async def run():
            async with http_server({"/big": attachment(body, "big.bin")}) as server:
                return await Downloader().download(
                    str(server.make_url("/big")),
                    tmp_path,
                    lambda completed, total: progress.append((completed, total)),
                )

        path = asyncio.run(run())

        assert path.read_bytes() == body
        assert all(completed <= total == len(body) for completed, total in progress)
        assert progress[-1] == (len(body), len(body))
        completed_values = [completed for completed, _ in progress]
        assert completed_values == sorted(completed_values)

    def test_unmatched_quote_is_written_as_is(self, tmp_path, http_server):
        async def handler(request):
            return web.Response(
                body=b"archive",
                headers={
                    "Content-Disposition": 'attachment; filename="unterminated.tar.gz'
                },
            )

        async def run():
            async with http_server({"/a": handler}) as server:
                return await Downloader().download(str(server.make_url("/a")), tmp_path)

        path = asyncio.run(run())

        assert path.name == '"unterminated.tar.gz'
        assert path.read_bytes() == b"archive"

    def test_compression_is_not_requested(self, tmp_path, http_server):
        seen = {}

        async def handler(request):
            seen["accept_encoding"] = request.headers.get("Accept-Encoding")
            return web.Response(
                body=b"abc", headers={"Content-Disposition": "attachment; filename=a"}
            )

        async def run():
            async with http_server({"/a": handler}) as server:
                await Downloader().download(str(server.make_url("/a")), tmp_path)

        asyncio.run(run())

        assert seen["accept_encoding"] == "identity"
