"""Tests for mime sniffing, video probing and classification."""
import io
from datetime import timedelta
import pytest
from unittest.mock import MagicMock, patch
from tgpush.models import MediaKind
from tgpush.services.media import ProbeError, classify, detect_path, detect_reader, probe_video
from .samples import MP3, PNG, WEBP, mp4


def named(data: bytes, name: str) -> io.BytesIO:
    stream = io.BytesIO(data)
    stream.name = name
    return stream


def metadata(**values):
    meta = MagicMock()
    meta.has.side_effect = lambda key: key in values
    meta.get.side_effect = lambda key: values[key]
    return meta


class TestDetect:

    def test_sniffs_content_not_name(self, make_file):
        path = make_file("picture.dat", PNG)
        assert detect_path(path) == "image/png"

    def test_extension_is_ignored(self, make_file):
        assert detect_path(make_file("photo.jpg", b"just some text\n")) == "text/plain"
        assert detect_path(make_file("clip.mp4", b"\x01\x02\x00\x03")) == "application/octet-stream"

    def test_utf8_text(self):
        assert detect_reader(io.BytesIO("héllo wörld\n".encode())) == "text/plain"

    def test_text_cut_inside_a_character(self):
        data = b"a" * 8191 + "é".encode()
        assert detect_reader(io.BytesIO(data)) == "text/plain"

    def test_unknown(self):
        assert detect_reader(io.BytesIO(b"\x01\x02\x03")) == "application/octet-stream"

    def test_empty(self):
        assert detect_reader(io.BytesIO(b"")) == "application/octet-stream"

    def test_keeps_position(self):
        stream = io.BytesIO(PNG)
        stream.seek(5)
        detect_reader(stream)
        assert stream.tell() == 5


class TestProbe:

    def test_reads_duration_and_size(self):
        meta = metadata(duration=timedelta(seconds=11.6), width=1280, height=720)
        with patch("tgpush.services.media.guessParser", return_value=MagicMock()), \
                patch("tgpush.services.media.extractMetadata", return_value=meta):
            assert probe_video(io.BytesIO(mp4())) == (12, 1280, 720)

    def test_missing_size(self):
        meta = metadata(duration=timedelta(seconds=3))
        with patch("tgpush.services.media.guessParser", return_value=MagicMock()), \
                patch("tgpush.services.media.extractMetadata", return_value=meta):
            assert probe_video(io.BytesIO(mp4())) == (3, 0, 0)

    def test_no_duration(self):
        with patch("tgpush.services.media.guessParser", return_value=MagicMock()), \
                patch("tgpush.services.media.extractMetadata", return_value=metadata(width=1)):
            with pytest.raises(ProbeError, match="duration"):
                probe_video(io.BytesIO(mp4()))

    def test_unknown_container(self):
        with patch("tgpush.services.media.guessParser", return_value=None):
            with pytest.raises(ProbeError, match="unknown container"):
                probe_video(io.BytesIO(b"\x00" * 32))

    def test_parser_crash(self):
        with patch("tgpush.services.media.guessParser", side_effect=ValueError("bad atom")):
            with pytest.raises(ProbeError, match="bad atom"):
                probe_video(io.BytesIO(mp4()))

    def test_container_without_movie_header(self):
        with pytest.raises(ProbeError):
            probe_video(io.BytesIO(mp4(with_moov=False)))


class TestClassify:

    @pytest.mark.parametrize("data, kind", [
        (PNG, MediaKind.IMAGE),
        (WEBP, MediaKind.WEBP),
        (MP3, MediaKind.AUDIO),
        (b"\x01\x02\x03", MediaKind.DOCUMENT),
    ])
    def test_kinds(self, data, kind):
        assert classify(io.BytesIO(data)).kind == kind

    @pytest.mark.parametrize("data, name", [
        (b"not a video at all\n", "notes.mp4"),
        (b"\x01\x02\x03", "clip.mkv"),
        (b"just some text\n", "picture.png"),
    ])
    def test_misnamed_files_are_documents(self, data, name):
        assert classify(named(data, name)).kind == MediaKind.DOCUMENT

    def test_video_is_probed(self):
        stream = io.BytesIO(mp4())
        stream.seek(0, io.SEEK_END)
        with patch("tgpush.services.media.probe_video", return_value=(30, 640, 360)) as probe:
            media = classify(stream)
        probe.assert_called_once_with(stream)
        assert media.kind == MediaKind.VIDEO
        assert media.mime == "video/mp4"
        assert (media.duration, media.width, media.height) == (30, 640, 360)
        assert media.probed
        assert stream.tell() == 0

    def test_probe_failure_is_not_fatal(self):
        stream = io.BytesIO(mp4(with_moov=False))
        media = classify(stream)
        assert media.kind == MediaKind.VIDEO
        assert not media.probed
        assert (media.duration, media.width, media.height) == (0, 0, 0)
        assert stream.tell() == 0
