"""Tiny media payloads recognised by their magic numbers."""
import struct

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 64
WEBP = b"RIFF\x00\x00\x00\x00WEBPVP8 " + b"\x00" * 64
MP3 = b"ID3\x03\x00\x00\x00\x00\x00\x00" + b"\x00" * 64


def box(kind: bytes, payload: bytes) -> bytes:
    return struct.pack(">I4s", 8 + len(payload), kind) + payload


def tkhd(track_id: int, width: int, height: int) -> bytes:
    return box(b"tkhd", b"\x00\x00\x00\x07" + struct.pack(">IIIII", 0, 0, track_id, 0, 0)
               + b"\x00" * 52 + struct.pack(">II", width << 16, height << 16))


def mp4(duration: int = 12, width: int = 1280, height: int = 720, with_moov: bool = True) -> bytes:
    """Minimal ISO base media file: ftyp, mdat, then moov at the end."""
    ftyp = box(b"ftyp", b"isom" + struct.pack(">I", 512) + b"isom" + b"mp41")
    mdat = box(b"mdat", b"\x00" * 64)
    if not with_moov:
        return ftyp + mdat
    mvhd = box(b"mvhd", b"\x00\x00\x00\x00" + struct.pack(">IIII", 0, 0, 1000, duration * 1000) + b"\x00" * 80)
    sound = box(b"trak", tkhd(1, 0, 0))
    video = box(b"trak", tkhd(2, width, height))
    return ftyp + mdat + box(b"moov", mvhd + sound + video)
