"""Local file discovery."""
import logging
from pathlib import Path
from ..errors import ConfigError
from ..models import SourceFile

log = logging.getLogger(__name__)

THUMB_MARK = ".thumb"


def _normalize(exts: list[str]) -> set[str]:
    """'MP4', '.mp4' and 'mp4' all mean '.mp4'."""
    return {("." + e.lstrip(".")).lower() for e in exts if e.strip(".")}


def _is_thumb(path: Path) -> bool:
    return Path(path.stem).suffix.lower() == THUMB_MARK


def _thumb_for(path: Path, thumbs: dict[Path, Path]) -> Path | None:
    """A file 'a/clip.thumb.jpg' is the thumbnail of 'a/clip.mp4'."""
    return thumbs.get(path.parent / path.stem)


def _expand(path: Path) -> list[Path]:
    if path.is_dir():
        return sorted(p for p in path.rglob("*") if p.is_file())
    return [path]


def walk(paths: list[str], includes: list[str] | None = None, excludes: list[str] | None = None) -> list[SourceFile]:
    """Collect files under paths, filtered by extension, with thumbnails attached."""
    inc = _normalize(includes or [])
    exc = _normalize(excludes or [])

    candidates: list[Path] = []
    for raw in paths:
        path = Path(raw).expanduser()
        if not path.exists():
            raise ConfigError(f"path does not exist: {raw}")
        candidates.extend(_expand(path))

    thumbs = {
        p.parent / Path(p.stem).stem: p
        for p in candidates if _is_thumb(p)
    }

    files: list[SourceFile] = []
    seen: set[Path] = set()
    for path in candidates:
        if _is_thumb(path) or path in seen:
            continue
        ext = path.suffix.lower()
        if ext in exc:
            continue
        if inc and ext not in inc:
            continue
        seen.add(path)
        files.append(SourceFile(path=path, thumb=_thumb_for(path, thumbs)))

    log.info(f"Found {len(files)} files")
    return files
