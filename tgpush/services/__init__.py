from .files import walk
from .media import classify, detect_path, detect_reader

__all__ = ["walk", "classify", "detect_path", "detect_reader"]
