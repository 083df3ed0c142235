from .paths import get_path, split_path

__all__ = ["get_path", "split_path"]
