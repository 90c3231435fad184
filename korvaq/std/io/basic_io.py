import os
from korvaq.errors import KorvaqError
from korvaq.types import ErrorVal


class BasicIO:
    """Filesystem access for `read` and `connect`."""
    def __init__(self, encoding: str = 'utf-8'):
        self.encoding = encoding

    def resolve_path(self, path: str) -> str:
        return os.path.abspath(path)

    def read_file(self, path: str) -> str:
        try:
            with open(path, 'r', encoding=self.encoding) as f:
                return f.read()
        except FileNotFoundError:
            raise KorvaqError(ErrorVal('IOError', f'file not found: {path}')) from None
        except PermissionError:
            raise KorvaqError(ErrorVal('IOError', f'permission denied: {path}')) from None
        except (OSError, UnicodeDecodeError) as e:
            raise KorvaqError(ErrorVal('IOError', f'error reading file {path}: {e}')) from None
