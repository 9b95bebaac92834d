"""protoglue - Protocol buffer codec generator for Python."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("protoglue")
except PackageNotFoundError:
    __version__ = "(local)"
