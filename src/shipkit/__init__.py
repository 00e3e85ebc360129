from importlib.metadata import PackageNotFoundError, version


def _read_version() -> str:
    try:
        return version("shipkit")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _read_version()

__all__ = ["__version__", "_read_version"]
