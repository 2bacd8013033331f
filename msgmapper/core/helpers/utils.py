import importlib
import inspect
import logging
import pkgutil
from typing import Generator


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s] : %(message)s',
    )


def scan(package: str) -> Generator[str, None, None]:
    """
    Import every module of `package`, sub-packages included, and yield the
    names of the imported modules.
    """
    py_package = importlib.import_module(package)
    yield py_package.__name__

    path = getattr(py_package, "__path__", None)
    if path is None:
        return

    for module_info in pkgutil.walk_packages(path, prefix=f"{package}."):
        importlib.import_module(module_info.name)
        yield module_info.name


def iter_package_types(package: str) -> Generator[type, None, None]:
    """
    Yield the classes defined (not merely imported) in the modules of
    `package`, in module order.
    """
    for module_name in scan(package):
        module = importlib.import_module(module_name)
        for _, member in inspect.getmembers(module, inspect.isclass):
            if member.__module__ == module_name:
                yield member
