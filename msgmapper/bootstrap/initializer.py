import logging
from typing import Iterable

from msgmapper.core.conventions import Conventions
from msgmapper.core.helpers.utils import iter_package_types
from msgmapper.core.ports.mapper import MessageMapperPort


class MessageTypesInitializer:
    """
    Startup step run once the host is configured: finds the message types
    in the scanned packages and initializes the mapper with all of them.
    """

    def __init__(self, mapper: MessageMapperPort | None, conventions: Conventions | None = None) -> None:
        self.mapper = mapper
        self.conventions = conventions or Conventions()
        self._logger = logging.getLogger("bootstrap.initializer")

    def collect(self, packages: Iterable[str]) -> list[type]:
        found: list[type] = []
        for package in packages:
            found.extend(self.conventions.message_types(iter_package_types(package)))
        return found

    def run(self, packages: Iterable[str]) -> list[type]:
        if self.mapper is None:
            return []

        message_types = self.collect(packages)
        self._logger.info(f"Found {len(message_types)} message types")
        self.mapper.initialize(message_types)
        return message_types
