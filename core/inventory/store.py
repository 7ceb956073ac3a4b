"""
File-backed project inventory.

Persists the inventory as <workspace>/projects/inventory.json with projects
sorted by path, so saving an unchanged set rewrites the same project list.
"""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

from pydantic import ValidationError

from ..errors import InventoryCorruptError
from ..models.projects import (
    INVENTORY_SCHEMA_VERSION,
    Inventory,
    InventoryFile,
    format_timestamp,
    utc_now,
)

logger = logging.getLogger(__name__)

DIR_MODE = 0o750
FILE_MODE = 0o600


class InventoryRepository(Protocol):
    def load(self) -> Inventory:
        ...

    def save(self, inventory: Inventory) -> None:
        ...


def inventory_file_path(workspace_dir: Union[str, Path]) -> Path:
    return Path(workspace_dir) / "projects" / "inventory.json"


class InventoryStore:
    """Load and save the project inventory of one workspace"""

    def __init__(
        self,
        workspace_dir: Union[str, Path],
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Args:
            workspace_dir: Workspace root directory
            clock: Source of the `updated_at` timestamp (UTC now by default)
        """
        self.workspace_dir = Path(workspace_dir)
        self.path = inventory_file_path(self.workspace_dir)
        self._clock = clock or utc_now

    def load(self) -> Inventory:
        """
        Read the inventory from disk.

        A missing file yields an empty inventory. A file that is not a valid
        inventory document raises InventoryCorruptError.
        """
        try:
            with open(self.path, 'rb') as f:
                body = f.read()
        except FileNotFoundError:
            return Inventory()

        try:
            document = InventoryFile.model_validate(json.loads(body.decode('utf-8')))
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            raise InventoryCorruptError(self.path, str(e)) from e

        if document.version != INVENTORY_SCHEMA_VERSION:
            logger.warning(
                f"Inventory {self.path} has schema version {document.version}, "
                f"expected {INVENTORY_SCHEMA_VERSION}"
            )

        return Inventory(projects=list(document.projects))

    def save(self, inventory: Inventory) -> None:
        """Write the inventory, sorted by path, with a fresh updated_at"""
        self.path.parent.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)

        document = InventoryFile(
            version=INVENTORY_SCHEMA_VERSION,
            updated_at=format_timestamp(self._clock()),
            projects=inventory.sorted_projects(),
        )
        body = json.dumps(document.to_dict(), indent=2) + "\n"

        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(body)
        os.chmod(self.path, FILE_MODE)

        logger.info(f"Saved inventory with {len(document.projects)} projects to {self.path}")
