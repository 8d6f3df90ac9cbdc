"""Configuration storage for known bridges and the default application.

This module handles:
- Locating the config directory (system-wide, falling back to per-user)
- Reading/writing bridge records, one JSON file per bridge
- Reading/writing/deleting the default application record
"""

import json
import os
import tempfile
from pathlib import Path

from core.errors import NotConfigured, StorageError
from models.types import ApplicationRecord, BridgeRecord
from models.utils import is_valid_bridge_id

# Configuration directory locations
SYSTEM_CONFIG_DIR = Path('/etc') / 'hue-lib'
USER_CONFIG_DIR = Path.home() / '.hue-lib'
CONFIG_DIR_ENV = 'HUE_LIB_CONFIG_DIR'

BRIDGES_DIRNAME = 'bridges'
APPLICATION_FILENAME = 'application.json'


def resolve_config_dir() -> Path:
    """Return the directory config records live in, creating it if needed.

    Priority order:
    1. HUE_LIB_CONFIG_DIR environment variable
    2. System-wide directory (/etc/hue-lib) if writable
    3. Per-user directory (~/.hue-lib)

    Raises:
        StorageError: If no candidate directory can be created
    """
    override = os.getenv(CONFIG_DIR_ENV)
    if override:
        candidates = [Path(override)]
    else:
        candidates = [SYSTEM_CONFIG_DIR, USER_CONFIG_DIR]

    last_error = None
    for directory in candidates:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            last_error = e
            continue
        except OSError as e:
            raise StorageError(f"Unable to create config directory {directory}", e)

        if os.access(directory, os.W_OK):
            return directory
        last_error = PermissionError(f"{directory} is not writable")

    raise StorageError("No writable config directory available", last_error)


class ConfigStore:
    """File-backed store for bridge and application records.

    Every write replaces the target file atomically, so concurrent writers of
    the same record end up with the last writer's content.
    """

    def __init__(self, config_dir: Path | str | None = None):
        """Initialise ConfigStore.

        Args:
            config_dir: Directory to store records in (resolved via
                resolve_config_dir() if not provided)
        """
        self.config_dir = Path(config_dir) if config_dir else resolve_config_dir()

    @property
    def bridges_dir(self) -> Path:
        return self.config_dir / BRIDGES_DIRNAME

    @property
    def application_file(self) -> Path:
        return self.config_dir / APPLICATION_FILENAME

    def _bridge_file(self, bridge_id: str) -> Path:
        if not is_valid_bridge_id(bridge_id):
            raise ValueError(f"Invalid bridge id: {bridge_id!r}")
        return self.bridges_dir / f"{bridge_id}.json"

    # Bridges

    def find_bridge(self, bridge_id: str) -> BridgeRecord | None:
        """Look up a bridge by id.

        Returns:
            The stored BridgeRecord, or None if the bridge is unknown
        """
        path = self._bridge_file(bridge_id)
        data = _read_json(path)
        if data is None:
            return None
        return _decode(BridgeRecord, data, path)

    def write_bridge(self, record: BridgeRecord):
        """Insert or replace the record for record.id."""
        _write_json(self._bridge_file(record.id), record.to_dict())

    def bridges(self) -> list[BridgeRecord]:
        """Return every known bridge, sorted by id."""
        if not self.bridges_dir.exists():
            return []

        try:
            paths = sorted(self.bridges_dir.glob('*.json'))
        except OSError as e:
            raise StorageError(f"Unable to list {self.bridges_dir}", e)

        records = []
        for path in paths:
            data = _read_json(path)
            if data is not None:
                records.append(_decode(BridgeRecord, data, path))
        return records

    # Applications

    def find_default_application(self) -> ApplicationRecord | None:
        """Return the default application record, or None if unconfigured."""
        data = _read_json(self.application_file)
        if data is None:
            return None
        return _decode(ApplicationRecord, data, self.application_file)

    def default_application(self) -> ApplicationRecord:
        """Return the default application record.

        Raises:
            NotConfigured: If no application has been registered
        """
        record = self.find_default_application()
        if record is None:
            raise NotConfigured("No default application registered.")
        return record

    def write_application(self, record: ApplicationRecord):
        """Persist record as the default application (user read/write only)."""
        _write_json(self.application_file, record.to_dict(), mode=0o600)

    def delete_default_application(self):
        """Remove the default application record. No-op if there is none."""
        try:
            self.application_file.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Unable to delete {self.application_file}", e)


def _read_json(path: Path) -> dict | None:
    try:
        with open(path, 'r') as f:
            return json.load(f)
    except FileNotFoundError:
        return None
    except (json.JSONDecodeError, OSError) as e:
        raise StorageError(f"Failed to load config from {path}", e)


def _write_json(path: Path, data: dict, mode: int | None = None):
    """Write data to path via a temporary file and an atomic rename."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix='.tmp')
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2)
            if mode is not None:
                os.chmod(tmp_name, mode)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise StorageError(f"Failed to save config to {path}", e)


def _decode(record_type, data, path: Path):
    try:
        return record_type.from_dict(data)
    except (KeyError, TypeError) as e:
        raise StorageError(f"Malformed record in {path}", e)
