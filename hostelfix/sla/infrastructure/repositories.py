"""
SLA Policy Provider
===================

Loads the SLA policy from YAML and keeps it current.

The policy file is optional: when it does not exist the defaults
(24h open, 48h assigned, 15% warning) apply. When it does, a watchdog
observer reloads it on change without restarting the service.
"""

import threading
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from hostelfix.core import ConfigurationException
from hostelfix.shared.infrastructure.logging import get_logger
from hostelfix.sla.domain import ISLAPolicyProvider, SLAPolicy

logger = get_logger(__name__)


def load_policy(path: Path) -> SLAPolicy:
    """
    Parse a policy file.

    Raises:
        ConfigurationException: File is not valid YAML or holds invalid values
    """
    if not path.exists():
        logger.warning("SLA policy file not found, using defaults", extra={"path": str(path)})
        return SLAPolicy()

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return SLAPolicy(**data.get("sla", data))
    except (yaml.YAMLError, ValidationError, TypeError, AttributeError) as e:
        raise ConfigurationException(f"Invalid SLA policy file {path}: {e}")


class PolicyFileHandler(FileSystemEventHandler):
    """Watchdog event handler for SLA policy file changes."""

    def __init__(self, provider: "YAMLPolicyProvider", path: Path):
        self.provider = provider
        self.path = path
        super().__init__()

    def on_modified(self, event):
        """Handle file modification event."""
        if event.is_directory:
            return
        if Path(event.src_path).resolve() == self.path.resolve():
            logger.info("SLA policy file changed", extra={"path": event.src_path})
            self.provider.reload()


class YAMLPolicyProvider(ISLAPolicyProvider):
    """
    Thread-safe SLA policy provider backed by a YAML file.

    A failed reload keeps serving the last good policy.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._lock = threading.Lock()
        self._policy: SLAPolicy = load_policy(self._path)
        self._observer: Optional[Observer] = None

    def get_policy(self) -> SLAPolicy:
        """Get current SLA policy."""
        with self._lock:
            return self._policy

    def reload(self) -> bool:
        """Reload the policy from file; False if the file is invalid."""
        try:
            policy = load_policy(self._path)
        except ConfigurationException as e:
            logger.error("SLA policy reload failed, keeping previous policy", extra={"error": e.message})
            return False

        with self._lock:
            self._policy = policy
        logger.info("SLA policy reloaded", extra=policy.model_dump())
        return True

    def start_watching(self) -> None:
        """
        Start watching the policy file for changes.

        Skipped when the file does not exist or the platform offers no
        file notifications (some containers).
        """
        if not self._path.exists():
            logger.info("SLA policy file absent, not watching", extra={"path": str(self._path)})
            return

        try:
            self._observer = Observer()
            self._observer.schedule(
                PolicyFileHandler(self, self._path),
                str(self._path.parent),
                recursive=False
            )
            self._observer.start()
            logger.info("Watching SLA policy file", extra={"path": str(self._path)})
        except OSError as e:
            logger.warning("File watching not available, using static policy", extra={"error": str(e)})
            self._observer = None

    def stop_watching(self) -> None:
        """Stop watching the policy file."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None


class StaticPolicyProvider(ISLAPolicyProvider):
    """Fixed policy, for tests and embedded use."""

    def __init__(self, policy: Optional[SLAPolicy] = None):
        self._policy = policy or SLAPolicy()

    def get_policy(self) -> SLAPolicy:
        return self._policy
