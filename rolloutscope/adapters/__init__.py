from .fleet import FleetAPIError, FleetClient
from .snapshot import SnapshotError, load_execution_file

__all__ = ["FleetAPIError", "FleetClient", "SnapshotError", "load_execution_file"]
