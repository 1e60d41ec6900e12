from .snapshot import FORMAT_VERSION, MAGIC, read_snapshot, snapshot_path, write_snapshot

__all__ = ["FORMAT_VERSION", "MAGIC", "read_snapshot", "snapshot_path", "write_snapshot"]
