"""Error taxonomy for the log pipeline. Everything here is recovered locally."""


class LogPipelineError(Exception):
    """Base class for non-fatal pipeline failures."""


class DirectoryUnavailable(LogPipelineError):
    def __init__(self, path: str):
        super().__init__(f"Log directory unavailable: {path}")
        self.path = path


class FileMetadataUnreadable(LogPipelineError):
    def __init__(self, path: str):
        super().__init__(f"Cannot read metadata for {path}")
        self.path = path


class FileDeleteFailed(LogPipelineError):
    def __init__(self, path: str):
        super().__init__(f"Failed to delete old log file {path}")
        self.path = path


class SinkWriteFailed(LogPipelineError):
    def __init__(self, sink_name: str):
        super().__init__(f"Write to sink '{sink_name}' failed")
        self.sink_name = sink_name


class ConfigError(ValueError):
    """Invalid configuration, raised at startup."""
