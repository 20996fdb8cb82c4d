"""Custom filters for uvicorn access logging."""

import logging


class ExcludeMonitoringPathsFilter(logging.Filter):
    """
    Logging filter to exclude monitoring endpoint requests from access logs.

    Prometheus scrapes and liveness probes hit /metrics and /healthz every
    few seconds; this keeps them out of uvicorn's access log.
    """

    def __init__(self, excluded_paths: list[str] | None = None) -> None:
        super().__init__()
        self.excluded_paths = excluded_paths or ["/metrics", "/healthz"]

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Determine if the log record should be logged.

        Args:
            record: The log record to evaluate.

        Returns:
            False if the request path is in excluded paths, True otherwise.
        """
        message = record.getMessage()
        return not any(
            f"{path} " in message or message.endswith(path)
            for path in self.excluded_paths
        )
