"""
Exceptions raised by the Lakach backend.
"""


class LakachError(Exception):
    pass


class RemoteListingError(LakachError):
    """Listing a remote directory over ssh failed."""

    def __init__(self, host: str, path: str, stderr: str):
        self.host = host
        self.path = path
        self.stderr = stderr.strip()
        location = f"{host}:{path}" if path else f"{host}:~"
        super().__init__(f"{location}: {self.stderr or 'remote listing failed'}")


class ConfigError(LakachError):
    pass
