"""
Errors raised by the persistence layer
"""


class RepositoryError(RuntimeError):
    """Database operation failed for a reason other than missing or stale data"""


class RecordNotFoundError(LookupError):
    """No record exists with the requested identifier"""

    def __init__(self, record_id):
        self.record_id = record_id
        super().__init__(f"User with id => {record_id} does not exist!")


class VersionConflictError(Exception):
    """A write presented a version that no longer matches the stored record"""

    def __init__(self, record_id=None, version=None):
        self.record_id = record_id
        self.version = version
        if record_id is None:
            message = f"No stored record matches version {version}"
        else:
            message = f"Record {record_id} is no longer at version {version}"
        super().__init__(message)
