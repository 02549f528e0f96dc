from .cloudsql import CloudSQLInstance
from .errors import ConfigurationError
from .resolver import instance_name, resolve

__all__ = ["CloudSQLInstance", "ConfigurationError", "instance_name", "resolve"]
