"""Shared constant values used across the storage handler."""

from typing import Final

DYNAMIC_TEMP_DIR_PREFIX: Final[str] = "_DYNTEMP_"
SCRATCH_DIR_PREFIX: Final[str] = "_SCRATCH_"
DEFAULT_PARTITION_NAME: Final[str] = "__HIVE_DEFAULT_PARTITION__"

COLUMN_NAME_DELIMITER: Final[str] = ","
COLUMN_TYPE_DELIMITER: Final[str] = ":"
PATH_SEPARATOR: Final[str] = "/"
