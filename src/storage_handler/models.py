"""Domain models for table metadata and the per-job read/write descriptors."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

import pyspark.sql.types as T

from src.enums import AcidOperationalProperties, JobProperty, TableProperty
from src.storage_handler.errors import DescriptorValidationError, LocationNotResolvedError


@dataclass(frozen=True)
class Column:
    """A named, typed table column."""

    name: str
    data_type: T.DataType

    @property
    def type_string(self) -> str:
        """Type descriptor as written into job properties, e.g. 'decimal(10,2)'."""
        return self.data_type.simpleString()


@dataclass(frozen=True)
class TableMetadata:
    """
    Persisted table definition, loaded once per job configuration.

    location:
        Root path of the table's storage.
    data_columns / partition_columns:
        Declared columns, in declared order.
    properties:
        Raw table properties (read-only). External and transactional flags
        are derived from them.
    """

    location: str
    data_columns: Sequence[Column]
    partition_columns: Sequence[Column] = ()
    properties: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data_columns", tuple(self.data_columns))
        object.__setattr__(self, "partition_columns", tuple(self.partition_columns))
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @property
    def data_column_names(self) -> tuple[str, ...]:
        """Data column names in declared order."""
        return tuple(column.name for column in self.data_columns)

    @property
    def partition_column_names(self) -> tuple[str, ...]:
        """Partition column names in declared order."""
        return tuple(column.name for column in self.partition_columns)

    @property
    def is_partitioned(self) -> bool:
        return len(self.partition_columns) > 0

    @property
    def is_external(self) -> bool:
        """True when the storage lifecycle is not owned by the catalog."""
        return _is_true(self.properties.get(TableProperty.EXTERNAL.value))

    @property
    def is_transactional(self) -> bool:
        return _is_true(self.properties.get(TableProperty.TRANSACTIONAL.value))

    @property
    def acid_operational_properties(self) -> AcidOperationalProperties:
        """Operational flags; LEGACY for non-transactional tables."""
        if not self.is_transactional:
            return AcidOperationalProperties.LEGACY
        try:
            return AcidOperationalProperties.parse(
                self.properties.get(TableProperty.TRANSACTIONAL_PROPERTIES.value)
            )
        except ValueError as error:
            raise DescriptorValidationError(f"Table {self.location}: {error}") from error


@dataclass(frozen=True)
class InputJobDescriptor:
    """Read-side descriptor for one table scanned by the job."""

    table: TableMetadata
    filter: str | None = None


@dataclass
class JobWriteDescriptor:
    """
    Write-side descriptor, one per job.

    Decoded at the start of output configuration, updated in place by the
    output location resolver, then encoded back into the job properties for
    task writers and the commit phase.

    partition_values:
        Resolved partition values. May cover only some partition columns
        (partial materialization) when the rest are discovered per row.
    custom_dynamic_root / custom_dynamic_path:
        Overrides honoured for external tables written with dynamic partitions.
    location_override:
        Explicit final location for a static write into an external table.
    resolved_location:
        Output of the last resolution pass; read it through `location`.
    """

    table: TableMetadata
    partition_values: dict[str, str] = field(default_factory=dict)
    custom_dynamic_root: str | None = None
    custom_dynamic_path: str | None = None
    location_override: str | None = None
    resolved_location: str | None = None

    def __post_init__(self) -> None:
        missing = sorted(str(k) for k, v in dict(self.partition_values).items() if v is None)
        if missing:
            raise DescriptorValidationError(
                f"Partition value(s) for {missing} are null; omit unknown partition columns instead."
            )
        self.partition_values = {str(k): str(v) for k, v in dict(self.partition_values).items()}

    @property
    def location(self) -> str:
        """The resolved output location; raises if no resolution has run."""
        if self.resolved_location is None:
            raise LocationNotResolvedError("Output location has not been resolved for this job.")
        return self.resolved_location

    @property
    def is_fully_materialized(self) -> bool:
        """Every declared partition column has a resolved value."""
        return all(name in self.partition_values for name in self.table.partition_column_names)

    def ordered_partition_values(self) -> list[tuple[str, str]]:
        """Resolved (name, value) pairs in declared partition-column order."""
        return [
            (name, self.partition_values[name])
            for name in self.table.partition_column_names
            if name in self.partition_values
        ]


@dataclass(frozen=True)
class DynamicPartitionContext:
    """
    Job-scoped markers selecting the working directory.

    dyn_hash is set when partition values are discovered at runtime; id_hash
    identifies the scratch area of a static write. Only one is meaningful per
    job, and dyn_hash takes precedence.
    """

    dyn_hash: str | None = None
    id_hash: str | None = None

    @property
    def is_dynamic(self) -> bool:
        return bool(self.dyn_hash)

    @classmethod
    def from_job_properties(cls, job_properties: Mapping[str, str]) -> DynamicPartitionContext:
        return cls(
            dyn_hash=job_properties.get(JobProperty.DYNAMIC_PARTITIONING_JOB_ID.value),
            id_hash=job_properties.get(JobProperty.OUTPUT_ID_HASH.value),
        )


# -----------------
# Helpers
# -----------------


def _is_true(value: str | None) -> bool:
    return value is not None and str(value).strip().lower() == "true"
