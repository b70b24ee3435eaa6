"""Enumerations used throughout the storage handler."""

from enum import IntFlag, StrEnum


class JobProperty(StrEnum):
    """Well-known keys of the job property map."""

    INPUT_JOB_INFO = "mapreduce.lib.hcat.job.info"
    OUTPUT_JOB_INFO = "mapreduce.lib.hcatoutput.info"
    DYNAMIC_PARTITIONING_JOB_ID = "hcat.dynamic.partitioning.jobid"
    OUTPUT_ID_HASH = "hcat.output.id.hash"
    COLUMNS = "columns"
    COLUMNS_TYPES = "columns.types"
    SCHEMA_EVOLUTION_COLUMNS = "schema.evolution.columns"
    SCHEMA_EVOLUTION_COLUMNS_TYPES = "schema.evolution.columns.types"
    TRANSACTIONAL_TABLE_SCAN = "hive.transactional.table.scan"
    ACID_OPERATIONAL_PROPERTIES = "hive.txn.operational.properties"
    OUTPUT_DIR = "mapred.output.dir"


class TableProperty(StrEnum):
    """Table properties read from the persisted table definition."""

    EXTERNAL = "EXTERNAL"
    TRANSACTIONAL = "transactional"
    TRANSACTIONAL_PROPERTIES = "transactional_properties"


class OutputFormat(StrEnum):
    """Output formats that carry format-specific job properties."""

    ORC = "org.apache.hadoop.hive.ql.io.orc.OrcOutputFormat"
    PARQUET = "org.apache.hadoop.hive.ql.io.parquet.MapredParquetOutputFormat"
    AVRO = "org.apache.hadoop.hive.ql.io.avro.AvroContainerOutputFormat"

    @property
    def property_prefix(self) -> str:
        """Prefix of the table properties forwarded for this format."""
        mapping = {
            OutputFormat.ORC: "orc.",
            OutputFormat.PARQUET: "parquet.",
            OutputFormat.AVRO: "avro.",
        }
        return mapping[self]


class AcidOperationalProperties(IntFlag):
    """Operational flags of a transactional table."""

    LEGACY = 0
    SPLIT_UPDATE = 1
    HASH_BASED_MERGE = 2
    INSERT_ONLY = 4

    @classmethod
    def parse(cls, value: str | None) -> "AcidOperationalProperties":
        """Parse the `transactional_properties` table property.

        Accepts the named modes `default`, `legacy` and `insert_only`, or the
        integer form of the bitset. Missing values map to `default`.
        """
        if value is None or value.strip() == "":
            return cls.SPLIT_UPDATE
        text = value.strip().lower()
        named = {
            "default": cls.SPLIT_UPDATE,
            "legacy": cls.LEGACY,
            "insert_only": cls.INSERT_ONLY,
        }
        if text in named:
            return named[text]
        try:
            return cls(int(text))
        except ValueError as error:
            raise ValueError(f"Unknown transactional_properties value: {value!r}") from error
