import pyspark.sql.types as T
import pytest

from src.storage_handler.models import Column, TableMetadata

TABLE_ROOT = "/wh/t"


@pytest.fixture
def data_columns() -> list[Column]:
    return [
        Column("id", T.IntegerType()),
        Column("name", T.StringType()),
        Column("amount", T.DecimalType(10, 2)),
    ]


@pytest.fixture
def partitioned_table(data_columns) -> TableMetadata:
    """Table partitioned by year then month."""
    return TableMetadata(
        location=TABLE_ROOT,
        data_columns=data_columns,
        partition_columns=[Column("year", T.IntegerType()), Column("month", T.StringType())],
    )


@pytest.fixture
def unpartitioned_table(data_columns) -> TableMetadata:
    return TableMetadata(location=TABLE_ROOT, data_columns=data_columns)
