from dataclasses import FrozenInstanceError

import pyspark.sql.types as T
import pytest

from src.enums import AcidOperationalProperties
from src.storage_handler.errors import DescriptorValidationError, LocationNotResolvedError
from src.storage_handler.models import (
    Column,
    DynamicPartitionContext,
    JobWriteDescriptor,
    TableMetadata,
)


def make_table(**overrides) -> TableMetadata:
    base = dict(
        location="/wh/t",
        data_columns=[Column("id", T.IntegerType()), Column("name", T.StringType())],
        partition_columns=[Column("year", T.IntegerType()), Column("month", T.StringType())],
        properties={},
    )
    base.update(overrides)
    return TableMetadata(**base)


# --- Column ---


@pytest.mark.parametrize(
    "data_type, expected",
    [
        (T.IntegerType(), "int"),
        (T.LongType(), "bigint"),
        (T.StringType(), "string"),
        (T.DecimalType(10, 2), "decimal(10,2)"),
        (T.ArrayType(T.StringType()), "array<string>"),
        (T.MapType(T.StringType(), T.IntegerType()), "map<string,int>"),
    ],
)
def test_column_type_string(data_type, expected):
    assert Column("c", data_type).type_string == expected


# --- TableMetadata ---


def test_column_names_preserve_declared_order():
    table = make_table()
    assert table.data_column_names == ("id", "name")
    assert table.partition_column_names == ("year", "month")
    assert table.is_partitioned


def test_table_is_frozen_and_properties_read_only():
    table = make_table(properties={"EXTERNAL": "TRUE"})
    with pytest.raises(FrozenInstanceError):
        table.location = "/other"  # type: ignore[misc]
    with pytest.raises(TypeError):
        table.properties["EXTERNAL"] = "FALSE"  # type: ignore[index]


@pytest.mark.parametrize(
    "properties, expected",
    [({}, False), ({"EXTERNAL": "TRUE"}, True), ({"EXTERNAL": "true"}, True), ({"EXTERNAL": "FALSE"}, False)],
)
def test_is_external(properties, expected):
    assert make_table(properties=properties).is_external is expected


@pytest.mark.parametrize(
    "properties, transactional, acid",
    [
        ({}, False, AcidOperationalProperties.LEGACY),
        ({"transactional": "true"}, True, AcidOperationalProperties.SPLIT_UPDATE),
        (
            {"transactional": "true", "transactional_properties": "insert_only"},
            True,
            AcidOperationalProperties.INSERT_ONLY,
        ),
        (
            {"transactional": "true", "transactional_properties": "3"},
            True,
            AcidOperationalProperties.SPLIT_UPDATE | AcidOperationalProperties.HASH_BASED_MERGE,
        ),
        ({"transactional_properties": "insert_only"}, False, AcidOperationalProperties.LEGACY),
    ],
)
def test_transactional_flags(properties, transactional, acid):
    table = make_table(properties=properties)
    assert table.is_transactional is transactional
    assert table.acid_operational_properties == acid


def test_unknown_transactional_properties_are_rejected():
    with pytest.raises(ValueError):
        AcidOperationalProperties.parse("sometimes")


# --- JobWriteDescriptor ---


def test_location_cannot_be_read_before_resolution():
    descriptor = JobWriteDescriptor(table=make_table())
    with pytest.raises(LocationNotResolvedError):
        _ = descriptor.location


def test_partition_values_are_coerced_to_strings():
    descriptor = JobWriteDescriptor(table=make_table(), partition_values={"year": 2024})
    assert descriptor.partition_values == {"year": "2024"}


def test_materialization():
    table = make_table()
    assert JobWriteDescriptor(table, {"year": "2024", "month": "05"}).is_fully_materialized
    assert not JobWriteDescriptor(table, {"year": "2024"}).is_fully_materialized
    assert JobWriteDescriptor(make_table(partition_columns=[])).is_fully_materialized


def test_ordered_partition_values_follow_declared_order():
    descriptor = JobWriteDescriptor(make_table(), {"month": "05", "year": "2024"})
    assert descriptor.ordered_partition_values() == [("year", "2024"), ("month", "05")]


# --- DynamicPartitionContext ---


def test_context_from_job_properties():
    context = DynamicPartitionContext.from_job_properties(
        {"hcat.dynamic.partitioning.jobid": "job17", "other": "x"}
    )
    assert context == DynamicPartitionContext(dyn_hash="job17", id_hash=None)
    assert context.is_dynamic


def test_empty_dynamic_hash_is_not_dynamic():
    assert not DynamicPartitionContext(dyn_hash="", id_hash="a1").is_dynamic


def test_unknown_transactional_properties_raise_validation_error():
    table = make_table(properties={"transactional": "true", "transactional_properties": "bogus"})
    with pytest.raises(DescriptorValidationError, match="bogus"):
        _ = table.acid_operational_properties


def test_null_partition_values_are_rejected():
    with pytest.raises(DescriptorValidationError, match="year"):
        JobWriteDescriptor(table=make_table(), partition_values={"year": None})
