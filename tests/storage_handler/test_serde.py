import json

import pyspark.sql.types as T
import pytest

from src.storage_handler.errors import DescriptorDecodeError
from src.storage_handler.models import Column, InputJobDescriptor, JobWriteDescriptor, TableMetadata
from src.storage_handler.serde import (
    deserialize_input_descriptors,
    deserialize_write_descriptor,
    serialize_input_descriptors,
    serialize_write_descriptor,
)


def make_descriptor(table: TableMetadata) -> JobWriteDescriptor:
    return JobWriteDescriptor(
        table=table,
        partition_values={"year": "2024"},
        custom_dynamic_root="custom",
        custom_dynamic_path="${year}/${month}",
        location_override=None,
        resolved_location="/wh/t/_DYNTEMP_job17",
    )


def test_write_descriptor_round_trip_keeps_location(partitioned_table):
    descriptor = make_descriptor(partitioned_table)

    decoded = deserialize_write_descriptor(serialize_write_descriptor(descriptor))

    assert decoded == descriptor
    assert decoded.location == "/wh/t/_DYNTEMP_job17"


def test_write_descriptor_round_trip_keeps_nested_types():
    table = TableMetadata(
        location="s3a://bucket/t",
        data_columns=[
            Column("tags", T.ArrayType(T.StringType())),
            Column("attrs", T.MapType(T.StringType(), T.LongType())),
            Column("point", T.StructType([T.StructField("x", T.DoubleType())])),
        ],
        properties={"EXTERNAL": "TRUE", "orc.compress": "ZLIB"},
    )
    decoded = deserialize_write_descriptor(serialize_write_descriptor(JobWriteDescriptor(table)))

    assert decoded.table == table
    assert decoded.table.is_external
    assert decoded.resolved_location is None


def test_serialized_write_descriptor_is_json(partitioned_table):
    document = json.loads(serialize_write_descriptor(make_descriptor(partitioned_table)))
    assert document["location"] == "/wh/t/_DYNTEMP_job17"
    assert document["table"]["partition_columns"][0]["name"] == "year"


def test_input_descriptors_round_trip(partitioned_table, unpartitioned_table):
    descriptors = [
        InputJobDescriptor(partitioned_table, filter="year > 2020"),
        InputJobDescriptor(unpartitioned_table),
    ]
    assert deserialize_input_descriptors(serialize_input_descriptors(descriptors)) == descriptors


@pytest.mark.parametrize(
    "payload",
    [
        None,
        "not json",
        "[]",
        '{"table": "nope"}',
        '{"partition_values": {}}',
        '{"table": {"location": "/wh/t", "data_columns": [{"name": "a", "type": "no_such_type"}]}}',
    ],
)
def test_malformed_write_descriptor_raises_decode_error(payload):
    with pytest.raises(DescriptorDecodeError):
        deserialize_write_descriptor(payload)


@pytest.mark.parametrize("payload", [None, "{", '{"table": {}}', '[{"filter": "x"}]'])
def test_malformed_input_descriptors_raise_decode_error(payload):
    with pytest.raises(DescriptorDecodeError):
        deserialize_input_descriptors(payload)


def test_null_partition_value_is_a_decode_error():
    payload = (
        '{"table": {"location": "/wh/t", "data_columns": [], '
        '"partition_columns": [{"name": "year", "type": "integer"}]}, '
        '"partition_values": {"year": null}}'
    )
    with pytest.raises(DescriptorDecodeError):
        deserialize_write_descriptor(payload)


def test_unknown_fields_are_rejected(partitioned_table):
    document = json.loads(serialize_write_descriptor(JobWriteDescriptor(partitioned_table)))
    document["surprise"] = True
    with pytest.raises(DescriptorDecodeError):
        deserialize_write_descriptor(json.dumps(document))
