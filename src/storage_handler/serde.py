"""
JSON encoding of job descriptors carried in the job property map.

Descriptors cross the job boundary only as strings: decode on entry to a
configuration pass, encode on exit. The wire shape is a set of strict msgspec
structs; column types are stored as pyspark DataType JSON so any pyspark type
survives the round trip.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import msgspec
import pyspark.sql.types as T

from src.storage_handler.errors import DescriptorDecodeError
from src.storage_handler.models import (
    Column,
    InputJobDescriptor,
    JobWriteDescriptor,
    TableMetadata,
)

# ---------- wire structs ----------


class WireStruct(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    omit_defaults=True,
    forbid_unknown_fields=True,
):
    """Base struct for descriptor payloads."""


class ColumnWire(WireStruct):
    name: str
    type: str | dict[str, Any]


class TableWire(WireStruct):
    location: str
    data_columns: tuple[ColumnWire, ...]
    partition_columns: tuple[ColumnWire, ...] = ()
    properties: dict[str, str] = msgspec.field(default_factory=dict)


class WriteDescriptorWire(WireStruct):
    table: TableWire
    partition_values: dict[str, str] = msgspec.field(default_factory=dict)
    custom_dynamic_root: str | None = None
    custom_dynamic_path: str | None = None
    location_override: str | None = None
    location: str | None = None


class InputDescriptorWire(WireStruct):
    table: TableWire
    filter: str | None = None


_ENCODER = msgspec.json.Encoder(order="sorted")
_WRITE_DECODER = msgspec.json.Decoder(type=WriteDescriptorWire)
_INPUT_DECODER = msgspec.json.Decoder(type=list[InputDescriptorWire])


# ---------- model <-> wire ----------


def _column_to_wire(column: Column) -> ColumnWire:
    return ColumnWire(name=column.name, type=column.data_type.jsonValue())


def _column_from_wire(wire: ColumnWire) -> Column:
    try:
        struct_field = T.StructField.fromJson(
            {"name": wire.name, "type": wire.type, "nullable": True, "metadata": {}}
        )
    except (KeyError, ValueError) as error:
        raise DescriptorDecodeError(
            f"Column {wire.name!r} has an unreadable type {wire.type!r}: {error!r}"
        ) from error
    return Column(name=struct_field.name, data_type=struct_field.dataType)


def _table_to_wire(table: TableMetadata) -> TableWire:
    return TableWire(
        location=table.location,
        data_columns=tuple(_column_to_wire(c) for c in table.data_columns),
        partition_columns=tuple(_column_to_wire(c) for c in table.partition_columns),
        properties=dict(table.properties),
    )


def _table_from_wire(wire: TableWire) -> TableMetadata:
    return TableMetadata(
        location=wire.location,
        data_columns=[_column_from_wire(c) for c in wire.data_columns],
        partition_columns=[_column_from_wire(c) for c in wire.partition_columns],
        properties=wire.properties,
    )


def _decode(decoder: msgspec.json.Decoder, payload: str | None, what: str) -> Any:
    if payload is None:
        raise DescriptorDecodeError(f"No serialized {what} to decode.")
    try:
        return decoder.decode(payload)
    except msgspec.DecodeError as error:
        # msgspec.ValidationError subclasses DecodeError.
        raise DescriptorDecodeError(f"Malformed {what}: {error}") from error


# ---------- public API ----------


def serialize_write_descriptor(descriptor: JobWriteDescriptor) -> str:
    """Encode a write descriptor as a JSON string."""
    wire = WriteDescriptorWire(
        table=_table_to_wire(descriptor.table),
        partition_values=dict(descriptor.partition_values),
        custom_dynamic_root=descriptor.custom_dynamic_root,
        custom_dynamic_path=descriptor.custom_dynamic_path,
        location_override=descriptor.location_override,
        location=descriptor.resolved_location,
    )
    return _ENCODER.encode(wire).decode("utf-8")


def serialize_input_descriptors(descriptors: Sequence[InputJobDescriptor]) -> str:
    """Encode the ordered list of input descriptors as a JSON string."""
    wire = [InputDescriptorWire(table=_table_to_wire(d.table), filter=d.filter) for d in descriptors]
    return _ENCODER.encode(wire).decode("utf-8")


def deserialize_write_descriptor(payload: str | None) -> JobWriteDescriptor:
    """
    Decode a write descriptor.

    Raises:
        DescriptorDecodeError: if the payload is missing, not JSON, or not shaped
        like a write descriptor.
    """
    wire: WriteDescriptorWire = _decode(_WRITE_DECODER, payload, "write descriptor")
    return JobWriteDescriptor(
        table=_table_from_wire(wire.table),
        partition_values=wire.partition_values,
        custom_dynamic_root=wire.custom_dynamic_root,
        custom_dynamic_path=wire.custom_dynamic_path,
        location_override=wire.location_override,
        resolved_location=wire.location,
    )


def deserialize_input_descriptors(payload: str | None) -> list[InputJobDescriptor]:
    """
    Decode the list of input descriptors.

    Raises:
        DescriptorDecodeError: if the payload is missing, not JSON, or not a list
        of input descriptors.
    """
    wires: list[InputDescriptorWire] = _decode(_INPUT_DECODER, payload, "input descriptor list")
    return [InputJobDescriptor(table=_table_from_wire(w.table), filter=w.filter) for w in wires]
