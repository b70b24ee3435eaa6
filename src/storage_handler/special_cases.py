"""Format-specific job properties applied after the output location is resolved."""

from __future__ import annotations

from typing import Protocol

from src.enums import OutputFormat
from src.logger import LOGGER
from src.storage_handler.models import JobWriteDescriptor


class SpecialCases(Protocol):
    """Hook that may rewrite job properties for the output format in use."""

    def apply(
        self,
        job_properties: dict[str, str],
        descriptor: JobWriteDescriptor,
        output_format: str,
    ) -> None: ...


class FormatSpecialCases:
    """
    Forward format-specific table properties into the job properties.

    ORC, Parquet and Avro writers read their tuning knobs ('orc.compress',
    'parquet.block.size', ...) from the job. Values already set on the job win
    over the table's.
    """

    def apply(
        self,
        job_properties: dict[str, str],
        descriptor: JobWriteDescriptor,
        output_format: str,
    ) -> None:
        try:
            known_format = OutputFormat(output_format)
        except ValueError:
            LOGGER.debug(f"No special cases for output format {output_format}.")
            return

        prefix = known_format.property_prefix
        forwarded = []
        for key, value in descriptor.table.properties.items():
            if key.startswith(prefix) and key not in job_properties:
                job_properties[key] = value
                forwarded.append(key)

        if forwarded:
            LOGGER.debug(f"Forwarded {known_format.name} table properties: {sorted(forwarded)}.")
