"""
StorageHandler: entry point for jobs reading or writing a file-based table.

Responsibilities
----------------
- Carry the input format, output format and serde of a table that does not
  define a storage handler of its own. Implementations are referenced by name;
  loading them is the caller's concern.
- Expose the job configuration hooks:
    - configure_input_job_properties(table_job_properties, job_properties)
    - configure_output_job_properties(table_job_properties, job_properties)
    - configure_table_job_properties / configure_job_conf (nothing to do)

Notes:
-----
- No filesystem access; work is delegated to the injected projector and resolver.
- The handler has no metastore hook and no authorization provider of its own.
"""

from __future__ import annotations

from collections.abc import Mapping

from src.storage_handler.output_location import OutputLocationResolver, OutputResolution
from src.storage_handler.schema_projector import ProjectedSchema, SchemaProjector


class StorageHandler:
    """Storage handler for file-based tables."""

    def __init__(
        self,
        input_format: str,
        output_format: str,
        serde: str,
        schema_projector: SchemaProjector | None = None,
        output_resolver: OutputLocationResolver | None = None,
    ) -> None:
        self.input_format = input_format
        self.output_format = output_format
        self.serde = serde

        # Wire defaults if not supplied
        self.schema_projector = schema_projector or SchemaProjector()
        self.output_resolver = output_resolver or OutputLocationResolver()

    def configure_input_job_properties(
        self,
        table_job_properties: Mapping[str, str],
        job_properties: dict[str, str],
    ) -> ProjectedSchema | None:
        return self.schema_projector.configure_input_job_properties(
            table_job_properties, job_properties
        )

    def configure_output_job_properties(
        self,
        table_job_properties: Mapping[str, str],
        job_properties: dict[str, str],
    ) -> OutputResolution:
        return self.output_resolver.configure_output_job_properties(
            table_job_properties, job_properties, self.output_format
        )

    def configure_table_job_properties(
        self,
        table_job_properties: Mapping[str, str],
        job_properties: dict[str, str],
    ) -> None:
        return None

    def configure_job_conf(
        self,
        table_job_properties: Mapping[str, str],
        job_conf: dict[str, str],
    ) -> None:
        return None
