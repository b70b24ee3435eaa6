"""Project a table's column layout and transactional flags into the job properties."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from src.constants import COLUMN_NAME_DELIMITER, COLUMN_TYPE_DELIMITER
from src.enums import AcidOperationalProperties, JobProperty
from src.logger import LOGGER
from src.storage_handler.errors import ConfigurationError, MissingDescriptorError
from src.storage_handler.models import TableMetadata
from src.storage_handler.serde import deserialize_input_descriptors


@dataclass(frozen=True)
class ProjectedSchema:
    """Column names and type descriptors in declared order, plus ACID flags."""

    column_names: tuple[str, ...]
    column_types: tuple[str, ...]
    is_transactional: bool
    acid_operational_properties: AcidOperationalProperties

    def as_job_properties(self) -> dict[str, str]:
        """Job properties for readers; the schema evolution keys repeat the plain ones."""
        names = COLUMN_NAME_DELIMITER.join(self.column_names)
        types = COLUMN_TYPE_DELIMITER.join(self.column_types)
        return {
            JobProperty.SCHEMA_EVOLUTION_COLUMNS.value: names,
            JobProperty.COLUMNS.value: names,
            JobProperty.SCHEMA_EVOLUTION_COLUMNS_TYPES.value: types,
            JobProperty.COLUMNS_TYPES.value: types,
            JobProperty.TRANSACTIONAL_TABLE_SCAN.value: str(self.is_transactional).lower(),
            JobProperty.ACID_OPERATIONAL_PROPERTIES.value: str(
                int(self.acid_operational_properties)
            ),
        }


def project_schema(table: TableMetadata) -> ProjectedSchema:
    return ProjectedSchema(
        column_names=tuple(column.name for column in table.data_columns),
        column_types=tuple(column.type_string for column in table.data_columns),
        is_transactional=table.is_transactional,
        acid_operational_properties=table.acid_operational_properties,
    )


class SchemaProjector:
    """Publish the schema of the table being read into the job properties."""

    def configure_input_job_properties(
        self,
        table_job_properties: Mapping[str, str],
        job_properties: dict[str, str],
    ) -> ProjectedSchema | None:
        """
        Project the last input descriptor's table into `job_properties`.

        Returns None, leaving the job untouched, when no input descriptors are
        set on the table.

        Raises:
            ConfigurationError: if the descriptor list cannot be decoded or is empty.
        """
        payload = table_job_properties.get(JobProperty.INPUT_JOB_INFO.value)
        if payload is None:
            LOGGER.debug("No input descriptors set on the table; nothing to project.")
            return None

        try:
            descriptors = deserialize_input_descriptors(payload)
            if not descriptors:
                raise MissingDescriptorError("No input descriptor was set in the job properties.")
            table = descriptors[-1].table
            projected = project_schema(table)
        except ConfigurationError as error:
            LOGGER.error(f"Failed to project input schema: {error}")
            raise

        job_properties.update(projected.as_job_properties())

        LOGGER.info(
            f"Projected {len(projected.column_names)} column(s) of {table.location} "
            f"(transactional={projected.is_transactional})."
        )
        return projected
