"""
Output location resolution for a write job.

Flow (one pass):
  1) Pick the job's working directory: the dynamic temp area or the scratch area.
  2) Choose how the relative output path is formed (one of four targets).
  3) location = working directory + relative path.
  4) Publish the output directory only when every partition value is known.
  5) Apply format special cases and re-encode the write descriptor.

Steps 1-4 are pure functions over the descriptor and the dynamic partition
context; only `OutputLocationResolver.configure_output_job_properties` reads
or writes job properties.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TypeAlias

from src.constants import DYNAMIC_TEMP_DIR_PREFIX, SCRATCH_DIR_PREFIX
from src.enums import JobProperty
from src.logger import LOGGER
from src.storage_handler.errors import ConfigurationError, MissingDescriptorError
from src.storage_handler.models import DynamicPartitionContext, JobWriteDescriptor
from src.storage_handler.paths import join_path, make_partition_name, resolve_custom_path
from src.storage_handler.serde import deserialize_write_descriptor, serialize_write_descriptor
from src.storage_handler.special_cases import FormatSpecialCases, SpecialCases
from src.storage_handler.validation import DescriptorRule, validate_descriptor

# ---------- output targets ----------


@dataclass(frozen=True)
class OverrideByTemplate:
    """Dynamic write into a custom path template; placeholders stay for task writers."""

    relative_path: str


@dataclass(frozen=True)
class OverrideByLocation:
    """Static write into an external table at an explicit location."""

    override: str
    relative_path: str = ""


@dataclass(frozen=True)
class Unpartitioned:
    """Static write into an unpartitioned table; output goes straight into the working directory."""

    relative_path: str = ""


@dataclass(frozen=True)
class PartitionPath:
    """Partition-style 'name=value/...' path of the known partition values."""

    relative_path: str


OutputTarget: TypeAlias = OverrideByTemplate | OverrideByLocation | Unpartitioned | PartitionPath


@dataclass(frozen=True)
class OutputResolution:
    """Everything one resolution pass decided."""

    working_directory: str
    target: OutputTarget
    location: str
    publish_output_dir: bool


# ---------- decisions ----------


def resolve_working_directory(
    descriptor: JobWriteDescriptor, context: DynamicPartitionContext
) -> str:
    """Job-unique directory all of this job's output is written under."""
    table = descriptor.table
    if context.is_dynamic:
        root = table.location
        if table.is_external and descriptor.custom_dynamic_root:
            root = join_path(root, descriptor.custom_dynamic_root)
        return join_path(root, f"{DYNAMIC_TEMP_DIR_PREFIX}{context.dyn_hash}")
    return join_path(table.location, f"{SCRATCH_DIR_PREFIX}{context.id_hash}")


def choose_output_target(
    descriptor: JobWriteDescriptor, context: DynamicPartitionContext
) -> OutputTarget:
    """Pick the output target; the first matching case wins."""
    table = descriptor.table

    if context.is_dynamic and descriptor.custom_dynamic_path:
        # No partition values are substituted yet; task writers fill them in.
        return OverrideByTemplate(
            resolve_custom_path(descriptor.custom_dynamic_path, table.partition_column_names)
        )

    if not context.is_dynamic and table.is_external and descriptor.location_override:
        return OverrideByLocation(descriptor.location_override)

    if not context.is_dynamic and not table.is_partitioned:
        return Unpartitioned()

    if context.is_dynamic and not descriptor.is_fully_materialized:
        # Task writers build each row's full partition path, static values included.
        return PartitionPath("")

    return PartitionPath(make_partition_name(descriptor.ordered_partition_values()))


def compose_location(working_directory: str, target: OutputTarget) -> str:
    return join_path(working_directory, target.relative_path)


def should_publish_output_dir(descriptor: JobWriteDescriptor) -> bool:
    """Only a fully materialized write has a single, known output directory."""
    return descriptor.is_fully_materialized


def resolve_output_location(
    descriptor: JobWriteDescriptor,
    context: DynamicPartitionContext,
    rules: Sequence[DescriptorRule] | None = None,
) -> OutputResolution:
    """
    Validate the descriptor, resolve its location and store it on the descriptor.

    Raises:
        DescriptorValidationError: if the descriptor fails a precondition rule.
    """
    validate_descriptor(descriptor, context, rules)

    working_directory = resolve_working_directory(descriptor, context)
    target = choose_output_target(descriptor, context)
    location = compose_location(working_directory, target)
    descriptor.resolved_location = location

    return OutputResolution(
        working_directory=working_directory,
        target=target,
        location=location,
        publish_output_dir=should_publish_output_dir(descriptor),
    )


# ---------- job property glue ----------


class OutputLocationResolver:
    """
    Resolve the write location of a job and publish it into its job properties.

    Dependencies are injectable for testing: the format special cases hook and
    the precondition rules.
    """

    def __init__(
        self,
        special_cases: SpecialCases | None = None,
        rules: Sequence[DescriptorRule] | None = None,
    ) -> None:
        self.special_cases = special_cases or FormatSpecialCases()
        self.rules = rules

    def configure_output_job_properties(
        self,
        table_job_properties: Mapping[str, str],
        job_properties: dict[str, str],
        output_format: str,
    ) -> OutputResolution:
        """
        Decode the write descriptor, resolve its location and publish the results.

        Reads the serialized descriptor and the dynamic partition markers from
        `table_job_properties`; writes the output directory (when fully
        materialized), format special cases and the re-encoded descriptor into
        `job_properties`.

        Raises:
            ConfigurationError: on a missing, malformed or invalid descriptor.
        """
        payload = table_job_properties.get(JobProperty.OUTPUT_JOB_INFO.value)
        try:
            if payload is None:
                raise MissingDescriptorError(
                    f"No write descriptor found under {JobProperty.OUTPUT_JOB_INFO.value}."
                )
            descriptor = deserialize_write_descriptor(payload)
            context = DynamicPartitionContext.from_job_properties(table_job_properties)
            resolution = resolve_output_location(descriptor, context, self.rules)
        except ConfigurationError as error:
            LOGGER.error(f"Failed to set output path: {error}")
            raise

        LOGGER.info(
            f"Resolved output location {resolution.location} "
            f"({type(resolution.target).__name__}) for table {descriptor.table.location}."
        )

        if resolution.publish_output_dir:
            job_properties[JobProperty.OUTPUT_DIR.value] = resolution.location
        else:
            LOGGER.debug(
                "Partition values are partially materialized; "
                "output directories are published per discovered partition."
            )

        try:
            self.special_cases.apply(job_properties, descriptor, output_format)
            job_properties[JobProperty.OUTPUT_JOB_INFO.value] = serialize_write_descriptor(descriptor)
        except ConfigurationError as error:
            LOGGER.error(f"Failed to publish output job properties: {error}")
            raise
        except Exception as error:
            LOGGER.error(f"Failed to publish output job properties: {error}")
            raise ConfigurationError(f"Failed to publish output job properties: {error}") from error
        return resolution
