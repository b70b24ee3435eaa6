"""
Precondition rules for a write descriptor before its location is resolved.

Each rule inspects the descriptor and the dynamic partition context and
raises `DescriptorValidationError` when the combination cannot yield a sane
output location. Advisory rules only log a warning.
"""

from __future__ import annotations

from collections.abc import Sequence

from src.logger import LOGGER
from src.storage_handler.errors import DescriptorValidationError
from src.storage_handler.models import DynamicPartitionContext, JobWriteDescriptor
from src.storage_handler.paths import template_placeholders


class DescriptorRule:
    """Base interface for a write descriptor rule."""

    def check(self, descriptor: JobWriteDescriptor, context: DynamicPartitionContext) -> None:
        """Validate the descriptor against the rule."""
        raise NotImplementedError


class WorkingDirectoryMarkerPresent(DescriptorRule):
    """A job needs a dynamic partitioning id or an output id hash to own a working directory."""

    def check(self, descriptor: JobWriteDescriptor, context: DynamicPartitionContext) -> None:
        if not context.dyn_hash and not context.id_hash:
            raise DescriptorValidationError(
                f"Write to {descriptor.table.location} has neither a dynamic partitioning "
                "job id nor an output id hash; cannot allocate a working directory."
            )


class PartitionValuesNameKnownColumns(DescriptorRule):
    """Resolved partition values must belong to declared partition columns."""

    def check(self, descriptor: JobWriteDescriptor, context: DynamicPartitionContext) -> None:
        declared = set(descriptor.table.partition_column_names)
        unknown = sorted(name for name in descriptor.partition_values if name not in declared)
        if unknown:
            raise DescriptorValidationError(
                f"Partition values reference unknown column(s) {unknown}; "
                f"table {descriptor.table.location} is partitioned by "
                f"{list(descriptor.table.partition_column_names)}."
            )


class CustomPathReferencesPartitionColumns(DescriptorRule):
    """Placeholders of a custom dynamic path must name partition columns."""

    def check(self, descriptor: JobWriteDescriptor, context: DynamicPartitionContext) -> None:
        if not (context.is_dynamic and descriptor.custom_dynamic_path):
            return
        declared = {name.lower() for name in descriptor.table.partition_column_names}
        placeholders = template_placeholders(descriptor.custom_dynamic_path)
        unknown = [name for name in placeholders if name.lower() not in declared]
        if unknown:
            raise DescriptorValidationError(
                f"Custom path {descriptor.custom_dynamic_path!r} references unknown partition "
                f"column(s) {unknown}; partition columns are "
                f"{list(descriptor.table.partition_column_names)}."
            )


class PartialValuesFormLeadingSubset(DescriptorRule):
    """Warn when known values skip over an earlier partition column."""

    def check(self, descriptor: JobWriteDescriptor, context: DynamicPartitionContext) -> None:
        names = descriptor.table.partition_column_names
        known = [name in descriptor.partition_values for name in names]
        if False in known and True in known[known.index(False):]:
            LOGGER.warning(
                f"Partition values {dict(descriptor.partition_values)} are not a leading "
                f"subset of {list(names)}; the unknown columns are omitted from the path."
            )


class LocationOverrideIgnoredForDynamicWrites(DescriptorRule):
    """Warn when a location override cannot apply because partitions are dynamic."""

    def check(self, descriptor: JobWriteDescriptor, context: DynamicPartitionContext) -> None:
        if context.is_dynamic and descriptor.location_override:
            LOGGER.warning(
                f"Location override {descriptor.location_override!r} is ignored for "
                f"dynamic partition job {context.dyn_hash}."
            )


def default_rules() -> tuple[DescriptorRule, ...]:
    return (
        WorkingDirectoryMarkerPresent(),
        PartitionValuesNameKnownColumns(),
        CustomPathReferencesPartitionColumns(),
        PartialValuesFormLeadingSubset(),
        LocationOverrideIgnoredForDynamicWrites(),
    )


def validate_descriptor(
    descriptor: JobWriteDescriptor,
    context: DynamicPartitionContext,
    rules: Sequence[DescriptorRule] | None = None,
) -> None:
    """Run every rule in order; the first violation raises."""
    for rule in rules if rules is not None else default_rules():
        rule.check(descriptor, context)
