"""
Configuration errors raised while preparing a job's read or write properties.

Every error here is unrecoverable: configuration runs once, before any task is
scheduled, and a failure aborts the job submission.
"""


class ConfigurationError(Exception):
    """Job configuration failed; the job must not start."""


class DescriptorDecodeError(ConfigurationError):
    """A serialized job descriptor is malformed."""


class MissingDescriptorError(ConfigurationError):
    """No job descriptor was found under the expected job property key."""


class DescriptorValidationError(ConfigurationError):
    """A job descriptor combines inputs that cannot produce a sane location."""


class LocationNotResolvedError(ConfigurationError):
    """The output location was read before the resolver set it."""
