# bootstrap/errors.py
# -*- coding: utf-8 -*-
"""
Exceptions raised by bootstrap steps.

Every BootstrapError is fatal: the orchestrator logs it and terminates the
process with exit status 1.
"""


class BootstrapError(Exception):
    """Base class for all bootstrap failures."""


class MissingConfigurationError(BootstrapError):
    """A required setting or environment variable is empty or absent."""


class DependencyUnavailableError(BootstrapError):
    """An external dependency (database, nginx config test) is not usable."""


class MissingArtifactError(BootstrapError):
    """A file that must be mounted into the container does not exist."""
