# Copyright (c) Syntropy Systems
"""Exceptions raised by tandem."""


class TandemError(Exception):
    """Base class for tandem errors."""


class InvalidExperimentError(TandemError):
    """An experiment is missing a required hook or misuses one.

    Raised synchronously the moment the hook is invoked. The harness never
    captures this error into an Observation.
    """
