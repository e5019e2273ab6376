"""Errors raised by the VibeCoding engine.

Generation-layer errors propagate unchanged to the caller of the public
engine operation that triggered them. The engine validates and generates
before it commits anything, so when one of these is raised the previous
state and pattern bindings are still in place.
"""


class VibeCodingError(Exception):
	pass


class UnknownStyleError(VibeCodingError, ValueError):
	pass


class UnknownScaleError(VibeCodingError, ValueError):
	pass


class InvalidGenerationInputError(VibeCodingError, ValueError):
	pass


class SchedulingConflictError(VibeCodingError, RuntimeError):
	pass
