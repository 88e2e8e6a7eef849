import logging
import typing


logger = logging.getLogger(__name__)


class Diagnostics:

	"""
	Collects recoverable problems found while compiling.

	Each warning is kept, in order, for the compile result and also logged
	through the caller's logger so it shows up with the module that found it.
	Repeated identical messages are kept once.
	"""

	def __init__ (self) -> None:

		self.warnings: typing.List[str] = []


	def warn (self, message: str, log: typing.Optional[logging.Logger] = None) -> None:

		"""Record a warning and log it."""

		(log or logger).warning(message)

		if message not in self.warnings:
			self.warnings.append(message)


	def extend (self, messages: typing.Iterable[str], log: typing.Optional[logging.Logger] = None) -> None:

		for message in messages:
			self.warn(message, log)


	def __len__ (self) -> int:

		return len(self.warnings)
