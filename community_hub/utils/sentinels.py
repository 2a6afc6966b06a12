from typing import Any, ClassVar, Optional, Self
from pydantic_core import core_schema


class Missing:
	"""Marks a field of a partial update as "not provided" (as opposed to ``None``, which clears it)."""

	_instance: ClassVar[Optional["Missing"]] = None

	def __new__(cls) -> Self:
		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance

	def __repr__(self) -> str:
		return "MISSING"

	def __bool__(self) -> bool:
		return False

	@classmethod
	def __get_pydantic_core_schema__(cls, _source, _handler) -> core_schema.CoreSchema:
		# only the singleton itself validates; clients never send it
		return core_schema.is_instance_schema(cls)


MISSING = Missing()


def provided(value: Any) -> bool:
	return value is not MISSING
