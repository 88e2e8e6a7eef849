import typing


def generate_euclidean_sequence (steps: int, pulses: int) -> typing.List[int]:

	"""
	Generate a Euclidean rhythm using Bjorklund's algorithm.

	Distributes ``pulses`` hits as evenly as possible over ``steps`` slots.
	The result always starts on a hit.  ``pulses >= steps`` fills every slot;
	``pulses <= 0`` leaves every slot empty.

	Example:
		```python
		generate_euclidean_sequence(8, 3)   # [1, 0, 0, 1, 0, 0, 1, 0]
		```
	"""

	if steps <= 0:
		return []

	if pulses <= 0:
		return [0] * steps

	if pulses >= steps:
		return [1] * steps

	sequence: typing.List[int] = []
	counts: typing.List[int] = []
	remainders: typing.List[int] = []
	divisor = steps - pulses

	remainders.append(pulses)
	level = 0

	while True:
		counts.append(divisor // remainders[level])
		remainders.append(divisor % remainders[level])
		divisor = remainders[level]
		level += 1
		if remainders[level] <= 1:
			break

	counts.append(divisor)

	def build (level: int) -> None:
		if level == -1:
			sequence.append(0)
		elif level == -2:
			sequence.append(1)
		else:
			for _ in range(counts[level]):
				build(level - 1)
			if remainders[level] != 0:
				build(level - 2)

	build(level)
	i = sequence.index(1)
	return sequence[i:] + sequence[:i]


def rotate (sequence: typing.Sequence[int], rotation: int) -> typing.List[int]:

	"""
	Rotate a step sequence to the right by ``rotation`` steps.

	Negative values rotate left.  Rotation wraps at the sequence length.
	"""

	n = len(sequence)

	if n == 0:
		return []

	rotation = rotation % n

	if rotation == 0:
		return list(sequence)

	return list(sequence[n - rotation:]) + list(sequence[:n - rotation])


def generate_euclidean (pulses: int, steps: int, rotation: int = 0) -> typing.List[int]:

	"""Euclidean rhythm with an optional right rotation."""

	return rotate(generate_euclidean_sequence(steps, pulses), rotation)


def sequence_to_indices (sequence: typing.Sequence[int]) -> typing.List[int]:

	"""Return the indices of the hits in a binary step sequence."""

	return [i for i, hit in enumerate(sequence) if hit]
