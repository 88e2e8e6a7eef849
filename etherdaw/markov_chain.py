"""Markov chains over string states, plus preset transition tables.

A transition table maps each state to the probability of every next state::

	{
		"1": {"1": 0.2, "3": 0.5, "5": 0.3},
		"3": {"1": 0.6, "5": 0.4},
		"5": {"1": 1.0},
	}

Presets build a table from the list of states alone.  They assume the states
are listed in pitch order, which is what "neighbour" means for
``neighbor_weighted`` and ``melody_stepwise``.
"""

import random
import typing

StateType = typing.TypeVar("StateType")

TransitionTable = typing.Dict[str, typing.Dict[str, float]]


def choose_cumulative (options: typing.Sequence[typing.Tuple[StateType, float]], rng: random.Random) -> StateType:

	"""
	Choose one option by walking cumulative probabilities.

	Probabilities are expected to sum to 1.  If rounding leaves the draw
	above the running total, the first option is returned.
	"""

	if not options:
		raise ValueError("Options cannot be empty")

	roll = rng.random()
	accum = 0.0

	for option, probability in options:
		accum += probability
		if roll < accum:
			return option

	return options[0][0]


class MarkovChain (typing.Generic[StateType]):

	"""
	A Markov chain with probability-weighted transitions.
	"""

	def __init__ (
		self,
		transitions: typing.Dict[StateType, typing.Dict[StateType, float]],
		initial_state: typing.Optional[StateType] = None,
		rng: typing.Optional[random.Random] = None
	) -> None:

		"""
		Initialize the chain with transitions and an optional initial state.

		A state with no outgoing transitions stays where it is.
		"""

		if not transitions:
			raise ValueError("Transitions cannot be empty")

		self.transitions = transitions
		self.rng = rng or random.Random()

		if initial_state is None:
			initial_state = next(iter(transitions))

		self.state = initial_state


	def step (self) -> StateType:

		"""
		Advance to the next state and return it.
		"""

		options = self.transitions.get(self.state)

		if not options:
			return self.state

		self.state = choose_cumulative(list(options.items()), self.rng)

		return self.state


	def walk (self, length: int) -> typing.List[StateType]:

		"""
		Return ``length`` states, starting with the current one.
		"""

		if length <= 0:
			return []

		states = [self.state]

		for _ in range(length - 1):
			states.append(self.step())

		return states


	def get_state (self) -> StateType:

		"""
		Return the current state.
		"""

		return self.state


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------


def normalize_transitions (transitions: TransitionTable) -> TransitionTable:

	"""Scale each row to sum to 1.  An all-zero row becomes uniform."""

	normalized: TransitionTable = {}

	for state, row in transitions.items():

		total = sum(row.values())

		if total == 0:
			normalized[state] = {target: 1.0 / len(row) for target in row}
		else:
			normalized[state] = {target: p / total for target, p in row.items()}

	return normalized


def _uniform (states: typing.List[str]) -> TransitionTable:

	probability = 1.0 / len(states)

	return {state: {target: probability for target in states} for state in states}


def _neighbor_weighted (states: typing.List[str]) -> TransitionTable:

	table: TransitionTable = {}

	for i, state in enumerate(states):
		table[state] = {target: 1.0 / (abs(i - j) + 1) for j, target in enumerate(states)}

	return normalize_transitions(table)


def _walking_bass (states: typing.List[str]) -> TransitionTable:

	"""Favour the root, approach tones into the root or fifth, and few rests."""

	has_approach = "approach" in states
	others_from_root = [s for s in states if s not in ("1", "rest")]
	spread = max(1, len(states) - 2)
	table: TransitionTable = {}

	for state in states:

		row: typing.Dict[str, float] = {}

		for target in states:

			if state == "1":
				base = 0.85 / max(1, len(others_from_root))
				if target == "1":
					row[target] = 0.1
				elif target == "5":
					row[target] = base + 0.05
				elif target == "rest":
					row[target] = 0.05
				else:
					row[target] = base

			elif state == "approach":
				if target == "1":
					row[target] = 0.6
				elif target == "5":
					row[target] = 0.3
				else:
					row[target] = 0.1 / spread

			elif state == "rest":
				if target == "1":
					row[target] = 0.5
				elif target == "rest":
					row[target] = 0.1
				else:
					row[target] = 0.4 / spread

			else:
				if target == "1":
					row[target] = 0.35
				elif target == "approach" and has_approach:
					row[target] = 0.2
				elif target == state:
					row[target] = 0.05
				else:
					remaining = 0.4 if has_approach else 0.6
					others = [s for s in states if s not in ("1", "approach", state)]
					row[target] = remaining / max(1, len(others))

		table[state] = row

	return normalize_transitions(table)


def _melody_stepwise (states: typing.List[str]) -> TransitionTable:

	table: TransitionTable = {}

	for i, state in enumerate(states):

		row: typing.Dict[str, float] = {}

		for j, target in enumerate(states):
			distance = abs(i - j)
			if distance == 0:
				row[target] = 0.05
			elif distance == 1:
				row[target] = 0.35
			elif distance == 2:
				row[target] = 0.15
			else:
				row[target] = 0.05 / distance

		table[state] = row

	return normalize_transitions(table)


def _root_heavy (states: typing.List[str]) -> TransitionTable:

	spread = max(1, len(states) - 2)
	table: TransitionTable = {}

	for state in states:

		row: typing.Dict[str, float] = {}

		for target in states:
			if state == "1":
				if target == "1":
					row[target] = 0.3
				elif target == "5":
					row[target] = 0.25
				else:
					row[target] = 0.45 / spread
			else:
				if target == "1":
					row[target] = 0.5
				elif target == state:
					row[target] = 0.1
				else:
					row[target] = 0.4 / spread

		table[state] = row

	return normalize_transitions(table)


PRESETS: typing.Dict[str, typing.Callable[[typing.List[str]], TransitionTable]] = {
	"uniform": _uniform,
	"neighbor_weighted": _neighbor_weighted,
	"walking_bass": _walking_bass,
	"melody_stepwise": _melody_stepwise,
	"root_heavy": _root_heavy,
}


def preset_transitions (preset: str, states: typing.List[str]) -> TransitionTable:

	"""
	Build a transition table from a preset name.

	Raises:
		ValueError: For an unknown preset name or an empty state list.
	"""

	if not states:
		raise ValueError("A Markov preset needs at least one state")

	if preset not in PRESETS:
		raise ValueError(f"Unknown Markov preset {preset!r}. Valid presets: {', '.join(PRESETS)}")

	return PRESETS[preset](list(states))


def validate_transitions (states: typing.Sequence[str], transitions: TransitionTable) -> typing.List[str]:

	"""Return human-readable problems with an explicit transition table."""

	problems: typing.List[str] = []

	for state, row in transitions.items():

		total = sum(row.values())

		if abs(total - 1.0) > 0.01:
			problems.append(f"Transitions from state {state!r} sum to {total:.3f}, should be 1.0")

		for target in row:
			if target not in states and target not in ("rest", "approach"):
				problems.append(f"State {state!r} has a transition to unknown state {target!r}")

	for state in states:
		if state not in transitions:
			problems.append(f"State {state!r} has no outgoing transitions")

	return problems
