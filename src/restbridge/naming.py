import itertools
import typing


class QueryNameGenerator:
    """
    Generates the join aliases and the parameter names of a single query.
    Names are unique per instance; a new instance is used for every query.
    """

    _join_counter: typing.Iterator[int]
    _parameter_counter: typing.Iterator[int]

    def generate_join_alias(self, association: str) -> str:
        return f"{association}_a{next(self._join_counter)}"

    def generate_parameter_name(self, name: str) -> str:
        return f"{name.replace('.', '_')}_p{next(self._parameter_counter)}"

    def __init__(self):
        self._join_counter = itertools.count(1)
        self._parameter_counter = itertools.count(1)
