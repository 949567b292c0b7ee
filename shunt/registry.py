import math
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from shunt.builtin_function import BuiltinConstant, BuiltinFunction, std_min, std_sin
from shunt.values import Value


class Registry:
    """Read-only table of named constants and functions.

    A registry is built once and then shared by any number of parsers
    and evaluators; nothing mutates it after construction.
    """
    def __init__(self, constants: Iterable[BuiltinConstant] = (), functions: Iterable[BuiltinFunction] = ()):
        consts: Dict[str, BuiltinConstant] = {}
        for const in constants:
            if const.name in consts:
                raise ValueError(f'constant {const.name} already registered')
            consts[const.name] = const
        funcs: Dict[str, BuiltinFunction] = {}
        for func in functions:
            if func.name in funcs:
                raise ValueError(f'function {func.name} already registered')
            if func.arity < 0:
                raise ValueError(f'function {func.name} has negative arity')
            funcs[func.name] = func
        self._constants: Mapping[str, BuiltinConstant] = MappingProxyType(consts)
        self._functions: Mapping[str, BuiltinFunction] = MappingProxyType(funcs)

    @staticmethod
    def build(constants: Optional[Mapping[str, Value]] = None, functions: Optional[Mapping[str, tuple]] = None) -> 'Registry':
        """Build a registry from plain mappings.

        `constants` maps a name to a Value; `functions` maps a name to an
        `(arity, fn)` pair where `fn` takes the list of argument Values.
        """
        return Registry(
            (BuiltinConstant(name, value) for name, value in (constants or {}).items()),
            (BuiltinFunction(name, arity, fn) for name, (arity, fn) in (functions or {}).items()),
        )

    @property
    def constants(self) -> Mapping[str, BuiltinConstant]:
        return self._constants

    @property
    def functions(self) -> Mapping[str, BuiltinFunction]:
        return self._functions

    def has_constant(self, name: str) -> bool:
        return name in self._constants

    def has_function(self, name: str) -> bool:
        return name in self._functions

    def constant(self, name: str) -> BuiltinConstant:
        return self._constants[name]

    def function(self, name: str) -> BuiltinFunction:
        return self._functions[name]

    def __repr__(self) -> str:
        return f"Registry(constants={sorted(self._constants)}, functions={sorted(self._functions)})"


_DEFAULT = Registry(
    constants=[
        BuiltinConstant('Pi', Value.double(math.pi)),
        BuiltinConstant('e', Value.double(math.e)),
    ],
    functions=[
        BuiltinFunction('sin', 1, std_sin),
        BuiltinFunction('min', 2, std_min),
    ],
)


def default_registry() -> Registry:
    """The standard table: constants Pi and e, functions sin(x) and min(a, b)."""
    return _DEFAULT
