from dataclasses import dataclass
from numbers import Real
from typing import Dict, Iterable, Optional, Union

import config


class ParameterError(Exception):
    """Misuse of the parameter set (a programming error, not user input)."""


class UnknownParameterError(ParameterError, KeyError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown parameter: {self.name!r}"


class ParameterTypeError(ParameterError, TypeError):
    pass


# -------------------------------
# Input descriptors (how a param is shown on the form)
# -------------------------------

@dataclass(frozen=True)
class NumInput:
    name: str
    title: str
    unit: str = ""
    step: float = config.DEFAULT_STEP
    digits: int = config.DEFAULT_DIGITS


@dataclass(frozen=True)
class YesNoInput:
    name: str
    title: str


InputDescriptor = Union[NumInput, YesNoInput]


# -------------------------------
# Parameter variants
# -------------------------------

@dataclass
class NumericParam:
    value: float
    step: float = config.DEFAULT_STEP
    digits: int = config.DEFAULT_DIGITS


@dataclass
class BooleanParam:
    value: bool


Param = Union[NumericParam, BooleanParam]
ParamSet = Dict[str, Param]


def is_number(value) -> bool:
    # bool is an int subclass, but never a number here
    return isinstance(value, Real) and not isinstance(value, bool)


def make_param(name: str, value, num_input: Optional[NumInput] = None) -> Param:
    if isinstance(value, bool):
        return BooleanParam(value)
    if is_number(value):
        if num_input is not None:
            return NumericParam(value, step=num_input.step, digits=num_input.digits)
        return NumericParam(value)
    raise ParameterTypeError(
        f"parameter {name!r} must be a number or a bool, got {type(value).__name__}"
    )


def build_params(initial: Dict[str, object], inputs: Iterable[InputDescriptor] = ()) -> ParamSet:
    """Turn a plain name -> value mapping into tagged parameter entries.

    Numeric entries take their step and display digits from the matching
    NumInput descriptor, if any.
    """
    num_inputs = {i.name: i for i in inputs if isinstance(i, NumInput)}
    return {
        name: make_param(name, value, num_inputs.get(name))
        for name, value in initial.items()
    }


def default_inputs():
    nums = [NumInput(*row) for row in config.NUM_INPUTS]
    yesnos = [YesNoInput(*row) for row in config.YESNO_INPUTS]
    return nums, yesnos
