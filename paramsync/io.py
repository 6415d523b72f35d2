import json
import os
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import config
from .params import NumInput, ParameterError, YesNoInput, build_params, default_inputs

TRUE_WORDS = ("true", "yes", "y", "on")
FALSE_WORDS = ("false", "no", "n", "off")


@dataclass
class PageState:
    """What the hosting page injects at load time."""
    params: Dict[str, object]
    auth_token: str = ""
    save_allowed: bool = False
    num_inputs: List[NumInput] = field(default_factory=list)
    yesno_inputs: List[YesNoInput] = field(default_factory=list)

    @property
    def inputs(self):
        return [*self.num_inputs, *self.yesno_inputs]


def default_page_state(auth_token: str = "", save_allowed: bool = True) -> PageState:
    nums, yesnos = default_inputs()
    return PageState(
        params=dict(config.DEFAULT_PARAMS),
        auth_token=auth_token,
        save_allowed=save_allowed,
        num_inputs=nums,
        yesno_inputs=yesnos,
    )


def _num_input(row: dict) -> NumInput:
    return NumInput(
        name=row["name"],
        title=row.get("title", row["name"]),
        unit=row.get("unit", ""),
        step=float(row.get("step", config.DEFAULT_STEP)),
        digits=int(row.get("digits", config.DEFAULT_DIGITS)),
    )


def _yesno_input(row: dict) -> YesNoInput:
    return YesNoInput(name=row["name"], title=row.get("title", row["name"]))


def load_page_state(path: str) -> PageState:
    """
    Load page state from a JSON file shaped like the settings page context:

      {"params": {...}, "csrf_blob": "...", "allowed": true,
       "numinputs": [{"name", "title", "unit", "step", "digits"}, ...],
       "yesnoinputs": [{"name", "title"}, ...]}

    Only "params" is required. Missing descriptor lists fall back to the
    defaults from config.
    """
    if not os.path.isfile(path):
        raise RuntimeError(f"Page state file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            doc = json.load(f)
        except json.JSONDecodeError as e:
            raise RuntimeError(f"Page state file is not valid JSON: {path} ({e})") from e

    params = doc.get("params") if isinstance(doc, dict) else None
    if not isinstance(params, dict):
        raise RuntimeError(f"No params object in page state file: {path}")

    nums, yesnos = default_inputs()
    try:
        if "numinputs" in doc:
            nums = [_num_input(row) for row in doc["numinputs"]]
        if "yesnoinputs" in doc:
            yesnos = [_yesno_input(row) for row in doc["yesnoinputs"]]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise RuntimeError(f"Bad input descriptor in page state file: {path} ({e!r})") from e

    try:
        build_params(params, [*nums, *yesnos])
    except ParameterError as e:
        raise RuntimeError(f"Bad parameter in page state file: {path} ({e})") from e

    allowed = doc.get("allowed", False)
    if not isinstance(allowed, bool):
        raise RuntimeError(f"'allowed' must be true or false in page state file: {path}")

    return PageState(
        params=params,
        auth_token=str(doc.get("csrf_blob", "")),
        save_allowed=allowed,
        num_inputs=nums,
        yesno_inputs=yesnos,
    )


def _bool_from_str(value: str):
    """Parse yes/no style words; None if the text isn't one."""
    value = value.strip().lower()
    if value in TRUE_WORDS:
        return True
    if value in FALSE_WORDS:
        return False
    return None


def parse_assignment(text: str) -> Tuple[str, object]:
    """Parse 'name=value' into (name, bool) or (name, float)."""
    name, sep, raw = text.partition("=")
    name = name.strip()
    if not sep or not name:
        raise ValueError(f"expected name=value, got {text!r}")

    flag = _bool_from_str(raw)
    if flag is not None:
        return name, flag
    try:
        return name, float(raw)
    except ValueError:
        raise ValueError(f"bad value for {name}: {raw.strip()!r}") from None
