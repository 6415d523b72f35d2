from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List

import config
from paramsync.model import Model
from paramsync.params import BooleanParam, InputDescriptor, YesNoInput

logger = logging.getLogger(__name__)


@dataclass
class FieldView:
    """Display state of one form row."""
    name: str
    title: str
    unit: str = ""
    yesno: bool = False
    text: str = ""          # current value as shown
    old_text: str = ""      # value the page was loaded with
    on: bool = False        # yes/no rows only
    modified: bool = False


def yes_no(value) -> str:
    return "Yes" if value else "No"


class FormPresenter:
    """
    Keeps the form's display state in step with a Model.

    Listens to "edit" and "status" on the model it is given, and turns
    user intents (typed text, stepper presses, yes/no presses, save) into
    model calls. Rows without a descriptor are not shown.
    """

    def __init__(self, model: Model, inputs: Iterable[InputDescriptor]) -> None:
        self.model = model
        self.fields: Dict[str, FieldView] = {}
        self.order: List[str] = []
        self.status = "" if model.save_allowed else config.NO_CERT_MESSAGE

        for desc in inputs:
            if desc.name not in model:
                logger.warning(f"Input {desc.name!r} has no matching parameter, skipped")
                continue
            if isinstance(desc, YesNoInput) != isinstance(model.entry(desc.name), BooleanParam):
                logger.warning(f"Input {desc.name!r} does not match its parameter's kind, skipped")
                continue
            self.fields[desc.name] = self._make_field(desc)
            self.order.append(desc.name)

        model.on("edit", self._on_edit)
        model.on("status", self._on_status)

    def _make_field(self, desc: InputDescriptor) -> FieldView:
        initial = self.model.initial_params[desc.name]
        if isinstance(desc, YesNoInput):
            fv = FieldView(desc.name, desc.title, yesno=True, old_text=yes_no(initial))
        else:
            fv = FieldView(desc.name, desc.title, unit=desc.unit)
            fv.old_text = self.fixed_value(desc.name, initial) + desc.unit
        self._show(fv, self.model.get(desc.name))
        return fv

    def detach(self) -> None:
        self.model.off("edit", self._on_edit)
        self.model.off("status", self._on_status)

    # -------------------------------
    # Formatting
    # -------------------------------
    def fixed_value(self, name: str, value) -> str:
        entry = self.model.entry(name)
        digits = entry.digits if not isinstance(entry, BooleanParam) else 0
        return f"{float(value):.{digits}f}"

    def is_modified(self, name: str, value) -> bool:
        initial = self.model.initial_params[name]
        if isinstance(value, bool):
            return bool(value) != bool(initial)
        return self.fixed_value(name, value) != self.fixed_value(name, initial)

    def _show(self, fv: FieldView, value) -> None:
        if fv.yesno:
            fv.on = bool(value)
            fv.text = yes_no(value)
        else:
            fv.text = self.fixed_value(fv.name, value)
        fv.modified = self.is_modified(fv.name, value)

    # -------------------------------
    # Model -> view
    # -------------------------------
    def _on_edit(self, name: str, value) -> None:
        fv = self.fields.get(name)
        if fv is not None:
            self._show(fv, value)

    def _on_status(self, message: str) -> None:
        self.status = message

    # -------------------------------
    # View -> model
    # -------------------------------
    def _accepts(self, name: str, yesno: bool) -> bool:
        # only rows on the form, of the matching kind, take intents
        fv = self.fields.get(name)
        if fv is None or fv.yesno != yesno:
            logger.warning(f"Ignoring input for {name!r}: no such {'yes/no' if yesno else 'numeric'} field")
            return False
        return True

    def submit_text(self, name: str, text: str) -> None:
        if not self._accepts(name, yesno=False):
            return
        try:
            value = float(text)
        except ValueError:
            # put the field back to what the model holds
            logger.warning(f"Ignoring non-numeric input for {name}: {text!r}")
            self._show(self.fields[name], self.model.get(name))
            return
        self.model.set(name, value)

    def step_up(self, name: str) -> None:
        if self._accepts(name, yesno=False):
            self.model.adjust(name, self.model.entry(name).step)

    def step_down(self, name: str) -> None:
        if self._accepts(name, yesno=False):
            self.model.adjust(name, -self.model.entry(name).step)

    def press_yes(self, name: str) -> None:
        if self._accepts(name, yesno=True):
            self.model.set(name, True)

    def press_no(self, name: str) -> None:
        if self._accepts(name, yesno=True):
            self.model.set(name, False)

    def press_save(self) -> None:
        self.model.save()

    def modified_names(self) -> List[str]:
        return [n for n in self.order if self.fields[n].modified]
