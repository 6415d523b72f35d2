from __future__ import annotations

import copy
import logging
import queue
import threading
import time
from typing import Dict, Iterable, Optional
from urllib.parse import urljoin

import config
from .observable import Observable
from .params import (
    BooleanParam,
    InputDescriptor,
    NumericParam,
    Param,
    ParameterTypeError,
    UnknownParameterError,
    build_params,
    is_number,
)
from .transport import SaveResult, Transport, Unreachable, post_json, run_save

logger = logging.getLogger(__name__)


class Model(Observable):
    """
    Observable parameter state for the settings form.

    Topics emitted:
      - "edit"   (name, value)  after every set/adjust
      - "status" (message)      "Saving..." on save(), then one terminal
                                message per save once pump()/wait() sees
                                the response

    The key set is fixed at construction. Everything except the HTTP
    request itself runs on the thread that owns the model; subscribers
    are never called from the save worker.
    """

    def __init__(
        self,
        initial_params: Dict[str, object],
        auth_token: str,
        save_allowed: bool,
        inputs: Iterable[InputDescriptor] = (),
        transport: Optional[Transport] = None,
        base_url: str = config.DEFAULT_BASE_URL,
    ) -> None:
        # Snapshot; the caller's mapping is never touched again
        self.initial_params: Dict[str, object] = copy.deepcopy(dict(initial_params))
        self._entries: Dict[str, Param] = build_params(self.initial_params, inputs)

        self.auth_token = auth_token
        self.save_allowed = save_allowed

        self.transport: Transport = transport or post_json
        self.save_url = urljoin(base_url, config.SAVE_ENDPOINT)

        self._results: "queue.Queue[SaveResult]" = queue.Queue()
        self.pending = 0

    # -------------------------------
    # Reads
    # -------------------------------
    @property
    def params(self) -> Dict[str, object]:
        return {name: entry.value for name, entry in self._entries.items()}

    def entry(self, name: str) -> Param:
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownParameterError(name) from None

    def get(self, name: str):
        return self.entry(name).value

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    # -------------------------------
    # Mutations
    # -------------------------------
    def set(self, name: str, value) -> None:
        entry = self.entry(name)
        if isinstance(entry, BooleanParam):
            if not isinstance(value, bool):
                raise ParameterTypeError(f"{name!r} is a yes/no parameter, got {value!r}")
        elif not is_number(value):
            raise ParameterTypeError(f"{name!r} is a numeric parameter, got {value!r}")

        entry.value = value
        self._edited(name, entry)

    def adjust(self, name: str, delta) -> None:
        entry = self.entry(name)
        if not isinstance(entry, NumericParam):
            raise ParameterTypeError(f"cannot adjust yes/no parameter {name!r}")
        if not is_number(delta):
            raise ParameterTypeError(f"adjustment for {name!r} must be a number, got {delta!r}")

        entry.value += delta
        self._edited(name, entry)

    def _edited(self, name: str, entry: Param) -> None:
        logger.debug(f"edit {name} = {entry.value!r}")
        self.emit("edit", name, entry.value)

    # -------------------------------
    # Save
    # -------------------------------
    def save(self) -> None:
        """Start a save of the full parameter set.

        Emits the in-progress status right away. The terminal status is
        emitted later by pump()/wait() on the calling thread.
        """
        self.emit("status", config.SAVING_MESSAGE)

        payload = {"params": self.params, "csrf_blob": self.auth_token}
        worker = threading.Thread(
            target=self._save_worker,
            args=(payload,),
            name="paramsync-save",
            daemon=True,
        )
        self.pending += 1
        try:
            worker.start()
        except RuntimeError as e:
            # no worker, so report the failure through the queue ourselves
            logger.error(f"Could not start save worker: {e}")
            self._results.put(Unreachable(f"could not start save: {e}"))

    def _save_worker(self, payload: dict) -> None:
        # run_save never raises; every path ends in one queued result
        self._results.put(run_save(self.transport, self.save_url, payload))

    def _report(self, result: SaveResult) -> None:
        self.pending -= 1
        self.emit("status", result.message())

    def pump(self) -> int:
        """Emit the status of every save that has finished. Never blocks."""
        done = 0
        while True:
            try:
                result = self._results.get_nowait()
            except queue.Empty:
                return done
            self._report(result)
            done += 1

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until every started save has been reported.

        Returns False if `timeout` seconds pass first.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while self.pending > 0:
            remaining = None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
            try:
                result = self._results.get(timeout=remaining)
            except queue.Empty:
                return False
            self._report(result)
        return True
