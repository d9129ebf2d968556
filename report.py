import json
from collections import namedtuple
from types import MappingProxyType
from typing import Dict, List, Union

#Counters present in every report, even when no pass touches them
INITIAL_COUNTERS = ["strings_decoded", "constants_folded", "functions_inlined", "identifiers_renamed", "dead_blocks_removed"]

PassOutcome = namedtuple("PassOutcome", "name stats error")
"""Result of one pass: stats is the dict returned by the pass, error the PassError raised by it (exactly one of them is None)"""

class TransformationReport(object):
    """
    Accumulates what the passes of one pipeline invocation did.

    Counters form an open mapping: a pass may report a counter that is not in
    INITIAL_COUNTERS, it is then added to the report. Notes are append-only.
    """
    def __init__(self) -> None:
        self.passes_applied : List[str] = []
        """Names of the passes that ran to completion, in execution order"""

        self.counters : Dict[str, int] = dict((k, 0) for k in INITIAL_COUNTERS)
        """Counter name -> sum of the values returned by the passes"""

        self.notes : List[str] = []
        """Free-text diagnostics, including pass failures"""

        self.sealed : bool = False

    def check_writable(self) -> None:
        if self.sealed:
            raise RuntimeError("report is sealed")

    def note(self, text : str) -> None:
        self.check_writable()
        self.notes.append(text)

    def absorb(self, outcome : PassOutcome) -> None:
        """
        Merge the outcome of a pass

        :param PassOutcome outcome: The outcome
        """
        self.check_writable()
        if outcome.error is not None:
            self.notes.append(outcome.name + "-error:" + outcome.error.message)
            return
        self.passes_applied.append(outcome.name)
        for k, v in outcome.stats.items():
            if type(v) is int:
                self.counters[k] = self.counters.get(k, 0) + v
            elif v:
                self.notes.append(outcome.name + ":" + k + "=" + json.dumps(v))

    def seal(self) -> None:
        """
        Make the report read-only: the lists become tuples and the counters a read-only mapping
        """
        self.sealed = True
        self.passes_applied = tuple(self.passes_applied)
        self.notes = tuple(self.notes)
        self.counters = MappingProxyType(dict(self.counters))

    def __getitem__(self, key : str) -> Union[int, List[str]]:
        if key == "passes_applied":
            return list(self.passes_applied)
        if key == "notes":
            return list(self.notes)
        return self.counters[key]

    def __contains__(self, key : str) -> bool:
        return key in ("passes_applied", "notes") or key in self.counters

    def get(self, key : str, default=None):
        if key in self:
            return self[key]
        return default

    def to_dict(self) -> dict:
        d = {"passes_applied": list(self.passes_applied)}
        d.update(self.counters)
        d["notes"] = list(self.notes)
        return d

    def __repr__(self) -> str:
        return "TransformationReport(" + repr(self.to_dict()) + ")"
