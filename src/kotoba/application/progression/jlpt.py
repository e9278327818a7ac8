"""
JLPT gates.

Each JLPT level spans a range of app levels and requires a number of items
at Guru or above before its levels unlock.
"""

from dataclasses import dataclass

from kotoba.domain.constants import JLPT_LEVELS


@dataclass(frozen=True)
class JlptGate:
    start_level: int
    end_level: int
    required_guru: int


JLPT_GATES: dict[str, JlptGate] = {
    "N5": JlptGate(start_level=1, end_level=10, required_guru=0),
    "N4": JlptGate(start_level=11, end_level=20, required_guru=80),
    "N3": JlptGate(start_level=21, end_level=35, required_guru=200),
    "N2": JlptGate(start_level=36, end_level=50, required_guru=500),
    "N1": JlptGate(start_level=51, end_level=60, required_guru=1000),
}


def jlpt_level_for(app_level: int) -> str | None:
    """JLPT level whose band contains `app_level`, or None if out of range."""
    for level in JLPT_LEVELS:
        gate = JLPT_GATES[level]
        if gate.start_level <= app_level <= gate.end_level:
            return level
    return None


def is_level_unlocked(app_level: int, guru_count: int) -> bool:
    jlpt = jlpt_level_for(app_level)
    if jlpt is None:
        return False
    return guru_count >= JLPT_GATES[jlpt].required_guru


def is_gate_open(jlpt_level: str, app_level: int, guru_count: int) -> bool:
    """
    True once the learner has reached the start of `jlpt_level`'s band and
    holds enough Guru+ items to pass its gate.
    """
    gate = JLPT_GATES[jlpt_level]
    return app_level >= gate.start_level and guru_count >= gate.required_guru
