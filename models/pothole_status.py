from enum import StrEnum


class PotholeStatus(StrEnum):
    """
    Triage stage of a report.

    Any status may move to any other; only membership is checked.
    """

    PENDING = 'pending'
    INPROCESS = 'inprocess'
    COMPLETED = 'completed'
