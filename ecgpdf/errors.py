from __future__ import annotations


class ECGPDFError(RuntimeError):
    """Base class for every fatal conversion failure."""


class ContentStreamError(ECGPDFError):
    pass


class PageNotFound(ECGPDFError):
    pass


class MalformedOperand(ECGPDFError):
    def __init__(self, operator: str, operand: object) -> None:
        super().__init__(f"Expected number for '{operator}' operand, got {operand!r}")
        self.operator = operator
        self.operand = operand


class BaselinesNotFound(ECGPDFError):
    pass


class IncompleteRowSet(ECGPDFError):
    def __init__(self, row: int) -> None:
        super().__init__(f"Missing row {row}")
        self.row = row
