"""
Exceptions raised by the tax engine.

These signal programming or configuration defects (a malformed bracket table,
a year with no configuration, an out-of-range row lookup). Ordinary data
conditions such as missing documents or zero income never raise; they produce
zero-valued traced lines instead.
"""


class TaxEngineError(Exception):
    """Base class for all engine errors."""


class BracketTableError(TaxEngineError, ValueError):
    """A bracket table is not an ordered sequence of (limit, rate) pairs."""


class UnsupportedTaxYearError(TaxEngineError, KeyError):
    """No configuration exists for the requested tax year."""

    def __init__(self, tax_year: int):
        self.tax_year = tax_year
        super().__init__(f"No tax configuration for tax year {tax_year}")

    def __str__(self) -> str:
        return self.args[0]


class UnsupportedStateError(TaxEngineError, KeyError):
    """The registry has no module for the requested state and year."""

    def __init__(self, state_code: str, tax_year: int):
        self.state_code = state_code
        self.tax_year = tax_year
        super().__init__(f"No state module registered for {state_code} ({tax_year})")

    def __str__(self) -> str:
        return self.args[0]


class FieldLookupError(TaxEngineError, IndexError):
    """A row or column index outside the populated range was requested."""


class ProvenanceCycleError(TaxEngineError, ValueError):
    """The traced values do not form a directed acyclic graph."""

    def __init__(self, node_ids):
        self.node_ids = tuple(node_ids)
        super().__init__(f"Cycle detected involving: {', '.join(self.node_ids)}")
