"""
Foreign tax credit for passive income (Form 1116, Schedule 3 line 1).

Foreign tax withheld on dividends (1099-DIV box 7) and interest (1099-INT
box 6) is creditable. Up to $300 ($600 joint) may be claimed directly
without Form 1116. Above that the credit is limited to the U.S. tax times
foreign-source income over taxable income, where foreign-source income is
the gross dividends and interest from the payers that withheld foreign tax.
"""

import logging
from dataclasses import dataclass

from calculator.decimal_math import ratio_of
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForeignTaxCreditResult:
    foreign_taxes: TracedValue
    foreign_source_income: int
    direct_credit: bool
    limitation: int
    credit: TracedValue
    excess: int             # not creditable this year


def foreign_taxes_paid(model: TaxReturn) -> int:
    return (
        sum(f.foreign_tax_paid for f in model.form1099_divs)
        + sum(f.foreign_tax_paid for f in model.form1099_ints)
    )


def compute_foreign_tax_credit(
    model: TaxReturn,
    config: TaxYearConfig,
    taxable_income: int,
    regular_tax: int,
    tax_before_credits: int,
) -> ForeignTaxCreditResult:
    """
    Args:
        taxable_income: Form 1040 line 15
        regular_tax: Form 1040 line 16
        tax_before_credits: Form 1040 line 18; the credit never exceeds it
    """
    divs = [f for f in model.form1099_divs if f.foreign_tax_paid]
    ints = [f for f in model.form1099_ints if f.foreign_tax_paid]
    paid = sum(f.foreign_tax_paid for f in divs) + sum(f.foreign_tax_paid for f in ints)
    foreign_taxes = traced_from_computation(
        paid, "form1116.foreignTaxes",
        [f"1099div:{f.id}:box7" for f in divs] + [f"1099int:{f.id}:box6" for f in ints],
        "Foreign taxes paid",
    )
    source_income = sum(f.ordinary_dividends for f in divs) + sum(f.interest_income for f in ints)

    direct = paid <= config.lookup("ftc_direct_credit_limit", model.filing_status)
    if taxable_income > 0:
        limitation = ratio_of(regular_tax, min(source_income, taxable_income), taxable_income)
    else:
        limitation = 0
    allowed = paid if direct else min(paid, limitation)
    allowed = min(allowed, tax_before_credits)
    inputs = ["form1116.foreignTaxes", "form1040.line18"]
    if not direct:
        inputs[1:1] = ["form1040.line15", "form1040.line16"]
    credit = traced_from_computation(allowed, "schedule3.line1", inputs, "Schedule 3, Line 1")
    logger.debug("Foreign tax credit %s of %s paid (direct=%s, limitation=%s)", allowed, paid, direct, limitation)
    return ForeignTaxCreditResult(
        foreign_taxes=foreign_taxes,
        foreign_source_income=source_income,
        direct_credit=direct,
        limitation=limitation,
        credit=credit,
        excess=paid - allowed,
    )
