from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from calculator.brackets import Bracket, BracketTable, brackets_from_floors
from calculator.decimal_math import dollars_to_cents
from calculator.errors import UnsupportedTaxYearError

logger = logging.getLogger(__name__)

StatusKey = str
StatusTable = Mapping[StatusKey, int]

FILING_STATUSES = (
    "single",
    "married_joint",
    "married_separate",
    "head_of_household",
    "qualifying_widow",
)


def status_key(filing_status: Any) -> str:
    """Accept a FilingStatus enum or its string value."""
    return getattr(filing_status, "value", filing_status)


def _by_status(
    single: float,
    married_joint: float,
    married_separate: Optional[float] = None,
    head_of_household: Optional[float] = None,
    qualifying_widow: Optional[float] = None,
) -> StatusTable:
    """Dollar amounts per filing status, converted to cents."""
    values = {
        "single": single,
        "married_joint": married_joint,
        "married_separate": single if married_separate is None else married_separate,
        "head_of_household": single if head_of_household is None else head_of_household,
        "qualifying_widow": married_joint if qualifying_widow is None else qualifying_widow,
    }
    return MappingProxyType({k: dollars_to_cents(v) for k, v in values.items()})


@dataclass(frozen=True)
class EICSchedule:
    """One row of the EIC table (by number of qualifying children), in cents."""
    earned_income_amount: int
    max_credit: int
    phase_in_rate: float
    phase_out_rate: float
    phaseout_start: int
    phaseout_start_joint: int


@dataclass(frozen=True)
class TaxYearConfig:
    """
    Centralized constants for a given tax year.

    Every money value is integer cents; every rate is a fraction (0.22 for 22%).
    Instances are immutable and obtained through ``for_year`` so that the tax
    year is always an explicit parameter of a computation.

    NOTE: Values here should be reviewed annually against IRS published figures.
    """

    tax_year: int
    version: str
    ordinary_brackets: Mapping[StatusKey, BracketTable]
    preferential_brackets: Mapping[StatusKey, BracketTable]

    # Standard deduction (Form 1040 line 12)
    standard_deduction: StatusTable
    additional_standard_deduction: StatusTable  # per condition: 65+ or blind
    dependent_standard_deduction_min: int
    dependent_standard_deduction_earned_addon: int

    # Enhanced deduction for seniors (Schedule 1-A), 2025 through 2028
    senior_deduction_amount: int  # per person age 65 or older
    senior_deduction_phaseout_start: StatusTable
    senior_deduction_phaseout_rate: float

    # Qualified business income deduction (Form 8995 / 8995-A)
    qbi_rate: float
    qbi_threshold: StatusTable
    qbi_phase_in_range: StatusTable
    qbi_wage_rate: float
    qbi_wage_ubia_wage_rate: float
    qbi_ubia_rate: float

    # Schedule A
    medical_expense_floor_rate: float
    salt_cap: StatusTable
    salt_phaseout_threshold: StatusTable
    salt_phaseout_rate: float
    salt_floor: StatusTable
    mortgage_principal_limit: StatusTable
    mortgage_principal_limit_pre_tcja: StatusTable
    charitable_cash_agi_limit: float
    charitable_noncash_agi_limit: float

    # Capital loss deduction limit (IRC 1211(b))
    capital_loss_limit: StatusTable

    # Rental real estate special allowance (Form 8582)
    passive_loss_allowance: StatusTable  # married filing separately only when living apart
    passive_loss_phaseout_start: StatusTable
    passive_loss_phaseout_rate: float

    # Foreign tax credit claimed without Form 1116
    ftc_direct_credit_limit: StatusTable

    # Self-employment (Schedule SE) and payroll
    se_net_earnings_factor: float
    se_ss_rate: float
    se_medicare_rate: float
    se_minimum_earnings: int
    ss_wage_base: int
    ss_employee_rate: float

    # Additional Medicare Tax (Form 8959) and NIIT (Form 8960)
    additional_medicare_rate: float
    additional_medicare_threshold: StatusTable
    niit_rate: float
    niit_threshold: StatusTable

    # Social Security benefits worksheet (Pub. 915)
    ss_base_amount: StatusTable
    ss_second_base_amount: StatusTable

    # AMT (Form 6251)
    amt_exemption: StatusTable
    amt_phaseout_start: StatusTable
    amt_phaseout_rate: float
    amt_rate_low: float
    amt_rate_high: float
    amt_high_rate_threshold: StatusTable

    # Child Tax Credit / Credit for Other Dependents / ACTC (Schedule 8812)
    ctc_per_child: int
    odc_per_dependent: int
    ctc_child_age_limit: int
    ctc_phaseout_threshold: StatusTable
    ctc_phaseout_step: int
    ctc_phaseout_per_step: int
    actc_max_per_child: int
    actc_earned_income_threshold: int
    actc_rate: float

    # Earned Income Credit
    eic_schedules: Tuple[EICSchedule, ...]
    eic_investment_income_limit: int
    eic_childless_min_age: int
    eic_childless_max_age: int
    eic_child_age_limit: int
    eic_student_age_limit: int

    # Child and Dependent Care Credit (Form 2441)
    dependent_care_expense_cap_one: int
    dependent_care_expense_cap_two: int
    dependent_care_max_rate: float
    dependent_care_min_rate: float
    dependent_care_agi_floor: int
    dependent_care_agi_step: int
    dependent_care_child_age_limit: int

    # Saver's Credit (Form 8880)
    savers_credit_limits: Mapping[StatusKey, Tuple[int, int, int]]  # 50%, 20%, 10% AGI ceilings
    savers_credit_max_contribution: int
    savers_credit_deferral_codes: Tuple[str, ...]

    # Residential energy credits (Form 5695)
    clean_energy_rate: float
    home_improvement_rate: float
    home_improvement_annual_limit: int
    heat_pump_annual_limit: int
    window_limit: int
    door_limit: int
    energy_audit_limit: int

    # Education credits (Form 8863)
    aotc_first_tier: int
    aotc_second_tier: int
    aotc_second_tier_rate: float
    aotc_max_credit: int
    aotc_refundable_rate: float
    aotc_max_years: int
    llc_expense_limit: int
    llc_rate: float
    education_phaseout_start: StatusTable
    education_phaseout_range: StatusTable

    # IRA deduction (Pub. 590-A)
    ira_contribution_limit: int
    ira_catchup_50_plus: int
    ira_phaseout_start_covered: StatusTable
    ira_phaseout_range_covered: StatusTable
    ira_phaseout_start_spouse_covered: int
    ira_phaseout_range_spouse_covered: int
    ira_phaseout_rounding: int
    ira_minimum_deduction: int

    # HSA (Form 8889)
    hsa_self_only_limit: int
    hsa_family_limit: int
    hsa_catchup_55_plus: int
    hsa_distribution_penalty_rate: float
    hsa_excess_contribution_rate: float

    # Student loan interest deduction
    student_loan_interest_max: int
    student_loan_phaseout_start: StatusTable
    student_loan_phaseout_range: StatusTable

    # Miscellaneous
    educator_expense_limit: int
    early_withdrawal_penalty_rate: float

    def brackets_for(self, filing_status: Any) -> BracketTable:
        return self.ordinary_brackets[status_key(filing_status)]

    def preferential_brackets_for(self, filing_status: Any) -> BracketTable:
        return self.preferential_brackets[status_key(filing_status)]

    def lookup(self, table_name: str, filing_status: Any) -> int:
        """Per-status table value, e.g. ``config.lookup("salt_cap", FilingStatus.SINGLE)``."""
        return getattr(self, table_name)[status_key(filing_status)]

    def eic_schedule(self, num_children: int) -> EICSchedule:
        return self.eic_schedules[min(max(num_children, 0), len(self.eic_schedules) - 1)]

    @staticmethod
    def for_2025() -> "TaxYearConfig":
        # Ordinary income brackets for tax year 2025 (Rev. Proc. 2024-40), floor format.
        single = [
            (0, 0.10), (11925, 0.12), (48475, 0.22), (103350, 0.24),
            (197300, 0.32), (250525, 0.35), (626350, 0.37),
        ]
        joint = [
            (0, 0.10), (23850, 0.12), (96950, 0.22), (206700, 0.24),
            (394600, 0.32), (501050, 0.35), (751600, 0.37),
        ]
        separate = single[:-1] + [(375800, 0.37)]
        hoh = [
            (0, 0.10), (17000, 0.12), (64850, 0.22), (103350, 0.24),
            (197300, 0.32), (250500, 0.35), (626350, 0.37),
        ]
        ordinary = {
            "single": brackets_from_floors(single),
            "married_joint": brackets_from_floors(joint),
            "married_separate": brackets_from_floors(separate),
            "head_of_household": brackets_from_floors(hoh),
            "qualifying_widow": brackets_from_floors(joint),
        }

        # 0% / 15% / 20% breakpoints for qualified dividends and LTCG
        def ltcg(zero_top: float, fifteen_top: float) -> BracketTable:
            return (
                Bracket(dollars_to_cents(zero_top), 0.0),
                Bracket(dollars_to_cents(fifteen_top), 0.15),
                Bracket(float("inf"), 0.20),
            )

        preferential = {
            "single": ltcg(48350, 533400),
            "married_joint": ltcg(96700, 600050),
            "married_separate": ltcg(48350, 300025),
            "head_of_household": ltcg(64750, 566700),
            "qualifying_widow": ltcg(96700, 600050),
        }

        # EIC table (Rev. Proc. 2024-40 section 2.06): 0, 1, 2, 3+ children
        eic = (
            EICSchedule(dollars_to_cents(8490), dollars_to_cents(649), 0.0765, 0.0765,
                        dollars_to_cents(10620), dollars_to_cents(17730)),
            EICSchedule(dollars_to_cents(12730), dollars_to_cents(4328), 0.34, 0.1598,
                        dollars_to_cents(23350), dollars_to_cents(30470)),
            EICSchedule(dollars_to_cents(17880), dollars_to_cents(7152), 0.40, 0.2106,
                        dollars_to_cents(23350), dollars_to_cents(30470)),
            EICSchedule(dollars_to_cents(17880), dollars_to_cents(8046), 0.45, 0.2106,
                        dollars_to_cents(23350), dollars_to_cents(30470)),
        )

        def savers(fifty: float, twenty: float, ten: float) -> Tuple[int, int, int]:
            return (dollars_to_cents(fifty), dollars_to_cents(twenty), dollars_to_cents(ten))

        savers_limits = {
            "single": savers(23750, 25500, 39500),
            "married_separate": savers(23750, 25500, 39500),
            "head_of_household": savers(35625, 38250, 59250),
            "married_joint": savers(47500, 51000, 79000),
            "qualifying_widow": savers(47500, 51000, 79000),
        }

        return TaxYearConfig(
            tax_year=2025,
            version="2025.1",
            ordinary_brackets=MappingProxyType(ordinary),
            preferential_brackets=MappingProxyType(preferential),
            # One Big Beautiful Bill Act amounts for 2025
            standard_deduction=_by_status(15750, 31500, head_of_household=23625),
            additional_standard_deduction=_by_status(2000, 1600, married_separate=1600, head_of_household=2000),
            dependent_standard_deduction_min=dollars_to_cents(1350),
            dependent_standard_deduction_earned_addon=dollars_to_cents(450),
            senior_deduction_amount=dollars_to_cents(6000),
            senior_deduction_phaseout_start=_by_status(75000, 150000),
            senior_deduction_phaseout_rate=0.06,
            qbi_rate=0.20,
            qbi_threshold=_by_status(197300, 394600, qualifying_widow=197300),
            qbi_phase_in_range=_by_status(50000, 100000, qualifying_widow=50000),
            qbi_wage_rate=0.50,
            qbi_wage_ubia_wage_rate=0.25,
            qbi_ubia_rate=0.025,
            medical_expense_floor_rate=0.075,
            salt_cap=_by_status(40000, 40000, married_separate=20000),
            salt_phaseout_threshold=_by_status(500000, 500000, married_separate=250000),
            salt_phaseout_rate=0.30,
            salt_floor=_by_status(10000, 10000, married_separate=5000),
            mortgage_principal_limit=_by_status(750000, 750000, married_separate=375000),
            mortgage_principal_limit_pre_tcja=_by_status(1000000, 1000000, married_separate=500000),
            charitable_cash_agi_limit=0.60,
            charitable_noncash_agi_limit=0.30,
            capital_loss_limit=_by_status(3000, 3000, married_separate=1500),
            passive_loss_allowance=_by_status(25000, 25000, married_separate=12500),
            passive_loss_phaseout_start=_by_status(100000, 100000, married_separate=50000),
            passive_loss_phaseout_rate=0.50,
            ftc_direct_credit_limit=_by_status(300, 600, qualifying_widow=300),
            se_net_earnings_factor=0.9235,
            se_ss_rate=0.124,
            se_medicare_rate=0.029,
            se_minimum_earnings=dollars_to_cents(400),
            ss_wage_base=dollars_to_cents(176100),
            ss_employee_rate=0.062,
            additional_medicare_rate=0.009,
            additional_medicare_threshold=_by_status(200000, 250000, married_separate=125000, qualifying_widow=200000),
            niit_rate=0.038,
            niit_threshold=_by_status(200000, 250000, married_separate=125000),
            ss_base_amount=_by_status(25000, 32000, married_separate=0),
            ss_second_base_amount=_by_status(34000, 44000, married_separate=0),
            amt_exemption=_by_status(88100, 137000, married_separate=68500),
            amt_phaseout_start=_by_status(626350, 1252700, married_separate=626350),
            amt_phaseout_rate=0.25,
            amt_rate_low=0.26,
            amt_rate_high=0.28,
            amt_high_rate_threshold=_by_status(239100, 239100, married_separate=119550),
            ctc_per_child=dollars_to_cents(2200),
            odc_per_dependent=dollars_to_cents(500),
            ctc_child_age_limit=17,
            ctc_phaseout_threshold=_by_status(200000, 400000, qualifying_widow=200000),
            ctc_phaseout_step=dollars_to_cents(1000),
            ctc_phaseout_per_step=dollars_to_cents(50),
            actc_max_per_child=dollars_to_cents(1700),
            actc_earned_income_threshold=dollars_to_cents(2500),
            actc_rate=0.15,
            eic_schedules=eic,
            eic_investment_income_limit=dollars_to_cents(11950),
            eic_childless_min_age=25,
            eic_childless_max_age=64,
            eic_child_age_limit=19,
            eic_student_age_limit=24,
            dependent_care_expense_cap_one=dollars_to_cents(3000),
            dependent_care_expense_cap_two=dollars_to_cents(6000),
            dependent_care_max_rate=0.35,
            dependent_care_min_rate=0.20,
            dependent_care_agi_floor=dollars_to_cents(15000),
            dependent_care_agi_step=dollars_to_cents(2000),
            dependent_care_child_age_limit=13,
            savers_credit_limits=MappingProxyType(savers_limits),
            savers_credit_max_contribution=dollars_to_cents(2000),
            savers_credit_deferral_codes=("D", "E", "AA", "BB", "G", "H"),
            clean_energy_rate=0.30,
            home_improvement_rate=0.30,
            home_improvement_annual_limit=dollars_to_cents(1200),
            heat_pump_annual_limit=dollars_to_cents(2000),
            window_limit=dollars_to_cents(600),
            door_limit=dollars_to_cents(500),
            energy_audit_limit=dollars_to_cents(150),
            aotc_first_tier=dollars_to_cents(2000),
            aotc_second_tier=dollars_to_cents(2000),
            aotc_second_tier_rate=0.25,
            aotc_max_credit=dollars_to_cents(2500),
            aotc_refundable_rate=0.40,
            aotc_max_years=4,
            llc_expense_limit=dollars_to_cents(10000),
            llc_rate=0.20,
            education_phaseout_start=_by_status(80000, 160000, married_separate=0),
            education_phaseout_range=_by_status(10000, 20000, married_separate=0),
            ira_contribution_limit=dollars_to_cents(7000),
            ira_catchup_50_plus=dollars_to_cents(1000),
            ira_phaseout_start_covered=_by_status(79000, 126000, married_separate=0),
            ira_phaseout_range_covered=_by_status(10000, 20000, married_separate=10000),
            ira_phaseout_start_spouse_covered=dollars_to_cents(236000),
            ira_phaseout_range_spouse_covered=dollars_to_cents(10000),
            ira_phaseout_rounding=dollars_to_cents(10),
            ira_minimum_deduction=dollars_to_cents(200),
            hsa_self_only_limit=dollars_to_cents(4300),
            hsa_family_limit=dollars_to_cents(8550),
            hsa_catchup_55_plus=dollars_to_cents(1000),
            hsa_distribution_penalty_rate=0.20,
            hsa_excess_contribution_rate=0.06,
            student_loan_interest_max=dollars_to_cents(2500),
            student_loan_phaseout_start=_by_status(85000, 170000, married_separate=0),
            student_loan_phaseout_range=_by_status(15000, 30000, married_separate=0),
            educator_expense_limit=dollars_to_cents(300),
            early_withdrawal_penalty_rate=0.10,
        )

    @staticmethod
    def for_year(tax_year: int) -> "TaxYearConfig":
        """
        Configuration for a supported tax year.

        The built-in constants are combined with the year's YAML parameter file
        (version metadata and scalar overrides). The result is cached, so every
        caller in the process shares one immutable instance per year.

        Raises:
            UnsupportedTaxYearError: If no configuration exists for the year
        """
        return _load_year(tax_year)

    def with_overrides(self, overrides: Mapping[str, Any]) -> "TaxYearConfig":
        """
        Copy with scalar fields replaced. Per-status money tables may be
        overridden with a mapping of filing status to cents. Values are in the
        units the field stores (cents for money, fractions for rates).
        """
        if not overrides:
            return self
        field_names = {f.name for f in dataclasses.fields(self)}
        changes: Dict[str, Any] = {}
        for name, value in overrides.items():
            if name not in field_names:
                logger.warning("Ignoring unknown tax parameter override %r", name)
                continue
            current = getattr(self, name)
            if isinstance(current, Mapping) and isinstance(value, Mapping) and all(
                isinstance(v, int) for v in current.values()
            ):
                merged = dict(current)
                for status, amount in value.items():
                    merged[status] = int(amount)
                changes[name] = MappingProxyType(merged)
            elif isinstance(current, (int, float, str)) and not isinstance(value, (Mapping, list)):
                changes[name] = type(current)(value)
            else:
                logger.warning("Ignoring non-scalar override for %r", name)
        return dataclasses.replace(self, **changes)


_BUILDERS = {
    2025: TaxYearConfig.for_2025,
}


def supported_tax_years() -> Tuple[int, ...]:
    return tuple(sorted(_BUILDERS))


@lru_cache(maxsize=None)
def _load_year(tax_year: int) -> TaxYearConfig:
    builder = _BUILDERS.get(tax_year)
    if builder is None:
        raise UnsupportedTaxYearError(tax_year)

    # Imported here: the config package depends on PyYAML and the loader is
    # only needed when a configuration is first built.
    from config.tax_config_loader import get_config_loader

    config = builder()
    loader = get_config_loader()
    params = loader.load_config(tax_year)
    metadata = loader.get_metadata(tax_year)
    if metadata is not None:
        config = dataclasses.replace(config, version=metadata.version)
    config = config.with_overrides(params.get("overrides") or {})
    logger.info("Loaded tax year %s configuration (version %s)", tax_year, config.version)
    return config


def clear_config_cache() -> None:
    """Drop cached year configurations (tests that patch YAML files use this)."""
    _load_year.cache_clear()
