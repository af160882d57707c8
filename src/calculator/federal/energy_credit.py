"""
Residential Energy Credits (Form 5695).

Part I, the Residential Clean Energy Credit, is 30% of qualified costs with no
annual cap. Part II, the Energy Efficient Home Improvement Credit, is 30% of
costs with per-item caps (windows $600, doors $500, energy audit $150), an
aggregate $1,200 cap, and a separate $2,000 cap for heat pumps.
"""

import logging
from dataclasses import dataclass

from calculator.decimal_math import percent
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation
from models.credits import EnergyCreditInputs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnergyCreditResult:
    part1_basis: int
    part1_credit: TracedValue
    heat_pump_credit: int
    general_improvement_credit: int
    part2_credit: TracedValue
    credit: TracedValue


def compute_energy_credit(energy: EnergyCreditInputs, config: TaxYearConfig) -> EnergyCreditResult:
    """
    Examples:
        $20,000 of solar panels: 30% = $6,000.
        $10,000 heat pump: min(30% x 10,000, 2,000) = $2,000.
    """
    basis = (
        energy.solar_electric + energy.solar_water_heating + energy.small_wind
        + energy.geothermal_heat_pump + energy.battery_storage
    )
    part1 = traced_from_computation(
        percent(basis, config.clean_energy_rate), "form5695.line15", ["input.energy.cleanEnergy"],
        "Form 5695, Line 15",
    )

    rate = config.home_improvement_rate
    heat_pump = min(percent(energy.heat_pump, rate), config.heat_pump_annual_limit)
    general = (
        percent(energy.insulation + energy.central_air + energy.water_heater, rate)
        + min(percent(energy.windows, rate), config.window_limit)
        + min(percent(energy.doors, rate), config.door_limit)
        + min(percent(energy.home_energy_audit, rate), config.energy_audit_limit)
    )
    general = min(general, config.home_improvement_annual_limit)
    part2 = traced_from_computation(
        heat_pump + general, "form5695.line32", ["input.energy.homeImprovement"], "Form 5695, Line 32"
    )

    total = traced_from_computation(
        part1.amount + part2.amount, "form5695.totalCredit", ["form5695.line15", "form5695.line32"],
        "Form 5695, Total Credit",
    )
    logger.debug("Form 5695: clean=%s heat_pump=%s general=%s", part1.amount, heat_pump, general)
    return EnergyCreditResult(
        part1_basis=basis,
        part1_credit=part1,
        heat_pump_credit=heat_pump,
        general_improvement_credit=general,
        part2_credit=part2,
        credit=total,
    )
