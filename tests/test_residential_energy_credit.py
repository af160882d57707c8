"""
Tests for the residential energy credits (Form 5695).

Part I (clean energy) is 30% with no annual cap. Part II (home improvement)
is 30% with a $2,000 heat pump limit and a $1,200 limit on everything else.
"""

import pytest

from calculator.federal.energy_credit import compute_energy_credit
from calculator.tax_year_config import TaxYearConfig
from models import EnergyCreditInputs


@pytest.fixture(scope="module")
def config():
    return TaxYearConfig.for_year(2025)


class TestCleanEnergyCredit:

    def test_solar_20000(self, config):
        result = compute_energy_credit(EnergyCreditInputs(solar_electric=2_000_000), config)
        assert result.part1_credit.amount == 600_000
        assert result.credit.amount == 600_000

    def test_battery_storage_uncapped(self, config):
        result = compute_energy_credit(EnergyCreditInputs(battery_storage=5_000_000), config)
        assert result.part1_credit.amount == 1_500_000


class TestHomeImprovementCredit:

    def test_heat_pump_10000(self, config):
        result = compute_energy_credit(EnergyCreditInputs(heat_pump=1_000_000), config)
        assert result.heat_pump_credit == 200_000
        assert result.credit.amount == 200_000

    def test_windows_limit(self, config):
        result = compute_energy_credit(EnergyCreditInputs(windows=500_000), config)
        assert result.general_improvement_credit == 60_000

    def test_general_annual_limit(self, config):
        result = compute_energy_credit(EnergyCreditInputs(insulation=1_000_000), config)
        assert result.general_improvement_credit == 120_000

    def test_heat_pump_and_general_limits_stack(self, config):
        result = compute_energy_credit(
            EnergyCreditInputs(heat_pump=1_000_000, insulation=1_000_000, solar_electric=1_000_000), config
        )
        assert result.part2_credit.amount == 320_000
        assert result.credit.amount == 620_000
        assert result.credit.input_ids == ("form5695.line15", "form5695.line32")
