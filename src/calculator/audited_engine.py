"""
Audit-Integrated Tax Calculation Engine

Wraps TaxComputationEngine with audit logging. Each calculation is recorded
with:
- Redacted inputs (counts and flags, SSNs only as hashes)
- Headline result figures
- SHA-256 hashes of both, for later integrity checks
- Duration and success or failure
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from typing import Any, Dict, List, Optional

from audit.audit_logger import (
    AuditEventType,
    AuditLogger,
    AuditSeverity,
    export_session_audit_report,
    get_audit_logger,
)
from calculator.engine import ComputeResult, TaxComputationEngine
from calculator.tax_year_config import TaxYearConfig
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


def hash_ssn(ssn: Optional[str]) -> Optional[str]:
    """Hash an SSN for the audit trail; the plaintext is never stored."""
    if not ssn:
        return None
    clean_ssn = ssn.replace("-", "").replace(" ", "")
    return hashlib.sha256(clean_ssn.encode()).hexdigest()[:16]


def compute_hash(data: Dict[str, Any]) -> str:
    """SHA-256 of a canonical JSON rendering."""
    json_str = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(json_str.encode()).hexdigest()


class AuditedTaxEngine:
    """
    Tax calculation engine with audit logging.

    Usage:
        engine = AuditedTaxEngine(session_id="...", user_id="...")
        result = engine.calculate(tax_return)
        # Audit trail is automatically created
    """

    def __init__(
        self,
        session_id: str,
        user_id: Optional[str] = None,
        tenant_id: Optional[str] = None,
        config: Optional[TaxYearConfig] = None,
        audit_logger: Optional[AuditLogger] = None,
        state_workers: Optional[int] = None,
        audit_enabled: bool = True,
    ):
        """
        Initialize audited tax engine.

        Args:
            session_id: Tax filing session ID (required for audit trail)
            user_id: User performing the calculation
            tenant_id: Tenant context for multi-tenant systems
            config: Tax year configuration (defaults to each return's year)
            audit_logger: Where events go; defaults to the global logger
            state_workers: Thread pool size for state returns
            audit_enabled: When False, calculations run without audit records
        """
        self.session_id = session_id
        self.user_id = user_id
        self.tenant_id = tenant_id
        self._engine = TaxComputationEngine(config=config, state_workers=state_workers)
        self.audit_enabled = audit_enabled
        self._audit = audit_logger if audit_logger is not None or not audit_enabled else get_audit_logger()
        self._calculation_count = 0

    def calculate(self, tax_return: TaxReturn) -> ComputeResult:
        return self._run(tax_return, "full_return", AuditEventType.TAX_DATA_CALCULATION)

    def calculate_with_scenarios(self, tax_return: TaxReturn, scenario_name: str = "base") -> ComputeResult:
        """
        Calculate with scenario tracking for what-if analysis.

        Args:
            tax_return: Tax return data
            scenario_name: Name of the scenario (e.g., "base", "itemized", "mfj")
        """
        return self._run(tax_return, "scenario_analysis", AuditEventType.TAX_DATA_SCENARIO,
                         {"scenario_name": scenario_name})

    def _run(
        self,
        tax_return: TaxReturn,
        calculation_type: str,
        event_type: AuditEventType,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ComputeResult:
        start = time.perf_counter()
        self._calculation_count += 1

        inputs = self.capture_inputs(tax_return)
        if metadata:
            inputs.update(metadata)
        input_hash = compute_hash(inputs)

        try:
            result = self._engine.calculate(tax_return)
        except Exception as e:
            logger.exception("Calculation %s failed for session %s", self._calculation_count, self.session_id)
            self._log_calculation(
                event_type, calculation_type, inputs, None, input_hash, None,
                (time.perf_counter() - start) * 1000, success=False,
                error_message=str(e), metadata=metadata,
            )
            raise

        outputs = result.summary()
        self._log_calculation(
            event_type, calculation_type, inputs, outputs, input_hash, compute_hash(outputs),
            (time.perf_counter() - start) * 1000, success=True, metadata=metadata,
        )
        return result

    def capture_inputs(self, tax_return: TaxReturn) -> Dict[str, Any]:
        """Calculation inputs with PII redaction: counts and flags, no names or amounts per person."""
        return {
            "tax_year": tax_return.tax_year,
            "filing_status": tax_return.filing_status.value,
            "ssn_hash": hash_ssn(tax_return.taxpayer.ssn),
            "spouse_ssn_hash": hash_ssn(tax_return.spouse.ssn) if tax_return.spouse else None,
            "nonresident": tax_return.is_nonresident,
            "document_counts": {
                "w2": len(tax_return.w2s),
                "1099_int": len(tax_return.form1099_ints),
                "1099_div": len(tax_return.form1099_divs),
                "1099_r": len(tax_return.form1099_rs),
                "1099_g": len(tax_return.form1099_gs),
                "1099_misc": len(tax_return.form1099_miscs),
                "1099_nec": len(tax_return.form1099_necs),
                "ssa_1099": len(tax_return.ssa1099s),
                "capital_transactions": len(tax_return.capital_transactions),
                "schedule_c": len(tax_return.schedule_c_businesses),
                "schedule_e": len(tax_return.schedule_e_properties),
                "schedule_k1": len(tax_return.schedule_k1s),
            },
            "deduction_method": tax_return.deductions.method.value,
            "dependent_count": len(tax_return.dependents),
            "states": [s.state_code for s in tax_return.state_returns],
        }

    def _log_calculation(
        self,
        event_type: AuditEventType,
        calculation_type: str,
        inputs: Dict[str, Any],
        outputs: Optional[Dict[str, Any]],
        input_hash: str,
        output_hash: Optional[str],
        duration_ms: float,
        success: bool,
        error_message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[str]:
        """Log calculation to audit trail."""
        if not self.audit_enabled:
            return None
        return self._audit.log(
            event_type=event_type,
            action=f"calculate_{calculation_type}",
            resource_type="tax_calculation",
            resource_id=self.session_id,
            user_id=self.user_id,
            tenant_id=self.tenant_id,
            old_value=inputs,
            new_value=outputs,
            details={
                "calculation_type": calculation_type,
                "calculation_number": self._calculation_count,
                "input_hash": input_hash,
                "output_hash": output_hash,
                "duration_ms": f"{duration_ms:.2f}",
                "tax_year": inputs.get("tax_year"),
                "filing_status": inputs.get("filing_status"),
                **(metadata or {}),
            },
            success=success,
            error_message=error_message,
            severity=AuditSeverity.INFO if success else AuditSeverity.ERROR,
        )

    def get_calculation_history(self) -> List[Dict[str, Any]]:
        """Audit entries for this session's calculations, newest first."""
        if self._audit is None:
            return []
        return self._audit.query(resource_id=self.session_id, resource_type="tax_calculation", limit=100)

    def export_audit_trail(self) -> Dict[str, Any]:
        return export_session_audit_report(self.session_id, self._audit)


def create_audited_engine(
    session_id: str,
    user_id: Optional[str] = None,
    tenant_id: Optional[str] = None,
    tax_year: Optional[int] = None,
) -> AuditedTaxEngine:
    """
    Factory function to create an audited tax engine.

    Args:
        session_id: Tax filing session ID
        user_id: User performing calculations
        tenant_id: Tenant context
        tax_year: Tax year for configuration (``EngineSettings.default_tax_year`` when omitted)
    """
    from config.settings import get_settings

    settings = get_settings()
    config = TaxYearConfig.for_year(tax_year or settings.default_tax_year)
    return AuditedTaxEngine(
        session_id=session_id,
        user_id=user_id,
        tenant_id=tenant_id,
        config=config,
        state_workers=settings.state_workers,
        audit_enabled=settings.audit_enabled,
    )
