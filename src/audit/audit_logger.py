"""
Audit Logging System

Audit trail for tax computations. Every calculation run through the audited
engine is recorded with redacted inputs, result figures and integrity hashes.
"""

import sqlite3
import json
import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional, Dict, Any, List
from pathlib import Path
from enum import Enum

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "./data/audit_log.db"


class AuditEventType(Enum):
    """Types of events that get audited"""

    TAX_DATA_CALCULATION = "tax_data.calculation"
    TAX_DATA_STATE_CALCULATION = "tax_data.state_calculation"
    TAX_DATA_SCENARIO = "tax_data.scenario"
    TAX_DATA_EXPLANATION = "tax_data.explanation"


class AuditSeverity(Enum):
    """Severity levels for audit events"""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditLogger:
    """
    Audit logging system with sqlite persistence.

    A connection is opened per call, so one logger may be shared by threads.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_schema()

    def _initialize_schema(self):
        """Create audit log table"""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS audit_log (
                    event_id TEXT PRIMARY KEY,
                    event_type TEXT NOT NULL,
                    severity TEXT NOT NULL,
                    timestamp TEXT NOT NULL,

                    user_id TEXT,
                    tenant_id TEXT,

                    action TEXT NOT NULL,
                    resource_type TEXT NOT NULL,
                    resource_id TEXT,

                    details JSON,
                    old_value JSON,
                    new_value JSON,

                    success INTEGER NOT NULL,
                    error_message TEXT
                )
            """)

            cursor.execute("CREATE INDEX IF NOT EXISTS idx_audit_timestamp ON audit_log(timestamp)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_audit_event_type ON audit_log(event_type)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_audit_resource ON audit_log(resource_type, resource_id)")

            conn.commit()

    def log(
        self,
        event_type: AuditEventType,
        action: str,
        resource_type: str,
        user_id: Optional[str] = None,
        tenant_id: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[Dict] = None,
        old_value: Optional[Dict] = None,
        new_value: Optional[Dict] = None,
        success: bool = True,
        error_message: Optional[str] = None,
        severity: AuditSeverity = AuditSeverity.INFO,
    ) -> str:
        """
        Log an audit event.

        Returns: event_id
        """
        event_id = str(uuid.uuid4())

        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                INSERT INTO audit_log (
                    event_id, event_type, severity, timestamp,
                    user_id, tenant_id,
                    action, resource_type, resource_id,
                    details, old_value, new_value,
                    success, error_message
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                event_id,
                event_type.value,
                severity.value,
                datetime.now().isoformat(),
                user_id,
                tenant_id,
                action,
                resource_type,
                resource_id,
                json.dumps(details) if details else None,
                json.dumps(old_value) if old_value else None,
                json.dumps(new_value) if new_value else None,
                1 if success else 0,
                error_message
            ))

            conn.commit()

        logger.debug("Audit event %s recorded (%s %s)", event_id, event_type.value, action)
        return event_id

    def query(
        self,
        user_id: Optional[str] = None,
        tenant_id: Optional[str] = None,
        event_type: Optional[AuditEventType] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        severity: Optional[AuditSeverity] = None,
        success_only: Optional[bool] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Dict]:
        """Query audit log with filters, newest first"""

        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            query = "SELECT * FROM audit_log WHERE 1=1"
            params = []

            if user_id:
                query += " AND user_id = ?"
                params.append(user_id)

            if tenant_id:
                query += " AND tenant_id = ?"
                params.append(tenant_id)

            if event_type:
                query += " AND event_type = ?"
                params.append(event_type.value)

            if resource_type:
                query += " AND resource_type = ?"
                params.append(resource_type)

            if resource_id:
                query += " AND resource_id = ?"
                params.append(resource_id)

            if start_date:
                query += " AND timestamp >= ?"
                params.append(start_date.isoformat())

            if end_date:
                query += " AND timestamp <= ?"
                params.append(end_date.isoformat())

            if severity:
                query += " AND severity = ?"
                params.append(severity.value)

            if success_only is not None:
                query += " AND success = ?"
                params.append(1 if success_only else 0)

            query += " ORDER BY timestamp DESC, rowid DESC LIMIT ? OFFSET ?"
            params.extend([limit, offset])

            cursor.execute(query, params)
            rows = cursor.fetchall()

            columns = [col[0] for col in cursor.description]

            results = []
            for row in rows:
                record = dict(zip(columns, row))

                # Parse JSON fields
                for key in ("details", "old_value", "new_value"):
                    if record[key]:
                        record[key] = json.loads(record[key])

                record['success'] = bool(record['success'])

                results.append(record)

            return results

    def get_failed_calculations(self, days: int = 7) -> List[Dict]:
        """Recent calculations that raised"""
        start_date = datetime.now() - timedelta(days=days)

        return self.query(
            event_type=AuditEventType.TAX_DATA_CALCULATION,
            start_date=start_date,
            success_only=False,
        )


# Global audit logger instance
_audit_logger: Optional[AuditLogger] = None


def get_audit_logger(db_path: Optional[str] = None) -> AuditLogger:
    """
    Get global audit logger instance.

    The database path defaults to ``EngineSettings.audit_db_path``.
    """
    global _audit_logger

    if _audit_logger is None:
        if db_path is None:
            from config.settings import get_settings
            db_path = get_settings().audit_db_path or DEFAULT_DB_PATH
        _audit_logger = AuditLogger(str(db_path))

    return _audit_logger


def reset_audit_logger() -> None:
    """Forget the global instance (tests pointing at a temporary database use this)."""
    global _audit_logger
    _audit_logger = None


def audit_tax_calculation(
    session_id: str,
    calculation_type: str,
    inputs: Dict,
    result: Any,
    calculation_version: str = None,
    user_id: str = None,
    audit_logger: Optional[AuditLogger] = None,
):
    """Audit a tax calculation (tax liability, refund, credits, etc.)"""
    audit_logger = audit_logger or get_audit_logger()

    return audit_logger.log(
        event_type=AuditEventType.TAX_DATA_CALCULATION,
        action=f"calculate_{calculation_type}",
        resource_type="calculation",
        resource_id=session_id,
        user_id=user_id,
        old_value=inputs,
        new_value={"result": result, "type": calculation_type},
        details={
            "calculation_type": calculation_type,
            "calculation_version": calculation_version,
        },
        severity=AuditSeverity.INFO
    )


def get_session_audit_trail(session_id: str, audit_logger: Optional[AuditLogger] = None) -> List[Dict]:
    """
    Get complete audit trail for a tax filing session.

    Returns all audit events related to the session, newest first.
    """
    audit_logger = audit_logger or get_audit_logger()

    return audit_logger.query(
        resource_id=session_id,
        limit=1000
    )


def export_session_audit_report(session_id: str, audit_logger: Optional[AuditLogger] = None) -> Dict:
    """
    Export an audit report for a session.

    Returns a structured report suitable for compliance review.
    """
    audit_logger = audit_logger or get_audit_logger()

    events = audit_logger.query(resource_id=session_id, limit=10000)

    calculations = [e for e in events if e["event_type"] == AuditEventType.TAX_DATA_CALCULATION.value]
    scenarios = [e for e in events if e["event_type"] == AuditEventType.TAX_DATA_SCENARIO.value]
    failures = [e for e in events if not e["success"]]

    return {
        "session_id": session_id,
        "total_events": len(events),
        "summary": {
            "calculations": len(calculations),
            "scenarios": len(scenarios),
            "failures": len(failures),
        },
        "timeline": events,
        "first_event": events[-1] if events else None,
        "last_event": events[0] if events else None,
        "generated_at": datetime.now().isoformat(),
    }
