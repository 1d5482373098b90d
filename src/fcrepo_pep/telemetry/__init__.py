"""Telemetry: system logging and enforcement audit logging.

Structure:
    system/   - Singleton operational logger (stderr + optional system.jsonl)
    audit/    - EnforcementAuditLogger (audit/enforcement.jsonl)
    models/   - Pydantic audit event models

Import from subpackages directly:
    from fcrepo_pep.telemetry.system import get_system_logger
"""

__all__: list[str] = []
