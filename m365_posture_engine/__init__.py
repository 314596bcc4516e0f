"""
M365 Security Posture Engine
============================
Scores a Microsoft 365 tenant's security posture from collected telemetry,
compares it against best-practice targets and derives ranked remediation
recommendations.

The engine performs no I/O against the tenant: raw facts are supplied by an
external collector and assessments are persisted through AssessmentStore.
"""

__version__ = "1.0.0"
