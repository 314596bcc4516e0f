"""
Static remediation knowledge base and default best-practice targets.

Keys are (category, metric) pairs matching the sub-metrics produced by the
normalizer.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import HIGH, LOW, MEDIUM, BestPracticeTarget, Reference


@dataclass(frozen=True)
class KnowledgeBaseEntry:
    title: str
    remediation: str
    references: tuple[Reference, ...] = field(default_factory=tuple)


KnowledgeBase = dict[tuple[str, str], KnowledgeBaseEntry]


# ---------------------------------------------------------------------------
# Default targets
# ---------------------------------------------------------------------------
DEFAULT_TARGETS: tuple[BestPracticeTarget, ...] = (
    BestPracticeTarget("identity", "mfaAdoption", 95, HIGH),
    BestPracticeTarget("identity", "protectedAdminAccounts", 100, HIGH),
    BestPracticeTarget("identity", "conditionalAccessCoverage", 80, MEDIUM),
    BestPracticeTarget("dataProtection", "activeDlpPolicies", 80, HIGH),
    BestPracticeTarget("endpoint", "deviceCompliance", 90, MEDIUM),
    BestPracticeTarget("endpoint", "defenderStatus", 100, HIGH),
    BestPracticeTarget("cloudApps", "oauthAppSafety", 95, HIGH),
    BestPracticeTarget("informationProtection", "aipLabelUsage", 70, MEDIUM),
    BestPracticeTarget("threatProtection", "alertResolutionRate", 85, HIGH),
    BestPracticeTarget("secureScore", "secureScorePercentage", 80, MEDIUM),
    BestPracticeTarget("license", "utilizationRate", 90, LOW),
)


# ---------------------------------------------------------------------------
# Remediation knowledge base
# ---------------------------------------------------------------------------
DEFAULT_KNOWLEDGE_BASE: KnowledgeBase = {
    ("identity", "mfaAdoption"): KnowledgeBaseEntry(
        title="Enforce Multi-Factor Authentication (MFA)",
        remediation=(
            "Implement conditional access policies requiring MFA for all users. "
            "Consider using risk-based authentication policies."
        ),
        references=(
            Reference(
                "Planning a cloud-based Azure AD Multi-Factor Authentication deployment",
                "https://docs.microsoft.com/en-us/azure/active-directory/authentication/howto-mfa-getstarted",
            ),
        ),
    ),
    ("identity", "protectedAdminAccounts"): KnowledgeBaseEntry(
        title="Secure Privileged Access",
        remediation=(
            "Enable Privileged Identity Management (PIM) for all admin accounts "
            "and implement just-in-time access."
        ),
        references=(
            Reference(
                "Securing privileged access for hybrid and cloud deployments in Azure AD",
                "https://docs.microsoft.com/en-us/azure/active-directory/roles/security-planning",
            ),
        ),
    ),
    ("identity", "conditionalAccessCoverage"): KnowledgeBaseEntry(
        title="Implement Conditional Access Policies",
        remediation=(
            "Create policies based on user risk, sign-in risk, device compliance "
            "and location, and move report-only policies to enforced."
        ),
        references=(
            Reference(
                "Conditional Access documentation",
                "https://docs.microsoft.com/en-us/azure/active-directory/conditional-access/",
            ),
        ),
    ),
    ("dataProtection", "activeDlpPolicies"): KnowledgeBaseEntry(
        title="Activate Data Loss Prevention (DLP) Policies",
        remediation=(
            "Review and activate Data Loss Prevention policies across all workloads "
            "including Exchange, SharePoint, and OneDrive."
        ),
        references=(
            Reference(
                "Learn about data loss prevention",
                "https://docs.microsoft.com/en-us/microsoft-365/compliance/dlp-learn-about-dlp",
            ),
        ),
    ),
    ("endpoint", "deviceCompliance"): KnowledgeBaseEntry(
        title="Enforce Device Compliance Policies",
        remediation=(
            "Enforce device compliance policies and implement automated remediation "
            "actions for non-compliant devices."
        ),
        references=(
            Reference(
                "Use compliance policies to set rules for devices you manage with Intune",
                "https://docs.microsoft.com/en-us/mem/intune/protect/device-compliance-get-started",
            ),
        ),
    ),
    ("endpoint", "defenderStatus"): KnowledgeBaseEntry(
        title="Enable Microsoft Defender for Endpoint",
        remediation=(
            "Enable Microsoft Defender for Endpoint across all devices and ensure "
            "automatic updates are configured."
        ),
        references=(
            Reference(
                "Deploy Microsoft Defender for Endpoint",
                "https://docs.microsoft.com/en-us/microsoft-365/security/defender-endpoint/deployment-phases",
            ),
        ),
    ),
    ("cloudApps", "oauthAppSafety"): KnowledgeBaseEntry(
        title="Reduce High-Risk OAuth Applications",
        remediation=(
            "Review and revoke permissions for high-risk OAuth applications. "
            "Implement app governance policies."
        ),
        references=(
            Reference(
                "Manage app access with Microsoft Cloud App Security",
                "https://docs.microsoft.com/en-us/cloud-app-security/manage-app-permissions",
            ),
        ),
    ),
    ("informationProtection", "aipLabelUsage"): KnowledgeBaseEntry(
        title="Increase Sensitivity Label Coverage",
        remediation=(
            "Deploy sensitivity labels across the organization and configure "
            "auto-labeling policies for sensitive content."
        ),
        references=(
            Reference(
                "Learn about sensitivity labels",
                "https://docs.microsoft.com/en-us/microsoft-365/compliance/sensitivity-labels",
            ),
        ),
    ),
    ("threatProtection", "alertResolutionRate"): KnowledgeBaseEntry(
        title="Improve Security Alert Resolution",
        remediation=(
            "Implement an incident response plan and establish SLAs for alert "
            "resolution. Consider security automation."
        ),
        references=(
            Reference(
                "Security operations capabilities in Microsoft 365 Defender",
                "https://docs.microsoft.com/en-us/microsoft-365/security/defender/security-operations",
            ),
        ),
    ),
    ("secureScore", "secureScorePercentage"): KnowledgeBaseEntry(
        title="Raise Microsoft Secure Score",
        remediation=(
            "Work through the not-implemented Secure Score improvement actions, "
            "starting with the highest-point identity and device controls."
        ),
        references=(
            Reference(
                "Microsoft Secure Score",
                "https://docs.microsoft.com/en-us/microsoft-365/security/defender/microsoft-secure-score",
            ),
        ),
    ),
    ("license", "utilizationRate"): KnowledgeBaseEntry(
        title="Optimize License Utilization",
        remediation=(
            "Reclaim unassigned licenses or assign them to users who need the "
            "included security features."
        ),
    ),
}
