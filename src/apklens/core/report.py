"""Standalone HTML report for an AnalysisResult."""

import jinja2

from apklens.models.apk import AnalysisResult, SecurityPosture

TEMPLATE_NAME = "report.html.j2"

_SECURITY_LABELS: dict[str, str] = {
    "uses_clear_text_traffic": "Cleartext traffic",
    "debuggable": "Debuggable",
    "backup_allowed": "Backup allowed",
    "allow_backup": "allowBackup explicitly true",
    "uses_permission_flags": "Declares protection levels",
    "has_network_security_config": "Network security config",
    "prevents_screenshots": "Prevents screenshots",
    "uses_encryption": "Encryption flag",
}


def _dash(value: object | None) -> object:
    return "-" if value is None else value


jinja_env = jinja2.Environment(
    loader=jinja2.PackageLoader("apklens", "templates"),
    autoescape=True,
)
jinja_env.filters["dash"] = _dash


def _security_rows(security: SecurityPosture | None) -> list[tuple[str, object]]:
    if security is None:
        return []
    return [
        (label, getattr(security, field)) for field, label in _SECURITY_LABELS.items()
    ]


def render_html_report(result: AnalysisResult) -> str:
    """Render a self-contained HTML page describing the analysis."""
    size_mb = None
    if result.file_info is not None:
        size_mb = f"{result.file_info.file_size / 1024 / 1024:.2f} MB"

    return jinja_env.get_template(TEMPLATE_NAME).render(
        result=result,
        package=result.package,
        size_mb=size_mb,
        security_rows=_security_rows(result.security),
    )
