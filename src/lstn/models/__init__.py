"""Data models for lstn."""

from .context import AnalysisContext, GitContext, GitIdentity, GitRemote, GitURL, OSInfo, VersionInfo
from .reporting import ReportType
from .requests import AnalysisRequest, VerdictsRequest
from .verdicts import (
    SEVERITIES,
    SEVERITY_HIGH,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    UNKNOWN_CODE,
    Package,
    Problem,
    Response,
    Verdict,
    all_verdicts,
    decode_response,
    dump_response,
)

__all__ = [
    "SEVERITIES",
    "SEVERITY_HIGH",
    "SEVERITY_LOW",
    "SEVERITY_MEDIUM",
    "UNKNOWN_CODE",
    "AnalysisContext",
    "AnalysisRequest",
    "GitContext",
    "GitIdentity",
    "GitRemote",
    "GitURL",
    "OSInfo",
    "Package",
    "Problem",
    "ReportType",
    "Response",
    "VerdictsRequest",
    "Verdict",
    "VersionInfo",
    "all_verdicts",
    "decode_response",
    "dump_response",
]
