"""Static metadata extraction for Android APK files."""

__version__ = "0.1.0"

from apklens.core.parser import ApkParser, parse_apk  # noqa: E402
from apklens.models.apk import AnalysisResult  # noqa: E402

__all__ = ["AnalysisResult", "ApkParser", "parse_apk", "__version__"]
