"""Typed exception hierarchy for apklens."""


class ApkLensError(Exception):
    """Base exception for all apklens errors."""

    pass


class ApkReadError(ApkLensError):
    """Raised when the APK file cannot be found, opened, or read."""

    pass


class InvalidArchiveError(ApkLensError):
    """Raised when the APK is not a valid ZIP container."""

    pass


class ManifestNotFoundError(ApkLensError):
    """Raised when the archive has no AndroidManifest.xml entry."""

    def __init__(self, apk_path: str):
        self.apk_path = apk_path
        super().__init__(f"No AndroidManifest.xml entry in archive: {apk_path}")


class ToolNotFoundError(ApkLensError):
    """Raised when a required external tool is not installed."""

    def __init__(self, tool: str, install_hint: str | None = None):
        self.tool = tool
        self.install_hint = install_hint
        message = f"Required tool not found: {tool}"
        if install_hint:
            message += f"\nInstall: {install_hint}"
        super().__init__(message)


class DecoderNotFoundError(ToolNotFoundError):
    """Raised when no usable aapt2 decoder could be located."""

    def __init__(self, rejected: list[str] | None = None):
        self.rejected = rejected or []
        hint = (
            "Set APKLENS_AAPT2, configure ~/.apklens/config.json (aapt2_path), "
            "or install Android SDK build-tools"
        )
        if self.rejected:
            hint += f"\nRejected placeholders: {', '.join(self.rejected)}"
        super().__init__("aapt2", hint)


class ProcessError(ApkLensError):
    """Raised when a subprocess command fails."""

    def __init__(self, command: list[str], returncode: int, stderr: str):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        cmd_str = " ".join(command)
        super().__init__(f"Command failed (exit {returncode}): {cmd_str}\n{stderr}")
