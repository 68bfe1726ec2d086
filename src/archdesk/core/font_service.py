"""Core font service: download, unpack and register a Nerd Font."""

from __future__ import annotations

from pathlib import Path

from archdesk.core.context import ServiceContext
from archdesk.core.models import InstallOutcome, ReleaseAsset
from archdesk.exceptions import CommandFailedError, DownloadError, ExtractionError
from archdesk.utils.text import indent, unique_sorted

MESLO = ReleaseAsset(
    name="Meslo",
    version="v3.4.0",
    url="https://github.com/ryanoasis/nerd-fonts/releases/download/v3.4.0/Meslo.zip",
    filename="Meslo.zip",
)

REQUIRED_TOOLS: tuple[str, ...] = ("wget", "7z", "fc-cache", "fc-list")


def font_families(fc_list_output: str, needle: str) -> list[str]:
    """Unique family names from ``fc-list`` lines mentioning *needle*.

    ``fc-list`` prints ``path: Family,Alias:style=...``; the family is
    the second colon-separated field.
    """
    families = []
    for line in fc_list_output.splitlines():
        if needle.lower() not in line.lower():
            continue
        fields = line.split(":")
        if len(fields) > 1:
            families.append(fields[1])
    return unique_sorted(families)


class FontService:
    """Installs :data:`MESLO` (or another release asset) for the current user."""

    def __init__(self, context: ServiceContext, asset: ReleaseAsset = MESLO) -> None:
        self._ctx = context
        self._asset = asset

    @property
    def fonts_dir(self) -> Path:
        return self._ctx.settings.fonts_dir

    def existing_files(self) -> list[Path]:
        return self._ctx.files.find(
            self.fonts_dir, f"*{self._asset.name}*", recursive=True, files_only=True
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _ensure_fonts_dir(self) -> None:
        if self._ctx.files.is_dir(self.fonts_dir):
            self._ctx.reporter.info(f"Fonts directory already exists: {self.fonts_dir}")
            return
        self._ctx.reporter.info(f"Creating fonts directory: {self.fonts_dir}")
        self._ctx.files.make_dirs(self.fonts_dir)

    def _replace_existing(self) -> bool:
        """Handle earlier installs; ``False`` means the user kept them."""
        reporter = self._ctx.reporter
        name = self._asset.name
        reporter.info(f"Checking for existing {name} fonts...")
        existing = self.existing_files()
        if not existing:
            reporter.info(f"No existing {name} fonts found")
            return True

        reporter.warning(f"{name} fonts already found in {self.fonts_dir}")
        reporter.info(f"Existing {name} fonts:")
        reporter.detail(indent("\n".join(str(path) for path in existing)))
        if not self._ctx.confirmer.confirm("Do you want to reinstall/update?"):
            reporter.info("Installation cancelled by user")
            return False

        reporter.info(f"Removing existing {name} fonts...")
        for path in existing:
            self._ctx.files.remove(path)
        reporter.success("Existing fonts removed")
        return True

    def _download(self) -> Path:
        archive = self.fonts_dir / self._asset.filename
        if self._ctx.files.exists(archive):
            self._ctx.reporter.warning(f"Existing {archive.name} found, removing...")
            self._ctx.files.remove(archive)

        self._ctx.reporter.info(f"Downloading {self._asset.name} Nerd Font...")
        try:
            self._ctx.runner.run(
                ["wget", "-q", "--show-progress", "-O", str(archive), self._asset.url]
            )
        except CommandFailedError as exc:
            raise DownloadError(
                "Failed to download font",
                hint=f"Check your network connection. URL: {self._asset.url}",
            ) from exc
        self._ctx.reporter.success("Download completed")
        return archive

    def _extract(self, archive: Path) -> None:
        self._ctx.reporter.info("Extracting font files...")
        try:
            self._ctx.runner.run(["7z", "x", archive.name, "-y"], capture=True, cwd=self.fonts_dir)
        except CommandFailedError as exc:
            raise ExtractionError("Failed to extract font files") from exc
        self._ctx.reporter.success("Font files extracted")

        self._ctx.reporter.info("Cleaning up...")
        self._ctx.files.remove(archive)
        self._ctx.reporter.success("Zip file removed")

    def _refresh_cache(self) -> None:
        self._ctx.reporter.info("Refreshing font cache...")
        try:
            self._ctx.runner.run(["fc-cache", "-fv"], capture=True)
        except CommandFailedError as exc:
            raise CommandFailedError(
                exc.argv,
                exc.returncode,
                stderr=exc.stderr,
                message="Failed to refresh font cache",
            ) from exc
        self._ctx.reporter.success("Font cache refreshed")

    def verify(self) -> list[str]:
        """Return the registered family names; warn when there are none."""
        reporter = self._ctx.reporter
        name = self._asset.name
        reporter.info("Verifying installation...")
        listing = self._ctx.runner.run(["fc-list"], check=False, capture=True).stdout
        families = font_families(listing, name)
        if families:
            reporter.success(f"{name} Nerd Font successfully installed!")
            reporter.info(f"Available {name} fonts:")
            reporter.detail(indent("\n".join(families)))
        else:
            reporter.warning(
                "Font may not be properly installed. Try running 'fc-cache -fv' manually."
            )
        return families

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def install(self) -> InstallOutcome:
        self._ensure_fonts_dir()
        if not self._replace_existing():
            return InstallOutcome.CANCELLED

        archive = self._download()
        self._extract(archive)
        self._refresh_cache()
        self.verify()

        reporter = self._ctx.reporter
        reporter.success("Installation completed successfully!")
        reporter.info(
            f"You can now use {self._asset.name} Nerd Font in your terminal and applications."
        )
        reporter.info("You may need to restart your terminal or applications to see the new font.")
        return InstallOutcome.INSTALLED
