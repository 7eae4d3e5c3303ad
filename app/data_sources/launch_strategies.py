"""Per-platform strategies for locating and configuring the headless browser."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional, Sequence

from app.data_sources.base import LaunchConfig
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__)

# Sandbox off, GPU off, single process without a zygote: the server runs
# Chromium inside a container with no user namespaces and a small /dev/shm.
BASELINE_ARGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--single-process",
    "--disable-gpu",
)

# Extra flags the bundled headless shell is meant to run with.
BUNDLE_ARGS: tuple[str, ...] = BASELINE_ARGS + (
    "--disable-software-rasterizer",
    "--disable-extensions",
    "--disable-background-networking",
    "--hide-scrollbars",
    "--mute-audio",
    "--no-default-browser-check",
)

DEFAULT_BUNDLE_ROOT = Path.home() / ".cache" / "ms-playwright"

# Playwright's install layouts, headless shell preferred over full Chromium.
BUNDLE_EXECUTABLE_PATTERNS: tuple[str, ...] = (
    "chromium_headless_shell-*/chrome-headless-shell-linux64/chrome-headless-shell",
    "chromium_headless_shell-*/chrome-linux/headless_shell",
    "chromium-*/chrome-linux64/chrome",
    "chromium-*/chrome-linux/chrome",
)

_REVISION_RE = re.compile(r"-(\d+)$")


def _revision(bundle_dir: Path) -> int:
    """Numeric revision from a directory like 'chromium-1148'; 0 if absent."""
    match = _REVISION_RE.search(bundle_dir.name)
    return int(match.group(1)) if match else 0


class BundledChromiumStrategy:
    """Use the Chromium bundle installed by ``playwright install`` (deployment target)."""

    name = "bundled"

    def __init__(
        self,
        bundle_dir: Optional[str] = None,
        *,
        headless: bool = True,
        timeout_ms: int = 30000,
        patterns: Sequence[str] = BUNDLE_EXECUTABLE_PATTERNS,
    ) -> None:
        self.bundle_dir = bundle_dir
        self.headless = headless
        self.timeout_ms = timeout_ms
        self.patterns = tuple(patterns)

    def bundle_root(self) -> Path:
        """Directory holding the browser bundle."""
        if self.bundle_dir:
            return Path(self.bundle_dir)
        env_path = os.getenv("PLAYWRIGHT_BROWSERS_PATH")
        # "0" means browsers live inside the playwright package; let it find them.
        if env_path and env_path != "0":
            return Path(env_path)
        return DEFAULT_BUNDLE_ROOT

    def locate_executable(self) -> Path:
        """Return the newest bundled executable, raising if there is none."""
        root = self.bundle_root()
        if not root.is_dir():
            raise FileNotFoundError(f"Browser bundle directory not found: {root}")
        for pattern in self.patterns:
            candidates = [p for p in root.glob(pattern) if p.is_file()]
            if candidates:
                candidates.sort(key=lambda p: _revision(p.parents[1]), reverse=True)
                return candidates[0]
        raise FileNotFoundError(f"No Chromium executable found under {root}")

    def resolve(self) -> LaunchConfig:
        """Bundle path and arguments, or the launcher's own defaults if the bundle is unusable."""
        try:
            executable = self.locate_executable()
        except Exception as exc:
            logger.warning(
                "Chromium bundle not available; falling back to launcher defaults",
                extra={"error": str(exc)},
            )
            return LaunchConfig(
                executable_path=None,
                arguments=BASELINE_ARGS,
                headless=self.headless,
                timeout_ms=self.timeout_ms,
            )
        logger.debug(f"Resolved bundled Chromium at {executable}")
        return LaunchConfig(
            executable_path=str(executable),
            arguments=BUNDLE_ARGS,
            headless=self.headless,
            timeout_ms=self.timeout_ms,
        )


class LocalChromeStrategy:
    """Use a browser provisioned at a fixed path at build time (developer workstations)."""

    name = "local"

    def __init__(self, executable_path: str, *, headless: bool = True, timeout_ms: int = 30000) -> None:
        self.executable_path = executable_path
        self.headless = headless
        self.timeout_ms = timeout_ms

    def resolve(self) -> LaunchConfig:
        if not Path(self.executable_path).exists():
            logger.warning(f"Local browser not found at {self.executable_path}; launch will likely fail")
        return LaunchConfig(
            executable_path=self.executable_path,
            arguments=BASELINE_ARGS,
            headless=self.headless,
            timeout_ms=self.timeout_ms,
        )
