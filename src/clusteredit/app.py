"""Application bootstrap helpers for the cluster editor."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import os
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, cast

from .services.cluster_api import ClusterApiClient, ClusterRecord
from .services.settings import Settings, SettingsStore
from .ui.bootstrap import EditSession, create_edit_session
from .utils import logging as logging_utils

_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class QtRuntime:
    """Container returned by :func:`create_qapp`."""

    app: Any
    loop: asyncio.AbstractEventLoop


def configure_logging(debug: bool = False, *, force: bool = False) -> None:
    """Configure structured logging for the application."""

    path = logging_utils.setup_logging(debug, force=force)
    _LOGGER.debug("Logging to %s (debug=%s)", path, debug)


def load_settings(
    path: Optional[Path] = None,
    *,
    store: SettingsStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    try:
        return active_store.load(overrides=overrides)
    except (OSError, TypeError, ValueError) as exc:
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        return Settings()


def create_qapp() -> QtRuntime:
    """Create a qasync-powered QApplication instance."""

    from PySide6.QtWidgets import QApplication
    from qasync import QEventLoop

    app = cast(Any, QApplication.instance() or QApplication(sys.argv))
    app.setApplicationName("Cluster Editor")
    loop = QEventLoop(app)
    asyncio.set_event_loop(loop)
    app.aboutToQuit.connect(loop.stop)
    return QtRuntime(app=app, loop=loop)


def build_session(settings: Settings) -> tuple[EditSession, ClusterApiClient]:
    """Wire the edit session to the HTTP cluster endpoints."""

    api = ClusterApiClient(settings)
    session = create_edit_session(
        create_operation=api.add_clusters,
        update_operation=api.update_cluster,
    )
    return session, api


def open_session(session: EditSession, args: argparse.Namespace) -> None:
    """Open in update mode when an existing cluster was named, else create mode."""

    if args.update_id:
        cluster = ClusterRecord.from_payload(
            {"id": args.update_id, "name": args.update_name, "craneUrl": args.update_url}
        )
        session.open_update.execute(cluster)
    else:
        session.open_create.execute()


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point invoked by the `clusteredit` console script."""

    args = _parse_cli_args(argv)
    debug = args.debug or _env_flag("CLUSTEREDIT_DEBUG", default=False)
    configure_logging(debug)

    settings_path = args.settings_path or os.environ.get("CLUSTEREDIT_SETTINGS_PATH")
    resolved_path = Path(settings_path).expanduser() if settings_path else None
    settings_store = SettingsStore(resolved_path)
    overrides: Dict[str, Any] = {}
    if args.base_url:
        overrides["api_base_url"] = args.base_url
    settings = load_settings(resolved_path, store=settings_store, overrides=overrides or None)

    if args.dump_settings:
        print(json.dumps(asdict(settings), indent=2, sort_keys=True))
        return 0

    if settings.debug_logging and not debug:
        configure_logging(True, force=True)

    runtime = create_qapp()
    session, _api = build_session(settings)

    from .ui.presentation.dialogs import EditClusterDialog

    dialog = EditClusterDialog(session.store, session.controller, session.event_bus)
    screen = runtime.app.primaryScreen()
    if screen is not None:
        width = int(screen.availableGeometry().width() * settings.dialog_width_ratio)
        dialog.resize(max(width, 480), dialog.sizeHint().height())
    open_session(session, args)
    dialog.finished.connect(lambda _result: runtime.loop.stop())
    dialog.show()

    loop = runtime.loop
    try:
        loop.run_forever()
    except KeyboardInterrupt:  # pragma: no cover - manual shutdown path
        _LOGGER.info("Shutdown requested by user.")
    finally:
        dialog.teardown()
        _drain_event_loop(loop)
        loop.close()
    return 0


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _drain_event_loop(loop: asyncio.AbstractEventLoop) -> None:
    """Cancel outstanding tasks before closing the loop."""

    if loop.is_closed():
        return

    async def _cleanup() -> None:
        current_task = asyncio.current_task(loop=loop)
        tasks = [task for task in asyncio.all_tasks(loop) if not task.done() and task is not current_task]
        if tasks:
            _LOGGER.debug("Canceling %s pending asyncio task(s) before shutdown.", len(tasks))
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
        with contextlib.suppress(RuntimeError, NotImplementedError):
            await loop.shutdown_asyncgens()

    try:
        loop.run_until_complete(_cleanup())
    except RuntimeError as exc:  # pragma: no cover - loop already stopping
        _LOGGER.debug("Unable to drain asyncio loop: %s", exc)


def _parse_cli_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="clusteredit",
        description="Add Crane clusters, or edit one existing cluster, in a tabbed dialog.",
    )
    parser.add_argument("--settings-path", metavar="PATH", help="Override ~/.clusteredit/settings.json.")
    parser.add_argument("--base-url", metavar="URL", help="Cluster API base URL for this run.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective settings payload and exit.",
    )
    parser.add_argument("--update-id", metavar="ID", help="Edit the existing cluster with this id.")
    parser.add_argument("--update-name", metavar="NAME", help="Current name of the cluster being edited.")
    parser.add_argument("--update-url", metavar="URL", help="Current Crane URL of the cluster being edited.")
    return parser.parse_args(argv)


if __name__ == "__main__":  # pragma: no cover - manual launch
    raise SystemExit(main())
