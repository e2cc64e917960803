# -*- coding: utf-8 -*-
"""MediaStudio entrypoint.

Intentionally minimal:
- dependency pre-check
- QApplication creation
- process bootstrap (paths, logging, crash hooks)
- startup pass; a fatal outcome is shown and the process exits
"""
import sys

try:
    from PyQt5.QtWidgets import QMessageBox
except ImportError:  # pragma: no cover - optional dependency pre-check
    QMessageBox = None


def _show_missing_deps(message: str) -> None:
    if QMessageBox is None:
        print(message, file=sys.stderr)
        return
    from PyQt5.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])  # noqa: F841
    QMessageBox.critical(None, "MediaStudio - Missing dependencies", message)


def main() -> None:
    from app.deps import ensure_runtime_deps

    try:
        ensure_runtime_deps()
    except RuntimeError as exc:
        _show_missing_deps(str(exc))
        sys.exit(1)

    from PyQt5.QtWidgets import QApplication, QMessageBox

    from app.bootstrap import BootstrapOrchestrator, Collaborators, bootstrap
    from app.cli import parse_args
    from infra.probes import QtDisplayProbe, StaticEncoderProbe
    from infra.settings import repair_user_space
    from services.module_loader import PythonModuleLoader
    from services.pipelines import HeadlessAudioPipeline, HeadlessVideoPipeline
    from studio.version import get_version

    options, ns = parse_args(sys.argv[1:])
    bootstrap(options)

    app = QApplication(sys.argv)

    # Installer shortcuts / maintenance commands
    if ns.repair:
        repair_user_space()
        QMessageBox.information(None, "MediaStudio - Repair", "The global configuration was reset.")
        return

    encoders = StaticEncoderProbe(["x264", "ffmpeg_aac"])
    collaborators = Collaborators(
        display=QtDisplayProbe(),
        encoders=encoders,
        video=HeadlessVideoPipeline(),
        audio=HeadlessAudioPipeline(),
        modules=PythonModuleLoader(),
    )
    outcome = BootstrapOrchestrator(collaborators, options=options, version=get_version()).run()
    if not outcome.ok:
        QMessageBox.critical(None, "MediaStudio - Startup failed", outcome.reason)
        sys.exit(1)

    if outcome.failed_modules:
        QMessageBox.warning(
            None,
            "MediaStudio - Modules",
            "The following modules failed to load:\n\n" + "\n".join(outcome.failed_modules),
        )
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
