import json
import logging
import sys
from pathlib import Path

from PyQt5.QtWidgets import QApplication, QFileDialog, QMessageBox

from BF_Libs.CompositingLib.image_loader import load_image_file
from BF_Libs.EditorLib.placeholder_editor_window import PlaceholderEditorWindow
from BF_Libs.errors import CompositingError

logger = logging.getLogger(__name__)


def _pick_banner() -> str:
    path, _ = QFileDialog.getOpenFileName(
        None,
        "Select Banner",
        str(Path.cwd()),
        "Images (*.png *.jpg *.jpeg *.webp *.bmp)",
    )
    return path


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app = QApplication.instance() or QApplication(sys.argv)

    banner_path = sys.argv[1] if len(sys.argv) > 1 else _pick_banner()
    if not banner_path:
        sys.exit(0)

    try:
        banner = load_image_file(banner_path)
    except (FileNotFoundError, CompositingError) as e:
        QMessageBox.critical(None, "Banner Frame", str(e))
        sys.exit(1)

    window = PlaceholderEditorWindow(banner)
    window.regionChanged.connect(lambda data: logger.debug(f"Placeholder: {data}"))
    window.show()
    status = app.exec_()

    # The persistence collaborator reads the final placeholder from stdout
    print(json.dumps(window.current_region()))
    sys.exit(status)


if __name__ == "__main__":
    main()
