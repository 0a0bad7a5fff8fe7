from io import BytesIO
from typing import Any, Dict, Optional

from PyQt5.QtCore import QRectF, Qt, pyqtSignal
from PyQt5.QtGui import QColor, QPainter, QPen, QPixmap
from PyQt5.QtWidgets import (
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QRadioButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from BF_Libs.constants import (
    PRESET_LARGE_FRACTION,
    PRESET_MEDIUM_FRACTION,
    PRESET_SMALL_FRACTION,
    SCALE_DOWN_FACTOR,
    SCALE_UP_FACTOR,
    SHAPE_CIRCLE,
    SHAPE_RECTANGLE,
)
from BF_Libs.CompositingLib.image_loader import decode_image
from BF_Libs.EditorLib.placeholder_editor import PlaceholderEditor
from BF_Libs.GeometryLib.placeholder_region import PlaceholderRegion

PLACEHOLDER_OUTLINE_COLOR = "#3b82f6"
PLACEHOLDER_FILL_COLOR = QColor(59, 130, 246, 60)


class PlaceholderPreview(QLabel):
    """Banner preview that paints the placeholder and forwards mouse events."""

    def __init__(self, editor: PlaceholderEditor, banner: Any, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.editor = editor
        width, height = editor.display_size
        self.setFixedSize(int(round(width)), int(round(height)))
        self.setMouseTracking(True)
        self._set_banner(banner)

    def _set_banner(self, banner: Any) -> None:
        buffer = BytesIO()
        banner.convert("RGB").save(buffer, format="PNG")
        pixmap = QPixmap()
        if not pixmap.loadFromData(buffer.getvalue(), "PNG"):
            self.setText("Preview failed")
            return
        self.setPixmap(pixmap.scaled(
            self.size(),
            Qt.AspectRatioMode.IgnoreAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        ))

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        x, y, width, height = self.editor.display_rect()
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.setPen(QPen(QColor(PLACEHOLDER_OUTLINE_COLOR), 2, Qt.DashLine))
        painter.setBrush(PLACEHOLDER_FILL_COLOR)
        if self.editor.region.is_circle:
            # Inscribed circle, same policy as the compositor clip
            side = min(width, height)
            painter.drawEllipse(QRectF(
                x + (width - side) / 2.0, y + (height - side) / 2.0, side, side
            ))
        else:
            painter.drawRect(QRectF(x, y, width, height))
        painter.end()

    def mousePressEvent(self, event) -> None:
        if event.button() == Qt.LeftButton:
            self.editor.pointer_down((event.x(), event.y()))

    def mouseMoveEvent(self, event) -> None:
        self.editor.pointer_move((event.x(), event.y()))

    def mouseReleaseEvent(self, event) -> None:
        self.editor.pointer_up()

    def leaveEvent(self, event) -> None:
        self.editor.pointer_leave()


class PlaceholderEditorWindow(QWidget):
    """Operator window for positioning the photo placeholder on a banner."""

    regionChanged = pyqtSignal(dict)

    def __init__(
        self,
        banner: Any,
        region: Optional[PlaceholderRegion] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Banner Frame - Placeholder Editor")
        banner = decode_image(banner, label="banner")
        self.editor = PlaceholderEditor(banner, region=region)

        self._build_ui(banner)
        self._connect_signals()
        self.editor.add_listener(self._on_region_changed)
        self._sync_controls()

    def _build_ui(self, banner: Any) -> None:
        root = QHBoxLayout(self)
        controls_col = QVBoxLayout()

        self.preview = PlaceholderPreview(self.editor, banner, self)

        source_w, source_h = self.editor.source_size
        self.spin_x = QSpinBox()
        self.spin_y = QSpinBox()
        self.spin_width = QSpinBox()
        self.spin_height = QSpinBox()
        for spin, maximum in (
            (self.spin_x, source_w),
            (self.spin_y, source_h),
            (self.spin_width, source_w),
            (self.spin_height, source_h),
        ):
            spin.setRange(0, maximum)
            spin.setKeyboardTracking(False)

        form = QFormLayout()
        form.addRow("X", self.spin_x)
        form.addRow("Y", self.spin_y)
        form.addRow("Width", self.spin_width)
        form.addRow("Height", self.spin_height)

        self.radio_rectangle = QRadioButton("Rectangle")
        self.radio_circle = QRadioButton("Circle")

        self.btn_scale_down = QPushButton(f"Scale Down ({SCALE_DOWN_FACTOR}x)")
        self.btn_scale_up = QPushButton(f"Scale Up ({SCALE_UP_FACTOR}x)")
        self.btn_small = QPushButton(f"Small ({int(PRESET_SMALL_FRACTION * 100)}%)")
        self.btn_medium = QPushButton(f"Medium ({int(PRESET_MEDIUM_FRACTION * 100)}%)")
        self.btn_large = QPushButton(f"Large ({int(PRESET_LARGE_FRACTION * 100)}%)")
        self.btn_reset = QPushButton("Reset to Center")

        controls_col.addLayout(form)
        controls_col.addWidget(QLabel("Shape"))
        controls_col.addWidget(self.radio_rectangle)
        controls_col.addWidget(self.radio_circle)
        controls_col.addWidget(self.btn_scale_down)
        controls_col.addWidget(self.btn_scale_up)
        controls_col.addWidget(QLabel("Quick Sizes"))
        controls_col.addWidget(self.btn_small)
        controls_col.addWidget(self.btn_medium)
        controls_col.addWidget(self.btn_large)
        controls_col.addWidget(self.btn_reset)
        controls_col.addStretch(1)

        root.addLayout(controls_col, stretch=1)
        root.addWidget(self.preview, stretch=2)

    def _connect_signals(self) -> None:
        self.spin_x.valueChanged.connect(lambda value: self._edit(self.editor.set_x, value))
        self.spin_y.valueChanged.connect(lambda value: self._edit(self.editor.set_y, value))
        self.spin_width.valueChanged.connect(lambda value: self._edit(self.editor.set_width, value))
        self.spin_height.valueChanged.connect(lambda value: self._edit(self.editor.set_height, value))
        self.radio_rectangle.toggled.connect(
            lambda checked: checked and self.editor.set_shape(SHAPE_RECTANGLE)
        )
        self.radio_circle.toggled.connect(
            lambda checked: checked and self.editor.set_shape(SHAPE_CIRCLE)
        )
        self.btn_scale_down.clicked.connect(lambda: self.editor.scale_by(SCALE_DOWN_FACTOR))
        self.btn_scale_up.clicked.connect(lambda: self.editor.scale_by(SCALE_UP_FACTOR))
        self.btn_small.clicked.connect(lambda: self.editor.apply_preset(PRESET_SMALL_FRACTION))
        self.btn_medium.clicked.connect(lambda: self.editor.apply_preset(PRESET_MEDIUM_FRACTION))
        self.btn_large.clicked.connect(lambda: self.editor.apply_preset(PRESET_LARGE_FRACTION))
        self.btn_reset.clicked.connect(self.editor.reset_to_center)

    def current_region(self) -> Dict[str, Any]:
        return self.editor.to_dict()

    def _edit(self, setter, value: int) -> None:
        # A clamped edit can leave the region unchanged; restore the clamped value
        if not setter(value):
            self._sync_controls()

    def _on_region_changed(self, region: PlaceholderRegion) -> None:
        self._sync_controls()
        self.preview.update()
        self.regionChanged.emit(self.editor.to_dict())

    def _sync_controls(self) -> None:
        region = self.editor.region
        widgets = (
            self.spin_x, self.spin_y, self.spin_width, self.spin_height,
            self.radio_rectangle, self.radio_circle,
        )
        for widget in widgets:
            widget.blockSignals(True)
        self.spin_x.setValue(region.x)
        self.spin_y.setValue(region.y)
        self.spin_width.setValue(region.width)
        self.spin_height.setValue(region.height)
        # Auto-exclusive radios: checking one unchecks the other
        (self.radio_circle if region.is_circle else self.radio_rectangle).setChecked(True)
        for widget in widgets:
            widget.blockSignals(False)
