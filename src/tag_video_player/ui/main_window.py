from __future__ import annotations

import math

from PySide6.QtCore import Qt, QTimer, QUrl
from PySide6.QtGui import QAction, QFont
from PySide6.QtMultimedia import QAudioOutput, QMediaMetaData, QMediaPlayer
from PySide6.QtMultimediaWidgets import QVideoWidget
from PySide6.QtWidgets import (
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QSizePolicy,
    QStatusBar,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from ..core.drop_paths import (
    VIDEO_EXTENSIONS,
    derive_name_from_path,
    is_video_file,
    pick_dropped_path,
    temp_tag_path,
)
from ..core.editor_state import EditorMode, TagEditorState
from ..core.models import TagValidationError
from ..core.session import TagSession
from ..core.tag_store import active_tag_index, find_tag_index, resolve_tag_path
from ..utils.config import load_config
from ..utils.debug import debug_print
from ..utils.timecode import to_timestamp, to_timestamp_ms
from .timeline_slider import TagMarker, TimelineSlider


class TagEditorPanel(QWidget):
    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.heading = QLabel("New tag")
        self.time_edit = QLineEdit()
        self.time_edit.setPlaceholderText("HH:MM:SS.mmm, MM:SS or seconds")
        self.title_edit = QLineEdit()
        self.title_edit.setPlaceholderText("Title")
        self.description_edit = QPlainTextEdit()
        self.description_edit.setPlaceholderText("Description (optional)")
        self.description_edit.setFixedHeight(70)
        self.save_button = QPushButton("Save")
        self.cancel_button = QPushButton("Cancel")

        form = QFormLayout()
        form.addRow("Time", self.time_edit)
        form.addRow("Title", self.title_edit)
        form.addRow("Description", self.description_edit)

        buttons = QHBoxLayout()
        buttons.addStretch()
        buttons.addWidget(self.cancel_button)
        buttons.addWidget(self.save_button)

        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.heading)
        layout.addLayout(form)
        layout.addLayout(buttons)
        self.setLayout(layout)

    def fill(self, heading: str, time: float, title: str, description: str) -> None:
        self.heading.setText(heading)
        self.time_edit.setText(to_timestamp_ms(time))
        self.title_edit.setText(title)
        self.description_edit.setPlainText(description)

    def values(self) -> tuple[str, str, str]:
        return (
            self.title_edit.text(),
            self.description_edit.toPlainText(),
            self.time_edit.text(),
        )


class VideoArea(QWidget):
    """Video surface that accepts dropped files and hands them to the main window."""

    def __init__(self, window: "MainWindow") -> None:
        super().__init__(window)
        self._window = window
        self.setAcceptDrops(True)
        self.video_widget = QVideoWidget(self)
        self.placeholder = QLabel("Open a video or drop one here")
        self.placeholder.setAlignment(Qt.AlignCenter)
        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.placeholder)
        layout.addWidget(self.video_widget)
        self.setLayout(layout)
        self.video_widget.hide()
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)

    def show_video(self) -> None:
        self.placeholder.hide()
        self.video_widget.show()

    def dragEnterEvent(self, event) -> None:
        mime = event.mimeData()
        if mime.hasUrls() or mime.hasText():
            event.acceptProposedAction()
            self.setStyleSheet("background-color: rgba(102, 126, 234, 0.2);")

    def dragMoveEvent(self, event) -> None:
        event.acceptProposedAction()

    def dragLeaveEvent(self, event) -> None:
        self.setStyleSheet("")

    def dropEvent(self, event) -> None:
        self.setStyleSheet("")
        if self._window.handle_drop(event.mimeData()):
            event.acceptProposedAction()


class MainWindow(QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Tag Video Player")
        self.resize(1200, 800)
        self.setMinimumSize(800, 600)

        self.config = load_config()
        self.hotkeys = self.config.get("hotkeys", {})
        self.colors = self.config.get("colors", {})
        self.timeline_config = self.config.get("timeline", {})
        self.audio_config = self.config.get("audio", {})
        self.scrub_config = self.config.get("scrub", {})

        self.session = TagSession()
        self.editor = TagEditorState()
        self.active_tag: int | None = None

        self.player = QMediaPlayer(self)
        self.audio = QAudioOutput(self)
        self.audio.setMuted(bool(self.audio_config.get("default_muted", False)))
        self.audio.setVolume(float(self.audio_config.get("volume", 0.8)))
        self.player.setAudioOutput(self.audio)
        self.video_area = VideoArea(self)
        self.player.setVideoOutput(self.video_area.video_widget)

        self.position_slider = TimelineSlider(Qt.Horizontal)
        self.position_slider.setEnabled(False)
        self.position_label = QLabel("00:00 / 00:00")

        self.tag_list = QListWidget()
        self.tag_list.setWordWrap(True)
        self.add_tag_button = QPushButton("Add tag")
        self.clear_tags_button = QPushButton("Clear tags")
        self.edit_tag_button = QPushButton("Edit")
        self.delete_tag_button = QPushButton("Delete")
        self.add_tag_button.clicked.connect(self._create_tag)
        self.clear_tags_button.clicked.connect(self._clear_tags)
        self.edit_tag_button.clicked.connect(self._edit_selected_tag)
        self.delete_tag_button.clicked.connect(self._delete_selected_tag)
        self.editor_panel = TagEditorPanel(self)
        self.editor_panel.hide()

        self._build_ui()
        self._build_actions()
        self._connect_signals()
        self._apply_timeline_config()
        self._refresh_tags()

    # UI setup -----------------------------------------------------------------
    def _build_ui(self) -> None:
        left_layout = QVBoxLayout()
        left_layout.addWidget(self.video_area, 6)
        left_layout.addWidget(self.position_slider, 0)
        left_layout.addWidget(self.position_label, 0)

        right_layout = QVBoxLayout()
        right_layout.addWidget(QLabel("Tags"))
        right_layout.addWidget(self.tag_list, 1)
        tag_buttons = QHBoxLayout()
        tag_buttons.addWidget(self.edit_tag_button)
        tag_buttons.addWidget(self.delete_tag_button)
        right_layout.addLayout(tag_buttons)
        right_layout.addWidget(self.editor_panel)
        list_buttons = QHBoxLayout()
        list_buttons.addWidget(self.add_tag_button)
        list_buttons.addWidget(self.clear_tags_button)
        right_layout.addLayout(list_buttons)

        main_layout = QHBoxLayout()
        main_layout.addLayout(left_layout, 3)
        main_layout.addLayout(right_layout, 1)

        central = QWidget()
        central.setLayout(main_layout)
        self.setCentralWidget(central)
        self.setStatusBar(QStatusBar(self))

    def _build_actions(self) -> None:
        toolbar = QToolBar("Main")
        self.addToolBar(toolbar)

        open_action = QAction("Open Video", self, triggered=self._open_video)
        quit_action = QAction("Quit", self, triggered=self.close)
        add_action = QAction("Add Tag", self, triggered=self._create_tag)
        clear_action = QAction("Clear Tags", self, triggered=self._clear_tags)
        save_action = QAction("Save Tag", self, triggered=self._save_current_tag)
        play_action = QAction("Play/Pause", self, triggered=self._toggle_play)
        self.mute_action = QAction("Mute Audio", self, checkable=True, triggered=self._toggle_mute)
        self.mute_action.setChecked(self.audio.isMuted())
        scrub_back_action = QAction("Scrub Back", self, triggered=lambda: self._scrub_seconds(-1))
        scrub_forward_action = QAction("Scrub Forward", self, triggered=lambda: self._scrub_seconds(1))
        scrub_frame_back_action = QAction(
            "Step Frame Back", self, triggered=lambda: self._scrub_frames(-1)
        )
        scrub_frame_forward_action = QAction(
            "Step Frame Forward", self, triggered=lambda: self._scrub_frames(1)
        )

        action_map = {
            "open_video": open_action,
            "quit": quit_action,
            "add_tag": add_action,
            "clear_tags": clear_action,
            "save_tag": save_action,
            "play_pause": play_action,
            "mute_audio": self.mute_action,
            "scrub_back": scrub_back_action,
            "scrub_forward": scrub_forward_action,
            "scrub_frame_back": scrub_frame_back_action,
            "scrub_frame_forward": scrub_frame_forward_action,
        }
        for key, action in action_map.items():
            shortcut = self.hotkeys.get(key)
            if shortcut:
                action.setShortcut(shortcut)
                action.setToolTip(f"{action.text()} ({shortcut})")

        file_menu = self.menuBar().addMenu("File")
        file_menu.addAction(open_action)
        file_menu.addSeparator()
        file_menu.addAction(quit_action)

        for action in [
            save_action,
            scrub_back_action,
            scrub_forward_action,
            scrub_frame_back_action,
            scrub_frame_forward_action,
        ]:
            action.setShortcutContext(Qt.WindowShortcut)
            self.addAction(action)

        for action in [open_action, play_action, self.mute_action, add_action, clear_action]:
            toolbar.addAction(action)

    def _connect_signals(self) -> None:
        self.tag_list.itemClicked.connect(self._on_tag_clicked)
        self.tag_list.itemDoubleClicked.connect(lambda _item: self._edit_selected_tag())
        self.player.positionChanged.connect(self._on_position_changed)
        self.player.durationChanged.connect(self._on_duration_changed)
        self.position_slider.sliderMoved.connect(self.player.setPosition)
        self.editor_panel.save_button.clicked.connect(self._save_current_tag)
        self.editor_panel.cancel_button.clicked.connect(self._cancel_edit)
        self.editor_panel.title_edit.returnPressed.connect(self._save_current_tag)
        self.editor_panel.time_edit.textEdited.connect(self.editor.time_text_changed)
        self.editor_panel.time_edit.editingFinished.connect(self._on_time_edit_finished)

    def _apply_timeline_config(self) -> None:
        show_labels = bool(self.timeline_config.get("show_labels", True))
        label_max = int(self.timeline_config.get("label_max_chars", 12))
        self.position_slider.set_config(self.colors, show_labels, label_max)

    # Opening videos -------------------------------------------------------------
    def _open_video(self) -> None:
        patterns = " ".join(f"*.{ext}" for ext in VIDEO_EXTENSIONS)
        path, _ = QFileDialog.getOpenFileName(
            self, "Open video", "", f"Videos ({patterns});;All files (*)"
        )
        if path:
            self.load_video(path)

    def load_video(self, path: str, tag_path: str | None = None, remote: bool = False) -> None:
        self._close_editor()
        tags = self.session.open(path, tag_path)
        self.active_tag = None
        if remote:
            self.player.setSource(QUrl(path))
        else:
            self.player.setSource(QUrl.fromLocalFile(path))
        self.video_area.show_video()
        self.player.play()
        self.setWindowTitle(f"Tag Video Player - {derive_name_from_path(path)}")
        self._refresh_tags()
        self.statusBar().showMessage(f"Loaded {len(tags)} tag(s)", 4000)

    def handle_drop(self, mime) -> bool:
        urls = mime.urls() if mime.hasUrls() else []
        candidates = [u.toLocalFile() for u in urls if u.isLocalFile()]
        if mime.hasText():
            candidates.append(mime.text())
        path = pick_dropped_path(candidates)
        if path:
            debug_print(f"Drop resolved to {path}")
            if not is_video_file(derive_name_from_path(path)):
                QMessageBox.warning(self, "Not a video", "Please drop a video file.")
                return False
            self.load_video(path)
            return True

        remote = next((u for u in urls if not u.isLocalFile() and u.fileName()), None)
        if remote is not None:
            name = remote.fileName()
            if not is_video_file(name):
                QMessageBox.warning(self, "Not a video", "Please drop a video file.")
                return False
            tag_path = temp_tag_path(name)
            debug_print(f"Drop without a local path; tags kept at {tag_path}")
            self.load_video(remote.toString(), tag_path=tag_path, remote=True)
            return True

        QMessageBox.warning(self, "Drop failed", "Could not read the dropped video path.")
        return False

    def jump_to_title(self, title: str) -> bool:
        idx = find_tag_index(self.session.tags, title)
        if idx is None:
            self.statusBar().showMessage(f"No tag named '{title}'", 4000)
            return False
        # Seeking before the media has loaded is ignored by the player.
        QTimer.singleShot(300, lambda: self._jump_to_tag(idx))
        return True

    # Playback -------------------------------------------------------------------
    def _current_time_seconds(self) -> float:
        return max(0.0, self.player.position() / 1000)

    def _seek_to(self, seconds: float) -> None:
        duration_ms = self.player.duration()
        target_ms = int(max(0.0, seconds) * 1000)
        if duration_ms:
            target_ms = min(target_ms, duration_ms)
        self.player.setPosition(target_ms)

    def _toggle_play(self) -> None:
        if self.player.mediaStatus() == QMediaPlayer.NoMedia:
            return
        if self.player.playbackState() == QMediaPlayer.PlayingState:
            self.player.pause()
        else:
            self.player.play()

    def _toggle_mute(self, checked: bool) -> None:
        self.audio.setMuted(checked)
        self.mute_action.setText("Unmute Audio" if checked else "Mute Audio")

    def _scrub_seconds(self, direction: int) -> None:
        if not self.session.is_open:
            return
        step = float(self.scrub_config.get("seconds_step", 5.0))
        self._seek_to(self._current_time_seconds() + step * direction)

    def _scrub_frames(self, direction: int) -> None:
        if not self.session.is_open:
            return
        frames_step = int(self.scrub_config.get("frames_step", 1))
        self._seek_to(self._current_time_seconds() + self._frame_step_seconds() * frames_step * direction)

    def _frame_step_seconds(self) -> float:
        fallback = float(self.scrub_config.get("frame_fallback_seconds", 0.04))
        fps = self.player.metaData().value(QMediaMetaData.VideoFrameRate)
        try:
            fps = float(fps)
        except (TypeError, ValueError):
            return fallback
        if not math.isfinite(fps) or fps <= 0:
            return fallback
        return 1.0 / fps

    def _on_position_changed(self, pos_ms: int) -> None:
        current_s = pos_ms / 1000 if pos_ms else 0
        if not self.position_slider.isSliderDown():
            self.position_slider.setValue(pos_ms)
        total = self.player.duration()
        total_s = total / 1000 if total else 0
        self.position_label.setText(f"{to_timestamp(current_s)} / {to_timestamp(total_s)}")
        active = active_tag_index(self.session.tags, current_s)
        if active != self.active_tag:
            self.active_tag = active
            self._highlight_active_tag()

    def _on_duration_changed(self, duration_ms: int) -> None:
        self.position_slider.setEnabled(True)
        self.position_slider.setRange(0, duration_ms)
        self.position_slider.set_duration_seconds(duration_ms / 1000 if duration_ms else 0.0)

    # Tags -----------------------------------------------------------------------
    def _refresh_tags(self) -> None:
        self.tag_list.clear()
        tags = self.session.tags
        if not tags:
            item = QListWidgetItem("No tags yet. Use 'Add tag' to create one.")
            item.setFlags(Qt.NoItemFlags)
            self.tag_list.addItem(item)
        for idx, tag in enumerate(tags):
            text = f"{to_timestamp(tag.time)}  {tag.title}"
            if tag.description:
                text += f"\n{tag.description}"
            item = QListWidgetItem(text)
            item.setData(Qt.UserRole, idx)
            self.tag_list.addItem(item)
        self.position_slider.set_markers(
            [TagMarker(time=t.time, label=t.title) for t in tags], self.active_tag
        )
        self._highlight_active_tag()

    def _highlight_active_tag(self) -> None:
        for row in range(self.tag_list.count()):
            item = self.tag_list.item(row)
            font = QFont(item.font())
            font.setBold(item.data(Qt.UserRole) == self.active_tag and self.active_tag is not None)
            item.setFont(font)
        self.position_slider.set_active_index(self.active_tag)

    def _selected_index(self) -> int | None:
        item = self.tag_list.currentItem()
        if not item:
            return None
        return item.data(Qt.UserRole)

    def _on_tag_clicked(self, item: QListWidgetItem) -> None:
        idx = item.data(Qt.UserRole)
        if idx is not None:
            self._jump_to_tag(idx)

    def _jump_to_tag(self, index: int) -> None:
        if 0 <= index < len(self.session.tags):
            self._seek_to(self.session.tags[index].time)
            self.active_tag = index
            self._highlight_active_tag()

    def _create_tag(self) -> None:
        if not self.session.is_open:
            QMessageBox.information(self, "No video", "Open a video first.")
            return
        self.editor.open_new(self._current_time_seconds())
        self.editor_panel.fill("New tag", self.editor.editing_time, "", "")
        self._show_editor()

    def _edit_selected_tag(self) -> None:
        idx = self._selected_index()
        if idx is None or not self.editor.open_edit(self.session.tags, idx):
            QMessageBox.information(self, "No tag", "Select a tag to edit.")
            return
        tag = self.session.tags[idx]
        self.editor_panel.fill("Edit tag", tag.time, tag.title, tag.description)
        self._show_editor()

    def _show_editor(self) -> None:
        self.editor_panel.show()
        self.editor_panel.title_edit.setFocus()

    def _close_editor(self) -> None:
        self.editor.close()
        self.editor_panel.hide()

    def _cancel_edit(self) -> None:
        self._close_editor()

    def _on_time_edit_finished(self) -> None:
        formatted = self.editor.time_text_finished(self.editor_panel.time_edit.text())
        if formatted is not None:
            self.editor_panel.time_edit.setText(formatted)

    def _save_current_tag(self) -> None:
        if not self.editor.is_open:
            return
        was_new = self.editor.mode is EditorMode.NEW
        title, description, time_text = self.editor_panel.values()
        try:
            saved = self.editor.commit(self.session, title, description, time_text)
        except TagValidationError as exc:
            QMessageBox.warning(self, "Invalid tag", str(exc))
            return
        except IndexError:
            self._close_editor()
            self._refresh_tags()
            QMessageBox.warning(self, "Tag missing", "The tag being edited no longer exists.")
            return
        self.editor_panel.hide()
        self._refresh_tags()
        if not saved:
            self._warn_save_failed()
            return
        self.statusBar().showMessage("Tag added" if was_new else "Tag saved", 2000)

    def _delete_selected_tag(self) -> None:
        idx = self._selected_index()
        if idx is None or not 0 <= idx < len(self.session.tags):
            QMessageBox.information(self, "No tag", "Select a tag to delete.")
            return
        title = self.session.tags[idx].title
        confirm = QMessageBox.question(
            self, "Delete tag", f"Delete tag '{title}'?", QMessageBox.Yes | QMessageBox.No
        )
        if confirm != QMessageBox.Yes:
            return
        self._close_editor()
        saved = self.session.delete(idx)
        self.active_tag = None
        self._refresh_tags()
        if not saved:
            self._warn_save_failed()
            return
        self.statusBar().showMessage("Tag deleted", 2000)

    def _clear_tags(self) -> None:
        if not self.session.tags:
            self.statusBar().showMessage("No tags to clear", 2000)
            return
        confirm = QMessageBox.question(
            self,
            "Clear tags",
            f"Remove all {len(self.session.tags)} tag(s)?",
            QMessageBox.Yes | QMessageBox.No,
        )
        if confirm != QMessageBox.Yes:
            return
        self._close_editor()
        saved = self.session.clear()
        self.active_tag = None
        self._refresh_tags()
        if not saved:
            self._warn_save_failed()
            return
        self.statusBar().showMessage("All tags cleared", 2000)

    def _warn_save_failed(self) -> None:
        QMessageBox.warning(
            self,
            "Save failed",
            f"Could not write the tag file:\n{resolve_tag_path(self.session.tag_path)}\n\nChanges are kept in memory.",
        )
