import flet as ft
from typing import Optional

from loguru import logger

from flash10.config import Settings, load_settings
from flash10.errors import GenerationError
from flash10.intervals import describe_stage
from flash10.logging_config import configure_logging
from flash10.reminders import FletNotifier, ReminderDispatcher
from flash10.review_service import ReviewSession, stage_counts
from flash10.review_store import JsonFileReviewStore
from flash10.scheduler import ReviewScheduler
from flash10.word_data import Category, WordData
from flash10.word_import import SpreadsheetWordSource


class ReviewPage(ft.Container):
    def __init__(self, host: ft.Page, scheduler: ReviewScheduler, source: SpreadsheetWordSource):
        super().__init__()
        self.host = host
        self.scheduler = scheduler
        self.source = source
        self.session: Optional[ReviewSession] = None

        # Home: category pick for new words, due count for reviews
        self.category = ft.Dropdown(
            label="Category",
            value=Category.GENERAL.value,
            options=[ft.dropdown.Option(category.value) for category in Category],
            width=220,
        )
        self.learn_button = ft.ElevatedButton(
            "Learn new words",
            icon=ft.Icons.SCHOOL,
            on_click=self.start_learning,
            width=220,
            height=50,
            style=ft.ButtonStyle(shape=ft.RoundedRectangleBorder(radius=14)),
        )
        self.due_text = ft.Text(size=30, weight=ft.FontWeight.BOLD)
        self.start_button = ft.FloatingActionButton(
            text="Start review",
            icon=ft.Icons.PLAY_ARROW,
            width=180,
            bgcolor=ft.Colors.ORANGE_300,
            on_click=self.start_review,
        )
        self.status = ft.Text("", size=12, color=ft.Colors.GREY)
        self.home = ft.Column(
            controls=[
                ft.Row(controls=[self.category, self.learn_button], alignment=ft.MainAxisAlignment.CENTER),
                ft.Row(controls=[self.due_text, self.start_button], alignment=ft.MainAxisAlignment.CENTER),
                self.status,
            ],
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            spacing=30,
        )

        # Card
        self.word_text = ft.Text(size=48, weight=ft.FontWeight.BOLD)
        self.phonetic_text = ft.Text(size=20, color=ft.Colors.GREY_700)
        self.meaning_text = ft.Text(size=22)
        self.example_text = ft.Text(size=18, italic=True)
        self.progress_text = ft.Text(size=16)
        self.forgot_button = ft.ElevatedButton("Forgot", on_click=lambda e: self._handle_outcome(False))

        self.grade_buttons = ft.Row(
            controls=[
                self.forgot_button,
                ft.ElevatedButton("Mastered", on_click=lambda e: self._handle_outcome(True)),
            ],
            alignment=ft.MainAxisAlignment.SPACE_EVENLY,
            visible=False,
        )

        self.card = ft.Container(
            content=ft.Column(
                controls=[
                    self.progress_text,
                    self.word_text,
                    self.phonetic_text,
                    self.meaning_text,
                    self.example_text,
                ],
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            ),
            bgcolor=ft.Colors.GREY_50,
            border_radius=20,
            padding=20,
            expand=True,
            visible=False,
        )

        # Summary
        self.summary = ft.Container(
            bgcolor=ft.Colors.GREY_50,
            border_radius=20,
            padding=20,
            expand=True,
            visible=False,
        )

        self.content = ft.Column(
            controls=[
                self.home,
                self.card,
                self.grade_buttons,
                self.summary,
            ],
            expand=True,
        )
        self.bgcolor = ft.Colors.GREY_100
        self.border_radius = 20
        self.padding = 20
        self.expand = True
        self._refresh_due()

    def _refresh_due(self):
        count = self.scheduler.due_count()
        self.due_text.value = f"{count} word(s) due for review"
        self.start_button.disabled = count == 0

    def start_learning(self, e):
        self.status.value = "Loading words..."
        self.update()
        try:
            self.session = ReviewSession.from_source(self.scheduler, self.source, self.category.value)
        except GenerationError as exc:
            logger.warning(f"Could not start learning session: {exc}")
            self.session = None
            self.status.value = "Failed to load words. Please try again."
            self.update()
            return
        self.status.value = ""
        self._show_current()

    def start_review(self, e):
        self.session = ReviewSession.from_due(self.scheduler)
        if self.session.finished:
            self.session = None
            self._refresh_due()
            self.update()
            return
        self._show_current()

    def restart(self, e):
        if self.session is not None and not self.session.is_review:
            self.category.value = (self.session.category or Category.GENERAL).value
            self.start_learning(e)
        else:
            self.start_review(e)
        if self.session is None:
            self.display_home(e)

    def display_home(self, e):
        self.session = None
        self.home.visible = True
        self.card.visible = False
        self.grade_buttons.visible = False
        self.summary.visible = False
        self._refresh_due()
        self.update()

    def _show_word(self, word: WordData):
        snapshot = self.session.snapshot()
        self.progress_text.value = f"{snapshot.position + 1} / {snapshot.total}"
        self.word_text.value = word.word
        self.phonetic_text.value = word.phonetic
        self.meaning_text.value = f"{word.translation}  {word.definition}".strip()
        self.example_text.value = word.examples[0].en if word.examples else ""

    def _show_summary(self):
        snapshot = self.session.snapshot()
        counts = stage_counts(self.scheduler)
        stage_rows = [
            ft.Text(f"{describe_stage(stage, self.scheduler.intervals)}: {count}", size=16)
            for stage, count in enumerate(counts)
            if stage > 0
        ]
        mastered = ", ".join(word.word for word in self.session.mastered) or "none"
        self.summary.content = ft.Column(
            controls=[
                ft.Text("Session summary", size=30, weight=ft.FontWeight.BOLD),
                ft.Text(f"Mastered {snapshot.mastered} of {snapshot.total}", size=20),
                ft.Text(f"Mastered words: {mastered}", size=16),
                ft.Text(f"Words in review bank: {sum(counts)}", size=16),
                *stage_rows,
                ft.Row(
                    controls=[
                        ft.ElevatedButton("Again", icon=ft.Icons.REPLAY, on_click=self.restart),
                        ft.ElevatedButton("Home", icon=ft.Icons.HOME, on_click=self.display_home),
                    ],
                    alignment=ft.MainAxisAlignment.SPACE_EVENLY,
                ),
            ],
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
        )
        if snapshot.unsaved:
            self.host.open(ft.SnackBar(ft.Text("Some progress could not be saved; it may be lost on restart.")))

    def _show_current(self):
        word = self.session.current() if self.session else None
        self.home.visible = False
        if word is None:
            self.card.visible = False
            self.grade_buttons.visible = False
            self.summary.visible = True
            self._show_summary()
        else:
            self._show_word(word)
            self.forgot_button.text = "Forgot" if self.session.is_review else "Not yet"
            self.summary.visible = False
            self.card.visible = True
            self.grade_buttons.visible = True
        self.update()

    def _handle_outcome(self, mastered: bool):
        if self.session is None or self.session.finished:
            return
        result = self.session.record(mastered)
        if result is not None and not result.ok:
            self.host.open(ft.SnackBar(ft.Text("Could not save progress; it may be lost on restart.")))
        self._show_current()


def main(page: ft.Page, settings: Optional[Settings] = None):
    settings = settings or load_settings()
    configure_logging(settings.log_level, settings.log_json)

    reminders = ReminderDispatcher(FletNotifier(page), enabled=settings.reminders_enabled)
    reminders.request_permission()
    store = JsonFileReviewStore(settings.state_file, storage_key=settings.storage_key)
    scheduler = ReviewScheduler(store, reminders=reminders)
    source = SpreadsheetWordSource(settings.word_sheet)
    logger.info(f"Flash10 started with state at {settings.state_file}, words from {settings.word_sheet}")

    page.title = "Flash10"
    page.window.width = 900
    page.window.height = 700
    page.horizontal_alignment = ft.CrossAxisAlignment.CENTER
    page.padding = 30
    page.on_close = lambda e: reminders.cancel_all()

    page.add(ReviewPage(page, scheduler, source))
