"""Screen for the workout in progress."""

from __future__ import annotations

import logging

from kivy.metrics import dp
from kivy.properties import BooleanProperty, StringProperty
from kivymd.app import MDApp
from kivymd.toast import toast
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDFlatButton, MDIconButton
from kivymd.uix.card import MDCard
from kivymd.uix.label import MDLabel
from kivymd.uix.screen import MDScreen
from kivymd.uix.selectioncontrol import MDCheckbox
from kivymd.uix.textfield import MDTextField

from backend.models import SetType
from backend.timers import format_seconds
from backend.workout_session import REMOVE_EXERCISE, WorkoutSession
from ui.dialogs import ExercisePickerDialog, ask_calories, confirm

SET_TYPE_LABELS = {
    SetType.NORMAL: "N",
    SetType.WARMUP: "W",
    SetType.FAILURE: "F",
    SetType.DROP: "D",
}

RECORD_COLOR = (1, 0.75, 0, 1)
GHOST_COLOR = (0.6, 0.6, 0.6, 1)


class WorkoutActiveScreen(MDScreen):
    """Shows every exercise of the session with one row per set.

    The list is rebuilt after structural edits.  Clock driven updates only
    touch the header, the rest banner, the set countdown buttons and the
    completed checkboxes.
    """

    day_name = StringProperty("")
    elapsed_label = StringProperty("0:00")
    rest_label = StringProperty("")
    rest_visible = BooleanProperty(False)
    rest_minimized = BooleanProperty(False)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._checkboxes: dict = {}
        self._timer_buttons: dict = {}

    @property
    def session(self) -> WorkoutSession | None:
        app = MDApp.get_running_app()
        return app.workout_session if app else None

    def on_pre_enter(self, *args):
        self.refresh()
        return super().on_pre_enter(*args)

    # ------------------------------------------------------------------
    # Building the list
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        container = self.ids.get("exercise_box")
        session = self.session
        if container is None or session is None:
            return
        container.clear_widgets()
        self._checkboxes = {}
        self._timer_buttons = {}
        self.day_name = session.active_routine_day.name
        history = session.history()
        for ex_idx in range(len(session.exercises)):
            container.add_widget(self._exercise_card(session, ex_idx, history))
        self.update_status()

    def _exercise_card(self, session: WorkoutSession, ex_idx: int, history: list) -> MDCard:
        exercise = session.exercise(ex_idx)
        entry = session.exercises[ex_idx]
        card = MDCard(
            orientation="vertical",
            padding="8dp",
            spacing="4dp",
            size_hint_y=None,
            adaptive_height=True,
        )
        header = MDBoxLayout(size_hint_y=None, height=dp(40))
        name = exercise.name if exercise else entry.exercise_id
        members = session.superset_members(ex_idx)
        if len(members) > 1:
            name = f"{name}  (superset)"
        header.add_widget(MDLabel(text=name, bold=True))
        header.add_widget(
            MDIconButton(
                icon="swap-horizontal",
                on_release=lambda *_: self.open_picker(replace_index=ex_idx),
            )
        )
        header.add_widget(
            MDIconButton(
                icon="delete",
                on_release=lambda *_: self.confirm_remove_exercise(ex_idx),
            )
        )
        card.add_widget(header)

        last = session.last_session_summary(ex_idx, history)
        record = session.get_personal_record(ex_idx, history)
        info = []
        if last:
            info.append(f"Last: {last}")
        if record > 0:
            info.append(f"PR: {record:g}kg")
        if info:
            card.add_widget(
                MDLabel(
                    text="   ".join(info),
                    theme_text_color="Custom",
                    text_color=GHOST_COLOR,
                    size_hint_y=None,
                    height=dp(24),
                )
            )

        is_duration = exercise is not None and exercise.is_duration
        for set_idx in range(len(entry.sets)):
            card.add_widget(self._set_row(session, ex_idx, set_idx, is_duration, history))
        card.add_widget(
            MDFlatButton(text="+ Add Set", on_release=lambda *_: self.add_set(ex_idx))
        )
        return card

    def _set_row(
        self, session: WorkoutSession, ex_idx: int, set_idx: int, is_duration: bool, history: list
    ):
        s = session.exercises[ex_idx].sets[set_idx]
        row = MDBoxLayout(size_hint_y=None, height=dp(48), spacing="4dp")
        row.add_widget(
            MDFlatButton(
                text=SET_TYPE_LABELS[s.type],
                on_release=lambda btn: self.toggle_type(btn, ex_idx, set_idx),
            )
        )
        ghost = session.get_ghost_set(ex_idx, set_idx, history)
        weight = self._field(str(s.weight if s.weight else ""), "float", ex_idx, set_idx, "weight")
        if ghost is not None:
            weight.hint_text = f"{ghost.weight:g}"
        if session.is_record_weight(ex_idx, set_idx, history):
            weight.text_color_normal = RECORD_COLOR
        row.add_widget(weight)

        if is_duration:
            btn = MDFlatButton(
                text=format_seconds(s.duration_seconds),
                on_release=lambda *_: self.toggle_set_timer(ex_idx, set_idx),
            )
            self._timer_buttons[(ex_idx, set_idx)] = (btn, s.duration_seconds)
            row.add_widget(btn)
        else:
            reps = self._field(str(s.reps), "int", ex_idx, set_idx, "reps")
            if ghost is not None:
                reps.hint_text = str(ghost.reps)
            row.add_widget(reps)

        check = MDCheckbox(size_hint_x=None, width=dp(40), active=s.completed)
        check.bind(on_release=lambda *_: self.toggle_set(ex_idx, set_idx))
        self._checkboxes[(ex_idx, set_idx)] = check
        row.add_widget(check)
        row.add_widget(
            MDIconButton(icon="close", on_release=lambda *_: self.remove_set(ex_idx, set_idx))
        )
        return row

    def _field(self, text: str, input_filter: str, ex_idx: int, set_idx: int, field: str):
        widget = MDTextField(text=text, input_filter=input_filter, size_hint_x=0.3)

        def commit(inst, *_):
            if inst.focus:
                return
            value = inst.text.strip() or "0"
            try:
                self.session.update_set(ex_idx, set_idx, field, value)
                inst.error = False
            except (ValueError, IndexError) as exc:
                logging.warning("Rejected %s=%r: %s", field, value, exc)
                inst.error = True

        widget.bind(focus=commit)
        return widget

    # ------------------------------------------------------------------
    # Periodic status
    # ------------------------------------------------------------------

    def update_status(self) -> None:
        session = self.session
        if session is None:
            return
        self.elapsed_label = session.formatted_elapsed()
        rest = session.rest_timer.state
        self.rest_visible = rest is not None
        if rest is not None:
            self.rest_label = format_seconds(rest["remaining"])
            self.rest_minimized = rest["isMinimized"]
        for key, check in self._checkboxes.items():
            ex_idx, set_idx = key
            check.active = session.exercises[ex_idx].sets[set_idx].completed
        running = session.set_timer.state
        for key, (btn, seconds) in self._timer_buttons.items():
            if running and (running["exerciseIndex"], running["setIndex"]) == key:
                btn.text = format_seconds(running["remaining"])
            else:
                ex_idx, set_idx = key
                btn.text = format_seconds(
                    session.exercises[ex_idx].sets[set_idx].duration_seconds or seconds
                )

    # ------------------------------------------------------------------
    # Set actions
    # ------------------------------------------------------------------

    def toggle_set(self, ex_idx: int, set_idx: int) -> None:
        status = self.session.toggle_set(ex_idx, set_idx)
        if status is not None and status.is_pr:
            toast("New weight record!" if status.is_weight_pr else "New reps record!")
        self.update_status()

    def toggle_type(self, button, ex_idx: int, set_idx: int) -> None:
        button.text = SET_TYPE_LABELS[self.session.toggle_set_type(ex_idx, set_idx)]

    def add_set(self, ex_idx: int) -> None:
        self.session.add_set(ex_idx)
        self.refresh()

    def remove_set(self, ex_idx: int, set_idx: int) -> None:
        def remove():
            self.session.remove_set(ex_idx, set_idx)
            self.refresh()

        confirm("Remove Set?", f"Set {set_idx + 1} will be removed.", remove, "Remove")

    def confirm_remove_exercise(self, ex_idx: int) -> None:
        def remove():
            self.session.remove_set(ex_idx, REMOVE_EXERCISE)
            self.refresh()

        confirm("Remove Exercise?", "All sets of this exercise will be removed.", remove, "Remove")

    def toggle_set_timer(self, ex_idx: int, set_idx: int) -> None:
        session = self.session
        if session.set_timer.matches(ex_idx, set_idx):
            session.finish_set_timer_early()
        else:
            session.start_set_timer(ex_idx, set_idx)
        self.update_status()

    def adjust_set_timer(self, direction: int) -> None:
        self.session.adjust_set_timer(direction)

    def cancel_set_timer(self) -> None:
        self.session.cancel_set_timer()

    # ------------------------------------------------------------------
    # Rest banner
    # ------------------------------------------------------------------

    def adjust_rest(self, seconds: int) -> None:
        self.session.adjust_rest(seconds)

    def skip_rest(self) -> None:
        self.session.skip_rest()

    def toggle_rest_minimized(self) -> None:
        if self.rest_minimized:
            self.session.restore_rest()
        else:
            self.session.minimize_rest()

    # ------------------------------------------------------------------
    # Exercises
    # ------------------------------------------------------------------

    def open_picker(self, replace_index: int | None = None) -> None:
        session = self.session
        app = MDApp.get_running_app()

        def pick(exercise_id: str) -> None:
            if replace_index is None:
                session.add_exercise(exercise_id)
            else:
                session.replace_exercise(replace_index, exercise_id)
            self.refresh()

        def create(name, muscle_group, kind) -> None:
            session.quick_create_exercise(name, muscle_group, kind, replace_index)
            self.refresh()

        ExercisePickerDialog(
            app.repository.get_exercises(),
            on_pick=pick,
            on_create=create,
            title="Add Exercise" if replace_index is None else "Replace Exercise",
        ).open()

    # ------------------------------------------------------------------
    # Ending
    # ------------------------------------------------------------------

    def confirm_finish(self) -> None:
        ask_calories(lambda calories: self.session.finish(calories))

    def confirm_cancel(self) -> None:
        confirm(
            "Discard Workout?",
            "Nothing from this workout will be saved.",
            lambda: self.session.cancel(),
            "Discard",
        )
