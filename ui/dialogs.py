"""Dialog helpers shared by the screens.

Everything here is a plain ``MDDialog``.  Callers pass callbacks that run
after the dialog has been dismissed.
"""

from __future__ import annotations

from typing import Callable

from kivy.metrics import dp
from kivy.uix.scrollview import ScrollView
from kivy.uix.spinner import Spinner
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDFlatButton, MDRaisedButton
from kivymd.uix.dialog import MDDialog
from kivymd.uix.list import MDList, OneLineListItem
from kivymd.uix.textfield import MDTextField

from backend.models import Exercise, ExerciseKind, MuscleGroup


def confirm(
    title: str,
    text: str,
    on_confirm: Callable[[], None],
    confirm_text: str = "Confirm",
) -> MDDialog:
    """Ask a yes/no question and call ``on_confirm`` on yes."""
    dialog = None

    def do_confirm(*_):
        dialog.dismiss()
        on_confirm()

    dialog = MDDialog(
        title=title,
        text=text,
        buttons=[
            MDFlatButton(text="Cancel", on_release=lambda *_: dialog.dismiss()),
            MDRaisedButton(text=confirm_text, on_release=do_confirm),
        ],
    )
    dialog.open()
    return dialog


def ask_calories(on_done: Callable[[float | None], None]) -> MDDialog:
    """Finish dialog with an optional calories field."""
    field = MDTextField(
        hint_text="Calories (optional)",
        input_filter="float",
        size_hint_y=None,
        height=dp(48),
    )
    box = MDBoxLayout(orientation="vertical", size_hint_y=None, height=dp(64))
    box.add_widget(field)
    dialog = None

    def finish(*_):
        text = field.text.strip()
        dialog.dismiss()
        on_done(float(text) if text else None)

    dialog = MDDialog(
        title="Finish Workout?",
        type="custom",
        content_cls=box,
        buttons=[
            MDFlatButton(text="Cancel", on_release=lambda *_: dialog.dismiss()),
            MDRaisedButton(text="Finish", on_release=finish),
        ],
    )
    dialog.open()
    return dialog


class ExercisePickerDialog(MDDialog):
    """Pick a library exercise, or create one from the search text.

    ``on_pick(exercise_id)`` runs for an existing exercise and
    ``on_create(name, muscle_group, kind)`` for a new one.
    """

    def __init__(
        self,
        exercises: list[Exercise],
        on_pick: Callable[[str], None],
        on_create: Callable[[str, MuscleGroup, ExerciseKind], None],
        title: str = "Add Exercise",
        **kwargs,
    ):
        self.on_pick = on_pick
        self.on_create = on_create
        self._exercises = sorted(exercises, key=lambda e: e.name.lower())

        content = MDBoxLayout(
            orientation="vertical", spacing="8dp", size_hint_y=None, height=dp(420)
        )
        self.search_field = MDTextField(
            hint_text="Search or new exercise name", size_hint_y=None, height=dp(48)
        )
        self.search_field.bind(text=lambda _inst, value: self._populate(value))
        content.add_widget(self.search_field)

        options = MDBoxLayout(size_hint_y=None, height=dp(40), spacing="8dp")
        self.group_spinner = Spinner(
            text=MuscleGroup.OTHER.value, values=[g.value for g in MuscleGroup]
        )
        self.kind_spinner = Spinner(
            text=ExerciseKind.WEIGHTED.value, values=[k.value for k in ExerciseKind]
        )
        options.add_widget(self.group_spinner)
        options.add_widget(self.kind_spinner)
        content.add_widget(options)

        scroll = ScrollView()
        self.exercise_list = MDList()
        scroll.add_widget(self.exercise_list)
        content.add_widget(scroll)

        super().__init__(
            title=title,
            type="custom",
            content_cls=content,
            buttons=[
                MDFlatButton(text="Cancel", on_release=lambda *_: self.dismiss()),
                MDRaisedButton(text="Create", on_release=self._create),
            ],
            **kwargs,
        )
        self._populate("")

    def _populate(self, query: str) -> None:
        self.exercise_list.clear_widgets()
        query = query.strip().lower()
        for exercise in self._exercises:
            if query and query not in exercise.name.lower():
                continue
            self.exercise_list.add_widget(
                OneLineListItem(
                    text=exercise.name,
                    on_release=lambda _item, eid=exercise.id: self._pick(eid),
                )
            )

    def _pick(self, exercise_id: str) -> None:
        self.dismiss()
        self.on_pick(exercise_id)

    def _create(self, *_) -> None:
        name = self.search_field.text.strip()
        if not name:
            self.search_field.error = True
            return
        self.dismiss()
        self.on_create(
            name,
            MuscleGroup(self.group_spinner.text),
            ExerciseKind(self.kind_spinner.text),
        )
