"""Destination selection state machine.

The destination is chosen in a fixed order: project, subject label,
session label, data type (plus free text when the data type is
``"other"``). Each step unlocks the next one; changing an earlier step
clears every later one. The whole position is one ``SelectionStep``
value advanced by a single transition function, so the gating flags a
caller needs are always derived, never stored.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Optional, Union

from streamerctl.core.exceptions import (
    SelectionOrderError,
    UploadNotPermittedError,
    ValidationError,
)
from streamerctl.core.logging import get_logger
from streamerctl.core.registry import FileRegistry
from streamerctl.core.validation import (
    is_valid_data_type_other,
    is_valid_session_label,
    is_valid_subject_label,
    resolve_label_input,
)
from streamerctl.models.project import Project
from streamerctl.models.selection import DATA_TYPE_OTHER, DATA_TYPES, SelectionPath

logger = get_logger(__name__)


class SelectionStep(IntEnum):
    """Ordered wizard positions; a higher value implies every lower step is done."""

    NO_PROJECT = 0
    PROJECT_SELECTED = 1
    SUBJECT_SET = 2
    SESSION_SET = 3
    DATA_TYPE_OTHER_PENDING = 4
    DATA_TYPE_SET = 5


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class SelectProject:
    number: str


@dataclass(frozen=True)
class ChangeSubjectLabel:
    text: str


@dataclass(frozen=True)
class ChangeSessionLabel:
    text: str


@dataclass(frozen=True)
class SelectDataType:
    value: str


@dataclass(frozen=True)
class ChangeDataTypeOther:
    text: str


SelectionEvent = Union[
    SelectProject,
    ChangeSubjectLabel,
    ChangeSessionLabel,
    SelectDataType,
    ChangeDataTypeOther,
]


# =============================================================================
# Transition Function
# =============================================================================


def transition(
    step: SelectionStep,
    path: SelectionPath,
    event: SelectionEvent,
    projects: Optional[frozenset[str]] = None,
) -> tuple[SelectionStep, SelectionPath]:
    """Compute the next step and path for an event.

    Args:
        step: Current step.
        path: Current destination fields.
        event: User input.
        projects: Eligible project numbers, or None to accept any project.

    Returns:
        Tuple of (next_step, next_path).

    Raises:
        SelectionOrderError: If the event targets a step that is still locked.
        ValidationError: If a project or data type is not one of the choices.
    """
    if isinstance(event, SelectProject):
        number = event.number.strip()
        if not number:
            raise ValidationError("Project number cannot be empty", field="project")
        if projects is not None and number not in projects:
            raise ValidationError(
                f"Project not available: {number}", field="project", value=number
            )
        return SelectionStep.PROJECT_SELECTED, SelectionPath(project_number=number)

    if isinstance(event, ChangeSubjectLabel):
        if step < SelectionStep.PROJECT_SELECTED:
            raise SelectionOrderError("subject label", "project")
        valid, value = resolve_label_input(
            event.text, path.subject_label or "", is_valid_subject_label
        )
        new_path = SelectionPath(
            project_number=path.project_number,
            subject_label=value or None,
        )
        if valid:
            return SelectionStep.SUBJECT_SET, new_path
        return SelectionStep.PROJECT_SELECTED, new_path

    if isinstance(event, ChangeSessionLabel):
        if step < SelectionStep.SUBJECT_SET:
            raise SelectionOrderError("session label", "subject label")
        valid, value = resolve_label_input(
            event.text, path.session_label or "", is_valid_session_label
        )
        new_path = replace(
            path, session_label=value or None, data_type=None, data_type_other=None
        )
        if valid:
            return SelectionStep.SESSION_SET, new_path
        return SelectionStep.SUBJECT_SET, new_path

    if isinstance(event, SelectDataType):
        if step < SelectionStep.SESSION_SET:
            raise SelectionOrderError("data type", "session label")
        if event.value not in DATA_TYPES:
            raise ValidationError(
                f"Unknown data type: {event.value} (choose from {', '.join(DATA_TYPES)})",
                field="data type",
                value=event.value,
            )
        new_path = replace(path, data_type=event.value, data_type_other=None)
        if event.value == DATA_TYPE_OTHER:
            return SelectionStep.DATA_TYPE_OTHER_PENDING, new_path
        return SelectionStep.DATA_TYPE_SET, new_path

    if isinstance(event, ChangeDataTypeOther):
        if step < SelectionStep.DATA_TYPE_OTHER_PENDING or path.data_type != DATA_TYPE_OTHER:
            raise SelectionOrderError("other data type", 'data type "other"')
        valid, value = resolve_label_input(
            event.text, path.data_type_other or "", is_valid_data_type_other
        )
        new_path = replace(path, data_type_other=value or None)
        if valid:
            return SelectionStep.DATA_TYPE_SET, new_path
        return SelectionStep.DATA_TYPE_OTHER_PENDING, new_path

    raise TypeError(f"Unsupported selection event: {event!r}")


# =============================================================================
# SelectionStateMachine
# =============================================================================


class SelectionStateMachine:
    """Holds the current step and destination path for one user."""

    def __init__(self, projects: Optional[Iterable[Union[Project, str]]] = None) -> None:
        self.step = SelectionStep.NO_PROJECT
        self.path = SelectionPath()
        self._projects: Optional[frozenset[str]] = None
        if projects is not None:
            self.set_projects(projects)

    def set_projects(self, projects: Iterable[Union[Project, str]]) -> None:
        """Restrict project selection to the given projects."""
        self._projects = frozenset(
            p.number if isinstance(p, Project) else str(p) for p in projects
        )

    @property
    def projects(self) -> Optional[frozenset[str]]:
        return self._projects

    def apply(self, event: SelectionEvent) -> SelectionStep:
        """Apply an event; on error the state is left unchanged."""
        step, path = transition(self.step, self.path, event, self._projects)
        if step != self.step:
            logger.debug("Selection %s -> %s on %r", self.step.name, step.name, event)
        self.step, self.path = step, path
        return step

    def reset(self) -> None:
        self.step = SelectionStep.NO_PROJECT
        self.path = SelectionPath()

    # =========================================================================
    # Event Shortcuts
    # =========================================================================

    def select_project(self, number: str) -> SelectionStep:
        return self.apply(SelectProject(number))

    def change_subject_label(self, text: str) -> SelectionStep:
        return self.apply(ChangeSubjectLabel(text))

    def change_session_label(self, text: str) -> SelectionStep:
        return self.apply(ChangeSessionLabel(text))

    def select_data_type(self, value: str) -> SelectionStep:
        return self.apply(SelectDataType(value))

    def change_data_type_other(self, text: str) -> SelectionStep:
        return self.apply(ChangeDataTypeOther(text))

    # =========================================================================
    # Derived Gating
    # =========================================================================

    @property
    def is_project_selected(self) -> bool:
        return self.step >= SelectionStep.PROJECT_SELECTED

    @property
    def is_subject_set(self) -> bool:
        return self.step >= SelectionStep.SUBJECT_SET

    @property
    def is_session_set(self) -> bool:
        return self.step >= SelectionStep.SESSION_SET

    @property
    def needs_data_type_other(self) -> bool:
        """True while "other" is chosen, whether or not valid text exists yet."""
        return self.step >= SelectionStep.SESSION_SET and self.path.data_type == DATA_TYPE_OTHER

    @property
    def is_complete(self) -> bool:
        return self.step == SelectionStep.DATA_TYPE_SET

    def upload_permitted(self, registry: FileRegistry) -> bool:
        """Upload is allowed once the destination is complete and a file is selected."""
        return self.is_complete and registry.has_files

    def destination(self) -> SelectionPath:
        """Return the completed destination.

        Raises:
            UploadNotPermittedError: If the destination is incomplete.
        """
        if not self.is_complete:
            raise UploadNotPermittedError(
                f"destination incomplete ({self.step.name.lower().replace('_', ' ')})"
            )
        return self.path
