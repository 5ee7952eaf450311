"""Destination path selected for an upload batch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DATA_TYPE_OTHER = "other"

# Fixed data type choices offered to the user, in display order
DATA_TYPES = ("mri", "meg", "eeg", "ieeg", "beh", DATA_TYPE_OTHER)


@dataclass(frozen=True)
class SelectionPath:
    """Snapshot of the destination fields.

    ``data_type`` holds the chosen fixed value (possibly ``"other"``);
    ``data_type_other`` holds the free text entered for ``"other"``.
    """

    project_number: Optional[str] = None
    subject_label: Optional[str] = None
    session_label: Optional[str] = None
    data_type: Optional[str] = None
    data_type_other: Optional[str] = None

    @property
    def effective_data_type(self) -> Optional[str]:
        """Data type sent to the server."""
        if self.data_type == DATA_TYPE_OTHER:
            return self.data_type_other or None
        return self.data_type

    def as_form_fields(self) -> dict[str, str]:
        """Destination fields as sent in each upload request."""
        return {
            "projectNumber": self.project_number or "",
            "subjectLabel": self.subject_label or "",
            "sessionLabel": self.session_label or "",
            "dataType": self.effective_data_type or "",
        }

    def display(self) -> str:
        """Return the destination as a path-like string."""
        parts = [
            self.project_number,
            self.subject_label and f"sub-{self.subject_label}",
            self.session_label and f"ses-{self.session_label}",
            self.effective_data_type,
        ]
        return "/".join(p for p in parts if p)
