"""Upload command for streamerctl."""

from __future__ import annotations

import shlex
import sys
from pathlib import Path
from typing import Any, Callable, Optional

import click

from streamerctl.cli.common import Context, ExitCode, global_options, handle_errors, require_auth
from streamerctl.core.exceptions import UploadNotPermittedError, ValidationError
from streamerctl.core.output import (
    OutputFormat,
    create_progress,
    print_json,
    print_key_value,
    print_success,
    print_table,
    print_warning,
)
from streamerctl.core.registry import FileRegistry
from streamerctl.core.selection import SelectionStateMachine
from streamerctl.core.validation import (
    validate_data_type_other,
    validate_session_label,
    validate_subject_label,
)
from streamerctl.models.files import format_size
from streamerctl.models.progress import BatchProgress, BatchResult, OperationPhase
from streamerctl.models.selection import DATA_TYPE_OTHER, DATA_TYPES, SelectionPath
from streamerctl.services.projects import ProjectService
from streamerctl.services.uploads import UploadService
from streamerctl.uploaders.common import collect_files, entries_from_paths

# =============================================================================
# Destination
# =============================================================================


def _report_invalid(
    ctx: Context,
    text: str,
    validate: Callable[[str], str],
    option: str,
    interactive: bool,
) -> None:
    """Report why a label was refused; outside interactive mode this raises."""
    try:
        validate(text)
    except ValidationError as e:
        if not interactive:
            raise
        ctx.reporter.report(str(e))
        return
    if not interactive:
        raise click.UsageError(f"Invalid value for '{option}'.")


def _fill_label(
    ctx: Context,
    *,
    value: Optional[str],
    option: str,
    prompt_text: str,
    apply: Callable[[str], Any],
    accepted: Callable[[], bool],
    validate: Callable[[str], str],
    interactive: bool,
) -> None:
    """Feed a label into the state machine, prompting until it is accepted."""
    if value is not None:
        apply(value)
        if accepted():
            return
        _report_invalid(ctx, value, validate, option, interactive)
    elif not interactive:
        raise click.UsageError(f"Missing option '{option}'.")

    while not accepted():
        text = click.prompt(prompt_text, default="", show_default=False)
        apply(text)
        if not accepted():
            _report_invalid(ctx, text, validate, option, interactive=True)


def _select_project(
    ctx: Context,
    machine: SelectionStateMachine,
    project_number: Optional[str],
    interactive: bool,
) -> None:
    if project_number:
        try:
            machine.select_project(project_number)
        except ValidationError as e:
            if not interactive:
                raise
            ctx.reporter.report(str(e))
    elif not interactive:
        raise click.UsageError(
            "Missing option '--project' (or set default_project in the profile)."
        )

    choices = sorted(machine.projects or ())
    while not machine.is_project_selected:
        machine.select_project(click.prompt("Project", type=click.Choice(choices)))


def _fill_destination(
    ctx: Context,
    machine: SelectionStateMachine,
    *,
    project_number: Optional[str],
    subject: Optional[str],
    session_label: Optional[str],
    data_type: Optional[str],
    data_type_other: Optional[str],
    interactive: bool,
) -> SelectionPath:
    """Walk the state machine from project to data type."""
    _select_project(ctx, machine, project_number, interactive)

    _fill_label(
        ctx,
        value=subject,
        option="--subject",
        prompt_text="Subject label",
        apply=machine.change_subject_label,
        accepted=lambda: machine.is_subject_set,
        validate=validate_subject_label,
        interactive=interactive,
    )
    _fill_label(
        ctx,
        value=session_label,
        option="--session",
        prompt_text="Session label",
        apply=machine.change_session_label,
        accepted=lambda: machine.is_session_set,
        validate=validate_session_label,
        interactive=interactive,
    )

    if data_type is None:
        if not interactive:
            raise click.UsageError("Missing option '--data-type'.")
        data_type = click.prompt("Data type", type=click.Choice(DATA_TYPES))
    machine.select_data_type(data_type)

    if machine.needs_data_type_other:
        _fill_label(
            ctx,
            value=data_type_other,
            option="--data-type-other",
            prompt_text="Other data type",
            apply=machine.change_data_type_other,
            accepted=lambda: machine.is_complete,
            validate=validate_data_type_other,
            interactive=interactive,
        )
    elif data_type_other:
        print_warning(f"--data-type-other is only used with --data-type {DATA_TYPE_OTHER}")

    return machine.destination()


# =============================================================================
# Files
# =============================================================================


def _register_files(
    ctx: Context,
    registry: FileRegistry,
    paths: tuple[Path, ...],
    recursive: bool,
    interactive: bool,
) -> None:
    """Register one batch, asking again in interactive mode after a rejection."""
    while True:
        if not paths:
            if not interactive:
                raise click.UsageError("No files given.")
            raw = click.prompt("Files to upload")
            paths = tuple(Path(p).expanduser() for p in shlex.split(raw))

        try:
            entries = entries_from_paths(collect_files(paths, recursive=recursive))
        except ValueError as e:
            if not interactive:
                raise click.UsageError(str(e)) from e
            ctx.reporter.report(str(e))
            paths = ()
            continue

        if not entries:
            if not interactive:
                raise UploadNotPermittedError("no files selected")
            ctx.reporter.report("No files found in the given paths")
            paths = ()
            continue

        decision = registry.submit_batch(entries)
        if decision.accepted:
            return
        if not interactive:
            decision.raise_for_rejection()
        ctx.reporter.report(decision.message)
        paths = ()


def _show_plan(ctx: Context, destination: SelectionPath, registry: FileRegistry) -> None:
    if ctx.quiet or ctx.output_format == OutputFormat.JSON:
        return
    if ctx.verbose:
        print_table(
            [{"name": f.name, "size": f.size_display} for f in registry],
            ["name", "size"],
            title="Selected files",
        )
    print_key_value(
        {
            "destination": destination.display(),
            "files": len(registry),
            "total_size": format_size(registry.total_size),
        },
        title="Upload",
    )


# =============================================================================
# Upload
# =============================================================================


def _run_upload(
    ctx: Context,
    service: UploadService,
    machine: SelectionStateMachine,
    registry: FileRegistry,
) -> BatchResult:
    if ctx.quiet or ctx.output_format == OutputFormat.JSON:
        return service.upload(machine, registry)

    with create_progress() as progress:
        task = progress.add_task(f"Uploading {len(registry)} file(s)", total=100)

        def on_progress(update: BatchProgress) -> None:
            if update.phase == OperationPhase.UPLOADING:
                description = f"Uploading ({update.settled}/{update.total})"
            else:
                description = update.message
            progress.update(task, completed=update.percent, description=description)

        return service.upload(machine, registry, progress_callback=on_progress)


def _report_result(ctx: Context, result: BatchResult) -> None:
    for job in result.failures:
        ctx.reporter.report(job.error, title=f"Upload failed: {job.file_name}")

    if ctx.output_format == OutputFormat.JSON:
        print_json(
            {
                "destination": result.destination.display(),
                "success": result.success,
                "total": result.total,
                "succeeded": result.succeeded,
                "failed": result.failed,
                "percent": result.percent,
                "duration": round(result.duration, 2),
                "failures": [
                    {
                        "file": job.file_name,
                        "status_code": job.status_code,
                        "error": job.error,
                    }
                    for job in result.failures
                ],
            }
        )
        return

    if ctx.quiet:
        return

    print_key_value(
        {
            "succeeded": result.succeeded,
            "failed": result.failed,
            "size": f"{result.total_size_mb:.1f} MB",
            "duration": f"{result.duration:.1f}s",
            "throughput": f"{result.throughput_mbps:.1f} MB/s",
        },
        title="Summary",
    )
    if result.success:
        print_success(f"Uploaded {result.total} file(s) to {result.destination.display()}")
    else:
        print_warning(f"{result.failed} of {result.total} upload(s) failed")


@click.command("upload")
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option("--project", "project_number", help="Project number (default: profile default)")
@click.option("--subject", help="Subject label, letters and digits only")
@click.option("--session", "session_label", help="Session label, letters and digits only")
@click.option("--data-type", type=click.Choice(DATA_TYPES), help="Data type")
@click.option("--data-type-other", help="Data type name when --data-type is other")
@click.option("--recursive", "-r", is_flag=True, help="Descend into subdirectories")
@click.option("--interactive", "-i", is_flag=True, help="Prompt for anything missing")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@global_options
@require_auth
@handle_errors
def upload(
    ctx: Context,
    paths: tuple[Path, ...],
    project_number: Optional[str],
    subject: Optional[str],
    session_label: Optional[str],
    data_type: Optional[str],
    data_type_other: Optional[str],
    recursive: bool,
    interactive: bool,
    yes: bool,
) -> None:
    """Upload files to a project/subject/session/data type destination.

    Every file is sent concurrently as its own request. A batch is rejected
    as a whole if any file name is already selected or any file is 1 GB or
    larger. Exits with status 1 if any upload failed.

    Example:
        streamerctl upload --project 3010000.01 --subject 001 --session 1 \\
            --data-type meg ./recordings
        streamerctl upload -i ./recordings
    """
    client = ctx.get_client()
    session = ctx.get_session()

    projects = ProjectService(client, session).list()
    if not projects:
        raise UploadNotPermittedError("no projects available to this account")

    machine = SelectionStateMachine(projects)
    destination = _fill_destination(
        ctx,
        machine,
        project_number=project_number or ctx.get_profile().default_project,
        subject=subject,
        session_label=session_label,
        data_type=data_type,
        data_type_other=data_type_other,
        interactive=interactive,
    )

    registry = FileRegistry()
    uploads = UploadService(client, session)
    failed = False

    while True:
        _register_files(ctx, registry, paths, recursive, interactive)
        _show_plan(ctx, destination, registry)

        if interactive and not yes:
            click.confirm(
                f"Upload {len(registry)} file(s) to {destination.display()}?", abort=True
            )

        result = _run_upload(ctx, uploads, machine, registry)
        _report_result(ctx, result)
        failed = failed or result.overall_failed

        uploads.acknowledge(registry)
        if not interactive or not click.confirm(
            "Upload another batch to the same destination?", default=False
        ):
            break
        paths = ()

    if failed:
        sys.exit(ExitCode.GENERAL_ERROR)
