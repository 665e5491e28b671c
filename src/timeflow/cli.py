"""Timeflow CLI - spacecraft activity scheduler."""

import json
import logging
import sys
from datetime import date, datetime, timezone
from pathlib import Path

import click

from .config import load_config
from .core.activities import RESOURCES, sort_by_core_instant
from .core.csv_import import ImportOptions, ImportOutcome
from .core.errors import InvalidTimestamp, UnknownTaskType
from .core.presets import TimeRangePreset, all_presets, format_tick_label, resolve_preset
from .core.task_types import (
    TASK_TYPE_KEYS,
    effective_task_types,
    reset_override,
    resolve_task_type,
    set_override,
)
from .core.view import ViewWindow, adjust_view_window, now_marker
from .core.windows import window_for
from .styles import style_for
from .workflows import (
    ChartView,
    add_batch,
    add_custom_preset,
    build_chart,
    clear_activities,
    delete_activity,
    edit_activity,
    export_csv,
    import_csv,
    load_activities,
    load_chart_settings,
    load_overrides,
    open_stores,
    remove_custom_preset,
    save_chart_settings,
    save_overrides,
    toggle_activity,
    update_custom_preset,
)

CHART_WIDTH = 60


def _stores():
    return open_stores(load_config())


def _parse_date(value: str | None) -> date:
    if not value:
        return datetime.now(timezone.utc).date()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Expected YYYY-MM-DD, got {value!r}")


def _parse_hhmm(value: str) -> tuple[int, int]:
    try:
        hour_str, minute_str = value.split(":")
        hour, minute = int(hour_str), int(minute_str)
    except ValueError:
        raise click.BadParameter(f"Expected HH:MM, got {value!r}")
    if not (0 <= hour <= 48 and 0 <= minute <= 59):
        raise click.BadParameter(f"Time out of range: {value!r}")
    return hour, minute


@click.group()
@click.version_option(package_name="timeflow")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Timeflow - schedule spacecraft activities."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


# ============== Activities ==============


@main.command()
@click.option(
    "--resource", "-r", "resources", required=True, multiple=True,
    help=f"One of {', '.join(RESOURCES)}; repeat for several",
)
@click.option(
    "--time", "-t", "core_times", required=True, multiple=True,
    help="Core instant (ISO-8601, UTC); repeat for several",
)
@click.option("--type", "task_type", required=True, help=f"One of {', '.join(TASK_TYPE_KEYS)}")
@click.option("--name", "-n", default=None, help="Display name")
@click.option("--pre", type=int, default=None, help="Pre-action minutes (default from type)")
@click.option("--post", type=int, default=None, help="Post-action minutes (default from type)")
def add(
    resources: tuple[str, ...],
    core_times: tuple[str, ...],
    task_type: str,
    name: str | None,
    pre: int | None,
    post: int | None,
):
    """Add activities, one per resource and time given."""
    try:
        created = add_batch(_stores(), list(resources), list(core_times), task_type, name, pre, post)
    except (ValueError, UnknownTaskType) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    for activity in created:
        click.echo(f"Added {activity.id}: {activity.name} at {activity.core_instant}")


@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_cmd(as_json: bool):
    """List activities by core time."""
    config = load_config()
    stores = open_stores(config)
    activities = sort_by_core_instant(load_activities(stores))
    overrides = load_overrides(stores)

    if as_json:
        click.echo(json.dumps([a.to_dict() for a in activities], indent=2))
        return

    if not activities:
        click.echo("No activities.")
        return

    for activity in activities:
        style = style_for(activity.task_type)
        effective = resolve_task_type(activity.task_type, overrides)
        mark = "x" if activity.is_completed else " "
        try:
            window = window_for(activity, config.core_duration_minutes)
            span = f"{window.window_start:%H:%M}-{window.window_end:%H:%M}Z"
        except InvalidTimestamp:
            span = "invalid time"
        icon = click.style(style.icon, fg=style.color)
        click.echo(
            f"[{mark}] {icon} {activity.core_instant:24} {span:14} "
            f"{activity.display_name(effective)}  ({activity.id})"
        )


@main.command()
@click.argument("activity_id")
@click.option("--name", "-n", default=None)
@click.option("--resource", "-r", default=None)
@click.option("--time", "-t", "core_time", default=None, help="Core instant (ISO-8601, UTC)")
@click.option("--pre", type=int, default=None, help="Pre-action minutes")
@click.option("--post", type=int, default=None, help="Post-action minutes")
def edit(activity_id: str, name, resource, core_time, pre, post):
    """Edit an activity."""
    changes = {}
    if name is not None:
        changes["name"] = name
    if resource is not None:
        changes["resource"] = resource.upper()
        if changes["resource"] not in RESOURCES:
            click.echo(f"Error: Unknown resource {resource!r}", err=True)
            sys.exit(1)
    if core_time is not None:
        changes["core_instant"] = core_time
    if pre is not None:
        changes["pre_action_duration"] = pre
    if post is not None:
        changes["post_action_duration"] = post

    try:
        activity = edit_activity(_stores(), activity_id, **changes)
    except KeyError:
        click.echo(f"Error: No activity {activity_id}", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"Updated {activity.id}: {activity.name}")


@main.command()
@click.argument("activity_id")
def complete(activity_id: str):
    """Toggle an activity's completed state."""
    try:
        activity = toggle_activity(_stores(), activity_id)
    except KeyError:
        click.echo(f"Error: No activity {activity_id}", err=True)
        sys.exit(1)
    state = "completed" if activity.is_completed else "pending"
    click.echo(f"{activity.name}: {state}")


@main.command()
@click.argument("activity_id")
def delete(activity_id: str):
    """Delete an activity."""
    try:
        activity = delete_activity(_stores(), activity_id)
    except KeyError:
        click.echo(f"Error: No activity {activity_id}", err=True)
        sys.exit(1)
    click.echo(f"Deleted {activity.name}")


@main.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
def clear(yes: bool):
    """Delete all activities."""
    if not yes and not click.confirm("Delete all activities?"):
        return
    count = clear_activities(_stores())
    click.echo(f"Deleted {count} activities.")


# ============== CSV ==============


@main.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--date", "-d", "target_date", default=None, help="Target date for HH:mm times (YYYY-MM-DD)")
@click.option("--time-only/--iso", default=None, help="coreTime column holds HH:mm[:ss] values")
@click.option("--strict", is_flag=True, help="Reject the whole file if any row has errors")
def import_cmd(csv_file: Path, target_date: str | None, time_only: bool | None, strict: bool):
    """Import activities from a CSV file.

    Required columns: resource, coreTime, type. Optional: name,
    preActionDuration, postActionDuration, isCompleted.
    """
    config = load_config()
    if time_only is None:
        time_only = config.csv_time_only
    options = ImportOptions(
        target_date=_parse_date(target_date) if (target_date or time_only) else None,
        default_mode_is_time_only=time_only,
    )

    result = import_csv(open_stores(config), csv_file.read_text(), options, allow_partial=not strict)

    for message in result.error_messages():
        click.echo(f"  ✗ {message}", err=True)

    match result.outcome:
        case ImportOutcome.CLEAN:
            click.echo(f"Imported {len(result.activities)} activities.")
        case ImportOutcome.PARTIAL if not strict:
            click.echo(
                f"Imported {len(result.activities)} activities, skipped {len(result.errors)} problems."
            )
        case _:
            click.echo("Import rejected; nothing was saved.", err=True)
            sys.exit(1)


@main.command("export")
@click.argument("csv_file", required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.option("--time-only", is_flag=True, help="Write coreTime as HH:mm:ss")
def export_cmd(csv_file: Path | None, time_only: bool):
    """Export activities as CSV (to stdout when no file is given)."""
    text = export_csv(_stores(), time_only=time_only)
    if csv_file is None:
        click.echo(text)
        return
    csv_file.write_text(text + "\n")
    click.echo(f"Exported to {csv_file}")


# ============== Chart ==============


def _bar(view: ChartView, entry) -> str:
    """Text bar for one entry: pre-action, core and post-action segments."""
    window = view.window
    scale = CHART_WIDTH / window.duration_minutes()

    def col(minute: float) -> int:
        return max(0, min(CHART_WIDTH, round((minute - window.start_minute) * scale)))

    midnight = datetime(
        view.reference_date.year, view.reference_date.month, view.reference_date.day, tzinfo=timezone.utc
    )
    core_start = (entry.window.core_start - midnight).total_seconds() / 60
    core_end = (entry.window.core_end - midnight).total_seconds() / 60

    start, end = col(entry.display_start), col(entry.display_end)
    core_a = max(start, col(core_start))
    core_b = min(end, max(col(core_end), core_a + 1))

    cells = [" "] * CHART_WIDTH
    for i in range(start, min(end, CHART_WIDTH)):
        cells[i] = "█" if core_a <= i < core_b else "░"
    return "".join(cells)


def _axis(view: ChartView) -> str:
    window = view.window
    left = format_tick_label(window.start_minute)
    mid = format_tick_label((window.start_minute + window.end_minute) / 2)
    right = format_tick_label(window.end_minute)
    gap = CHART_WIDTH - len(left) - len(mid) - len(right)
    return left + " " * (gap // 2) + mid + " " * (gap - gap // 2) + right


@main.command()
@click.option("--date", "-d", "target_date", default=None, help="Reference day (YYYY-MM-DD, UTC)")
@click.option("--preset", "-p", "preset_id", default=None, help="Time range preset id")
@click.option("--dst/--no-dst", default=None, help="Override the stored DST flag")
@click.option("--start", default=None, help="Window start HH:MM UTC (overrides preset)")
@click.option("--end", default=None, help="Window end HH:MM UTC, may exceed 24:00")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def chart(target_date, preset_id, dst, start, end, as_json: bool):
    """Show activities on a time axis."""
    config = load_config()
    reference = _parse_date(target_date)

    window = None
    if start or end:
        if not (start and end):
            raise click.UsageError("--start and --end must be given together")
        sh, sm = _parse_hhmm(start)
        eh, em = _parse_hhmm(end)
        start_minute, end_minute = sh * 60 + sm, eh * 60 + em
        # An end at or before the start runs into the next day
        if end_minute <= start_minute:
            end_minute += 24 * 60
        window = adjust_view_window(ViewWindow(0, 24 * 60), start_minute, end_minute)

    view = build_chart(open_stores(config), config, reference, preset_id, dst, window)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "date": view.reference_date.isoformat(),
                    "window": [view.window.start_minute, view.window.end_minute],
                    "entries": [
                        {
                            "id": e.activity.id,
                            "label": e.label,
                            "range": [e.start_minute, e.end_minute],
                            "display": [e.display_start, e.display_end],
                        }
                        for e in view.entries
                    ],
                },
                indent=2,
            )
        )
        return

    header = view.time_range.display_label if view.time_range else (
        f"{format_tick_label(view.window.start_minute)}-{format_tick_label(view.window.end_minute)} UTC"
    )
    click.echo(f"### {view.reference_date.strftime('%A, %B %d')} - {header}")

    if not view.entries:
        click.echo("No activities in this window.")
        return

    label_width = max(len(e.axis_label) for e in view.entries)
    for entry in view.entries:
        style = style_for(entry.activity.task_type)
        bar = click.style(_bar(view, entry), fg=style.color, dim=entry.activity.is_completed)
        click.echo(f"{entry.axis_label:<{label_width}} |{bar}|")

    click.echo(f"{'':<{label_width}}  {_axis(view)}")
    marker = now_marker(view.reference_date, view.window, datetime.now(timezone.utc))
    if marker is not None:
        click.echo(f"Now: {format_tick_label(marker)} UTC")


# ============== Task types ==============


@main.group(invoke_without_command=True)
@click.pass_context
def types(ctx):
    """Show or configure task types."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(types_show)


@types.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def types_show(as_json: bool = False):
    """Show effective task types."""
    stores = _stores()
    overrides = load_overrides(stores)
    effective = effective_task_types(overrides)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "key": t.key,
                        "label": t.label,
                        "preActionDuration": t.pre_action_duration,
                        "postActionDuration": t.post_action_duration,
                        "preActionLabel": t.pre_action_label,
                        "postActionLabel": t.post_action_label,
                        "customized": t.key in overrides,
                    }
                    for t in effective
                ],
                indent=2,
            )
        )
        return

    for t in effective:
        style = style_for(t.key)
        marker = "*" if t.key in overrides else " "
        phases = f"{t.pre_action_label or 'Pre-Action'} {t.pre_action_duration}m / "
        phases += f"{t.post_action_label or 'Post-Action'} {t.post_action_duration}m"
        click.echo(f"{marker}{click.style(style.icon, fg=style.color)} {t.key:12} {t.label:16} {phases}")


@types.command("set")
@click.argument("key")
@click.option("--label", default=None)
@click.option("--pre", type=int, default=None, help="Default pre-action minutes")
@click.option("--post", type=int, default=None, help="Default post-action minutes")
@click.option("--pre-label", default=None)
@click.option("--post-label", default=None)
def types_set(key: str, label, pre, post, pre_label, post_label):
    """Override a task type's defaults."""
    stores = _stores()
    try:
        overrides = set_override(
            load_overrides(stores),
            key.lower(),
            label=label,
            pre_action_duration=pre,
            post_action_duration=post,
            pre_action_label=pre_label,
            post_action_label=post_label,
        )
    except UnknownTaskType as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    save_overrides(stores, overrides)
    click.echo(f"Saved settings for {key.lower()}.")


@types.command("reset")
@click.argument("key", required=False)
def types_reset(key: str | None):
    """Reset one task type (or all) to built-in defaults."""
    stores = _stores()
    if key and key.lower() not in TASK_TYPE_KEYS:
        click.echo(f"Error: Unknown task type {key!r}", err=True)
        sys.exit(1)
    save_overrides(stores, reset_override(load_overrides(stores), key.lower() if key else None))
    click.echo(f"Reset {key.lower() if key else 'all task types'} to defaults.")


# ============== Presets ==============


@main.group(invoke_without_command=True)
@click.pass_context
def presets(ctx):
    """Show or select time range presets."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(presets_list)


@presets.command("list")
def presets_list():
    """List presets resolved with the current DST setting."""
    config = load_config()
    settings = load_chart_settings(_stores(), config)
    mode = "DST (UTC-6)" if settings.dst_active else "standard (UTC-7)"
    click.echo(f"Offset mode: {mode}")
    for preset in all_presets(settings.custom_presets):
        resolved = resolve_preset(preset.id, settings.dst_active, settings.custom_presets)
        marker = "*" if preset.id == settings.selected_preset_id else " "
        click.echo(f"{marker} {preset.id:18} {resolved.display_label}")


@presets.command("select")
@click.argument("preset_id")
def presets_select(preset_id: str):
    """Select the default preset for charts."""
    config = load_config()
    stores = open_stores(config)
    settings = load_chart_settings(stores, config)
    if preset_id not in {p.id for p in all_presets(settings.custom_presets)}:
        click.echo(f"Error: Unknown preset {preset_id!r}", err=True)
        sys.exit(1)
    settings.selected_preset_id = preset_id
    save_chart_settings(stores, settings)
    click.echo(f"Selected {preset_id}.")


@presets.command("dst")
@click.argument("state", type=click.Choice(["on", "off"]))
def presets_dst(state: str):
    """Turn the daylight saving offset on or off."""
    config = load_config()
    stores = open_stores(config)
    settings = load_chart_settings(stores, config)
    settings.dst_active = state == "on"
    save_chart_settings(stores, settings)
    click.echo(f"DST offset {state}.")


@presets.command("add")
@click.argument("preset_id")
@click.option("--label", required=True)
@click.option("--start", required=True, help="Local start HH:MM")
@click.option("--end", required=True, help="Local end HH:MM (24:00 for end of day)")
@click.option("--utc", "fixed_utc", is_flag=True, help="Times are UTC, not local")
def presets_add(preset_id: str, label: str, start: str, end: str, fixed_utc: bool):
    """Add a custom preset."""
    sh, sm = _parse_hhmm(start)
    eh, em = _parse_hhmm(end)
    if sh > 23 or eh > 24:
        raise click.BadParameter("Preset hours must be 00-23 (end may be 24:00)")
    preset = TimeRangePreset(preset_id, label, sh, sm, eh, em, fixed_utc=fixed_utc)
    config = load_config()
    try:
        add_custom_preset(open_stores(config), config, preset)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"Added preset {preset_id}.")


@presets.command("edit")
@click.argument("preset_id")
@click.option("--label", default=None)
@click.option("--start", default=None, help="Local start HH:MM")
@click.option("--end", default=None, help="Local end HH:MM (24:00 for end of day)")
@click.option("--utc/--local", "fixed_utc", default=None, help="Whether times are UTC")
def presets_edit(preset_id: str, label, start, end, fixed_utc):
    """Change a custom preset."""
    changes = {"label": label, "fixed_utc": fixed_utc}
    if start is not None:
        changes["start_hour"], changes["start_minute"] = _parse_hhmm(start)
        if changes["start_hour"] > 23:
            raise click.BadParameter("Preset start hour must be 00-23")
    if end is not None:
        changes["end_hour"], changes["end_minute"] = _parse_hhmm(end)
        if changes["end_hour"] > 24:
            raise click.BadParameter("Preset end may be at most 24:00")

    config = load_config()
    try:
        update_custom_preset(open_stores(config), config, preset_id, **changes)
    except KeyError:
        click.echo(f"Error: No custom preset {preset_id!r}", err=True)
        sys.exit(1)
    click.echo(f"Updated preset {preset_id}.")


@presets.command("remove")
@click.argument("preset_id")
def presets_remove(preset_id: str):
    """Remove a custom preset."""
    config = load_config()
    try:
        remove_custom_preset(open_stores(config), config, preset_id)
    except KeyError:
        click.echo(f"Error: No custom preset {preset_id!r}", err=True)
        sys.exit(1)
    click.echo(f"Removed preset {preset_id}.")


if __name__ == "__main__":
    main()
