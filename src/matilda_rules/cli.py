#!/usr/bin/env python3

import rich_click as click

# Configure rich-click to enable markup - MUST be first!
click.rich_click.USE_RICH_MARKUP = True

# 🧛‍♂️ Apply Dracula theme colors
click.rich_click.STYLE_OPTION = "#ff79c6"      # Dracula Pink - for option flags
click.rich_click.STYLE_ARGUMENT = "#8be9fd"    # Dracula Cyan - for argument types
click.rich_click.STYLE_COMMAND = "#50fa7b"     # Dracula Green - for subcommands
click.rich_click.STYLE_USAGE = "#bd93f9"       # Dracula Purple - for "Usage:" line
click.rich_click.STYLE_HELPTEXT = "#b3b8c0"    # Light gray - for help descriptions

"""
GOOBITS Matilda Rules - clean up transcriptions with your own find/replace rules
"""

import json
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from . import __version__, app_hooks
from .core.config import get_config, reset_config
from .core.logging import setup_logging
from .rules import MatchMode, RuleError

console = Console()
err_console = Console(stderr=True)

MODE_CHOICES = [mode.value for mode in MatchMode]


def _read_text(text: str | None) -> str:
    if text is not None:
        return text
    return click.get_text_stream("stdin").read().rstrip("\n")


def _store(ctx: click.Context):
    try:
        return app_hooks.open_rule_store(get_config(), ctx.obj.get("rules_file"))
    except RuleError as exc:
        err_console.print(f"[red]Error:[/red] {exc}", markup=True, highlight=False)
        ctx.exit(1)


def _finish(ctx: click.Context, result: dict[str, Any], as_json: bool, render) -> None:
    """Print a hook result and exit non-zero on error."""
    if as_json:
        click.echo(json.dumps(result, ensure_ascii=False, indent=2))
    elif result.get("status") == "error":
        err_console.print(Text.assemble(("Error: ", "red"), result.get("message", "unknown error")))
    else:
        render(result)
    if result.get("status") == "error":
        ctx.exit(1)


def _rule_table(rules: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("ID", style="magenta")
    table.add_column("On")
    table.add_column("Mode")
    table.add_column("Priority", justify="right")
    table.add_column("Pattern")
    table.add_column("Replacement")
    for index, rule in enumerate(rules):
        replacement = rule["replacement"]
        table.add_row(
            str(index),
            rule["id"].replace("-", "")[:8],
            Text("✓", style="green") if rule["enabled"] else Text("✗", style="red"),
            rule["match_mode"],
            str(rule["priority"]),
            Text(rule["pattern"]),
            Text(replacement) if replacement else Text("(delete)", style="dim italic"),
        )
    return table


def _print_rule(verb: str):
    def render(result: dict[str, Any]) -> None:
        rule = result["rule"]
        console.print(
            Text.assemble((f"{verb} ", "green"), (rule["id"].replace("-", "")[:8], "magenta"), f"  {rule['pattern']}")
        )

    return render


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="Matilda Rules")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help=" ⚙️  Configuration file path")
@click.option("--rules-file", type=click.Path(dir_okay=False), help=" 📄 Rules file (overrides config)")
@click.option("--debug", is_flag=True, help=" 🐛 Enable detailed debug logging")
@click.pass_context
def main(ctx, config_path, rules_file, debug):
    """🧹 [bold cyan]Matilda Rules[/bold cyan] - Find/replace rules that clean up transcriptions

    \b
    Rules run in order after transcription. Each rule sees the output of the
    rule before it, so later rules can tidy up what earlier rules leave behind.

    \b
    [bold yellow]🎯 Quick Start:[/bold yellow]
    \b
      [green]matilda-rules add "..." ""[/green]                       [italic]# Delete ellipses[/italic]
      [green]matilda-rules add um "" --mode "Whole Word"[/green]      [italic]# Drop filler words[/italic]
      [green]matilda-rules add "\\s{2,}" " " --mode Regex[/green]      [italic]# Collapse spaces[/italic]
      [green]echo "um, so..." | matilda-rules apply[/green]           [italic]# Clean text[/italic]
      [green]matilda-rules preview "um, so..."[/green]                [italic]# See each step[/italic]
    """
    ctx.ensure_object(dict)
    if config_path:
        reset_config(config_path)
    config = get_config()
    setup_logging("matilda_rules", "DEBUG" if debug else config.log_level, include_console=debug or None)
    ctx.obj["rules_file"] = rules_file


@main.command()
@click.argument("text", required=False)
@click.option("--json", "as_json", is_flag=True, help=" 📄 Output JSON format")
@click.pass_context
def apply(ctx, text, as_json):
    """Apply the enabled rules to TEXT (or stdin)."""
    result = app_hooks.on_apply(_read_text(text), store=_store(ctx))
    _finish(ctx, result, as_json, lambda r: click.echo(r["text"]))


@main.command()
@click.argument("text", required=False)
@click.option("--json", "as_json", is_flag=True, help=" 📄 Output JSON format")
@click.pass_context
def preview(ctx, text, as_json):
    """Show the text after every rule, step by step."""
    result = app_hooks.on_preview(_read_text(text), store=_store(ctx))

    def render(r: dict[str, Any]) -> None:
        if not r["steps"]:
            console.print(Text("No enabled rules apply.", style="dim"))
            click.echo(r["final"])
            return
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("")
        table.add_column("Mode")
        table.add_column("Pattern")
        table.add_column("Output")
        for step in r["steps"]:
            style = "" if step["changed"] else "dim"
            table.add_row(
                Text("→", style="cyan") if step["changed"] else Text("·", style="dim"),
                Text(step["match_mode"], style=style),
                Text(step["pattern"], style=style),
                Text(step["output"], style=style),
            )
        console.print(table)
        console.print(Text.assemble(("✓ Result: ", "bold green"), r["final"]))

    _finish(ctx, result, as_json, render)


@main.command(name="list")
@click.option("--enabled-only", is_flag=True, help=" ✅ Only show enabled rules")
@click.option("--json", "as_json", is_flag=True, help=" 📄 Output JSON format")
@click.pass_context
def list_rules(ctx, enabled_only, as_json):
    """List rules in pipeline order."""
    result = app_hooks.on_list(enabled_only=enabled_only, store=_store(ctx))

    def render(r: dict[str, Any]) -> None:
        if not r["rules"]:
            console.print(Text("No rules yet. Add one with: matilda-rules add PATTERN [REPLACEMENT]", style="dim"))
            return
        console.print(_rule_table(r["rules"]))

    _finish(ctx, result, as_json, render)


@main.command()
@click.argument("pattern")
@click.argument("replacement", required=False, default="")
@click.option("--mode", type=click.Choice(MODE_CHOICES, case_sensitive=False), default="Literal", help=" 🔍 Match mode")
@click.option("--priority", type=int, help=" 🔢 Position key (default: after existing rules)")
@click.option("--disabled", is_flag=True, help=" 💤 Add the rule switched off")
@click.option("--json", "as_json", is_flag=True, help=" 📄 Output JSON format")
@click.pass_context
def add(ctx, pattern, replacement, mode, priority, disabled, as_json):
    """Add a rule replacing PATTERN with REPLACEMENT (empty deletes)."""
    result = app_hooks.on_add(
        pattern, replacement, mode=mode, priority=priority, enabled=not disabled, store=_store(ctx)
    )
    _finish(ctx, result, as_json, _print_rule("Added"))


@main.command()
@click.argument("rule_id")
@click.option("--pattern", help=" 🔍 New pattern")
@click.option("--replacement", help=" ✏️  New replacement")
@click.option("--mode", type=click.Choice(MODE_CHOICES, case_sensitive=False), help=" 🔍 New match mode")
@click.option("--priority", type=int, help=" 🔢 New priority")
@click.option("--json", "as_json", is_flag=True, help=" 📄 Output JSON format")
@click.pass_context
def edit(ctx, rule_id, pattern, replacement, mode, priority, as_json):
    """Change an existing rule."""
    result = app_hooks.on_update(
        rule_id, pattern=pattern, replacement=replacement, mode=mode, priority=priority, store=_store(ctx)
    )
    _finish(ctx, result, as_json, _print_rule("Updated"))


@main.command()
@click.argument("rule_id")
@click.option("--json", "as_json", is_flag=True, help=" 📄 Output JSON format")
@click.pass_context
def remove(ctx, rule_id, as_json):
    """Delete a rule."""
    result = app_hooks.on_remove(rule_id, store=_store(ctx))
    _finish(ctx, result, as_json, lambda r: console.print(Text(f"Removed {r['rule_id']}", style="green")))


@main.command()
@click.argument("rule_id")
@click.option("--json", "as_json", is_flag=True, help=" 📄 Output JSON format")
@click.pass_context
def enable(ctx, rule_id, as_json):
    """Switch a rule on."""
    result = app_hooks.on_enable(rule_id, store=_store(ctx))
    _finish(ctx, result, as_json, _print_rule("Enabled"))


@main.command()
@click.argument("rule_id")
@click.option("--json", "as_json", is_flag=True, help=" 📄 Output JSON format")
@click.pass_context
def disable(ctx, rule_id, as_json):
    """Switch a rule off."""
    result = app_hooks.on_disable(rule_id, store=_store(ctx))
    _finish(ctx, result, as_json, _print_rule("Disabled"))


@main.command()
@click.argument("rule_id")
@click.argument("index", type=int)
@click.option("--json", "as_json", is_flag=True, help=" 📄 Output JSON format")
@click.pass_context
def move(ctx, rule_id, index, as_json):
    """Move a rule to position INDEX in the pipeline (0 runs first)."""
    result = app_hooks.on_move(rule_id, index, store=_store(ctx))
    _finish(ctx, result, as_json, lambda r: console.print(_rule_table(r["rules"])))


@main.command()
@click.argument("pattern")
@click.argument("replacement", required=False, default="")
@click.option("--mode", type=click.Choice(MODE_CHOICES, case_sensitive=False), default="Literal", help=" 🔍 Match mode")
@click.option("--json", "as_json", is_flag=True, help=" 📄 Output JSON format")
@click.pass_context
def validate(ctx, pattern, replacement, mode, as_json):
    """Check whether a rule would be accepted, without saving it."""
    result = app_hooks.on_validate(pattern, mode=mode, replacement=replacement)
    _finish(ctx, result, as_json, lambda r: console.print(Text(f"✓ {r['message']}", style="green")))


@main.command()
@click.option("--json", "as_json", is_flag=True, help=" 📄 Output JSON format")
@click.pass_context
def status(ctx, as_json):
    """Show configuration and rule counts."""
    result = app_hooks.on_status(store=_store(ctx))

    def render(r: dict[str, Any]) -> None:
        table = Table(show_header=False, box=None)
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Post-processing", "[green]on[/green]" if r["enabled"] else "[red]off[/red]")
        table.add_row("Rules file", Text(r["rules_file"]))
        table.add_row("Ordering", r["ordering"])
        table.add_row("Match modes", ", ".join(r["match_modes"]))
        table.add_row("Rules", f"{r['enabled_rules']} enabled / {r['total_rules']} total")
        console.print(table)

    _finish(ctx, result, as_json, render)


if __name__ == "__main__":
    main()
