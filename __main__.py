"""CLI entry point for formsmith.

This module acts as the central entry point for the project's CLI tools.
Form files are JSON documents in the persisted form shape; stored forms live
in the SQLite database at FORMSMITH_DB_PATH.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from formsmith.config import get_log_level
from formsmith.core import FormsmithError, get_logger, setup_logging

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")


def _read_json(path: str) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _write_json(data: Any, output: str | None) -> None:
    text = json.dumps(data, indent=2)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        logger.info(f"Wrote {output}")
    else:
        print(text)


def _load_form_file(path: str):
    from formsmith.builder import hydrate_form

    return hydrate_form(_read_json(path), title=Path(path).stem)


# =============================================================================
# Schema Command
# =============================================================================


def cmd_schema(args: argparse.Namespace) -> int:
    """Print the form JSON schema or the field kind catalog."""
    from formsmith.schema import KIND_REGISTRY, export_json_schema

    if args.kinds:
        for meta in KIND_REGISTRY.values():
            aliases = f" (aliases: {', '.join(meta.aliases)})" if meta.aliases else ""
            print(f"{meta.kind.value:<10} {meta.category.value:<7} {meta.description}{aliases}")
        return 0

    _write_json(export_json_schema(), args.output)
    return 0


def handle_schema_command(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(
        prog="python . schema", description="Export the form JSON schema"
    )
    parser.add_argument("--kinds", action="store_true", help="List field kinds instead")
    parser.add_argument("--output", "-o", help="Write to file instead of stdout")
    return cmd_schema(parser.parse_args(argv))


# =============================================================================
# Authoring Commands
# =============================================================================


def cmd_new(args: argparse.Namespace) -> int:
    """Create an empty form file."""
    from formsmith.builder import new_form

    form = new_form(
        title=args.title,
        description=args.description,
        placement="grid" if args.grid else "flow",
    )
    _write_json(form.to_json(), args.output)
    return 0


def handle_new_command(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(prog="python . new", description="Create a form")
    parser.add_argument("title", help="Form title")
    parser.add_argument("--description", "-d", help="Form description")
    parser.add_argument("--grid", action="store_true", help="Use grid placement")
    parser.add_argument("--output", "-o", help="Output file (default: stdout)")
    return cmd_new(parser.parse_args(argv))


def cmd_add(args: argparse.Namespace) -> int:
    """Append a field to a form file (in place)."""
    from formsmith.builder import append_field, update_field

    try:
        form = _load_form_file(args.form)
        form = append_field(form, args.kind, args.row, args.col, field_id=args.id)
        item = form.fields[-1]

        updates: dict[str, Any] = {}
        if args.label is not None:
            updates["label"] = args.label
        if args.required:
            updates["required"] = True
        if args.options:
            updates["options"] = [o.strip() for o in args.options.split(",") if o.strip()]
        if updates:
            form = update_field(form, item.id, updates)
    except FormsmithError as e:
        logger.error(str(e))
        return 1

    Path(args.form).write_text(form.to_json_string(indent=2) + "\n", encoding="utf-8")
    print(f"Added {item.kind.value} field {item.id}")
    return 0


def handle_add_command(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(prog="python . add", description="Add a field")
    parser.add_argument("form", help="Form JSON file")
    parser.add_argument("kind", help="Field kind (text, email, select, ...)")
    parser.add_argument("--id", help="Field id (default: generated)")
    parser.add_argument("--label", "-l", help="Field label")
    parser.add_argument("--required", "-r", action="store_true", help="Mark required")
    parser.add_argument("--options", help="Comma-separated options for choice kinds")
    parser.add_argument("--row", type=int, help="Grid row index")
    parser.add_argument("--col", type=int, help="Grid column index")
    return cmd_add(parser.parse_args(argv))


# =============================================================================
# Render & Validate Commands
# =============================================================================


def cmd_render(args: argparse.Namespace) -> int:
    """Render a form file in edit or fill mode."""
    from formsmith.render import format_presentation, render
    from formsmith.validation import validate_answers

    try:
        form = _load_form_file(args.form)
    except FormsmithError as e:
        logger.error(str(e))
        return 1

    answers = _read_json(args.answers) if args.answers else None
    errors = None
    if args.mode == "fill" and answers:
        errors = validate_answers(form, answers).errors

    presentation = render(form, args.mode, answers=answers, errors=errors)
    if args.json:
        _write_json(presentation.to_dict(), None)
    else:
        print(format_presentation(presentation))
    return 0


def handle_render_command(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(prog="python . render", description="Render a form")
    parser.add_argument("form", help="Form JSON file")
    parser.add_argument(
        "--mode", "-m", choices=["edit", "fill"], default="edit", help="Render mode"
    )
    parser.add_argument("--answers", "-a", help="Answers JSON file (fill mode)")
    parser.add_argument("--json", action="store_true", help="Print widget JSON")
    return cmd_render(parser.parse_args(argv))


def cmd_validate(args: argparse.Namespace) -> int:
    """Check a form's structure, or an answers file against the form."""
    from formsmith.validation import validate_answers, validate_form_schema

    try:
        form = _load_form_file(args.form)
    except FormsmithError as e:
        logger.error(str(e))
        return 1

    if args.answers:
        result = validate_answers(form, _read_json(args.answers))
        if result.valid:
            print("Answers are valid")
            return 0
        for field_id, message in result.errors.items():
            print(f"  {field_id}: {message}")
        return 1

    issues = validate_form_schema(form)
    if not issues:
        print(f"Form '{form.title}' is valid ({len(form.fields)} fields)")
        return 0
    for issue in issues:
        where = issue.field_id or "form"
        print(f"  [{issue.issue_type}] {where}: {issue.message}")
    return 1


def handle_validate_command(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(
        prog="python . validate", description="Validate a form or answers"
    )
    parser.add_argument("form", help="Form JSON file")
    parser.add_argument("answers", nargs="?", help="Answers JSON file")
    return cmd_validate(parser.parse_args(argv))


# =============================================================================
# Stored Forms Command
# =============================================================================


def _service(args: argparse.Namespace):
    from formsmith.storage import FormService

    return FormService(db_path=args.db)


def _actor(args: argparse.Namespace):
    from formsmith.storage import Actor

    return Actor(args.user, is_admin=args.admin)


def cmd_forms_list(args: argparse.Namespace) -> int:
    with _service(args) as service:
        forms = service.list_forms(_actor(args), limit=args.limit)
        if not forms:
            print("No forms stored")
            return 0
        for stored in forms:
            count = service.count_submissions(stored.id)
            print(
                f"{stored.id}  {stored.status.value:<9} {stored.title}"
                f"  ({len(stored.schema.fields)} fields, {count} submissions)"
            )
    return 0


def cmd_forms_import(args: argparse.Namespace) -> int:
    with _service(args) as service:
        try:
            form = _load_form_file(args.file)
            if args.title:
                form.title = args.title
            stored = service.create_form(_actor(args), form)
            if args.publish:
                service.publish(_actor(args), stored.id)
        except FormsmithError as e:
            logger.error(str(e))
            return 1
    print(stored.id)
    return 0


def cmd_forms_export(args: argparse.Namespace) -> int:
    from formsmith.schema import downgrade_form

    with _service(args) as service:
        try:
            form = service.get_schema(args.form_id)
        except FormsmithError as e:
            logger.error(str(e))
            return 1
    _write_json(downgrade_form(form) if args.legacy else form.to_json(), args.output)
    return 0


def cmd_forms_delete(args: argparse.Namespace) -> int:
    with _service(args) as service:
        try:
            service.delete_form(_actor(args), args.form_id)
        except FormsmithError as e:
            logger.error(str(e))
            return 1
    print(f"Deleted {args.form_id}")
    return 0


def handle_forms_command(argv: list[str]) -> int:
    """Handle stored form commands."""
    parser = argparse.ArgumentParser(
        prog="python . forms", description="Manage stored forms"
    )
    parser.add_argument("--db", help="Database path (default: FORMSMITH_DB_PATH)")
    parser.add_argument("--user", default="cli", help="Acting user id")
    parser.add_argument("--admin", action="store_true", help="Act as admin")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    list_parser = subparsers.add_parser("list", help="List stored forms")
    list_parser.add_argument("--limit", type=int, default=50)
    list_parser.set_defaults(func=cmd_forms_list)

    import_parser = subparsers.add_parser("import", help="Store a form file")
    import_parser.add_argument("file", help="Form JSON file (any known shape)")
    import_parser.add_argument("--title", help="Override the title")
    import_parser.add_argument("--publish", action="store_true", help="Publish it")
    import_parser.set_defaults(func=cmd_forms_import)

    export_parser = subparsers.add_parser("export", help="Write a stored form")
    export_parser.add_argument("form_id")
    export_parser.add_argument("--output", "-o")
    export_parser.add_argument(
        "--legacy", action="store_true", help="Bare-string options block list"
    )
    export_parser.set_defaults(func=cmd_forms_export)

    delete_parser = subparsers.add_parser("delete", help="Delete a stored form")
    delete_parser.add_argument("form_id")
    delete_parser.set_defaults(func=cmd_forms_delete)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1
    return args.func(args)


# =============================================================================
# MCP Server Command
# =============================================================================


def handle_mcp_command(argv: list[str]) -> int:
    """Handle MCP server commands.

    Usage:
        python . mcp run              # Start in STDIO mode
        python . mcp serve            # Start in HTTP mode
        python . mcp serve --port 8080
        python . mcp info             # Show server info
    """
    parser = argparse.ArgumentParser(prog="python . mcp", description="MCP server")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("run", help="Start server in STDIO mode")

    serve_parser = subparsers.add_parser("serve", help="Start server in HTTP mode")
    serve_parser.add_argument("--host", help="Bind address (default: MCP_HOST)")
    serve_parser.add_argument("--port", type=int, help="Port (default: MCP_PORT)")
    serve_parser.add_argument(
        "--transport", choices=["http", "sse"], default="http", help="Transport"
    )

    subparsers.add_parser("info", help="Show server information")

    args = parser.parse_args(argv)

    if args.command == "run":
        from formsmith.mcp.server import run_server

        logger.info("Starting MCP server in STDIO mode...")
        run_server()
        return 0

    if args.command == "serve":
        from formsmith.mcp import ServerConfig
        from formsmith.mcp.server import run_server

        config = ServerConfig.from_env(args.transport, host=args.host, port=args.port)
        logger.info(f"Listening on {config.url}")
        run_server(config)
        return 0

    if args.command == "info":
        from formsmith.mcp import get_server_capabilities, get_server_version

        print("formsmith MCP Server")
        print("=" * 40)
        print(f"Version: {get_server_version()}")
        for kind, names in get_server_capabilities().items():
            print(f"\n{kind.capitalize()} ({len(names)}):")
            for name in names:
                print(f"  {name}")
        return 0

    parser.print_help()
    return 1


# =============================================================================
# Main
# =============================================================================


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: python . {command} [args]")
    print("\n=== Authoring ===")
    print("  new        Create a form file")
    print("  add        Add a field to a form file")
    print("  schema     Export the form JSON schema / list field kinds")
    print("\n=== Preview & Validation ===")
    print("  render     Render a form in edit or fill mode")
    print("  validate   Check a form, or answers against it")
    print("\n=== Storage ===")
    print("  forms      list | import | export | delete stored forms")
    print("\n=== MCP Server ===")
    print("  mcp        run | serve | info")
    print("\nExamples:")
    print("  python . new Contact -o contact.json")
    print("  python . add contact.json email --label Email --required")
    print("  python . render contact.json --mode fill")
    print("  python . forms import contact.json --publish")
    print("  python . mcp serve --port 18090")


def main() -> int:
    """Main entry point for the CLI."""
    if len(sys.argv) < 2:
        show_help()
        return 1

    command = sys.argv[1]
    rest_args = sys.argv[2:]

    if command in ("-h", "--help"):
        show_help()
        return 0

    commands = {
        "schema": lambda: handle_schema_command(rest_args),
        "new": lambda: handle_new_command(rest_args),
        "add": lambda: handle_add_command(rest_args),
        "render": lambda: handle_render_command(rest_args),
        "validate": lambda: handle_validate_command(rest_args),
        "forms": lambda: handle_forms_command(rest_args),
        "mcp": lambda: handle_mcp_command(rest_args),
    }

    if command in commands:
        setup_logging(get_log_level())
        return commands[command]()

    logger.error(f"Unknown command: {command}")
    show_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
