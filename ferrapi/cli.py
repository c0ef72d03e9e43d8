"""ferrapi CLI - HTTP requests you can save under a namespace and replay."""

import sys

import click

from ferrapi.core import DEFAULT_TIMEOUT

TOOL_HELP = """\
ferrapi — HTTP request tool with saved, replayable request definitions.

\b
MODES
─────
  Direct:     ferrapi URL [options]          or  ferrapi -u URL [options]
  Namespace:  ferrapi NAMESPACE [options]    e.g. ferrapi SystemA/example
  Navigate:   ferrapi -n [options]           pick a saved namespace interactively

\b
DIRECT MODE
───────────
  ferrapi https://api.example.com/users
  ferrapi -X POST https://api.example.com/users -v '{"name":"test"}'

\b
SAVING AND REPLAYING
────────────────────
  Save the request under a namespace with -s:
    ferrapi SystemA/example -X POST -u https://api.example.com/users \\
        -H "Content-Type: application/json" -v '{"name":"test"}' -s

  Replay it later, overriding only what changes:
    ferrapi SystemA/example -X POST
    ferrapi SystemA/example -X POST -v '{"name":"other"}' -s

  Each method under a namespace is its own record:
    ~/.ferrapi_tester/SystemA/example/POST.json
    ~/.ferrapi_tester/SystemA/example/GET.json

\b
MERGE RULES
───────────
  method    always the -X value (default GET)
  url       -u, or a URL TARGET, replaces the saved URL
  headers   -H values are added to the saved headers (same name overwrites)
  body      -j beats -v beats -d; replaces the saved body entirely
            -j/-v text that is not valid JSON is sent as a JSON string
  timeout   --timeout, else config default, else 30s

\b
DELETING
────────
  ferrapi SystemA/example -X POST --delete     remove one method's record
  ferrapi SystemA --delete-all                 remove the namespace and all below it
  ferrapi SystemA --delete-all -y              ... without asking

\b
PLACEHOLDERS
────────────
  $VAR / ${VAR} in the URL and header values are resolved from the
  environment (and defaults.env_file) when the request is sent.
  Saved records keep the placeholder text.

\b
CONFIG FILE FORMAT (.ferrapi.yaml)
──────────────────────────────────
  Config resolution order:
    1. -c/--config flag (explicit path)
    2. .ferrapi.yaml / .ferrapi.yml / ferrapi.yaml / ferrapi.yml in CWD
    3. ~/.ferrapi_tester/config.yaml (global)

  \b
  defaults:
    store_dir: ~/.ferrapi_tester    # where records live
    timeout: 30                     # seconds
    env_file: .env                  # load .env for placeholders

\b
OUTPUT FORMAT
─────────────
    STATUS: 200
    TIME: 45ms
    BODY:
    {"id": 1, "name": "test"}

  --verbose adds response headers. --raw prints only the body.
"""


@click.command(
    cls=click.Command,
    help=TOOL_HELP,
    context_settings={"max_content_width": 88},
)
@click.argument("target", required=False)
@click.option(
    "-X",
    "--request",
    "method",
    default="GET",
    show_default=True,
    help="HTTP method: GET, POST, PUT or DELETE.",
)
@click.option(
    "-H",
    "--header",
    multiple=True,
    help="HTTP header as 'Name: Value'. Repeatable. Merged into saved headers.",
)
@click.option("-d", "--data", default=None, help="Request body as a plain string.")
@click.option(
    "-v",
    "--value",
    default=None,
    help="Request body; sent as JSON if it parses, else as a JSON string.",
)
@click.option(
    "-j",
    "--json",
    "json_value",
    default=None,
    help="Request body as JSON. Takes precedence over --value and --data.",
)
@click.option(
    "-u",
    "--url",
    default=None,
    help="Destination URL. Replaces the saved URL and is saved with -s.",
)
@click.option(
    "--timeout",
    type=click.IntRange(min=0),
    default=None,
    help="Request timeout in seconds. Default: 30.",
)
@click.option(
    "-s",
    "--save",
    is_flag=True,
    default=False,
    help="Save the effective request under TARGET.",
)
@click.option(
    "--delete",
    "delete_one",
    is_flag=True,
    default=False,
    help="Delete the saved record for TARGET and -X method, then exit.",
)
@click.option(
    "--delete-all",
    "delete_all",
    is_flag=True,
    default=False,
    help="Delete TARGET with every method and sub-namespace, then exit.",
)
@click.option(
    "-y",
    "--yes",
    "assume_yes",
    is_flag=True,
    default=False,
    help="Do not ask for confirmation with --delete-all.",
)
@click.option(
    "-n",
    "--navigate",
    "navigate_flag",
    is_flag=True,
    default=False,
    help="Pick the namespace interactively from the saved ones.",
)
@click.option(
    "--list",
    "show_list",
    is_flag=True,
    default=False,
    help="List saved namespaces and their methods.",
)
@click.option(
    "--verbose",
    is_flag=True,
    default=False,
    help="Include response headers in output.",
)
@click.option(
    "--raw",
    is_flag=True,
    default=False,
    help="Output the response body only. Useful for piping.",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    default=None,
    help="Config file path. Default: .ferrapi.yaml in CWD, then ~/.ferrapi_tester/config.yaml.",
)
@click.option(
    "--store-dir",
    "store_dir_override",
    default=None,
    help="Override the directory saved requests live in. Default: ~/.ferrapi_tester.",
)
def main(
    target,
    method,
    header,
    data,
    value,
    json_value,
    url,
    timeout,
    save,
    delete_one,
    delete_all,
    assume_yes,
    navigate_flag,
    show_list,
    verbose,
    raw,
    config_file,
    store_dir_override,
):
    """Send an HTTP request, optionally saved under a namespace."""
    from ferrapi.core import load_config, resolve_config_path, resolve_store_dir
    from ferrapi.errors import FerrapiError

    # --- Load config ---
    config_path = resolve_config_path(config_file)
    config = load_config(config_path)
    store_dir = resolve_store_dir(store_dir_override, config)

    try:
        if show_list:
            _cmd_list(store_dir)
            return

        if navigate_flag:
            target = _cmd_navigate(target, store_dir)

        if delete_one or delete_all:
            _cmd_delete(target, method, store_dir, delete_all, assume_yes)
            return

        _cmd_request(
            target,
            method,
            header,
            data,
            value,
            json_value,
            url,
            timeout,
            save,
            verbose,
            raw,
            config,
            store_dir,
        )
    except FerrapiError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(1)


# ── Subcommand implementations ──────────────────────────────────────────


def _make_prompter():
    from ferrapi.navigator import QuestionaryPrompter

    return QuestionaryPrompter()


def _cmd_navigate(target, store_dir):
    from ferrapi.errors import ValidationError
    from ferrapi.navigator import navigate

    if target:
        raise ValidationError("--navigate cannot be combined with a TARGET.")
    namespace = navigate(store_dir, _make_prompter())
    click.echo(f"Namespace: {namespace}", err=True)
    return namespace


def _cmd_list(store_dir):
    from ferrapi.store import list_records

    records = list_records(store_dir)
    if not records:
        click.echo(f"No saved namespaces in: {store_dir}")
        return

    by_namespace: dict[str, list[str]] = {}
    for namespace, method in records:
        by_namespace.setdefault(namespace, []).append(method)

    click.echo(f"Namespaces in: {store_dir}")
    click.echo(f"{len(by_namespace)} saved:\n")
    width = max(len(ns) for ns in by_namespace)
    for namespace, methods in by_namespace.items():
        click.echo(f"  {namespace:<{width}}  {', '.join(methods)}")


def _cmd_delete(target, method, store_dir, delete_all, assume_yes):
    from ferrapi.core import is_url, namespace_dir, normalize_method, resolve_record_path
    from ferrapi.store import delete_namespace, delete_record

    flag = "--delete-all" if delete_all else "--delete"
    if not target or is_url(target):
        click.echo(f"{flag} needs a namespace TARGET. Nothing deleted.", err=True)
        return

    if delete_all:
        path = namespace_dir(store_dir, target)
        if not path.is_dir():
            click.echo(f"Nothing to delete: namespace '{target}' does not exist.", err=True)
            return
        if not assume_yes and not click.confirm(
            f"Delete namespace '{target}' with every method and sub-namespace?",
            default=False,
            err=True,
        ):
            click.echo("Aborted. Nothing deleted.", err=True)
            return
        delete_namespace(path, store_dir)
        click.echo(f"Deleted namespace: {path}", err=True)
        return

    path = resolve_record_path(store_dir, target, normalize_method(method))
    if delete_record(path, store_dir):
        click.echo(f"Deleted: {path}", err=True)
    else:
        click.echo(f"Nothing to delete: {path} does not exist.", err=True)


def _cmd_request(
    target,
    method,
    header,
    data,
    value,
    json_value,
    url,
    timeout,
    save,
    verbose,
    raw,
    config,
    store_dir,
):
    from ferrapi.core import (
        is_url,
        load_env,
        normalize_method,
        resolve_record_path,
    )
    from ferrapi.merge import merge_record, parse_headers
    from ferrapi.store import load_record, save_record

    defaults = config.get("defaults", {})

    # Validate everything the invocation supplies before touching the store
    method = normalize_method(method)
    headers = parse_headers(header)

    target_is_url = is_url(target)
    namespace = target if target and not target_is_url else None
    # --url wins over a URL-shaped TARGET
    url_to_use = url or (target if target_is_url else None)

    record_path = resolve_record_path(store_dir, namespace, method) if namespace else None
    stored = load_record(record_path) if record_path else {}

    effective = merge_record(
        stored,
        method,
        url=url_to_use,
        headers=headers,
        json_value=json_value,
        value=value,
        data=data,
        timeout=_resolve_timeout(timeout, defaults.get("timeout")),
    )

    if save:
        if record_path:
            path = save_record(effective, record_path)
            click.echo(f"Configuration saved to {path}", err=True)
        else:
            click.echo("--save is ignored because TARGET is not a namespace.", err=True)

    env = load_env(defaults.get("env_file"), config.get("_config_dir") or ".")
    _dispatch(effective, env, verbose, raw)


def _dispatch(effective, env, verbose, raw):
    from ferrapi.core import resolve_value
    from ferrapi.errors import ValidationError
    from ferrapi.executor import execute_request, format_output

    if not effective.get("url"):
        raise ValidationError(
            "URL is not specified. Pass -u URL, a URL TARGET, or a namespace with a saved URL.",
        )

    url = resolve_value(effective["url"], env)
    headers = {k: resolve_value(v, env) for k, v in effective.get("headers", {}).items()}

    result = execute_request(
        method=effective["method"],
        url=url,
        headers=headers,
        body=effective.get("data"),
        timeout=effective["timeout"],
    )
    if result.error:
        click.echo(f"ERROR: {result.error}", err=True)
        sys.exit(1)

    click.echo(format_output(result, verbose=verbose, raw=raw))


# ── Helpers ──────────────────────────────────────────────────────────────


def _resolve_timeout(*sources, default=DEFAULT_TIMEOUT):
    """Return the first timeout that is set, or default."""
    from ferrapi.errors import ValidationError

    for t in sources:
        if t is None:
            continue
        if isinstance(t, bool) or not isinstance(t, int) or t < 0:
            raise ValidationError(f"Invalid timeout: {t!r} (expected whole seconds)")
        return t
    return default
