# cliflow

Building blocks for command-line applications: typed flags that take their
values from the command line, environment variables or files; a flag set that
parses argument lists; a context for reading parsed values; errors that carry
exit codes; help templates with a renderer; Markdown documentation and fish
shell completion generated from a description of an application.

## Installation

```
pip install cliflow
```

For running the tests:

```
pip install "cliflow[test]"
pytest
```

## Flags

Flags are dataclasses with keyword-only fields. A flag name may list several
spellings separated by commas, e.g. `"config, c"`; the flag is defined under
each of them.

- `cliflow.flags`: `BoolFlag` (false unless given), `BoolTFlag` (true unless
  turned off)
- `cliflow.numeric`: `IntFlag`, `Int64Flag`, `UintFlag`, `Uint64Flag`,
  `Float64Flag`, `DurationFlag` (values such as `1h30m`, `250ms`, held as
  `datetime.timedelta`)
- `cliflow.slices`: `IntSliceFlag`, `Int64SliceFlag`, `StringSliceFlag`
  (repeatable flags collecting lists) and `GenericFlag` (backed by any object
  with `set(text)` and a string form)

Every flag has `name`, `usage`, `env_var`, `file_path`, `required` and
`hidden`. Scalar flags accept a `destination` callable that is called with the
value whenever it is assigned.

```python
from cliflow.flags import BoolFlag, build_flag_set
from cliflow.numeric import IntFlag, DurationFlag
from cliflow.slices import StringSliceFlag

flags = [
    BoolFlag(name="debug, d", usage="enable debugging", env_var="APP_DEBUG"),
    IntFlag(name="count, c", value=3, usage="how many `TIMES`"),
    DurationFlag(name="timeout", usage="wait this long"),
    StringSliceFlag(name="include, I", usage="paths to search"),
]

flag_set = build_flag_set("app", flags)
flag_set.parse(["-d", "--count", "5", "-I", "a", "-I", "b", "rest"])
print(flag_set.args())   # ['rest']
```

`env_var` and `file_path` may each list several sources separated by commas.
Environment variables are tried first, in order, then the files; the first one
found supplies the default. A value that cannot be parsed raises
`cliflow.flagset.FlagError` when the flag is applied.

Each flag renders its help line with `str(flag)`; a back-quoted word in the
usage becomes the placeholder:

```python
print(str(IntFlag(name="hats", value=9)))
# --hats value	(default: 9)
```

`cliflow.flags.stringify_flag` takes optional name-prefixer, environment-hint
and file-hint functions to change how the line is built.

## The flag set

`cliflow.flagset.FlagSet` defines flags (`add_bool`, `add_int`, `add_uint`,
`add_float`, `add_string`, `add_duration`, or `var` for any value object),
parses argument lists with `parse`, and reports what was set through `lookup`,
`visit`, `visit_all`, `n_flag` and `args`. Parsing stops at the first
positional argument or at `--`. Errors raise `FlagError`; asking for an
undefined `-h`/`--help` sets its `help_requested` attribute.

The module also has the text parsers it uses: `parse_bool`, `parse_int`
and `parse_uint` (with `0x`, `0o`, `0b` and leading-zero prefixes),
`parse_float`, `parse_duration` and `format_duration`.

## Short option handling

`cliflow.parsing.parse_iter(new_flag_set, use_short_option_handling, args)`
retries parsing after splitting combined short options, so `-so` is read as
`-s -o` when both one-letter flags exist.

## Reading values

`cliflow.context.Context(app, flag_set, parent)` wraps a parsed flag set and
gives typed access:

```python
from cliflow.context import Context

ctx = Context(None, flag_set)
ctx.bool("debug")
ctx.int("count")
ctx.duration("timeout")
ctx.string_slice("include")
ctx.is_set("count")
ctx.args().first()
```

`is_set` also counts a flag as set when one of its environment variables
exists or one of its files is present, looking at the flags declared on
`ctx.command` (or on `ctx.app` when the command has no name). The `global_*`
methods look in the enclosing contexts, so a nested context can read flags of
its parents. `normalize_flags` copies a value given under one spelling of a
flag to its other spellings, and `check_required_flags` raises
`RequiredFlagsError` naming every required flag that was not supplied.

## Errors and exit codes

`cliflow.errors.ExitError(message, exit_code)` carries an exit code and
`MultiError(*errors)` groups several errors.
`handle_exit_coder(err, exiter=None, writer=None)` prints the error to
`writer` (standard error by default) and calls `exiter` (`sys.exit` by
default) with its code; for a `MultiError` it prints each member and exits
with the last exit code among them, or 1.

## Templates, documentation and completion

`cliflow.templates` holds the application, command and subcommand help
templates, the Markdown template and the fish completion template.
`render(template, data, extra)` fills a template from the attributes or keys
of `data`, and `align_columns(text)` lines up tab-separated cells the way help
output is laid out.

`cliflow.docs.to_markdown(app)` and `cliflow.fish.to_fish_completion(app)`
take any object describing an application. It needs `name`, `usage`,
`usage_text`, `description`, `author`, `flags` and `commands` (and may have
`hide_help` and `hide_version`); each command needs a `names()` method and
`usage`, `flags`, `subcommands`, `hidden` and `hide_help`.

## What the package does not do

There is no application or command runner: nothing here dispatches an argument
list to commands, runs actions, or prints help and version output by itself.
The templates and `render` are provided for building that output, and the
documentation and completion generators work from whatever object describes
the application.