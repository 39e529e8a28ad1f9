# esh

Building blocks of an extensible, functional Unix shell, written in Python
with no dependencies beyond the standard library.

## Modules

- `esh.terms` – parse-tree nodes (`Tree`, `NodeKind`), values (`Term`, `Closure`)
  and lexical `Binding` chains (`Binding.lookup`, iteration over the chain).
  `reverse_bindings` reverses a chain, `extract_bindings` turns a parsed
  `%closure(...)` form into a `Closure`, `nth` picks a 1-based element and
  `sort_terms` sorts by byte order.
- `esh.errors` – `EsError`, the exception carrying a shell exception list, whose
  `kind()` is its first word (such as `"error"` or `"exit"`), and `fail(origin, message)`,
  which raises `EsError(["error", origin, message])`.
- `esh.hashdict` – `HashDict`, an open-addressing string dictionary with linear
  probing, keyed by the shell's own hash `strhash`. Storing `None` removes a name;
  `get2` looks up the catenation of two names.
- `esh.convert` – printing in re-readable form: `format_tree`, `format_closure`,
  `format_term`, `format_list`; conservative quoting with `quote_string`;
  environment-safe names with `encode_name` / `decode_name`; and `env_join`, which
  merges a list into one environment string.
- `esh.access` – file tests in the manner of the `access` builtin: `access(args)`
  takes `-n name`, `-1`, `-e`, `-r`/`-w`/`-x` and `-f`/`-d`/`-c`/`-b`/`-l`/`-s`/`-p`;
  also `test_file`, `check_executable`, `path_join`, `FileType` and `Permission`.
- `esh.fdtable` – `move_fd` and `FdTable`, which records deferred descriptor moves
  and closes in the parent, applies them with `close_for_child`, keeps reserved
  descriptors (`FdRef`) out of the user's way and finds free numbers with `new_fd`.
- `esh.glob` – wildcard and tilde expansion driven by quote flags (`QUOTED`,
  `UNQUOTED`, or a per-character string of `q`/`r`): `has_wild`, `has_tilde`,
  `is_hidden`, `dir_match`, `glob_one`, `expand_home` and `glob_list`.
- `esh.glom` – cartesian concatenation of word lists (`concat`, `qconcat`),
  quote-flag merging (`qcat`) and variable subscripting with `lo ... hi` ranges
  (`subscript`).
- `esh.input` – character sources with up to two characters of pushback:
  `StringInput` and `FdInput` (both context managers), a `HistoryBuffer` that
  collects what was read, and `locate` for error locations.
- `esh.config` – configuration defaults, `initial_path()` and wait-status helpers
  (`wifexited`, `wexitstatus`, `wifsignaled`, `wtermsig`, `wcoredump`).

## Installation

```
pip install .
```

## Example

```python
from esh.convert import decode_name, encode_name, quote_string
from esh.glom import concat, subscript
from esh.hashdict import HashDict
from esh.input import StringInput

quote_string("it's")                                   # "'it''s'"
[t.text for t in concat(["a", "b"], ["1", "2"])]      # ['a1', 'a2', 'b1', 'b2']
subscript(["x", "y", "z"], ["2", "..."])               # ['y', 'z']
encode_name("a-b")                                     # 'a__2db'
decode_name("a__2db")                                  # 'a-b'

d = HashDict()
d.put("fn-x", 1)
d.get2("fn-", "x")                                     # 1

with StringInput("ab") as src:
    src.get()                                          # 'a'
```

## What this package does not do

It has no parser, no evaluator and no command to start a shell: there is no
way to run shell scripts or an interactive session with it. Apart from
`access`, no builtins are provided, and there is no line editing or history
file; `HistoryBuffer` only gathers the characters of the current command.

## Running the tests

```
pip install .[test]
pytest
```