# minishell

A small interactive shell for POSIX systems. It reads command lines at the
`Minishell:` prompt and runs them. It supports:

- pipelines with `|`
- input and output redirection: `<`, `>` and `>>`
- heredocs with `<< MARKER`. Lines are read up to the marker, `$NAME` and
  `$?` in them are expanded, and the result is written to a `.temp_heredoc`
  file in the working directory. The file is removed after the line has run.
- single and double quotes, and backslash escapes
- `$NAME` and `$?` expansion, and `~` at the start of a word for the home
  directory
- `*` wildcards, matched against the entries of the directory named by the
  `PWD` variable. Hidden files are never matched, and a pattern with no
  matches is left as it is.
- the built-in commands `echo` (with `-n`), `cd`, `pwd`, `export`, `unset`,
  `env` and `exit`

Other commands are found through `PATH`, or taken as a file path, and run as
child processes. A name that cannot be found prints `NAME: command not found`
and gives status 127.

## Installation

```
pip install .
```

## Usage

Start the shell:

```
minishell
```

The shell takes no arguments. If you pass any, it prints a notice and then
ignores them. It needs `HOME` to be set in its environment; without it the
shell prints `Failure initializing the shell` and exits with status 3.

Press Ctrl-D at the prompt to leave the shell, or type `exit`, optionally
followed by a status code. Ctrl-C at the prompt starts a fresh line.

Example session:

```
Minishell: export GREETING=hello
Minishell: echo $GREETING world | cat > out.txt
Minishell: cat < out.txt
hello world
Minishell: ls *.txt
out.txt
Minishell: exit 0
```

A lone built-in runs in the shell itself, so `cd`, `export`, `unset` and
`exit` change the session. Inside a pipeline a built-in runs on a copy of the
environment, and `exit` there does not end the shell.

The shell reports these input problems and does not run the line:

- mismatched quotes
- a line that starts with a separator
- `||`
- a separator with nothing after it, or two separators in a row (other than
  `<` followed by `>`)

An input file given with `<` that does not exist is reported, and the command
it belongs to is skipped.

## What it does not do

- `;` is recognised as a separator but does not start a new command: words
  after it are not run.
- There is no `&&`, no `||` operator, no background jobs and no job control.
- There are no subshells, no command substitution and no `?` or `[...]`
  wildcards.
- `cd -` is not supported, and `cd` only updates `PWD` and `OLDPWD` when
  those variables already exist.

## Using it from Python

`minishell.shell.Shell` runs lines one at a time. It takes a mapping of
variables or an iterable of `NAME=value` strings, and raises `ValueError`
when the environment is empty or has no `HOME`:

```python
from minishell.shell import Shell

shell = Shell({"HOME": "/tmp", "PATH": "/usr/bin:/bin", "PWD": "/tmp"})
status = shell.run_line("echo hi")
```

`run_line` returns the last exit status. The `exit` built-in raises
`minishell.builtins.ShellExit`, whose `code` holds the status. `Shell.loop`
reads lines with a given function (by default `input`) until end of input or
`exit`, and returns the final status.

The lower-level pieces are also importable:

| Module | Contents |
| --- | --- |
| `minishell.quoting` | `quotes_matched`, `space_separators`, `quote_state` |
| `minishell.environment` | `Environment`, `split_path` |
| `minishell.tokenizer` | `tokenize`, `Token`, `first_word` |
| `minishell.syntax` | `early_syntax_check`, `check_tokens_syntax`, `has_wildcards` |
| `minishell.wildcard` | `is_match`, `fetch_dir_contents`, `expand_wildcards` |
| `minishell.heredoc` | `heredoc`, `expand_heredoc_line`, `clear_tempfile` |
| `minishell.commands` | `build_commands`, `Command`, `resolve_path` |
| `minishell.builtins` | `run_builtin`, `ShellExit` and the `program_*` built-ins |
| `minishell.executor` | `execute` |

## Running the tests

```
pip install .[test]
pytest
```