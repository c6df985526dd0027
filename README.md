# minishell

A small interactive shell for POSIX systems. It reads command lines with a
coloured prompt showing the last directory of the working path, and runs
them.

## Features

- Single and double quotes; `$NAME` and `$?` expansion outside single quotes.
- Redirections: `<`, `>`, `>>` and here-documents with `<<`.
- Pipelines joined with `|`; each stage runs in its own child process.
- Builtins: `cd`, `echo` (with `-n`), `pwd`, `env`, `export` (including
  `NAME+=value`), `unset` and `exit`.
- Other commands are looked up on `PATH` and started as child processes.
- Ctrl-C abandons the line being typed; the exit status of the last command
  is available as `$?` and colours the prompt green (0) or red (anything
  else).
- Syntax errors such as a dangling `|` or `>` are reported and set `$?` to 2;
  a lone unset `$NAME` after a redirection is reported as an ambiguous
  redirect.

## Installation

```
pip install .
```

## Usage

Start the shell:

```
minishell
```

Then type commands:

```
echo "hello $USER" > greeting.txt
cat < greeting.txt | wc -c
export GREETING=hi
export GREETING+=" there"
echo $GREETING
exit 3
```

End the session with `exit` or Ctrl-D. The shell starts with the variables of
the process environment.

## Using it from Python

The pieces of the shell can be used on their own:

```python
from minishell.environment import Environment, expand
from minishell.parser import split_line
from minishell.pipeline import build_pipeline

env = Environment(["USER=alice"])      # entries are "NAME=value" strings
print(expand("hello $USER", env))      # hello alice

commands = split_line("echo hi | wc -c", env)
pipeline = build_pipeline(commands)
print(len(pipeline))                   # 2 stages
```

- `minishell.lexer.tokenize(line, env)` splits a line into `Token`s and raises
  `LexError` for an unterminated quote or an ambiguous redirect.
- `minishell.parser.parse(tokens, env)` groups tokens into `Command`s and
  raises `ParseError` on a syntax error.
- `minishell.executor.run_line(line, env, last_status)` runs one command line
  and returns its exit status, or -1 when the line could not be run; it raises
  `ExitRequest` when the line is an `exit` that ends the shell.
- `minishell.shell.process_input(env, read_line)` runs the read-run loop with
  any function that takes the prompt and returns a line, or None to stop.

## What it does not do

- `&`, `&&`, `||` and `;` are not supported: scanning of a line stops quietly
  at `&` or `;`.
- There is no globbing, no subshells, no job control and no backslash
  escaping.
- It only runs interactively from its input; command-line arguments and
  script files are ignored.

## Running the tests

```
pip install .[test]
pytest
```